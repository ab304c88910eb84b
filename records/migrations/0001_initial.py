import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import records.fields
import records.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Role',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('permissions', models.JSONField(blank=True, default=list)),
            ],
        ),
        migrations.CreateModel(
            name='PersonalData',
            fields=[
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('first_name', models.CharField(blank=True, max_length=255, null=True)),
                ('last_name', models.CharField(blank=True, max_length=255, null=True)),
                ('nationality', models.CharField(blank=True, max_length=2, null=True)),
                ('document_type', models.CharField(blank=True, max_length=32, null=True)),
                ('document_value', records.fields.EncryptedTextField(blank=True, db_index=True, null=True)),
                ('marital_status', models.CharField(blank=True, choices=[('single', 'Single'), ('married', 'Married'), ('divorced', 'Divorced'), ('widowed', 'Widowed')], max_length=16, null=True)),
                ('birth_date', models.DateTimeField(blank=True, null=True)),
                ('search_first_name', models.CharField(blank=True, db_index=True, default='', max_length=255)),
                ('search_last_name', models.CharField(blank=True, db_index=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'personal data',
            },
        ),
        migrations.CreateModel(
            name='ContactData',
            fields=[
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('street_address', models.CharField(blank=True, max_length=255, null=True)),
                ('city', models.CharField(blank=True, max_length=128, null=True)),
                ('province', models.CharField(blank=True, help_text='ISO 3166-2 code, e.g. AR-Z', max_length=8, null=True)),
                ('country', models.CharField(blank=True, max_length=2, null=True)),
                ('phone_number', records.fields.EncryptedJSONField(blank=True, default=list, null=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'contact data',
            },
        ),
        migrations.CreateModel(
            name='User',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('two_factor_enabled', models.BooleanField(default=False)),
                ('two_factor_secret', models.CharField(blank=True, max_length=64, null=True)),
                ('two_factor_temp_secret', models.CharField(blank=True, max_length=64, null=True)),
                ('contact_data', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='users', to='records.contactdata')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('personal_data', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='users', to='records.personaldata')),
                ('role', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='users', to='records.role')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'abstract': False,
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='UserRole',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='user_roles', to='records.role')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='user_roles', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.AddConstraint(
            model_name='userrole',
            constraint=models.UniqueConstraint(fields=('user', 'role'), name='uniq_user_role'),
        ),
        migrations.AddField(
            model_name='user',
            name='additional_roles',
            field=models.ManyToManyField(blank=True, related_name='extra_users', through='records.UserRole', to='records.role'),
        ),
        migrations.CreateModel(
            name='MdSettings',
            fields=[
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('medical_specialty', models.CharField(blank=True, max_length=255, null=True)),
                ('national_license_number', models.CharField(blank=True, max_length=64, null=True)),
                ('state_license', models.CharField(blank=True, max_length=64, null=True)),
                ('state_license_number', models.CharField(blank=True, max_length=64, null=True)),
                ('is_medic_of_the_year', models.BooleanField(default=False)),
                ('encounter_duration', models.PositiveIntegerField(default=15, help_text='minutes')),
                ('sunday_start', models.TimeField(blank=True, null=True)),
                ('sunday_end', models.TimeField(blank=True, null=True)),
                ('monday_start', models.TimeField(blank=True, null=True)),
                ('monday_end', models.TimeField(blank=True, null=True)),
                ('tuesday_start', models.TimeField(blank=True, null=True)),
                ('tuesday_end', models.TimeField(blank=True, null=True)),
                ('wednesday_start', models.TimeField(blank=True, null=True)),
                ('wednesday_end', models.TimeField(blank=True, null=True)),
                ('thursday_start', models.TimeField(blank=True, null=True)),
                ('thursday_end', models.TimeField(blank=True, null=True)),
                ('friday_start', models.TimeField(blank=True, null=True)),
                ('friday_end', models.TimeField(blank=True, null=True)),
                ('saturday_start', models.TimeField(blank=True, null=True)),
                ('saturday_end', models.TimeField(blank=True, null=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='md_settings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'md settings',
            },
        ),
        migrations.CreateModel(
            name='Patient',
            fields=[
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('mugshot', records.fields.EncryptedTextField(blank=True, null=True)),
                ('medicare', models.CharField(blank=True, max_length=128, null=True)),
                ('medicare_number', records.fields.EncryptedTextField(blank=True, null=True)),
                ('medicare_plan', models.CharField(blank=True, max_length=128, null=True)),
                ('gender', records.fields.EncryptedTextField(blank=True, null=True)),
                ('deleted', models.BooleanField(db_index=True, default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('contact_data', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='patients', to='records.contactdata')),
                ('personal_data', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='patients', to='records.personaldata')),
            ],
        ),
        migrations.CreateModel(
            name='Encounter',
            fields=[
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('date', models.DateTimeField()),
                ('data', records.fields.EncryptedJSONField(default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('medic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='encounters', to=settings.AUTH_USER_MODEL)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='encounters', to='records.patient')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['medic', 'date'], name='records_enc_medic_i_3b1f0c_idx'),
                    models.Index(fields=['patient', 'date'], name='records_enc_patient_8d2e4a_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('start_date', models.DateTimeField()),
                ('extra', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('medic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to=settings.AUTH_USER_MODEL)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to='records.patient')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['medic', 'start_date'], name='records_app_medic_i_5c9a7e_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Study',
            fields=[
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('date', models.DateTimeField()),
                ('protocol', models.PositiveIntegerField(unique=True)),
                ('studies', models.JSONField(blank=True, default=list)),
                ('no_order', models.BooleanField(default=False)),
                ('referring_doctor', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('medic', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='studies', to=settings.AUTH_USER_MODEL)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='studies', to='records.patient')),
            ],
            options={
                'verbose_name_plural': 'studies',
            },
        ),
        migrations.CreateModel(
            name='StudyResult',
            fields=[
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('type', models.CharField(max_length=64)),
                ('data', records.fields.EncryptedJSONField(default=dict)),
                ('study', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='records.study')),
            ],
            options={
                'constraints': [
                    models.UniqueConstraint(fields=('study', 'type'), name='uniq_study_result_type'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TimeOffEvent',
            fields=[
                ('id', models.CharField(default=records.models.new_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('start_date', models.DateTimeField()),
                ('end_date', models.DateTimeField()),
                ('type', models.CharField(choices=[('vacation', 'Vacation'), ('cancelDay', 'Cancelled day'), ('other', 'Other')], default='other', max_length=16)),
                ('notes', models.TextField(blank=True, null=True)),
                ('medic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='time_off_events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['medic', 'start_date'], name='records_tim_medic_i_7e2d1b_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AuditEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(max_length=64)),
                ('object_type', models.CharField(blank=True, max_length=64, null=True)),
                ('object_id', models.CharField(blank=True, max_length=64, null=True)),
                ('detail', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='records_aud_action_1a4f9d_idx'),
                    models.Index(fields=['object_type', 'object_id', 'created_at'], name='records_aud_object__6b0c3e_idx'),
                ],
            },
        ),
    ]
