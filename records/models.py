"""
Database models for the clinic records backend.

Every primary key is a string: users imported from the legacy document
store keep their 24-character hex ids, everything created afterwards
gets a uuid4.  Identifying and clinical payloads (document numbers,
phone numbers, encounter forms, lab results) are stored encrypted via
the fields in :mod:`records.fields`.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models

from .fields import EncryptedJSONField, EncryptedTextField
from .services.text import search_text


def new_id() -> str:
    return str(uuid.uuid4())


class Role(models.Model):
    """A named bag of permission strings (``service:method[:all]``)."""
    id = models.CharField(max_length=64, primary_key=True)
    permissions = models.JSONField(default=list, blank=True)

    def save(self, *args, **kwargs):
        from .permissions import invalidate_role_cache

        super().save(*args, **kwargs)
        invalidate_role_cache(self.id)

    def __str__(self) -> str:
        return self.id


class PersonalData(models.Model):
    """Identity data shared by patients and users.

    A person that is both a medic and a patient owns a single record;
    records are reused by document number when owners are created.
    """
    MARITAL_CHOICES = [
        ('single', 'Single'),
        ('married', 'Married'),
        ('divorced', 'Divorced'),
        ('widowed', 'Widowed'),
    ]
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    first_name = models.CharField(max_length=255, blank=True, null=True)
    last_name = models.CharField(max_length=255, blank=True, null=True)
    nationality = models.CharField(max_length=2, blank=True, null=True)
    document_type = models.CharField(max_length=32, blank=True, null=True)
    document_value = EncryptedTextField(blank=True, null=True, db_index=True)
    marital_status = models.CharField(max_length=16, choices=MARITAL_CHOICES, blank=True, null=True)
    birth_date = models.DateTimeField(blank=True, null=True)
    # lowercased, unaccented copies used by the ranked name search
    search_first_name = models.CharField(max_length=255, blank=True, default='', db_index=True)
    search_last_name = models.CharField(max_length=255, blank=True, default='', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'personal data'

    def save(self, *args, **kwargs):
        self.search_first_name = search_text(self.first_name)
        self.search_last_name = search_text(self.last_name)
        super().save(*args, **kwargs)

    @property
    def full_name(self) -> str:
        return ' '.join(p for p in (self.first_name, self.last_name) if p).strip()

    def __str__(self) -> str:
        return self.full_name or self.id


class ContactData(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    street_address = models.CharField(max_length=255, blank=True, null=True)
    city = models.CharField(max_length=128, blank=True, null=True)
    province = models.CharField(max_length=8, blank=True, null=True, help_text="ISO 3166-2 code, e.g. AR-Z")
    country = models.CharField(max_length=2, blank=True, null=True)
    # list of "cel:<number>" / "tel:<number>"
    phone_number = EncryptedJSONField(blank=True, null=True, default=list)
    email = models.EmailField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'contact data'


class User(AbstractUser):
    """Application user (admin, medic, receptionist...).

    ``role`` is the primary role; ``additional_roles`` extend it, so a
    medic may also own the laboratory.
    """
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name='users', null=True, blank=True)
    additional_roles = models.ManyToManyField(Role, through='UserRole', related_name='extra_users', blank=True)
    personal_data = models.ForeignKey(
        PersonalData, null=True, blank=True, on_delete=models.SET_NULL, related_name='users'
    )
    contact_data = models.ForeignKey(
        ContactData, null=True, blank=True, on_delete=models.SET_NULL, related_name='users'
    )
    two_factor_enabled = models.BooleanField(default=False)
    two_factor_secret = models.CharField(max_length=64, blank=True, null=True)
    two_factor_temp_secret = models.CharField(max_length=64, blank=True, null=True)

    @property
    def display_name(self) -> str:
        if self.personal_data_id and self.personal_data.full_name:
            return self.personal_data.full_name
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role_id})"


class UserRole(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='user_roles')
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name='user_roles')

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user', 'role'], name='uniq_user_role'),
        ]


class MdSettings(models.Model):
    """Per-medic professional data and weekly schedule."""
    WEEKDAYS = ('sunday', 'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday')

    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='md_settings')
    medical_specialty = models.CharField(max_length=255, blank=True, null=True)
    national_license_number = models.CharField(max_length=64, blank=True, null=True)
    state_license = models.CharField(max_length=64, blank=True, null=True)
    state_license_number = models.CharField(max_length=64, blank=True, null=True)
    is_medic_of_the_year = models.BooleanField(default=False)
    encounter_duration = models.PositiveIntegerField(default=15, help_text="minutes")
    sunday_start = models.TimeField(blank=True, null=True)
    sunday_end = models.TimeField(blank=True, null=True)
    monday_start = models.TimeField(blank=True, null=True)
    monday_end = models.TimeField(blank=True, null=True)
    tuesday_start = models.TimeField(blank=True, null=True)
    tuesday_end = models.TimeField(blank=True, null=True)
    wednesday_start = models.TimeField(blank=True, null=True)
    wednesday_end = models.TimeField(blank=True, null=True)
    thursday_start = models.TimeField(blank=True, null=True)
    thursday_end = models.TimeField(blank=True, null=True)
    friday_start = models.TimeField(blank=True, null=True)
    friday_end = models.TimeField(blank=True, null=True)
    saturday_start = models.TimeField(blank=True, null=True)
    saturday_end = models.TimeField(blank=True, null=True)

    class Meta:
        verbose_name_plural = 'md settings'


class Patient(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    mugshot = EncryptedTextField(blank=True, null=True)
    medicare = models.CharField(max_length=128, blank=True, null=True)
    medicare_number = EncryptedTextField(blank=True, null=True)
    medicare_plan = models.CharField(max_length=128, blank=True, null=True)
    gender = EncryptedTextField(blank=True, null=True)
    # soft delete: hidden from lists, encounters and appointments
    deleted = models.BooleanField(default=False, db_index=True)
    personal_data = models.ForeignKey(
        PersonalData, null=True, blank=True, on_delete=models.SET_NULL, related_name='patients'
    )
    contact_data = models.ForeignKey(
        ContactData, null=True, blank=True, on_delete=models.SET_NULL, related_name='patients'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return str(self.personal_data) if self.personal_data_id else self.id


class Encounter(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    medic = models.ForeignKey(User, on_delete=models.CASCADE, related_name='encounters')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='encounters')
    date = models.DateTimeField()
    data = EncryptedJSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['medic', 'date'], name='records_enc_medic_i_3b1f0c_idx'),
            models.Index(fields=['patient', 'date'], name='records_enc_patient_8d2e4a_idx'),
        ]


class Appointment(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    medic = models.ForeignKey(User, on_delete=models.CASCADE, related_name='appointments')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    start_date = models.DateTimeField()
    # overbooked outside the regular schedule
    extra = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['medic', 'start_date'], name='records_app_medic_i_5c9a7e_idx'),
        ]


class Study(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    date = models.DateTimeField()
    protocol = models.PositiveIntegerField(unique=True)
    studies = models.JSONField(default=list, blank=True)
    no_order = models.BooleanField(default=False)
    medic = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='studies')
    referring_doctor = models.CharField(max_length=255, blank=True, null=True)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='studies')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = 'studies'


class StudyResult(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    study = models.ForeignKey(Study, on_delete=models.CASCADE, related_name='results')
    type = models.CharField(max_length=64)
    data = EncryptedJSONField(default=dict)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['study', 'type'], name='uniq_study_result_type'),
        ]


class TimeOffEvent(models.Model):
    """A medic license: vacations, a cancelled day, anything else."""
    TYPE_CHOICES = [
        ('vacation', 'Vacation'),
        ('cancelDay', 'Cancelled day'),
        ('other', 'Other'),
    ]
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    medic = models.ForeignKey(User, on_delete=models.CASCADE, related_name='time_off_events')
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default='other')
    notes = models.TextField(blank=True, null=True)

    class Meta:
        indexes = [
            models.Index(fields=['medic', 'start_date'], name='records_tim_medic_i_7e2d1b_idx'),
        ]


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='records_aud_action_1a4f9d_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='records_aud_object__6b0c3e_idx'),
        ]
