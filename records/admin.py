"""
Django admin registrations for the records models.

Encrypted columns are decrypted by their field classes, so the admin
shows plain values; document numbers are still searched by exact match
only.
"""

from django.contrib import admin

from .models import (
    Appointment,
    AuditEvent,
    ContactData,
    Encounter,
    MdSettings,
    Patient,
    PersonalData,
    Role,
    Study,
    StudyResult,
    TimeOffEvent,
    User,
    UserRole,
)


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ('id',)
    search_fields = ('id',)


class UserRoleInline(admin.TabularInline):
    model = UserRole
    extra = 0


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'is_active', 'two_factor_enabled', 'is_staff')
    list_filter = ('role', 'is_active', 'two_factor_enabled')
    search_fields = ('username', 'personal_data__search_first_name', 'personal_data__search_last_name')
    exclude = ('password', 'two_factor_secret')
    inlines = [UserRoleInline]


@admin.register(PersonalData)
class PersonalDataAdmin(admin.ModelAdmin):
    list_display = ('id', 'first_name', 'last_name', 'document_type', 'nationality')
    search_fields = ('search_first_name', 'search_last_name')
    exclude = ('search_first_name', 'search_last_name')


@admin.register(ContactData)
class ContactDataAdmin(admin.ModelAdmin):
    list_display = ('id', 'city', 'province', 'country', 'email')
    search_fields = ('email', 'city')


@admin.register(MdSettings)
class MdSettingsAdmin(admin.ModelAdmin):
    list_display = ('user', 'medical_specialty', 'encounter_duration', 'is_medic_of_the_year')
    search_fields = ('user__username', 'medical_specialty')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'personal_data', 'medicare', 'deleted', 'created_at')
    list_filter = ('deleted', 'medicare')
    search_fields = ('id', 'personal_data__search_first_name', 'personal_data__search_last_name')


@admin.register(Encounter)
class EncounterAdmin(admin.ModelAdmin):
    list_display = ('id', 'medic', 'patient', 'date')
    list_filter = ('medic',)
    date_hierarchy = 'date'


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'medic', 'patient', 'start_date', 'extra')
    list_filter = ('medic', 'extra')
    date_hierarchy = 'start_date'


class StudyResultInline(admin.TabularInline):
    model = StudyResult
    extra = 0


@admin.register(Study)
class StudyAdmin(admin.ModelAdmin):
    list_display = ('protocol', 'date', 'patient', 'medic', 'referring_doctor', 'no_order')
    search_fields = ('protocol', 'referring_doctor')
    inlines = [StudyResultInline]


@admin.register(TimeOffEvent)
class TimeOffEventAdmin(admin.ModelAdmin):
    list_display = ('medic', 'type', 'start_date', 'end_date')
    list_filter = ('type',)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'user', 'action', 'object_type', 'object_id')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id', 'user__username')
    readonly_fields = ('created_at',)
