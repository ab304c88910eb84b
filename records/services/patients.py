from django.db import transaction
from rest_framework.exceptions import NotFound

from records.models import Patient
from records.services.audit import log_action
from records.services.personal_data import (
    create_contact_data,
    format_contact_data,
    format_personal_data,
    update_contact_data,
    update_personal_data,
    upsert_personal_data,
)

PATIENT_FIELDS = {
    'medicare': 'medicare',
    'medicareNumber': 'medicare_number',
    'medicarePlan': 'medicare_plan',
    'mugshot': 'mugshot',
    'gender': 'gender',
}


def get_patient_or_404(patient_id, include_deleted=False) -> Patient:
    qs = Patient.objects.select_related('personal_data', 'contact_data')
    if not include_deleted:
        qs = qs.filter(deleted=False)
    patient = qs.filter(id=patient_id).first()
    if not patient:
        raise NotFound(f'No record found for id \'{patient_id}\'')
    return patient


@transaction.atomic
def create_patient(current_user, data: dict) -> Patient:
    patient = Patient(**{attr: data[key] for key, attr in PATIENT_FIELDS.items() if key in data})
    patient.personal_data = upsert_personal_data(data.get('personalData'))
    patient.contact_data = create_contact_data(data.get('contactData'))
    patient.save()
    log_action(user=current_user, action='patient_create', object_type='patient', object_id=patient.id)
    return patient


@transaction.atomic
def update_patient(current_user, patient: Patient, data: dict) -> Patient:
    for key, attr in PATIENT_FIELDS.items():
        if key in data:
            setattr(patient, attr, data[key])
    if data.get('personalData'):
        if patient.personal_data_id:
            update_personal_data(patient.personal_data, data['personalData'])
        else:
            patient.personal_data = upsert_personal_data(data['personalData'])
    if data.get('contactData'):
        if patient.contact_data_id:
            update_contact_data(patient.contact_data, data['contactData'])
        else:
            patient.contact_data = create_contact_data(data['contactData'])
    patient.save()
    log_action(user=current_user, action='patient_update', object_type='patient', object_id=patient.id,
               detail={'fields': sorted(data.keys())})
    return patient


def soft_delete_patient(current_user, patient: Patient) -> Patient:
    patient.deleted = True
    patient.save(update_fields=['deleted', 'updated_at'])
    log_action(user=current_user, action='patient_delete', object_type='patient', object_id=patient.id)
    return patient


def format_patient(patient: Patient) -> dict:
    return {
        'id': patient.id,
        'medicare': patient.medicare,
        'medicareNumber': patient.medicare_number,
        'medicarePlan': patient.medicare_plan,
        'mugshot': patient.mugshot,
        'gender': patient.gender,
        'deleted': patient.deleted,
        'personalData': format_personal_data(patient.personal_data),
        'contactData': format_contact_data(patient.contact_data),
        'createdAt': patient.created_at.isoformat() if patient.created_at else None,
        'updatedAt': patient.updated_at.isoformat() if patient.updated_at else None,
    }
