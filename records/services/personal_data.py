from __future__ import annotations

from typing import Optional

from django.utils.dateparse import parse_datetime

from records.models import ContactData, PersonalData
from records.services.text import clean_name

PERSONAL_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'nationality': 'nationality',
    'documentType': 'document_type',
    'documentValue': 'document_value',
    'maritalStatus': 'marital_status',
    'birthDate': 'birth_date',
}

CONTACT_FIELDS = {
    'streetAddress': 'street_address',
    'city': 'city',
    'province': 'province',
    'country': 'country',
    'phoneNumber': 'phone_number',
    'email': 'email',
}


def _personal_attrs(data: dict) -> dict:
    attrs = {PERSONAL_FIELDS[k]: v for k, v in data.items() if k in PERSONAL_FIELDS}
    for name in ('first_name', 'last_name'):
        if name in attrs:
            attrs[name] = clean_name(attrs[name])
    if isinstance(attrs.get('birth_date'), str):
        attrs['birth_date'] = parse_datetime(attrs['birth_date'])
    return attrs


def upsert_personal_data(data: Optional[dict]) -> Optional[PersonalData]:
    """Reuse the record holding the same document number, else create one."""
    if not data:
        return None
    attrs = _personal_attrs(data)
    document_value = attrs.get('document_value')
    if document_value:
        existing = PersonalData.objects.filter(document_value=document_value).order_by('created_at').first()
        if existing:
            return existing
    return PersonalData.objects.create(**attrs)


def update_personal_data(pd: PersonalData, data: dict) -> PersonalData:
    for attr, value in _personal_attrs(data).items():
        setattr(pd, attr, value)
    pd.save()
    return pd


def create_contact_data(data: Optional[dict]) -> Optional[ContactData]:
    if not data:
        return None
    attrs = {CONTACT_FIELDS[k]: v for k, v in data.items() if k in CONTACT_FIELDS}
    if attrs.get('phone_number') is None:
        attrs['phone_number'] = []
    return ContactData.objects.create(**attrs)


def update_contact_data(cd: ContactData, data: dict) -> ContactData:
    for key, attr in CONTACT_FIELDS.items():
        if key not in data:
            continue
        value = data[key]
        if attr == 'phone_number' and value is None:
            value = []
        setattr(cd, attr, value)
    cd.save()
    return cd


def format_personal_data(pd: Optional[PersonalData]) -> Optional[dict]:
    if pd is None:
        return None
    return {
        'id': pd.id,
        'firstName': pd.first_name,
        'lastName': pd.last_name,
        'nationality': pd.nationality,
        'documentType': pd.document_type,
        'documentValue': pd.document_value,
        'maritalStatus': pd.marital_status,
        'birthDate': pd.birth_date.isoformat() if pd.birth_date else None,
    }


def format_contact_data(cd: Optional[ContactData]) -> Optional[dict]:
    if cd is None:
        return None
    return {
        'id': cd.id,
        'streetAddress': cd.street_address,
        'city': cd.city,
        'province': cd.province,
        'country': cd.country,
        'phoneNumber': cd.phone_number or [],
        'email': cd.email,
    }
