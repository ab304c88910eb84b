"""Personal and contact data blocks shared by user and patient seeds."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .normalize import (
    clean_person_name,
    get_country,
    normalize_city,
    normalize_marital_status,
    normalize_phone_number,
    province_to_iso,
    to_iso,
)


def birth_date(personal: dict) -> Optional[str]:
    try:
        moment = datetime(
            int(personal.get('dob_year')),
            int(personal.get('dob_month')),
            int(personal.get('dob_day')),
            tzinfo=timezone.utc,
        )
    except (TypeError, ValueError):
        return None
    return to_iso(moment)


def personal_data_seed(personal: Optional[dict], fallback_document: str, *, name_filter=None) -> Optional[dict]:
    if not personal:
        return None
    first_name, last_name = personal.get('first_name'), personal.get('last_name')
    if name_filter:
        first_name = name_filter(first_name) if first_name else first_name
        last_name = name_filter(last_name) if last_name else last_name
    nationality = personal.get('nationality')
    return {
        'firstName': clean_person_name(first_name),
        'lastName': clean_person_name(last_name),
        'nationality': (get_country(nationality) or 'AR') if nationality else 'AR',
        'documentType': personal.get('document_type'),
        'documentValue': personal.get('document_value') or fallback_document,
        'maritalStatus': normalize_marital_status(personal.get('marital_status')),
        'birthDate': birth_date(personal),
    }


def contact_data_seed(contact: Optional[dict]) -> Optional[dict]:
    if not contact:
        return None
    city = normalize_city(contact.get('city'))
    chilean = city == 'aysen'
    return {
        'streetAddress': contact.get('street_address'),
        'city': city,
        'province': None if chilean else province_to_iso(contact.get('province')),
        'country': 'CL' if chilean else 'AR',
        'phoneNumber': normalize_phone_number(contact.get('phone_number')),
        'email': contact.get('email'),
    }
