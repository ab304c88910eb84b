from __future__ import annotations

from dataclasses import dataclass, field

from .dumps import oid
from .people import contact_data_seed, personal_data_seed
from .stats import ProcessingStats


@dataclass
class PatientsResult:
    patients: list
    kept_ids: set
    stats: ProcessingStats = field(default_factory=ProcessingStats)


def patient_seed(patient: dict) -> dict:
    patient_id = oid(patient['_id'])
    return {
        'id': patient_id,
        'medicare': patient.get('medicare'),
        'medicareNumber': patient.get('medicare_number'),
        'medicarePlan': patient.get('medicare_plan'),
        'deleted': bool(patient.get('deleted')),
        'personalData': personal_data_seed(patient.get('personal_data'), patient_id),
        'contactData': contact_data_seed(patient.get('contact_data')),
    }


def document_index(patients: list) -> dict:
    index = {}
    for patient in patients:
        document = (patient.get('personal_data') or {}).get('document_value')
        if document:
            index[document] = oid(patient['_id'])
    return index


def process_patients(patients: list, encounters: list, studies: list) -> PatientsResult:
    """Keep only patients that have clinical history."""
    stats = ProcessingStats(total=len(patients))
    referenced = {e.get('patient_id') for e in encounters}
    by_document = document_index(patients)
    for study in studies:
        embedded = study.get('patient') or {}
        if embedded.get('id'):
            referenced.add(embedded['id'])
        if embedded.get('dni') in by_document:
            referenced.add(by_document[embedded['dni']])

    seeds, kept_ids = [], set()
    for patient in patients:
        patient_id = oid(patient['_id'])
        if patient_id not in referenced:
            stats.discard('no_encounters_or_studies')
            continue
        seeds.append(patient_seed(patient))
        kept_ids.add(patient_id)

    stats.kept = len(seeds)
    return PatientsResult(patients=seeds, kept_ids=kept_ids, stats=stats)
