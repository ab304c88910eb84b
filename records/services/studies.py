"""
Study (lab order) services.

Protocol numbers are sequential.  A study either points at a medic user
or carries a free-text referring doctor; when the medic is set the text
is cleared and the name is derived from the medic on read.
"""
from __future__ import annotations

from django.db import transaction
from django.db.models import Max
from rest_framework.exceptions import NotFound

from records.models import Study, StudyResult, User
from records.services.patients import format_patient


def next_protocol() -> int:
    return (Study.objects.aggregate(m=Max('protocol'))['m'] or 0) + 1


def extract_results(payload) -> list[dict]:
    if not isinstance(payload, list):
        return []
    return [
        {'type': item['type'], 'data': item.get('data') or {}}
        for item in payload
        if isinstance(item, dict) and isinstance(item.get('type'), str) and item['type'].strip()
    ]


def upsert_results(study: Study, results: list[dict]) -> None:
    for entry in results:
        StudyResult.objects.update_or_create(study=study, type=entry['type'], defaults={'data': entry['data']})


STUDY_FIELDS = {
    'date': 'date',
    'protocol': 'protocol',
    'studies': 'studies',
    'noOrder': 'no_order',
    'medicId': 'medic_id',
    'referringDoctor': 'referring_doctor',
    'patientId': 'patient_id',
}


def _apply(study: Study, data: dict) -> None:
    for key, attr in STUDY_FIELDS.items():
        if key in data:
            setattr(study, attr, data[key])
    if data.get('medicId'):
        study.referring_doctor = None


@transaction.atomic
def create_study(data: dict) -> Study:
    study = Study()
    _apply(study, data)
    if not study.protocol:
        study.protocol = next_protocol()
    study.save()
    upsert_results(study, extract_results(data.get('results')))
    return study


@transaction.atomic
def update_study(study: Study, data: dict) -> Study:
    _apply(study, data)
    study.save()
    upsert_results(study, extract_results(data.get('results')))
    return study


def get_study_or_404(study_id) -> Study:
    study = Study.objects.select_related('patient', 'patient__personal_data', 'patient__contact_data').filter(id=study_id).first()
    if not study:
        raise NotFound(f'No record found for id \'{study_id}\'')
    return study


def medic_names(medic_ids) -> dict:
    users = User.objects.select_related('personal_data').filter(id__in=set(m for m in medic_ids if m))
    return {u.id: (u.personal_data.full_name if u.personal_data_id else '') or None for u in users}


def format_result(result: StudyResult) -> dict:
    return {'id': result.id, 'studyId': result.study_id, 'type': result.type, 'data': result.data}


def format_study(study: Study, names: dict = None) -> dict:
    if names is None:
        names = medic_names([study.medic_id])
    referring = study.referring_doctor
    if study.medic_id and not referring:
        referring = names.get(study.medic_id)
    return {
        'id': study.id,
        'date': study.date.isoformat(),
        'protocol': study.protocol,
        'studies': study.studies,
        'noOrder': study.no_order,
        'medicId': study.medic_id,
        'referringDoctor': referring,
        'patientId': study.patient_id,
        'patient': format_patient(study.patient),
        'results': [format_result(r) for r in study.results.all()],
    }


def referring_doctors() -> list[dict]:
    """Free-text referring doctors plus every medic, ordered by name."""
    rows = {
        (name, None)
        for name in Study.objects.exclude(referring_doctor__isnull=True)
        .exclude(referring_doctor='').values_list('referring_doctor', flat=True).distinct()
    }
    medics = User.objects.select_related('personal_data').filter(role_id='medic')
    for medic in medics:
        name = medic.personal_data.full_name if medic.personal_data_id else ''
        rows.add((name.strip(), medic.id))
    return [{'name': name, 'medicId': medic_id} for name, medic_id in sorted(rows, key=lambda r: (r[0], r[1] or ''))]
