"""
``import_seeds``: load the seed files through the regular services.

Every item runs in its own savepoint; a failing item is recorded with
the reason and the import moves on.  Patients and studies get fresh ids,
so later entities are remapped through ``seed id -> real id`` maps.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from django.db import transaction
from django.utils.dateparse import parse_datetime

from records.models import (
    Appointment,
    AuditEvent,
    ContactData,
    Encounter,
    MdSettings,
    Patient,
    PersonalData,
    Study,
    StudyResult,
    TimeOffEvent,
    User,
    UserRole,
)
from records.services.patients import create_patient
from records.services.roles import ensure_roles
from records.services.studies import create_study
from records.services.users import create_user

from .writer import SEED_FILES, load_seed

logger = logging.getLogger(__name__)

SKIPPED_DIR = 'import-skipped'


@dataclass
class ImportOutcome:
    label: str
    total: int = 0
    imported: int = 0
    skipped: list = field(default_factory=list)
    id_map: dict = field(default_factory=dict)

    def skip(self, item, reason: str) -> None:
        self.skipped.append({'item': item, 'reason': reason})
        logger.info('seed_skipped entity=%s reason=%s', self.label.lower(), reason)

    def line(self) -> str:
        return f'  {self.label}: {self.imported}/{self.total} imported, {len(self.skipped)} skipped'


class SkipItem(Exception):
    pass


def _error_text(exc: Exception) -> str:
    detail = getattr(exc, 'detail', None)
    if detail is not None:
        return json.dumps(detail, default=str) if not isinstance(detail, str) else detail
    return str(exc)


def _run(outcome: ImportOutcome, items: list, create) -> ImportOutcome:
    outcome.total = len(items)
    for item in items:
        try:
            with transaction.atomic():
                real_id = create(item)
        except SkipItem as exc:
            outcome.skip(item, str(exc))
            continue
        except Exception as exc:
            outcome.skip(item, f'create failed: {_error_text(exc)}')
            continue
        outcome.imported += 1
        if real_id is not None and isinstance(item, dict) and item.get('id'):
            outcome.id_map[item['id']] = real_id
    logger.info('seed_import entity=%s imported=%s skipped=%s', outcome.label.lower(), outcome.imported,
                len(outcome.skipped))
    return outcome


def reset_database() -> None:
    for model in (AuditEvent, TimeOffEvent, StudyResult, Study, Appointment, Encounter, Patient,
                  MdSettings, UserRole, User, PersonalData, ContactData):
        model.objects.all().delete()
    logger.warning('database_reset')


def _date(value, field_name):
    parsed = parse_datetime(value) if isinstance(value, str) else None
    if parsed is None:
        raise SkipItem(f'{field_name} "{value}" is not a valid date')
    return parsed


def import_users(users: list, *, reset_passwords: bool, default_password: str) -> ImportOutcome:
    def create(seed):
        data = dict(seed)
        if reset_passwords or not data.get('password'):
            data['password'] = default_password
        return create_user(data, user_id=seed['id']).id

    return _run(ImportOutcome('Users'), users, create)


def import_patients(patients: list) -> ImportOutcome:
    def create(seed):
        document = (seed.get('personalData') or {}).get('documentValue')
        if document:
            pd = PersonalData.objects.filter(document_value=document).first()
            existing = pd and Patient.objects.filter(personal_data=pd).order_by('created_at').first()
            if existing:
                return existing.id
        patient = create_patient(None, seed)
        if seed.get('deleted'):
            patient.deleted = True
            patient.save(update_fields=['deleted'])
        return patient.id

    return _run(ImportOutcome('Patients'), patients, create)


def _check_refs(seed, user_ids, patient_map):
    if seed.get('medicId') not in user_ids:
        raise SkipItem(f'medicId "{seed.get("medicId")}" not found in imported users')
    real_patient = patient_map.get(seed.get('patientId'))
    if not real_patient:
        raise SkipItem(f'patientId "{seed.get("patientId")}" not found in imported patients')
    return real_patient


def import_encounters(encounters: list, user_ids: set, patient_map: dict) -> ImportOutcome:
    def create(seed):
        patient_id = _check_refs(seed, user_ids, patient_map)
        Encounter.objects.create(medic_id=seed['medicId'], patient_id=patient_id,
                                 date=_date(seed.get('date'), 'date'), data=seed.get('data') or {})

    return _run(ImportOutcome('Encounters'), encounters, create)


def import_appointments(appointments: list, user_ids: set, patient_map: dict) -> ImportOutcome:
    def create(seed):
        patient_id = _check_refs(seed, user_ids, patient_map)
        Appointment.objects.create(medic_id=seed['medicId'], patient_id=patient_id,
                                   start_date=_date(seed.get('startDate'), 'startDate'),
                                   extra=bool(seed.get('extra')))

    return _run(ImportOutcome('Appointments'), appointments, create)


def import_studies(studies: list, user_ids: set, patient_map: dict) -> ImportOutcome:
    def create(seed):
        patient_id = patient_map.get(seed.get('patientId'))
        if not patient_id:
            raise SkipItem(f'patientId "{seed.get("patientId")}" not found in imported patients')
        if seed.get('medicId') and seed['medicId'] not in user_ids:
            raise SkipItem(f'medicId "{seed["medicId"]}" not found in imported users')
        data = {key: value for key, value in seed.items() if key != 'id'}
        data.update(patientId=patient_id, date=_date(seed.get('date'), 'date'))
        return create_study(data).id

    return _run(ImportOutcome('Studies'), studies, create)


def import_results(results: list, study_map: dict) -> ImportOutcome:
    def create(seed):
        study_id = study_map.get(seed.get('studyId'))
        if not study_id:
            raise SkipItem(f'studyId "{seed.get("studyId")}" not found in imported studies')
        payload = seed.get('data')
        if isinstance(payload, str):
            payload = json.loads(payload)
        StudyResult.objects.create(study_id=study_id, type=seed['type'], data=payload or {})

    return _run(ImportOutcome('Results'), results, create)


def import_licenses(licenses: list, user_ids: set) -> ImportOutcome:
    def create(seed):
        if seed.get('medicId') not in user_ids:
            raise SkipItem(f'medicId "{seed.get("medicId")}" not found in imported users')
        TimeOffEvent.objects.create(
            medic_id=seed['medicId'],
            start_date=_date(seed.get('startDate'), 'startDate'),
            end_date=_date(seed.get('endDate'), 'endDate'),
            type=seed.get('type') or 'other',
            notes=seed.get('notes'),
        )

    return _run(ImportOutcome('Licenses'), licenses, create)


def write_skipped(seeds_dir, outcomes: list) -> list:
    directory = Path(seeds_dir) / SKIPPED_DIR
    written = []
    for outcome in outcomes:
        if not outcome.skipped:
            continue
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f'{outcome.label.lower()}.json'
        with path.open('w', encoding='utf-8') as fh:
            json.dump(outcome.skipped, fh, indent=2, ensure_ascii=False, default=str)
        written.append((path, len(outcome.skipped)))
    return written


def import_seeds(seeds_dir, *, reset_passwords=False, keep_existing=False, default_password='') -> list:
    """Import every seed file in dependency order; returns one outcome per entity."""
    if not keep_existing:
        reset_database()
    ensure_roles()

    seeds = {key: load_seed(seeds_dir, key) for key in SEED_FILES}
    logger.info('seeds_loaded %s', ', '.join(f'{len(v)} {k}' for k, v in seeds.items()))

    users = import_users(seeds['users'], reset_passwords=reset_passwords, default_password=default_password)
    user_ids = set(users.id_map)
    if keep_existing:
        user_ids |= set(User.objects.values_list('id', flat=True))
    patients = import_patients(seeds['patients'])
    encounters = import_encounters(seeds['encounters'], user_ids, patients.id_map)
    appointments = import_appointments(seeds['appointments'], user_ids, patients.id_map)
    studies = import_studies(seeds['studies'], user_ids, patients.id_map)
    results = import_results(seeds['results'], studies.id_map)
    licenses = import_licenses(seeds['licenses'], user_ids)

    outcomes = [users, patients, encounters, appointments, studies, results, licenses]
    write_skipped(seeds_dir, outcomes)
    return outcomes
