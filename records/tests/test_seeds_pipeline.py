import json
from datetime import datetime, timezone

from records.seeds.licenses import process_licenses
from records.seeds.pipeline import create_seeds
from records.seeds.studies import resolve_medic
from records.seeds.writer import DISCARDED_DIR, load_seed

from .conftest import (
    ANA_ID,
    DESK_ID,
    LAB_ID,
    MEDIC_ID,
    NAMELESS_ID,
    ROSA_ID,
    STUDY_ID,
)

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def run(dumps_dir, tmp_path):
    seeds_dir = tmp_path / 'seeds'
    report = create_seeds(dumps_dir, seeds_dir, lab_owner_id=LAB_ID, default_password='changeme123', now=NOW)
    return seeds_dir, report


def test_users_without_activity_are_dropped(dumps_dir, tmp_path):
    seeds_dir, report = run(dumps_dir, tmp_path)
    users = {u['id']: u for u in load_seed(seeds_dir, 'users')}

    assert set(users) == {MEDIC_ID, DESK_ID, LAB_ID, NAMELESS_ID}
    assert report.stats['Users'].reasons == {'medic_without_activity': 1}

    medic = users[MEDIC_ID]
    assert medic['password'] == 'secret123'
    assert medic['roleId'] == 'medic'
    assert medic['personalData']['firstName'] == 'Gregory'
    assert medic['personalData']['lastName'] == 'House'
    assert medic['contactData'] == {
        'streetAddress': None,
        'city': 'comodoro rivadavia',
        'province': 'AR-U',
        'country': 'AR',
        'phoneNumber': ['cel:2974048768'],
        'email': None,
    }
    assert medic['mdSettings']['encounterDuration'] == 20
    assert medic['mdSettings']['mondayStart'] == '09:00'
    assert medic['mdSettings']['medicalSpecialty'] == 'Clínica'

    assert users[DESK_ID]['roleId'] == 'receptionist'
    assert users[DESK_ID]['password'] == 'changeme123'
    assert 'mdSettings' not in users[DESK_ID]
    assert users[LAB_ID]['additionalRoleIds'] == ['lab-owner']
    assert users[NAMELESS_ID]['username'] == 'weird_user'


def test_encounters_follow_merged_patients_and_nameless_medic(dumps_dir, tmp_path):
    seeds_dir, report = run(dumps_dir, tmp_path)
    encounters = load_seed(seeds_dir, 'encounters')

    assert encounters[0] == {
        'data': {'anamnesis': {'values': {'reason': 'tos'}}},
        'date': '2023-11-14T22:13:20.000Z',
        'medicId': MEDIC_ID,
        'patientId': ANA_ID,
    }
    assert encounters[1]['medicId'] == LAB_ID
    assert encounters[1]['patientId'] == ANA_ID
    assert report.stats['Encounters'].reasons == {'missing_patient_reference': 1, 'invalid_timestamp': 1}

    with (seeds_dir / DISCARDED_DIR / 'encounters.json').open(encoding='utf-8') as fh:
        discarded = json.load(fh)
    assert [row['REASON'] for row in discarded] == ['missing_patient_reference', 'invalid_timestamp']


def test_patients_are_deduplicated_rescued_and_synthesized(dumps_dir, tmp_path):
    seeds_dir, report = run(dumps_dir, tmp_path)
    patients = load_seed(seeds_dir, 'patients')

    assert [p['id'] for p in patients[:2]] == [ANA_ID, ROSA_ID]
    ana = patients[0]
    assert ana['personalData']['firstName'] == 'Ana'
    assert ana['personalData']['birthDate'] == '1980-05-02T00:00:00.000Z'
    assert ana['medicare'] == 'OSDE'

    synthetic = patients[2:]
    assert [p['personalData']['documentValue'] for p in synthetic][0] == '999'
    assert synthetic[1]['personalData']['firstName'] == 'Sin'
    assert len(synthetic[1]['personalData']['documentValue']) == 24

    assert report.stats['Dedup'].reasons == {'non_deleted_duplicate': 1}
    assert report.stats['Patients'].kept == 1
    assert report.rescued == 1
    assert report.synthetic == 2


def test_studies_resolve_medics_and_patients(dumps_dir, tmp_path):
    seeds_dir, report = run(dumps_dir, tmp_path)
    studies = load_seed(seeds_dir, 'studies')
    patients = load_seed(seeds_dir, 'patients')

    assert len(studies) == 4
    first = studies[0]
    assert first['id'] == STUDY_ID
    assert first['protocol'] == 100
    assert first['studies'] == ['hemograma']
    assert (first['medicId'], first['referringDoctor']) == (LAB_ID, None)
    assert first['date'] == '2024-05-01T10:00:00.000Z'

    assert studies[1]['patientId'] == ROSA_ID
    assert (studies[1]['medicId'], studies[1]['referringDoctor']) == (None, 'Dr. Pepe')
    assert studies[2]['medicId'] == LAB_ID
    assert {s['patientId'] for s in studies} <= {p['id'] for p in patients}

    stats = report.stats['Studies']
    assert (stats.kept, stats.discarded) == (4, 1)
    assert stats.reasons['invalid_study_data'] == 1
    assert stats.reasons['synthetic_patient_created'] == 1
    assert stats.reasons['synthetic_patient_no_dni'] == 1
    assert (seeds_dir / DISCARDED_DIR / 'studies.json').exists()


def test_results_appointments_and_licenses(dumps_dir, tmp_path):
    seeds_dir, report = run(dumps_dir, tmp_path)

    results = load_seed(seeds_dir, 'results')
    assert len(results) == 1
    assert results[0]['studyId'] == STUDY_ID
    assert json.loads(results[0]['data']) == {'hb': '13'}

    appointments = load_seed(seeds_dir, 'appointments')
    assert appointments == [{
        'patientId': ANA_ID,
        'medicId': MEDIC_ID,
        'startDate': '2024-05-18T02:40:00.000Z',
        'extra': True,
    }]
    assert report.stats['Appointments'].reasons == {
        'older_than_6_months': 1, 'missing_medic_reference': 1,
    }

    licenses = load_seed(seeds_dir, 'licenses')
    # whole days in the clinic's time zone (UTC-3)
    assert licenses == [{
        'medicId': MEDIC_ID,
        'startDate': '2024-05-27T03:00:00.000Z',
        'endDate': '2024-05-30T02:59:59.999Z',
        'type': 'vacation',
        'notes': None,
    }]
    assert report.stats['Licenses'].reasons == {
        'duplicate_license': 1, 'license_too_old': 1, 'missing_medic_reference': 1, 'invalid_license_data': 1,
    }


def test_report_lines(dumps_dir, tmp_path):
    _, report = run(dumps_dir, tmp_path)
    lines = report.lines()
    assert lines[0] == '=== Summary ==='
    assert '  Users: 4/5 kept, 1 discarded' in lines
    assert 'Rescued 1 patient(s) via study references' in lines
    assert 'Created 2 synthetic patient(s) from orphan studies' in lines
    assert '  discarded/encounters.json: 2 records' in lines


def test_rerun_replaces_previous_seeds(dumps_dir, tmp_path):
    seeds_dir, _ = run(dumps_dir, tmp_path)
    (seeds_dir / 'stale.seed.json').write_text('[]', encoding='utf-8')
    run(dumps_dir, tmp_path)
    assert not (seeds_dir / 'stale.seed.json').exists()
    assert len(load_seed(seeds_dir, 'users')) == 4


def test_resolve_medic():
    known = {MEDIC_ID}
    assert resolve_medic(MEDIC_ID.upper(), known) == (MEDIC_ID, None)
    assert resolve_medic('5a00000000000000000000ff', known) == (None, '5a00000000000000000000ff')
    assert resolve_medic('  Dra. Lopez ', known) == (None, 'Dra. Lopez')
    assert resolve_medic(None, known) == (None, None)


def test_license_type_defaults_to_other():
    result = process_licenses([{'medic': {'$oid': MEDIC_ID}, 'start': 1716800000, 'end': 1716800000,
                                'type': 'sick'}], {MEDIC_ID}, now=NOW)
    assert result.licenses[0]['type'] == 'other'
