import json

import pytest

from records.models import (
    Appointment,
    Encounter,
    MdSettings,
    Patient,
    PersonalData,
    Study,
    StudyResult,
    TimeOffEvent,
    User,
)
from records.seeds.importers import SKIPPED_DIR, import_seeds
from records.seeds.writer import SEED_FILES

from .conftest import ANA_ID, LAB_ID, MEDIC_ID

pytestmark = pytest.mark.django_db


def outcome_map(outcomes):
    return {o.label: o for o in outcomes}


def test_import_creates_every_entity(seeds_dir):
    outcomes = outcome_map(import_seeds(seeds_dir, default_password='changeme123'))

    assert {label: (o.imported, len(o.skipped)) for label, o in outcomes.items()} == {
        'Users': (4, 0),
        'Patients': (4, 0),
        'Encounters': (2, 0),
        'Appointments': (1, 0),
        'Studies': (4, 0),
        'Results': (1, 0),
        'Licenses': (1, 0),
    }
    assert outcomes['Users'].line() == '  Users: 4/4 imported, 0 skipped'

    medic = User.objects.get(id=MEDIC_ID)
    assert medic.check_password('secret123')
    assert medic.personal_data.first_name == 'Gregory'
    assert MdSettings.objects.get(user=medic).encounter_duration == 20
    assert list(User.objects.get(id=LAB_ID).user_roles.values_list('role_id', flat=True)) == ['lab-owner']

    # patients get fresh ids; references follow them
    ana = Patient.objects.get(id=outcomes['Patients'].id_map[ANA_ID])
    assert ana.personal_data.document_value == '111'
    assert Encounter.objects.filter(patient=ana).count() == 2
    assert Appointment.objects.get().patient_id == ana.id

    study = Study.objects.get(protocol=100)
    assert study.medic_id == LAB_ID
    assert StudyResult.objects.get(study=study).data == {'hb': '13'}
    assert Study.objects.exclude(protocol=100).filter(protocol__gt=100).count() == 3

    event = TimeOffEvent.objects.get()
    assert (event.medic_id, event.type) == (MEDIC_ID, 'vacation')
    assert not (seeds_dir / SKIPPED_DIR).exists()


def test_reset_passwords(seeds_dir):
    import_seeds(seeds_dir, reset_passwords=True, default_password='changeme123')
    assert User.objects.get(id=MEDIC_ID).check_password('changeme123')


def test_broken_rows_are_skipped_and_written(seeds_dir):
    path = seeds_dir / SEED_FILES['encounters']
    encounters = json.loads(path.read_text(encoding='utf-8'))
    encounters.append({'data': {}, 'date': '2024-01-01T00:00:00.000Z', 'medicId': MEDIC_ID,
                       'patientId': 'ffffffffffffffffffffffff'})
    encounters.append({'data': {}, 'date': 'not a date', 'medicId': MEDIC_ID, 'patientId': ANA_ID})
    path.write_text(json.dumps(encounters), encoding='utf-8')

    outcomes = outcome_map(import_seeds(seeds_dir, default_password='changeme123'))
    skipped = outcomes['Encounters'].skipped
    assert outcomes['Encounters'].imported == 2
    assert [s['reason'] for s in skipped] == [
        'patientId "ffffffffffffffffffffffff" not found in imported patients',
        'date "not a date" is not a valid date',
    ]
    written = json.loads((seeds_dir / SKIPPED_DIR / 'encounters.json').read_text(encoding='utf-8'))
    assert len(written) == 2


def test_second_import_keeping_existing_rows_reuses_patients(seeds_dir):
    import_seeds(seeds_dir, default_password='changeme123')
    patients_before = Patient.objects.count()

    outcomes = outcome_map(import_seeds(seeds_dir, keep_existing=True, default_password='changeme123'))

    assert Patient.objects.count() == patients_before
    assert PersonalData.objects.filter(document_value='111').count() == 1
    assert outcomes['Users'].imported == 0
    assert all(s['reason'].startswith('create failed:') for s in outcomes['Users'].skipped)
    # encounters still resolve their medic among the users already in the database
    assert outcomes['Encounters'].imported == 2
    assert Encounter.objects.count() == 4


def test_import_replaces_existing_data_by_default(seeds_dir):
    import_seeds(seeds_dir, default_password='changeme123')
    import_seeds(seeds_dir, default_password='changeme123')
    assert User.objects.count() == 4
    assert Patient.objects.count() == 4
    assert Study.objects.count() == 4
