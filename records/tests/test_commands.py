import json
from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from records.models import Appointment, Encounter, Patient, PersonalData, Role, Study, User

from .conftest import LAB_ID

pytestmark = pytest.mark.django_db


def run(*args, **kwargs):
    out = StringIO()
    call_command(*args, stdout=out, **kwargs)
    return out.getvalue()


def make_patient(document, created_at):
    patient = Patient.objects.create(personal_data=PersonalData.objects.create(first_name='Ana',
                                                                              document_value=document))
    Patient.objects.filter(id=patient.id).update(created_at=created_at)
    return patient


def test_ensure_roles_is_idempotent():
    run('ensure_roles')
    Role.objects.filter(id='medic').update(permissions=['patients:find'])
    output = run('ensure_roles')
    assert 'ok: medic' in output
    assert 'encounters:create' in Role.objects.get(id='medic').permissions
    assert Role.objects.count() == 4


def test_ensure_test_users(settings):
    settings.DEFAULT_USER_PASSWORD = 'dev-password'
    output = run('ensure_test_users')
    assert 'created: admin1 (admin)' in output
    admin = User.objects.get(username='admin1')
    assert admin.is_staff
    assert admin.check_password('dev-password')

    User.objects.filter(username='medic1').update(is_active=False)
    output = run('ensure_test_users')
    assert 'ok: medic1 (medic)' in output
    assert User.objects.get(username='medic1').is_active
    assert User.objects.count() == 3


def test_cleanup_appointments(roles):
    medic = User.objects.create_user(username='m', password='x', role_id='medic')
    patient = make_patient('1', timezone.now())
    now = timezone.now()
    Appointment.objects.create(medic=medic, patient=patient, start_date=now - timedelta(days=200))
    recent = Appointment.objects.create(medic=medic, patient=patient, start_date=now - timedelta(days=10))

    output = run('cleanup_appointments', '--months', '3')
    assert 'Deleted 1 appointment(s) older than 3 month(s).' in output
    assert list(Appointment.objects.values_list('id', flat=True)) == [recent.id]


def test_merge_duplicate_patients(roles, tmp_path):
    medic = User.objects.create_user(username='m', password='x', role_id='medic')
    now = timezone.now()
    keeper = make_patient('111', now - timedelta(days=2))
    copy = make_patient('111', now - timedelta(days=1))
    other = make_patient('222', now)
    Encounter.objects.create(medic=medic, patient=copy, date=now, data={'a': {'values': {'x': '1'}}})
    Appointment.objects.create(medic=medic, patient=copy, start_date=now)
    Study.objects.create(date=now, protocol=1, patient=copy)

    report_path = tmp_path / 'reports' / 'merge.json'
    output = run('merge_duplicate_patients', '--dry-run', '--report', str(report_path))
    assert 'Found 1 duplicate patient(s).' in output
    assert 'Would patch 1 encounters.' in output
    assert Patient.objects.filter(id=copy.id).exists()
    report = json.loads(report_path.read_text(encoding='utf-8'))
    assert report['patched']['studies'][0] == {'id': Study.objects.get().id, 'from': copy.id, 'to': keeper.id}

    output = run('merge_duplicate_patients')
    assert 'Removed 1 patient(s).' in output
    assert not Patient.objects.filter(id=copy.id).exists()
    assert Encounter.objects.get().patient_id == keeper.id
    assert Appointment.objects.get().patient_id == keeper.id
    assert Study.objects.get().patient_id == keeper.id
    assert Patient.objects.filter(id=other.id).exists()


def test_create_and_import_seed_commands(settings, dumps_dir, tmp_path):
    settings.LAB_OWNER_ID = LAB_ID
    seeds_dir = tmp_path / 'out'

    output = run('create_seeds', '--dumps-dir', str(dumps_dir), '--seeds-dir', str(seeds_dir))
    assert '=== Summary ===' in output
    assert (seeds_dir / 'user.seed.json').exists()

    output = run('import_seeds', '--seeds-dir', str(seeds_dir), '--reset-passwords')
    assert '  --reset-passwords: all user passwords will be reset' in output
    assert '  Users: 4/4 imported, 0 skipped' in output
    assert 'Import completed!' in output
    assert User.objects.get(username='drhouse').check_password(settings.DEFAULT_USER_PASSWORD)


def test_seed_commands_report_missing_files(tmp_path):
    with pytest.raises(CommandError, match='Missing dump file'):
        run('create_seeds', '--dumps-dir', str(tmp_path / 'nowhere'), '--seeds-dir', str(tmp_path / 'out'))
    with pytest.raises(CommandError, match='Missing seed file'):
        run('import_seeds', '--seeds-dir', str(tmp_path / 'nowhere'), '--keep-existing')
