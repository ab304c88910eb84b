import json
from datetime import datetime, timezone

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from records.models import User
from records.seeds.dumps import DUMP_FILES
from records.seeds.pipeline import create_seeds
from records.services.roles import ensure_roles


@pytest.fixture(autouse=True)
def _clear_cache():
    # role permissions and throttle counters live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def roles(db):
    return {role.id: role for role in ensure_roles()}


def make_user(username, role_id, password='P@ssw0rd1', **extra):
    return User.objects.create_user(username=username, password=password, role_id=role_id, **extra)


@pytest.fixture
def admin(roles):
    return make_user('admin1', 'admin', is_staff=True)


@pytest.fixture
def medic(roles):
    return make_user('medic1', 'medic')


@pytest.fixture
def other_medic(roles):
    return make_user('medic2', 'medic')


@pytest.fixture
def receptionist(roles):
    return make_user('reception1', 'receptionist')


@pytest.fixture
def client_for():
    def build(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return build


MEDIC_ID = '5a0000000000000000000001'
IDLE_ID = '5a0000000000000000000002'
DESK_ID = '5a0000000000000000000003'
LAB_ID = '540dc81947771d1f3f8b4567'
NAMELESS_ID = '5a0000000000000000000005'

ANA_ID = 'aa0000000000000000000001'
ANA_COPY_ID = 'aa0000000000000000000002'
ROSA_ID = 'aa0000000000000000000003'
IDLE_PATIENT_ID = 'aa0000000000000000000004'

STUDY_ID = 'bb0000000000000000000001'
ROSA_STUDY_ID = 'bb0000000000000000000002'
BROKEN_STUDY_ID = 'bb0000000000000000000005'


def _oid(value):
    return {'$oid': value}


LEGACY_DUMPS = {
    'users': [
        {
            '_id': _oid(MEDIC_ID), '__class': 'Medic', 'username': 'drhouse', 'bf_password': 'secret123',
            'personal_data': {'first_name': 'Dr Gregory', 'last_name': 'HOUSE', 'document_value': '1000'},
            'contact_data': {'city': 'Cdro. Rivadavia', 'province': 'Chubut', 'phone_number': '297 15 4048768'},
            'medical_specialty': 'Clínica',
            'schedule_all_week_shift_duration': 20,
            'schedule_all_week_start_time': '09:00',
            'schedule_all_week_end_time': '17:00',
        },
        {'_id': _oid(IDLE_ID), '__class': 'Medic', 'username': 'idle'},
        {'_id': _oid(DESK_ID), '__class': 'Receptionist', 'username': 'desk'},
        {'_id': _oid(LAB_ID), '__class': 'Medic', 'username': 'lab'},
        {'_id': _oid(NAMELESS_ID), '__class': 'Medic'},
    ],
    'patients': [
        {'_id': _oid(ANA_ID), 'medicare': 'OSDE',
         'personal_data': {'first_name': 'ana', 'last_name': 'PEREZ', 'document_value': '111',
                           'dob_year': 1980, 'dob_month': 5, 'dob_day': 2}},
        {'_id': _oid(ANA_COPY_ID), 'personal_data': {'first_name': 'Ana', 'last_name': 'Perez',
                                                     'document_value': '111'}},
        {'_id': _oid(ROSA_ID), 'personal_data': {'first_name': 'Rosa', 'last_name': 'Diaz', 'document_value': '222'}},
        {'_id': _oid(IDLE_PATIENT_ID), 'personal_data': {'first_name': 'Nadie', 'document_value': '333'}},
    ],
    'encounters': [
        {'_id': _oid('cc0000000000000000000001'), 'medic_id': MEDIC_ID, 'patient_id': ANA_ID,
         'timestamp': {'$numberLong': '1700000000'},
         'datas': {'__class': 'Forms', 'anamnesis': {'__class': 'Form', 'values': {'reason': 'tos'}}}},
        {'_id': _oid('cc0000000000000000000002'), 'medic_id': NAMELESS_ID, 'patient_id': ANA_COPY_ID,
         'timestamp': 1700000100, 'datas': {'anamnesis': {'values': {'reason': 'fiebre'}}}},
        {'_id': _oid('cc0000000000000000000003'), 'medic_id': MEDIC_ID, 'patient_id': 'ffffffffffffffffffffffff',
         'timestamp': 1700000200},
        {'_id': _oid('cc0000000000000000000004'), 'medic_id': MEDIC_ID, 'patient_id': ANA_ID, 'timestamp': 'bad'},
    ],
    'appointments': [
        {'medic_id': MEDIC_ID, 'patient_id': ANA_COPY_ID, 'start_timestamp': 1716000000, 'extra': 1},
        {'medic_id': MEDIC_ID, 'patient_id': ANA_ID, 'start_timestamp': 1600000000},
        {'medic_id': IDLE_ID, 'patient_id': ANA_ID, 'start_timestamp': 1716000000},
    ],
    'studies': [
        {'_id': _oid(STUDY_ID), 'date': {'$date': '2024-05-01T10:00:00Z'}, 'protocol': 100,
         'patient': {'id': ANA_ID}, 'medic': LAB_ID, 'studies': {'hemograma': True, 'orina': False}},
        {'_id': _oid(ROSA_STUDY_ID), 'date': {'$date': '2024-05-02T10:00:00Z'},
         'patient': {'first_name': 'ROSA ', 'last_name': 'diaz'}, 'medic': 'Dr. Pepe'},
        {'_id': _oid('bb0000000000000000000003'), 'date': {'$date': '2024-05-03T10:00:00Z'},
         'patient': {'dni': '999', 'first_name': 'Nuevo', 'last_name': 'Paciente'}, 'medic': ''},
        {'_id': _oid('bb0000000000000000000004'), 'date': {'$date': '2024-05-04T10:00:00Z'},
         'patient': {'first_name': 'Sin', 'last_name': 'Datos'}},
        {'_id': _oid(BROKEN_STUDY_ID), 'patient': {'id': ANA_ID}},
    ],
    'results': [
        {'_id': _oid('dd0000000000000000000001'), 'study': _oid(STUDY_ID), 'type': 'hemograma',
         'data': {'__class': 'Result', 'hb': '13'}},
        {'_id': _oid('dd0000000000000000000002'), 'study': _oid(BROKEN_STUDY_ID), 'type': 'orina', 'data': {}},
    ],
    'licenses': [
        {'medic': _oid(MEDIC_ID), 'start': 1716800000, 'end': 1717000000, 'type': 'vacation'},
        {'medic': _oid(MEDIC_ID), 'start': 1716800000, 'end': 1717000000, 'type': 'vacation'},
        {'medic': _oid(MEDIC_ID), 'start': 1600000000, 'end': 1600100000, 'type': 'other'},
        {'medic': _oid(IDLE_ID), 'start': 1716800000, 'end': 1717000000},
        {},
    ],
}


@pytest.fixture
def dumps_dir(tmp_path):
    directory = tmp_path / 'dumps'
    directory.mkdir()
    for name, filename in DUMP_FILES.items():
        with (directory / filename).open('w', encoding='utf-8') as fh:
            json.dump(LEGACY_DUMPS[name], fh)
    return directory


@pytest.fixture
def seeds_dir(tmp_path, dumps_dir):
    directory = tmp_path / 'seeds'
    create_seeds(dumps_dir, directory, lab_owner_id=LAB_ID, default_password='changeme123',
                 now=datetime(2024, 6, 1, tzinfo=timezone.utc))
    return directory
