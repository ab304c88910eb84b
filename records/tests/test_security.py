import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from records.models import AuditEvent, User
from records.services import totp

from .conftest import make_user

pytestmark = pytest.mark.django_db


def login(client, username, password, **extra):
    payload = {'username': username, 'password': password}
    payload.update(extra)
    return client.post(reverse('login_view'), payload, format='json')


def test_login_returns_jwt_and_legacy_token(medic):
    r = login(APIClient(), 'medic1', 'P@ssw0rd1')
    assert r.status_code == 200
    assert r.data['ok'] is True
    assert r.data['token']
    assert r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['user']['roleId'] == 'medic'


def test_bad_password_is_rejected_and_audited(medic):
    r = login(APIClient(), 'medic1', 'wrong')
    assert r.status_code == 401
    assert r.data['ok'] is False
    event = AuditEvent.objects.get(action='login')
    assert event.detail['result'] == 'fail'
    assert event.detail['username'] == 'medic1'


def test_token_and_bearer_both_authenticate(medic):
    client = APIClient()
    data = login(client, 'medic1', 'P@ssw0rd1').data

    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    assert client.get(reverse('profile_me')).data['username'] == 'medic1'

    bearer = APIClient()
    bearer.credentials(HTTP_AUTHORIZATION=f"Bearer {data['jwt_access']}")
    assert bearer.get(reverse('profile_me')).data['username'] == 'medic1'


def test_anonymous_requests_are_rejected(roles):
    r = APIClient().get('/api/patients')
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_refresh_rotates_and_logout_blacklists(medic):
    client = APIClient()
    data = login(client, 'medic1', 'P@ssw0rd1').data

    r = client.post(reverse('jwt_refresh'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']
    new_refresh = r.data['jwt_refresh']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    r = client.post(reverse('jwt_logout'), {'refresh': new_refresh}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 1

    r = APIClient().post(reverse('jwt_refresh'), {'refresh': new_refresh}, format='json')
    assert r.status_code == 401
    assert r.data['error']['reason'] == 'invalid_refresh_token'


def test_two_factor_enrolment_and_login(medic):
    client = APIClient()
    client.force_authenticate(user=medic)

    r = client.post(reverse('profile_action'), {'action': 'setup-2fa'}, format='json')
    assert r.status_code == 200
    secret = r.data['secret']
    assert r.data['otpauthUri'].startswith('otpauth://totp/')

    r = client.post(reverse('profile_action'), {'action': 'enable-2fa', 'twoFactorCode': 'abcdef'}, format='json')
    assert r.status_code == 400

    r = client.post(reverse('profile_action'),
                    {'action': 'enable-2fa', 'twoFactorCode': totp.current_code(secret)}, format='json')
    assert r.status_code == 200
    assert r.data['twoFactorEnabled'] is True

    r = login(APIClient(), 'medic1', 'P@ssw0rd1')
    assert r.status_code == 401
    assert r.data['error']['reason'] == '2fa_required'

    r = login(APIClient(), 'medic1', 'P@ssw0rd1', twoFactorCode='12345')
    assert r.status_code == 401
    assert r.data['error']['reason'] == 'invalid_2fa_code'

    r = login(APIClient(), 'medic1', 'P@ssw0rd1', twoFactorCode=totp.current_code(secret))
    assert r.status_code == 200


def test_change_password_requires_current_password(medic):
    client = APIClient()
    client.force_authenticate(user=medic)
    r = client.post(reverse('profile_action'), {
        'action': 'change-password', 'currentPassword': 'nope', 'newPassword': 'N3wPassword!'}, format='json')
    assert r.status_code == 400

    r = client.post(reverse('profile_action'), {
        'action': 'change-password', 'currentPassword': 'P@ssw0rd1', 'newPassword': 'N3wPassword!'}, format='json')
    assert r.status_code == 200
    assert login(APIClient(), 'medic1', 'N3wPassword!').status_code == 200


def test_login_is_throttled(medic):
    client = APIClient()
    statuses = [login(client, 'medic1', 'wrong').status_code for _ in range(11)]
    assert statuses[:10] == [401] * 10
    assert statuses[10] == 429


def test_role_strings_with_field_limits_restrict_writes(roles):
    from records.models import Role
    from records.services.roles import ensure_roles

    ensure_roles({'clerk': ['patients:find', 'patients:get', 'patients:patch.medicare']})
    clerk = make_user('clerk1', 'clerk')
    patient_client = APIClient()
    patient_client.force_authenticate(user=make_user('admin9', 'admin'))
    created = patient_client.post('/api/patients', {'personalData': {'firstName': 'Rosa'}}, format='json')

    client = APIClient()
    client.force_authenticate(user=clerk)
    r = client.patch(f"/api/patients/{created.data['id']}",
                     {'medicare': 'PAMI', 'gender': 'female'}, format='json')
    assert r.status_code == 200
    assert r.data['medicare'] == 'PAMI'
    assert r.data['gender'] is None
    assert client.post('/api/patients', {}, format='json').status_code == 403
    assert Role.objects.filter(id='clerk').exists()


def test_encrypted_columns_are_not_stored_in_clear(medic):
    from django.db import connection

    client = APIClient()
    client.force_authenticate(user=medic)
    created = client.post('/api/patients', {'personalData': {'firstName': 'Rosa', 'documentValue': '30111222'}},
                          format='json')
    assert created.status_code == 201
    with connection.cursor() as cursor:
        cursor.execute('SELECT document_value FROM records_personaldata')
        stored = cursor.fetchone()[0]
    assert stored != '30111222'
    assert User.objects.get(username='medic1').personal_data is None


def test_patient_changes_are_recorded_in_the_audit_trail(medic):
    from records.services.audit import history
    from records.services.patients import create_patient, soft_delete_patient, update_patient

    patient = create_patient(medic, {'personalData': {'firstName': 'Ana', 'documentValue': '77'}})
    update_patient(medic, patient, {'medicare': 'OSDE'})
    soft_delete_patient(medic, patient)

    events = history('patient', patient.id)
    assert [e.action for e in events] == ['patient_delete', 'patient_update', 'patient_create']
    assert events[1].detail == {'fields': ['medicare']}
    assert all(e.user == medic for e in events)
