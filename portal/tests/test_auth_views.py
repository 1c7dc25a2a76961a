import pytest
from rest_framework.test import APIClient

from portal import tokens
from portal.models import AuditEvent, User
from portal.roles import Role

pytestmark = pytest.mark.django_db

STRONG = 'Kuat#Sekali2024'


def test_login_by_email_or_username(make_user, login):
    make_user('doc1', role=Role.DOCTOR, email='Dokter@PHC.local')
    r = login(APIClient(), 'dokter@phc.local')
    assert r.status_code == 200
    assert r.data['success'] is True
    assert r.data['user']['role'] == 'doctor'
    assert tokens.verify(r.data['token']).role is Role.DOCTOR
    assert login(APIClient(), 'doc1').status_code == 200
    assert User.objects.get(username='doc1').last_login is not None


def test_login_missing_fields():
    r = APIClient().post('/api/auth/login', {'email': 'x@phc.local'}, format='json')
    assert r.status_code == 400


def test_login_wrong_password_is_audited(make_user, login):
    make_user('u1')
    r = login(APIClient(), 'u1', password='wrong-password')
    assert r.status_code == 401
    assert 'phc_token' not in r.cookies
    event = AuditEvent.objects.get(action='login')
    assert event.detail['result'] == 'fail'


def test_login_unknown_user(login):
    assert login(APIClient(), 'ghost@phc.local').status_code == 401


def test_login_inactive_user(make_user, login):
    make_user('u2', is_active=False)
    assert login(APIClient(), 'u2').status_code == 403


def test_login_cannot_escalate_role(make_user):
    u = make_user('u3')
    r = APIClient().post('/api/auth/login', {'email': 'u3', 'password': 'P@ssw0rd1', 'role': 'admin'},
                         format='json')
    assert r.status_code == 200
    assert tokens.verify(r.data['token']).role is Role.PARTICIPANT
    u.refresh_from_db()
    assert u.role == Role.PARTICIPANT


def test_logout_clears_cookies(participant_client):
    r = participant_client.post('/api/auth/logout')
    assert r.status_code == 200
    assert r.cookies['phc_token'].value == ''
    assert str(r.cookies['session_ip']['max-age']) == '0'
    assert AuditEvent.objects.filter(action='logout').exists()
    assert participant_client.get('/api/users/me').status_code == 401


def test_check_session(participant_client):
    r = participant_client.get('/api/auth/check-session')
    assert r.status_code == 200
    assert r.data['valid'] is True
    assert r.data['user']['role'] == 'participant'
    assert r.data['user']['id'] == str(User.objects.get(username='part1').pk)


def test_refresh_token_issues_new_cookie(participant_client):
    r = participant_client.post('/api/auth/refresh-token')
    assert r.status_code == 200
    assert tokens.verify(r.cookies['phc_token'].value) is not None
    assert r.cookies['session_ip'].value == '127.0.0.1'


def test_refresh_token_for_disabled_account(participant_client):
    User.objects.filter(username='part1').update(is_active=False)
    r = participant_client.post('/api/auth/refresh-token')
    assert r.status_code == 401
    assert r.cookies['phc_token'].value == ''


def test_disabled_account_loses_api_access(participant_client):
    User.objects.filter(username='part1').update(is_active=False)
    r = participant_client.get('/api/users/me')
    assert r.status_code == 401
    assert r.data['success'] is False
    # no renewed credential for an account that can no longer log in
    assert r.cookies['phc_token'].value == ''
    assert str(r.cookies['session_ip']['max-age']) == '0'


def test_logout_of_deleted_account_clears_cookies(participant_client):
    User.objects.filter(username='part1').delete()
    r = participant_client.post('/api/auth/logout')
    assert r.status_code == 200
    assert r.cookies['phc_token'].value == ''
    assert str(r.cookies['phc_token']['max-age']) == '0'
    assert r.cookies['session_ip'].value == ''
    assert AuditEvent.objects.get(action='logout').user is None


def test_check_session_rejects_disabled_account(participant_client):
    User.objects.filter(username='part1').update(is_active=False)
    r = participant_client.get('/api/auth/check-session')
    assert r.status_code == 401
    assert r.data['valid'] is False
    assert r.cookies['phc_token'].value == ''


def test_register_creates_participant():
    r = APIClient().post('/api/auth/register',
                         {'name': 'Siti Aminah', 'email': 'siti@phc.local', 'password': STRONG},
                         format='json')
    assert r.status_code == 201
    user = User.objects.get(email='siti@phc.local')
    assert user.role == Role.PARTICIPANT
    assert user.username.startswith('siti_')
    assert user.check_password(STRONG)
    assert r.data['user']['fullName'] == 'Siti Aminah'


def test_register_rejects_duplicates(make_user):
    make_user('taken', email='taken@phc.local')
    client = APIClient()
    r = client.post('/api/auth/register', {'name': 'A', 'email': 'TAKEN@phc.local', 'password': STRONG},
                    format='json')
    assert r.status_code == 400
    r = client.post('/api/auth/register',
                    {'name': 'A', 'email': 'new@phc.local', 'password': STRONG, 'username': 'taken'},
                    format='json')
    assert r.status_code == 400


def test_register_requires_fields():
    r = APIClient().post('/api/auth/register', {'email': 'a@phc.local'}, format='json')
    assert r.status_code == 400
    assert r.data['success'] is False


def test_register_rejects_weak_password():
    r = APIClient().post('/api/auth/register', {'name': 'A', 'email': 'a@phc.local', 'password': '123'},
                         format='json')
    assert r.status_code == 400


def test_register_strips_markup_from_name():
    r = APIClient().post('/api/auth/register',
                         {'name': '<script>x</script>Budi', 'email': 'budi@phc.local', 'password': STRONG},
                         format='json')
    assert r.status_code == 201
    assert '<' not in User.objects.get(email='budi@phc.local').full_name


def test_check_email(make_user):
    make_user('u4', email='u4@phc.local')
    client = APIClient()
    assert client.get('/api/auth/check-email', {'email': 'U4@phc.local'}).data == {'exists': True}
    assert client.get('/api/auth/check-email', {'email': 'no@phc.local'}).data == {'exists': False}
    assert client.get('/api/auth/check-email').status_code == 400


def test_change_password(participant_client, login):
    r = participant_client.post('/api/auth/change-password',
                                {'currentPassword': 'nope', 'newPassword': STRONG}, format='json')
    assert r.status_code == 400
    r = participant_client.post('/api/auth/change-password',
                                {'currentPassword': 'P@ssw0rd1', 'newPassword': STRONG}, format='json')
    assert r.status_code == 200
    assert login(APIClient(), 'part1', password=STRONG).status_code == 200
    assert AuditEvent.objects.filter(action='change_password').exists()


def test_me(participant_client):
    r = participant_client.get('/api/users/me')
    assert r.status_code == 200
    assert r.data['email'] == 'part1@phc.local'
    assert 'password' not in r.data


def test_failed_logins_are_not_rate_limited(make_user, login):
    make_user('u5')
    client = APIClient()
    codes = {login(client, 'u5', password='wrong-password').status_code for _ in range(70)}
    assert codes == {401}
    assert login(client, 'u5').status_code == 200
