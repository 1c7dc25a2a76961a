import pytest
from rest_framework.test import APIClient

from portal.models import User
from portal.roles import Role

PASSWORD = 'P@ssw0rd1'


@pytest.fixture
def make_user(db):
    def _make(username='user1', role=Role.PARTICIPANT, password=PASSWORD, **extra):
        extra.setdefault('email', f'{username}@phc.local')
        extra.setdefault('full_name', username.title())
        return User.objects.create_user(username=username, password=password, role=role, **extra)
    return _make


@pytest.fixture
def login():
    def _login(client, identifier, password=PASSWORD, **extra):
        return client.post('/api/auth/login', {'email': identifier, 'password': password}, format='json', **extra)
    return _login


@pytest.fixture
def admin_client(make_user, login):
    make_user('admin1', role=Role.ADMIN)
    client = APIClient()
    r = login(client, 'admin1')
    assert r.status_code == 200
    return client


@pytest.fixture
def participant_client(make_user, login):
    make_user('part1', role=Role.PARTICIPANT)
    client = APIClient()
    r = login(client, 'part1')
    assert r.status_code == 200
    return client
