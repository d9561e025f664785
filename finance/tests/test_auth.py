import pytest
from rest_framework.test import APIClient

from finance.models import AuditEvent

pytestmark = pytest.mark.django_db

PASSWORD = 'P@ssw0rd1'


def login(client, **body):
    return client.post('/api/auth/login', body, format='json')


def test_login_returns_token_and_jwt_pair(finance):
    resp = login(APIClient(), username='finance1', password=PASSWORD)
    assert resp.status_code == 200
    data = resp.json()['data']
    assert data['token'] and data['access'] and data['refresh']
    assert data['user']['role'] == 'finance'
    assert data['user']['hospitalId'] == 'hospital-1'
    assert 'approve_reports' in data['user']['capabilities']
    assert AuditEvent.objects.filter(action='login', user=finance).exists()


def test_login_by_email(finance):
    resp = login(APIClient(), email='FINANCE1@example.com', password=PASSWORD)
    assert resp.status_code == 200


def test_bad_credentials_are_rejected(finance):
    resp = login(APIClient(), username='finance1', password='wrong')
    assert resp.status_code == 401
    body = resp.json()
    assert body['success'] is False
    assert body['code'] == 'authentication_failed'
    assert AuditEvent.objects.filter(action='login', user__isnull=True).exists()


def test_login_requires_account(finance):
    resp = login(APIClient(), password=PASSWORD)
    assert resp.status_code == 400
    assert resp.json()['code'] == 'validation_failed'


def test_role_cannot_be_escalated_at_login(viewer):
    resp = login(APIClient(), username='viewer1', password=PASSWORD, role='admin')
    assert resp.json()['data']['user']['role'] == 'viewer'
    viewer.refresh_from_db()
    assert viewer.role == 'viewer'


def test_token_and_jwt_both_authenticate(viewer):
    data = login(APIClient(), username='viewer1', password=PASSWORD).json()['data']

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    assert client.get('/api/auth/me').json()['data']['username'] == 'viewer1'

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['access']}")
    me = client.get('/api/auth/me').json()['data']
    assert me['capabilities'] == ['view_reports']


def test_refresh_and_logout(viewer):
    data = login(APIClient(), username='viewer1', password=PASSWORD).json()['data']

    resp = APIClient().post('/api/auth/refresh', {'refresh': data['refresh']}, format='json')
    assert resp.status_code == 200
    assert resp.json()['data']['access']

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    resp = client.post('/api/auth/logout', {'refresh': data['refresh']}, format='json')
    assert resp.json()['data'] == {'blacklisted': 1}

    assert APIClient().post('/api/auth/refresh', {'refresh': data['refresh']}, format='json').status_code == 401
    assert client.get('/api/auth/me').status_code == 401


def test_anonymous_requests_get_401_envelope():
    resp = APIClient().get('/api/reports')
    assert resp.status_code == 401
    assert resp.json()['success'] is False
    assert resp.json()['code'] == 'not_authenticated'


def test_health_is_public():
    resp = APIClient().get('/api/health')
    assert resp.status_code == 200
    assert resp.json()['data']['db'] is True


def test_credentials_without_hospital_are_rejected(viewer):
    data = login(APIClient(), username='viewer1', password=PASSWORD).json()['data']
    viewer.hospital_id = ''
    viewer.save(update_fields=['hospital_id'])

    for header in (f"Token {data['token']}", f"Bearer {data['access']}"):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=header)
        resp = client.get('/api/reports')
        assert resp.status_code == 401, header
        assert resp.json()['code'] == 'authentication_failed'
