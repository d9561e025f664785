"""Every read and write is confined to the caller's hospital."""
import pytest

pytestmark = pytest.mark.django_db


def test_cross_hospital_report_access_is_denied(client_for, finance, other_admin, make_report):
    report = make_report(finance)
    client = client_for(other_admin)
    assert client.get(f'/api/reports/{report.id}').status_code == 403
    resp = client.put(f'/api/reports/{report.id}', {'notes': 'x'}, format='json')
    assert resp.status_code == 403
    assert resp.json()['code'] == 'access_denied'
    assert client.delete(f'/api/reports/{report.id}').status_code == 403
    assert client.post(f'/api/reports/{report.id}/duplicate').status_code == 403
    report.refresh_from_db()
    assert report.notes == ''


def test_lists_and_dashboards_only_see_own_hospital(client_for, finance, other_admin, make_report):
    make_report(finance, status='approved', revenue_patient_care=1000)
    make_report(other_admin, status='approved', revenue_patient_care=50)

    own = client_for(finance).get('/api/reports').json()
    assert own['pagination']['total'] == 1
    assert own['data'][0]['hospitalId'] == 'hospital-1'

    stats = client_for(other_admin).get('/api/dashboard/stats').json()['data']
    assert stats['totalRevenue'] == 50.0


def test_same_period_in_two_hospitals_is_allowed(client_for, finance, other_admin, report_payload):
    assert client_for(finance).post('/api/reports', report_payload(), format='json').status_code == 201
    assert client_for(other_admin).post('/api/reports', report_payload(), format='json').status_code == 201


def test_schedule_assignee_must_share_hospital(client_for, admin, other_admin, make_report):
    report = make_report(admin)
    resp = client_for(admin).post('/api/schedules', {
        'reportId': report.id,
        'assignedTo': other_admin.id,
        'scheduledDate': '2030-01-01T09:00:00Z',
        'reviewType': 'monthly',
    }, format='json')
    assert resp.status_code == 403


def test_user_without_hospital_cannot_use_token(make_user):
    from rest_framework.authtoken.models import Token
    from rest_framework.test import APIClient

    user = make_user('floating', hospital_id='')
    token = Token.objects.create(user=user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')
    resp = client.get('/api/reports')
    assert resp.status_code == 401
