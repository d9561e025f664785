"""
User administration API.

Admins manage accounts of their own hospital only; finance and viewer
roles are refused outright.
"""
import datetime as dt

from django.utils import timezone
from rest_framework.test import APIClient, APITestCase

from finance.models import AuditEvent, FinancialReport, ReviewSchedule, User

PASSWORD = 'P@ssw0rd1'


class UserAdministrationTests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username='admin1', password=PASSWORD, email='admin1@example.com', role='admin', hospital_id='hospital-1',
        )
        self.finance = User.objects.create_user(
            username='finance1', password=PASSWORD, email='finance1@example.com', role='finance',
            hospital_id='hospital-1', first_name='Sari', last_name='Wijaya',
        )
        self.stranger = User.objects.create_user(
            username='finance2', password=PASSWORD, email='finance2@example.com', role='finance',
            hospital_id='hospital-2',
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def test_list_is_scoped_to_hospital(self):
        body = self.client.get('/api/users').json()
        self.assertTrue(body['success'])
        self.assertEqual({u['username'] for u in body['data']}, {'admin1', 'finance1'})
        self.assertEqual(body['pagination']['total'], 2)

    def test_list_filters(self):
        self.client.patch(f'/api/users/{self.finance.id}/status')
        inactive = self.client.get('/api/users', {'isActive': 'false'}).json()['data']
        self.assertEqual([u['username'] for u in inactive], ['finance1'])
        found = self.client.get('/api/users', {'search': 'wijaya'}).json()['data']
        self.assertEqual([u['id'] for u in found], [self.finance.id])
        admins = self.client.get('/api/users', {'role': 'admin'}).json()['data']
        self.assertEqual([u['username'] for u in admins], ['admin1'])

    def test_create_binds_to_admin_hospital(self):
        resp = self.client.post('/api/users', {
            'name': 'Budi Santoso', 'email': 'Budi@Hospital.com', 'password': 'Str0ng-pass!',
            'role': 'viewer', 'hospitalId': 'hospital-9',
        }, format='json')
        self.assertEqual(resp.status_code, 201)
        data = resp.json()['data']
        self.assertEqual(data['hospitalId'], 'hospital-1')
        self.assertEqual(data['email'], 'budi@hospital.com')
        self.assertEqual(data['username'], 'budi@hospital.com')
        self.assertEqual(data['name'], 'Budi Santoso')
        self.assertNotIn('password', data)
        self.assertTrue(User.objects.get(pk=data['id']).check_password('Str0ng-pass!'))

    def test_create_rejects_duplicate_email_and_weak_password(self):
        resp = self.client.post('/api/users', {
            'name': 'Again', 'email': 'finance1@example.com', 'password': 'Str0ng-pass!', 'role': 'viewer',
        }, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertIn('email', resp.json()['errors'])

        resp = self.client.post('/api/users', {
            'name': 'Weak', 'email': 'weak@example.com', 'password': '123', 'role': 'viewer',
        }, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertIn('password', resp.json()['errors'])

    def test_update_profile_but_not_password(self):
        resp = self.client.put(f'/api/users/{self.finance.id}', {
            'name': 'Sari Dewi', 'department': 'Accounting', 'password': 'ignored-value',
        }, format='json')
        self.assertEqual(resp.status_code, 200)
        self.finance.refresh_from_db()
        self.assertEqual(self.finance.get_full_name(), 'Sari Dewi')
        self.assertEqual(self.finance.department, 'Accounting')
        self.assertTrue(self.finance.check_password(PASSWORD))

    def test_change_role(self):
        resp = self.client.patch(f'/api/users/{self.finance.id}/role', {'role': 'viewer'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['data']['role'], 'viewer')
        bad = self.client.patch(f'/api/users/{self.finance.id}/role', {'role': 'super'}, format='json')
        self.assertEqual(bad.status_code, 400)
        own = self.client.patch(f'/api/users/{self.admin.id}/role', {'role': 'viewer'}, format='json')
        self.assertEqual(own.status_code, 400)
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.role, 'admin')

    def test_toggle_status(self):
        resp = self.client.patch(f'/api/users/{self.finance.id}/status')
        self.assertEqual(resp.json()['message'], 'User deactivated successfully')
        self.assertFalse(resp.json()['data']['isActive'])
        resp = self.client.patch(f'/api/users/{self.finance.id}/status')
        self.assertEqual(resp.json()['message'], 'User activated successfully')
        self.assertEqual(self.client.patch(f'/api/users/{self.admin.id}/status').status_code, 400)

    def test_delete(self):
        self.assertEqual(self.client.delete(f'/api/users/{self.admin.id}').status_code, 400)
        resp = self.client.delete(f'/api/users/{self.finance.id}')
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(User.objects.filter(pk=self.finance.id).exists())

    def test_delete_refused_while_reviews_are_open(self):
        report = FinancialReport.objects.create(
            hospital_id='hospital-1', report_type='monthly', year=2024, month=1, period='Januari 2024',
            created_by=self.admin,
        )
        ReviewSchedule.objects.create(
            hospital_id='hospital-1', report=report, assigned_to=self.finance, created_by=self.admin,
            scheduled_date=timezone.now() + dt.timedelta(days=3), review_type='monthly',
        )
        resp = self.client.delete(f'/api/users/{self.finance.id}')
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()['code'], 'conflict')
        self.assertTrue(User.objects.filter(pk=self.finance.id).exists())

    def test_activity_lists_audit_events(self):
        AuditEvent.objects.create(user=self.finance, action='report_create', object_type='report', object_id=7)
        AuditEvent.objects.create(user=self.admin, action='report_approve', object_type='report', object_id=7)
        data = self.client.get(f'/api/users/{self.finance.id}/activity').json()['data']
        self.assertEqual([e['action'] for e in data], ['report_create'])
        self.assertEqual(data[0]['objectId'], 7)

    def test_other_hospital_users_are_denied(self):
        for method, path in (
            ('get', f'/api/users/{self.stranger.id}'),
            ('put', f'/api/users/{self.stranger.id}'),
            ('patch', f'/api/users/{self.stranger.id}/role'),
            ('patch', f'/api/users/{self.stranger.id}/status'),
            ('delete', f'/api/users/{self.stranger.id}'),
            ('get', f'/api/users/{self.stranger.id}/activity'),
        ):
            body = {'role': 'viewer', 'department': 'x'}
            resp = getattr(self.client, method)(path, body, format='json')
            self.assertEqual(resp.status_code, 403, path)
        self.stranger.refresh_from_db()
        self.assertTrue(self.stranger.is_active)
        self.assertEqual(self.stranger.role, 'finance')

    def test_non_admin_roles_are_refused(self):
        client = APIClient()
        client.force_authenticate(user=self.finance)
        resp = client.get('/api/users')
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()['code'], 'access_denied')
        self.assertEqual(client.post('/api/users', {}, format='json').status_code, 403)
