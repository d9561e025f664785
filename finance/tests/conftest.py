import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from finance import ledger
from finance.models import FinancialReport, User

PASSWORD = 'P@ssw0rd1'


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make(username, role=User.ROLE_FINANCE, hospital_id='hospital-1', **extra):
        return User.objects.create_user(
            username=username,
            password=PASSWORD,
            email=f'{username}@example.com',
            role=role,
            hospital_id=hospital_id,
            **extra,
        )
    return _make


@pytest.fixture
def admin(make_user):
    return make_user('admin1', User.ROLE_ADMIN)


@pytest.fixture
def finance(make_user):
    return make_user('finance1', User.ROLE_FINANCE)


@pytest.fixture
def viewer(make_user):
    return make_user('viewer1', User.ROLE_VIEWER)


@pytest.fixture
def other_admin(make_user):
    return make_user('admin2', User.ROLE_ADMIN, hospital_id='hospital-2')


@pytest.fixture
def client_for():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def make_report(db):
    """Persist a report directly, bypassing lifecycle rules."""
    def _make(user, *, status=FinancialReport.STATUS_DRAFT, report_type='monthly', year=2024, month=1,
              quarter=None, **amounts):
        if report_type != 'monthly':
            month = None
        report = FinancialReport(
            hospital_id=user.hospital_id,
            created_by=user,
            report_type=report_type,
            year=year,
            month=month,
            quarter=quarter,
            period=ledger.period_label(report_type, year, month, quarter),
            status=status,
            **amounts,
        )
        report.save()
        return report
    return _make


@pytest.fixture
def report_payload():
    def _payload(**overrides):
        body = {
            'reportType': 'monthly',
            'year': 2024,
            'month': 1,
            'revenue': {'patientCare': '1000.00'},
            'expenses': {'salaries': '600.00'},
            'tax': {'rate': '0.25', 'deductions': '50.00'},
            'notes': 'January close',
        }
        body.update(overrides)
        return body
    return _payload
