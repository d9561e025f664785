"""The project-wide exception handler renders every failure as one envelope."""
from django.db import IntegrityError

from finance.exceptions import InsufficientData, api_exception_handler


def test_integrity_error_becomes_conflict():
    resp = api_exception_handler(IntegrityError('UNIQUE constraint failed: finance_user.username'), {})
    assert resp.status_code == 409
    assert resp.data == {
        'success': False, 'message': 'The record conflicts with existing data.', 'code': 'conflict',
    }


def test_domain_error_keeps_its_code():
    resp = api_exception_handler(InsufficientData('Need at least 2 approved reports.'), {})
    assert resp.status_code == 422
    assert resp.data['code'] == 'insufficient_data'


def test_unexpected_error_hides_details():
    resp = api_exception_handler(RuntimeError('secret stack detail'), {})
    assert resp.status_code == 500
    assert resp.data == {'success': False, 'message': 'Server error', 'code': 'server_error'}
