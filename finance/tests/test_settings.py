import pytest

from finance.models import DEFAULT_BACKUP_SETTINGS, DEFAULT_TAX_SETTINGS, HospitalSettings

pytestmark = pytest.mark.django_db


def test_settings_created_lazily_with_defaults(client_for, admin):
    assert not HospitalSettings.objects.exists()
    data = client_for(admin).get('/api/settings').json()['data']
    assert data['hospitalId'] == 'hospital-1'
    assert data['currency'] == 'IDR'
    assert data['taxSettings'] == DEFAULT_TAX_SETTINGS
    assert HospitalSettings.objects.count() == 1


def test_partial_update_merges_sections(client_for, admin):
    client = client_for(admin)
    resp = client.put('/api/settings', {
        'hospitalName': 'RS Harapan',
        'taxSettings': {'corporateTaxRate': 0.22},
    }, format='json')
    assert resp.status_code == 200
    data = resp.json()['data']
    assert data['hospitalName'] == 'RS Harapan'
    assert data['taxSettings']['corporateTaxRate'] == 0.22
    assert data['taxSettings']['vatRate'] == DEFAULT_TAX_SETTINGS['vatRate']


def test_new_reports_use_configured_tax_rate(client_for, admin, report_payload):
    client = client_for(admin)
    client.put('/api/settings', {'taxSettings': {'corporateTaxRate': 0.1}}, format='json')
    payload = report_payload(tax={'deductions': '0'})
    data = client.post('/api/reports', payload, format='json').json()['data']
    assert data['tax']['rate'] == 0.1
    assert data['tax']['amount'] == 40.0


def test_invalid_settings_rejected(client_for, admin):
    client = client_for(admin)
    assert client.put('/api/settings', {'fiscalYearStart': 13}, format='json').status_code == 400
    assert client.put('/api/settings', {'taxSettings': {'vatRate': 2}}, format='json').status_code == 400
    assert client.put('/api/settings', {}, format='json').status_code == 400


def test_reset_restores_defaults(client_for, admin):
    client = client_for(admin)
    client.put('/api/settings', {'currency': 'USD', 'backupSettings': {'retentionDays': 7}}, format='json')
    data = client.post('/api/settings/reset').json()['data']
    assert data['currency'] == 'IDR'
    assert data['backupSettings'] == DEFAULT_BACKUP_SETTINGS


def test_backup_settings(client_for, admin):
    client = client_for(admin)
    assert client.get('/api/settings/backup').json()['data'] == DEFAULT_BACKUP_SETTINGS
    resp = client.put('/api/settings/backup', {'backupFrequency': 'daily'}, format='json')
    assert resp.json()['data'] == {**DEFAULT_BACKUP_SETTINGS, 'backupFrequency': 'daily'}
    assert client.put('/api/settings/backup', {'backupFrequency': 'hourly'}, format='json').status_code == 400


def test_only_admins_manage_settings(client_for, finance, viewer):
    for user in (finance, viewer):
        resp = client_for(user).get('/api/settings')
        assert resp.status_code == 403
        assert resp.json()['code'] == 'access_denied'
