import pytest

from finance.services.dashboard import EMPTY_RATIOS, EMPTY_STATS

pytestmark = pytest.mark.django_db


def test_empty_hospital_gets_zero_shapes(client_for, viewer):
    client = client_for(viewer)
    assert client.get('/api/dashboard/stats').json()['data'] == EMPTY_STATS
    assert client.get('/api/dashboard/ratios').json()['data'] == EMPTY_RATIOS
    assert client.get('/api/dashboard/charts/revenue').json()['data'] == []
    assert client.get('/api/dashboard/charts/balance-sheet').json()['data'] == []
    assert client.get('/api/dashboard/activity').json()['data'] == []
    analysis = client.get('/api/dashboard/analysis', {'year': 2024}).json()['data']
    assert analysis['growth'] == {'revenue': 0, 'expenses': 0, 'profit': 0}


def test_drafts_do_not_count(client_for, viewer, make_report):
    make_report(viewer, revenue_patient_care=1000)
    assert client_for(viewer).get('/api/dashboard/stats').json()['data'] == EMPTY_STATS


def test_ratios_from_latest_report(client_for, finance, make_report):
    make_report(
        finance, status='approved',
        revenue_patient_care=1000, expense_salaries=600,
        asset_cash=200, liability_accounts_payable=100, equity_capital=100,
        tax_rate='0.25', tax_deductions=0,
    )
    data = client_for(finance).get('/api/dashboard/ratios').json()['data']
    assert data == {
        'currentRatio': 2.0,
        'debtToEquityRatio': 0.25,
        'profitMargin': 40.0,
        'assetTurnover': 5.0,
        'returnOnAssets': 200.0,
        'returnOnEquity': 100.0,
    }


def test_zero_denominators_give_zero_ratios(client_for, finance, make_report):
    # no liabilities at all
    make_report(finance, status='approved', month=1, revenue_patient_care=1000, asset_cash=500)
    stats = client_for(finance).get('/api/dashboard/stats').json()['data']
    assert stats['currentRatio'] == 0
    assert stats['debtToEquityRatio'] == 0

    # liabilities but no equity
    make_report(finance, status='approved', month=2, liability_accounts_payable=100)
    ratios = client_for(finance).get('/api/dashboard/ratios').json()['data']
    assert ratios['debtToEquityRatio'] == 0
    assert ratios['returnOnEquity'] == 0


def test_stats_are_cached_until_a_report_changes(client_for, finance, make_report):
    client = client_for(finance)
    make_report(finance, month=1, status='submitted', revenue_patient_care=1000)
    assert client.get('/api/dashboard/stats').json()['data']['totalRevenue'] == 1000.0

    # written behind the service layer, so nothing invalidates the cache
    make_report(finance, month=2, status='approved', revenue_patient_care=2000)
    assert client.get('/api/dashboard/stats').json()['data']['totalRevenue'] == 1000.0

    draft = make_report(finance, month=3, revenue_patient_care=3000)
    assert client.patch(f'/api/reports/{draft.id}/submit').status_code == 200
    stats = client.get('/api/dashboard/stats').json()['data']
    assert stats['totalRevenue'] == 3000.0
    assert stats['revenueGrowth'] == 50.0


def test_charts_are_scaled(client_for, finance, make_report):
    make_report(
        finance, status='approved', month=1,
        revenue_patient_care=2_000_000, expense_salaries=500_000,
        asset_buildings=3_000_000_000, liability_long_term_debt=1_000_000_000,
    )
    make_report(finance, status='approved', year=2023, month=1, revenue_patient_care=1)
    client = client_for(finance)

    revenue = client.get('/api/dashboard/charts/revenue', {'year': 2024}).json()['data']
    assert revenue == [{
        'name': 'Januari 2024',
        'value': 2.0,
        'breakdown': {
            'patientCare': 2.0, 'emergencyServices': 0.0, 'surgery': 0.0,
            'laboratory': 0.0, 'pharmacy': 0.0, 'other': 0.0,
        },
    }]

    profit = client.get('/api/dashboard/charts/profit', {'year': 2024}).json()['data']
    assert profit[0]['profit'] == 1.5
    assert profit[0]['margin'] == 75.0

    expenses = client.get('/api/dashboard/charts/expenses', {'year': 2024}).json()['data']
    assert expenses[0]['value'] == 0.5

    sheet = client.get('/api/dashboard/charts/balance-sheet').json()['data']
    assert [p['name'] for p in sheet] == ['Aset', 'Kewajiban', 'Ekuitas']


def test_comparative_analysis(client_for, finance, make_report):
    make_report(finance, status='approved', year=2023, revenue_patient_care=100, expense_salaries=50)
    make_report(finance, status='approved', year=2024, revenue_patient_care=150, expense_salaries=50)
    data = client_for(finance).get('/api/dashboard/analysis', {'year': 2024}).json()['data']
    assert data['currentYear'] == {'year': 2024, 'revenue': 150.0, 'expenses': 50.0, 'profit': 100.0}
    assert data['growth']['revenue'] == 50.0
    assert data['growth']['profit'] == 100.0


def test_recent_activity(client_for, finance, make_report):
    report = make_report(finance)
    client = client_for(finance)
    client.patch(f'/api/reports/{report.id}/submit')
    data = client.get('/api/dashboard/activity', {'limit': 5}).json()['data']
    assert data[0]['action'] == 'submitted'
    assert data[0]['data']['reportId'] == report.id


def test_dashboard_requires_authentication(client_for):
    resp = client_for(None).get('/api/dashboard/stats')
    assert resp.status_code == 401
    assert resp.json()['success'] is False
