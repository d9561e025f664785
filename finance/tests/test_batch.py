"""Archive and analysis batch jobs."""
import datetime as dt
from io import StringIO

import pytest
from dateutil.relativedelta import relativedelta
from django.core.management import call_command
from django.utils import timezone

from finance.models import ArchiveLog, FinancialAnalysis, FinancialReport, ReviewSchedule
from finance.services.analysis import build_insights, forecast_confidence, trend_significance
from finance.services.archive import archive_old_reports
from finance.services.hospital_settings import settings_for

pytestmark = pytest.mark.django_db


def _age(report, months):
    FinancialReport.objects.filter(id=report.id).update(created_at=timezone.now() - relativedelta(months=months))


def test_archive_with_nothing_to_do_writes_no_log(client_for, admin):
    resp = client_for(admin).post('/api/quick-actions/archive-reports', {'monthsOld': 24}, format='json')
    assert resp.status_code == 200
    data = resp.json()['data']
    assert data['totalArchived'] == 0
    assert data['reports'] == []
    assert data['archiveLog'] is None
    assert ArchiveLog.objects.count() == 0


def test_archive_only_old_approved_reports(client_for, admin, make_report):
    old = make_report(admin, status='approved', month=1)
    recent = make_report(admin, status='approved', month=2)
    old_draft = make_report(admin, month=3)
    _age(old, 30)
    _age(old_draft, 30)

    resp = client_for(admin).post(
        '/api/quick-actions/archive-reports', {'monthsOld': 24, 'archiveReason': 'year-end'}, format='json'
    )
    data = resp.json()['data']
    assert data['totalArchived'] == 1
    assert data['reports'] == [{'id': old.id, 'period': 'Januari 2024', 'type': 'monthly'}]
    assert data['archiveLog']['status'] == 'completed'
    assert data['archiveLog']['archiveReason'] == 'year-end'
    assert data['archiveLog']['archivedReports'][0]['reportId'] == old.id

    statuses = dict(FinancialReport.objects.values_list('id', 'status'))
    assert statuses == {old.id: 'archived', recent.id: 'approved', old_draft.id: 'draft'}
    versions = dict(FinancialReport.objects.values_list('id', 'version'))
    assert versions == {old.id: old.version + 1, recent.id: recent.version, old_draft.id: old_draft.version}


def test_archived_report_rejects_stale_version(client_for, admin, make_report):
    report = make_report(admin, status='approved')
    _age(report, 30)
    client = client_for(admin)
    client.post('/api/quick-actions/archive-reports', {'monthsOld': 24}, format='json')
    resp = client.put(f'/api/reports/{report.id}', {'notes': 'late', 'version': report.version}, format='json')
    assert resp.status_code == 409
    assert resp.json()['code'] == 'conflict'


def test_archive_defaults_to_hospital_retention(client_for, admin, make_report):
    hs = settings_for(admin.hospital_id)
    hs.reporting_settings = {**hs.reporting_settings, 'archiveAfterMonths': 1}
    hs.save()
    report = make_report(admin, status='approved')
    _age(report, 2)
    data = client_for(admin).post('/api/quick-actions/archive-reports', {}, format='json').json()['data']
    assert data['totalArchived'] == 1


def test_archive_needs_delete_capability_and_valid_months(client_for, admin, finance):
    assert client_for(finance).post('/api/quick-actions/archive-reports', {}, format='json').status_code == 403
    resp = client_for(admin).post('/api/quick-actions/archive-reports', {'monthsOld': 0}, format='json')
    assert resp.status_code == 400


def test_automatic_archive_command(admin, make_report):
    report = make_report(admin, status='approved')
    _age(report, 30)
    out = StringIO()
    call_command('archive_reports', stdout=out)
    report.refresh_from_db()
    assert report.status == 'archived'
    log = ArchiveLog.objects.get()
    assert log.archive_type == 'automatic'
    assert log.archived_by is None
    assert 'Archived 1 reports' in out.getvalue()


def test_archive_service_requires_hospital_without_actor():
    from finance.exceptions import ValidationFailure
    with pytest.raises(ValidationFailure):
        archive_old_reports(None, 12)


def test_archive_logs_listing(client_for, admin, make_report):
    report = make_report(admin, status='approved')
    _age(report, 30)
    client = client_for(admin)
    client.post('/api/quick-actions/archive-reports', {'monthsOld': 12}, format='json')
    logs = client.get('/api/quick-actions/archive-logs').json()['data']
    assert len(logs) == 1
    assert logs[0]['totalReportsArchived'] == 1


def test_analysis_needs_two_reports(client_for, finance, make_report):
    make_report(finance, status='approved')
    resp = client_for(finance).post('/api/quick-actions/financial-analysis', {}, format='json')
    assert resp.status_code == 422
    assert resp.json()['code'] == 'insufficient_data'
    assert FinancialAnalysis.objects.count() == 0


def test_analysis_compares_latest_two_reports(client_for, finance, viewer, make_report):
    make_report(finance, status='approved', month=1, revenue_patient_care=1000, expense_salaries=600)
    make_report(
        finance, status='approved', month=2, revenue_patient_care=1200, expense_salaries=600,
        asset_cash=50, liability_accounts_payable=100,
    )
    make_report(finance, status='draft', month=3, revenue_patient_care=99)

    resp = client_for(viewer).post(
        '/api/quick-actions/financial-analysis', {'analysisType': 'performance', 'months': 12}, format='json'
    )
    assert resp.status_code == 201
    data = resp.json()['data']
    assert data['status'] == 'completed'
    assert data['metrics']['revenueGrowth'] == {'current': 1200.0, 'previous': 1000.0, 'growthRate': 20.0}
    assert data['metrics']['liquidity']['currentRatio'] == 0.5
    assert [i['title'] for i in data['insights']] == [
        'Strong Revenue Growth', 'Healthy Profit Margin', 'Liquidity Concern',
    ]
    assert data['trends'][0]['direction'] == 'increasing'
    assert data['trends'][0]['significance'] == 'significant'
    assert data['forecasts'][0]['projectedValue'] == 1440.0
    assert data['forecasts'][0]['confidence'] == 75.0

    listed = client_for(viewer).get('/api/quick-actions/analyses').json()['data']
    assert [a['id'] for a in listed] == [data['id']]
    assert FinancialAnalysis.objects.get().reports.count() == 2


def test_insight_thresholds():
    assert build_insights(0, 10, 2, has_liabilities=True) == []
    titles = [i['title'] for i in build_insights(-6, 4, 0, has_liabilities=False)]
    assert titles == ['Revenue Decline', 'Low Profit Margin']
    assert forecast_confidence(0) == 85
    assert forecast_confidence(-100) == 60
    assert forecast_confidence(20) == 75
    assert trend_significance(6) == 'moderate'
    assert trend_significance(-3) == 'minor'


def test_review_reminder_command(admin, finance, make_report):
    report = make_report(admin)
    due = ReviewSchedule.objects.create(
        hospital_id=admin.hospital_id, report=report, assigned_to=finance, created_by=admin,
        scheduled_date=timezone.now() + dt.timedelta(days=3), review_type='monthly',
    )
    ReviewSchedule.objects.create(
        hospital_id=admin.hospital_id, report=report, assigned_to=finance, created_by=admin,
        scheduled_date=timezone.now() + dt.timedelta(days=5), review_type='special',
    )
    call_command('send_review_reminders', stdout=StringIO())
    call_command('send_review_reminders', stdout=StringIO())
    assert list(due.reminders.values_list('reminder_type', flat=True)) == ['system']
    assert ReviewSchedule.objects.exclude(id=due.id).get().reminders.count() == 0
