import datetime as dt

import pytest
from django.utils import timezone

from finance.models import ReviewSchedule
from finance.services.schedules import ACTION_COMPLETE, ACTION_DELETE, ACTION_EDIT, can_act_on_schedule, reconcile_status

pytestmark = pytest.mark.django_db


@pytest.fixture
def make_schedule(make_report):
    def _make(creator, assignee, *, when=None, status=ReviewSchedule.STATUS_PENDING, report=None):
        report = report or make_report(creator)
        return ReviewSchedule.objects.create(
            hospital_id=creator.hospital_id,
            report=report,
            assigned_to=assignee,
            created_by=creator,
            scheduled_date=when or timezone.now() + dt.timedelta(days=3),
            review_type='monthly',
            status=status,
        )
    return _make


def test_reconcile_status_flips_past_pending_only():
    now = timezone.now()
    past = now - dt.timedelta(days=1)
    pending = ReviewSchedule(status='pending', scheduled_date=past)
    assert reconcile_status(pending, now) is True
    assert pending.status == 'overdue'
    assert reconcile_status(pending, now) is False

    for terminal in ('completed', 'cancelled', 'in-progress'):
        s = ReviewSchedule(status=terminal, scheduled_date=past)
        assert reconcile_status(s, now) is False
        assert s.status == terminal

    future = ReviewSchedule(status='pending', scheduled_date=now + dt.timedelta(hours=1))
    assert reconcile_status(future, now) is False


def test_create_schedule_via_api(client_for, admin, finance, make_report):
    report = make_report(admin)
    resp = client_for(admin).post('/api/schedules', {
        'reportId': report.id,
        'assignedTo': finance.id,
        'scheduledDate': (timezone.now() + dt.timedelta(days=2)).isoformat(),
        'reviewType': 'monthly',
        'priority': 'high',
        'notes': '<b>check</b> cash',
    }, format='json')
    assert resp.status_code == 201
    data = resp.json()['data']
    assert data['status'] == 'pending'
    assert data['assignedTo']['id'] == finance.id
    assert data['report']['id'] == report.id
    assert data['notes'] == 'check cash'
    assert data['isOverdue'] is False


def test_create_in_the_past_is_overdue_immediately(client_for, admin, finance, make_report):
    report = make_report(admin)
    resp = client_for(admin).post('/api/schedules', {
        'reportId': report.id,
        'assignedTo': finance.id,
        'scheduledDate': '2021-01-01T00:00:00Z',
        'reviewType': 'audit',
    }, format='json')
    assert resp.json()['data']['status'] == 'overdue'


def test_past_pending_becomes_overdue_on_read(client_for, admin, finance, make_schedule):
    s = make_schedule(admin, finance, when=timezone.now() - dt.timedelta(days=1))
    data = client_for(finance).get(f'/api/schedules/{s.id}').json()['data']
    assert data['status'] == 'overdue'
    assert data['isOverdue'] is True
    s.refresh_from_db()
    assert s.status == 'overdue'


def test_completed_never_auto_transitions(client_for, admin, finance, make_schedule):
    s = make_schedule(admin, finance, when=timezone.now() - dt.timedelta(days=5), status='completed')
    client_for(finance).get('/api/schedules')
    s.refresh_from_db()
    assert s.status == 'completed'


def test_list_reconciles_in_bulk_and_filters(client_for, admin, finance, make_schedule, make_report):
    make_schedule(admin, finance, when=timezone.now() - dt.timedelta(days=1))
    make_schedule(admin, finance, report=make_report(admin, month=2))
    body = client_for(finance).get('/api/schedules', {'status': 'overdue'}).json()
    assert body['pagination']['total'] == 1
    assert body['data'][0]['status'] == 'overdue'


def test_complete_requires_assignee(client_for, admin, finance, make_user, make_schedule):
    other = make_user('finance2')
    s = make_schedule(finance, other)
    resp = client_for(finance).patch(f'/api/schedules/{s.id}/complete')
    assert resp.status_code == 403

    resp = client_for(other).patch(f'/api/schedules/{s.id}/complete')
    assert resp.status_code == 200
    data = resp.json()['data']
    assert data['status'] == 'completed'
    assert data['completedBy']['id'] == other.id

    again = client_for(admin).patch(f'/api/schedules/{s.id}/complete')
    assert again.status_code == 409


def test_can_act_on_schedule_rules(admin, finance, viewer, make_user, make_schedule, other_admin):
    assignee = make_user('finance2')
    s = make_schedule(finance, assignee)
    assert can_act_on_schedule(assignee, s, ACTION_COMPLETE)
    assert not can_act_on_schedule(finance, s, ACTION_COMPLETE)
    assert can_act_on_schedule(finance, s, ACTION_EDIT)
    assert can_act_on_schedule(assignee, s, ACTION_DELETE)
    assert not can_act_on_schedule(viewer, s, ACTION_EDIT)
    assert can_act_on_schedule(admin, s, ACTION_COMPLETE)
    assert not can_act_on_schedule(other_admin, s, ACTION_EDIT)


def test_status_transitions_follow_table(client_for, admin, finance, make_schedule):
    s = make_schedule(admin, finance)
    client = client_for(finance)
    url = f'/api/quick-actions/schedule/{s.id}/status'
    assert client.patch(url, {'status': 'in-progress'}, format='json').json()['data']['status'] == 'in-progress'
    assert client.patch(url, {'status': 'pending'}, format='json').status_code == 409
    assert client.patch(url, {'status': 'cancelled'}, format='json').status_code == 200
    resp = client.patch(url, {'status': 'in-progress'}, format='json')
    assert resp.status_code == 409
    assert resp.json()['code'] == 'invalid_transition'


def test_update_schedule(client_for, admin, finance, make_schedule):
    s = make_schedule(admin, finance)
    resp = client_for(finance).put(f'/api/schedules/{s.id}', {'priority': 'urgent', 'notes': 'bring ledger'},
                                  format='json')
    assert resp.status_code == 200
    assert resp.json()['data']['priority'] == 'urgent'


def test_comments_are_append_only_and_sanitised(client_for, admin, finance, viewer, make_schedule):
    s = make_schedule(admin, finance)
    resp = client_for(viewer).post(f'/api/schedules/{s.id}/comment', {'comment': '<i>looks</i> fine'}, format='json')
    assert resp.status_code == 201
    assert resp.json()['data']['comment'] == 'looks fine'
    client_for(finance).post(f'/api/schedules/{s.id}/comment', {'comment': 'thanks'}, format='json')

    detail = client_for(viewer).get(f'/api/schedules/{s.id}').json()['data']
    assert [c['comment'] for c in detail['reviewComments']] == ['looks fine', 'thanks']

    too_long = client_for(viewer).post(f'/api/schedules/{s.id}/comment', {'comment': 'x' * 501}, format='json')
    assert too_long.status_code == 400


def test_reminder_is_recorded(client_for, admin, finance, make_schedule):
    s = make_schedule(admin, finance)
    resp = client_for(admin).post(f'/api/schedules/{s.id}/reminder', {'reminderType': 'email'}, format='json')
    assert resp.status_code == 201
    assert resp.json()['data']['sentTo']['id'] == finance.id
    assert s.reminders.count() == 1


def test_upcoming_and_overdue(client_for, admin, finance, make_schedule, make_report):
    soon = make_schedule(admin, finance, when=timezone.now() + dt.timedelta(days=2))
    make_schedule(admin, finance, when=timezone.now() + dt.timedelta(days=30), report=make_report(admin, month=2))
    late = make_schedule(admin, finance, when=timezone.now() - dt.timedelta(days=2), report=make_report(admin, month=3))
    client = client_for(finance)

    upcoming = client.get('/api/schedules/upcoming').json()['data']
    assert [s['id'] for s in upcoming] == [soon.id]
    assert len(client.get('/api/schedules/upcoming', {'days': 60}).json()['data']) == 2

    overdue = client.get('/api/schedules/overdue').json()['data']
    assert [s['id'] for s in overdue] == [late.id]


def test_delete_schedule_by_creator(client_for, admin, finance, make_schedule):
    s = make_schedule(admin, finance)
    assert client_for(finance).delete(f'/api/schedules/{s.id}').status_code == 403
    assert client_for(admin).delete(f'/api/schedules/{s.id}').status_code == 200
    assert not ReviewSchedule.objects.filter(id=s.id).exists()


def test_quick_action_schedule_list(client_for, admin, finance, make_schedule):
    make_schedule(admin, finance)
    data = client_for(finance).get('/api/quick-actions/schedules', {'status': 'pending'}).json()['data']
    assert len(data) == 1
