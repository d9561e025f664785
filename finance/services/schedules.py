"""
Review schedules.

A pending review whose date has passed is flipped to overdue by
:func:`reconcile_status`, which every read and write path below calls
explicitly.  Completed and cancelled reviews are terminal.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

import bleach
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from finance.exceptions import AccessDenied, InvalidTransition, NotFound, ValidationFailure
from finance.models import FinancialReport, ReviewComment, ReviewReminder, ReviewSchedule
from finance.permissions import (
    CREATE_REPORTS, DELETE_REPORTS, EDIT_REPORTS, OVERRIDE_LOCKS, VIEW_REPORTS,
    has_capability, require_capability,
)
from finance.services.audit import log_action
from finance.services.paging import paginate
from finance.services.realtime import notify_update

logger = logging.getLogger(__name__)
User = get_user_model()

OPEN_STATUSES = (ReviewSchedule.STATUS_PENDING, ReviewSchedule.STATUS_IN_PROGRESS)
EDITABLE_FIELDS = ('scheduled_date', 'review_type', 'priority', 'notes', 'assigned_to')

ACTION_COMPLETE = 'complete'
ACTION_EDIT = 'edit'
ACTION_DELETE = 'delete'


def _can_transition(current: str, new: str) -> bool:
    """Return True if a review may move from ``current`` to ``new``."""
    transitions = {
        ReviewSchedule.STATUS_PENDING: [
            ReviewSchedule.STATUS_IN_PROGRESS, ReviewSchedule.STATUS_COMPLETED,
            ReviewSchedule.STATUS_CANCELLED, ReviewSchedule.STATUS_OVERDUE,
        ],
        ReviewSchedule.STATUS_IN_PROGRESS: [ReviewSchedule.STATUS_COMPLETED, ReviewSchedule.STATUS_CANCELLED],
        ReviewSchedule.STATUS_OVERDUE: [
            ReviewSchedule.STATUS_IN_PROGRESS, ReviewSchedule.STATUS_COMPLETED, ReviewSchedule.STATUS_CANCELLED,
        ],
        ReviewSchedule.STATUS_COMPLETED: [],
        ReviewSchedule.STATUS_CANCELLED: [],
    }
    return new in transitions.get(current, [])


def reconcile_status(schedule: ReviewSchedule, now: Optional[dt.datetime] = None) -> bool:
    """Flip a past-due pending review to overdue in memory; True if it changed."""
    now = now or timezone.now()
    if schedule.status == ReviewSchedule.STATUS_PENDING and schedule.scheduled_date < now:
        schedule.status = ReviewSchedule.STATUS_OVERDUE
        return True
    return False


def reconcile_overdue(hospital_id: str, now: Optional[dt.datetime] = None) -> int:
    """Bulk form of :func:`reconcile_status` for one hospital."""
    now = now or timezone.now()
    return ReviewSchedule.objects.filter(
        hospital_id=hospital_id, status=ReviewSchedule.STATUS_PENDING, scheduled_date__lt=now
    ).update(status=ReviewSchedule.STATUS_OVERDUE, updated_at=now)


def can_act_on_schedule(actor, schedule: ReviewSchedule, action: str) -> bool:
    if not actor or schedule.hospital_id != getattr(actor, 'hospital_id', None):
        return False
    if has_capability(actor, OVERRIDE_LOCKS):
        return True
    if action == ACTION_COMPLETE:
        return schedule.assigned_to_id == actor.id
    if action in (ACTION_EDIT, ACTION_DELETE):
        return actor.id in (schedule.created_by_id, schedule.assigned_to_id)
    return False


def _require_action(actor, schedule: ReviewSchedule, action: str) -> None:
    if not can_act_on_schedule(actor, schedule, action):
        raise AccessDenied(f'Not authorized to {action} this schedule.')


def _changed(actor, schedule: ReviewSchedule, action: str, detail: Optional[dict] = None) -> None:
    log_action(user=actor, action=action, object_type='schedule', object_id=schedule.id,
               detail={'status': schedule.status, **(detail or {})})
    notify_update(schedule.hospital_id, 'schedule', schedule.id, schedule.status)
    logger.info("schedule %s %s by %s -> %s", schedule.id, action, actor.username, schedule.status)


def _scoped(actor):
    return ReviewSchedule.objects.filter(hospital_id=actor.hospital_id).select_related(
        'report', 'assigned_to', 'created_by', 'completed_by'
    )


def _fetch(actor, schedule_id, *, lock: bool = False) -> ReviewSchedule:
    qs = ReviewSchedule.objects.select_for_update() if lock else ReviewSchedule.objects.select_related(
        'report', 'assigned_to', 'created_by', 'completed_by'
    )
    schedule = qs.filter(pk=schedule_id).first()
    if schedule is None:
        raise NotFound('Schedule not found.')
    if schedule.hospital_id != actor.hospital_id:
        raise AccessDenied('Schedule belongs to another hospital.')
    return schedule


def _persist_reconciled(schedule: ReviewSchedule) -> ReviewSchedule:
    if reconcile_status(schedule):
        schedule.save(update_fields=['status', 'updated_at'])
    return schedule


def _resolve_assignee(actor, user_id) -> User:
    assignee = User.objects.filter(pk=user_id, is_active=True).first()
    if assignee is None:
        raise NotFound('Assigned user not found.')
    if assignee.hospital_id != actor.hospital_id:
        raise AccessDenied('Assigned user belongs to another hospital.')
    return assignee


def _clean(text: str) -> str:
    return bleach.clean(text or '', tags=[], strip=True).strip()


# ---------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------
def list_schedules(actor, *, status=None, review_type=None, assigned_to=None, page=1, limit=10):
    require_capability(actor, VIEW_REPORTS)
    reconcile_overdue(actor.hospital_id)
    qs = _scoped(actor)
    if status:
        qs = qs.filter(status=status)
    if review_type:
        qs = qs.filter(review_type=review_type)
    if assigned_to:
        qs = qs.filter(assigned_to_id=assigned_to)
    return paginate(qs.order_by('-scheduled_date', '-id'), page, limit)


def get_schedule(actor, schedule_id) -> ReviewSchedule:
    require_capability(actor, VIEW_REPORTS)
    return _persist_reconciled(_fetch(actor, schedule_id))


def upcoming_schedules(actor, days: int = 7, limit: int = 10) -> list[ReviewSchedule]:
    require_capability(actor, VIEW_REPORTS)
    now = timezone.now()
    return list(
        _scoped(actor)
        .filter(status__in=OPEN_STATUSES, scheduled_date__gte=now, scheduled_date__lte=now + dt.timedelta(days=days))
        .order_by('scheduled_date', 'id')[:limit]
    )


def overdue_schedules(actor) -> list[ReviewSchedule]:
    require_capability(actor, VIEW_REPORTS)
    reconcile_overdue(actor.hospital_id)
    return list(
        _scoped(actor)
        .filter(
            status__in=OPEN_STATUSES + (ReviewSchedule.STATUS_OVERDUE,),
            scheduled_date__lt=timezone.now(),
        )
        .order_by('scheduled_date', 'id')
    )


def recent_schedules(actor, status=None, limit: int = 10) -> list[ReviewSchedule]:
    require_capability(actor, VIEW_REPORTS)
    reconcile_overdue(actor.hospital_id)
    qs = _scoped(actor)
    if status:
        qs = qs.filter(status=status)
    return list(qs.order_by('-scheduled_date', '-id')[:limit])


# ---------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------
def create_schedule(actor, *, report_id, assigned_to, scheduled_date, review_type,
                    priority='medium', notes='') -> ReviewSchedule:
    require_capability(actor, CREATE_REPORTS)
    report = FinancialReport.objects.filter(pk=report_id).first()
    if report is None:
        raise NotFound('Report not found.')
    if report.hospital_id != actor.hospital_id:
        raise AccessDenied('Access denied to this report.')
    assignee = _resolve_assignee(actor, assigned_to)

    schedule = ReviewSchedule(
        hospital_id=actor.hospital_id,
        report=report,
        assigned_to=assignee,
        scheduled_date=scheduled_date,
        review_type=review_type,
        priority=priority or 'medium',
        notes=_clean(notes),
        created_by=actor,
    )
    reconcile_status(schedule)
    schedule.save()
    _changed(actor, schedule, 'schedule_create', {'report': report.id})
    return schedule


def update_schedule(actor, schedule_id, values: dict) -> ReviewSchedule:
    require_capability(actor, EDIT_REPORTS)
    unknown = set(values) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationFailure('Unknown schedule fields.', errors={k: ['Not allowed.'] for k in sorted(unknown)})
    with transaction.atomic():
        schedule = _fetch(actor, schedule_id, lock=True)
        _require_action(actor, schedule, ACTION_EDIT)
        if schedule.status in (ReviewSchedule.STATUS_COMPLETED, ReviewSchedule.STATUS_CANCELLED):
            raise InvalidTransition(f'Schedule is {schedule.status}.')
        for field, value in values.items():
            if field == 'assigned_to':
                value = _resolve_assignee(actor, value)
            elif field == 'notes':
                value = _clean(value)
            setattr(schedule, field, value)
        reconcile_status(schedule)
        schedule.save()
    _changed(actor, schedule, 'schedule_update', {'fields': sorted(values)})
    return schedule


def change_status(actor, schedule_id, new_status: str) -> ReviewSchedule:
    if new_status == ReviewSchedule.STATUS_COMPLETED:
        return complete_schedule(actor, schedule_id)
    require_capability(actor, EDIT_REPORTS)
    if new_status not in dict(ReviewSchedule.STATUS_CHOICES):
        raise ValidationFailure(f'Unknown status {new_status}.', errors={'status': ['Invalid choice.']})
    with transaction.atomic():
        schedule = _fetch(actor, schedule_id, lock=True)
        _require_action(actor, schedule, ACTION_EDIT)
        reconcile_status(schedule)
        if not _can_transition(schedule.status, new_status):
            raise InvalidTransition(f'Cannot move schedule from {schedule.status} to {new_status}.')
        previous = schedule.status
        schedule.status = new_status
        schedule.save()
    _changed(actor, schedule, 'schedule_status', {'from': previous})
    return schedule


def complete_schedule(actor, schedule_id) -> ReviewSchedule:
    require_capability(actor, EDIT_REPORTS)
    with transaction.atomic():
        schedule = _fetch(actor, schedule_id, lock=True)
        _require_action(actor, schedule, ACTION_COMPLETE)
        if schedule.status == ReviewSchedule.STATUS_COMPLETED:
            raise InvalidTransition('Schedule is already completed.')
        if not _can_transition(schedule.status, ReviewSchedule.STATUS_COMPLETED):
            raise InvalidTransition(f'Cannot complete a {schedule.status} schedule.')
        schedule.status = ReviewSchedule.STATUS_COMPLETED
        schedule.completed_by = actor
        schedule.completed_at = timezone.now()
        schedule.save()
    _changed(actor, schedule, 'schedule_complete')
    return schedule


def add_comment(actor, schedule_id, text: str) -> ReviewComment:
    require_capability(actor, VIEW_REPORTS)
    text = _clean(text)
    if not text:
        raise ValidationFailure('Comment is required.', errors={'comment': ['This field may not be blank.']})
    if len(text) > 500:
        raise ValidationFailure('Comment is too long.', errors={'comment': ['At most 500 characters.']})
    schedule = _persist_reconciled(_fetch(actor, schedule_id))
    comment = ReviewComment.objects.create(schedule=schedule, comment=text, commented_by=actor)
    _changed(actor, schedule, 'schedule_comment', {'comment': comment.id})
    return comment


def record_reminder(actor, schedule_id, reminder_type: str = 'system') -> ReviewReminder:
    require_capability(actor, VIEW_REPORTS)
    if reminder_type not in dict(ReviewReminder.TYPE_CHOICES):
        raise ValidationFailure(f'Unknown reminder type {reminder_type}.', errors={'reminderType': ['Invalid choice.']})
    schedule = _persist_reconciled(_fetch(actor, schedule_id))
    return send_reminder(schedule, reminder_type=reminder_type, actor=actor)


def send_reminder(schedule: ReviewSchedule, *, reminder_type: str = 'system', actor=None) -> ReviewReminder:
    """Record that the assignee of ``schedule`` was reminded."""
    reminder = ReviewReminder.objects.create(
        schedule=schedule, sent_to=schedule.assigned_to, reminder_type=reminder_type
    )
    log_action(user=actor, action='schedule_reminder', object_type='schedule', object_id=schedule.id,
               detail={'type': reminder_type, 'to': schedule.assigned_to_id})
    notify_update(schedule.hospital_id, 'schedule', schedule.id, schedule.status)
    return reminder


def delete_schedule(actor, schedule_id) -> None:
    require_capability(actor, DELETE_REPORTS)
    with transaction.atomic():
        schedule = _fetch(actor, schedule_id, lock=True)
        _require_action(actor, schedule, ACTION_DELETE)
        sid, hospital_id = schedule.id, schedule.hospital_id
        schedule.delete()
    log_action(user=actor, action='schedule_delete', object_type='schedule', object_id=sid)
    notify_update(hospital_id, 'schedule', sid, 'deleted')
    logger.info("schedule %s deleted by %s", sid, actor.username)
