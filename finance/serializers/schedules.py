import bleach
from django.utils import timezone
from rest_framework import serializers

from finance.models import ReviewReminder, ReviewSchedule
from finance.serializers.reports import format_user

REVIEW_TYPES = [c for c, _ in ReviewSchedule.REVIEW_TYPE_CHOICES]
PRIORITIES = [c for c, _ in ReviewSchedule.PRIORITY_CHOICES]
STATUSES = [c for c, _ in ReviewSchedule.STATUS_CHOICES]


class ScheduleCreateSerializer(serializers.Serializer):
    reportId = serializers.IntegerField(min_value=1)
    assignedTo = serializers.IntegerField(min_value=1)
    scheduledDate = serializers.DateTimeField()
    reviewType = serializers.ChoiceField(choices=REVIEW_TYPES)
    priority = serializers.ChoiceField(choices=PRIORITIES, required=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), tags=[], strip=True)


class ScheduleUpdateSerializer(serializers.Serializer):
    assignedTo = serializers.IntegerField(min_value=1, required=False)
    scheduledDate = serializers.DateTimeField(required=False)
    reviewType = serializers.ChoiceField(choices=REVIEW_TYPES, required=False)
    priority = serializers.ChoiceField(choices=PRIORITIES, required=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    def to_model_values(self) -> dict:
        mapping = {
            'assignedTo': 'assigned_to',
            'scheduledDate': 'scheduled_date',
            'reviewType': 'review_type',
            'priority': 'priority',
            'notes': 'notes',
        }
        return {mapping[k]: v for k, v in self.validated_data.items()}


class ScheduleStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUSES)


class CommentSerializer(serializers.Serializer):
    comment = serializers.CharField(max_length=500)


class ReminderSerializer(serializers.Serializer):
    reminderType = serializers.ChoiceField(choices=[c for c, _ in ReviewReminder.TYPE_CHOICES], required=False)


class ScheduleListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    reviewType = serializers.ChoiceField(choices=REVIEW_TYPES, required=False)
    assignedTo = serializers.IntegerField(min_value=1, required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


def format_comment(c):
    return {
        'id': c.id,
        'comment': c.comment,
        'commentedBy': format_user(c.commented_by),
        'commentedAt': c.commented_at,
    }


def format_reminder(r):
    return {'id': r.id, 'sentAt': r.sent_at, 'sentTo': format_user(r.sent_to), 'reminderType': r.reminder_type}


def format_schedule(s: ReviewSchedule, *, detail: bool = False) -> dict:
    data = {
        'id': s.id,
        'hospitalId': s.hospital_id,
        'report': {'id': s.report_id, 'period': s.report.period, 'reportType': s.report.report_type},
        'scheduledDate': s.scheduled_date,
        'reviewType': s.review_type,
        'status': s.status,
        'priority': s.priority,
        'notes': s.notes,
        'assignedTo': format_user(s.assigned_to),
        'createdBy': format_user(s.created_by),
        'completedBy': format_user(s.completed_by),
        'completedAt': s.completed_at,
        'isOverdue': s.status not in ('completed', 'cancelled') and s.scheduled_date < timezone.now(),
        'createdAt': s.created_at,
        'updatedAt': s.updated_at,
    }
    if detail:
        data['reviewComments'] = [format_comment(c) for c in s.comments.select_related('commented_by')]
        data['reminders'] = [format_reminder(r) for r in s.reminders.select_related('sent_to')]
    return data


class UpcomingQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=1, max_value=365, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)
