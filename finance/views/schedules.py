"""Review schedule endpoints."""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from finance.permissions import EDIT_REPORTS, VIEW_REPORTS, HasCapability
from finance.responses import created, ok
from finance.serializers.schedules import (
    CommentSerializer, ReminderSerializer, ScheduleCreateSerializer, ScheduleListQuerySerializer,
    ScheduleUpdateSerializer, UpcomingQuerySerializer, format_comment, format_reminder, format_schedule,
)
from finance.services import schedules as svc


def create_from_request(request):
    s = ScheduleCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    schedule = svc.create_schedule(
        request.user,
        report_id=vd['reportId'],
        assigned_to=vd['assignedTo'],
        scheduled_date=vd['scheduledDate'],
        review_type=vd['reviewType'],
        priority=vd.get('priority'),
        notes=vd.get('notes', ''),
    )
    return created(format_schedule(schedule), message='Review scheduled')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def schedules(request):
    if request.method == 'POST':
        return create_from_request(request)

    q = ScheduleListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    items, pagination = svc.list_schedules(
        request.user,
        status=vd.get('status'),
        review_type=vd.get('reviewType'),
        assigned_to=vd.get('assignedTo'),
        page=vd.get('page'),
        limit=vd.get('limit'),
    )
    return ok([format_schedule(s) for s in items], pagination=pagination)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasCapability.of(VIEW_REPORTS)])
def upcoming(request):
    q = UpcomingQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    items = svc.upcoming_schedules(request.user, days=vd.get('days', 7), limit=vd.get('limit', 10))
    return ok([format_schedule(s) for s in items])


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasCapability.of(VIEW_REPORTS)])
def overdue(request):
    return ok([format_schedule(s) for s in svc.overdue_schedules(request.user)])


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def schedule_detail(request, schedule_id: int):
    if request.method == 'PUT':
        s = ScheduleUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        schedule = svc.update_schedule(request.user, schedule_id, s.to_model_values())
        return ok(format_schedule(schedule), message='Schedule updated')
    if request.method == 'DELETE':
        svc.delete_schedule(request.user, schedule_id)
        return ok(None, message='Schedule deleted')
    return ok(format_schedule(svc.get_schedule(request.user, schedule_id), detail=True))


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, HasCapability.of(EDIT_REPORTS)])
def complete(request, schedule_id: int):
    return ok(format_schedule(svc.complete_schedule(request.user, schedule_id)), message='Review completed')


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasCapability.of(VIEW_REPORTS)])
def comment(request, schedule_id: int):
    s = CommentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = svc.add_comment(request.user, schedule_id, s.validated_data['comment'])
    return created(format_comment(c), message='Comment added')


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasCapability.of(VIEW_REPORTS)])
def reminder(request, schedule_id: int):
    s = ReminderSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    r = svc.record_reminder(request.user, schedule_id, s.validated_data.get('reminderType', 'system'))
    return created(format_reminder(r), message='Reminder sent')
