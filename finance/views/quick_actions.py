"""
Quick actions: review scheduling shortcuts and the two batch jobs
(archiving old reports, generating a financial analysis).

Batch endpoints share a per-user throttle.
"""
from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated

from finance.permissions import CREATE_REPORTS, DELETE_REPORTS, EDIT_REPORTS, VIEW_REPORTS, HasCapability
from finance.responses import created, ok
from finance.serializers.quick_actions import (
    AnalysisRequestSerializer, ArchiveRequestSerializer, LimitQuerySerializer, format_analysis, format_archive_log,
)
from finance.serializers.schedules import ScheduleStatusSerializer, STATUSES, format_schedule
from finance.services import analysis, archive, schedules
from finance.throttling import BatchRateThrottle
from finance.views.schedules import create_from_request


class RecentSchedulesQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


def _limit(request, default: int) -> int:
    q = LimitQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return q.validated_data.get('limit', default)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasCapability.of(CREATE_REPORTS)])
def schedule_review(request):
    return create_from_request(request)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasCapability.of(VIEW_REPORTS)])
def review_schedules(request):
    q = RecentSchedulesQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    items = schedules.recent_schedules(
        request.user, status=q.validated_data.get('status'), limit=q.validated_data.get('limit', 10)
    )
    return ok([format_schedule(s) for s in items])


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, HasCapability.of(EDIT_REPORTS)])
def schedule_status(request, schedule_id: int):
    s = ScheduleStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    schedule = schedules.change_status(request.user, schedule_id, s.validated_data['status'])
    return ok(format_schedule(schedule), message='Review status updated')


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasCapability.of(DELETE_REPORTS)])
@throttle_classes([BatchRateThrottle])
def archive_reports(request):
    s = ArchiveRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = archive.archive_old_reports(
        request.user,
        months_old=s.validated_data.get('monthsOld'),
        reason=s.validated_data.get('archiveReason') or None,
    )
    log = result['archiveLog']
    data = {
        'totalArchived': result['totalArchived'],
        'reports': result['reports'],
        'archiveLog': format_archive_log(log) if log else None,
    }
    if not result['totalArchived']:
        return ok(data, message='No reports found for archiving')
    return ok(data, message=f"Successfully archived {result['totalArchived']} reports")


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasCapability.of(VIEW_REPORTS)])
def archive_logs(request):
    logs = archive.list_archive_logs(request.user, _limit(request, 5))
    return ok([format_archive_log(log) for log in logs])


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasCapability.of(VIEW_REPORTS)])
@throttle_classes([BatchRateThrottle])
def financial_analysis(request):
    s = AnalysisRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = analysis.generate_financial_analysis(
        request.user,
        analysis_type=s.validated_data.get('analysisType', 'performance'),
        months=s.validated_data.get('months', 12),
    )
    return created(format_analysis(result), message='Financial analysis generated')


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasCapability.of(VIEW_REPORTS)])
def analyses(request):
    return ok([format_analysis(a) for a in analysis.list_analyses(request.user, _limit(request, 5))])
