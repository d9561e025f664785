"""
Financial report endpoints.

Handlers validate input with the serializers in
``finance.serializers.reports`` and delegate every rule (capabilities,
hospital scoping, lifecycle) to ``finance.services.reports``.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from finance.permissions import (
    APPROVE_REPORTS, CREATE_REPORTS, DELETE_REPORTS, EDIT_REPORTS, EXPORT_DATA, VIEW_REPORTS, HasCapability,
)
from finance.responses import created, ok
from finance.serializers.reports import (
    ReportListQuerySerializer, ReportWriteSerializer, format_report, format_report_brief, format_user,
)
from finance.services import reports as svc


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def reports(request):
    if request.method == 'POST':
        s = ReportWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        report = svc.create_report(request.user, s.to_model_values())
        return created(format_report(report), message='Report created')

    q = ReportListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    items, pagination = svc.list_reports(
        request.user,
        report_type=vd.get('reportType'),
        status=vd.get('status'),
        year=vd.get('year'),
        search=vd.get('search'),
        sort_by=vd.get('sortBy'),
        sort_order=vd.get('sortOrder'),
        page=vd.get('page'),
        limit=vd.get('limit'),
    )
    return ok([format_report(r) for r in items], pagination=pagination)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasCapability.of(VIEW_REPORTS)])
def report_stats(request):
    stats = svc.report_stats(request.user)
    stats['recentReports'] = [format_report_brief(r) for r in stats['recentReports']]
    return ok(stats)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def report_detail(request, report_id: int):
    if request.method == 'PUT':
        s = ReportWriteSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        report = svc.update_report(
            request.user, report_id, s.to_model_values(), expected_version=s.validated_data.get('version')
        )
        return ok(format_report(report), message='Report updated')
    if request.method == 'DELETE':
        svc.delete_report(request.user, report_id)
        return ok(None, message='Report deleted')
    return ok(format_report(svc.get_report(request.user, report_id)))


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, HasCapability.of(EDIT_REPORTS)])
def submit_report(request, report_id: int):
    return ok(format_report(svc.submit_report(request.user, report_id)), message='Report submitted')


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, HasCapability.of(APPROVE_REPORTS)])
def approve_report(request, report_id: int):
    return ok(format_report(svc.approve_report(request.user, report_id)), message='Report approved')


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, HasCapability.of(DELETE_REPORTS)])
def archive_report(request, report_id: int):
    return ok(format_report(svc.archive_report(request.user, report_id)), message='Report archived')


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasCapability.of(CREATE_REPORTS)])
def duplicate_report(request, report_id: int):
    return created(format_report(svc.duplicate_report(request.user, report_id)), message='Report duplicated')


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasCapability.of(EXPORT_DATA)])
def export_report(request, report_id: int):
    payload = svc.export_report(request.user, report_id)
    return ok({
        'report': format_report(payload['report']),
        'exportedAt': payload['exportedAt'],
        'exportedBy': format_user(payload['exportedBy']),
    })
