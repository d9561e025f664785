"""
Dashboard endpoints.

All figures are computed by ``finance.services.dashboard`` for the
caller's hospital; a hospital without reports gets the all-zero shapes.
"""
from django.utils import timezone
from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from finance.permissions import VIEW_REPORTS, HasCapability
from finance.responses import ok
from finance.services import dashboard

CanView = HasCapability.of(VIEW_REPORTS)


class DashboardQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=50, required=False)


def _query(request) -> dict:
    q = DashboardQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return q.validated_data


def _year(request) -> int:
    return _query(request).get('year') or timezone.localdate().year


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanView])
def stats(request):
    return ok(dashboard.dashboard_stats(request.user.hospital_id))


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanView])
def ratios(request):
    return ok(dashboard.financial_ratios(request.user.hospital_id))


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanView])
def analysis(request):
    return ok(dashboard.comparative_analysis(request.user.hospital_id, _year(request)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanView])
def activity(request):
    limit = _query(request).get('limit') or 10
    return ok(dashboard.recent_activity(request.user.hospital_id, limit))


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanView])
def revenue_chart(request):
    return ok(dashboard.revenue_chart(request.user.hospital_id, _year(request)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanView])
def expense_chart(request):
    return ok(dashboard.expense_chart(request.user.hospital_id, _year(request)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanView])
def profit_chart(request):
    return ok(dashboard.profit_chart(request.user.hospital_id, _year(request)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanView])
def balance_sheet_chart(request):
    return ok(dashboard.balance_sheet_chart(request.user.hospital_id))
