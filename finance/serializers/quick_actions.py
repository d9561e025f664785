from rest_framework import serializers

from finance.models import ArchiveLog, FinancialAnalysis
from finance.serializers.reports import format_user


class ArchiveRequestSerializer(serializers.Serializer):
    monthsOld = serializers.IntegerField(min_value=1, max_value=120, required=False)
    archiveReason = serializers.CharField(max_length=500, required=False, allow_blank=True)


class AnalysisRequestSerializer(serializers.Serializer):
    analysisType = serializers.ChoiceField(choices=[c for c, _ in FinancialAnalysis.TYPE_CHOICES], required=False)
    months = serializers.IntegerField(min_value=1, max_value=120, required=False)


class LimitQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


def format_analysis(a: FinancialAnalysis) -> dict:
    return {
        'id': a.id,
        'hospitalId': a.hospital_id,
        'analysisType': a.analysis_type,
        'dateRange': {'startDate': a.start_date, 'endDate': a.end_date},
        'metrics': a.metrics,
        'insights': a.insights,
        'trends': a.trends,
        'forecasts': a.forecasts,
        'benchmarks': a.benchmarks,
        'generatedBy': format_user(a.generated_by),
        'status': a.status,
        'completedAt': a.completed_at,
        'createdAt': a.created_at,
    }


def format_archive_log(log: ArchiveLog) -> dict:
    return {
        'id': log.id,
        'hospitalId': log.hospital_id,
        'archiveType': log.archive_type,
        'archivedReports': log.archived_reports,
        'totalReportsArchived': log.total_reports_archived,
        'archiveReason': log.archive_reason,
        'archivedBy': format_user(log.archived_by),
        'status': log.status,
        'completedAt': log.completed_at,
        'createdAt': log.created_at,
    }
