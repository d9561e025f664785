"""
Bulk archiving of old approved reports.

The whole run is one transaction: the log row, the report status update
and the log completion either all persist or none do.
"""
import logging

from dateutil.relativedelta import relativedelta
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from finance.exceptions import ValidationFailure
from finance.models import ArchiveLog, FinancialReport
from finance.permissions import DELETE_REPORTS, VIEW_REPORTS, require_capability
from finance.services import dashboard
from finance.services.audit import log_action
from finance.services.hospital_settings import archive_after_months
from finance.services.realtime import notify_update

logger = logging.getLogger(__name__)

DEFAULT_REASONS = {
    'manual': 'Manual archive of old reports',
    'automatic': 'Automatic archive of reports past retention',
    'scheduled': 'Scheduled archive of old reports',
}


def months_ago(months_old: int, now=None):
    return (now or timezone.now()) - relativedelta(months=months_old)


def archive_old_reports(actor, months_old=None, reason=None, archive_type='manual', *, hospital_id=None):
    """Archive approved reports created before now - ``months_old``.

    ``actor`` may be ``None`` for automatic runs, in which case
    ``hospital_id`` must be given.
    """
    if actor is not None:
        require_capability(actor, DELETE_REPORTS)
        hospital_id = actor.hospital_id
    if not hospital_id:
        raise ValidationFailure('hospital_id is required for automatic archiving.')
    if archive_type not in dict(ArchiveLog.TYPE_CHOICES):
        raise ValidationFailure(f'Unknown archive type {archive_type}.', errors={'archiveType': ['Invalid choice.']})
    if months_old is None:
        months_old = archive_after_months(hospital_id)
    months_old = int(months_old)
    if not 1 <= months_old <= 120:
        raise ValidationFailure('monthsOld must be between 1 and 120.', errors={'monthsOld': ['Out of range.']})

    cutoff = months_ago(months_old)
    with transaction.atomic():
        reports = list(
            FinancialReport.objects.select_for_update()
            .filter(hospital_id=hospital_id, status=FinancialReport.STATUS_APPROVED, created_at__lt=cutoff)
            .order_by('created_at', 'id')
        )
        if not reports:
            logger.info("archive run for %s: nothing older than %s", hospital_id, cutoff.date())
            return {'totalArchived': 0, 'reports': [], 'archiveLog': None}

        now = timezone.now()
        log = ArchiveLog.objects.create(
            hospital_id=hospital_id,
            archive_type=archive_type,
            archived_reports=[
                {'reportId': r.id, 'reportPeriod': r.period, 'reportType': r.report_type, 'archivedAt': now.isoformat()}
                for r in reports
            ],
            total_reports_archived=len(reports),
            archive_reason=(reason or DEFAULT_REASONS[archive_type])[:500],
            archived_by=actor,
            status='in-progress',
        )
        FinancialReport.objects.filter(id__in=[r.id for r in reports]).update(
            status=FinancialReport.STATUS_ARCHIVED, updated_at=now, version=F('version') + 1
        )
        log.status = 'completed'
        log.completed_at = timezone.now()
        log.save(update_fields=['status', 'completed_at'])

    log_action(user=actor, action='reports_archive', object_type='archive', object_id=log.id,
               detail={'count': len(reports), 'monthsOld': months_old, 'type': archive_type})
    dashboard.invalidate_stats(hospital_id)
    notify_update(hospital_id, 'archive', log.id, log.status)
    logger.info("archived %d reports for %s (%s)", len(reports), hospital_id, archive_type)
    return {
        'totalArchived': len(reports),
        'archiveLog': log,
        'reports': [{'id': r.id, 'period': r.period, 'type': r.report_type} for r in reports],
    }


def list_archive_logs(actor, limit=5):
    require_capability(actor, VIEW_REPORTS)
    return list(
        ArchiveLog.objects.filter(hospital_id=actor.hospital_id)
        .select_related('archived_by')
        .order_by('-created_at', '-id')[:int(limit)]
    )
