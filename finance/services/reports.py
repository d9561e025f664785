"""
Financial report lifecycle.

States move draft -> submitted -> approved -> archived; archive is also
reachable directly from draft and submitted.  Every operation is scoped to
the actor's hospital and checks capabilities and state before it writes
anything.  Each mutation bumps ``version``, records an audit event, drops
the cached dashboard stats and notifies WebSocket listeners.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, F
from django.utils import timezone

from finance import ledger
from finance.exceptions import AccessDenied, Conflict, InvalidTransition, NotFound, ValidationFailure
from finance.models import FinancialReport
from finance.permissions import (
    APPROVE_REPORTS, CREATE_REPORTS, DELETE_REPORTS, EDIT_REPORTS, EXPORT_DATA,
    OVERRIDE_LOCKS, VIEW_REPORTS, has_capability, require_capability,
)
from finance.services import dashboard
from finance.services.audit import log_action
from finance.services.hospital_settings import default_tax_rate
from finance.services.paging import paginate
from finance.services.realtime import notify_update

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ('report_type', 'year', 'month', 'quarter')

LINE_ITEM_FIELDS = tuple(
    attr
    for fields in (
        ledger.REVENUE_FIELDS, ledger.EXPENSE_FIELDS,
        ledger.CURRENT_ASSET_FIELDS, ledger.FIXED_ASSET_FIELDS,
        ledger.CURRENT_LIABILITY_FIELDS, ledger.LONG_TERM_LIABILITY_FIELDS,
        ledger.EQUITY_INPUT_FIELDS,
    )
    for _, attr in fields
)

# Everything a caller may set; the rest is derived or managed here.
EDITABLE_FIELDS = IDENTITY_FIELDS + LINE_ITEM_FIELDS + ('tax_rate', 'tax_deductions', 'notes')

SORT_FIELDS = {
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
    'year': 'year',
    'period': 'period',
    'status': 'status',
    'reportType': 'report_type',
}


def _can_transition(current: str, new: str) -> bool:
    """Return True if a report may move from ``current`` to ``new``."""
    transitions = {
        FinancialReport.STATUS_DRAFT: [FinancialReport.STATUS_SUBMITTED, FinancialReport.STATUS_ARCHIVED],
        FinancialReport.STATUS_SUBMITTED: [FinancialReport.STATUS_APPROVED, FinancialReport.STATUS_ARCHIVED],
        FinancialReport.STATUS_APPROVED: [FinancialReport.STATUS_ARCHIVED],
        FinancialReport.STATUS_ARCHIVED: [],
    }
    return new in transitions.get(current, [])


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
def normalize_identity(values: dict) -> dict:
    """Validate type/year/month/quarter and clear the field that does not apply."""
    errors = {}
    report_type = values.get('report_type')
    year = values.get('year')
    month = values.get('month')
    quarter = values.get('quarter')

    if report_type not in dict(FinancialReport.TYPE_CHOICES):
        errors['reportType'] = ['Must be one of monthly, quarterly, annual.']
    if year is None or not (2020 <= int(year) <= 2030):
        errors['year'] = ['Year must be between 2020 and 2030.']
    if report_type == FinancialReport.TYPE_MONTHLY:
        if month is None or not (1 <= int(month) <= 12):
            errors['month'] = ['Month (1-12) is required for monthly reports.']
        quarter = None
    elif report_type == FinancialReport.TYPE_QUARTERLY:
        if quarter is None or not (1 <= int(quarter) <= 4):
            errors['quarter'] = ['Quarter (1-4) is required for quarterly reports.']
        month = None
    else:
        month = quarter = None
    if errors:
        raise ValidationFailure('Invalid report period.', errors=errors)
    return {'report_type': report_type, 'year': int(year), 'month': month, 'quarter': quarter}


def _lineage_root_id(report: FinancialReport) -> Optional[int]:
    """Walk ``previous_version`` links up to the report the lineage started from."""
    current_id, parent_id = report.pk, report.previous_version_id
    while parent_id is not None:
        current_id = parent_id
        parent_id = (
            FinancialReport.objects.filter(pk=parent_id).values_list('previous_version_id', flat=True).first()
        )
    return current_id


def _ensure_period_free(report: FinancialReport) -> None:
    """A period belongs to one lineage while any of its reports is not archived.

    Revisions share their source's period, so active reports of the same
    lineage never clash; a report from any other lineage does.
    """
    if report.status == FinancialReport.STATUS_ARCHIVED:
        return
    key = ledger.period_key(report.report_type, report.year, report.month, report.quarter)
    others = (
        FinancialReport.objects.filter(hospital_id=report.hospital_id, period_key=key)
        .exclude(status=FinancialReport.STATUS_ARCHIVED)
        .exclude(pk=report.pk)
    )
    own_root = _lineage_root_id(report)
    for other in others.only('id', 'previous_version_id'):
        if own_root is None or _lineage_root_id(other) != own_root:
            raise Conflict(f'Report for period {report.period} already exists.')


def _save(report: FinancialReport, **kwargs) -> None:
    try:
        with transaction.atomic():
            report.save(**kwargs)
    except IntegrityError:
        raise Conflict(f'Report for period {report.period} already exists.')


def _changed(actor, report: FinancialReport, action: str, detail: Optional[dict] = None) -> None:
    log_action(user=actor, action=action, object_type='report', object_id=report.id,
               detail={'status': report.status, 'version': report.version, **(detail or {})})
    dashboard.invalidate_stats(report.hospital_id)
    notify_update(report.hospital_id, 'report', report.id, report.status)
    logger.info("report %s %s by %s -> %s (v%s)", report.id, action, actor.username, report.status, report.version)


def _check_hospital(actor, report: FinancialReport) -> FinancialReport:
    if report.hospital_id != actor.hospital_id:
        raise AccessDenied('Report belongs to another hospital.')
    return report


def _fetch(actor, report_id, *, lock: bool = False) -> FinancialReport:
    qs = FinancialReport.objects.all()
    if lock:
        qs = qs.select_for_update()
    else:
        qs = qs.select_related('created_by', 'approved_by')
    report = qs.filter(pk=report_id).first()
    if report is None:
        raise NotFound('Report not found.')
    return _check_hospital(actor, report)


def _transition(actor, report_id, capability: str, new_status: str, action: str) -> FinancialReport:
    require_capability(actor, capability)
    with transaction.atomic():
        report = _fetch(actor, report_id, lock=True)
        if not _can_transition(report.status, new_status):
            raise InvalidTransition(f'Cannot move report from {report.status} to {new_status}.')
        previous = report.status
        report.status = new_status
        if new_status == FinancialReport.STATUS_APPROVED:
            report.approved_by = actor
            report.approved_at = timezone.now()
        report.version += 1
        report.save()
    _changed(actor, report, action, {'from': previous})
    return report


# ---------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------
def list_reports(actor, *, report_type=None, status=None, year=None, search=None,
                 sort_by=None, sort_order=None, page=1, limit=10):
    require_capability(actor, VIEW_REPORTS)
    qs = FinancialReport.objects.filter(hospital_id=actor.hospital_id).select_related('created_by', 'approved_by')
    if report_type:
        qs = qs.filter(report_type=report_type)
    if status:
        qs = qs.filter(status=status)
    if year:
        try:
            qs = qs.filter(year=int(year))
        except (TypeError, ValueError):
            raise ValidationFailure('year must be an integer', errors={'year': ['Invalid year.']})
    if search:
        qs = qs.filter(period__icontains=search)

    if sort_by:
        field = SORT_FIELDS.get(sort_by)
        if field is None:
            raise ValidationFailure(f'Cannot sort by {sort_by}.', errors={'sortBy': list(SORT_FIELDS)})
        prefix = '' if sort_order == 'asc' else '-'
        qs = qs.order_by(f'{prefix}{field}', f'{prefix}id')
    else:
        qs = qs.order_by('-created_at', '-id')
    return paginate(qs, page, limit)


def get_report(actor, report_id) -> FinancialReport:
    require_capability(actor, VIEW_REPORTS)
    return _fetch(actor, report_id)


def report_stats(actor) -> dict:
    require_capability(actor, VIEW_REPORTS)
    qs = FinancialReport.objects.filter(hospital_id=actor.hospital_id)
    counts = {row['status']: row['n'] for row in qs.values('status').annotate(n=Count("id"))}
    return {
        'totalReports': qs.count(),
        'statusBreakdown': [
            {'status': value, 'count': counts.get(value, 0)} for value, _ in FinancialReport.STATUS_CHOICES
        ],
        'recentReports': list(qs.select_related('created_by').order_by('-created_at', '-id')[:5]),
    }


def export_report(actor, report_id) -> dict[str, Any]:
    require_capability(actor, EXPORT_DATA)
    report = _fetch(actor, report_id)
    log_action(user=actor, action='report_export', object_type='report', object_id=report.id)
    return {'report': report, 'exportedAt': timezone.now(), 'exportedBy': actor}


# ---------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------
def create_report(actor, values: dict) -> FinancialReport:
    require_capability(actor, CREATE_REPORTS)
    unknown = set(values) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationFailure('Unknown report fields.', errors={k: ['Not allowed.'] for k in sorted(unknown)})

    data = {k: v for k, v in values.items() if k not in IDENTITY_FIELDS}
    identity = normalize_identity(values)
    if data.get('tax_rate') is None:
        data['tax_rate'] = default_tax_rate(actor.hospital_id)

    report = FinancialReport(
        hospital_id=actor.hospital_id,
        created_by=actor,
        status=FinancialReport.STATUS_DRAFT,
        version=1,
        period=ledger.period_label(**identity),
        **identity,
        **data,
    )
    _ensure_period_free(report)
    _save(report)
    _changed(actor, report, 'report_create')
    return report


def update_report(actor, report_id, values: dict, expected_version: Optional[int] = None) -> FinancialReport:
    require_capability(actor, EDIT_REPORTS)
    unknown = set(values) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationFailure('Unknown report fields.', errors={k: ['Not allowed.'] for k in sorted(unknown)})

    with transaction.atomic():
        report = _fetch(actor, report_id, lock=True)
        if expected_version is not None and int(expected_version) != report.version:
            raise Conflict(f'Report was modified (version {report.version}, expected {expected_version}).')
        if report.status != FinancialReport.STATUS_DRAFT and not has_capability(actor, OVERRIDE_LOCKS):
            raise InvalidTransition(f'Only draft reports can be edited (report is {report.status}).')

        if any(f in values for f in IDENTITY_FIELDS):
            merged = {f: values.get(f, getattr(report, f)) for f in IDENTITY_FIELDS}
            if 'report_type' in values:
                # a new type decides which of month/quarter applies
                merged.update({f: values.get(f) for f in ('month', 'quarter')})
            identity = normalize_identity(merged)
            for field, value in identity.items():
                setattr(report, field, value)
            report.period = ledger.period_label(**identity)
            _ensure_period_free(report)

        for field, value in values.items():
            if field not in IDENTITY_FIELDS:
                setattr(report, field, value)
        report.version += 1
        _save(report)
    _changed(actor, report, 'report_update', {'fields': sorted(values)})
    return report


def submit_report(actor, report_id) -> FinancialReport:
    return _transition(actor, report_id, EDIT_REPORTS, FinancialReport.STATUS_SUBMITTED, 'report_submit')


def approve_report(actor, report_id) -> FinancialReport:
    return _transition(actor, report_id, APPROVE_REPORTS, FinancialReport.STATUS_APPROVED, 'report_approve')


def archive_report(actor, report_id) -> FinancialReport:
    return _transition(actor, report_id, DELETE_REPORTS, FinancialReport.STATUS_ARCHIVED, 'report_archive')


def duplicate_report(actor, report_id) -> FinancialReport:
    """Copy a report into a new draft revision linked to its source."""
    require_capability(actor, CREATE_REPORTS)
    source = _fetch(actor, report_id)
    revision = FinancialReport(
        hospital_id=source.hospital_id,
        created_by=actor,
        status=FinancialReport.STATUS_DRAFT,
        period=f'{source.period} (Copy)',
        version=source.version + 1,
        previous_version=source,
        **{field: getattr(source, field) for field in EDITABLE_FIELDS},
    )
    _ensure_period_free(revision)
    _save(revision)
    _changed(actor, revision, 'report_duplicate', {'source': source.id})
    return revision


def _detach_revisions(report: FinancialReport) -> Optional[int]:
    """Re-link the revisions of a report that is about to be deleted.

    Revisions move up to the report's own source.  When the report started
    its lineage, its oldest revision takes over as the new start and the
    other revisions point at it.  Returns the promoted report's id, if any.
    """
    revisions = list(report.revisions.select_for_update().order_by('created_at', 'id'))
    if not revisions:
        return None
    parent_id = report.previous_version_id
    heir = None
    if parent_id is None:
        heir, revisions = revisions[0], revisions[1:]
        # the doomed row must leave the active-period constraint before its heir joins it
        FinancialReport.objects.filter(pk=report.pk).update(status=FinancialReport.STATUS_ARCHIVED)
        FinancialReport.objects.filter(pk=heir.pk).update(previous_version=None, version=F('version') + 1)
        parent_id = heir.id
    FinancialReport.objects.filter(id__in=[r.id for r in revisions]).update(
        previous_version_id=parent_id, version=F('version') + 1
    )
    return heir.id if heir is not None else None


def delete_report(actor, report_id) -> None:
    """Delete a report; its revisions stay and are re-linked to the lineage."""
    require_capability(actor, DELETE_REPORTS)
    with transaction.atomic():
        report = _fetch(actor, report_id, lock=True)
        if report.status != FinancialReport.STATUS_DRAFT and not has_capability(actor, OVERRIDE_LOCKS):
            raise InvalidTransition(f'Only draft reports can be deleted (report is {report.status}).')
        rid, hospital_id, status = report.id, report.hospital_id, report.status
        promoted = _detach_revisions(report)
        report.delete()
    log_action(user=actor, action='report_delete', object_type='report', object_id=rid,
               detail={'status': status, 'promoted': promoted})
    dashboard.invalidate_stats(hospital_id)
    notify_update(hospital_id, 'report', rid, 'deleted')
    logger.info("report %s deleted by %s", rid, actor.username)
