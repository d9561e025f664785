"""
Read-only dashboard aggregates.

All figures come from "qualifying" reports: status approved or submitted,
newest first.  Every function tolerates a hospital without reports and
returns the documented all-zero or empty shape instead of raising.

``dashboard_stats`` is cached per hospital; report mutations call
:func:`invalidate_stats`.
"""
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from finance import ledger
from finance.models import FinancialReport

QUALIFYING_STATUSES = (FinancialReport.STATUS_APPROVED, FinancialReport.STATUS_SUBMITTED)
MILLION = 1_000_000
BILLION = 1_000_000_000

EMPTY_STATS = {
    'totalRevenue': 0,
    'totalExpenses': 0,
    'netProfit': 0,
    'totalAssets': 0,
    'totalLiabilities': 0,
    'totalEquity': 0,
    'taxAmount': 0,
    'revenueGrowth': 0,
    'profitMargin': 0,
    'currentRatio': 0,
    'debtToEquityRatio': 0,
}

EMPTY_RATIOS = {
    'currentRatio': 0,
    'debtToEquityRatio': 0,
    'profitMargin': 0,
    'assetTurnover': 0,
    'returnOnAssets': 0,
    'returnOnEquity': 0,
}


def stats_cache_key(hospital_id: str) -> str:
    return f'dashboard:stats:{hospital_id}'


def invalidate_stats(hospital_id: str) -> None:
    cache.delete(stats_cache_key(hospital_id))


def qualifying_reports(hospital_id: str):
    return FinancialReport.objects.filter(
        hospital_id=hospital_id, status__in=QUALIFYING_STATUSES
    ).order_by('-created_at', '-id')


def _year_reports(hospital_id: str, year: int):
    return qualifying_reports(hospital_id).filter(year=year).order_by('month', 'quarter', 'created_at')


def _money(value: Decimal) -> float:
    return float(value)


def compute_stats(hospital_id: str) -> dict:
    latest, previous = (list(qualifying_reports(hospital_id)[:2]) + [None, None])[:2]
    if latest is None:
        return dict(EMPTY_STATS)

    totals = ledger.summarize(latest)
    revenue = totals['totalRevenue']
    growth = ledger.percent_change(revenue, ledger.total_revenue(previous)) if previous else 0.0
    return {
        'totalRevenue': _money(revenue),
        'totalExpenses': _money(totals['totalExpenses']),
        'netProfit': _money(totals['netProfit']),
        'totalAssets': _money(totals['totalAssets']),
        'totalLiabilities': _money(totals['totalLiabilities']),
        'totalEquity': _money(totals['totalEquity']),
        'taxAmount': _money(latest.tax_amount),
        'revenueGrowth': growth,
        'profitMargin': ledger.percent_of(totals['netProfit'], revenue),
        'currentRatio': ledger.safe_ratio(totals['totalCurrentAssets'], totals['totalCurrentLiabilities']),
        'debtToEquityRatio': ledger.safe_ratio(totals['totalLiabilities'], totals['totalEquity']),
    }


def dashboard_stats(hospital_id: str) -> dict:
    ck = stats_cache_key(hospital_id)
    cached = cache.get(ck)
    if cached is not None:
        return cached
    payload = compute_stats(hospital_id)
    cache.set(ck, payload, settings.DASHBOARD_CACHE_SECONDS)
    return payload


def revenue_chart(hospital_id: str, year: int) -> list[dict]:
    return [
        {
            'name': r.period,
            'value': ledger.scaled(ledger.total_revenue(r), MILLION),
            'breakdown': {k: ledger.scaled(v, MILLION) for k, v in ledger.breakdown(r, ledger.REVENUE_FIELDS).items()},
        }
        for r in _year_reports(hospital_id, year)
    ]


def expense_chart(hospital_id: str, year: int) -> list[dict]:
    return [
        {
            'name': r.period,
            'value': ledger.scaled(ledger.total_expenses(r), MILLION),
            'breakdown': {k: ledger.scaled(v, MILLION) for k, v in ledger.breakdown(r, ledger.EXPENSE_FIELDS).items()},
        }
        for r in _year_reports(hospital_id, year)
    ]


def profit_chart(hospital_id: str, year: int) -> list[dict]:
    data = []
    for r in _year_reports(hospital_id, year):
        revenue = ledger.total_revenue(r)
        expenses = ledger.total_expenses(r)
        profit = revenue - expenses
        data.append({
            'name': r.period,
            'profit': ledger.scaled(profit, MILLION),
            'revenue': ledger.scaled(revenue, MILLION),
            'expenses': ledger.scaled(expenses, MILLION),
            'margin': ledger.percent_of(profit, revenue),
        })
    return data


def balance_sheet_chart(hospital_id: str) -> list[dict]:
    latest = qualifying_reports(hospital_id).first()
    if latest is None:
        return []
    return [
        {'name': 'Aset', 'value': ledger.scaled(ledger.total_assets(latest), BILLION), 'color': '#3B82F6'},
        {'name': 'Kewajiban', 'value': ledger.scaled(ledger.total_liabilities(latest), BILLION), 'color': '#EF4444'},
        {'name': 'Ekuitas', 'value': ledger.scaled(ledger.total_equity(latest), BILLION), 'color': '#10B981'},
    ]


def financial_ratios(hospital_id: str) -> dict:
    latest = qualifying_reports(hospital_id).first()
    if latest is None:
        return dict(EMPTY_RATIOS)
    t = ledger.summarize(latest)
    return {
        'currentRatio': ledger.safe_ratio(t['totalCurrentAssets'], t['totalCurrentLiabilities']),
        'debtToEquityRatio': ledger.safe_ratio(t['totalLiabilities'], t['totalEquity']),
        'profitMargin': ledger.percent_of(t['netProfit'], t['totalRevenue']),
        'assetTurnover': ledger.safe_ratio(t['totalRevenue'], t['totalAssets']),
        'returnOnAssets': ledger.percent_of(t['netProfit'], t['totalAssets']),
        'returnOnEquity': ledger.percent_of(t['netProfit'], t['totalEquity']),
    }


def _year_totals(hospital_id: str, year: int) -> dict:
    revenue = expenses = ledger.ZERO
    for r in qualifying_reports(hospital_id).filter(year=year):
        revenue += ledger.total_revenue(r)
        expenses += ledger.total_expenses(r)
    return {'revenue': revenue, 'expenses': expenses, 'profit': revenue - expenses}


def comparative_analysis(hospital_id: str, year: int | None = None) -> dict:
    year = year or timezone.localdate().year
    current = _year_totals(hospital_id, year)
    previous = _year_totals(hospital_id, year - 1)
    return {
        'currentYear': {'year': year, **{k: _money(v) for k, v in current.items()}},
        'previousYear': {'year': year - 1, **{k: _money(v) for k, v in previous.items()}},
        'growth': {k: ledger.percent_change(current[k], previous[k]) for k in ('revenue', 'expenses', 'profit')},
    }


def _activity_action(status: str) -> str:
    if status in (FinancialReport.STATUS_APPROVED, FinancialReport.STATUS_SUBMITTED, FinancialReport.STATUS_ARCHIVED):
        return status
    return 'created'


def recent_activity(hospital_id: str, limit: int = 10) -> list[dict]:
    reports = (
        FinancialReport.objects.filter(hospital_id=hospital_id)
        .select_related('created_by', 'approved_by')
        .order_by('-updated_at', '-id')[:limit]
    )
    activities = []
    for r in reports:
        actor = r.approved_by if r.status == FinancialReport.STATUS_APPROVED else r.created_by
        activities.append({
            'id': r.id,
            'type': 'report',
            'action': _activity_action(r.status),
            'description': f'Report {r.period} was {r.status}',
            'user': {'id': actor.id, 'name': actor.get_full_name() or actor.username} if actor else None,
            'timestamp': r.updated_at.isoformat(),
            'data': {'reportId': r.id, 'period': r.period, 'status': r.status},
        })
    return activities
