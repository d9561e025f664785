"""
Financial analysis over a window of approved reports.

The two most recent reports in the window are compared; fixed thresholds
turn the comparison into insights, a revenue trend and one naive forecast.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from finance import ledger
from finance.exceptions import InsufficientData, ValidationFailure
from finance.models import FinancialAnalysis, FinancialReport
from finance.permissions import VIEW_REPORTS, require_capability
from finance.services.archive import months_ago
from finance.services.audit import log_action

logger = logging.getLogger(__name__)

STRONG_GROWTH = 10
REVENUE_DECLINE = -5
HEALTHY_MARGIN = 15
LOW_MARGIN = 5
MODERATE_TREND = 5


def forecast_confidence(growth: float) -> float:
    """85 minus half the absolute growth, clamped to [60, 85]."""
    return round(min(85.0, max(60.0, 85 - abs(growth) / 2)), 2)


def trend_significance(growth: float) -> str:
    if abs(growth) > STRONG_GROWTH:
        return 'significant'
    if abs(growth) > MODERATE_TREND:
        return 'moderate'
    return 'minor'


def build_insights(growth: float, margin: float, current_ratio: float, *, has_liabilities: bool) -> list[dict]:
    insights = []
    if growth > STRONG_GROWTH:
        insights.append({
            'category': 'positive',
            'title': 'Strong Revenue Growth',
            'description': f'Revenue increased by {growth:.1f}% compared to previous period',
            'impact': 'high',
            'recommendation': 'Continue current growth strategies and consider expansion opportunities',
        })
    elif growth < REVENUE_DECLINE:
        insights.append({
            'category': 'negative',
            'title': 'Revenue Decline',
            'description': f'Revenue decreased by {abs(growth):.1f}% compared to previous period',
            'impact': 'high',
            'recommendation': 'Review pricing strategy and market positioning',
        })

    if margin > HEALTHY_MARGIN:
        insights.append({
            'category': 'positive',
            'title': 'Healthy Profit Margin',
            'description': f'Current profit margin is {margin:.1f}%',
            'impact': 'medium',
            'recommendation': 'Maintain operational efficiency and cost control',
        })
    elif margin < LOW_MARGIN:
        insights.append({
            'category': 'warning',
            'title': 'Low Profit Margin',
            'description': f'Current profit margin is only {margin:.1f}%',
            'impact': 'high',
            'recommendation': 'Review cost structure and operational efficiency',
        })

    # without current liabilities the ratio is undefined, not a concern
    if has_liabilities and current_ratio < 1:
        insights.append({
            'category': 'negative',
            'title': 'Liquidity Concern',
            'description': f'Current ratio is {current_ratio:.2f}, indicating potential liquidity issues',
            'impact': 'high',
            'recommendation': 'Improve cash flow management and consider debt restructuring',
        })
    return insights


def compute_analysis(latest: FinancialReport, previous: FinancialReport) -> dict:
    """Metrics, insights, trends and forecasts comparing two reports."""
    cur = ledger.summarize(latest)
    prev_revenue = ledger.total_revenue(previous)
    revenue = cur['totalRevenue']

    growth = ledger.percent_change(revenue, prev_revenue)
    margin = ledger.percent_of(cur['netProfit'], revenue)
    current_ratio = ledger.safe_ratio(cur['totalCurrentAssets'], cur['totalCurrentLiabilities'])

    metrics = {
        'revenueGrowth': {
            'current': float(revenue),
            'previous': float(prev_revenue),
            'growthRate': growth,
        },
        'profitability': {
            'grossProfitMargin': margin,
            'netProfitMargin': ledger.percent_of(latest.equity_current_earnings, revenue),
            'operatingMargin': margin,
        },
        'liquidity': {
            'currentRatio': current_ratio,
            'quickRatio': round(current_ratio * 0.8, 4),
            'cashRatio': round(current_ratio * 0.3, 4),
        },
        'efficiency': {
            'assetTurnover': ledger.safe_ratio(revenue, cur['totalAssets']),
            'receivableTurnover': 12,
            'inventoryTurnover': 8,
        },
        'leverage': {
            'debtToEquity': ledger.safe_ratio(cur['totalLiabilities'], cur['totalEquity']),
            'debtToAssets': ledger.safe_ratio(cur['totalLiabilities'], cur['totalAssets']),
            'interestCoverage': 5.2,
        },
    }
    trends = [{
        'metric': 'Revenue',
        'direction': 'increasing' if growth > 0 else 'decreasing',
        'percentage': abs(growth),
        'significance': trend_significance(growth),
    }]
    forecasts = [{
        'metric': 'Revenue',
        'currentValue': float(revenue),
        'projectedValue': round(float(revenue) * (1 + growth / 100), 2),
        'timeframe': 'Next Period',
        'confidence': forecast_confidence(growth),
    }]
    insights = build_insights(
        growth, margin, current_ratio, has_liabilities=cur['totalCurrentLiabilities'] > 0
    )
    return {'metrics': metrics, 'insights': insights, 'trends': trends, 'forecasts': forecasts}


def generate_financial_analysis(actor, analysis_type: str = 'performance', months: int = 12) -> FinancialAnalysis:
    require_capability(actor, VIEW_REPORTS)
    if analysis_type not in dict(FinancialAnalysis.TYPE_CHOICES):
        raise ValidationFailure(f'Unknown analysis type {analysis_type}.', errors={'analysisType': ['Invalid choice.']})
    months = int(months)
    if not 1 <= months <= 120:
        raise ValidationFailure('months must be between 1 and 120.', errors={'months': ['Out of range.']})

    end = timezone.now()
    start = months_ago(months, now=end)
    reports = list(
        FinancialReport.objects.filter(
            hospital_id=actor.hospital_id,
            status=FinancialReport.STATUS_APPROVED,
            created_at__gte=start,
            created_at__lte=end,
        ).order_by('created_at', 'id')
    )
    if len(reports) < 2:
        raise InsufficientData('Insufficient data for analysis. At least 2 approved reports are required.')

    result = compute_analysis(reports[-1], reports[-2])
    with transaction.atomic():
        analysis = FinancialAnalysis.objects.create(
            hospital_id=actor.hospital_id,
            analysis_type=analysis_type,
            start_date=start,
            end_date=end,
            generated_by=actor,
            status='completed',
            completed_at=timezone.now(),
            **result,
        )
        analysis.reports.set(reports)
    log_action(user=actor, action='analysis_generate', object_type='analysis', object_id=analysis.id,
               detail={'reports': len(reports), 'type': analysis_type})
    logger.info("analysis %s generated for %s from %d reports", analysis.id, actor.hospital_id, len(reports))
    return analysis


def list_analyses(actor, limit=5):
    require_capability(actor, VIEW_REPORTS)
    return list(
        FinancialAnalysis.objects.filter(hospital_id=actor.hospital_id, status='completed')
        .select_related('generated_by')
        .order_by('-created_at', '-id')[:int(limit)]
    )
