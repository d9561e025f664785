"""
Financial computations over a report's line items.

Every function here is pure: it reads attributes from a report-like
object (normally :class:`finance.models.FinancialReport`) and returns a
value without touching the database.  Totals are never stored; only the
tax block and ``equity_current_earnings`` are persisted, and they are
refreshed by :func:`apply_tax` from ``FinancialReport.save``.

The line item layout is described by the ``*_FIELDS`` tables below, which
pair the public (camelCase) category name used by the API with the model
attribute that stores it.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

CENTS = Decimal('0.01')
ZERO = Decimal('0')
DEFAULT_TAX_RATE = Decimal('0.25')

REVENUE_FIELDS = (
    ('patientCare', 'revenue_patient_care'),
    ('emergencyServices', 'revenue_emergency_services'),
    ('surgery', 'revenue_surgery'),
    ('laboratory', 'revenue_laboratory'),
    ('pharmacy', 'revenue_pharmacy'),
    ('other', 'revenue_other'),
)

EXPENSE_FIELDS = (
    ('salaries', 'expense_salaries'),
    ('medicalSupplies', 'expense_medical_supplies'),
    ('equipment', 'expense_equipment'),
    ('utilities', 'expense_utilities'),
    ('maintenance', 'expense_maintenance'),
    ('insurance', 'expense_insurance'),
    ('other', 'expense_other'),
)

CURRENT_ASSET_FIELDS = (
    ('cash', 'asset_cash'),
    ('accountsReceivable', 'asset_accounts_receivable'),
    ('inventory', 'asset_inventory'),
    ('other', 'asset_current_other'),
)

FIXED_ASSET_FIELDS = (
    ('buildings', 'asset_buildings'),
    ('equipment', 'asset_equipment'),
    ('vehicles', 'asset_vehicles'),
    ('other', 'asset_fixed_other'),
)

CURRENT_LIABILITY_FIELDS = (
    ('accountsPayable', 'liability_accounts_payable'),
    ('shortTermDebt', 'liability_short_term_debt'),
    ('accruedExpenses', 'liability_accrued_expenses'),
    ('other', 'liability_current_other'),
)

LONG_TERM_LIABILITY_FIELDS = (
    ('longTermDebt', 'liability_long_term_debt'),
    ('other', 'liability_long_term_other'),
)

EQUITY_INPUT_FIELDS = (
    ('capital', 'equity_capital'),
    ('retainedEarnings', 'equity_retained_earnings'),
)

# Every non-negative money input a report accepts, grouped the way the API
# nests them: {section: {subsection|None: fields}}.
LINE_ITEM_SECTIONS = {
    'revenue': {None: REVENUE_FIELDS},
    'expenses': {None: EXPENSE_FIELDS},
    'assets': {'current': CURRENT_ASSET_FIELDS, 'fixed': FIXED_ASSET_FIELDS},
    'liabilities': {'current': CURRENT_LIABILITY_FIELDS, 'longTerm': LONG_TERM_LIABILITY_FIELDS},
}

MONTH_NAMES = (
    'Januari', 'Februari', 'Maret', 'April', 'Mei', 'Juni',
    'Juli', 'Agustus', 'September', 'Oktober', 'November', 'Desember',
)


def money(value) -> Decimal:
    """Coerce ``value`` to a Decimal rounded to cents."""
    if value is None:
        return ZERO.quantize(CENTS)
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _sum(report, fields: Iterable[tuple[str, str]]) -> Decimal:
    total = ZERO
    for _, attr in fields:
        total += Decimal(getattr(report, attr) or 0)
    return total


def breakdown(report, fields: Iterable[tuple[str, str]]) -> dict[str, Decimal]:
    """Return ``{category: amount}`` for one of the ``*_FIELDS`` tables."""
    return {name: Decimal(getattr(report, attr) or 0) for name, attr in fields}


def total_revenue(report) -> Decimal:
    return _sum(report, REVENUE_FIELDS)


def total_expenses(report) -> Decimal:
    return _sum(report, EXPENSE_FIELDS)


def net_profit(report) -> Decimal:
    return total_revenue(report) - total_expenses(report)


def total_current_assets(report) -> Decimal:
    return _sum(report, CURRENT_ASSET_FIELDS)


def total_fixed_assets(report) -> Decimal:
    return _sum(report, FIXED_ASSET_FIELDS)


def total_assets(report) -> Decimal:
    return total_current_assets(report) + total_fixed_assets(report)


def total_current_liabilities(report) -> Decimal:
    return _sum(report, CURRENT_LIABILITY_FIELDS)


def total_long_term_liabilities(report) -> Decimal:
    return _sum(report, LONG_TERM_LIABILITY_FIELDS)


def total_liabilities(report) -> Decimal:
    return total_current_liabilities(report) + total_long_term_liabilities(report)


def total_equity(report) -> Decimal:
    """Capital + retained earnings + current earnings.

    ``equity_current_earnings`` is only correct after :func:`apply_tax` has
    run, i.e. after the report has been saved.
    """
    return (
        Decimal(report.equity_capital or 0)
        + Decimal(report.equity_retained_earnings or 0)
        + Decimal(report.equity_current_earnings or 0)
    )


def apply_tax(report) -> None:
    """Recompute the tax block and current earnings in place.

    Order matters: current earnings depend on the freshly computed tax
    amount, never on a previously stored one.
    """
    gross_profit = net_profit(report)
    deductions = Decimal(report.tax_deductions or 0)
    rate = Decimal(report.tax_rate or 0)

    report.tax_income = money(gross_profit)
    report.tax_net_taxable = money(max(ZERO, gross_profit - deductions))
    report.tax_amount = money(report.tax_net_taxable * rate)
    report.equity_current_earnings = money(gross_profit - report.tax_amount)


def period_label(report_type: str, year: int, month: Optional[int] = None, quarter: Optional[int] = None) -> str:
    """Human readable period: ``Januari 2024``, ``Q1 2024`` or ``2024``."""
    if report_type == 'monthly':
        return f"{MONTH_NAMES[int(month) - 1]} {year}"
    if report_type == 'quarterly':
        return f"Q{quarter} {year}"
    return f"{year}"


def period_key(report_type: str, year: int, month: Optional[int] = None, quarter: Optional[int] = None) -> str:
    """Canonical identity of a reporting period, used for uniqueness."""
    if report_type == 'monthly':
        return f"monthly:{year}:{month}"
    if report_type == 'quarterly':
        return f"quarterly:{year}:{quarter}"
    return f"annual:{year}"


def safe_ratio(numerator, denominator) -> float:
    """``numerator / denominator`` or 0 when the denominator is not positive."""
    denominator = Decimal(denominator or 0)
    if denominator <= 0:
        return 0.0
    return round(float(Decimal(numerator or 0) / denominator), 4)


def percent_change(current, previous) -> float:
    """Growth of ``current`` over ``previous`` in percent; 0 without a positive base."""
    previous = Decimal(previous or 0)
    if previous <= 0:
        return 0.0
    return round(float((Decimal(current or 0) - previous) / previous * 100), 4)


def percent_of(part, whole) -> float:
    whole = Decimal(whole or 0)
    if whole <= 0:
        return 0.0
    return round(float(Decimal(part or 0) / whole * 100), 4)


def scaled(value, divisor: int) -> float:
    """Display scaling for charts (e.g. millions); not a stored unit."""
    return round(float(Decimal(value or 0) / Decimal(divisor)), 4)


def summarize(report) -> dict[str, Decimal]:
    """All derived totals of one report, keyed the way the API exposes them."""
    return {
        'totalRevenue': total_revenue(report),
        'totalExpenses': total_expenses(report),
        'netProfit': net_profit(report),
        'totalCurrentAssets': total_current_assets(report),
        'totalFixedAssets': total_fixed_assets(report),
        'totalAssets': total_assets(report),
        'totalCurrentLiabilities': total_current_liabilities(report),
        'totalLongTermLiabilities': total_long_term_liabilities(report),
        'totalLiabilities': total_liabilities(report),
        'totalEquity': total_equity(report),
    }
