from decimal import Decimal

import pytest

from finance import ledger
from finance.models import FinancialReport


def _report(**fields):
    return FinancialReport(report_type='monthly', year=2024, month=1, **fields)


def test_worked_tax_example():
    r = _report(revenue_patient_care=Decimal('1000'), expense_salaries=Decimal('600'),
                tax_deductions=Decimal('50'), tax_rate=Decimal('0.25'))
    ledger.apply_tax(r)
    assert ledger.net_profit(r) == Decimal('400')
    assert r.tax_income == Decimal('400.00')
    assert r.tax_net_taxable == Decimal('350.00')
    assert r.tax_amount == Decimal('87.50')
    assert r.equity_current_earnings == Decimal('312.50')


def test_apply_tax_is_idempotent():
    r = _report(revenue_surgery=Decimal('1234.56'), expense_utilities=Decimal('234.56'),
                tax_deductions=Decimal('100'), tax_rate=Decimal('0.1'))
    ledger.apply_tax(r)
    first = (r.tax_amount, r.tax_net_taxable, r.equity_current_earnings)
    ledger.apply_tax(r)
    assert (r.tax_amount, r.tax_net_taxable, r.equity_current_earnings) == first


def test_net_taxable_never_negative():
    r = _report(revenue_other=Decimal('100'), expense_other=Decimal('500'),
                tax_deductions=Decimal('10'), tax_rate=Decimal('0.25'))
    ledger.apply_tax(r)
    assert r.tax_net_taxable == Decimal('0.00')
    assert r.tax_amount == Decimal('0.00')
    # a loss flows straight into current earnings
    assert r.equity_current_earnings == Decimal('-400.00')


def test_totals_are_sums_of_their_parts():
    r = _report(
        revenue_patient_care=Decimal('10'), revenue_pharmacy=Decimal('5'),
        expense_salaries=Decimal('3'), expense_insurance=Decimal('2'),
        asset_cash=Decimal('7'), asset_buildings=Decimal('100'),
        liability_accounts_payable=Decimal('4'), liability_long_term_debt=Decimal('40'),
        equity_capital=Decimal('50'), equity_retained_earnings=Decimal('13'),
    )
    ledger.apply_tax(r)
    totals = ledger.summarize(r)
    assert totals['totalRevenue'] == Decimal('15')
    assert totals['totalExpenses'] == Decimal('5')
    assert totals['totalAssets'] == totals['totalCurrentAssets'] + totals['totalFixedAssets'] == Decimal('107')
    assert totals['totalLiabilities'] == Decimal('44')
    assert totals['totalEquity'] == Decimal('50') + Decimal('13') + r.equity_current_earnings
    assert ledger.summarize(r) == totals


@pytest.mark.parametrize('args, label', [
    (('monthly', 2024, 1, None), 'Januari 2024'),
    (('monthly', 2025, 12, None), 'Desember 2025'),
    (('quarterly', 2024, None, 3), 'Q3 2024'),
    (('annual', 2023, None, None), '2023'),
])
def test_period_label(args, label):
    assert ledger.period_label(*args) == label


def test_period_key_ignores_irrelevant_parts():
    assert ledger.period_key('annual', 2024, 5, 2) == 'annual:2024'
    assert ledger.period_key('quarterly', 2024, 5, 2) == 'quarterly:2024:2'


def test_guarded_divisions_return_zero():
    assert ledger.safe_ratio(100, 0) == 0
    assert ledger.safe_ratio(100, Decimal('-5')) == 0
    assert ledger.percent_change(100, 0) == 0
    assert ledger.percent_of(5, 0) == 0
    assert ledger.safe_ratio(1, 3) == 0.3333
    assert ledger.percent_change(120, 100) == 20.0


def test_money_rounds_half_up():
    assert ledger.money('0.125') == Decimal('0.13')
    assert ledger.money(None) == Decimal('0.00')
