from decimal import Decimal

import bleach
from rest_framework import serializers

from finance import ledger
from finance.models import FinancialReport


def _money():
    return serializers.DecimalField(max_digits=18, decimal_places=2, min_value=Decimal('0'), required=False)


def _section(name, fields):
    """Serializer class with one optional non-negative amount per category."""
    return type(name, (serializers.Serializer,), {key: _money() for key, _ in fields})


RevenueSerializer = _section('RevenueSerializer', ledger.REVENUE_FIELDS)
ExpensesSerializer = _section('ExpensesSerializer', ledger.EXPENSE_FIELDS)
CurrentAssetsSerializer = _section('CurrentAssetsSerializer', ledger.CURRENT_ASSET_FIELDS)
FixedAssetsSerializer = _section('FixedAssetsSerializer', ledger.FIXED_ASSET_FIELDS)
CurrentLiabilitiesSerializer = _section('CurrentLiabilitiesSerializer', ledger.CURRENT_LIABILITY_FIELDS)
LongTermLiabilitiesSerializer = _section('LongTermLiabilitiesSerializer', ledger.LONG_TERM_LIABILITY_FIELDS)
EquitySerializer = _section('EquitySerializer', ledger.EQUITY_INPUT_FIELDS)


class AssetsSerializer(serializers.Serializer):
    current = CurrentAssetsSerializer(required=False)
    fixed = FixedAssetsSerializer(required=False)


class LiabilitiesSerializer(serializers.Serializer):
    current = CurrentLiabilitiesSerializer(required=False)
    longTerm = LongTermLiabilitiesSerializer(required=False)


class TaxSerializer(serializers.Serializer):
    rate = serializers.DecimalField(
        max_digits=5, decimal_places=4, min_value=Decimal('0'), max_value=Decimal('1'), required=False
    )
    deductions = _money()


class ReportWriteSerializer(serializers.Serializer):
    reportType = serializers.ChoiceField(choices=[c for c, _ in FinancialReport.TYPE_CHOICES])
    year = serializers.IntegerField(min_value=2020, max_value=2030)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False, allow_null=True)
    quarter = serializers.IntegerField(min_value=1, max_value=4, required=False, allow_null=True)
    revenue = RevenueSerializer(required=False)
    expenses = ExpensesSerializer(required=False)
    assets = AssetsSerializer(required=False)
    liabilities = LiabilitiesSerializer(required=False)
    equity = EquitySerializer(required=False)
    tax = TaxSerializer(required=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    # optimistic concurrency on update
    version = serializers.IntegerField(min_value=1, required=False)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), tags=[], strip=True)

    def to_model_values(self) -> dict:
        """Flatten validated nested input into model field names."""
        vd = self.validated_data
        values = {}
        for key, attr in (('reportType', 'report_type'), ('year', 'year'), ('month', 'month'),
                          ('quarter', 'quarter'), ('notes', 'notes')):
            if key in vd:
                values[attr] = vd[key]
        for section, groups in ledger.LINE_ITEM_SECTIONS.items():
            for sub, fields in groups.items():
                data = vd.get(section) or {}
                if sub is not None:
                    data = data.get(sub) or {}
                for name, attr in fields:
                    if name in data:
                        values[attr] = data[name]
        equity = vd.get('equity') or {}
        for name, attr in ledger.EQUITY_INPUT_FIELDS:
            if name in equity:
                values[attr] = equity[name]
        tax = vd.get('tax') or {}
        if 'rate' in tax:
            values['tax_rate'] = tax['rate']
        if 'deductions' in tax:
            values['tax_deductions'] = tax['deductions']
        return values


class ReportListQuerySerializer(serializers.Serializer):
    reportType = serializers.ChoiceField(choices=[c for c, _ in FinancialReport.TYPE_CHOICES], required=False)
    status = serializers.ChoiceField(choices=[c for c, _ in FinancialReport.STATUS_CHOICES], required=False)
    year = serializers.IntegerField(required=False)
    search = serializers.CharField(max_length=64, required=False, allow_blank=True)
    sortBy = serializers.CharField(max_length=32, required=False)
    sortOrder = serializers.ChoiceField(choices=['asc', 'desc'], required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


def format_user(user):
    if user is None:
        return None
    return {'id': user.id, 'name': user.get_full_name() or user.username, 'email': user.email}


def _amounts(report, fields):
    return {name: getattr(report, attr) for name, attr in fields}


def format_report(report: FinancialReport) -> dict:
    return {
        'id': report.id,
        'hospitalId': report.hospital_id,
        'reportType': report.report_type,
        'year': report.year,
        'month': report.month,
        'quarter': report.quarter,
        'period': report.period,
        'revenue': _amounts(report, ledger.REVENUE_FIELDS),
        'expenses': _amounts(report, ledger.EXPENSE_FIELDS),
        'assets': {
            'current': _amounts(report, ledger.CURRENT_ASSET_FIELDS),
            'fixed': _amounts(report, ledger.FIXED_ASSET_FIELDS),
        },
        'liabilities': {
            'current': _amounts(report, ledger.CURRENT_LIABILITY_FIELDS),
            'longTerm': _amounts(report, ledger.LONG_TERM_LIABILITY_FIELDS),
        },
        'equity': {
            'capital': report.equity_capital,
            'retainedEarnings': report.equity_retained_earnings,
            'currentEarnings': report.equity_current_earnings,
        },
        'tax': {
            'rate': report.tax_rate,
            'deductions': report.tax_deductions,
            'income': report.tax_income,
            'amount': report.tax_amount,
            'netTaxable': report.tax_net_taxable,
        },
        'totals': ledger.summarize(report),
        'status': report.status,
        'createdBy': format_user(report.created_by),
        'approvedBy': format_user(report.approved_by),
        'approvedAt': report.approved_at,
        'version': report.version,
        'previousVersionId': report.previous_version_id,
        'notes': report.notes,
        'createdAt': report.created_at,
        'updatedAt': report.updated_at,
    }


def format_report_brief(report: FinancialReport) -> dict:
    return {
        'id': report.id,
        'period': report.period,
        'reportType': report.report_type,
        'status': report.status,
        'createdBy': format_user(report.created_by),
        'createdAt': report.created_at,
    }
