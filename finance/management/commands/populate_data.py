"""
Management command to populate the database with demo data: hospital
settings, the three role users, a quarter of monthly reports and one
pending review.
"""
from datetime import datetime, timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from finance import ledger
from finance.models import FinancialReport, HospitalSettings, ReviewSchedule, User

# January figures in rupiah; later months grow by GROWTH per month.
BASE_AMOUNTS = {
    'revenue_patient_care': 2_500_000_000,
    'revenue_emergency_services': 800_000_000,
    'revenue_surgery': 1_200_000_000,
    'revenue_laboratory': 400_000_000,
    'revenue_pharmacy': 600_000_000,
    'revenue_other': 200_000_000,
    'expense_salaries': 1_800_000_000,
    'expense_medical_supplies': 900_000_000,
    'expense_equipment': 300_000_000,
    'expense_utilities': 200_000_000,
    'expense_maintenance': 150_000_000,
    'expense_insurance': 100_000_000,
    'expense_other': 250_000_000,
    'asset_cash': 500_000_000,
    'asset_accounts_receivable': 800_000_000,
    'asset_inventory': 400_000_000,
    'asset_current_other': 100_000_000,
    'asset_buildings': 15_000_000_000,
    'asset_equipment': 8_000_000_000,
    'asset_vehicles': 500_000_000,
    'asset_fixed_other': 1_000_000_000,
    'liability_accounts_payable': 600_000_000,
    'liability_short_term_debt': 300_000_000,
    'liability_accrued_expenses': 200_000_000,
    'liability_current_other': 100_000_000,
    'liability_long_term_debt': 5_000_000_000,
    'liability_long_term_other': 500_000_000,
    'equity_capital': 10_000_000_000,
    'equity_retained_earnings': 5_000_000_000,
}
GROWTH = Decimal('0.06')
MONTHS = [
    (1, FinancialReport.STATUS_APPROVED),
    (2, FinancialReport.STATUS_APPROVED),
    (3, FinancialReport.STATUS_SUBMITTED),
]


class Command(BaseCommand):
    help = 'Populate the database with demo finance data'

    def add_arguments(self, parser):
        parser.add_argument('--hospital', default=settings.DEFAULT_HOSPITAL_ID)
        parser.add_argument('--year', type=int, default=2024)

    @transaction.atomic
    def handle(self, *args, **options):
        hospital_id = options['hospital']
        year = options['year']

        self.create_settings(hospital_id)
        call_command('ensure_test_users', hospital=hospital_id, stdout=self.stdout)
        admin = User.objects.get(username='admin')
        finance = User.objects.get(username='finance')

        reports = [self.create_report(hospital_id, year, month, status, admin) for month, status in MONTHS]
        self.create_review(hospital_id, reports[-1], admin, finance)
        self.stdout.write(self.style.SUCCESS(f'Demo data ready for {hospital_id}'))

    def create_settings(self, hospital_id):
        obj, _ = HospitalSettings.objects.update_or_create(
            hospital_id=hospital_id,
            defaults={
                'hospital_name': 'RS Sebening Kasih',
                'address': 'Jl. Kesehatan No. 123, Jakarta Pusat',
                'email': 'admin@rsusebeningkasih.com',
            },
        )
        self.stdout.write(f'settings: {obj.hospital_name}')

    def create_report(self, hospital_id, year, month, status, admin):
        factor = (1 + GROWTH) ** (month - 1)
        amounts = {k: ledger.money(Decimal(v) * factor) for k, v in BASE_AMOUNTS.items()}
        report = FinancialReport.objects.filter(
            hospital_id=hospital_id, report_type=FinancialReport.TYPE_MONTHLY, year=year, month=month,
            previous_version__isnull=True,
        ).first() or FinancialReport(
            hospital_id=hospital_id, report_type=FinancialReport.TYPE_MONTHLY, year=year, month=month,
        )
        for field, value in amounts.items():
            setattr(report, field, value)
        report.period = ledger.period_label(report.report_type, year, month)
        report.tax_rate = ledger.DEFAULT_TAX_RATE
        report.tax_deductions = Decimal('500000000')
        report.status = status
        report.created_by = admin
        if status == FinancialReport.STATUS_APPROVED:
            report.approved_by = admin
            report.approved_at = timezone.make_aware(datetime(year, month, 28))
        report.save()
        self.stdout.write(f'report: {report.period} [{report.status}]')
        return report

    def create_review(self, hospital_id, report, admin, assignee):
        review, created = ReviewSchedule.objects.get_or_create(
            hospital_id=hospital_id,
            report=report,
            review_type='monthly',
            defaults={
                'assigned_to': assignee,
                'created_by': admin,
                'scheduled_date': timezone.now() + timedelta(days=5),
                'priority': 'high',
                'notes': f'Review {report.period} before approval',
            },
        )
        self.stdout.write(f'review: #{review.id} ({"new" if created else "existing"})')
