"""
Database models for the hospital finance backend.

These models capture financial reports, review schedules, generated
analyses, archive runs and per-hospital settings.  Every record carries an
opaque ``hospital_id`` tenant key; services apply it to every query.

Report totals are not stored.  They are pure functions of the line items
(see :mod:`finance.ledger`); only the tax block and the current earnings
are persisted, refreshed by :meth:`FinancialReport.save`.
"""
from __future__ import annotations

import copy

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from finance import ledger


def money_field(**kwargs):
    kwargs.setdefault('default', 0)
    return models.DecimalField(
        max_digits=18, decimal_places=2, validators=[MinValueValidator(0)], **kwargs
    )


class User(AbstractUser):
    """Custom user model with a finance role and a hospital binding.

    Roles map to capabilities in :mod:`finance.permissions`; nothing else
    in the code base compares role strings.
    """
    ROLE_ADMIN = 'admin'
    ROLE_FINANCE = 'finance'
    ROLE_VIEWER = 'viewer'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_FINANCE, 'Finance staff'),
        (ROLE_VIEWER, 'Viewer'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_VIEWER)
    hospital_id = models.CharField(max_length=64, default='hospital-1', db_index=True)
    phone = models.CharField(max_length=20, blank=True)
    department = models.CharField(max_length=100, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class FinancialReport(models.Model):
    TYPE_MONTHLY = 'monthly'
    TYPE_QUARTERLY = 'quarterly'
    TYPE_ANNUAL = 'annual'
    TYPE_CHOICES = (
        (TYPE_MONTHLY, 'monthly'),
        (TYPE_QUARTERLY, 'quarterly'),
        (TYPE_ANNUAL, 'annual'),
    )

    STATUS_DRAFT = 'draft'
    STATUS_SUBMITTED = 'submitted'
    STATUS_APPROVED = 'approved'
    STATUS_ARCHIVED = 'archived'
    STATUS_CHOICES = (
        (STATUS_DRAFT, 'draft'),
        (STATUS_SUBMITTED, 'submitted'),
        (STATUS_APPROVED, 'approved'),
        (STATUS_ARCHIVED, 'archived'),
    )

    hospital_id = models.CharField(max_length=64, db_index=True)
    report_type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    year = models.PositiveIntegerField(validators=[MinValueValidator(2020), MaxValueValidator(2030)])
    month = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(12)]
    )
    quarter = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(4)]
    )
    period = models.CharField(max_length=64)
    # e.g. 'monthly:2024:1'; NULL month/quarter never collide in a unique index
    period_key = models.CharField(max_length=32, editable=False)

    revenue_patient_care = money_field()
    revenue_emergency_services = money_field()
    revenue_surgery = money_field()
    revenue_laboratory = money_field()
    revenue_pharmacy = money_field()
    revenue_other = money_field()

    expense_salaries = money_field()
    expense_medical_supplies = money_field()
    expense_equipment = money_field()
    expense_utilities = money_field()
    expense_maintenance = money_field()
    expense_insurance = money_field()
    expense_other = money_field()

    asset_cash = money_field()
    asset_accounts_receivable = money_field()
    asset_inventory = money_field()
    asset_current_other = money_field()
    asset_buildings = money_field()
    asset_equipment = money_field()
    asset_vehicles = money_field()
    asset_fixed_other = money_field()

    liability_accounts_payable = money_field()
    liability_short_term_debt = money_field()
    liability_accrued_expenses = money_field()
    liability_current_other = money_field()
    liability_long_term_debt = money_field()
    liability_long_term_other = money_field()

    equity_capital = money_field()
    equity_retained_earnings = money_field()
    # derived by ledger.apply_tax; may be negative
    equity_current_earnings = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    tax_rate = models.DecimalField(
        max_digits=5, decimal_places=4, default=ledger.DEFAULT_TAX_RATE,
        validators=[MinValueValidator(0), MaxValueValidator(1)],
    )
    tax_deductions = money_field()
    tax_income = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    tax_net_taxable = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name='created_reports'
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='approved_reports'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=1)
    previous_version = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.SET_NULL, related_name='revisions'
    )
    notes = models.TextField(max_length=1000, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['hospital_id', 'status', 'created_at'], name='report_hosp_status_idx'),
            models.Index(fields=['hospital_id', 'report_type', 'year'], name='report_hosp_type_year_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['hospital_id', 'period_key'],
                condition=~Q(status='archived') & Q(previous_version__isnull=True),
                name='uniq_active_report_period',
            ),
        ]

    def save(self, *args, **kwargs):
        self.period_key = ledger.period_key(self.report_type, self.year, self.month, self.quarter)
        ledger.apply_tax(self)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {
                'period_key', 'tax_income', 'tax_amount', 'tax_net_taxable', 'equity_current_earnings',
            }
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.period} [{self.status}] ({self.hospital_id})"


class ReviewSchedule(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_IN_PROGRESS = 'in-progress'
    STATUS_COMPLETED = 'completed'
    STATUS_OVERDUE = 'overdue'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'pending'),
        (STATUS_IN_PROGRESS, 'in-progress'),
        (STATUS_COMPLETED, 'completed'),
        (STATUS_OVERDUE, 'overdue'),
        (STATUS_CANCELLED, 'cancelled'),
    )

    REVIEW_TYPE_CHOICES = (
        ('monthly', 'monthly'),
        ('quarterly', 'quarterly'),
        ('annual', 'annual'),
        ('audit', 'audit'),
        ('special', 'special'),
    )
    PRIORITY_CHOICES = (
        ('low', 'low'),
        ('medium', 'medium'),
        ('high', 'high'),
        ('urgent', 'urgent'),
    )

    hospital_id = models.CharField(max_length=64, db_index=True)
    report = models.ForeignKey(FinancialReport, on_delete=models.CASCADE, related_name='review_schedules')
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='assigned_reviews'
    )
    scheduled_date = models.DateTimeField(db_index=True)
    review_type = models.CharField(max_length=10, choices=REVIEW_TYPE_CHOICES)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    notes = models.TextField(max_length=1000, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name='created_reviews'
    )
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='completed_reviews'
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['scheduled_date']
        indexes = [
            models.Index(fields=['hospital_id', 'status', 'scheduled_date'], name='review_hosp_status_idx'),
            models.Index(fields=['assigned_to', 'scheduled_date'], name='review_assignee_date_idx'),
        ]

    def __str__(self) -> str:
        return f"review {self.id} report={self.report_id} [{self.status}]"


class ReviewComment(models.Model):
    schedule = models.ForeignKey(ReviewSchedule, on_delete=models.CASCADE, related_name='comments')
    comment = models.TextField(max_length=500)
    commented_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL)
    commented_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['commented_at', 'id']

    def __str__(self) -> str:
        return f"comment {self.id} on review {self.schedule_id}"


class ReviewReminder(models.Model):
    TYPE_CHOICES = (
        ('email', 'email'),
        ('system', 'system'),
        ('sms', 'sms'),
    )
    schedule = models.ForeignKey(ReviewSchedule, on_delete=models.CASCADE, related_name='reminders')
    sent_to = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL)
    reminder_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='system')
    sent_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['sent_at', 'id']

    def __str__(self) -> str:
        return f"reminder {self.reminder_type} for review {self.schedule_id}"


class FinancialAnalysis(models.Model):
    TYPE_CHOICES = (
        ('trend', 'trend'),
        ('ratio', 'ratio'),
        ('comparative', 'comparative'),
        ('forecast', 'forecast'),
        ('performance', 'performance'),
    )
    STATUS_CHOICES = (
        ('generating', 'generating'),
        ('completed', 'completed'),
        ('failed', 'failed'),
    )

    hospital_id = models.CharField(max_length=64, db_index=True)
    analysis_type = models.CharField(max_length=12, choices=TYPE_CHOICES, default='performance')
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    reports = models.ManyToManyField(FinancialReport, blank=True, related_name='analyses')
    metrics = models.JSONField(default=dict, blank=True)
    insights = models.JSONField(default=list, blank=True)
    trends = models.JSONField(default=list, blank=True)
    forecasts = models.JSONField(default=list, blank=True)
    benchmarks = models.JSONField(default=list, blank=True)
    generated_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default='generating')
    completed_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['hospital_id', 'created_at'], name='analysis_hosp_created_idx')]

    def __str__(self) -> str:
        return f"analysis {self.id} {self.analysis_type} [{self.status}]"


class ArchiveLog(models.Model):
    TYPE_CHOICES = (
        ('manual', 'manual'),
        ('automatic', 'automatic'),
        ('scheduled', 'scheduled'),
    )
    STATUS_CHOICES = (
        ('pending', 'pending'),
        ('in-progress', 'in-progress'),
        ('completed', 'completed'),
        ('failed', 'failed'),
    )

    hospital_id = models.CharField(max_length=64, db_index=True)
    archive_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='manual')
    # [{reportId, reportPeriod, reportType, archivedAt}]
    archived_reports = models.JSONField(default=list, blank=True)
    total_reports_archived = models.PositiveIntegerField(default=0)
    archive_reason = models.CharField(max_length=500, blank=True)
    archived_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default='pending')
    completed_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['hospital_id', 'created_at'], name='archive_hosp_created_idx')]

    def __str__(self) -> str:
        return f"archive {self.id} ({self.total_reports_archived} reports) [{self.status}]"


DEFAULT_TAX_SETTINGS = {
    'corporateTaxRate': 0.25,
    'vatRate': 0.11,
    'withholdingTaxRate': 0.02,
    'deductionTypes': [
        'Penyusutan Peralatan',
        'Biaya Operasional',
        'Biaya Penelitian',
        'Biaya CSR',
        'Biaya Pelatihan',
    ],
}

DEFAULT_REPORTING_SETTINGS = {
    'autoApproval': False,
    'requireDualApproval': True,
    'archiveAfterMonths': 24,
    'reminderDays': [7, 3, 1],
}

DEFAULT_NOTIFICATION_SETTINGS = {
    'emailNotifications': True,
    'reminderDays': [7, 3, 1],
    'notifyRoles': ['admin', 'finance'],
}

DEFAULT_SECURITY_SETTINGS = {
    'passwordMinLength': 8,
    'requireUppercase': True,
    'requireNumbers': True,
    'requireSpecialChars': False,
    'sessionTimeoutMinutes': 30,
    'maxLoginAttempts': 5,
}

DEFAULT_BACKUP_SETTINGS = {
    'autoBackup': True,
    'backupFrequency': 'weekly',
    'retentionDays': 90,
}


def default_tax_settings():
    return copy.deepcopy(DEFAULT_TAX_SETTINGS)


def default_reporting_settings():
    return copy.deepcopy(DEFAULT_REPORTING_SETTINGS)


def default_notification_settings():
    return copy.deepcopy(DEFAULT_NOTIFICATION_SETTINGS)


def default_security_settings():
    return copy.deepcopy(DEFAULT_SECURITY_SETTINGS)


def default_backup_settings():
    return copy.deepcopy(DEFAULT_BACKUP_SETTINGS)


class HospitalSettings(models.Model):
    """Per-hospital configuration, created lazily with defaults."""
    CURRENCY_CHOICES = (
        ('IDR', 'IDR'),
        ('USD', 'USD'),
        ('EUR', 'EUR'),
    )

    hospital_id = models.CharField(max_length=64, unique=True)
    hospital_name = models.CharField(max_length=255, default='Rumah Sakit Umum Daerah')
    address = models.CharField(max_length=500, default='Jl. Kesehatan No. 123')
    phone = models.CharField(max_length=32, default='+62-21-1234567')
    email = models.EmailField(default='admin@hospital.com')
    tax_id = models.CharField(max_length=32, default='01.234.567.8-901.000')
    fiscal_year_start = models.PositiveSmallIntegerField(
        default=1, validators=[MinValueValidator(1), MaxValueValidator(12)]
    )
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='IDR')
    tax_settings = models.JSONField(default=default_tax_settings)
    reporting_settings = models.JSONField(default=default_reporting_settings)
    notification_settings = models.JSONField(default=default_notification_settings)
    security_settings = models.JSONField(default=default_security_settings)
    backup_settings = models.JSONField(default=default_backup_settings)
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'hospital settings'

    def __str__(self) -> str:
        return f"settings for {self.hospital_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.object_type}#{self.object_id}"
