"""Django admin registrations for the finance models."""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    ArchiveLog,
    AuditEvent,
    FinancialAnalysis,
    FinancialReport,
    HospitalSettings,
    ReviewComment,
    ReviewReminder,
    ReviewSchedule,
    User,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'email', 'role', 'hospital_id', 'is_active', 'is_staff')
    list_filter = ('role', 'hospital_id', 'is_active')
    search_fields = ('username', 'first_name', 'last_name', 'email')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Hospital', {'fields': ('role', 'hospital_id', 'phone', 'department')}),
    )


@admin.register(FinancialReport)
class FinancialReportAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital_id', 'period', 'report_type', 'status', 'version', 'created_at')
    list_filter = ('status', 'report_type', 'year', 'hospital_id')
    search_fields = ('period', 'notes')
    readonly_fields = ('period_key', 'tax_income', 'tax_amount', 'tax_net_taxable', 'equity_current_earnings')


class ReviewCommentInline(admin.TabularInline):
    model = ReviewComment
    extra = 0


class ReviewReminderInline(admin.TabularInline):
    model = ReviewReminder
    extra = 0


@admin.register(ReviewSchedule)
class ReviewScheduleAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital_id', 'report', 'review_type', 'status', 'priority', 'assigned_to', 'scheduled_date')
    list_filter = ('status', 'review_type', 'priority')
    inlines = [ReviewCommentInline, ReviewReminderInline]


@admin.register(FinancialAnalysis)
class FinancialAnalysisAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital_id', 'analysis_type', 'status', 'generated_by', 'created_at')
    list_filter = ('analysis_type', 'status')


@admin.register(ArchiveLog)
class ArchiveLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital_id', 'archive_type', 'total_reports_archived', 'status', 'created_at')
    list_filter = ('archive_type', 'status')


@admin.register(HospitalSettings)
class HospitalSettingsAdmin(admin.ModelAdmin):
    list_display = ('hospital_id', 'hospital_name', 'currency', 'updated_at')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')
