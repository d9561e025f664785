"""
URL mappings for the finance API.

Paths carry no trailing slash (``APPEND_SLASH`` is off).  Paths that
serve several methods are handled by one view that dispatches on
``request.method``.
"""
from django.urls import include, path

from .auth_views import login_view, logout_view, me_view, refresh_view
from .views import dashboard, health, quick_actions, reports, schedules, users
from .views import settings as hospital_settings

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('api/health', health.health),
    # Authentication
    path('api/auth/login', login_view),
    path('api/auth/refresh', refresh_view),
    path('api/auth/logout', logout_view),
    path('api/auth/me', me_view),
    # Reports
    path('api/reports', reports.reports),
    path('api/reports/stats', reports.report_stats),
    path('api/reports/<int:report_id>', reports.report_detail),
    path('api/reports/<int:report_id>/submit', reports.submit_report),
    path('api/reports/<int:report_id>/approve', reports.approve_report),
    path('api/reports/<int:report_id>/archive', reports.archive_report),
    path('api/reports/<int:report_id>/duplicate', reports.duplicate_report),
    path('api/reports/<int:report_id>/export', reports.export_report),
    # Review schedules
    path('api/schedules', schedules.schedules),
    path('api/schedules/upcoming', schedules.upcoming),
    path('api/schedules/overdue', schedules.overdue),
    path('api/schedules/<int:schedule_id>', schedules.schedule_detail),
    path('api/schedules/<int:schedule_id>/complete', schedules.complete),
    path('api/schedules/<int:schedule_id>/comment', schedules.comment),
    path('api/schedules/<int:schedule_id>/reminder', schedules.reminder),
    # Dashboard
    path('api/dashboard/stats', dashboard.stats),
    path('api/dashboard/ratios', dashboard.ratios),
    path('api/dashboard/analysis', dashboard.analysis),
    path('api/dashboard/activity', dashboard.activity),
    path('api/dashboard/charts/revenue', dashboard.revenue_chart),
    path('api/dashboard/charts/expenses', dashboard.expense_chart),
    path('api/dashboard/charts/profit', dashboard.profit_chart),
    path('api/dashboard/charts/balance-sheet', dashboard.balance_sheet_chart),
    # Quick actions
    path('api/quick-actions/schedule-review', quick_actions.schedule_review),
    path('api/quick-actions/schedules', quick_actions.review_schedules),
    path('api/quick-actions/schedule/<int:schedule_id>/status', quick_actions.schedule_status),
    path('api/quick-actions/archive-reports', quick_actions.archive_reports),
    path('api/quick-actions/archive-logs', quick_actions.archive_logs),
    path('api/quick-actions/financial-analysis', quick_actions.financial_analysis),
    path('api/quick-actions/analyses', quick_actions.analyses),
    # Settings
    path('api/settings', hospital_settings.hospital_settings),
    path('api/settings/reset', hospital_settings.reset),
    path('api/settings/backup', hospital_settings.backup),
    # Users
    path('api/users', users.users),
    path('api/users/<int:user_id>', users.user_detail),
    path('api/users/<int:user_id>/role', users.user_role),
    path('api/users/<int:user_id>/status', users.user_status),
    path('api/users/<int:user_id>/activity', users.user_activity),
]
