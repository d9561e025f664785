"""Finance application for the hospital reporting backend.

This package contains the models, services, serializers, views and route
registrations implementing financial reports, review schedules, dashboards
and per-hospital settings.
"""
