"""
Per-hospital settings.

A settings row is created lazily with defaults the first time anything
reads it.  Sections (tax, reporting, notification, security, backup) are
stored as JSON and merged key by key on update.
"""
import logging
from decimal import Decimal

from django.db import transaction

from finance import ledger
from finance.models import HospitalSettings
from finance.permissions import MANAGE_SETTINGS, require_capability
from finance.services.audit import log_action

logger = logging.getLogger(__name__)

SCALAR_FIELDS = {
    'hospitalName': 'hospital_name',
    'address': 'address',
    'phone': 'phone',
    'email': 'email',
    'taxId': 'tax_id',
    'fiscalYearStart': 'fiscal_year_start',
    'currency': 'currency',
}

SECTION_FIELDS = {
    'taxSettings': 'tax_settings',
    'reportingSettings': 'reporting_settings',
    'notificationSettings': 'notification_settings',
    'securitySettings': 'security_settings',
    'backupSettings': 'backup_settings',
}


def settings_for(hospital_id: str) -> HospitalSettings:
    obj, created = HospitalSettings.objects.get_or_create(hospital_id=hospital_id)
    if created:
        logger.info("created default settings for %s", hospital_id)
    return obj


def default_tax_rate(hospital_id: str) -> Decimal:
    rate = settings_for(hospital_id).tax_settings.get('corporateTaxRate')
    if rate is None:
        return ledger.DEFAULT_TAX_RATE
    return Decimal(str(rate))


def archive_after_months(hospital_id: str) -> int:
    return int(settings_for(hospital_id).reporting_settings.get('archiveAfterMonths', 24))


def reminder_days(hospital_id: str) -> list[int]:
    return list(settings_for(hospital_id).notification_settings.get('reminderDays', [7, 3, 1]))


def get_settings(actor) -> HospitalSettings:
    require_capability(actor, MANAGE_SETTINGS)
    return settings_for(actor.hospital_id)


def update_settings(actor, values: dict) -> HospitalSettings:
    """Apply a partial camelCase payload; sections merge with stored keys."""
    require_capability(actor, MANAGE_SETTINGS)
    settings_for(actor.hospital_id)
    with transaction.atomic():
        obj = HospitalSettings.objects.select_for_update().get(hospital_id=actor.hospital_id)
        for key, attr in SCALAR_FIELDS.items():
            if key in values:
                setattr(obj, attr, values[key])
        for key, attr in SECTION_FIELDS.items():
            if key in values:
                setattr(obj, attr, {**getattr(obj, attr), **values[key]})
        obj.updated_by = actor
        obj.save()
    log_action(user=actor, action='settings_update', object_type='settings', object_id=obj.id,
               detail={'keys': sorted(values)})
    return obj


def reset_settings(actor) -> HospitalSettings:
    require_capability(actor, MANAGE_SETTINGS)
    settings_for(actor.hospital_id)
    resettable = set(SCALAR_FIELDS.values()) | set(SECTION_FIELDS.values())
    with transaction.atomic():
        obj = HospitalSettings.objects.select_for_update().get(hospital_id=actor.hospital_id)
        for field in HospitalSettings._meta.concrete_fields:
            if field.name in resettable:
                setattr(obj, field.name, field.get_default())
        obj.updated_by = actor
        obj.save()
    log_action(user=actor, action='settings_reset', object_type='settings', object_id=obj.id)
    logger.info("settings reset for %s by %s", actor.hospital_id, actor.username)
    return obj


def get_backup_settings(actor) -> dict:
    return get_settings(actor).backup_settings


def update_backup_settings(actor, values: dict) -> dict:
    return update_settings(actor, {'backupSettings': values}).backup_settings
