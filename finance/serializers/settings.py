from rest_framework import serializers

from finance.models import HospitalSettings
from finance.services.hospital_settings import SCALAR_FIELDS, SECTION_FIELDS


class TaxSettingsSerializer(serializers.Serializer):
    corporateTaxRate = serializers.FloatField(min_value=0, max_value=1, required=False)
    vatRate = serializers.FloatField(min_value=0, max_value=1, required=False)
    withholdingTaxRate = serializers.FloatField(min_value=0, max_value=1, required=False)
    deductionTypes = serializers.ListField(child=serializers.CharField(max_length=100), required=False)


class ReportingSettingsSerializer(serializers.Serializer):
    autoApproval = serializers.BooleanField(required=False)
    requireDualApproval = serializers.BooleanField(required=False)
    archiveAfterMonths = serializers.IntegerField(min_value=1, max_value=120, required=False)
    reminderDays = serializers.ListField(child=serializers.IntegerField(min_value=0, max_value=365), required=False)


class NotificationSettingsSerializer(serializers.Serializer):
    emailNotifications = serializers.BooleanField(required=False)
    reminderDays = serializers.ListField(child=serializers.IntegerField(min_value=0, max_value=365), required=False)
    notifyRoles = serializers.ListField(
        child=serializers.ChoiceField(choices=['admin', 'finance', 'viewer']), required=False
    )


class SecuritySettingsSerializer(serializers.Serializer):
    passwordMinLength = serializers.IntegerField(min_value=6, max_value=128, required=False)
    requireUppercase = serializers.BooleanField(required=False)
    requireNumbers = serializers.BooleanField(required=False)
    requireSpecialChars = serializers.BooleanField(required=False)
    sessionTimeoutMinutes = serializers.IntegerField(min_value=5, max_value=1440, required=False)
    maxLoginAttempts = serializers.IntegerField(min_value=1, max_value=100, required=False)


class BackupSettingsSerializer(serializers.Serializer):
    autoBackup = serializers.BooleanField(required=False)
    backupFrequency = serializers.ChoiceField(choices=['daily', 'weekly', 'monthly'], required=False)
    retentionDays = serializers.IntegerField(min_value=1, max_value=3650, required=False)


class SettingsUpdateSerializer(serializers.Serializer):
    hospitalName = serializers.CharField(max_length=255, required=False)
    address = serializers.CharField(max_length=500, required=False)
    phone = serializers.CharField(max_length=32, required=False)
    email = serializers.EmailField(required=False)
    taxId = serializers.CharField(max_length=32, required=False)
    fiscalYearStart = serializers.IntegerField(min_value=1, max_value=12, required=False)
    currency = serializers.ChoiceField(choices=[c for c, _ in HospitalSettings.CURRENCY_CHOICES], required=False)
    taxSettings = TaxSettingsSerializer(required=False)
    reportingSettings = ReportingSettingsSerializer(required=False)
    notificationSettings = NotificationSettingsSerializer(required=False)
    securitySettings = SecuritySettingsSerializer(required=False)
    backupSettings = BackupSettingsSerializer(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No settings given.')
        # nested sections come back as OrderedDict; JSONField wants plain dicts
        return {k: dict(v) if isinstance(v, dict) else v for k, v in attrs.items()}


def format_settings(obj: HospitalSettings) -> dict:
    data = {'hospitalId': obj.hospital_id}
    for key, attr in SCALAR_FIELDS.items():
        data[key] = getattr(obj, attr)
    for key, attr in SECTION_FIELDS.items():
        data[key] = getattr(obj, attr)
    data['updatedAt'] = obj.updated_at
    return data
