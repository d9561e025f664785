from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from finance.permissions import MANAGE_SETTINGS, HasCapability
from finance.responses import ok
from finance.serializers.settings import BackupSettingsSerializer, SettingsUpdateSerializer, format_settings
from finance.services import hospital_settings as svc

CanManage = HasCapability.of(MANAGE_SETTINGS)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, CanManage])
def hospital_settings(request):
    if request.method == 'PUT':
        s = SettingsUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        obj = svc.update_settings(request.user, s.validated_data)
        return ok(format_settings(obj), message='Settings updated')
    return ok(format_settings(svc.get_settings(request.user)))


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanManage])
def reset(request):
    return ok(format_settings(svc.reset_settings(request.user)), message='Settings reset to defaults')


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, CanManage])
def backup(request):
    if request.method == 'PUT':
        s = BackupSettingsSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        return ok(svc.update_backup_settings(request.user, dict(s.validated_data)), message='Backup settings updated')
    return ok(svc.get_backup_settings(request.user))
