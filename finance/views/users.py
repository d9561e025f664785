"""
User administration endpoints.

Every handler requires the ``manage_users`` capability and only ever sees
accounts of the caller's hospital.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from finance.permissions import MANAGE_USERS, HasCapability
from finance.responses import created, ok
from finance.serializers.quick_actions import LimitQuerySerializer
from finance.serializers.users import (
    RoleSerializer, UserCreateSerializer, UserListQuerySerializer, UserUpdateSerializer, format_account,
    format_activity,
)
from finance.services import users as svc

CanManageUsers = HasCapability.of(MANAGE_USERS)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanManageUsers])
def users(request):
    if request.method == 'POST':
        s = UserCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = svc.create_user(request.user, **s.validated_data)
        return created(format_account(user), message='User created successfully')

    q = UserListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    items, pagination = svc.list_users(
        request.user,
        role=vd.get('role'),
        is_active=q.active_filter(),
        search=vd.get('search'),
        page=vd.get('page'),
        limit=vd.get('limit'),
    )
    return ok([format_account(u) for u in items], pagination=pagination)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, CanManageUsers])
def user_detail(request, user_id: int):
    if request.method == 'PUT':
        s = UserUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = svc.update_user(request.user, user_id, s.to_model_values())
        return ok(format_account(user), message='User updated successfully')
    if request.method == 'DELETE':
        svc.delete_user(request.user, user_id)
        return ok(None, message='User deleted successfully')
    return ok(format_account(svc.get_user(request.user, user_id)))


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, CanManageUsers])
def user_role(request, user_id: int):
    s = RoleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = svc.change_role(request.user, user_id, s.validated_data['role'])
    return ok(format_account(user), message='User role updated successfully')


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, CanManageUsers])
def user_status(request, user_id: int):
    user = svc.toggle_status(request.user, user_id)
    state = 'activated' if user.is_active else 'deactivated'
    return ok(format_account(user), message=f'User {state} successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanManageUsers])
def user_activity(request, user_id: int):
    q = LimitQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    events = svc.user_activity(request.user, user_id, limit=q.validated_data.get('limit') or 20)
    return ok([format_activity(e) for e in events])
