"""
Role to capability mapping and the permission classes built on it.

Handlers never compare role strings; they ask whether the actor holds a
capability, either through :func:`has_capability` or by listing
``HasCapability.of('...')`` in ``@permission_classes``.
"""
from rest_framework.permissions import BasePermission

VIEW_REPORTS = 'view_reports'
CREATE_REPORTS = 'create_reports'
EDIT_REPORTS = 'edit_reports'
DELETE_REPORTS = 'delete_reports'
APPROVE_REPORTS = 'approve_reports'
MANAGE_USERS = 'manage_users'
MANAGE_SETTINGS = 'manage_settings'
EXPORT_DATA = 'export_data'
OVERRIDE_LOCKS = 'override_locks'

ROLE_CAPABILITIES = {
    'admin': frozenset({
        VIEW_REPORTS, CREATE_REPORTS, EDIT_REPORTS, DELETE_REPORTS, APPROVE_REPORTS,
        MANAGE_USERS, MANAGE_SETTINGS, EXPORT_DATA, OVERRIDE_LOCKS,
    }),
    'finance': frozenset({
        VIEW_REPORTS, CREATE_REPORTS, EDIT_REPORTS, APPROVE_REPORTS, EXPORT_DATA,
    }),
    'viewer': frozenset({VIEW_REPORTS}),
}


def capabilities_for(user) -> frozenset:
    if not (user and getattr(user, 'is_authenticated', False) and getattr(user, 'is_active', True)):
        return frozenset()
    return ROLE_CAPABILITIES.get(getattr(user, 'role', None), frozenset())


def has_capability(user, capability: str) -> bool:
    return capability in capabilities_for(user)


class HasCapability(BasePermission):
    """Allow access only to users whose role grants ``capability``.

    Use :meth:`of` to build a concrete class for ``@permission_classes``.
    """
    capability: str = ''
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return has_capability(getattr(request, 'user', None), self.capability)

    @classmethod
    def of(cls, capability: str):
        return type(f'Has_{capability}', (cls,), {'capability': capability})



def require_capability(user, capability: str) -> None:
    """Raise :class:`finance.exceptions.AccessDenied` unless ``user`` holds ``capability``."""
    if not has_capability(user, capability):
        from finance.exceptions import AccessDenied
        raise AccessDenied(f'Missing capability: {capability}')
