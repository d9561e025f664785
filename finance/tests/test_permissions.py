from types import SimpleNamespace

from finance.permissions import (
    APPROVE_REPORTS, DELETE_REPORTS, MANAGE_SETTINGS, OVERRIDE_LOCKS, VIEW_REPORTS,
    HasCapability, capabilities_for, has_capability,
)


def _user(role, active=True):
    return SimpleNamespace(role=role, is_authenticated=True, is_active=active)


def test_role_capabilities():
    assert has_capability(_user('admin'), OVERRIDE_LOCKS)
    assert has_capability(_user('finance'), APPROVE_REPORTS)
    assert not has_capability(_user('finance'), DELETE_REPORTS)
    assert not has_capability(_user('finance'), MANAGE_SETTINGS)
    assert capabilities_for(_user('viewer')) == {VIEW_REPORTS}


def test_unknown_inactive_or_anonymous_users_have_nothing():
    assert capabilities_for(_user('auditor')) == frozenset()
    assert capabilities_for(_user('admin', active=False)) == frozenset()
    assert capabilities_for(None) == frozenset()
    assert capabilities_for(SimpleNamespace(is_authenticated=False, role='admin')) == frozenset()


def test_has_capability_permission_class():
    perm = HasCapability.of(APPROVE_REPORTS)()
    assert perm.has_permission(SimpleNamespace(user=_user('finance')), None)
    assert not perm.has_permission(SimpleNamespace(user=_user('viewer')), None)
