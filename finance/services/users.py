"""
Hospital user administration.

Administrators manage the accounts of their own hospital: list, create,
edit, change role, activate/deactivate and delete.  Nobody may deactivate,
delete or change the role of their own account.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.db.models import Q

from finance.exceptions import AccessDenied, Conflict, NotFound, ValidationFailure
from finance.models import AuditEvent, ReviewSchedule, User
from finance.permissions import MANAGE_USERS, require_capability
from finance.services.audit import log_action
from finance.services.paging import paginate

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('first_name', 'last_name', 'email', 'phone', 'department')


def split_name(name: str) -> tuple[str, str]:
    first, _, last = (name or '').strip().partition(' ')
    return first, last.strip()


def _fetch(actor, user_id, *, lock: bool = False) -> User:
    qs = User.objects.select_for_update() if lock else User.objects.all()
    user = qs.filter(pk=user_id).first()
    if user is None:
        raise NotFound('User not found.')
    if user.hospital_id != actor.hospital_id:
        raise AccessDenied('User belongs to another hospital.')
    return user


def _not_self(actor, user: User, what: str) -> None:
    if user.pk == actor.pk:
        raise ValidationFailure(f'Cannot {what} your own account.')


def _ensure_unique(email: str, username: str, exclude_id: Optional[int] = None) -> None:
    errors = {}
    others = User.objects.exclude(pk=exclude_id) if exclude_id else User.objects.all()
    if email and others.filter(email__iexact=email).exists():
        errors['email'] = ['User already exists with this email.']
    if username and others.filter(username__iexact=username).exists():
        errors['username'] = ['User already exists with this username.']
    if errors:
        raise ValidationFailure('User already exists.', errors=errors)


def list_users(actor, *, role=None, is_active=None, search=None, page=1, limit=10):
    require_capability(actor, MANAGE_USERS)
    qs = User.objects.filter(hospital_id=actor.hospital_id)
    if role:
        qs = qs.filter(role=role)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    if search:
        qs = qs.filter(
            Q(username__icontains=search) | Q(first_name__icontains=search)
            | Q(last_name__icontains=search) | Q(email__icontains=search)
        )
    return paginate(qs.order_by('-date_joined', '-id'), page, limit)


def get_user(actor, user_id) -> User:
    require_capability(actor, MANAGE_USERS)
    return _fetch(actor, user_id)


def create_user(actor, *, email, password, role, name='', username=None, phone='', department='') -> User:
    """Create an account bound to the actor's hospital.

    ``username`` defaults to the email address, which login also accepts.
    """
    require_capability(actor, MANAGE_USERS)
    username = (username or email).strip()
    _ensure_unique(email, username)
    first_name, last_name = split_name(name)
    user = User.objects.create_user(
        username=username,
        email=email,
        password=password,
        role=role,
        hospital_id=actor.hospital_id,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        department=department,
    )
    log_action(user=actor, action='user_create', object_type='user', object_id=user.id, detail={'role': role})
    logger.info("user %s created in %s by %s", user.username, user.hospital_id, actor.username)
    return user


def update_user(actor, user_id, values: dict) -> User:
    """Update profile fields; role, status and password have their own paths."""
    require_capability(actor, MANAGE_USERS)
    unknown = set(values) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationFailure('Unknown user fields.', errors={k: ['Not allowed.'] for k in sorted(unknown)})
    with transaction.atomic():
        user = _fetch(actor, user_id, lock=True)
        if 'email' in values:
            _ensure_unique(values['email'], '', exclude_id=user.pk)
        for field, value in values.items():
            setattr(user, field, value)
        user.save(update_fields=list(values) or None)
    log_action(user=actor, action='user_update', object_type='user', object_id=user.id,
               detail={'fields': sorted(values)})
    return user


def change_role(actor, user_id, role: str) -> User:
    require_capability(actor, MANAGE_USERS)
    if role not in dict(User.ROLE_CHOICES):
        raise ValidationFailure('Invalid role.', errors={'role': ['Must be one of admin, finance, viewer.']})
    with transaction.atomic():
        user = _fetch(actor, user_id, lock=True)
        _not_self(actor, user, 'change the role of')
        previous = user.role
        user.role = role
        user.save(update_fields=['role'])
    log_action(user=actor, action='user_role', object_type='user', object_id=user.id,
               detail={'from': previous, 'to': role})
    logger.info("user %s role %s -> %s by %s", user.username, previous, role, actor.username)
    return user


def toggle_status(actor, user_id) -> User:
    require_capability(actor, MANAGE_USERS)
    with transaction.atomic():
        user = _fetch(actor, user_id, lock=True)
        _not_self(actor, user, 'deactivate')
        user.is_active = not user.is_active
        user.save(update_fields=['is_active'])
    log_action(user=actor, action='user_status', object_type='user', object_id=user.id,
               detail={'isActive': user.is_active})
    return user


def delete_user(actor, user_id) -> None:
    require_capability(actor, MANAGE_USERS)
    with transaction.atomic():
        user = _fetch(actor, user_id, lock=True)
        _not_self(actor, user, 'delete')
        open_reviews = user.assigned_reviews.exclude(
            status__in=[ReviewSchedule.STATUS_COMPLETED, ReviewSchedule.STATUS_CANCELLED]
        ).count()
        if open_reviews:
            raise Conflict(f'User still has {open_reviews} open review(s); reassign them first.')
        uid, username = user.pk, user.username
        user.delete()
    log_action(user=actor, action='user_delete', object_type='user', object_id=uid, detail={'username': username})
    logger.info("user %s deleted by %s", username, actor.username)


def user_activity(actor, user_id, limit: int = 20) -> list[AuditEvent]:
    """Most recent audit events performed by the user."""
    require_capability(actor, MANAGE_USERS)
    user = _fetch(actor, user_id)
    return list(AuditEvent.objects.filter(user=user).order_by('-created_at', '-id')[:limit])
