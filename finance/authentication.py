"""
Token authentication for the finance API.

DRF's ``TokenAuthentication`` (``Authorization: Token <key>``) and
simplejwt's ``JWTAuthentication`` (``Authorization: Bearer <access>``) are
subclassed here so that the settings module has a stable import path, and
so that users without a hospital binding are rejected before any handler
runs, whichever credential they present.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions
from rest_framework.authtoken.models import Token
from rest_framework_simplejwt import authentication as jwt_authentication


def _require_hospital(user):
    if not user.hospital_id:
        raise exceptions.AuthenticationFailed('User is not bound to a hospital.')
    return user


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>`` authentication."""

    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        return _require_hospital(user), token


class JWTAuthentication(jwt_authentication.JWTAuthentication):
    """``Authorization: Bearer <access token>`` authentication."""

    def get_user(self, validated_token):
        return _require_hospital(super().get_user(validated_token))


def user_for_token_key(key: str | None):
    """Resolve a DRF token key to an active user, or ``None``.

    Used by the WebSocket consumer, which cannot send headers.
    """
    if not key:
        return None
    token = Token.objects.select_related('user').filter(key=key).first()
    if token is None or not token.user.is_active:
        return None
    return token.user
