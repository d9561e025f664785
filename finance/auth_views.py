"""
Authentication endpoints.

Login issues both a DRF token (``Authorization: Token <key>``) and a JWT
pair; either is accepted by the API.  These views live apart from
``finance.authentication`` so that DRF can import the authentication
class without pulling in views.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate, get_user_model
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from finance.permissions import capabilities_for
from finance.responses import ok
from finance.serializers.auth import LoginSerializer, LogoutSerializer
from finance.services.audit import log_action
from finance.throttling import LoginRateThrottle

logger = logging.getLogger(__name__)
User = get_user_model()


def format_me(user) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'name': user.get_full_name() or user.username,
        'email': user.email,
        'role': user.role,
        'hospitalId': user.hospital_id,
        'department': user.department,
        'capabilities': sorted(capabilities_for(user)),
    }


def _username_for(account: str) -> str:
    """Map an email to its username; anything else is taken as a username."""
    if '@' in account:
        match = User.objects.filter(email__iexact=account).only('username').first()
        if match is not None:
            return match.username
    return account


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    account = s.validated_data['account']
    ip = request.META.get('REMOTE_ADDR')

    user = authenticate(request, username=_username_for(account), password=s.validated_data['password'])
    if user is None or not user.hospital_id:
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'account': account, 'ip': ip})
        logger.warning("failed login for %s from %s", account, ip)
        raise AuthenticationFailed('Invalid credentials.')

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return ok({
        'token': token_obj.key,
        'access': str(refresh.access_token),
        'refresh': str(refresh),
        'user': format_me(user),
    }, message='Login successful')


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def refresh_view(request):
    """Exchange a refresh token for a new access token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise AuthenticationFailed(str(e))
    return ok(dict(s.validated_data))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist one refresh token, or all of the user's when none is given.

    The DRF token is deleted too; the next login issues a fresh key.
    """
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            raise AuthenticationFailed(str(e))
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, made = BlacklistedToken.objects.get_or_create(token=token)
            count += int(made)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return ok({'blacklisted': count}, message='Logged out', status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return ok(format_me(request.user))
