"""
Authentication and profile endpoints.

Login issues both a DRF token and a JWT pair.  Users that enabled
two-factor authentication must also send a valid ``twoFactorCode``;
the error ``reason`` tells the client whether to prompt for it
(``2fa_required``) or to retry (``invalid_2fa_code``).
"""
from __future__ import annotations

from django.conf import settings
from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from .exceptions import NotAuthenticatedWithReason
from .serializers.auth import LoginSerializer, ProfileActionSerializer
from .services import totp
from .services.audit import log_action, log_login
from .services.users import format_user, update_user


def check_second_factor(user, code) -> None:
    if not user.two_factor_enabled:
        return
    code = (code or '').strip()
    if not code:
        raise NotAuthenticatedWithReason('Two-factor code required', reason='2fa_required')
    if not user.two_factor_secret or not totp.verify_code(user.two_factor_secret, code):
        raise NotAuthenticatedWithReason('Invalid two-factor code', reason='invalid_2fa_code')


# ---------------------------------------------------------------------
# Username/password login (+ TOTP when enabled)
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    user = authenticate(request, username=vd['username'], password=vd['password'])
    if not user:
        log_login(request, user=None, result='fail', username=vd['username'])
        raise NotAuthenticatedWithReason('Invalid login')

    try:
        check_second_factor(user, vd.get('twoFactorCode'))
    except NotAuthenticatedWithReason as exc:
        log_login(request, user=user, result=exc.reason)
        raise

    log_login(request, user=user, result='ok')

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return Response({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'user': format_user(user),
    }, status=200)

# ScopedRateThrottle reads throttle_scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as exc:
        raise NotAuthenticatedWithReason(str(exc), reason='invalid_refresh_token')
    payload = {'ok': True, 'jwt_access': s.validated_data['access']}
    if 'refresh' in s.validated_data:
        payload['jwt_refresh'] = s.validated_data['refresh']
    return Response(payload)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist one refresh token, or every outstanding token of the caller."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as exc:
            raise ValidationError({'refresh': str(exc)})
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    return Response({'ok': True, 'blacklisted': count})


# ---------------------------------------------------------------------
# Profile: 2FA enrolment, password change, own personal data
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile_me(request):
    user = request.user
    return Response({'id': user.id, 'username': user.username, 'twoFactorEnabled': bool(user.two_factor_enabled)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def profile_action(request):
    s = ProfileActionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user = request.user
    action = vd['action']

    if action == 'setup-2fa':
        if user.two_factor_enabled:
            raise ValidationError('2FA is already enabled')
        secret = totp.generate_secret()
        user.two_factor_temp_secret = secret
        user.save(update_fields=['two_factor_temp_secret'])
        uri = totp.build_auth_uri(settings.TOTP_ISSUER, user.username, secret)
        return Response({'action': action, 'secret': secret, 'otpauthUri': uri})

    if action == 'enable-2fa':
        if user.two_factor_enabled:
            raise ValidationError('2FA is already enabled')
        code = vd.get('twoFactorCode') or ''
        if not code:
            raise ValidationError('2FA code is required')
        user.refresh_from_db(fields=['two_factor_temp_secret'])
        if not user.two_factor_temp_secret:
            raise ValidationError('You need to start 2FA setup first')
        if not totp.verify_code(user.two_factor_temp_secret, code):
            raise ValidationError('Invalid 2FA code')
        user.two_factor_enabled = True
        user.two_factor_secret = user.two_factor_temp_secret
        user.two_factor_temp_secret = None
        user.save(update_fields=['two_factor_enabled', 'two_factor_secret', 'two_factor_temp_secret'])
        log_action(user=user, action='enable_2fa', object_type='user', object_id=user.id)
        return Response({'action': action, 'twoFactorEnabled': True})

    if action == 'change-password':
        current, new = vd.get('currentPassword') or '', vd.get('newPassword') or ''
        if not current or not new:
            raise ValidationError('Current and new password are required')
        if len(new) < 8:
            raise ValidationError('New password must be at least 8 characters')
        if user.two_factor_enabled and not vd.get('twoFactorCode'):
            raise ValidationError('2FA code is required')
        if not user.check_password(current):
            raise ValidationError('Invalid current password')
        if user.two_factor_enabled and not totp.verify_code(user.two_factor_secret or '', vd['twoFactorCode']):
            raise ValidationError('Invalid 2FA code')
        user.set_password(new)
        user.save(update_fields=['password'])
        log_action(user=user, action='change_password', object_type='user', object_id=user.id)
        return Response({'action': action, 'success': True})

    update_user(user, {k: vd[k] for k in ('personalData', 'contactData') if vd.get(k)})
    return Response({'action': action, 'success': True})
