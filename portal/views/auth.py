"""
Session endpoints.

Login mints the credential and binds it to the caller's IP by writing
both session cookies.  Logout deletes them.  The remaining endpoints
let the front-end probe, refresh and manage the current session.
Failed and successful logins are written to the audit trail together
with the client address.
"""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from portal import session, tokens
from portal.authentication import authenticate_credential, resolve_user, revoke_session
from portal.roles import Role
from portal.serializers.auth import (
    ChangePasswordSerializer,
    LoginSerializer,
    RegisterSerializer,
    serialize_user,
)
from portal.services.audit import try_log_action

User = get_user_model()
logger = logging.getLogger(__name__)

MSG_BAD_LOGIN = 'Email/username atau password tidak valid'


# ---------------------------------------------------------------------
# Login / logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login with email or username plus password.
    Accepts fields:
      - email (an email address or a username)
      - password
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    identifier = (s.validated_data.get('email') or '').strip()
    password = s.validated_data.get('password') or ''
    if not identifier or not password:
        return Response({'error': 'Email/username dan password diperlukan'}, status=status.HTTP_400_BAD_REQUEST)

    ip = session.client_ip(request)
    user = User.objects.filter(Q(email__iexact=identifier) | Q(username=identifier)).first()
    if user is None or (user.is_active and not user.check_password(password)):
        try_log_action(user=user, action='login', object_type='user', object_id=user.pk if user else None,
                       detail={'result': 'fail', 'identifier': identifier}, ip=ip)
        logger.info("login failed for %s from %s", identifier, ip)
        return Response({'error': MSG_BAD_LOGIN}, status=status.HTTP_401_UNAUTHORIZED)
    if not user.is_active:
        return Response({'error': 'Akun ini tidak aktif. Silakan hubungi administrator.'},
                        status=status.HTTP_403_FORBIDDEN)

    update_last_login(None, user)
    token = tokens.issue(user.pk, user.portal_role)
    try_log_action(user=user, action='login', object_type='user', object_id=user.pk,
                   detail={'result': 'ok'}, ip=ip)

    response = Response({
        'success': True,
        'message': 'Login berhasil',
        'user': serialize_user(user),
        'token': token,
    })
    session.set_session_cookies(response, token, ip)
    return response


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def logout_view(request):
    """Delete both session cookies, whatever state the account is in."""
    credential = getattr(request._request, 'portal_credential', None) or authenticate_credential(request)
    if credential is not None:
        try_log_action(user=resolve_user(credential), action='logout', object_type='user',
                       object_id=credential.subject_id, ip=session.client_ip(request))
    response = Response({'success': True, 'message': 'Logout berhasil'})
    session.clear_session_cookies(response)
    return response


# ---------------------------------------------------------------------
# Session probes
# ---------------------------------------------------------------------
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def check_session_view(request):
    credential = getattr(request._request, 'portal_credential', None) or authenticate_credential(request)
    if credential is None:
        return Response({'valid': False, 'error': 'No authentication token found'},
                        status=status.HTTP_401_UNAUTHORIZED)
    user = resolve_user(credential)
    if user is None or not user.is_active:
        revoke_session(request)
        return Response({'valid': False, 'error': 'User not found or inactive'},
                        status=status.HTTP_401_UNAUTHORIZED)
    return Response({'valid': True, 'user': {'id': credential.subject_id, 'role': credential.role.value}})


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def refresh_token_view(request):
    """Issue a fresh credential for a still-existing, active account."""
    credential = authenticate_credential(request)
    if credential is None:
        return Response({'error': 'No authentication token found'}, status=status.HTTP_401_UNAUTHORIZED)
    user = resolve_user(credential)
    if user is None or not user.is_active:
        revoke_session(request)
        return Response({'error': 'User not found or inactive'}, status=status.HTTP_401_UNAUTHORIZED)

    token = tokens.issue(user.pk, user.portal_role)
    response = Response({'success': True, 'user': {'id': str(user.pk), 'role': user.portal_role.value}})
    session.set_session_cookies(response, token, session.client_ip(request))
    return response


# ---------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register_view(request):
    """Self-service registration; always creates a participant."""
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data

    if User.objects.filter(email__iexact=v['email']).exists():
        return Response({'error': 'Email already in use'}, status=status.HTTP_400_BAD_REQUEST)
    username = (v.get('username') or '').strip()
    if username and User.objects.filter(username=username).exists():
        return Response({'error': 'Username already in use'}, status=status.HTTP_400_BAD_REQUEST)
    if not username:
        username = f"{v['email'].split('@')[0]}_{str(int(timezone.now().timestamp()))[-4:]}"

    with transaction.atomic():
        user = User.objects.create_user(
            username=username,
            email=v['email'],
            password=v['password'],
            full_name=v['name'],
            role=Role.PARTICIPANT,
        )
    try_log_action(user=user, action='register', object_type='user', object_id=user.pk,
                   ip=session.client_ip(request))
    return Response({'message': 'Registration successful', 'user': serialize_user(user)},
                    status=status.HTTP_201_CREATED)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def check_email_view(request):
    email = (request.query_params.get('email') or '').strip()
    if not email:
        return Response({'error': 'Email parameter is required'}, status=status.HTTP_400_BAD_REQUEST)
    return Response({'exists': User.objects.filter(email__iexact=email).exists()})


# ---------------------------------------------------------------------
# Current account
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    user = request.user
    s = ChangePasswordSerializer(data=request.data, context={'user': user})
    s.is_valid(raise_exception=True)
    if not user.check_password(s.validated_data['currentPassword']):
        return Response({'error': 'Current password is incorrect'}, status=status.HTTP_400_BAD_REQUEST)
    user.set_password(s.validated_data['newPassword'])
    user.save(update_fields=['password'])
    try_log_action(user=user, action='change_password', object_type='user', object_id=user.pk,
                   ip=session.client_ip(request))
    return Response({'message': 'Password updated successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response(serialize_user(request.user))
