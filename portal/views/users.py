"""
Account administration.

CRUD over portal accounts for administrators.  All state lives in the
database; nothing is cached in the process between requests.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from portal import session
from portal.permissions import IsAdminRole
from portal.roles import Role
from portal.serializers.auth import UserWriteSerializer, serialize_user
from portal.services.audit import try_log_action

User = get_user_model()


def _conflict(field: str, value, exclude_pk=None) -> bool:
    qs = User.objects.filter(**{f'{field}__iexact' if field == 'email' else field: value})
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def users_collection(request):
    if request.method == 'GET':
        return Response([serialize_user(u) for u in User.objects.order_by('-date_joined')])

    s = UserWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if _conflict('username', v['username']):
        return Response({'error': 'Username already in use'}, status=status.HTTP_400_BAD_REQUEST)
    if _conflict('email', v['email']):
        return Response({'error': 'Email already in use'}, status=status.HTTP_400_BAD_REQUEST)
    with transaction.atomic():
        user = User.objects.create_user(
            username=v['username'],
            email=v['email'],
            password=v['password'],
            full_name=v['fullName'],
            role=v.get('role', Role.PARTICIPANT),
            is_active=v.get('isActive', True),
        )
    try_log_action(user=request.user, action='user_create', object_type='user', object_id=user.pk,
                   detail={'role': user.role}, ip=session.client_ip(request))
    return Response(serialize_user(user), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk):
    user = User.objects.filter(pk=pk).first()
    if user is None:
        return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return Response(serialize_user(user))

    if request.method == 'DELETE':
        if user.pk == request.user.pk:
            return Response({'error': 'Tidak dapat menghapus akun sendiri'}, status=status.HTTP_400_BAD_REQUEST)
        user_id = user.pk
        user.delete()
        try_log_action(user=request.user, action='user_delete', object_type='user', object_id=user_id,
                       ip=session.client_ip(request))
        return Response({'success': True, 'message': 'User deleted successfully'})

    # PUT
    s = UserWriteSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    if 'username' in v and _conflict('username', v['username'], exclude_pk=user.pk):
        return Response({'error': 'Username already in use by another user'}, status=status.HTTP_400_BAD_REQUEST)
    if 'email' in v and _conflict('email', v['email'], exclude_pk=user.pk):
        return Response({'error': 'Email already in use by another user'}, status=status.HTTP_400_BAD_REQUEST)
    with transaction.atomic():
        for field, attr in (('username', 'username'), ('email', 'email'), ('fullName', 'full_name'),
                            ('role', 'role'), ('isActive', 'is_active')):
            if field in v:
                setattr(user, attr, v[field])
        if v.get('password'):
            user.set_password(v['password'])
        user.save()
    try_log_action(user=request.user, action='user_update', object_type='user', object_id=user.pk,
                   detail={'fields': sorted(k for k in v if k != 'password')}, ip=session.client_ip(request))
    return Response(serialize_user(user))
