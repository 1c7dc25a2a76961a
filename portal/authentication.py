"""
Credential sourcing for API views.

A request may present its credential in the ``phc_token`` cookie or in
an ``Authorization: Bearer`` header.  Both are tried in that order by a
single function, :func:`authenticate_credential`, so every caller applies
the same rules.  Only signed credentials are accepted; a header that
merely claims a role is never trusted.

:class:`SessionTokenAuthentication` plugs the same lookup into Django
REST framework and resolves the credential subject to an account.
"""
from __future__ import annotations

import uuid

from django.contrib.auth import get_user_model
from rest_framework import authentication, exceptions

from . import session, tokens
from .roles import Role, has_role

BEARER_KEYWORD = 'Bearer'


def cookie_source(request) -> str | None:
    return session.read_token(request)


def bearer_source(request) -> str | None:
    header = authentication.get_authorization_header(request).split()
    if len(header) != 2 or header[0].decode('latin-1').lower() != BEARER_KEYWORD.lower():
        return None
    try:
        return header[1].decode()
    except UnicodeError:
        return None


CREDENTIAL_SOURCES = (cookie_source, bearer_source)


def revoke_session(request) -> None:
    """Tell the session gate to clear the cookies instead of renewing them."""
    getattr(request, '_request', request).portal_session_revoked = True


def resolve_user(credential: tokens.Credential):
    """Return the account named by the credential subject, or ``None``."""
    try:
        subject = uuid.UUID(credential.subject_id)
    except ValueError:
        return None
    return get_user_model().objects.filter(pk=subject).first()


def authenticate_credential(request, required_role: Role | None = None) -> tokens.Credential | None:
    """Return the first verified credential among the request's sources.

    When ``required_role`` is given a verified credential that lacks the
    role is skipped and the next source is tried.
    """
    for source in CREDENTIAL_SOURCES:
        credential = tokens.verify(source(request))
        if credential is None:
            continue
        if required_role is not None and not has_role(credential.role, required_role):
            continue
        return credential
    return None


class SessionTokenAuthentication(authentication.BaseAuthentication):
    """DRF authentication backed by the portal credential.

    Returns ``(user, credential)``.  A request that carries no usable
    credential is left anonymous so permission classes decide the
    outcome; a credential whose account is gone or disabled fails hard.
    """

    def authenticate(self, request):
        credential = getattr(request._request, 'portal_credential', None) or authenticate_credential(request)
        if credential is None:
            return None
        user = resolve_user(credential)
        if user is None or not user.is_active:
            revoke_session(request)
            raise exceptions.AuthenticationFailed('Akun tidak ditemukan atau tidak aktif')
        return user, credential

    def authenticate_header(self, request):
        return BEARER_KEYWORD
