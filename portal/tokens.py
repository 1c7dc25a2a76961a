"""
Signed session credential.

The ``phc_token`` cookie carries an HS256 JWT minted with
``rest_framework_simplejwt``.  It embeds the account id and role and
expires ``PORTAL_SESSION_MAX_AGE`` seconds after issue.  Expiry is the
only way a credential stops being valid: there is no revocation list.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken
from rest_framework_simplejwt.utils import aware_utcnow, datetime_from_epoch

from .roles import Role, normalize_role

logger = logging.getLogger(__name__)

ROLE_CLAIM = 'role'


@dataclass(frozen=True)
class Credential:
    subject_id: str
    role: Role
    issued_at: datetime
    expires_at: datetime


def session_lifetime() -> timedelta:
    return timedelta(seconds=settings.PORTAL_SESSION_MAX_AGE)


def issue(subject_id, role, *, issued_at: datetime | None = None) -> str:
    """Mint a signed credential for ``subject_id`` with ``role``.

    ``issued_at`` must be timezone aware and defaults to now.
    """
    claimed = normalize_role(role)
    if claimed is None:
        raise ValueError(f"unknown role: {role!r}")
    issued_at = issued_at or aware_utcnow()
    token = AccessToken()
    token.set_iat(at_time=issued_at)
    token.set_exp(from_time=issued_at, lifetime=session_lifetime())
    token[api_settings.USER_ID_CLAIM] = str(subject_id)
    token[ROLE_CLAIM] = claimed.value
    return str(token)


def verify(token: str | None) -> Credential | None:
    """Return the credential carried by ``token`` or ``None``.

    ``None`` covers every failure: malformed input, a bad signature, an
    expired timestamp, or claims that do not name a subject and a known
    role.
    """
    if not token:
        return None
    try:
        access = AccessToken(token)
    except TokenError as exc:
        logger.debug("credential rejected: %s", exc)
        return None

    subject = access.get(api_settings.USER_ID_CLAIM)
    role = normalize_role(access.get(ROLE_CLAIM))
    iat = access.get('iat')
    exp = access.get('exp')
    if not subject or role is None or iat is None or exp is None:
        logger.debug("credential rejected: incomplete claims")
        return None
    return Credential(
        subject_id=str(subject),
        role=role,
        issued_at=datetime_from_epoch(iat),
        expires_at=datetime_from_epoch(exp),
    )


def reissue(credential: Credential) -> str:
    """Sliding renewal: a fresh credential for the same subject and role."""
    return issue(credential.subject_id, credential.role)
