"""
Session gate.

``SessionGateMiddleware`` runs in front of every route.  Each request is
classified exactly once into a :class:`GateState`:

* public paths pass through untouched, whatever cookies they carry;
* a missing or unverifiable credential is rejected;
* a verified credential is pinned to the client IP recorded in the
  ``session_ip`` cookie.  A matching IP passes and both cookies are
  renewed; a different IP is a security event and ends the session.

Rejected API calls (``/api/...``) get a 401 JSON body, rejected page
requests get a redirect to the login page.  Response shape depends on
the path only, never on why the request was rejected.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from django.conf import settings
from django.http import HttpResponseRedirect, JsonResponse

from . import session, tokens
from .services.audit import try_log_action

logger = logging.getLogger(__name__)

IP_CHANGED = 'ip_changed'

MSG_EXPIRED = 'Sesi login Anda telah berakhir. Harap login kembali untuk melanjutkan.'
MSG_IP_CHANGED = (
    'Terdeteksi penggunaan dari perangkat atau lokasi yang berbeda. '
    'Harap login kembali untuk alasan keamanan.'
)
MSG_GATE_ERROR = 'Terjadi kesalahan saat validasi sesi. Harap login kembali.'


class GateState(enum.Enum):
    PUBLIC = 'public'
    UNAUTHENTICATED = 'unauthenticated'
    AUTHENTICATED_IP_BOUND = 'authenticated_ip_bound'
    AUTHENTICATED_IP_OK = 'authenticated_ip_ok'
    AUTHENTICATED_IP_MISMATCH = 'authenticated_ip_mismatch'
    TOKEN_INVALID_OR_EXPIRED = 'token_invalid_or_expired'
    GATE_ERROR = 'gate_error'


ACCEPTED_STATES = frozenset({GateState.AUTHENTICATED_IP_BOUND, GateState.AUTHENTICATED_IP_OK})

REJECT_MESSAGES = {
    GateState.UNAUTHENTICATED: MSG_EXPIRED,
    GateState.TOKEN_INVALID_OR_EXPIRED: MSG_EXPIRED,
    GateState.AUTHENTICATED_IP_MISMATCH: MSG_IP_CHANGED,
    GateState.GATE_ERROR: MSG_GATE_ERROR,
}


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    credential: tokens.Credential | None = None
    client_ip: str | None = None

    @property
    def accepted(self) -> bool:
        return self.state in ACCEPTED_STATES

    @property
    def reason(self) -> str | None:
        return IP_CHANGED if self.state is GateState.AUTHENTICATED_IP_MISMATCH else None


def is_public_path(path: str, public_paths=None) -> bool:
    """Match ``path`` against the public allow-list.

    Entries ending in ``/`` are raw prefixes, except ``/`` itself which
    only matches the home page.  Other entries match the exact path and
    anything below it (``/doctors`` covers ``/doctors/7`` but not
    ``/doctorsx``).
    """
    for entry in settings.PORTAL_PUBLIC_PATHS if public_paths is None else public_paths:
        if entry == '/':
            if path == '/':
                return True
        elif entry.endswith('/'):
            if path.startswith(entry) or path == entry[:-1]:
                return True
        elif path == entry or path.startswith(entry + '/'):
            return True
    return False


def is_api_path(path: str) -> bool:
    return path == '/api' or path.startswith('/api/')


def evaluate(request) -> GateDecision:
    """Classify ``request``.  Pure apart from reading cookies and headers."""
    if is_public_path(request.path):
        return GateDecision(GateState.PUBLIC)

    token = session.read_token(request)
    if not token:
        return GateDecision(GateState.UNAUTHENTICATED)

    credential = tokens.verify(token)
    if credential is None:
        return GateDecision(GateState.TOKEN_INVALID_OR_EXPIRED)

    current_ip = session.client_ip(request)
    bound_ip = session.read_bound_ip(request)
    if bound_ip is None:
        return GateDecision(GateState.AUTHENTICATED_IP_BOUND, credential, current_ip)
    if bound_ip != current_ip:
        return GateDecision(GateState.AUTHENTICATED_IP_MISMATCH, credential, current_ip)
    return GateDecision(GateState.AUTHENTICATED_IP_OK, credential, current_ip)


class SessionGateMiddleware:
    """Authenticate every non-public request from its session cookies."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        try:
            decision = evaluate(request)
        except Exception:
            logger.exception("session gate failed on %s", request.path)
            decision = GateDecision(GateState.GATE_ERROR)

        if decision.state is GateState.PUBLIC:
            return self.get_response(request)
        if not decision.accepted:
            return self.reject(request, decision)

        request.portal_credential = decision.credential
        response = self.get_response(request)
        # The account behind the credential is gone or disabled: end the
        # session. Views that manage the session themselves (login, logout,
        # refresh) have already written the cookies.
        if getattr(request, 'portal_session_revoked', False):
            session.clear_session_cookies(response)
        elif settings.PORTAL_TOKEN_COOKIE not in response.cookies:
            session.set_session_cookies(response, tokens.reissue(decision.credential), decision.client_ip)
        return response

    def reject(self, request, decision: GateDecision):
        if decision.state is GateState.AUTHENTICATED_IP_MISMATCH:
            logger.warning(
                "session ip mismatch for subject %s: bound=%s current=%s path=%s",
                decision.credential.subject_id, session.read_bound_ip(request), decision.client_ip, request.path,
            )
            try_log_action(
                user=None, action='session_ip_mismatch', object_type='user',
                object_id=decision.credential.subject_id,
                detail={'boundIp': session.read_bound_ip(request), 'path': request.path},
                ip=decision.client_ip,
            )
        else:
            logger.info("session gate rejected %s: %s", request.path, decision.state.value)

        api = is_api_path(request.path)
        if api:
            body = {'error': REJECT_MESSAGES[decision.state], 'authenticated': False}
            if decision.reason:
                body['reason'] = decision.reason
            response = JsonResponse(body, status=401)
        else:
            query = {'expired': 'true'}
            if decision.reason:
                query['reason'] = decision.reason
            response = HttpResponseRedirect(f"{settings.PORTAL_LOGIN_URL}?{urlencode(query)}")

        if not api or session.has_session_cookies(request):
            session.clear_session_cookies(response)
        return response
