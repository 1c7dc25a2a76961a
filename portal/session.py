"""
Cookie-backed session state.

A browser session is two cookies: the signed credential and the client
IP observed when the session was bound.  Nothing is kept server side,
so every request is judged on what it carries.
"""
from __future__ import annotations

from django.conf import settings

UNKNOWN_IP = 'unknown'


def read_token(request) -> str | None:
    return request.COOKIES.get(settings.PORTAL_TOKEN_COOKIE) or None


def read_bound_ip(request) -> str | None:
    return request.COOKIES.get(settings.PORTAL_IP_COOKIE) or None


def has_session_cookies(request) -> bool:
    return (
        settings.PORTAL_TOKEN_COOKIE in request.COOKIES
        or settings.PORTAL_IP_COOKIE in request.COOKIES
    )


def client_ip(request) -> str:
    """Best-effort source address of the request.

    The first hop of ``X-Forwarded-For`` wins, then ``X-Real-IP``, then
    the direct peer address.
    """
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    first_hop = forwarded.split(',')[0].strip()
    if first_hop:
        return first_hop
    real_ip = request.META.get('HTTP_X_REAL_IP', '').strip()
    if real_ip:
        return real_ip
    return request.META.get('REMOTE_ADDR') or UNKNOWN_IP


def _set(response, name: str, value: str) -> None:
    response.set_cookie(
        name,
        value,
        max_age=settings.PORTAL_SESSION_MAX_AGE,
        path='/',
        secure=settings.PORTAL_COOKIE_SECURE,
        httponly=True,
        samesite='Lax',
    )


def set_session_cookies(response, token: str, ip: str) -> None:
    """Write both cookies with a full, fresh lifetime."""
    _set(response, settings.PORTAL_TOKEN_COOKIE, token)
    _set(response, settings.PORTAL_IP_COOKIE, ip)


def clear_session_cookies(response) -> None:
    response.delete_cookie(settings.PORTAL_TOKEN_COOKIE, path='/', samesite='Lax')
    response.delete_cookie(settings.PORTAL_IP_COOKIE, path='/', samesite='Lax')
