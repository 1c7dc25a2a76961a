"""
Role policy for portal accounts.

Roles form a closed set.  ``admin`` is a superset of every other role;
the remaining roles are only ever compared for equality.  Older rows
may still carry the short storage spelling ``part`` for participants,
which :func:`normalize_role` folds into :attr:`Role.PARTICIPANT`.
"""
from __future__ import annotations

from django.db import models


class Role(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    STAFF = 'staff', 'Staff'
    DOCTOR = 'doctor', 'Doctor'
    PARTICIPANT = 'participant', 'Participant'


LEGACY_ALIASES = {'part': Role.PARTICIPANT}

# Capabilities granted to each non-admin role.  Admin receives the union.
_ROLE_CAPABILITIES: dict[Role, frozenset[str]] = {
    Role.STAFF: frozenset({
        'view_dashboard',
        'manage_appointments',
        'manage_participants',
        'manage_articles',
    }),
    Role.DOCTOR: frozenset({
        'view_dashboard',
        'view_appointments',
        'manage_own_schedule',
        'view_participants',
    }),
    Role.PARTICIPANT: frozenset({
        'book_appointments',
        'enroll_programs',
        'track_tasks',
        'view_own_records',
    }),
}

ADMIN_ONLY_CAPABILITIES = frozenset({
    'manage_users',
    'manage_doctors',
    'manage_health_programs',
    'manage_master_data',
    'manage_website_settings',
    'upload_files',
})

ALL_CAPABILITIES = ADMIN_ONLY_CAPABILITIES.union(*_ROLE_CAPABILITIES.values())


def normalize_role(value) -> Role | None:
    """Map a stored or claimed role string onto :class:`Role`.

    Returns ``None`` for anything outside the closed set.
    """
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    if value in LEGACY_ALIASES:
        return LEGACY_ALIASES[value]
    try:
        return Role(value)
    except ValueError:
        return None


def capabilities_for(role: Role) -> frozenset[str]:
    if role == Role.ADMIN:
        return ALL_CAPABILITIES
    return _ROLE_CAPABILITIES[role]


def has_role(actual: Role, required: Role) -> bool:
    """True when ``actual`` satisfies ``required`` (admin satisfies all)."""
    return actual == Role.ADMIN or actual == required


def has_capability(role: Role, capability: str) -> bool:
    return capability in capabilities_for(role)


def display_role(role: Role) -> str:
    return role.value[:1].upper() + role.value[1:]
