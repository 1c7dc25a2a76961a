"""
Database models for the portal.

Only two tables belong to the portal itself: the account table backing
the credential subject, and an audit trail of authentication and
administrative events.  Business entities of the wider site (doctors,
articles, appointments, health programs) live elsewhere and are never
inspected by the session gate.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models

from .roles import Role, normalize_role


class PortalUserManager(UserManager):
    """User manager that makes command-line superusers portal admins."""

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', Role.ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    """Portal account.

    The primary key is a UUID string so that it can be embedded in the
    signed credential as the subject id.  ``email`` is unique because
    login accepts either the email address or the username.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(max_length=100, unique=True)
    full_name = models.CharField(max_length=100, blank=True)
    role = models.CharField(max_length=15, choices=Role.choices, default=Role.PARTICIPANT, db_index=True)

    objects = PortalUserManager()

    @property
    def portal_role(self) -> Role:
        # Rows written before the enum may hold legacy spellings
        return normalize_role(self.role) or Role.PARTICIPANT

    @property
    def display_name(self) -> str:
        return self.full_name or self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class AuditEvent(models.Model):
    """A security or administrative event worth keeping a record of."""
    ACTION_CHOICES = (
        ("login", "login"),
        ("logout", "logout"),
        ("register", "register"),
        ("change_password", "change_password"),
        ("session_ip_mismatch", "session_ip_mismatch"),
        ("upload", "upload"),
        ("user_create", "user_create"),
        ("user_update", "user_update"),
        ("user_delete", "user_delete"),
    )
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64, choices=ACTION_CHOICES)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    ip = models.CharField(max_length=64, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='portal_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='portal_audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
