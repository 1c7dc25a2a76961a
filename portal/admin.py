"""
Django admin registrations for portal accounts and the audit trail.
"""
from django.contrib import admin

from .models import AuditEvent, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'full_name', 'role', 'is_active', 'last_login')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'email', 'full_name')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'user', 'object_type', 'object_id', 'ip')
    list_filter = ('action',)
    search_fields = ('object_id', 'ip')
    readonly_fields = ('user', 'action', 'object_type', 'object_id', 'detail', 'ip', 'created_at')
