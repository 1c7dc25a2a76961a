"""
URL mappings for the portal.

Trailing slashes are omitted to match the paths the front-end calls.
Everything here except the login page, login, registration and the
email probe sits behind the session gate.
"""
from django.urls import path

from .views import health
from .views.auth import (
    change_password_view,
    check_email_view,
    check_session_view,
    login_view,
    logout_view,
    me_view,
    refresh_token_view,
    register_view,
)
from .views.pages import login_page
from .views.uploads import upload_view
from .views.users import user_detail, users_collection

urlpatterns = [
    path('login', login_page, name='login_page'),

    # Session
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/logout', logout_view, name='logout_view'),
    path('api/auth/check-session', check_session_view, name='check_session_view'),
    path('api/auth/refresh-token', refresh_token_view, name='refresh_token_view'),
    path('api/auth/register', register_view, name='register_view'),
    path('api/auth/check-email', check_email_view, name='check_email_view'),
    path('api/auth/change-password', change_password_view, name='change_password_view'),
    path('api/users/me', me_view, name='me_view'),

    # Admin
    path('api/upload', upload_view, name='upload_view'),
    path('api/admin/users', users_collection, name='users_collection'),
    path('api/admin/users/<uuid:pk>', user_detail, name='user_detail'),
    path('api/admin/db-status', health.db_status, name='db_status'),
]
