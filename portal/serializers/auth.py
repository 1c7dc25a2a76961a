import bleach
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from portal.roles import Role


def _clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


def _check_password(v, user=None):
    try:
        validate_password(v, user=user)
    except DjangoValidationError as e:
        raise serializers.ValidationError(e.messages)
    return v


class LoginSerializer(serializers.Serializer):
    # ``email`` accepts either the email address or the username
    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    email = serializers.EmailField(max_length=100)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    username = serializers.CharField(max_length=50, required=False, allow_blank=True)

    def validate_name(self, v):
        v = _clean_text(v)
        if not v:
            raise serializers.ValidationError('Nama tidak boleh kosong')
        return v

    def validate_password(self, v):
        return _check_password(v)


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(trim_whitespace=False)
    newPassword = serializers.CharField(trim_whitespace=False)

    def validate_newPassword(self, v):
        return _check_password(v, user=self.context.get('user'))


class UserWriteSerializer(serializers.Serializer):
    """Admin create/update payload.  Every field is optional on update."""
    username = serializers.CharField(max_length=50)
    email = serializers.EmailField(max_length=100)
    fullName = serializers.CharField(max_length=100)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    role = serializers.ChoiceField(choices=Role.values, required=False)
    isActive = serializers.BooleanField(required=False)

    def validate_fullName(self, v):
        v = _clean_text(v)
        if not v:
            raise serializers.ValidationError('Nama lengkap tidak boleh kosong')
        return v

    def validate_password(self, v):
        return _check_password(v)


def serialize_user(user) -> dict:
    return {
        'id': str(user.id),
        'username': user.username,
        'email': user.email,
        'fullName': user.full_name,
        'name': user.display_name,
        'role': user.portal_role.value,
        'isActive': user.is_active,
        'lastLogin': user.last_login.isoformat() if user.last_login else None,
        'createdAt': user.date_joined.isoformat() if user.date_joined else None,
    }
