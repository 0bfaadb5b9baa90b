# services/lms-service/src/apps/core/api/serializers/tenant_serializers.py
"""
Tenant, User and Media Serializers
"""

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from shared.common.validators import validate_upload

from ...models import Media, StudentSettings, Tenant, User
from ...services import UserService
from .mixins import TenantDefaultMixin


class TenantSerializer(serializers.ModelSerializer):
    """Serializer for tenants."""

    class Meta:
        model = Tenant
        fields = [
            'id', 'name', 'slug', 'domain', 'status', 'theme', 'logo',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'slug': {'required': False}}


class MediaSerializer(TenantDefaultMixin, serializers.ModelSerializer):
    """Serializer for uploaded media."""

    class Meta:
        model = Media
        fields = [
            'id', 'file', 'alt', 'mime_type', 'filesize', 'tenant', 'is_global',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'mime_type', 'filesize', 'created_at', 'updated_at']
        extra_kwargs = {'tenant': {'required': False}}

    def validate_file(self, value):
        try:
            validate_upload(
                value,
                settings.LMS_SETTINGS['MEDIA_ALLOWED_EXTENSIONS'],
                settings.LMS_SETTINGS['MEDIA_MAX_UPLOAD_BYTES'],
            )
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return value

    def validate(self, attrs):
        attrs = super().validate(attrs)
        uploaded = attrs.get('file')
        if uploaded is not None:
            attrs['mime_type'] = getattr(uploaded, 'content_type', '') or ''
            attrs['filesize'] = uploaded.size
        return attrs


class StudentSettingsSerializer(serializers.ModelSerializer):
    """Serializer for per-user preferences."""

    class Meta:
        model = StudentSettings
        fields = ['id', 'user', 'theme', 'email_notifications', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'user': {'required': False}}

    def validate_email_notifications(self, value):
        allowed = {'assignments', 'course_updates', 'achievements'}
        if not isinstance(value, dict):
            raise serializers.ValidationError("Must be an object")
        unknown = set(value) - allowed
        if unknown:
            raise serializers.ValidationError(f"Unknown keys: {', '.join(sorted(unknown))}")
        if not all(isinstance(flag, bool) for flag in value.values()):
            raise serializers.ValidationError("Values must be booleans")
        return {**{key: True for key in allowed}, **value}


class UserSerializer(serializers.ModelSerializer):
    """Serializer for users."""

    password = serializers.CharField(write_only=True, required=False, min_length=8)
    is_locked = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'name', 'role', 'tenant', 'avatar', 'password',
            'is_locked', 'last_login_at', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'last_login_at', 'created_at', 'updated_at']
        validators = []

    def create(self, validated_data):
        password = validated_data.pop('password', None)
        return UserService.create_user(validated_data, password=password)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        request = self.context.get('request')
        if request is not None and getattr(request.user, 'role', None) != User.Role.ADMIN:
            validated_data.pop('role', None)
            validated_data.pop('tenant', None)
        return UserService.update_user(instance, validated_data, password=password)


class LoginSerializer(serializers.Serializer):
    """Login credentials."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    tenant = serializers.SlugField(required=False, allow_blank=True)


class RefreshTokenSerializer(serializers.Serializer):
    """Refresh token input."""

    refresh_token = serializers.CharField()
