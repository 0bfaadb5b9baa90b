# services/lms-service/src/apps/core/api/views/tenant_views.py
"""
Tenant, User, Media and Auth Views
"""

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from shared.common.exceptions import NotFoundException
from shared.common.permissions import IsAuthenticated, is_admin

from ...models import Media, StudentSettings, Tenant, User
from ...services import AuthService, LevelService
from ..permissions import MediaAccess, StudentSettingsAccess, TenantAccess, UserAccess
from ..serializers import (
    LoginSerializer,
    MediaSerializer,
    RefreshTokenSerializer,
    StudentSettingsSerializer,
    TenantSerializer,
    UserLevelSerializer,
    UserSerializer,
)
from .base import TenantScopedViewSet, scope_to_tenant

logger = logging.getLogger(__name__)


class TenantViewSet(TenantScopedViewSet):
    """
    ViewSet for tenants.

    Endpoints:
    - GET /tenants/ - List tenants (admins: all, others: own)
    - POST /tenants/ - Create tenant (admin)
    - GET /tenants/{id}/ - Get tenant
    - PUT/PATCH /tenants/{id}/ - Update tenant (admin)
    - DELETE /tenants/{id}/ - Delete tenant (admin)
    """

    serializer_class = TenantSerializer
    permission_classes = [TenantAccess]
    filterset_fields = ['status']
    search_fields = ['name', 'slug', 'domain']

    def get_queryset(self):
        queryset = Tenant.objects.all()
        if is_admin(self.request):
            return queryset
        return queryset.filter(id=self.request.user.tenant_id)


class UserViewSet(TenantScopedViewSet):
    """
    ViewSet for users.

    Endpoints:
    - GET /users/ - List users of the caller's tenant
    - POST /users/ - Create user (admin)
    - GET /users/{id}/ - Get user
    - PUT/PATCH /users/{id}/ - Update user (admin or self)
    - DELETE /users/{id}/ - Delete user (admin)
    - GET /users/{id}/level/ - Level reached by a user
    """

    serializer_class = UserSerializer
    permission_classes = [UserAccess]
    filterset_fields = ['role', 'tenant']
    search_fields = ['name', 'email']
    ordering_fields = ['name', 'created_at']

    def get_queryset(self):
        return scope_to_tenant(
            User.objects.select_related('tenant'),
            self.request,
            global_field=None,
        )

    @action(detail=True, methods=['get'])
    def level(self, request, pk=None):
        """Get the level a user has reached."""
        user = self.get_object()
        data = LevelService.get_user_level(user)
        return Response(UserLevelSerializer(data).data)


class MediaViewSet(TenantScopedViewSet):
    """
    ViewSet for uploaded media.

    Uploads accept images and PDFs up to the configured size.
    """

    serializer_class = MediaSerializer
    permission_classes = [MediaAccess]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    filterset_fields = ['is_global', 'mime_type']

    def get_queryset(self):
        return scope_to_tenant(Media.objects.all(), self.request)


class StudentSettingsViewSet(TenantScopedViewSet):
    """
    ViewSet for per-user settings.

    Endpoints:
    - GET /student-settings/ - Own settings (admins: all)
    - POST /student-settings/ - Create settings for the caller
    - PATCH /student-settings/{id}/ - Update settings
    - GET /student-settings/mine/ - Own settings, created on first access
    """

    serializer_class = StudentSettingsSerializer
    permission_classes = [StudentSettingsAccess]

    def get_queryset(self):
        queryset = StudentSettings.objects.select_related('user')
        if is_admin(self.request):
            return queryset
        return queryset.filter(user_id=self.request.user.id)

    def perform_create(self, serializer):
        if not is_admin(self.request) or 'user' not in serializer.validated_data:
            serializer.validated_data['user'] = self.get_current_user()
        instance = serializer.save()
        self.log_action('create', instance)

    @action(detail=False, methods=['get'])
    def mine(self, request):
        """Get the caller's settings."""
        settings_obj, _ = StudentSettings.objects.get_or_create(user=self.get_current_user())
        return Response(self.get_serializer(settings_obj).data)


class AuthViewSet(viewsets.ViewSet):
    """
    Authentication endpoints.

    Endpoints:
    - POST /auth/login/ - Log in with email and password
    - POST /auth/refresh/ - Exchange a refresh token
    - GET /auth/me/ - Current user
    """

    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=['post'], authentication_classes=[], permission_classes=[AllowAny])
    def login(self, request):
        """Log in and receive tokens."""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = AuthService().login(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
            tenant_slug=serializer.validated_data.get('tenant') or None,
        )
        return Response(result, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], authentication_classes=[], permission_classes=[AllowAny])
    def refresh(self, request):
        """Exchange a refresh token for a new token pair."""
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = AuthService().refresh_tokens(serializer.validated_data['refresh_token'])
        return Response(result)

    @action(detail=False, methods=['get'])
    def me(self, request):
        """Get the current user."""
        try:
            user = AuthService().me(request.user)
        except User.DoesNotExist:
            raise NotFoundException("User not found")
        return Response(UserSerializer(user).data)
