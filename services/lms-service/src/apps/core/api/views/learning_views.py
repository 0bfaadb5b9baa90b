# services/lms-service/src/apps/core/api/views/learning_views.py
"""
Enrollment and Progress Views
"""

import logging

from rest_framework import status
from rest_framework.response import Response

from shared.common.permissions import is_admin, is_instructor, is_student

from ...models import Enrollment, Progress
from ...services import EnrollmentService
from ..permissions import EnrollmentAccess, ProgressAccess
from ..serializers import EnrollmentSerializer, EnrollmentUpdateSerializer, ProgressSerializer
from .base import TenantScopedViewSet

logger = logging.getLogger(__name__)


class EnrollmentViewSet(TenantScopedViewSet):
    """
    ViewSet for enrollments.

    Endpoints:
    - GET /enrollments/ - List enrollments visible to the caller
    - POST /enrollments/ - Enroll a student (students: self, when allowed)
    - GET /enrollments/{id}/ - Get enrollment
    - PATCH /enrollments/{id}/ - Change status
    - DELETE /enrollments/{id}/ - Delete enrollment (admin)
    """

    serializer_class = EnrollmentSerializer
    permission_classes = [EnrollmentAccess]
    filterset_fields = ['status', 'course', 'student']
    ordering_fields = ['enrolled_at', 'status']

    def get_queryset(self):
        queryset = Enrollment.objects.select_related('student', 'course')
        if is_admin(self.request):
            return queryset
        if is_instructor(self.request):
            return queryset.filter(course__tenant_id=self.request.user.tenant_id)
        return queryset.filter(student_id=self.request.user.id)

    def create(self, request, *args, **kwargs):
        """Enroll a student in a course."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        student = serializer.validated_data.get('student') or self.get_current_user()

        enrollment = EnrollmentService.enroll(
            course=serializer.validated_data['course'],
            student=student,
            requested_by=request.user,
            status=serializer.validated_data.get('status', Enrollment.Status.ACTIVE),
            expires_at=serializer.validated_data.get('expires_at'),
        )
        self.log_action('create', enrollment)
        return Response(
            self.get_serializer(enrollment).data,
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        """Change an enrollment's status."""
        enrollment = self.get_object()
        serializer = EnrollmentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        enrollment = EnrollmentService.update_status(
            enrollment,
            serializer.validated_data['status'],
            expires_at=serializer.validated_data.get('expires_at'),
        )
        self.log_action('update', enrollment)
        return Response(self.get_serializer(enrollment).data)


class ProgressViewSet(TenantScopedViewSet):
    """
    ViewSet for progress records.

    Activity (quiz attempts, lesson completion, ...) is recorded through
    the lesson endpoints; this ViewSet exposes the records themselves.
    """

    serializer_class = ProgressSerializer
    permission_classes = [ProgressAccess]
    filterset_fields = ['status', 'course', 'student']
    ordering_fields = ['overall_progress', 'last_accessed', 'created_at']

    def get_queryset(self):
        queryset = Progress.objects.select_related('student', 'course')
        if is_admin(self.request):
            return queryset
        if is_instructor(self.request):
            return queryset.filter(student__tenant_id=self.request.user.tenant_id)
        return queryset.filter(student_id=self.request.user.id)

    def perform_update(self, serializer):
        if is_student(self.request):
            for field in ('student', 'course', 'points_earned', 'total_points', 'is_global'):
                serializer.validated_data.pop(field, None)
        instance = serializer.save()
        self.log_action('update', instance)
