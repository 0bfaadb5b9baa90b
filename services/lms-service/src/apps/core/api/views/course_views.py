# services/lms-service/src/apps/core/api/views/course_views.py
"""
Course, Module and Lesson Views

Lessons also expose the learning activity endpoints used by students.
"""

import logging

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from shared.common.exceptions import BadRequestException
from shared.common.permissions import IsAuthenticated

from ...models import Course, Lesson, Module
from ...services import ProgressService
from ..permissions import CourseAccess, LessonAccess, ModuleAccess
from ..serializers import (
    CourseSerializer,
    LessonSerializer,
    ModuleSerializer,
    ProgressSerializer,
    QuizAttemptSerializer,
)
from .base import TenantScopedViewSet, scope_to_tenant

logger = logging.getLogger(__name__)


class CourseViewSet(TenantScopedViewSet):
    """
    ViewSet for courses.

    Endpoints:
    - GET /courses/ - List courses of the caller's tenant and global ones
    - POST /courses/ - Create course (admin, instructor)
    - GET /courses/{id}/ - Get course
    - PUT/PATCH /courses/{id}/ - Update course (admin, owning instructor)
    - DELETE /courses/{id}/ - Delete course (admin)
    """

    serializer_class = CourseSerializer
    permission_classes = [CourseAccess]
    filterset_fields = ['status', 'is_global', 'instructor', 'allow_self_enrollment']
    search_fields = ['title', 'description', 'slug']
    ordering_fields = ['title', 'created_at', 'start_date']

    def get_queryset(self):
        return scope_to_tenant(
            Course.objects.select_related('tenant', 'instructor').prefetch_related('prerequisites'),
            self.request,
        )


class ModuleViewSet(TenantScopedViewSet):
    """
    ViewSet for course modules.
    """

    serializer_class = ModuleSerializer
    permission_classes = [ModuleAccess]
    filterset_fields = ['course', 'status']
    ordering_fields = ['order']

    def get_queryset(self):
        return scope_to_tenant(
            Module.objects.select_related('course').prefetch_related('lessons'),
            self.request,
            tenant_field='course__tenant',
            global_field='course__is_global',
        )

    def perform_create(self, serializer):
        course = serializer.validated_data['course']
        CourseAccess().check_course_ownership(self.request, course)
        instance = serializer.save()
        self.log_action('create', instance)


class LessonViewSet(TenantScopedViewSet):
    """
    ViewSet for lessons.

    Endpoints:
    - GET /lessons/ - List lessons
    - POST /lessons/ - Create lesson (admin, instructor)
    - GET /lessons/{id}/ - Get lesson
    - PUT/PATCH /lessons/{id}/ - Update lesson (admin, owning instructor)
    - DELETE /lessons/{id}/ - Delete lesson (admin)
    - POST /lessons/{id}/complete/ - Mark lesson completed
    - POST /lessons/{id}/quiz-attempt/ - Record a quiz attempt
    - POST /lessons/{id}/discussion/ - Record discussion participation
    - POST /lessons/{id}/submit/ - Submit an assignment
    """

    serializer_class = LessonSerializer
    permission_classes = [LessonAccess]
    filterset_fields = ['module', 'type', 'status']
    search_fields = ['title']
    ordering_fields = ['order']

    def get_queryset(self):
        return scope_to_tenant(
            Lesson.objects.select_related('module', 'module__course'),
            self.request,
            tenant_field='module__course__tenant',
            global_field='module__course__is_global',
        )

    def perform_create(self, serializer):
        course = serializer.validated_data['module'].course
        CourseAccess().check_course_ownership(self.request, course)
        instance = serializer.save()
        self.log_action('create', instance)

    def _lesson_of_type(self, *types):
        lesson = self.get_object()
        if types and lesson.type not in types:
            raise BadRequestException(f"Lesson type must be one of: {', '.join(types)}")
        return lesson

    def _progress_response(self, progress):
        return Response(ProgressSerializer(progress).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated])
    def complete(self, request, pk=None):
        """Mark a lesson completed for the caller."""
        lesson = self._lesson_of_type()
        progress = ProgressService.complete_lesson(self.get_current_user(), lesson)
        return self._progress_response(progress)

    @action(detail=True, methods=['post'], url_path='quiz-attempt', permission_classes=[IsAuthenticated])
    def quiz_attempt(self, request, pk=None):
        """Record a quiz attempt for the caller."""
        lesson = self._lesson_of_type(Lesson.Type.QUIZ)
        serializer = QuizAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        progress = ProgressService.record_quiz_attempt(
            self.get_current_user(), lesson, serializer.validated_data['score']
        )
        return self._progress_response(progress)

    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated])
    def discussion(self, request, pk=None):
        """Record discussion participation for the caller."""
        lesson = self._lesson_of_type(Lesson.Type.DISCUSSION)
        progress = ProgressService.record_discussion(self.get_current_user(), lesson)
        return self._progress_response(progress)

    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated])
    def submit(self, request, pk=None):
        """Submit an assignment for the caller."""
        lesson = self._lesson_of_type(Lesson.Type.ASSIGNMENT)
        progress = ProgressService.submit_assignment(self.get_current_user(), lesson)
        return self._progress_response(progress)
