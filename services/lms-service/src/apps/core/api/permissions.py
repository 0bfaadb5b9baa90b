# services/lms-service/src/apps/core/api/permissions.py
"""
Collection access rules.

Each class maps the CRUD verbs of one collection to role predicates.
Row visibility for reads is applied by the view querysets.
"""

from shared.common.exceptions import ForbiddenException
from shared.common.permissions import (
    ActionPermission,
    is_admin,
    is_admin_or_instructor,
    is_admin_or_instructor_or_self,
    is_admin_or_self,
    is_instructor,
    is_same_tenant,
    is_same_user,
)


def _authenticated(request):
    return bool(getattr(request.user, 'is_authenticated', False))


class TenantAccess(ActionPermission):
    """Admins manage tenants; others only see their own."""

    def has_object_access(self, request, verb, obj):
        if verb == 'read':
            return is_admin(request) or is_same_tenant(request, obj.id)
        return is_admin(request)


class UserAccess(ActionPermission):
    update = staticmethod(_authenticated)

    def has_object_access(self, request, verb, obj):
        if verb == 'read':
            return is_admin(request) or is_same_tenant(request, obj.tenant_id)
        if verb == 'update':
            return is_admin_or_self(request, obj.id)
        return is_admin(request)


class MediaAccess(ActionPermission):
    create = staticmethod(_authenticated)
    update = staticmethod(_authenticated)
    delete = staticmethod(_authenticated)

    def has_object_access(self, request, verb, obj):
        if is_admin(request):
            return True
        if verb == 'read' and obj.is_global:
            return True
        return is_same_tenant(request, obj.tenant_id)


class StudentSettingsAccess(ActionPermission):
    create = staticmethod(_authenticated)
    update = staticmethod(_authenticated)

    def has_object_access(self, request, verb, obj):
        if verb == 'delete':
            return is_admin(request)
        return is_admin_or_self(request, obj.user_id)


class CourseAccess(ActionPermission):
    create = staticmethod(is_admin_or_instructor)
    update = staticmethod(is_admin_or_instructor)

    def check_course_ownership(self, request, course):
        """Instructors may only add content to courses they teach."""
        if not self.has_object_access(request, 'update', course):
            raise ForbiddenException("Only the course instructor can add content")

    def has_object_access(self, request, verb, obj):
        if verb == 'update':
            return is_admin(request) or (
                is_instructor(request) and is_same_user(request, obj.instructor_id)
            )
        if verb == 'delete':
            return is_admin(request)
        return True


class ModuleAccess(CourseAccess):
    def has_object_access(self, request, verb, obj):
        return super().has_object_access(request, verb, obj.course)


class LessonAccess(CourseAccess):
    def has_object_access(self, request, verb, obj):
        return super().has_object_access(request, verb, obj.module.course)


class EnrollmentAccess(ActionPermission):
    create = staticmethod(_authenticated)
    update = staticmethod(_authenticated)

    def has_object_access(self, request, verb, obj):
        if verb == 'delete':
            return is_admin(request)
        if is_admin(request):
            return True
        if is_instructor(request):
            return is_same_tenant(request, obj.course.tenant_id)
        return is_same_user(request, obj.student_id)


class ProgressAccess(ActionPermission):
    create = staticmethod(is_admin_or_instructor)
    update = staticmethod(_authenticated)

    def has_object_access(self, request, verb, obj):
        if verb == 'delete':
            return is_admin(request)
        return is_admin_or_instructor_or_self(request, obj.student_id)


class LedgerAccess(ActionPermission):
    """Points and streaks: written by the system only."""

    create = None
    update = None


class AdminManagedAccess(ActionPermission):
    """Badges, achievements, levels and leaderboards."""

    def has_object_access(self, request, verb, obj):
        if verb == 'read':
            return is_admin(request) or obj.is_global or is_same_tenant(request, obj.tenant_id)
        return is_admin(request)
