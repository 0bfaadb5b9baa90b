"""
Course Service

Course creation defaults and update rules.
"""

import logging
from typing import Any, Dict

from django.db import transaction

from shared.common.permissions import Roles

from ..exceptions import CapacityReached
from ..models import Course, Enrollment

logger = logging.getLogger(__name__)


class CourseService:
    """Service for courses."""

    @staticmethod
    def validate_capacity(course: Course, capacity: int) -> None:
        """
        Reject a capacity lower than the current number of active enrollments.
        """
        if capacity and capacity > 0:
            active = course.enrollments.filter(status=Enrollment.Status.ACTIVE).count()
            if active > capacity:
                raise CapacityReached()

    @staticmethod
    @transaction.atomic
    def create_course(data: Dict[str, Any], user, tenant_id=None) -> Course:
        """
        Create a course.

        The tenant defaults to the caller's tenant unless the course is
        global. An instructor creating a course becomes its instructor.
        """
        prerequisites = data.pop('prerequisites', None)
        if not data.get('tenant') and not data.get('is_global') and tenant_id:
            data['tenant_id'] = tenant_id
        if not data.get('instructor') and getattr(user, 'role', None) == Roles.INSTRUCTOR:
            data['instructor_id'] = user.id

        course = Course.objects.create(**data)
        if prerequisites:
            course.prerequisites.set(prerequisites)

        logger.info(f"Course created: {course.slug}", extra={'course_id': str(course.id)})
        return course

    @staticmethod
    @transaction.atomic
    def update_course(course: Course, data: Dict[str, Any]) -> Course:
        """Update a course; capacity may not drop below active enrollments."""
        if 'capacity' in data:
            CourseService.validate_capacity(course, data['capacity'])

        prerequisites = data.pop('prerequisites', None)
        for field, value in data.items():
            setattr(course, field, value)
        course.save()
        if prerequisites is not None:
            course.prerequisites.set(prerequisites)
        return course
