"""
Enrollment Service

Business logic for enrolling students in courses.
"""

import logging
from typing import Optional

from django.db import transaction

from shared.common.exceptions import ConflictException, ForbiddenException
from shared.common.permissions import Roles

from ..events import publish_enrollment_created
from ..exceptions import CapacityReached, SelfEnrollmentNotAllowed
from ..models import Course, Enrollment, User
from .progress_service import ProgressService

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for course enrollments."""

    @staticmethod
    def check_capacity(course: Course) -> None:
        """
        Raise if the course has no room for another active enrollment.

        Raises:
            CapacityReached: When ``capacity > 0`` and it is already used up
        """
        if course.has_capacity_limit and course.active_enrollment_count >= course.capacity:
            raise CapacityReached()

    @staticmethod
    @transaction.atomic
    def enroll(
        course: Course,
        student: User,
        requested_by=None,
        status: str = Enrollment.Status.ACTIVE,
        expires_at=None,
    ) -> Enrollment:
        """
        Enroll a student in a course.

        Args:
            course: Course to enroll in
            student: Student being enrolled
            requested_by: The authenticated caller
            status: Initial enrollment status
            expires_at: Optional expiry

        Returns:
            Created enrollment

        Raises:
            ForbiddenException: If a student enrolls someone else
            SelfEnrollmentNotAllowed: If the course does not allow self-enrollment
            CapacityReached: If the course is full
        """
        if requested_by is not None and getattr(requested_by, 'role', None) == Roles.STUDENT:
            if str(requested_by.id) != str(student.id):
                raise ForbiddenException("Students can only enroll themselves")
            if not course.allow_self_enrollment:
                raise SelfEnrollmentNotAllowed()

        if Enrollment.objects.filter(student=student, course=course).exists():
            raise ConflictException("Student is already enrolled in this course")

        if status == Enrollment.Status.ACTIVE:
            EnrollmentService.check_capacity(course)

        enrollment = Enrollment.objects.create(
            student=student,
            course=course,
            status=status,
            expires_at=expires_at,
        )

        logger.info(
            f"Student {student.id} enrolled in course {course.id}",
            extra={'enrollment_id': str(enrollment.id)}
        )
        return enrollment

    @staticmethod
    def on_enrollment_created(enrollment: Enrollment) -> None:
        """Start progress tracking for a new enrollment."""
        ProgressService.start_progress(enrollment.student, enrollment.course)
        publish_enrollment_created(enrollment.id, enrollment.student_id, enrollment.course_id)

    @staticmethod
    def update_status(enrollment: Enrollment, status: str, expires_at: Optional[object] = None) -> Enrollment:
        """Change an enrollment's status; timestamps are stamped on save."""
        if (
            status == Enrollment.Status.ACTIVE
            and enrollment.status != Enrollment.Status.ACTIVE
        ):
            EnrollmentService.check_capacity(enrollment.course)
        enrollment.status = status
        if expires_at is not None:
            enrollment.expires_at = expires_at
        enrollment.save()
        return enrollment
