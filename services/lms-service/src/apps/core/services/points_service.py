"""
Points Service

Creates points awards and applies them to the student's progress totals.
"""

import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import F, Max

from ..events import publish_points_awarded
from ..models import Achievement, Lesson, Points, Progress, Streak, User
from .level_service import LevelService

logger = logging.getLogger(__name__)


class PointsService:
    """Service for the points ledger."""

    @staticmethod
    def award_points(
        student: User,
        point_type: str,
        amount: int,
        source_lesson: Optional[Lesson] = None,
        source_achievement: Optional[Achievement] = None,
        source_streak: Optional[Streak] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Points:
        """
        Record a points award.

        The source type follows from whichever source is given. Totals are
        applied by the ``post_save`` handler for Points.
        """
        if source_lesson is not None:
            source_type = Points.SourceType.LESSONS
        elif source_achievement is not None:
            source_type = Points.SourceType.ACHIEVEMENTS
        else:
            source_type = Points.SourceType.STREAKS

        points = Points.objects.create(
            student=student,
            type=point_type,
            amount=amount,
            source_type=source_type,
            source_lesson=source_lesson,
            source_achievement=source_achievement,
            source_streak=source_streak,
            metadata=metadata or {},
        )

        logger.info(
            f"Awarded {amount} {point_type} points",
            extra={'student_id': str(student.id), 'points_id': str(points.id)}
        )
        publish_points_awarded(points.id, student.id, point_type, amount)
        return points

    @staticmethod
    def resolve_course(points: Points):
        """Course of the source document; only lessons have one."""
        if points.source_type == Points.SourceType.LESSONS and points.source_lesson_id:
            return points.source_lesson.module.course
        return None

    @staticmethod
    @transaction.atomic
    def apply_to_progress(points: Points) -> None:
        """
        Apply a new award to the student's progress records.

        ``points_earned`` grows on the progress record of the source's
        course. ``total_points`` grows on every progress record of the
        student, after which level-ups are evaluated.
        """
        course = PointsService.resolve_course(points)

        if course is None:
            logger.warning(
                "No course found for source document",
                extra={'points_id': str(points.id), 'source_type': points.source_type}
            )
        else:
            progress = Progress.objects.filter(
                student_id=points.student_id,
                course=course,
            ).first()
            if progress is None:
                logger.warning(
                    "No progress record found for student and course",
                    extra={'student_id': str(points.student_id), 'course_id': str(course.id)}
                )
            else:
                progress.points_earned = (progress.points_earned or 0) + points.amount
                progress.save(update_fields=['points_earned', 'updated_at'])

        records = Progress.objects.filter(student_id=points.student_id)
        previous_total = records.aggregate(total=Max('total_points'))['total'] or 0
        if not records.exists() or not points.amount:
            return

        records.update(total_points=F('total_points') + points.amount)
        LevelService.check_level_up(
            points.student,
            previous_total,
            previous_total + points.amount,
        )
