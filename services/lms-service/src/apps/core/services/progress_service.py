"""
Progress Service

Learning activity recording: quiz attempts, discussion posts, lesson
completion and assignment submission. Each activity updates the
student's progress record, awards points, extends streaks and
re-evaluates achievements.
"""

import logging
from typing import Optional

from django.conf import settings
from django.db import transaction

from shared.common.utils import utc_now
from shared.common.validators import validate_percentage

from ..models import Course, Enrollment, Lesson, Points, Progress, Streak, User
from .achievement_service import AchievementService
from .points_service import PointsService
from .streak_service import StreakService

logger = logging.getLogger(__name__)


class ProgressService:
    """Service for student progress."""

    @staticmethod
    def get_progress(student: User, course: Course) -> Optional[Progress]:
        return Progress.objects.filter(student=student, course=course).order_by('created_at').first()

    @staticmethod
    def start_progress(student: User, course: Course) -> Progress:
        """
        Create the initial progress record for a student in a course.

        Returns the existing record when there is one.
        """
        progress = ProgressService.get_progress(student, course)
        if progress is not None:
            return progress

        now = utc_now()
        progress = Progress.objects.create(
            student=student,
            course=course,
            status=Progress.Status.NOT_STARTED,
            overall_progress=0,
            points_earned=0,
            started_at=now,
        )
        logger.info(
            "Progress record created",
            extra={'student_id': str(student.id), 'course_id': str(course.id)}
        )
        return progress

    @staticmethod
    def _progress_for_lesson(student: User, lesson: Lesson) -> Progress:
        progress = ProgressService.start_progress(student, lesson.module.course)
        if progress.status == Progress.Status.NOT_STARTED:
            progress.status = Progress.Status.IN_PROGRESS
        return progress

    @staticmethod
    def _after_activity(student: User, progress: Progress) -> Progress:
        AchievementService.evaluate_all(student.id, student.tenant_id)
        progress.refresh_from_db()
        return progress

    @staticmethod
    def record_quiz_attempt(student: User, lesson: Lesson, score) -> Progress:
        """
        Record a quiz attempt.

        Args:
            student: The student
            lesson: A quiz lesson
            score: Score from 0 to 100

        Returns:
            The updated progress record
        """
        score = validate_percentage(score, 'score')
        with transaction.atomic():
            progress = ProgressService._progress_for_lesson(student, lesson)
            progress.quiz_attempts = list(progress.quiz_attempts or []) + [{
                'lesson': str(lesson.id),
                'score': score,
                'completed_at': utc_now().isoformat(),
            }]
            progress.save()

            PointsService.award_points(
                student,
                Points.Type.QUIZ_SCORE,
                int(round(score)),
                source_lesson=lesson,
                metadata={'score': score},
            )
            StreakService.record_activity(student, Streak.Type.QUIZ, 'quiz')

        return ProgressService._after_activity(student, progress)

    @staticmethod
    def record_discussion(student: User, lesson: Lesson) -> Progress:
        """Record participation in a discussion lesson."""
        with transaction.atomic():
            progress = ProgressService._progress_for_lesson(student, lesson)
            progress.discussions = list(progress.discussions or []) + [{
                'lesson': str(lesson.id),
                'participated_at': utc_now().isoformat(),
            }]
            progress.save()

            PointsService.award_points(
                student,
                Points.Type.DISCUSSION_POST,
                settings.LMS_SETTINGS['DISCUSSION_POST_POINTS'],
                source_lesson=lesson,
            )

        return ProgressService._after_activity(student, progress)

    @staticmethod
    def complete_lesson(student: User, lesson: Lesson) -> Progress:
        """
        Mark a lesson as completed.

        Module progress is the share of the module's lessons completed;
        overall progress is the average over all modules of the course.
        Completing a lesson twice changes nothing.
        """
        module = lesson.module
        course = module.course

        with transaction.atomic():
            progress = ProgressService._progress_for_lesson(student, lesson)
            entries = [dict(entry) for entry in progress.module_progress or []]
            entry = next((e for e in entries if e.get('module') == str(module.id)), None)
            if entry is None:
                entry = {'module': str(module.id), 'status': 'in_progress', 'progress': 0,
                         'completed_lessons': []}
                entries.append(entry)

            completed_lessons = list(entry.get('completed_lessons') or [])
            if str(lesson.id) in completed_lessons:
                return progress

            completed_lessons.append(str(lesson.id))
            total_lessons = module.lessons.count() or 1
            entry['completed_lessons'] = completed_lessons
            entry['progress'] = min(100, round(len(completed_lessons) / total_lessons * 100, 2))
            entry['status'] = 'completed' if entry['progress'] >= 100 else 'in_progress'

            module_ids = [str(pk) for pk in course.modules.values_list('id', flat=True)]
            by_module = {e.get('module'): float(e.get('progress') or 0) for e in entries}
            overall = sum(by_module.get(module_id, 0) for module_id in module_ids) / (len(module_ids) or 1)

            progress.module_progress = entries
            progress.overall_progress = round(min(100, overall), 2)
            if progress.overall_progress >= 100:
                progress.status = Progress.Status.COMPLETED
                progress.completed_at = utc_now()
                Enrollment.objects.filter(
                    student=student,
                    course=course,
                    status=Enrollment.Status.ACTIVE,
                ).update(status=Enrollment.Status.COMPLETED, completed_at=utc_now())
            else:
                progress.status = Progress.Status.IN_PROGRESS
            progress.save()

            PointsService.award_points(
                student,
                Points.Type.LESSON_COMPLETE,
                settings.LMS_SETTINGS['LESSON_COMPLETE_POINTS'],
                source_lesson=lesson,
            )
            StreakService.record_activity(student, Streak.Type.PROGRESS, 'lesson_complete')

        return ProgressService._after_activity(student, progress)

    @staticmethod
    def submit_assignment(student: User, lesson: Lesson) -> Progress:
        """Record an assignment submission."""
        with transaction.atomic():
            progress = ProgressService._progress_for_lesson(student, lesson)
            progress.save()

            PointsService.award_points(
                student,
                Points.Type.ASSIGNMENT_SUBMIT,
                settings.LMS_SETTINGS['ASSIGNMENT_SUBMIT_POINTS'],
                source_lesson=lesson,
            )
            StreakService.record_activity(student, Streak.Type.ASSIGNMENT, 'assignment')

        return ProgressService._after_activity(student, progress)
