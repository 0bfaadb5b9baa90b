# services/lms-service/src/apps/core/models/enrollment.py
"""
Enrollment and Progress Models

An enrollment ties a student to a course; each enrollment gets a
Progress record tracking module completion, quiz attempts, discussion
participation and the points the student has earned.
"""

from django.core.validators import MaxValueValidator
from django.db import models
from django.utils import timezone

from shared.common.mixins import BaseModel
from shared.common.utils import parse_datetime_value


class Enrollment(BaseModel):
    """
    A student's enrollment in a course.
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        COMPLETED = 'completed', 'Completed'
        DROPPED = 'dropped', 'Dropped'
        PENDING = 'pending', 'Pending'

    student = models.ForeignKey(
        'core.User',
        on_delete=models.CASCADE,
        related_name='enrollments'
    )
    course = models.ForeignKey(
        'core.Course',
        on_delete=models.CASCADE,
        related_name='enrollments'
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True
    )

    enrolled_at = models.DateTimeField(default=timezone.now)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    dropped_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'enrollments'
        ordering = ['-enrolled_at']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'course'],
                name='unique_student_course_enrollment'
            ),
        ]
        indexes = [
            models.Index(fields=['course', 'status']),
        ]

    def __str__(self):
        return f"{self.student_id} in {self.course_id} ({self.status})"

    def save(self, *args, **kwargs):
        now = timezone.now()
        if self._state.adding:
            self.enrolled_at = now
            previous_status = self.status
        else:
            previous_status = type(self).objects.filter(pk=self.pk).values_list(
                'status', flat=True
            ).first()

        if self.status != previous_status:
            if self.status == self.Status.ACTIVE and not self.started_at:
                self.started_at = now
            elif self.status == self.Status.COMPLETED:
                self.completed_at = now
            elif self.status == self.Status.DROPPED:
                self.dropped_at = now

        super().save(*args, **kwargs)


class Progress(BaseModel):
    """
    A student's progress through one course.
    """

    class Status(models.TextChoices):
        NOT_STARTED = 'not_started', 'Not Started'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'

    student = models.ForeignKey(
        'core.User',
        on_delete=models.CASCADE,
        related_name='progress_records'
    )
    course = models.ForeignKey(
        'core.Course',
        on_delete=models.CASCADE,
        related_name='progress_records'
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.NOT_STARTED,
        db_index=True
    )
    overall_progress = models.FloatField(
        default=0,
        validators=[MaxValueValidator(100)]
    )
    points_earned = models.PositiveIntegerField(default=0)
    total_points = models.PositiveIntegerField(default=0)
    is_global = models.BooleanField(default=False)

    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    last_accessed = models.DateTimeField(null=True, blank=True)

    # [{module, status, progress}]
    module_progress = models.JSONField(default=list, blank=True)
    # [{lesson, score, completed_at}]
    quiz_attempts = models.JSONField(default=list, blank=True)
    # [{lesson, participated_at}]
    discussions = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'progress'
        verbose_name_plural = 'progress'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['student', 'course']),
            models.Index(fields=['completed_at']),
        ]

    def __str__(self):
        return f"{self.student_id} / {self.course_id}: {self.overall_progress}%"

    def save(self, *args, **kwargs):
        self.last_accessed = timezone.now()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'last_accessed'}
        super().save(*args, **kwargs)

    def quiz_attempts_since(self, start):
        """Quiz attempts completed strictly after ``start``."""
        attempts = []
        for attempt in self.quiz_attempts or []:
            completed_at = parse_datetime_value(attempt.get('completed_at'))
            if completed_at and completed_at > start:
                attempts.append(attempt)
        return attempts

    def discussions_since(self, start):
        """Discussion participations strictly after ``start``."""
        entries = []
        for entry in self.discussions or []:
            participated_at = parse_datetime_value(entry.get('participated_at'))
            if participated_at and participated_at > start:
                entries.append(entry)
        return entries

    @property
    def average_quiz_score(self) -> float:
        scores = [float(a.get('score') or 0) for a in self.quiz_attempts or []]
        if not scores:
            return 0
        return sum(scores) / len(scores)
