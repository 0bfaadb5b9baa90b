# services/lms-service/src/apps/core/models/course.py
"""
Course Content Models

Courses are made of ordered modules, and modules of ordered lessons.
A lesson is one of five types (video, reading, quiz, assignment,
discussion); per-type fields are only meaningful for their type.
"""

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone

from shared.common.mixins import BaseModel
from shared.common.utils import slugify_strict


class ContentStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    PUBLISHED = 'published', 'Published'
    ARCHIVED = 'archived', 'Archived'


class Course(BaseModel):
    """
    A course offered by a tenant (or globally).
    """

    Status = ContentStatus

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    tenant = models.ForeignKey(
        'core.Tenant',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='courses'
    )
    is_global = models.BooleanField(default=False)
    instructor = models.ForeignKey(
        'core.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='taught_courses'
    )
    description = models.TextField(blank=True, default='')
    thumbnail = models.ForeignKey(
        'core.Media',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    prerequisites = models.ManyToManyField(
        'self',
        through='CoursePrerequisite',
        symmetrical=False,
        related_name='required_by',
        blank=True
    )

    # Duration
    duration_hours = models.PositiveIntegerField(default=0)
    duration_minutes = models.PositiveIntegerField(
        default=0,
        validators=[MaxValueValidator(59)]
    )

    # Schedule
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    enrollment_deadline = models.DateTimeField(null=True, blank=True)

    # Publishing
    status = models.CharField(
        max_length=20,
        choices=ContentStatus.choices,
        default=ContentStatus.DRAFT,
        db_index=True
    )
    published_at = models.DateTimeField(null=True, blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=1)

    # Settings
    allow_late_submissions = models.BooleanField(default=False)
    require_prerequisites = models.BooleanField(default=False)
    show_progress = models.BooleanField(default=True)

    # Enrollment
    capacity = models.PositiveIntegerField(
        default=0,
        help_text="Maximum active enrollments, 0 for unlimited"
    )
    allow_self_enrollment = models.BooleanField(default=False)
    require_prerequisite_completion = models.BooleanField(default=False)
    enrollment_start = models.DateTimeField(null=True, blank=True)
    enrollment_end = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'courses'
        ordering = ['title']
        indexes = [
            models.Index(fields=['tenant', 'status']),
            models.Index(fields=['is_global']),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug and self.title:
            self.slug = slugify_strict(self.title)
        if self.is_global:
            self.tenant = None

        if self._state.adding:
            previous_status = None
        else:
            previous_status = type(self).objects.filter(pk=self.pk).values_list(
                'status', flat=True
            ).first()
            self.version = (self.version or 0) + 1
            update_fields = kwargs.get('update_fields')
            if update_fields is not None:
                kwargs['update_fields'] = set(update_fields) | {
                    'version', 'published_at', 'archived_at'
                }

        if self.status != previous_status:
            if self.status == ContentStatus.PUBLISHED and not self.published_at:
                self.published_at = timezone.now()
            elif self.status == ContentStatus.ARCHIVED:
                self.archived_at = timezone.now()

        super().save(*args, **kwargs)

    @property
    def active_enrollment_count(self) -> int:
        return self.enrollments.filter(status='active').count()

    @property
    def has_capacity_limit(self) -> bool:
        return self.capacity > 0


class CoursePrerequisite(BaseModel):
    """
    Ordering link between a course and a course that must come first.
    """

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='prerequisite_links'
    )
    prerequisite = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='dependent_links'
    )

    class Meta:
        db_table = 'course_prerequisites'
        constraints = [
            models.UniqueConstraint(
                fields=['course', 'prerequisite'],
                name='unique_course_prerequisite'
            ),
        ]

    def __str__(self):
        return f"{self.prerequisite_id} -> {self.course_id}"


class Module(BaseModel):
    """
    An ordered section of a course.
    """

    Status = ContentStatus

    class CompletionType(models.TextChoices):
        ALL_LESSONS = 'all_lessons', 'Complete All Lessons'
        MIN_SCORE = 'min_score', 'Minimum Score'
        CUSTOM = 'custom', 'Custom Rule'

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='modules'
    )
    order = models.PositiveIntegerField(default=0)
    duration_hours = models.PositiveIntegerField(default=0)
    duration_minutes = models.PositiveIntegerField(
        default=0,
        validators=[MaxValueValidator(59)]
    )
    status = models.CharField(
        max_length=20,
        choices=ContentStatus.choices,
        default=ContentStatus.DRAFT
    )

    completion_type = models.CharField(
        max_length=20,
        choices=CompletionType.choices,
        default=CompletionType.ALL_LESSONS
    )
    minimum_score = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    custom_rule = models.TextField(blank=True, default='')

    class Meta:
        db_table = 'modules'
        ordering = ['course', 'order']

    def __str__(self):
        return f"{self.course.title}: {self.title}"


class Lesson(BaseModel):
    """
    A single unit of learning inside a module.
    """

    Status = ContentStatus

    class Type(models.TextChoices):
        VIDEO = 'video', 'Video'
        READING = 'reading', 'Reading'
        QUIZ = 'quiz', 'Quiz'
        ASSIGNMENT = 'assignment', 'Assignment'
        DISCUSSION = 'discussion', 'Discussion'

    title = models.CharField(max_length=255)
    module = models.ForeignKey(
        Module,
        on_delete=models.CASCADE,
        related_name='lessons'
    )
    order = models.PositiveIntegerField(default=0)
    type = models.CharField(max_length=20, choices=Type.choices)
    description = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=ContentStatus.choices,
        default=ContentStatus.DRAFT
    )

    # Video
    video_url = models.URLField(max_length=500, blank=True, default='')
    video_duration = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Duration in minutes"
    )
    transcript = models.TextField(blank=True, default='')

    # Reading
    content = models.TextField(blank=True, default='')

    # Quiz
    questions = models.JSONField(default=list, blank=True)
    time_limit = models.PositiveIntegerField(null=True, blank=True)
    attempts = models.PositiveIntegerField(null=True, blank=True)
    passing_score = models.PositiveIntegerField(
        default=70,
        validators=[MaxValueValidator(100)]
    )
    randomize_questions = models.BooleanField(default=False)
    show_correct_answers = models.BooleanField(default=True)

    # Assignment
    instructions = models.TextField(blank=True, default='')
    due_date = models.DateTimeField(null=True, blank=True)
    points = models.PositiveIntegerField(null=True, blank=True)
    rubric = models.JSONField(default=list, blank=True)
    allowed_file_types = models.JSONField(default=list, blank=True)

    # Discussion
    prompt = models.TextField(blank=True, default='')
    guidelines = models.TextField(blank=True, default='')
    require_replies = models.PositiveIntegerField(default=2)
    minimum_words = models.PositiveIntegerField(null=True, blank=True)

    REQUIRED_FIELDS_BY_TYPE = {
        Type.VIDEO: ('video_url', 'Video URL is required for video lessons'),
        Type.READING: ('content', 'Content is required for reading lessons'),
        Type.QUIZ: ('questions', 'Quiz lessons require at least one question'),
        Type.ASSIGNMENT: ('instructions', 'Instructions are required for assignment lessons'),
        Type.DISCUSSION: ('prompt', 'Prompt is required for discussion lessons'),
    }

    class Meta:
        db_table = 'lessons'
        ordering = ['module', 'order']
        indexes = [
            models.Index(fields=['module', 'type']),
        ]

    def __str__(self):
        return self.title

    @property
    def course(self):
        return self.module.course

    def content_errors(self) -> dict:
        """Field errors for content missing for this lesson's type."""
        required = self.REQUIRED_FIELDS_BY_TYPE.get(self.type)
        if not required:
            return {}
        field, message = required
        if not getattr(self, field):
            return {field: [message]}
        return {}
