# services/lms-service/src/apps/core/models/gamification.py
"""
Gamification Models

Points, streaks, badges, achievements, levels and leaderboards.

Points are an append-only ledger: every award is one row and rows are
never edited. Totals on Progress are maintained from the ledger.
"""

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone

from shared.common.mixins import BaseModel

from ..exceptions import PointsImmutable, TenantRequired


class Points(BaseModel):
    """
    One points award.
    """

    class Type(models.TextChoices):
        LESSON_COMPLETE = 'lesson_complete', 'Lesson Complete'
        QUIZ_SCORE = 'quiz_score', 'Quiz Score'
        ASSIGNMENT_SUBMIT = 'assignment_submit', 'Assignment Submit'
        DISCUSSION_POST = 'discussion_post', 'Discussion Post'
        STREAK_BONUS = 'streak_bonus', 'Streak Bonus'
        ACHIEVEMENT_UNLOCK = 'achievement_unlock', 'Achievement Unlock'

    class SourceType(models.TextChoices):
        LESSONS = 'lessons', 'Lessons'
        ACHIEVEMENTS = 'achievements', 'Achievements'
        STREAKS = 'streaks', 'Streaks'

    student = models.ForeignKey(
        'core.User',
        on_delete=models.CASCADE,
        related_name='point_awards'
    )
    type = models.CharField(max_length=30, choices=Type.choices, db_index=True)
    amount = models.PositiveIntegerField(default=0)

    source_type = models.CharField(max_length=20, choices=SourceType.choices)
    source_lesson = models.ForeignKey(
        'core.Lesson',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='point_awards'
    )
    source_achievement = models.ForeignKey(
        'core.Achievement',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='point_awards'
    )
    source_streak = models.ForeignKey(
        'core.Streak',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='point_awards'
    )
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'points'
        verbose_name_plural = 'points'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['student', 'type']),
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        return f"{self.amount} {self.type} for {self.student_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PointsImmutable()
        super().save(*args, **kwargs)

    @property
    def source(self):
        return {
            self.SourceType.LESSONS: self.source_lesson,
            self.SourceType.ACHIEVEMENTS: self.source_achievement,
            self.SourceType.STREAKS: self.source_streak,
        }.get(self.source_type)


class Streak(BaseModel):
    """
    Consecutive-day activity counter of one type for one student.
    """

    class Type(models.TextChoices):
        LOGIN = 'login', 'Daily Login'
        PROGRESS = 'progress', 'Course Progress'
        QUIZ = 'quiz', 'Quiz Completion'
        ASSIGNMENT = 'assignment', 'Assignment Submission'

    student = models.ForeignKey(
        'core.User',
        on_delete=models.CASCADE,
        related_name='streaks'
    )
    type = models.CharField(max_length=20, choices=Type.choices)
    current_streak = models.PositiveIntegerField(default=0)
    longest_streak = models.PositiveIntegerField(default=0)
    last_activity = models.DateTimeField(null=True, blank=True)
    next_required = models.DateTimeField(null=True, blank=True)
    # [{date, activity, points}]
    history = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'streaks'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'type'],
                name='unique_student_streak_type'
            ),
        ]

    def __str__(self):
        return f"{self.student_id} {self.type}: {self.current_streak}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            self.longest_streak = max(self.longest_streak, self.current_streak)
        super().save(*args, **kwargs)


class Badge(BaseModel):
    """
    A visual award attached to achievements.
    """

    class Rarity(models.TextChoices):
        COMMON = 'common', 'Common'
        UNCOMMON = 'uncommon', 'Uncommon'
        RARE = 'rare', 'Rare'
        EPIC = 'epic', 'Epic'
        LEGENDARY = 'legendary', 'Legendary'

    class Category(models.TextChoices):
        PROGRESS = 'progress', 'Progress'
        PERFORMANCE = 'performance', 'Performance'
        ENGAGEMENT = 'engagement', 'Engagement'
        SPECIAL = 'special', 'Special'

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    icon = models.ForeignKey(
        'core.Media',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    rarity = models.CharField(max_length=20, choices=Rarity.choices, default=Rarity.COMMON)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.PROGRESS)
    tenant = models.ForeignKey(
        'core.Tenant',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='badges'
    )
    is_global = models.BooleanField(default=False)

    class Meta:
        db_table = 'badges'
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.is_global:
            self.tenant = None
        super().save(*args, **kwargs)


class UserBadge(BaseModel):
    """
    A badge awarded to a user.
    """

    user = models.ForeignKey(
        'core.User',
        on_delete=models.CASCADE,
        related_name='badges'
    )
    badge = models.ForeignKey(
        Badge,
        on_delete=models.CASCADE,
        related_name='awards'
    )
    awarded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'user_badges'
        ordering = ['-awarded_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'badge'], name='unique_user_badge'),
        ]

    def __str__(self):
        return f"{self.user_id} - {self.badge_id}"


class Achievement(BaseModel):
    """
    An unlockable goal, evaluated against a student's progress.
    """

    class Type(models.TextChoices):
        COURSE_PROGRESS = 'course_progress', 'Course Progress'
        QUIZ_SCORE = 'quiz_score', 'Quiz Score'
        ASSIGNMENT = 'assignment', 'Assignment'
        STREAK = 'streak', 'Streak'
        DISCUSSION = 'discussion', 'Discussion'
        CUSTOM = 'custom', 'Custom'

    class Metric(models.TextChoices):
        COUNT = 'count', 'Count'
        SCORE = 'score', 'Score'
        DURATION = 'duration', 'Duration'
        CUSTOM = 'custom', 'Custom'

    class Timeframe(models.TextChoices):
        ALL_TIME = 'all_time', 'All Time'
        DAILY = 'daily', 'Daily'
        WEEKLY = 'weekly', 'Weekly'
        MONTHLY = 'monthly', 'Monthly'

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    tenant = models.ForeignKey(
        'core.Tenant',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='achievements'
    )
    type = models.CharField(max_length=30, choices=Type.choices)

    # Criteria
    criteria_metric = models.CharField(max_length=20, choices=Metric.choices)
    criteria_threshold = models.FloatField(validators=[MinValueValidator(0)])
    criteria_timeframe = models.CharField(
        max_length=20,
        choices=Timeframe.choices,
        default=Timeframe.ALL_TIME
    )
    criteria_custom_rule = models.TextField(blank=True, default='')

    badge = models.ForeignKey(
        Badge,
        on_delete=models.PROTECT,
        related_name='achievements'
    )
    points = models.PositiveIntegerField(default=0)
    secret = models.BooleanField(default=False)
    is_global = models.BooleanField(default=False)
    category = models.CharField(max_length=50, blank=True, default='')
    order = models.IntegerField(default=0)
    prerequisites = models.ManyToManyField(
        'self',
        symmetrical=False,
        related_name='unlocks',
        blank=True
    )

    class Meta:
        db_table = 'achievements'
        ordering = ['category', 'order', 'name']
        indexes = [
            models.Index(fields=['tenant', 'is_global']),
            models.Index(fields=['type']),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.is_global:
            self.tenant = None
        super().save(*args, **kwargs)


class UserAchievement(BaseModel):
    """
    An achievement a user has completed.
    """

    user = models.ForeignKey(
        'core.User',
        on_delete=models.CASCADE,
        related_name='achievements'
    )
    achievement = models.ForeignKey(
        Achievement,
        on_delete=models.CASCADE,
        related_name='completions'
    )
    completed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'user_achievements'
        ordering = ['-completed_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'achievement'],
                name='unique_user_achievement'
            ),
        ]

    def __str__(self):
        return f"{self.user_id} - {self.achievement_id}"


class Level(BaseModel):
    """
    A named level reached at a points threshold.
    """

    class RewardType(models.TextChoices):
        BADGE = 'badge', 'Badge'
        FEATURE = 'feature', 'Feature Unlock'
        CUSTOM = 'custom', 'Custom Reward'

    name = models.CharField(max_length=100)
    level = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    description = models.TextField(blank=True, default='')
    points_required = models.PositiveIntegerField(default=0)
    tenant = models.ForeignKey(
        'core.Tenant',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='levels'
    )
    is_global = models.BooleanField(default=False)
    icon = models.ForeignKey(
        'core.Media',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    # [{type, badge, feature, custom_reward}]
    rewards = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'levels'
        ordering = ['level']
        indexes = [
            models.Index(fields=['tenant', 'level']),
        ]

    def __str__(self):
        return f"Level {self.level}: {self.name}"

    def save(self, *args, **kwargs):
        if self.is_global:
            self.tenant = None
        super().save(*args, **kwargs)


class Leaderboard(BaseModel):
    """
    A ranking definition; standings are computed on demand and cached.
    """

    class Type(models.TextChoices):
        POINTS = 'points', 'Total Points'
        PROGRESS = 'progress', 'Course Progress'
        ACHIEVEMENTS = 'achievements', 'Achievements Earned'
        CUSTOM = 'custom', 'Custom'

    class Timeframe(models.TextChoices):
        ALL_TIME = 'all_time', 'All Time'
        DAILY = 'daily', 'Daily'
        WEEKLY = 'weekly', 'Weekly'
        MONTHLY = 'monthly', 'Monthly'

    class PointType(models.TextChoices):
        ALL = 'all', 'All Points'
        LESSON = 'lesson', 'Lesson Points'
        QUIZ = 'quiz', 'Quiz Points'
        ASSIGNMENT = 'assignment', 'Assignment Points'

    class AchievementScope(models.TextChoices):
        ALL = 'all', 'All Achievements'
        COURSE = 'course', 'Course Achievements'
        QUIZ = 'quiz', 'Quiz Achievements'
        STREAK = 'streak', 'Streak Achievements'

    name = models.CharField(max_length=100)
    tenant = models.ForeignKey(
        'core.Tenant',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='leaderboards'
    )
    is_global = models.BooleanField(default=False)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.POINTS)
    timeframe = models.CharField(
        max_length=20,
        choices=Timeframe.choices,
        default=Timeframe.ALL_TIME
    )

    scope_course = models.ForeignKey(
        'core.Course',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='leaderboards'
    )
    scope_point_type = models.CharField(
        max_length=20,
        choices=PointType.choices,
        default=PointType.ALL
    )
    scope_achievement_type = models.CharField(
        max_length=20,
        choices=AchievementScope.choices,
        default=AchievementScope.ALL
    )
    custom_logic = models.TextField(blank=True, default='')

    display_limit = models.PositiveIntegerField(
        default=10,
        validators=[MinValueValidator(1), MaxValueValidator(100)]
    )
    refresh_interval = models.PositiveIntegerField(
        default=3600,
        validators=[MinValueValidator(settings.LMS_SETTINGS['MIN_LEADERBOARD_REFRESH'])],
        help_text="Seconds between standings refreshes"
    )

    class Meta:
        db_table = 'leaderboards'
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.is_global:
            self.tenant = None
        elif self.tenant_id is None:
            raise TenantRequired("Tenant is required when leaderboard is not global")
        super().save(*args, **kwargs)
