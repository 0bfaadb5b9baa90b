# services/lms-service/src/apps/core/tests/test_models.py
"""
Model Tests

Tests for model save hooks and helpers.
"""

from datetime import timedelta

from django.core import checks
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from ..exceptions import PointsImmutable, TenantRequired
from ..models import (
    Course,
    Enrollment,
    Leaderboard,
    Lesson,
    Points,
    Progress,
    StudentSettings,
    Streak,
    Tenant,
    User,
)
from .factories import make_achievement, make_course, make_lesson, make_module, make_tenant, make_user


class TenantModelTest(TestCase):
    """Tests for Tenant model."""

    def test_slug_derived_from_name(self):
        """Test an empty slug is built from the name."""
        tenant = Tenant.objects.create(name='Acme  Coding School')

        self.assertEqual(tenant.slug, 'acme-coding-school')

    def test_explicit_slug_kept(self):
        """Test a given slug is not replaced."""
        tenant = Tenant.objects.create(name='Acme', slug='acme-hq')

        self.assertEqual(tenant.slug, 'acme-hq')
        self.assertEqual(tenant.status, Tenant.Status.ACTIVE)


class UserModelTest(TestCase):
    """Tests for User model."""

    def setUp(self):
        self.tenant = make_tenant()

    def test_password_hashing(self):
        """Test passwords are hashed and checked."""
        user = make_user(self.tenant, password='s3cret-pass')

        self.assertNotEqual(user.password, 's3cret-pass')
        self.assertTrue(user.check_password('s3cret-pass'))
        self.assertFalse(user.check_password('wrong'))

    def test_email_unique_within_tenant(self):
        """Test the same email cannot be used twice in one tenant."""
        make_user(self.tenant, email='dup@test.com')

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                make_user(self.tenant, email='dup@test.com')

    def test_email_reusable_across_tenants(self):
        """Test the same email may exist in another tenant."""
        make_user(self.tenant, email='shared@test.com')
        other = make_user(make_tenant(), email='shared@test.com')

        self.assertIsNotNone(other.id)

    def test_lockout_after_failures(self):
        """Test the account locks at the maximum number of failures."""
        user = make_user(self.tenant)

        for _ in range(4):
            self.assertFalse(user.record_login_failure(max_attempts=5, lock_duration=10))
        self.assertTrue(user.record_login_failure(max_attempts=5, lock_duration=10))
        self.assertTrue(user.is_locked)

        user.record_login_success()
        self.assertFalse(user.is_locked)
        self.assertEqual(user.failed_login_attempts, 0)
        self.assertIsNotNone(user.last_login_at)

    def test_student_gets_settings(self):
        """Test creating a student creates default settings."""
        student = make_user(self.tenant)
        instructor = make_user(self.tenant, role=User.Role.INSTRUCTOR)

        settings_obj = StudentSettings.objects.get(user=student)
        self.assertTrue(settings_obj.wants_email('achievements'))
        self.assertFalse(StudentSettings.objects.filter(user=instructor).exists())


class CourseModelTest(TestCase):
    """Tests for Course model."""

    def setUp(self):
        self.tenant = make_tenant()

    def test_slug_strict(self):
        """Test the slug keeps only lowercase alphanumerics and dashes."""
        course = Course.objects.create(title='  Intro to Python 3!! ', tenant=self.tenant)

        self.assertEqual(course.slug, 'intro-to-python-3')

    def test_global_clears_tenant(self):
        """Test global courses have no tenant."""
        course = make_course(self.tenant, is_global=True)

        self.assertIsNone(course.tenant_id)

    def test_publish_stamps_and_version(self):
        """Test publishing stamps published_at and updates bump the version."""
        course = make_course(self.tenant)
        self.assertEqual(course.version, 1)
        self.assertIsNone(course.published_at)

        course.status = Course.Status.PUBLISHED
        course.save()

        self.assertIsNotNone(course.published_at)
        self.assertEqual(course.version, 2)

        course.status = Course.Status.ARCHIVED
        course.save()
        course.refresh_from_db()

        self.assertIsNotNone(course.archived_at)
        self.assertEqual(course.version, 3)

    def test_capacity_limit(self):
        """Test zero capacity means unlimited."""
        self.assertFalse(make_course(self.tenant).has_capacity_limit)
        self.assertTrue(make_course(self.tenant, capacity=5).has_capacity_limit)


class LessonModelTest(TestCase):
    """Tests for Lesson content checks."""

    def setUp(self):
        self.module = make_module(make_course(make_tenant()))

    def test_quiz_requires_questions(self):
        """Test a quiz without questions reports an error."""
        lesson = Lesson(module=self.module, type=Lesson.Type.QUIZ, title='Quiz', questions=[])

        self.assertIn('questions', lesson.content_errors())

    def test_video_with_url_is_valid(self):
        """Test a video lesson with a URL has no errors."""
        lesson = make_lesson(self.module, Lesson.Type.VIDEO)

        self.assertEqual(lesson.content_errors(), {})
        self.assertEqual(lesson.course, self.module.course)

    def test_each_type_names_its_field(self):
        """Test every lesson type requires its own content field."""
        for lesson_type, (field, _) in Lesson.REQUIRED_FIELDS_BY_TYPE.items():
            lesson = Lesson(module=self.module, type=lesson_type, title='Empty')
            self.assertEqual(list(lesson.content_errors()), [field])


class EnrollmentModelTest(TestCase):
    """Tests for Enrollment timestamps and the progress cascade."""

    def setUp(self):
        self.tenant = make_tenant()
        self.student = make_user(self.tenant)
        self.course = make_course(self.tenant)

    def test_create_sets_enrolled_at_and_progress(self):
        """Test creating an enrollment stamps enrolled_at and starts progress."""
        enrollment = Enrollment.objects.create(student=self.student, course=self.course)

        self.assertIsNotNone(enrollment.enrolled_at)
        self.assertIsNone(enrollment.started_at)

        progress = Progress.objects.get(student=self.student, course=self.course)
        self.assertEqual(progress.status, Progress.Status.NOT_STARTED)
        self.assertEqual(progress.overall_progress, 0)
        self.assertEqual(progress.points_earned, 0)
        self.assertIsNotNone(progress.started_at)
        self.assertIsNotNone(progress.last_accessed)

    def test_status_changes_stamp_timestamps(self):
        """Test status transitions stamp their timestamps."""
        enrollment = Enrollment.objects.create(
            student=self.student,
            course=self.course,
            status=Enrollment.Status.PENDING,
        )

        enrollment.status = Enrollment.Status.ACTIVE
        enrollment.save()
        self.assertIsNotNone(enrollment.started_at)

        enrollment.status = Enrollment.Status.DROPPED
        enrollment.save()
        self.assertIsNotNone(enrollment.dropped_at)
        self.assertIsNone(enrollment.completed_at)

        enrollment.status = Enrollment.Status.COMPLETED
        enrollment.save()
        self.assertIsNotNone(enrollment.completed_at)

    def test_unique_student_course(self):
        """Test a student can only be enrolled once per course."""
        Enrollment.objects.create(student=self.student, course=self.course)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Enrollment.objects.create(student=self.student, course=self.course)


class ProgressModelTest(TestCase):
    """Tests for Progress helpers."""

    def setUp(self):
        tenant = make_tenant()
        self.progress = Progress.objects.create(student=make_user(tenant), course=make_course(tenant))

    def test_save_touches_last_accessed(self):
        """Test every save refreshes last_accessed."""
        first = self.progress.last_accessed
        self.progress.overall_progress = 10
        self.progress.save(update_fields=['overall_progress'])
        self.progress.refresh_from_db()

        self.assertGreaterEqual(self.progress.last_accessed, first)

    def test_quiz_attempts_window(self):
        """Test quiz attempts are filtered by completion time."""
        now = timezone.now()
        self.progress.quiz_attempts = [
            {'lesson': 'a', 'score': 90, 'completed_at': (now - timedelta(days=3)).isoformat()},
            {'lesson': 'b', 'score': 70, 'completed_at': now.isoformat()},
        ]

        self.assertEqual(len(self.progress.quiz_attempts_since(now - timedelta(days=1))), 1)
        self.assertEqual(self.progress.average_quiz_score, 80)

    def test_average_quiz_score_empty(self):
        """Test the average is zero without attempts."""
        self.assertEqual(self.progress.average_quiz_score, 0)


class PointsModelTest(TestCase):
    """Tests for the points ledger."""

    def test_points_are_immutable(self):
        """Test saving an existing points row fails."""
        student = make_user(make_tenant())
        points = Points.objects.create(
            student=student,
            type=Points.Type.STREAK_BONUS,
            amount=50,
            source_type=Points.SourceType.STREAKS,
        )

        points.amount = 500
        with self.assertRaises(PointsImmutable):
            points.save()

    def test_sources_keep_their_points_field(self):
        """Test lessons and achievements keep ``points`` beside their awards."""
        tenant = make_tenant()
        student = make_user(tenant)
        lesson = make_lesson(
            make_module(make_course(tenant)), lesson_type=Lesson.Type.ASSIGNMENT, points=20
        )
        achievement = make_achievement(tenant, points=25)

        award = Points.objects.create(
            student=student,
            type=Points.Type.ACHIEVEMENT_UNLOCK,
            amount=achievement.points,
            source_type=Points.SourceType.ACHIEVEMENTS,
            source_achievement=achievement,
        )

        lesson.refresh_from_db()
        achievement.refresh_from_db()
        self.assertEqual(lesson.points, 20)
        self.assertEqual(achievement.points, 25)
        self.assertEqual(list(achievement.point_awards.all()), [award])
        self.assertEqual(list(student.point_awards.all()), [award])


class StreakModelTest(TestCase):
    """Tests for Streak model."""

    def test_longest_tracks_current_on_update(self):
        """Test updates raise longest_streak to the current streak."""
        streak = Streak.objects.create(student=make_user(make_tenant()), type=Streak.Type.LOGIN)

        streak.current_streak = 4
        streak.save()
        streak.current_streak = 1
        streak.save()

        self.assertEqual(streak.longest_streak, 4)


class LeaderboardModelTest(TestCase):
    """Tests for Leaderboard tenant rules."""

    def test_requires_tenant_unless_global(self):
        """Test a non-global leaderboard needs a tenant."""
        with self.assertRaises(TenantRequired):
            Leaderboard.objects.create(name='Top Learners')

    def test_global_clears_tenant(self):
        """Test global leaderboards have no tenant."""
        leaderboard = Leaderboard.objects.create(
            name='Everyone',
            tenant=make_tenant(),
            is_global=True,
        )

        self.assertIsNone(leaderboard.tenant_id)


class SystemCheckTest(TestCase):
    """Tests for Django's system checks."""

    def test_models_pass_system_checks(self):
        """Test field and reverse accessor names raise no check errors."""
        errors = [message for message in checks.run_checks() if message.is_serious()]

        self.assertEqual(errors, [])
