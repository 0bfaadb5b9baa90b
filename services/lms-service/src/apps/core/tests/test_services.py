# services/lms-service/src/apps/core/tests/test_services.py
"""
Service Layer Tests

Tests for points totals, learning activity, streaks, levels,
enrollments, leaderboards, notifications and authentication.
"""

import json
from datetime import timedelta
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings
from django.utils import timezone

from shared.common.authentication import JWTTokenGenerator
from shared.common.exceptions import ConflictException, ForbiddenException, NotFoundException

from ..exceptions import (
    AccountLocked,
    CapacityReached,
    DuplicateEmail,
    DuplicateLevel,
    InvalidCredentials,
    InvalidLevelThreshold,
    InvalidToken,
    SelfEnrollmentNotAllowed,
)
from ..models import (
    Enrollment,
    Leaderboard,
    Lesson,
    Level,
    Notification,
    Points,
    Progress,
    StudentSettings,
    Streak,
    User,
    UserAchievement,
)
from ..services import (
    AuthService,
    CourseService,
    EnrollmentService,
    LeaderboardService,
    LevelService,
    NotificationService,
    PointsService,
    ProgressService,
    StreakService,
    UserService,
)
from ..tasks import evaluate_achievements, refresh_leaderboards
from .factories import (
    DEFAULT_PASSWORD,
    make_achievement,
    make_course,
    make_lesson,
    make_module,
    make_tenant,
    make_user,
    token_user,
)


class PointsCascadeTest(TestCase):
    """Tests for how awards flow into progress totals."""

    def setUp(self):
        self.tenant = make_tenant()
        self.student = make_user(self.tenant)
        self.course = make_course(self.tenant)
        self.other_course = make_course(self.tenant)
        Enrollment.objects.create(student=self.student, course=self.course)
        Enrollment.objects.create(student=self.student, course=self.other_course)
        self.lesson = make_lesson(make_module(self.course))

    def _progress(self, course):
        return Progress.objects.get(student=self.student, course=course)

    def test_lesson_points_go_to_the_lesson_course(self):
        """Test points_earned grows only on the source course's record."""
        PointsService.award_points(self.student, Points.Type.LESSON_COMPLETE, 10, source_lesson=self.lesson)

        self.assertEqual(self._progress(self.course).points_earned, 10)
        self.assertEqual(self._progress(self.other_course).points_earned, 0)

    def test_total_points_grow_on_every_record(self):
        """Test total_points grows on all of the student's records."""
        PointsService.award_points(self.student, Points.Type.LESSON_COMPLETE, 10, source_lesson=self.lesson)
        PointsService.award_points(self.student, Points.Type.STREAK_BONUS, 50)

        self.assertEqual(self._progress(self.course).total_points, 60)
        self.assertEqual(self._progress(self.other_course).total_points, 60)

    def test_source_type_follows_source(self):
        """Test the source type is derived from the given source."""
        lesson_points = PointsService.award_points(
            self.student, Points.Type.LESSON_COMPLETE, 10, source_lesson=self.lesson
        )
        streak_points = PointsService.award_points(self.student, Points.Type.STREAK_BONUS, 50)

        self.assertEqual(lesson_points.source_type, Points.SourceType.LESSONS)
        self.assertEqual(lesson_points.source, self.lesson)
        self.assertEqual(streak_points.source_type, Points.SourceType.STREAKS)

    def test_crossing_a_level_notifies(self):
        """Test reaching a level threshold creates a level-up notification."""
        Level.objects.create(name='Cadet', level=1, points_required=10, tenant=self.tenant)

        PointsService.award_points(self.student, Points.Type.LESSON_COMPLETE, 10, source_lesson=self.lesson)

        notification = Notification.objects.get(user=self.student, type=Notification.Type.LEVEL_UP)
        self.assertEqual(notification.data['level'], 1)

    def test_student_without_progress(self):
        """Test an award for a student with no progress records changes nothing else."""
        loner = make_user(self.tenant)

        points = PointsService.award_points(loner, Points.Type.STREAK_BONUS, 50)

        self.assertEqual(points.amount, 50)
        self.assertFalse(Progress.objects.filter(student=loner).exists())


class ProgressServiceTest(TestCase):
    """Tests for learning activity recording."""

    def setUp(self):
        self.tenant = make_tenant()
        self.student = make_user(self.tenant)
        self.course = make_course(self.tenant)
        self.module = make_module(self.course)
        self.first = make_lesson(self.module, order=0)
        self.second = make_lesson(self.module, order=1)
        self.enrollment = Enrollment.objects.create(student=self.student, course=self.course)

    def test_complete_lesson(self):
        """Test completing a lesson updates module and overall progress."""
        progress = ProgressService.complete_lesson(self.student, self.first)

        self.assertEqual(progress.overall_progress, 50)
        self.assertEqual(progress.status, Progress.Status.IN_PROGRESS)
        self.assertEqual(progress.points_earned, 10)
        self.assertTrue(Streak.objects.filter(student=self.student, type=Streak.Type.PROGRESS).exists())

    def test_complete_lesson_twice(self):
        """Test a lesson completed twice awards points once."""
        ProgressService.complete_lesson(self.student, self.first)
        ProgressService.complete_lesson(self.student, self.first)

        self.assertEqual(Points.objects.filter(student=self.student).count(), 1)

    def test_completing_course_completes_enrollment(self):
        """Test the last lesson completes both progress and enrollment."""
        ProgressService.complete_lesson(self.student, self.first)
        progress = ProgressService.complete_lesson(self.student, self.second)

        self.assertEqual(progress.overall_progress, 100)
        self.assertEqual(progress.status, Progress.Status.COMPLETED)
        self.assertIsNotNone(progress.completed_at)
        self.enrollment.refresh_from_db()
        self.assertEqual(self.enrollment.status, Enrollment.Status.COMPLETED)

    def test_record_quiz_attempt(self):
        """Test a quiz attempt is stored and scored as points."""
        quiz = make_lesson(self.module, Lesson.Type.QUIZ, order=2)

        progress = ProgressService.record_quiz_attempt(self.student, quiz, 84.6)

        self.assertEqual(len(progress.quiz_attempts), 1)
        self.assertEqual(progress.quiz_attempts[0]['score'], 84.6)
        self.assertEqual(Points.objects.get(student=self.student).amount, 85)
        self.assertTrue(Streak.objects.filter(student=self.student, type=Streak.Type.QUIZ).exists())

    def test_record_quiz_attempt_rejects_bad_score(self):
        """Test scores outside 0-100 are rejected."""
        quiz = make_lesson(self.module, Lesson.Type.QUIZ, order=2)

        with self.assertRaises(ValidationError):
            ProgressService.record_quiz_attempt(self.student, quiz, 120)
        self.assertFalse(Points.objects.filter(student=self.student).exists())

    def test_record_discussion(self):
        """Test a discussion post is stored and earns points."""
        discussion = make_lesson(self.module, Lesson.Type.DISCUSSION, order=2)

        progress = ProgressService.record_discussion(self.student, discussion)

        self.assertEqual(len(progress.discussions), 1)
        self.assertEqual(progress.points_earned, 5)

    def test_submit_assignment(self):
        """Test an assignment submission earns points."""
        assignment = make_lesson(self.module, Lesson.Type.ASSIGNMENT, order=2)

        progress = ProgressService.submit_assignment(self.student, assignment)

        self.assertEqual(progress.points_earned, 20)
        self.assertEqual(progress.status, Progress.Status.IN_PROGRESS)

    def test_activity_without_enrollment_starts_progress(self):
        """Test activity in a course without a record creates one."""
        stranger = make_user(self.tenant)

        progress = ProgressService.complete_lesson(stranger, self.first)

        self.assertEqual(progress.course, self.course)
        self.assertEqual(progress.overall_progress, 50)

    def test_activity_evaluates_achievements(self):
        """Test achievements are awarded after activity."""
        achievement = make_achievement(self.tenant, threshold=50)

        ProgressService.complete_lesson(self.student, self.first)

        self.assertTrue(UserAchievement.objects.filter(user=self.student, achievement=achievement).exists())


class StreakServiceTest(TestCase):
    """Tests for StreakService.record_activity."""

    def setUp(self):
        self.student = make_user(make_tenant())
        self.day = timezone.now().replace(hour=12, minute=0, second=0, microsecond=0)

    def _record(self, when):
        return StreakService.record_activity(self.student, Streak.Type.LOGIN, 'login', now=when)

    def test_consecutive_days_extend(self):
        """Test activity on consecutive days extends the streak."""
        self._record(self.day)
        streak = self._record(self.day + timedelta(days=1))

        self.assertEqual(streak.current_streak, 2)
        self.assertEqual(streak.longest_streak, 2)

    def test_same_day_only_adds_history(self):
        """Test a second activity on the same day keeps the count."""
        self._record(self.day)
        streak = self._record(self.day + timedelta(hours=3))

        self.assertEqual(streak.current_streak, 1)
        self.assertEqual(len(streak.history), 2)

    def test_gap_restarts(self):
        """Test a missed day restarts the streak and keeps the longest."""
        self._record(self.day)
        self._record(self.day + timedelta(days=1))
        streak = self._record(self.day + timedelta(days=3))

        self.assertEqual(streak.current_streak, 1)
        self.assertEqual(streak.longest_streak, 2)

    def test_milestone_awards_bonus(self):
        """Test reaching a milestone awards bonus points and notifies."""
        Streak.objects.create(
            student=self.student,
            type=Streak.Type.LOGIN,
            current_streak=6,
            last_activity=self.day - timedelta(days=1),
        )

        streak = self._record(self.day)

        self.assertEqual(streak.current_streak, 7)
        bonus = Points.objects.get(student=self.student, type=Points.Type.STREAK_BONUS)
        self.assertEqual(bonus.amount, 50)
        self.assertEqual(bonus.source_streak, streak)
        self.assertTrue(
            Notification.objects.filter(user=self.student, type=Notification.Type.STREAK_MILESTONE).exists()
        )


class LevelServiceTest(TestCase):
    """Tests for level rules and progression."""

    def setUp(self):
        self.tenant = make_tenant()
        self.student = make_user(self.tenant)
        Level.objects.create(name='Cadet', level=1, points_required=0, tenant=self.tenant)
        Level.objects.create(name='Scholar', level=2, points_required=100, tenant=self.tenant)

    def test_duplicate_level(self):
        """Test a level number can exist once per tenant."""
        with self.assertRaises(DuplicateLevel):
            LevelService.validate_level(1, 500, self.tenant.id)

    def test_duplicate_with_global_level(self):
        """Test a tenant level may not reuse a global level number."""
        other = make_tenant()
        Level.objects.create(name='Ace', level=5, points_required=1000, is_global=True)

        with self.assertRaises(DuplicateLevel):
            LevelService.validate_level(5, 2000, other.id)

    def test_threshold_must_increase(self):
        """Test a level must require more points than the one below."""
        with self.assertRaises(InvalidLevelThreshold):
            LevelService.validate_level(3, 100, self.tenant.id)

        LevelService.validate_level(3, 101, self.tenant.id)

    def test_update_keeps_own_number(self):
        """Test an existing level can be revalidated without a duplicate error."""
        scholar = Level.objects.get(level=2)

        LevelService.validate_level(2, 150, self.tenant.id, instance=scholar)

    def test_get_user_level(self):
        """Test the current and next level follow the highest total."""
        Progress.objects.create(student=self.student, course=make_course(self.tenant), total_points=40)

        result = LevelService.get_user_level(self.student)

        self.assertEqual(result['total_points'], 40)
        self.assertEqual(result['current_level'].level, 1)
        self.assertEqual(result['next_level'].level, 2)
        self.assertEqual(result['points_to_next'], 60)

    def test_top_level_has_no_next(self):
        """Test the highest level has nothing after it."""
        Progress.objects.create(student=self.student, course=make_course(self.tenant), total_points=250)

        result = LevelService.get_user_level(self.student)

        self.assertEqual(result['current_level'].level, 2)
        self.assertIsNone(result['next_level'])
        self.assertIsNone(result['points_to_next'])

    def test_new_level_notifies_eligible_students(self):
        """Test creating a level notifies students of that tenant who qualify."""
        outsider = make_user(make_tenant())
        Progress.objects.create(student=self.student, course=make_course(self.tenant), total_points=300)
        Progress.objects.create(student=outsider, course=make_course(outsider.tenant), total_points=900)

        Level.objects.create(name='Captain', level=3, points_required=200, tenant=self.tenant)

        notified = Notification.objects.filter(type=Notification.Type.LEVEL_UP, data__level=3)
        self.assertEqual([n.user_id for n in notified], [self.student.id])


class EnrollmentServiceTest(TestCase):
    """Tests for EnrollmentService."""

    def setUp(self):
        self.tenant = make_tenant()
        self.student = make_user(self.tenant)
        self.course = make_course(self.tenant, allow_self_enrollment=True)

    def test_self_enrollment(self):
        """Test a student enrolls themselves and progress starts."""
        enrollment = EnrollmentService.enroll(
            self.course, self.student, requested_by=token_user(self.student)
        )

        self.assertEqual(enrollment.status, Enrollment.Status.ACTIVE)
        self.assertTrue(Progress.objects.filter(student=self.student, course=self.course).exists())

    def test_student_cannot_enroll_others(self):
        """Test a student may only enroll themselves."""
        other = make_user(self.tenant)

        with self.assertRaises(ForbiddenException):
            EnrollmentService.enroll(self.course, other, requested_by=token_user(self.student))

    def test_self_enrollment_disabled(self):
        """Test self-enrollment respects the course flag."""
        closed = make_course(self.tenant)

        with self.assertRaises(SelfEnrollmentNotAllowed):
            EnrollmentService.enroll(closed, self.student, requested_by=token_user(self.student))

        instructor = make_user(self.tenant, role=User.Role.INSTRUCTOR)
        EnrollmentService.enroll(closed, self.student, requested_by=token_user(instructor))

    def test_duplicate_enrollment(self):
        """Test a student is enrolled at most once per course."""
        EnrollmentService.enroll(self.course, self.student)

        with self.assertRaises(ConflictException):
            EnrollmentService.enroll(self.course, self.student)

    def test_capacity(self):
        """Test active enrollments are limited by capacity."""
        full = make_course(self.tenant, capacity=1)
        EnrollmentService.enroll(full, self.student)

        with self.assertRaises(CapacityReached):
            EnrollmentService.enroll(full, make_user(self.tenant))

        pending = EnrollmentService.enroll(full, make_user(self.tenant), status=Enrollment.Status.PENDING)
        with self.assertRaises(CapacityReached):
            EnrollmentService.update_status(pending, Enrollment.Status.ACTIVE)

    def test_update_status_stamps(self):
        """Test dropping an enrollment stamps dropped_at."""
        enrollment = EnrollmentService.enroll(self.course, self.student)

        EnrollmentService.update_status(enrollment, Enrollment.Status.DROPPED)

        enrollment.refresh_from_db()
        self.assertIsNotNone(enrollment.dropped_at)


class CourseServiceTest(TestCase):
    """Tests for CourseService."""

    def setUp(self):
        self.tenant = make_tenant()
        self.instructor = make_user(self.tenant, role=User.Role.INSTRUCTOR)

    def test_create_course_defaults(self):
        """Test the tenant and instructor default to the caller."""
        course = CourseService.create_course(
            {'title': 'Night Flying'},
            token_user(self.instructor),
            tenant_id=self.tenant.id,
        )
        course.refresh_from_db()

        self.assertEqual(course.tenant, self.tenant)
        self.assertEqual(course.instructor, self.instructor)
        self.assertEqual(course.slug, 'night-flying')

    def test_create_global_course_has_no_tenant(self):
        """Test global courses are not assigned to the caller's tenant."""
        admin = make_user(role=User.Role.ADMIN)

        course = CourseService.create_course(
            {'title': 'Study Skills', 'is_global': True},
            token_user(admin),
            tenant_id=self.tenant.id,
        )

        self.assertIsNone(course.tenant_id)

    def test_capacity_below_active_enrollments(self):
        """Test capacity cannot drop below the active enrollment count."""
        course = make_course(self.tenant)
        Enrollment.objects.create(student=make_user(self.tenant), course=course)
        Enrollment.objects.create(student=make_user(self.tenant), course=course)

        with self.assertRaises(CapacityReached):
            CourseService.update_course(course, {'capacity': 1})

        CourseService.update_course(course, {'capacity': 2})
        course.refresh_from_db()
        self.assertEqual(course.capacity, 2)


class LeaderboardServiceTest(TestCase):
    """Tests for leaderboard standings."""

    def setUp(self):
        self.tenant = make_tenant()
        self.amelia = make_user(self.tenant, name='Amelia')
        self.bessie = make_user(self.tenant, name='Bessie')
        self.outsider = make_user(make_tenant(), name='Zed')
        PointsService.award_points(self.amelia, Points.Type.STREAK_BONUS, 30)
        PointsService.award_points(self.bessie, Points.Type.STREAK_BONUS, 50)
        PointsService.award_points(self.outsider, Points.Type.STREAK_BONUS, 100)
        self.board = Leaderboard.objects.create(name='Top Learners', tenant=self.tenant)

    def test_points_standings(self):
        """Test standings rank tenant students by points."""
        standings = LeaderboardService.get_standings(self.board)

        self.assertEqual([s['name'] for s in standings], ['Bessie', 'Amelia'])
        self.assertEqual([s['rank'] for s in standings], [1, 2])
        self.assertEqual(standings[0]['score'], 50)

    def test_ties_are_ordered_by_name(self):
        """Test equal scores are ordered by name."""
        PointsService.award_points(self.amelia, Points.Type.STREAK_BONUS, 20)

        standings = LeaderboardService.compute_standings(self.board)

        self.assertEqual([s['name'] for s in standings], ['Amelia', 'Bessie'])
        self.assertEqual([s['rank'] for s in standings], [1, 2])

    def test_global_board_and_limit(self):
        """Test global boards rank everyone up to the display limit."""
        board = Leaderboard.objects.create(name='World', is_global=True, display_limit=2)

        standings = LeaderboardService.compute_standings(board)

        self.assertEqual([s['name'] for s in standings], ['Zed', 'Bessie'])

    def test_point_type_scope(self):
        """Test point type scope filters the counted awards."""
        PointsService.award_points(self.amelia, Points.Type.QUIZ_SCORE, 5)
        board = Leaderboard.objects.create(
            name='Quizzers',
            tenant=self.tenant,
            scope_point_type=Leaderboard.PointType.QUIZ,
        )

        standings = LeaderboardService.compute_standings(board)

        self.assertEqual([(s['name'], s['score']) for s in standings], [('Amelia', 5)])

    def test_cached_until_invalidated(self):
        """Test standings are served from cache until invalidated."""
        LeaderboardService.get_standings(self.board)
        PointsService.award_points(self.amelia, Points.Type.STREAK_BONUS, 100)

        self.assertEqual(LeaderboardService.get_standings(self.board)[0]['name'], 'Bessie')

        LeaderboardService.invalidate(self.board)
        self.assertEqual(LeaderboardService.get_standings(self.board)[0]['name'], 'Amelia')

    def test_achievements_standings(self):
        """Test achievement boards count completions."""
        UserAchievement.objects.create(user=self.amelia, achievement=make_achievement(self.tenant))
        board = Leaderboard.objects.create(
            name='Collectors',
            tenant=self.tenant,
            type=Leaderboard.Type.ACHIEVEMENTS,
        )

        standings = LeaderboardService.compute_standings(board)

        self.assertEqual([(s['name'], s['score']) for s in standings], [('Amelia', 1)])

    def test_refresh_task(self):
        """Test the refresh task recomputes every leaderboard."""
        self.assertEqual(refresh_leaderboards(), {'refreshed': 1})


class NotificationServiceTest(TestCase):
    """Tests for NotificationService."""

    def setUp(self):
        self.student = make_user(make_tenant())
        self.other = make_user(self.student.tenant)

    def _notify(self, user=None):
        return NotificationService.create_notification(
            (user or self.student).id,
            Notification.Type.POINTS_AWARDED,
            {'points': 10},
        )

    def test_unread_and_mark_read(self):
        """Test notifications start unread and can be marked read."""
        notification = self._notify()
        self._notify()

        self.assertEqual(NotificationService.get_unread_count(self.student.id), 2)

        NotificationService.mark_as_read(notification.id, self.student.id)

        self.assertEqual(NotificationService.get_unread_count(self.student.id), 1)
        self.assertEqual(NotificationService.get_for_user(self.student.id, unread_only=True).count(), 1)

    def test_mark_other_users_notification(self):
        """Test a user cannot mark another user's notification."""
        notification = self._notify(self.other)

        with self.assertRaises(NotFoundException):
            NotificationService.mark_as_read(notification.id, self.student.id)

    def test_mark_all_as_read(self):
        """Test marking all notifications returns the count."""
        self._notify()
        self._notify()
        self._notify(self.other)

        self.assertEqual(NotificationService.mark_all_as_read(self.student.id), 2)
        self.assertEqual(NotificationService.get_unread_count(self.other.id), 1)

    def test_realtime_disabled(self):
        """Test nothing is published when realtime is off."""
        self.assertFalse(NotificationService.publish_realtime(self._notify()))

    @override_settings(REALTIME_ENABLED=True)
    def test_realtime_publish(self):
        """Test notifications are published on the user's channel."""
        with mock.patch('apps.core.services.notification_service.get_redis_connection') as get_connection:
            notification = self._notify()

        connection = get_connection.return_value
        channel, message = connection.publish.call_args[0]
        self.assertEqual(channel, f"user-{self.student.id}")
        self.assertEqual(json.loads(message)['event'], 'notification')
        self.assertEqual(json.loads(message)['payload']['type'], notification.type)

    @override_settings(REALTIME_ENABLED=True)
    def test_realtime_failure_is_reported(self):
        """Test a publish failure keeps the stored notification."""
        with mock.patch(
            'apps.core.services.notification_service.get_redis_connection',
            side_effect=ConnectionError('redis down'),
        ):
            notification = self._notify()
            self.assertFalse(NotificationService.publish_realtime(notification))

        self.assertTrue(Notification.objects.filter(id=notification.id).exists())


class AuthServiceTest(TestCase):
    """Tests for AuthService."""

    def setUp(self):
        self.tenant = make_tenant(name='North Field')
        self.student = make_user(self.tenant, email='learner@test.com')
        self.service = AuthService()

    @mock.patch('apps.core.services.auth_service.evaluate_achievements')
    def test_login_success(self, evaluate):
        """Test a good login returns tokens and records the login streak."""
        result = self.service.login('learner@test.com', DEFAULT_PASSWORD)

        self.assertIn('access_token', result)
        self.assertIn('refresh_token', result)
        self.assertEqual(result['user']['id'], str(self.student.id))
        self.assertEqual(result['user']['tenant_id'], str(self.tenant.id))
        self.assertTrue(Streak.objects.filter(student=self.student, type=Streak.Type.LOGIN).exists())
        evaluate.delay.assert_called_once_with(str(self.student.id), str(self.tenant.id))

    def test_login_unknown_email(self):
        """Test an unknown email is rejected."""
        with self.assertRaises(InvalidCredentials):
            self.service.login('nobody@test.com', DEFAULT_PASSWORD)

    def test_wrong_password_counts_failures(self):
        """Test a wrong password reports the remaining attempts."""
        with self.assertRaisesMessage(InvalidCredentials, '4 attempts remaining'):
            self.service.login('learner@test.com', 'wrong')

        self.student.refresh_from_db()
        self.assertEqual(self.student.failed_login_attempts, 1)

    def test_lockout(self):
        """Test the account locks after repeated failures."""
        for _ in range(4):
            with self.assertRaises(InvalidCredentials):
                self.service.login('learner@test.com', 'wrong')

        with self.assertRaises(AccountLocked):
            self.service.login('learner@test.com', 'wrong')
        with self.assertRaises(AccountLocked):
            self.service.login('learner@test.com', DEFAULT_PASSWORD)

    @mock.patch('apps.core.services.auth_service.evaluate_achievements')
    def test_login_with_tenant_slug(self, evaluate):
        """Test the tenant slug selects between accounts sharing an email."""
        other_tenant = make_tenant(name='North Campus')
        other = make_user(other_tenant, email='learner@test.com', password='OtherPassword1!')

        result = self.service.login('learner@test.com', 'OtherPassword1!', tenant_slug='north-campus')

        self.assertEqual(result['user']['id'], str(other.id))

    def test_admin_login_skips_streak(self):
        """Test only students get a login streak."""
        make_user(role=User.Role.ADMIN, email='root@test.com')

        self.service.login('root@test.com', DEFAULT_PASSWORD)

        self.assertFalse(Streak.objects.exists())

    def test_refresh_tokens(self):
        """Test a refresh token issues a new pair and an access token does not."""
        refresh = JWTTokenGenerator.generate_refresh_token(self.student.id)
        access = JWTTokenGenerator.generate_access_token(
            user_id=self.student.id,
            email=self.student.email,
            role=self.student.role,
            tenant_id=self.tenant.id,
        )

        self.assertEqual(self.service.refresh_tokens(refresh)['user']['id'], str(self.student.id))
        with self.assertRaises(InvalidToken):
            self.service.refresh_tokens(access)
        with self.assertRaises(InvalidToken):
            self.service.refresh_tokens('garbage')

    def test_me(self):
        """Test the stored user is loaded for a token."""
        self.assertEqual(self.service.me(token_user(self.student)), self.student)


class UserServiceTest(TestCase):
    """Tests for UserService."""

    def setUp(self):
        self.tenant = make_tenant()

    def test_non_admin_needs_tenant(self):
        """Test students and instructors must belong to a tenant."""
        with self.assertRaises(ValidationError):
            UserService.create_user({'email': 'a@test.com', 'name': 'A', 'role': User.Role.STUDENT})

    def test_admin_without_tenant(self):
        """Test admins may exist without a tenant."""
        user = UserService.create_user(
            {'email': 'root@test.com', 'name': 'Root', 'role': User.Role.ADMIN},
            password=DEFAULT_PASSWORD,
        )

        self.assertIsNone(user.tenant_id)
        self.assertTrue(user.check_password(DEFAULT_PASSWORD))

    def test_duplicate_email_in_tenant(self):
        """Test emails are unique within a tenant, case-insensitively."""
        make_user(self.tenant, email='dup@test.com')

        with self.assertRaises(DuplicateEmail):
            UserService.create_user({'email': 'DUP@test.com', 'name': 'B', 'tenant': self.tenant})

    def test_student_gets_settings(self):
        """Test new students get default settings."""
        user = UserService.create_user({'email': 's@test.com', 'name': 'S', 'tenant': self.tenant})

        self.assertTrue(StudentSettings.objects.filter(user=user).exists())


class TaskTest(TestCase):
    """Tests for the background tasks."""

    def test_evaluate_achievements_task(self):
        """Test the task returns the awarded achievement ids."""
        tenant = make_tenant()
        student = make_user(tenant)
        Progress.objects.create(student=student, course=make_course(tenant), overall_progress=80)
        achievement = make_achievement(tenant, threshold=50)

        result = evaluate_achievements(str(student.id), str(tenant.id))

        self.assertEqual(result, {'awarded': [str(achievement.id)]})
