"""
LMS Service business logic.
"""

from .notification_service import NotificationService
from .level_service import LevelService
from .points_service import PointsService
from .streak_service import StreakService
from .achievement_service import AchievementService
from .progress_service import ProgressService
from .enrollment_service import EnrollmentService
from .course_service import CourseService
from .leaderboard_service import LeaderboardService
from .user_service import UserService
from .auth_service import AuthService

__all__ = [
    'NotificationService',
    'LevelService',
    'PointsService',
    'StreakService',
    'AchievementService',
    'ProgressService',
    'EnrollmentService',
    'CourseService',
    'LeaderboardService',
    'UserService',
    'AuthService',
]
