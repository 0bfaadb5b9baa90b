# services/lms-service/src/apps/core/api/views/__init__.py
"""
LMS Service Views
"""

from .tenant_views import (
    TenantViewSet,
    UserViewSet,
    MediaViewSet,
    StudentSettingsViewSet,
    AuthViewSet,
)
from .course_views import CourseViewSet, ModuleViewSet, LessonViewSet
from .learning_views import EnrollmentViewSet, ProgressViewSet
from .gamification_views import (
    PointsViewSet,
    StreakViewSet,
    BadgeViewSet,
    AchievementViewSet,
    LevelViewSet,
    LeaderboardViewSet,
    NotificationViewSet,
)


__all__ = [
    'TenantViewSet',
    'UserViewSet',
    'MediaViewSet',
    'StudentSettingsViewSet',
    'AuthViewSet',
    'CourseViewSet',
    'ModuleViewSet',
    'LessonViewSet',
    'EnrollmentViewSet',
    'ProgressViewSet',
    'PointsViewSet',
    'StreakViewSet',
    'BadgeViewSet',
    'AchievementViewSet',
    'LevelViewSet',
    'LeaderboardViewSet',
    'NotificationViewSet',
]
