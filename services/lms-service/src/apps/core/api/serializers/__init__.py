from .tenant_serializers import (
    TenantSerializer,
    MediaSerializer,
    StudentSettingsSerializer,
    UserSerializer,
    LoginSerializer,
    RefreshTokenSerializer,
)
from .course_serializers import (
    CourseSerializer,
    ModuleSerializer,
    LessonSerializer,
    LessonSummarySerializer,
)
from .learning_serializers import (
    EnrollmentSerializer,
    EnrollmentUpdateSerializer,
    ProgressSerializer,
    QuizAttemptSerializer,
)
from .gamification_serializers import (
    PointsSerializer,
    StreakSerializer,
    BadgeSerializer,
    AchievementSerializer,
    AvailableAchievementSerializer,
    UserAchievementSerializer,
    AchievementProgressSerializer,
    ProgressValueQuerySerializer,
    LevelSerializer,
    UserLevelSerializer,
    LeaderboardSerializer,
    StandingSerializer,
    NotificationSerializer,
)

__all__ = [
    'TenantSerializer',
    'MediaSerializer',
    'StudentSettingsSerializer',
    'UserSerializer',
    'LoginSerializer',
    'RefreshTokenSerializer',
    'CourseSerializer',
    'ModuleSerializer',
    'LessonSerializer',
    'LessonSummarySerializer',
    'EnrollmentSerializer',
    'EnrollmentUpdateSerializer',
    'ProgressSerializer',
    'QuizAttemptSerializer',
    'PointsSerializer',
    'StreakSerializer',
    'BadgeSerializer',
    'AchievementSerializer',
    'AvailableAchievementSerializer',
    'UserAchievementSerializer',
    'AchievementProgressSerializer',
    'ProgressValueQuerySerializer',
    'LevelSerializer',
    'UserLevelSerializer',
    'LeaderboardSerializer',
    'StandingSerializer',
    'NotificationSerializer',
]
