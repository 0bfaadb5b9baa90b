# services/lms-service/src/apps/core/models/__init__.py
"""
LMS Service Models

Database models for the learning management system:
- Tenants, users, media and settings
- Courses, modules and lessons
- Enrollments and progress
- Gamification (points, streaks, badges, achievements, levels, leaderboards)
- Notifications
"""

from .tenant import Tenant, Media
from .user import User, StudentSettings
from .course import ContentStatus, Course, CoursePrerequisite, Module, Lesson
from .enrollment import Enrollment, Progress
from .gamification import (
    Points,
    Streak,
    Badge,
    UserBadge,
    Achievement,
    UserAchievement,
    Level,
    Leaderboard,
)
from .notification import Notification

__all__ = [
    # Tenancy
    'Tenant',
    'Media',
    'User',
    'StudentSettings',
    # Content
    'ContentStatus',
    'Course',
    'CoursePrerequisite',
    'Module',
    'Lesson',
    # Learning
    'Enrollment',
    'Progress',
    # Gamification
    'Points',
    'Streak',
    'Badge',
    'UserBadge',
    'Achievement',
    'UserAchievement',
    'Level',
    'Leaderboard',
    # Notifications
    'Notification',
]
