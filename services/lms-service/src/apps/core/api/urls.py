# services/lms-service/src/apps/core/api/urls.py
"""
LMS Service API URL Configuration
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    AchievementViewSet,
    AuthViewSet,
    BadgeViewSet,
    CourseViewSet,
    EnrollmentViewSet,
    LeaderboardViewSet,
    LessonViewSet,
    LevelViewSet,
    MediaViewSet,
    ModuleViewSet,
    NotificationViewSet,
    PointsViewSet,
    ProgressViewSet,
    StreakViewSet,
    StudentSettingsViewSet,
    TenantViewSet,
    UserViewSet,
)


# Create router
router = DefaultRouter()
router.register(r'auth', AuthViewSet, basename='auth')
router.register(r'tenants', TenantViewSet, basename='tenant')
router.register(r'users', UserViewSet, basename='user')
router.register(r'media', MediaViewSet, basename='media')
router.register(r'student-settings', StudentSettingsViewSet, basename='student-settings')
router.register(r'courses', CourseViewSet, basename='course')
router.register(r'modules', ModuleViewSet, basename='module')
router.register(r'lessons', LessonViewSet, basename='lesson')
router.register(r'enrollments', EnrollmentViewSet, basename='enrollment')
router.register(r'progress', ProgressViewSet, basename='progress')
router.register(r'points', PointsViewSet, basename='points')
router.register(r'streaks', StreakViewSet, basename='streak')
router.register(r'badges', BadgeViewSet, basename='badge')
router.register(r'achievements', AchievementViewSet, basename='achievement')
router.register(r'levels', LevelViewSet, basename='level')
router.register(r'leaderboards', LeaderboardViewSet, basename='leaderboard')
router.register(r'notifications', NotificationViewSet, basename='notification')


urlpatterns = [
    path('', include(router.urls)),
]
