from django.contrib import admin
from .models import (
    Tenant, Media, User, StudentSettings,
    Course, Module, Lesson, Enrollment, Progress,
    Points, Streak, Badge, UserBadge, Achievement, UserAchievement,
    Level, Leaderboard, Notification,
)


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'domain', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['name', 'slug', 'domain']
    ordering = ['name']


@admin.register(Media)
class MediaAdmin(admin.ModelAdmin):
    list_display = ['file', 'alt', 'mime_type', 'filesize', 'tenant', 'is_global']
    list_filter = ['is_global', 'mime_type']
    search_fields = ['alt']
    ordering = ['-created_at']


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ['email', 'name', 'role', 'tenant', 'locked_until', 'last_login_at']
    list_filter = ['role', 'tenant']
    search_fields = ['email', 'name']
    exclude = ['password']
    ordering = ['email']


@admin.register(StudentSettings)
class StudentSettingsAdmin(admin.ModelAdmin):
    list_display = ['user', 'theme', 'updated_at']
    list_filter = ['theme']
    search_fields = ['user__email']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'tenant', 'instructor', 'status', 'capacity', 'is_global', 'version']
    list_filter = ['status', 'is_global', 'allow_self_enrollment']
    search_fields = ['title', 'slug', 'description']
    ordering = ['-created_at']


@admin.register(Module)
class ModuleAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'order', 'status', 'completion_type']
    list_filter = ['status', 'completion_type']
    search_fields = ['title', 'course__title']
    ordering = ['course', 'order']


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ['title', 'module', 'type', 'order', 'status']
    list_filter = ['type', 'status']
    search_fields = ['title', 'module__title']
    ordering = ['module', 'order']


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['student', 'course', 'status', 'enrolled_at', 'completed_at', 'expires_at']
    list_filter = ['status']
    search_fields = ['student__email', 'course__title']
    ordering = ['-enrolled_at']


@admin.register(Progress)
class ProgressAdmin(admin.ModelAdmin):
    list_display = ['student', 'course', 'status', 'overall_progress', 'points_earned', 'total_points', 'last_accessed']
    list_filter = ['status', 'is_global']
    search_fields = ['student__email', 'course__title']
    ordering = ['-last_accessed']


@admin.register(Points)
class PointsAdmin(admin.ModelAdmin):
    list_display = ['student', 'type', 'amount', 'source_type', 'created_at']
    list_filter = ['type', 'source_type']
    search_fields = ['student__email']
    ordering = ['-created_at']


@admin.register(Streak)
class StreakAdmin(admin.ModelAdmin):
    list_display = ['student', 'type', 'current_streak', 'longest_streak', 'last_activity']
    list_filter = ['type']
    search_fields = ['student__email']
    ordering = ['-current_streak']


@admin.register(Badge)
class BadgeAdmin(admin.ModelAdmin):
    list_display = ['name', 'rarity', 'category', 'tenant', 'is_global']
    list_filter = ['rarity', 'category', 'is_global']
    search_fields = ['name', 'description']
    ordering = ['name']


@admin.register(UserBadge)
class UserBadgeAdmin(admin.ModelAdmin):
    list_display = ['user', 'badge', 'awarded_at']
    search_fields = ['user__email', 'badge__name']
    ordering = ['-awarded_at']


@admin.register(Achievement)
class AchievementAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'criteria_metric', 'criteria_threshold', 'points', 'secret', 'tenant', 'is_global']
    list_filter = ['type', 'criteria_timeframe', 'secret', 'is_global']
    search_fields = ['name', 'description']
    ordering = ['category', 'order']


@admin.register(UserAchievement)
class UserAchievementAdmin(admin.ModelAdmin):
    list_display = ['user', 'achievement', 'completed_at']
    search_fields = ['user__email', 'achievement__name']
    ordering = ['-completed_at']


@admin.register(Level)
class LevelAdmin(admin.ModelAdmin):
    list_display = ['level', 'name', 'points_required', 'tenant', 'is_global']
    list_filter = ['is_global']
    search_fields = ['name']
    ordering = ['level']


@admin.register(Leaderboard)
class LeaderboardAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'timeframe', 'tenant', 'is_global', 'display_limit', 'refresh_interval']
    list_filter = ['type', 'timeframe', 'is_global']
    search_fields = ['name']
    ordering = ['name']


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['user', 'type', 'read_at', 'created_at']
    list_filter = ['type']
    search_fields = ['user__email']
    ordering = ['-created_at']
