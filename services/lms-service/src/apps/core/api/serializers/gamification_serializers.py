# services/lms-service/src/apps/core/api/serializers/gamification_serializers.py
"""
Gamification Serializers

Points, streaks, badges, achievements, levels, leaderboards and
notifications.
"""

from rest_framework import serializers

from shared.common.validators import validate_json_list

from ...models import (
    Achievement,
    Badge,
    Leaderboard,
    Level,
    Notification,
    Points,
    Streak,
    UserAchievement,
)
from ...services import LevelService
from .mixins import TenantDefaultMixin


class PointsSerializer(serializers.ModelSerializer):
    """Read-only serializer for the points ledger."""

    class Meta:
        model = Points
        fields = [
            'id', 'student', 'type', 'amount', 'source_type',
            'source_lesson', 'source_achievement', 'source_streak',
            'metadata', 'created_at',
        ]
        read_only_fields = fields


class StreakSerializer(serializers.ModelSerializer):
    """Read-only serializer for streaks."""

    class Meta:
        model = Streak
        fields = [
            'id', 'student', 'type', 'current_streak', 'longest_streak',
            'last_activity', 'next_required', 'history', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class BadgeSerializer(TenantDefaultMixin, serializers.ModelSerializer):
    """Serializer for badges."""

    class Meta:
        model = Badge
        fields = [
            'id', 'name', 'description', 'icon', 'rarity', 'category',
            'tenant', 'is_global', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'tenant': {'required': False}}


class AchievementSerializer(TenantDefaultMixin, serializers.ModelSerializer):
    """Serializer for achievements."""

    prerequisites = serializers.PrimaryKeyRelatedField(
        many=True, queryset=Achievement.objects.all(), required=False
    )
    badge_detail = BadgeSerializer(source='badge', read_only=True)

    class Meta:
        model = Achievement
        fields = [
            'id', 'name', 'description', 'tenant', 'type',
            'criteria_metric', 'criteria_threshold', 'criteria_timeframe',
            'criteria_custom_rule', 'badge', 'badge_detail', 'points', 'secret',
            'is_global', 'category', 'order', 'prerequisites',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'tenant': {'required': False}}

    def validate(self, attrs):
        attrs = super().validate(attrs)
        achievement_type = attrs.get('type', getattr(self.instance, 'type', None))
        rule = attrs.get('criteria_custom_rule', getattr(self.instance, 'criteria_custom_rule', ''))
        if achievement_type == Achievement.Type.CUSTOM and not rule:
            raise serializers.ValidationError(
                {'criteria_custom_rule': ['Custom achievements require a rule']}
            )
        return attrs


class AvailableAchievementSerializer(AchievementSerializer):
    """Achievement annotated with the caller's completion state."""

    is_completed = serializers.BooleanField(read_only=True)
    prerequisites_met = serializers.BooleanField(read_only=True)

    class Meta(AchievementSerializer.Meta):
        fields = AchievementSerializer.Meta.fields + ['is_completed', 'prerequisites_met']


class UserAchievementSerializer(serializers.ModelSerializer):
    """A completed achievement with its badge."""

    achievement = AchievementSerializer(read_only=True)

    class Meta:
        model = UserAchievement
        fields = ['id', 'user', 'achievement', 'completed_at']
        read_only_fields = fields


class AchievementProgressSerializer(serializers.Serializer):
    """Progress of the caller towards an achievement."""

    achievement = AchievementSerializer(read_only=True)
    progress = serializers.BooleanField()
    current_value = serializers.FloatField(allow_null=True)


class ProgressValueQuerySerializer(serializers.Serializer):
    """Query parameters for a raw progress value."""

    type = serializers.CharField()
    metric = serializers.CharField()
    timeframe = serializers.ChoiceField(
        choices=Achievement.Timeframe.choices,
        default=Achievement.Timeframe.ALL_TIME,
    )


class LevelSerializer(TenantDefaultMixin, serializers.ModelSerializer):
    """Serializer for levels."""

    class Meta:
        model = Level
        fields = [
            'id', 'name', 'level', 'description', 'points_required',
            'tenant', 'is_global', 'icon', 'rewards', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'tenant': {'required': False}}

    def validate_rewards(self, value):
        rewards = validate_json_list(value, ['type'], 'rewards')
        allowed = set(Level.RewardType.values)
        for reward in rewards:
            if reward['type'] not in allowed:
                raise serializers.ValidationError(f"Unknown reward type: {reward['type']}")
        return rewards

    def validate(self, attrs):
        attrs = super().validate(attrs)
        tenant = attrs.get('tenant', getattr(self.instance, 'tenant', None))
        if attrs.get('is_global', getattr(self.instance, 'is_global', False)):
            tenant = None
        LevelService.validate_level(
            attrs.get('level', getattr(self.instance, 'level', None)),
            attrs.get('points_required', getattr(self.instance, 'points_required', 0)),
            getattr(tenant, 'id', None),
            instance=self.instance,
        )
        return attrs


class UserLevelSerializer(serializers.Serializer):
    total_points = serializers.IntegerField()
    current_level = LevelSerializer(allow_null=True)
    next_level = LevelSerializer(allow_null=True)
    points_to_next = serializers.IntegerField(allow_null=True)


class LeaderboardSerializer(TenantDefaultMixin, serializers.ModelSerializer):
    """Serializer for leaderboards."""

    class Meta:
        model = Leaderboard
        fields = [
            'id', 'name', 'tenant', 'is_global', 'type', 'timeframe',
            'scope_course', 'scope_point_type', 'scope_achievement_type',
            'custom_logic', 'display_limit', 'refresh_interval',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'tenant': {'required': False}}


class StandingSerializer(serializers.Serializer):
    rank = serializers.IntegerField()
    student_id = serializers.UUIDField()
    name = serializers.CharField()
    score = serializers.FloatField()


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer for notifications."""

    is_read = serializers.BooleanField(read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'type', 'data', 'is_read', 'read_at', 'created_at']
        read_only_fields = fields
