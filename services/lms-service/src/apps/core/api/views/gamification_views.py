# services/lms-service/src/apps/core/api/views/gamification_views.py
"""
Gamification Views

Points and streaks are written by the system; badges, achievements,
levels and leaderboards are managed by admins and readable within the
tenant.
"""

import logging

from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from shared.common.mixins import ActionLogMixin
from shared.common.permissions import IsAuthenticated, is_admin

from ...models import Achievement, Badge, Leaderboard, Level, Points, Streak, UserAchievement
from ...services import AchievementService, LeaderboardService, LevelService, NotificationService
from ..permissions import AdminManagedAccess, LedgerAccess
from ..serializers import (
    AchievementProgressSerializer,
    AchievementSerializer,
    AvailableAchievementSerializer,
    BadgeSerializer,
    LeaderboardSerializer,
    LevelSerializer,
    NotificationSerializer,
    PointsSerializer,
    ProgressValueQuerySerializer,
    StandingSerializer,
    StreakSerializer,
    UserAchievementSerializer,
    UserLevelSerializer,
)
from .base import TenantScopedViewSet, scope_to_student, scope_to_tenant

logger = logging.getLogger(__name__)


class LedgerViewSet(
    ActionLogMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Read and admin-delete access to system-written records."""

    permission_classes = [LedgerAccess]


class PointsViewSet(LedgerViewSet):
    """
    ViewSet for the points ledger.

    Points are created by lesson, quiz, streak and achievement activity
    and can never be edited.
    """

    serializer_class = PointsSerializer
    filterset_fields = ['type', 'student', 'source_type']
    ordering_fields = ['created_at', 'amount']

    def get_queryset(self):
        return scope_to_student(Points.objects.select_related('student'), self.request)


class StreakViewSet(LedgerViewSet):
    serializer_class = StreakSerializer
    filterset_fields = ['type', 'student']
    ordering_fields = ['current_streak', 'longest_streak', 'last_activity']

    def get_queryset(self):
        return scope_to_student(Streak.objects.select_related('student'), self.request)


class BadgeViewSet(TenantScopedViewSet):
    """
    ViewSet for badges.
    """

    serializer_class = BadgeSerializer
    permission_classes = [AdminManagedAccess]
    filterset_fields = ['rarity', 'category', 'is_global']
    search_fields = ['name']

    def get_queryset(self):
        return scope_to_tenant(Badge.objects.all(), self.request)


class AchievementViewSet(TenantScopedViewSet):
    """
    ViewSet for achievements.

    Endpoints:
    - GET /achievements/ - List achievements (secret ones only once unlocked)
    - POST /achievements/ - Create achievement (admin)
    - GET /achievements/mine/ - Achievements the caller completed
    - GET /achievements/available/ - Tenant achievements with completion state
    - GET /achievements/progress-value/ - Raw metric value for a criterion
    - GET /achievements/{id}/progress/ - Caller's progress towards an achievement
    - POST /achievements/{id}/check/ - Evaluate and award an achievement
    """

    serializer_class = AchievementSerializer
    permission_classes = [AdminManagedAccess]
    filterset_fields = ['type', 'category', 'is_global', 'secret']
    search_fields = ['name', 'description']
    ordering_fields = ['order', 'category', 'points']

    def get_queryset(self):
        queryset = scope_to_tenant(
            Achievement.objects.select_related('badge').prefetch_related('prerequisites'),
            self.request,
        )
        if is_admin(self.request):
            return queryset
        unlocked = UserAchievement.objects.filter(
            user_id=self.request.user.id
        ).values('achievement_id')
        return queryset.filter(Q(secret=False) | Q(id__in=unlocked))

    @action(detail=False, methods=['get'], permission_classes=[IsAuthenticated])
    def mine(self, request):
        """Achievements the caller has completed."""
        user_achievements = AchievementService.get_user_achievements(request.user)
        serializer = UserAchievementSerializer(user_achievements, many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['get'], permission_classes=[IsAuthenticated])
    def available(self, request):
        """The tenant's achievements with the caller's completion state."""
        achievements = AchievementService.get_available_achievements(request.user)
        serializer = AvailableAchievementSerializer(achievements, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['get'], url_path='progress', permission_classes=[IsAuthenticated])
    def progress(self, request, pk=None):
        """Progress of the caller towards one achievement."""
        result = AchievementService.get_achievement_progress(request.user, pk)
        return Response(AchievementProgressSerializer(result).data)

    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated])
    def check(self, request, pk=None):
        """Evaluate one achievement for the caller, awarding it when met."""
        result = AchievementService.check_progress_action(request.user, pk)
        return Response(result, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='progress-value', permission_classes=[IsAuthenticated])
    def progress_value(self, request):
        """Current value of a metric for the caller within a timeframe."""
        serializer = ProgressValueQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        value = AchievementService.get_progress(
            request.user.id,
            params['type'],
            params['metric'],
            params['timeframe'],
        )
        return Response({
            'type': params['type'],
            'metric': params['metric'],
            'timeframe': params['timeframe'],
            'value': value,
        })


class LevelViewSet(TenantScopedViewSet):
    """
    ViewSet for levels.

    Creating a level notifies every student who already qualifies for it.
    """

    serializer_class = LevelSerializer
    permission_classes = [AdminManagedAccess]
    filterset_fields = ['is_global', 'tenant']
    ordering_fields = ['level', 'points_required']

    def get_queryset(self):
        return scope_to_tenant(Level.objects.all(), self.request).order_by('level')

    @action(detail=False, methods=['get'], permission_classes=[IsAuthenticated])
    def mine(self, request):
        """The caller's current and next level."""
        result = LevelService.get_user_level(self.get_current_user())
        return Response(UserLevelSerializer(result).data)


class LeaderboardViewSet(TenantScopedViewSet):
    """
    ViewSet for leaderboards.
    """

    serializer_class = LeaderboardSerializer
    permission_classes = [AdminManagedAccess]
    filterset_fields = ['type', 'timeframe', 'is_global']
    search_fields = ['name']

    def get_queryset(self):
        return scope_to_tenant(Leaderboard.objects.all(), self.request)

    def perform_update(self, serializer):
        instance = serializer.save()
        LeaderboardService.invalidate(instance)
        self.log_action('update', instance)

    @action(detail=True, methods=['get'])
    def standings(self, request, pk=None):
        """Ranked standings, cached for the leaderboard's refresh interval."""
        leaderboard = self.get_object()
        standings = LeaderboardService.get_standings(leaderboard)
        return Response({
            'leaderboard': str(leaderboard.id),
            'timeframe': leaderboard.timeframe,
            'standings': StandingSerializer(standings, many=True).data,
        })


class NotificationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for the caller's notifications.

    Endpoints:
    - GET /notifications/ - List notifications (``?unread=true`` for unread only)
    - GET /notifications/{id}/ - Get notification
    - POST /notifications/{id}/read/ - Mark as read
    - POST /notifications/read-all/ - Mark all as read
    - GET /notifications/unread-count/ - Unread count
    """

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ['type']

    def get_queryset(self):
        unread_only = self.request.query_params.get('unread', '').lower() == 'true'
        return NotificationService.get_for_user(self.request.user.id, unread_only=unread_only)

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        """Mark a notification as read."""
        notification = NotificationService.mark_as_read(pk, request.user.id)
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        """Mark all notifications as read."""
        count = NotificationService.mark_all_as_read(request.user.id)
        return Response({'marked_read': count})

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        """Number of unread notifications."""
        return Response({'unread_count': NotificationService.get_unread_count(request.user.id)})
