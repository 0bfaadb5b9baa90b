"""
Leaderboard Service

Computes ranked standings for leaderboards and caches them for the
leaderboard's refresh interval.
"""

import logging
from typing import Dict, List

from django.core.cache import cache
from django.db.models import Avg, Count, Sum

from shared.common.utils import timeframe_start

from ..constants import (
    LEADERBOARD_ACHIEVEMENT_TYPES,
    LEADERBOARD_CACHE_KEY,
    LEADERBOARD_POINT_TYPES,
)
from ..models import Leaderboard, Points, Progress, User, UserAchievement

logger = logging.getLogger(__name__)


class LeaderboardService:
    """Service for leaderboard standings."""

    @staticmethod
    def cache_key(leaderboard: Leaderboard) -> str:
        return LEADERBOARD_CACHE_KEY.format(id=leaderboard.id)

    @staticmethod
    def get_standings(leaderboard: Leaderboard, use_cache: bool = True) -> List[Dict]:
        """
        Ranked standings for a leaderboard.

        Returns:
            List of ``{rank, student_id, name, score}``, at most
            ``display_limit`` long
        """
        key = LeaderboardService.cache_key(leaderboard)
        if use_cache:
            cached = cache.get(key)
            if cached is not None:
                return cached

        standings = LeaderboardService.compute_standings(leaderboard)
        cache.set(key, standings, timeout=leaderboard.refresh_interval)
        return standings

    @staticmethod
    def invalidate(leaderboard: Leaderboard) -> None:
        cache.delete(LeaderboardService.cache_key(leaderboard))

    @staticmethod
    def compute_standings(leaderboard: Leaderboard) -> List[Dict]:
        """Compute standings from the database, bypassing the cache."""
        scores = LeaderboardService._scores(leaderboard)
        if not scores:
            return []

        names = dict(User.objects.filter(id__in=scores.keys()).values_list('id', 'name'))
        ordered = sorted(
            scores.items(),
            key=lambda item: (-item[1], names.get(item[0], '')),
        )

        return [
            {
                'rank': rank,
                'student_id': str(student_id),
                'name': names.get(student_id, ''),
                'score': score,
            }
            for rank, (student_id, score) in enumerate(
                ordered[:leaderboard.display_limit], start=1
            )
        ]

    @staticmethod
    def _scores(leaderboard: Leaderboard) -> Dict:
        start = timeframe_start(leaderboard.timeframe)
        board_type = leaderboard.type

        if board_type == Leaderboard.Type.POINTS:
            queryset = Points.objects.filter(created_at__gte=start)
            queryset = LeaderboardService._scope_students(queryset, leaderboard, 'student')
            point_type = LEADERBOARD_POINT_TYPES.get(leaderboard.scope_point_type)
            if point_type:
                queryset = queryset.filter(type=point_type)
            if leaderboard.scope_course_id:
                queryset = queryset.filter(source_lesson__module__course_id=leaderboard.scope_course_id)
            rows = queryset.order_by().values('student_id').annotate(score=Sum('amount'))
            return {row['student_id']: row['score'] or 0 for row in rows}

        if board_type == Leaderboard.Type.PROGRESS:
            queryset = Progress.objects.all()
            queryset = LeaderboardService._scope_students(queryset, leaderboard, 'student')
            if leaderboard.scope_course_id:
                queryset = queryset.filter(course_id=leaderboard.scope_course_id)
            rows = queryset.order_by().values('student_id').annotate(score=Avg('overall_progress'))
            return {row['student_id']: round(row['score'] or 0, 2) for row in rows}

        if board_type == Leaderboard.Type.ACHIEVEMENTS:
            queryset = UserAchievement.objects.filter(completed_at__gte=start)
            queryset = LeaderboardService._scope_students(queryset, leaderboard, 'user')
            achievement_type = LEADERBOARD_ACHIEVEMENT_TYPES.get(leaderboard.scope_achievement_type)
            if achievement_type:
                queryset = queryset.filter(achievement__type=achievement_type)
            rows = queryset.order_by().values('user_id').annotate(score=Count('id'))
            return {row['user_id']: row['score'] for row in rows}

        return {}

    @staticmethod
    def _scope_students(queryset, leaderboard: Leaderboard, field: str):
        if leaderboard.is_global or not leaderboard.tenant_id:
            return queryset
        return queryset.filter(**{f'{field}__tenant_id': leaderboard.tenant_id})

    @staticmethod
    def refresh_all() -> int:
        """Recompute and cache every leaderboard."""
        count = 0
        for leaderboard in Leaderboard.objects.all():
            LeaderboardService.get_standings(leaderboard, use_cache=False)
            count += 1
        logger.info(f"Refreshed {count} leaderboards")
        return count
