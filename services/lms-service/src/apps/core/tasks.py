# services/lms-service/src/apps/core/tasks.py
"""
Celery Tasks for LMS Service
"""

import logging
from typing import Any, Dict, Optional

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(name='lms.refresh_leaderboards')
def refresh_leaderboards() -> Dict[str, Any]:
    """
    Recompute and cache the standings of every leaderboard.

    Scheduled by Celery beat.
    """
    from .services import LeaderboardService

    count = LeaderboardService.refresh_all()
    return {'refreshed': count}


@shared_task(name='lms.evaluate_achievements')
def evaluate_achievements(user_id: str, tenant_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Evaluate all open achievements for one user.

    Args:
        user_id: Student ID
        tenant_id: Student's tenant

    Returns:
        Dict with the awarded achievement IDs
    """
    from .services import AchievementService

    awarded = AchievementService.evaluate_all(user_id, tenant_id)
    logger.info(f"Achievement sweep for {user_id}: {len(awarded)} awarded")
    return {'awarded': [str(achievement.id) for achievement in awarded]}
