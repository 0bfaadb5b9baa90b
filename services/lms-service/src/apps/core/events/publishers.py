# services/lms-service/src/apps/core/events/publishers.py
"""
Event Publishers

Functions for publishing LMS domain events.
"""

import logging
from typing import Dict, Any
from uuid import UUID

from django.utils import timezone

logger = logging.getLogger(__name__)


class EventPublisher:
    """
    Event publisher for the LMS service.

    Events are emitted to the service log; downstream consumers read
    them from there.
    """

    def __init__(self, service: str = 'lms-service'):
        self.service = service

    def publish(self, event_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Publish a domain event.

        Args:
            event_type: Dotted event name, e.g. ``lms.enrollment.created``
            data: Event payload

        Returns:
            The event envelope that was published
        """
        event = {
            'event_type': event_type,
            'timestamp': timezone.now().isoformat(),
            'service': self.service,
            'data': {key: str(value) if isinstance(value, UUID) else value
                     for key, value in data.items()},
        }
        logger.info(f"Publishing event: {event_type}", extra={'event': event})
        return event


# Global publisher instance
_publisher = EventPublisher()


def get_publisher() -> EventPublisher:
    """Get the global event publisher instance."""
    return _publisher


def publish_enrollment_created(enrollment_id: UUID, student_id: UUID, course_id: UUID):
    return get_publisher().publish(
        'lms.enrollment.created',
        {
            'enrollment_id': enrollment_id,
            'student_id': student_id,
            'course_id': course_id,
        }
    )


def publish_points_awarded(points_id: UUID, student_id: UUID, point_type: str, amount: int):
    return get_publisher().publish(
        'lms.points.awarded',
        {
            'points_id': points_id,
            'student_id': student_id,
            'type': point_type,
            'amount': amount,
        }
    )


def publish_achievement_unlocked(achievement_id: UUID, user_id: UUID, points: int):
    return get_publisher().publish(
        'lms.achievement.unlocked',
        {
            'achievement_id': achievement_id,
            'user_id': user_id,
            'points': points,
        }
    )


def publish_level_reached(level_id: UUID, user_id: UUID, level: int):
    return get_publisher().publish(
        'lms.level.reached',
        {
            'level_id': level_id,
            'user_id': user_id,
            'level': level,
        }
    )
