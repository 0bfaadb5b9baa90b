from .publishers import (
    EventPublisher,
    get_publisher,
    publish_enrollment_created,
    publish_points_awarded,
    publish_achievement_unlocked,
    publish_level_reached,
)

__all__ = [
    'EventPublisher',
    'get_publisher',
    'publish_enrollment_created',
    'publish_points_awarded',
    'publish_achievement_unlocked',
    'publish_level_reached',
]
