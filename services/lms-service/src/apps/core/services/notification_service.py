"""
Notification Service.

Stores in-app notifications and pushes them to the user's realtime channel.
"""
import json
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from django.conf import settings
from django.db.models import QuerySet
from django.utils import timezone
from django_redis import get_redis_connection

from shared.common.exceptions import NotFoundException

from ..constants import REALTIME_CHANNEL_PREFIX
from ..models import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for managing notifications."""

    @staticmethod
    def get_for_user(user_id: UUID, unread_only: bool = False) -> QuerySet:
        """Get notifications for a user, newest first."""
        queryset = Notification.objects.filter(user_id=user_id)
        if unread_only:
            queryset = queryset.filter(read_at__isnull=True)
        return queryset.order_by('-created_at')

    @staticmethod
    def get_unread_count(user_id: UUID) -> int:
        """Get unread notification count for a user."""
        return Notification.objects.filter(user_id=user_id, read_at__isnull=True).count()

    @staticmethod
    def create_notification(
        user_id: UUID,
        notification_type: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        """
        Create a notification and publish it in real time.

        Args:
            user_id: Recipient user ID
            notification_type: One of ``Notification.Type``
            data: Payload shown to the user

        Returns:
            The stored notification
        """
        notification = Notification.objects.create(
            user_id=user_id,
            type=notification_type,
            data=data or {},
        )

        logger.info(
            f"Created notification: {notification.id}",
            extra={
                'notification_id': str(notification.id),
                'user_id': str(user_id),
                'type': notification_type,
            }
        )

        NotificationService.publish_realtime(notification)
        return notification

    @staticmethod
    def publish_realtime(notification: Notification) -> bool:
        """
        Publish a notification on channel ``user-{id}``.

        Failures are logged and reported as ``False``; they never
        propagate to the caller.
        """
        channel = f"{REALTIME_CHANNEL_PREFIX}{notification.user_id}"
        message = {
            'event': settings.REALTIME_EVENT_NAME,
            'payload': {
                'type': notification.type,
                'data': notification.data,
                'createdAt': notification.created_at.isoformat(),
            },
        }

        if not settings.REALTIME_ENABLED:
            logger.debug(
                f"Realtime disabled, skipping publish to {channel}",
                extra={'notification_id': str(notification.id)}
            )
            return False

        try:
            connection = get_redis_connection('default')
            connection.publish(channel, json.dumps(message, default=str))
        except Exception as e:
            logger.warning(
                f"Real-time publish failed: {e}",
                extra={'notification_id': str(notification.id), 'channel': channel}
            )
            return False
        return True

    @staticmethod
    def mark_as_read(notification_id: UUID, user_id: UUID) -> Notification:
        """Mark one of the user's notifications as read."""
        notification = Notification.objects.filter(id=notification_id, user_id=user_id).first()
        if notification is None:
            raise NotFoundException("Notification not found")
        notification.mark_as_read()
        return notification

    @staticmethod
    def mark_all_as_read(user_id: UUID) -> int:
        """Mark all of the user's notifications as read."""
        count = Notification.objects.filter(
            user_id=user_id,
            read_at__isnull=True,
        ).update(read_at=timezone.now(), updated_at=timezone.now())

        logger.info(f"Marked {count} notifications as read for user {user_id}")
        return count
