import logging

from .models import Notification

logger = logging.getLogger(__name__)


def notify(user, title, message, type='General', link=''):
    """
    Drops a notification into the user's inbox and returns it.
    """
    notification = Notification.objects.create(
        user=user, title=title, message=message, type=type, link=link
    )
    logger.info(f"{type} notification {notification.pk} sent to user {user.pk}")
    return notification
