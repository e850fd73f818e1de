from .send_notification_task import send_notification_task
from .retry_failed_notifications_task import retry_failed_notifications

__all__ = ['send_notification_task', 'retry_failed_notifications']
