"""Notification service layer"""
from .template_renderer import TemplateRenderer, RenderedNotification
from .notification_router import NotificationRouter
from .notification_service import NotificationService

__all__ = [
    'RenderedNotification',
    'TemplateRenderer',
    'NotificationRouter',
    'NotificationService',
]
