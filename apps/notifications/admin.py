from django.contrib import admin
from .models import Notification, NotificationTemplate


@admin.register(NotificationTemplate)
class NotificationTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'channel', 'is_active']
    list_filter = ['channel', 'is_active']
    search_fields = ['name', 'code']


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['recipient', 'event_code', 'channel', 'priority', 'status', 'delivery_attempts', 'sent_at', 'read_at']
    list_filter = ['status', 'channel', 'priority', 'event_code', 'redacted']
    search_fields = ['recipient__email', 'recipient__employee_id', 'subject']
    raw_id_fields = ['recipient', 'template']
    readonly_fields = ['metadata', 'delivery_attempts', 'redacted']
