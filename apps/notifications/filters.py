"""Notifications app filters."""
import django_filters

from .models import Notification


class NotificationFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Notification.STATUS_CHOICES)
    event_code = django_filters.CharFilter()
    unread = django_filters.BooleanFilter(field_name='read_at', lookup_expr='isnull')

    class Meta:
        model = Notification
        fields = ['status', 'event_code']
