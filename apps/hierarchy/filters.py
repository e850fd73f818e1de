"""Hierarchy app filters."""
import django_filters

from .models import Beat, Location, SupervisorRecord


class LocationFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(lookup_expr='icontains')
    is_active = django_filters.BooleanFilter()

    class Meta:
        model = Location
        fields = ['is_active']


class BeatFilter(django_filters.FilterSet):
    location = django_filters.UUIDFilter()
    is_active = django_filters.BooleanFilter()
    beat_code = django_filters.CharFilter(lookup_expr='icontains')

    class Meta:
        model = Beat
        fields = ['location', 'is_active']


class SupervisorRecordFilter(django_filters.FilterSet):
    approval_status = django_filters.ChoiceFilter(choices=SupervisorRecord.STATUS_CHOICES)
    supervisor_type = django_filters.ChoiceFilter(choices=SupervisorRecord.TYPE_CHOICES)
    location = django_filters.UUIDFilter()
    general_supervisor = django_filters.UUIDFilter()

    class Meta:
        model = SupervisorRecord
        fields = ['approval_status', 'supervisor_type', 'location', 'general_supervisor']
