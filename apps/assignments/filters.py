"""Assignments app filters."""
import django_filters

from .models import Assignment


class AssignmentFilter(django_filters.FilterSet):
    operator = django_filters.UUIDFilter()
    beat = django_filters.UUIDFilter()
    supervisor = django_filters.UUIDFilter()
    location = django_filters.UUIDFilter()
    status = django_filters.ChoiceFilter(choices=Assignment.STATUS_CHOICES)
    shift_type = django_filters.ChoiceFilter(choices=Assignment.SHIFT_CHOICES)
    start_date_from = django_filters.DateFilter(field_name='start_date', lookup_expr='gte')
    start_date_to = django_filters.DateFilter(field_name='start_date', lookup_expr='lte')

    class Meta:
        model = Assignment
        fields = ['operator', 'beat', 'supervisor', 'location', 'status', 'shift_type']
