"""Approvals app filters."""
import django_filters

from apps.hierarchy.models import SupervisorRecord


class RegistrationFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(field_name='approval_status', choices=SupervisorRecord.STATUS_CHOICES)
    supervisor_type = django_filters.ChoiceFilter(choices=SupervisorRecord.TYPE_CHOICES)
    registered_by = django_filters.UUIDFilter()
    submitted_after = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    submitted_before = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = SupervisorRecord
        fields = ['supervisor_type', 'registered_by']
