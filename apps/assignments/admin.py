from django.contrib import admin

from .models import Assignment


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ['operator', 'beat', 'supervisor', 'location', 'shift_type', 'status', 'start_date', 'end_date']
    list_filter = ['status', 'shift_type', 'assignment_type', 'location']
    search_fields = ['operator__email', 'operator__employee_id', 'beat__beat_code']
    raw_id_fields = ['operator', 'beat', 'supervisor', 'location', 'replaces', 'assigned_by']
    date_hierarchy = 'start_date'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
