from django.contrib import admin

from .models import Beat, Location, SupervisorRecord


class BeatInline(admin.TabularInline):
    model = Beat
    extra = 0
    fields = ['beat_code', 'name', 'number_of_operators', 'is_active']
    show_change_link = True


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'total_beats', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'address']
    inlines = [BeatInline]

    def get_queryset(self, request):
        return super().get_queryset(request).with_total_beats()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Beat)
class BeatAdmin(admin.ModelAdmin):
    list_display = ['beat_code', 'name', 'location', 'number_of_operators', 'is_active']
    list_filter = ['is_active', 'location']
    search_fields = ['beat_code', 'name']

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SupervisorRecord)
class SupervisorRecordAdmin(admin.ModelAdmin):
    list_display = ['account', 'supervisor_type', 'approval_status', 'location', 'registered_by', 'created_at']
    list_filter = ['supervisor_type', 'approval_status']
    search_fields = ['account__email', 'account__first_name', 'account__last_name', 'account__employee_id']
    raw_id_fields = ['account', 'registered_by', 'decided_by', 'general_supervisor']
    readonly_fields = ['approval_status', 'rejection_reason', 'decided_by', 'decided_at', 'created_at', 'updated_at']

    def has_delete_permission(self, request, obj=None):
        return False
