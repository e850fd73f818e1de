from django.contrib import admin

from .models import ApprovalAction


@admin.register(ApprovalAction)
class ApprovalActionAdmin(admin.ModelAdmin):
    list_display = ['record', 'action', 'actor', 'created_at']
    list_filter = ['action']
    search_fields = ['record__account__email', 'actor__email']
    raw_id_fields = ['record', 'actor']
    readonly_fields = ['record', 'actor', 'action', 'comments', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
