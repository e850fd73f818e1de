"""
Authentication Admin
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .forms import AccountChangeForm, AccountCreationForm
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    add_form = AccountCreationForm
    form = AccountChangeForm
    list_display = ['email', 'full_name', 'employee_id', 'role', 'status', 'date_joined']
    list_filter = ['role', 'status', 'is_staff', 'is_superuser']
    search_fields = ['email', 'first_name', 'last_name', 'employee_id']
    ordering = ['email']
    raw_id_fields = ['registered_by']

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Workforce', {'fields': ('employee_id', 'role', 'status', 'registered_by')}),
        ('Personal Info', {'fields': ('first_name', 'last_name', 'phone', 'address')}),
        ('Permissions', {'fields': ('is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Security', {'fields': ('must_change_password', 'password_changed_at')}),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'role', 'status', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['last_login', 'date_joined', 'password_changed_at']

    def has_delete_permission(self, request, obj=None):
        return False
