"""
accounts/admin.py
─────────────────
Admin registration for the custom User.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Extends the default UserAdmin to surface phone and hide_budget_summary.
    """

    list_display = BaseUserAdmin.list_display + ('phone',)

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Committee', {'fields': ('phone', 'hide_budget_summary')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Committee', {'fields': ('email', 'phone')}),
    )
