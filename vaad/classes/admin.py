"""
classes/admin.py
────────────────
Admin registrations for SchoolClass, ClassMember, OnboardingResponse and
AdminInvitation.
"""

from django.contrib import admin

from .models import AdminInvitation, ClassMember, OnboardingResponse, SchoolClass


class ClassMemberInline(admin.TabularInline):
    model = ClassMember
    extra = 0
    raw_id_fields = ('user',)


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    list_display  = ('name', 'school_name', 'city', 'year', 'budget_type', 'total_budget', 'invite_code', 'created_at')
    list_filter   = ('budget_type', 'year')
    search_fields = ('name', 'school_name', 'city', 'invite_code')
    raw_id_fields = ('created_by',)
    inlines       = (ClassMemberInline,)

    fieldsets = (
        (None, {
            'fields': ('name', 'school_name', 'city', 'year', 'created_by'),
        }),
        ('Budget', {
            'fields': ('budget_type', 'budget_amount', 'total_budget', 'estimated_children', 'estimated_staff'),
        }),
        ('Public access', {
            'fields': ('invite_code', 'paybox_link', 'directory_settings'),
        }),
    )


@admin.register(ClassMember)
class ClassMemberAdmin(admin.ModelAdmin):
    list_display  = ('user', 'school_class', 'role', 'created_at')
    list_filter   = ('role',)
    search_fields = ('user__username', 'user__email', 'school_class__name')
    raw_id_fields = ('user', 'school_class')


@admin.register(OnboardingResponse)
class OnboardingResponseAdmin(admin.ModelAdmin):
    list_display    = ('user', 'completed_at')
    readonly_fields = ('completed_at',)


@admin.register(AdminInvitation)
class AdminInvitationAdmin(admin.ModelAdmin):
    list_display  = ('email', 'school_class', 'status', 'invited_by', 'created_at')
    list_filter   = ('status',)
    search_fields = ('email', 'school_class__name')
