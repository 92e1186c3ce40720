"""
directory/admin.py
──────────────────
Admin registrations for Child, Parent, ChildParent and Staff.
"""

from django.contrib import admin

from .models import Child, ChildParent, Parent, Staff


class ChildParentInline(admin.TabularInline):
    model = ChildParent
    extra = 0
    raw_id_fields = ('parent',)


@admin.register(Child)
class ChildAdmin(admin.ModelAdmin):
    list_display  = ('name', 'school_class', 'birthday', 'address')
    list_filter   = ('school_class',)
    search_fields = ('name', 'parent_links__parent__name')
    inlines       = (ChildParentInline,)


@admin.register(Parent)
class ParentAdmin(admin.ModelAdmin):
    list_display  = ('name', 'phone', 'school_class', 'user', 'created_at')
    search_fields = ('name', 'phone')
    raw_id_fields = ('user', 'school_class')


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display  = ('name', 'role', 'school_class', 'birthday')
    list_filter   = ('role', 'school_class')
    search_fields = ('name',)
