"""
finances/admin.py
─────────────────
Admin registrations for Event, PaymentRound, Payment, Expense.
"""

from django.contrib import admin

from .models import Event, Expense, Payment, PaymentRound


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display  = ('__str__', 'school_class', 'event_type', 'event_date', 'allocated_budget', 'spent_amount', 'is_paid')
    list_filter   = ('event_type', 'is_paid')
    search_fields = ('name', 'school_class__name')
    readonly_fields = ('created_at',)

    fieldsets = (
        (None, {
            'fields': ('school_class', 'name', 'event_type', 'icon', 'event_date', 'sort_order', 'is_paid'),
        }),
        ('Budget', {
            'fields': ('allocated_budget', 'spent_amount'),
        }),
        ('Kids / staff split', {
            'fields': (
                'amount_per_kid', 'kids_count', 'allocated_for_kids',
                'amount_per_staff', 'staff_count', 'allocated_for_staff',
            ),
            'classes': ('collapse',),
        }),
        ('Metadata', {
            'fields': ('created_at',),
            'classes': ('collapse',),
        }),
    )


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ('child', 'amount', 'status', 'payment_date')
    raw_id_fields = ('child',)


@admin.register(PaymentRound)
class PaymentRoundAdmin(admin.ModelAdmin):
    list_display  = ('name', 'school_class', 'amount_per_child', 'due_date', 'created_at')
    search_fields = ('name',)
    inlines       = (PaymentInline,)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display  = ('__str__', 'school_class', 'payment_round', 'amount', 'status', 'payment_date')
    list_filter   = ('status',)
    search_fields = ('child__name', 'parent__name', 'payment_round__name')
    readonly_fields = ('created_at', 'updated_at')


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display  = ('description', 'amount', 'event', 'expense_date', 'school_class')
    list_filter   = ('expense_date',)
    search_fields = ('description',)
    readonly_fields = ('created_at',)
