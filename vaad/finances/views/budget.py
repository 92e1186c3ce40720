"""
finances/views/budget.py
────────────────────────
Budget page: the class budget plan, the per-event allocation editor and
the expense log.

SECURITY: every queryset is scoped to the admin's SchoolClass, passed in by
class_admin_required.
"""

from django.contrib import messages
from django.shortcuts import redirect, render
from django.utils import timezone

from classes.utils import add_form_control_class, class_admin_required, require_POST_or_405

from .. import services
from ..budget import class_budget_summary
from ..event_types import DEFAULT_EVENTS, get_event_icon
from ..forms import BudgetSettingsForm, CustomEventForm, EventAllocationForm, ExpenseForm
from ..models import Event


# ── Allocation editor rows ────────────────────────────────────────────────────

def _allocation_rows(school_class, data=None):
    """
    One (prefix, event or None, event_type, name, form) row per existing
    event plus one per default event the class has no row for yet.
    """
    events = list(Event.objects.filter(school_class=school_class).order_by('sort_order', 'id'))
    existing_types = {e.event_type for e in events}

    rows = []
    for event in events:
        prefix = f'event-{event.pk}'
        form = EventAllocationForm(data, prefix=prefix, initial={
            'enabled':          event.allocated_budget > 0,
            'amount_per_kid':   event.amount_per_kid,
            'amount_per_staff': event.amount_per_staff,
        })
        rows.append({
            'prefix': prefix, 'event': event, 'event_type': event.event_type,
            'name': event.name, 'icon': event.icon, 'form': form,
        })
    for event_type, name in DEFAULT_EVENTS:
        if event_type in existing_types:
            continue
        prefix = f'new-{event_type}'
        rows.append({
            'prefix': prefix, 'event': None, 'event_type': event_type,
            'name': name, 'icon': get_event_icon(event_type),
            'form': EventAllocationForm(data, prefix=prefix),
        })
    return rows


# ── Budget page ───────────────────────────────────────────────────────────────

@class_admin_required
def budget_view(req, school_class):
    settings_form = BudgetSettingsForm(initial={
        'amount_per_child':   school_class.budget_amount,
        'estimated_children': school_class.estimated_children,
        'estimated_staff':    school_class.estimated_staff,
        'total_budget':       school_class.total_budget,
    })
    return render(req, 'finances/budget.html', {
        'school_class':    school_class,
        'summary':         class_budget_summary(school_class),
        'events':          Event.objects.filter(school_class=school_class),
        'allocation_rows': _allocation_rows(school_class),
        'settings_form':   add_form_control_class(settings_form),
        'custom_form':     add_form_control_class(CustomEventForm()),
        'expenses':        services.get_expenses_with_events(school_class),
        'expense_form':    add_form_control_class(ExpenseForm(school_class=school_class)),
    })


@class_admin_required
@require_POST_or_405
def budget_settings_view(req, school_class):
    form = BudgetSettingsForm(req.POST)
    if not form.is_valid():
        messages.error(req, 'Please fix the budget values.')
        return redirect('budget')

    cd = form.cleaned_data
    result = services.update_class_budget_settings(
        school_class,
        amount_per_child=cd['amount_per_child'],
        estimated_children=cd['estimated_children'],
        estimated_staff=cd['estimated_staff'],
        total_budget=cd.get('total_budget'),
    )
    if result['success']:
        messages.success(req, f'✅ Budget saved: ₪{result["total_budget"]:,}.')
    else:
        messages.error(req, result['error'])
    return redirect('budget')


@class_admin_required
@require_POST_or_405
def event_allocations_view(req, school_class):
    """Apply the allocation editor: enabled rows are saved, unticked ones zeroed."""
    rows = _allocation_rows(school_class, req.POST)
    if not all(row['form'].is_valid() for row in rows):
        messages.error(req, 'Please fix the allocation amounts.')
        return redirect('budget')

    kids = school_class.estimated_children
    staff = school_class.estimated_staff
    updates, disabled_ids = [], []
    for row in rows:
        cd = row['form'].cleaned_data
        if cd['enabled']:
            updates.append({
                'id':               row['event'].pk if row['event'] else None,
                'event_type':       row['event_type'],
                'name':             row['name'],
                'amount_per_kid':   cd.get('amount_per_kid') or 0,
                'amount_per_staff': cd.get('amount_per_staff') or 0,
                'kids_count':       kids,
                'staff_count':      staff,
            })
        elif row['event'] is not None:
            disabled_ids.append(row['event'].pk)

    result = services.update_event_allocations(school_class, updates, disabled_ids)
    if result['success']:
        summary = class_budget_summary(school_class)
        messages.success(req, '✅ Allocations saved.')
        if summary['over_allocated']:
            messages.warning(
                req,
                f'⚠️ Allocations (₪{summary["allocated"]:,}) exceed the budget (₪{summary["total"]:,}).',
            )
    else:
        messages.error(req, result['error'])
    return redirect('budget')


@class_admin_required
@require_POST_or_405
def add_custom_event_view(req, school_class):
    form = CustomEventForm(req.POST)
    if not form.is_valid():
        messages.error(req, 'Event name is required.')
        return redirect('budget')

    event_type = f'custom-{int(timezone.now().timestamp() * 1000)}'
    result = services.update_event_allocations(school_class, [{
        'id':          None,
        'event_type':  event_type,
        'name':        form.cleaned_data['name'].strip(),
        'kids_count':  school_class.estimated_children,
        'staff_count': school_class.estimated_staff,
    }])
    if result['success']:
        messages.success(req, f'✅ "{form.cleaned_data["name"]}" added.')
    else:
        messages.error(req, result['error'])
    return redirect('budget')


# ── Expenses ──────────────────────────────────────────────────────────────────

@class_admin_required
@require_POST_or_405
def log_expense_view(req, school_class):
    form = ExpenseForm(req.POST, school_class=school_class)
    if not form.is_valid():
        messages.error(req, 'Please fix the expense details.')
        return redirect('budget')

    cd = form.cleaned_data
    result = services.create_expense(school_class, {
        'description':  cd['description'],
        'amount':       cd['amount'],
        'expense_date': cd['expense_date'],
        'event_id':     cd['event'].pk if cd.get('event') else None,
        'receipt_url':  cd.get('receipt_url'),
    })
    if result['success']:
        messages.success(req, f'✅ Expense "{cd["description"]}" (₪{cd["amount"]}) logged.')
    else:
        messages.error(req, result['error'])
    return redirect('budget')


@class_admin_required
@require_POST_or_405
def delete_expense_view(req, school_class, expense_id):
    result = services.delete_expense(school_class, expense_id)
    if result['success']:
        messages.success(req, '🗑 Expense deleted.')
    else:
        messages.error(req, 'Expense not found.')
    return redirect('budget')
