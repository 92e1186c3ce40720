"""
directory/views.py
──────────────────
Admin-only directory views: list, add / edit / delete children and staff,
spreadsheet import and the import template download.

SECURITY: every lookup is scoped to the admin's own SchoolClass, passed in
by class_admin_required.
"""

from urllib.parse import quote

from django.contrib import messages
from django.http import HttpResponse
from django.shortcuts import get_object_or_404, redirect, render

from classes.utils import add_form_control_class, class_admin_required, require_POST_or_405

from . import services
from .birthdays import format_day_month, format_full_date
from .forms import ChildForm, SpreadsheetUploadForm, StaffForm
from .models import Child, Staff
from .spreadsheet import TEMPLATE_FILENAME, build_children_template


@class_admin_required
def directory_view(req, school_class):
    return render(req, 'directory/directory.html', {
        'school_class': school_class,
        'children':     services.children_with_parents(school_class),
        'staff':        Staff.objects.filter(school_class=school_class),
        'upload_form':  add_form_control_class(SpreadsheetUploadForm()),
    })


# ── Children ──────────────────────────────────────────────────────────────────

def _child_initial(child):
    initial = {
        'name':     child.name,
        'birthday': format_full_date(child.birthday),
        'address':  child.address or '',
    }
    for link in child.parent_links.select_related('parent'):
        initial[f'{link.relationship}_id'] = link.parent.pk
        initial[f'{link.relationship}_name'] = link.parent.name
        initial[f'{link.relationship}_phone'] = link.parent.phone or ''
    return initial


@class_admin_required
def child_form_view(req, school_class, child_id=None):
    child = None
    if child_id:
        child = get_object_or_404(Child, pk=child_id, school_class=school_class)

    if req.method == 'POST':
        form = ChildForm(req.POST)
        if form.is_valid():
            if child:
                result = services.update_child(school_class, child.pk, form.cleaned_data)
            else:
                result = services.add_child(req.user, school_class, form.cleaned_data)
            if result['success']:
                verb = 'updated' if child else 'added'
                messages.success(req, f'✅ {form.cleaned_data["name"]} {verb}.')
                return redirect('directory')
            messages.error(req, result['error'])
        else:
            messages.error(req, 'Please fix the errors below.')
    else:
        form = ChildForm(initial=_child_initial(child) if child else None)

    return render(req, 'directory/child_form.html', {
        'form':         add_form_control_class(form),
        'child':        child,
        'school_class': school_class,
    })


@class_admin_required
@require_POST_or_405
def child_delete_view(req, school_class, child_id):
    result = services.delete_child(school_class, child_id)
    if result['success']:
        messages.success(req, '🗑 Child deleted.')
    else:
        messages.error(req, result['error'])
    return redirect('directory')


# ── Staff ─────────────────────────────────────────────────────────────────────

@class_admin_required
def staff_form_view(req, school_class, staff_id=None):
    member = None
    if staff_id:
        member = get_object_or_404(Staff, pk=staff_id, school_class=school_class)

    if req.method == 'POST':
        form = StaffForm(req.POST)
        if form.is_valid():
            if member:
                result = services.update_staff(school_class, member.pk, form.cleaned_data)
            else:
                result = services.add_staff(school_class, form.cleaned_data)
            if result['success']:
                messages.success(req, f'✅ {form.cleaned_data["name"]} saved.')
                return redirect('directory')
            messages.error(req, result['error'])
        else:
            messages.error(req, 'Please fix the errors below.')
    else:
        initial = None
        if member:
            initial = {
                'name':     member.name,
                'role':     member.role,
                'birthday': format_day_month(member.birthday),
            }
        form = StaffForm(initial=initial)

    return render(req, 'directory/staff_form.html', {
        'form':         add_form_control_class(form),
        'member':       member,
        'school_class': school_class,
    })


@class_admin_required
@require_POST_or_405
def staff_delete_view(req, school_class, staff_id):
    result = services.delete_staff(school_class, staff_id)
    if result['success']:
        messages.success(req, '🗑 Staff member deleted.')
    else:
        messages.error(req, result['error'])
    return redirect('directory')


# ── Spreadsheet ───────────────────────────────────────────────────────────────

@class_admin_required
@require_POST_or_405
def import_children_view(req, school_class):
    form = SpreadsheetUploadForm(req.POST, req.FILES)
    if not form.is_valid():
        for error in form.errors.get('file', []):
            messages.error(req, error)
        return redirect('directory')

    result = services.import_children(req.user, school_class, form.cleaned_data['file'])
    if not result['success']:
        messages.error(req, f'Import failed: {result["error"]}')
        return redirect('directory')

    messages.success(req, f'✅ Imported {result["imported"]} children.')
    if result['skipped']:
        messages.info(req, f'{result["skipped"]} rows were already in the directory and were skipped.')
    for error in result['errors']:
        messages.warning(req, error)
    return redirect('directory')


@class_admin_required
def children_template_view(req, school_class):
    response = HttpResponse(
        build_children_template(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    )
    response['Content-Disposition'] = f"attachment; filename*=UTF-8''{quote(TEMPLATE_FILENAME)}"
    return response