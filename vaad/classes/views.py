"""
classes/views.py
────────────────
Committee-admin views: dashboard, first-login onboarding, the class
creation wizard (JSON endpoint) and the class settings page.
"""

import json
import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.db.models import Sum
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.utils import timezone

from directory.models import Child, Staff
from finances.budget import class_budget_summary
from finances.event_types import DEFAULT_EVENTS
from finances.models import Event, Payment

from . import services
from .forms import (
    ClassDetailsForm,
    DirectorySettingsForm,
    InviteAdminForm,
    OnboardingForm,
    PayboxLinkForm,
)
from .models import AdminInvitation, OnboardingResponse, SchoolClass
from .utils import add_form_control_class, class_admin_required, get_admin_class, require_POST_or_405

logger = logging.getLogger(__name__)


# ── Dashboard ─────────────────────────────────────────────────────────────────

@class_admin_required
def dashboard_view(req, school_class):
    """
    Class overview: budget summary, directory counts, the next events,
    collected payments and the public links with their QR codes.
    """
    today = timezone.localdate()
    join_url = services.invite_link(school_class, 'public_join')
    calendar_url = services.invite_link(school_class, 'public_calendar')
    directory_url = services.invite_link(school_class, 'public_directory')

    collected = (
        Payment.objects
        .filter(school_class=school_class, status=Payment.Status.COMPLETED)
        .aggregate(s=Sum('amount'))['s'] or 0
    )

    return render(req, 'classes/dashboard.html', {
        'school_class':    school_class,
        'summary':         class_budget_summary(school_class),
        'children_count':  Child.objects.filter(school_class=school_class).count(),
        'staff_count':     Staff.objects.filter(school_class=school_class).count(),
        'upcoming_events': Event.objects.filter(
            school_class=school_class, event_date__gte=today,
        ).order_by('event_date')[:5],
        'collected':       collected,
        'join_url':        join_url,
        'join_qr':         services.invite_qr_code(join_url),
        'calendar_url':    calendar_url,
        'directory_url':   directory_url,
    })


# ── Onboarding ────────────────────────────────────────────────────────────────

@login_required
def onboarding_view(req):
    """First-login questionnaire; skipped once answered."""
    if get_admin_class(req.user) is not None:
        return redirect('dashboard')
    if OnboardingResponse.objects.filter(user=req.user).exists() and req.method != 'POST':
        return redirect('create_class_page')

    if req.method == 'POST':
        form = OnboardingForm(req.POST)
        if form.is_valid():
            result = services.save_onboarding_responses(req.user, form.cleaned_data)
            if result['success']:
                return redirect('create_class_page')
            messages.error(req, result['error'])
        else:
            messages.error(req, 'Please answer all three questions.')
    else:
        form = OnboardingForm()

    return render(req, 'classes/onboarding.html', {'form': add_form_control_class(form)})


@login_required
def create_class_page_view(req):
    """The class wizard page; it posts its answers to create_class_view as JSON."""
    return render(req, 'classes/create_class.html', {
        'default_events': DEFAULT_EVENTS,
        'budget_types':   SchoolClass.BudgetType.choices,
    })


@require_POST_or_405
def create_class_view(req):
    """
    JSON endpoint behind the wizard.  Body: the payload documented on
    classes.services.create_class().  Anonymous callers are sent to login.
    """
    try:
        payload = json.loads(req.body or b'{}')
    except ValueError:
        logger.warning('create_class: invalid JSON body from user %s', req.user.pk)
        return JsonResponse({'success': False, 'error': 'Invalid JSON body'}, status=400)
    if not isinstance(payload, dict):
        return JsonResponse({'success': False, 'error': 'Invalid JSON body'}, status=400)

    try:
        result = services.create_class(req.user, payload)
    except PermissionDenied:
        return redirect('login')

    return JsonResponse(result, status=200 if result['success'] else 400)


# ── Settings ──────────────────────────────────────────────────────────────────

def _handle_settings_post(req, school_class):
    action = req.POST.get('action')
    result = None

    if action == 'details':
        form = ClassDetailsForm(req.POST)
        if form.is_valid():
            result = services.update_class_details(school_class, form.cleaned_data)
    elif action == 'directory':
        form = DirectorySettingsForm(req.POST)
        if form.is_valid():
            result = services.update_directory_settings(school_class, form.cleaned_data)
    elif action == 'paybox':
        form = PayboxLinkForm(req.POST)
        if form.is_valid():
            result = services.update_paybox_link(school_class, form.cleaned_data['paybox_link'])
    elif action == 'invite':
        form = InviteAdminForm(req.POST)
        if form.is_valid():
            result = services.invite_admin(school_class, req.user, form.cleaned_data['email'])
    elif action == 'remove_admin':
        try:
            member_id = int(req.POST.get('member_id', ''))
        except ValueError:
            member_id = None
        result = services.remove_admin(school_class, member_id)

    if result is None:
        messages.error(req, 'Please fix the errors below.')
    elif result['success']:
        messages.success(req, '✅ Settings saved.')
    else:
        messages.error(req, result['error'])


@class_admin_required
def settings_view(req, school_class):
    if req.method == 'POST':
        _handle_settings_post(req, school_class)
        return redirect('class_settings')

    return render(req, 'classes/settings.html', {
        'school_class':   school_class,
        'details_form':   add_form_control_class(ClassDetailsForm(instance=school_class)),
        'directory_form': DirectorySettingsForm(initial=school_class.get_directory_settings()),
        'paybox_form':    add_form_control_class(PayboxLinkForm(initial={'paybox_link': school_class.paybox_link})),
        'invite_form':    add_form_control_class(InviteAdminForm()),
        'admins':         services.class_admins(school_class),
        'invitations':    school_class.admin_invitations.filter(status=AdminInvitation.Status.PENDING),
        'parent_form_url': services.invite_link(school_class, 'parent_form'),
    })
