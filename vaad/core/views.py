"""
core/views.py
─────────────
Public pages: landing page, and the invite-code pages parents reach without
an account (calendar, directory, join link, intake form).
Custom error handlers (404 / 500) are registered in the root urls.py.
"""

import calendar
import datetime
import logging

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect, render
from django.utils import timezone

from directory.forms import ParentIntakeForm
from directory.services import submit_parent_form
from school_calendar.holidays import format_gregorian_hebrew_date, format_hebrew_date

from .public import (
    DirectoryNotPublic,
    get_class_by_invite_code,
    public_calendar,
    public_directory,
)

logger = logging.getLogger(__name__)


def home_view(req):
    """Landing page – authenticated users go straight to their dashboard."""
    if req.user.is_authenticated:
        return redirect('dashboard')
    return render(req, 'core/home.html')


# ── Helpers ───────────────────────────────────────────────────────────────────

def _class_or_404(code):
    school_class = get_class_by_invite_code(code)
    if school_class is None:
        raise Http404('Class not found')
    return school_class


def _requested_month(req):
    """(year, month) from ?year=&month=, falling back to the current month."""
    today = timezone.localdate()
    try:
        year = int(req.GET.get('year', today.year))
        month = int(req.GET.get('month', today.month))
    except ValueError:
        return today.year, today.month
    if not 1 <= month <= 12 or not 1900 <= year <= 2200:
        return today.year, today.month
    return year, month


def _shift_month(year, month, delta):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


# ── Public calendar ───────────────────────────────────────────────────────────

def public_calendar_view(req, code):
    school_class = _class_or_404(code)
    year, month = _requested_month(req)
    data = public_calendar(school_class, year, month)

    # day number -> entries shown in that cell
    by_day = {}
    for event in data['events']:
        if event['event_date']:
            by_day.setdefault(event['event_date'].day, []).append(
                {'icon': event['icon'], 'label': event['name']}
            )
    for person in data['children'] + data['staff']:
        by_day.setdefault(person['birthday'].day, []).append(
            {'icon': '🎂', 'label': person['name']}
        )
    for holiday in data['holidays']:
        by_day.setdefault(holiday['date'].day, []).append(
            {'icon': holiday['icon'], 'label': holiday['name']}
        )

    # Sunday-first weeks, as on Israeli calendars
    weeks = [
        [{'day': day, 'entries': by_day.get(day, [])} if day else None for day in week]
        for week in calendar.Calendar(firstweekday=calendar.SUNDAY).monthdayscalendar(year, month)
    ]

    prev_year, prev_month = _shift_month(year, month, -1)
    next_year, next_month = _shift_month(year, month, 1)

    return render(req, 'core/public_calendar.html', {
        **data,
        'code':         school_class.invite_code,
        'month_name':   format_gregorian_hebrew_date(datetime.date(year, month, 1)),
        'hebrew_month': format_hebrew_date(datetime.date(year, month, 15)),
        'weeks':        weeks,
        'prev_year':    prev_year,
        'prev_month':   prev_month,
        'next_year':    next_year,
        'next_month':   next_month,
    })


# ── Public directory ──────────────────────────────────────────────────────────

def public_directory_view(req, code):
    school_class = _class_or_404(code)
    try:
        data = public_directory(school_class, req.GET.get('q', ''))
    except DirectoryNotPublic as exc:
        return render(req, 'core/directory_not_public.html', {
            'school_class': school_class,
            'error':        str(exc),
        }, status=403)
    return render(req, 'core/public_directory.html', {**data, 'code': school_class.invite_code})


# ── Join link and parent intake ───────────────────────────────────────────────

def join_view(req, code):
    """The shared join link (and its QR code) lands parents on the intake form."""
    school_class = _class_or_404(code)
    return redirect('parent_form', token=school_class.invite_code)


def parent_form_view(req, token):
    """
    Public intake form: a parent fills in their child's details, which are
    merged into the class directory.  *token* is the class invite code.
    """
    school_class = _class_or_404(token)

    if req.method == 'POST':
        form = ParentIntakeForm(req.POST)
        if form.is_valid():
            result = submit_parent_form(school_class, form.cleaned_data)
            if result['success']:
                return render(req, 'core/parent_form_done.html', {
                    'school_class': school_class,
                    'child':        result['data'],
                    'paybox_link':  school_class.paybox_link,
                })
            logger.warning('Parent form for class %s failed: %s', school_class.pk, result['error'])
            messages.error(req, 'אירעה שגיאה בשמירת הפרטים, נסו שוב.')
    else:
        form = ParentIntakeForm()

    return render(req, 'core/parent_form.html', {
        'school_class': school_class,
        'form':         form,
    })


# ── Custom error pages ────────────────────────────────────────────────────────

def handler404(req, exception):
    return render(req, 'core/404.html', status=404)


def handler500(req):
    return render(req, 'core/500.html', status=500)
