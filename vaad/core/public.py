"""
core/public.py
──────────────
Read-only projections for the unauthenticated pages reached by invite code
(calendar, directory).  Only the fields listed here ever leave the server;
nothing in this module writes.
"""

import datetime

from classes.models import SchoolClass
from directory.models import Child, Staff
from finances.models import Event
from school_calendar.holidays import get_holidays_for_month, get_school_breaks_for_month

DIRECTORY_NOT_PUBLIC = 'דף הקשר אינו ציבורי'


class DirectoryNotPublic(Exception):
    """The class has switched its public directory off."""

    def __init__(self):
        super().__init__(DIRECTORY_NOT_PUBLIC)


def get_class_by_invite_code(code):
    """SchoolClass for *code*, or None."""
    if not code:
        return None
    return SchoolClass.objects.filter(invite_code=code.strip().upper()).first()


def _birthday_rows(queryset):
    return [
        {'id': row['id'], 'name': row['name'], 'birthday': row['birthday']}
        for row in queryset.exclude(birthday=None).values('id', 'name', 'birthday')
    ]


def public_calendar(school_class, year, month):
    """
    Everything the public calendar shows for one month (1–12):
    class events with their aggregate allocation, children / staff
    birthdays (name and date only), holidays and school breaks.
    """
    events = [
        {
            'id':               e.pk,
            'name':             e.name,
            'event_type':       e.event_type,
            'event_date':       e.event_date,
            'icon':             e.icon,
            'allocated_budget': e.allocated_for_kids + e.allocated_for_staff,
            'amount_per_kid':   e.amount_per_kid,
            'amount_per_staff': e.amount_per_staff,
            'is_paid':          e.is_paid,
        }
        for e in Event.objects.filter(
            school_class=school_class,
            event_date__year=year,
            event_date__month=month,
        ).order_by('event_date')
    ]

    children = _birthday_rows(
        Child.objects.filter(school_class=school_class, birthday__month=month)
    )
    staff = _birthday_rows(
        Staff.objects.filter(school_class=school_class, birthday__month=month)
    )

    # holidays come from the school year the viewed month belongs to
    viewed = datetime.date(year, month, 1)
    return {
        'school_class':  school_class,
        'year':          year,
        'month':         month,
        'events':        events,
        'children':      children,
        'staff':         staff,
        'holidays':      get_holidays_for_month(year, month, today=viewed),
        'school_breaks': get_school_breaks_for_month(year, month, today=viewed),
    }


def public_directory(school_class, query=''):
    """
    The public contact list, trimmed by the class's directory settings.
    Raises DirectoryNotPublic when `is_public` is off.  *query* filters
    children by child or parent name and staff by name, case-insensitively.
    """
    flags = school_class.get_directory_settings()
    if not flags['is_public']:
        raise DirectoryNotPublic()

    children = (
        Child.objects
        .filter(school_class=school_class)
        .prefetch_related('parent_links__parent')
        .order_by('name')
    )
    staff = Staff.objects.filter(school_class=school_class).order_by('role', 'name')

    query = (query or '').strip().lower()

    child_rows = []
    for child in children:
        parents = [
            {
                'name':  link.parent.name,
                'phone': link.parent.phone if flags['show_phone'] else None,
            }
            for link in child.parent_links.all()
        ]
        if query and query not in child.name.lower() and not any(
            query in p['name'].lower() for p in parents
        ):
            continue
        child_rows.append({
            'id':       child.pk,
            'name':     child.name,
            'birthday': child.birthday if flags['show_birthday'] else None,
            'address':  child.address if flags['show_address'] else None,
            'parents':  parents,
        })

    staff_rows = [
        {
            'id':       member.pk,
            'name':     member.name,
            'role':     member.get_role_display(),
            'birthday': member.birthday if flags['show_birthday'] else None,
        }
        for member in staff
        if not query or query in member.name.lower()
    ]

    return {
        'school_class': school_class,
        'settings':     flags,
        'children':     child_rows,
        'staff':        staff_rows,
        'query':        query,
    }
