"""
classes/services.py
───────────────────
Class bootstrap writer and class settings.

create_class() turns the onboarding wizard's answers into a class with its
children, parents, staff, events and the creator's admin membership.  The
inserts are sequential and not wrapped in a transaction: a failure after
the class row exists leaves the rows written so far in place.
"""

import base64
import io
import logging
from decimal import Decimal, InvalidOperation

import qrcode
from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from django.core.validators import URLValidator
from django.db import DatabaseError, transaction
from django.urls import reverse
from django.utils import timezone
from django.utils.crypto import get_random_string

from core.results import failed, ok
from directory.birthdays import parse_day_month
from directory.models import Child, ChildParent, Parent, Staff
from finances.budget import calculate_total_budget
from finances.event_types import get_event_date, get_event_icon
from finances.models import Event

from .models import (
    DEFAULT_DIRECTORY_SETTINGS,
    AdminInvitation,
    ClassMember,
    OnboardingResponse,
    SchoolClass,
)

logger = logging.getLogger(__name__)

STORE_ERRORS = (DatabaseError, ValidationError, ObjectDoesNotExist, ValueError)

INVITE_CODE_CHARS = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'


def _money(value):
    try:
        return Decimal(str(value or 0))
    except InvalidOperation:
        raise ValueError(f'Invalid amount: {value!r}')


def _text(value):
    return (value or '').strip()


# ── Invite codes ──────────────────────────────────────────────────────────────

def generate_invite_code():
    """Random uppercase alphanumeric code not used by any existing class."""
    while True:
        code = get_random_string(settings.INVITE_CODE_LENGTH, allowed_chars=INVITE_CODE_CHARS)
        if not SchoolClass.objects.filter(invite_code=code).exists():
            return code


def invite_link(school_class, route='public_join'):
    """Absolute URL of one of the class's public pages."""
    return f"{settings.SITE_URL}{reverse(route, args=[school_class.invite_code])}"


def invite_qr_code(url, box_size=7):
    """Return *url* as a QR code, base64-encoded PNG."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=4,
    )
    qr.add_data(url)
    qr.make(fit=True)

    img = qr.make_image(fill_color='#1a1a2e', back_color='white')
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return base64.b64encode(buf.getvalue()).decode('utf-8')


# ── Bootstrap ─────────────────────────────────────────────────────────────────

def _create_parent(user, school_class, child, slot, name, phone):
    """
    Insert one parent and its link.  Runs in a savepoint; a failure is
    logged and the parent skipped.
    """
    try:
        with transaction.atomic():
            parent = Parent.objects.create(
                user=user,
                school_class=school_class,
                name=name,
                phone=phone,
            )
            ChildParent.objects.create(child=child, parent=parent, relationship=slot)
        return parent
    except STORE_ERRORS as exc:
        logger.warning('Skipping %s of child %s: %s', slot, child.pk, exc)
        return None


def _payload_error(payload):
    """First shape or choice problem in a wizard payload, or None."""
    if not isinstance(payload, dict):
        return 'Invalid class data'
    if not isinstance(payload.get('class_details') or {}, dict):
        return 'Invalid class details'

    for key in ('children', 'staff', 'budget_allocations'):
        items = payload.get(key) or []
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            return f'Invalid {key.replace("_", " ")} list'

    budget_type = payload.get('budget_type')
    if budget_type and budget_type not in SchoolClass.BudgetType.values:
        return f'Unknown budget type: {budget_type}'

    for s in payload.get('staff') or []:
        role = s.get('role')
        if role and role not in Staff.Role.values:
            return f'Unknown staff role: {role}'

    for a in payload.get('budget_allocations') or []:
        if not str(a.get('event_id') or '').strip():
            return 'Budget allocation without an event'
    return None


def create_class(user, payload):
    """
    Create a class from the onboarding wizard payload:

        class_details       {'class_name', 'school_name', 'city', 'year'}
        children            [{'name', 'parent1_name', 'parent1_phone',
                              'parent2_name', 'parent2_phone', 'address'}]
        staff               [{'name', 'role', 'birthday' ("DD/MM")}]
        budget_type         'per-child' | 'total'
        budget_amount       number
        budget_allocations  [{'event_id', 'event_name', 'amount'}]

    Raises PermissionDenied for an anonymous user.  Returns
    {'success': True, 'class_id', 'invite_code'} or a failure result.
    """
    if user is None or not user.is_authenticated:
        raise PermissionDenied('User not authenticated')

    error = _payload_error(payload)
    if error:
        logger.warning('create_class: rejected payload from user %s: %s', user.pk, error)
        return {'success': False, 'error': error}

    details = payload.get('class_details') or {}
    children = [c for c in payload.get('children') or [] if _text(c.get('name'))]
    staff = [s for s in payload.get('staff') or [] if _text(s.get('name'))]
    allocations = payload.get('budget_allocations') or []
    budget_type = payload.get('budget_type') or SchoolClass.BudgetType.PER_CHILD

    try:
        budget_amount = _money(payload.get('budget_amount'))
        total_budget = calculate_total_budget(budget_type, budget_amount, len(children))

        school_class = SchoolClass.objects.create(
            name=_text(details.get('class_name')),
            school_name=_text(details.get('school_name')),
            city=_text(details.get('city')),
            year=_text(details.get('year')),
            budget_type=budget_type,
            budget_amount=budget_amount,
            total_budget=total_budget,
            estimated_children=len(children),
            estimated_staff=len(staff),
            invite_code=generate_invite_code(),
            created_by=user,
        )

        child_rows = Child.objects.bulk_create([
            Child(
                school_class=school_class,
                name=_text(c['name']),
                address=_text(c.get('address')) or None,
            )
            for c in children
        ])

        parent_count = 0
        for child, data in zip(child_rows, children):
            for slot in ('parent1', 'parent2'):
                name = _text(data.get(f'{slot}_name'))
                phone = _text(data.get(f'{slot}_phone'))
                if name and phone:
                    if _create_parent(user, school_class, child, slot, name, phone):
                        parent_count += 1

        Staff.objects.bulk_create([
            Staff(
                school_class=school_class,
                name=_text(s['name']),
                role=s.get('role') or Staff.Role.TEACHER,
                birthday=parse_day_month(s.get('birthday')),
            )
            for s in staff
        ])

        today = timezone.localdate()
        Event.objects.bulk_create([
            Event(
                school_class=school_class,
                name=a.get('event_name') or a['event_id'],
                event_type=a['event_id'],
                icon=get_event_icon(a['event_id']),
                event_date=get_event_date(a['event_id'], today),
                allocated_budget=_money(a.get('amount')),
                sort_order=idx,
            )
            for idx, a in enumerate(allocations)
        ])

        ClassMember.objects.create(
            school_class=school_class,
            user=user,
            role=ClassMember.Role.ADMIN,
        )
    except STORE_ERRORS as exc:
        return failed(logger, 'create_class', exc)
    except KeyError as exc:
        logger.warning('create_class: malformed payload, missing %s', exc)
        return {'success': False, 'error': f'Missing field: {exc}'}

    logger.info(
        'Created class %s for user %s: %d children, %d parents, %d staff, %d events',
        school_class.pk, user.pk, len(child_rows), parent_count, len(staff), len(allocations),
    )
    return ok(class_id=school_class.pk, invite_code=school_class.invite_code)


# ── Class settings ────────────────────────────────────────────────────────────

def update_class_details(school_class, data):
    name = _text(data.get('name'))
    if not name:
        return {'success': False, 'error': 'Class name is required'}
    try:
        school_class.name = name
        school_class.school_name = _text(data.get('school_name'))
        school_class.city = _text(data.get('city'))
        school_class.year = _text(data.get('year'))
        school_class.save(update_fields=['name', 'school_name', 'city', 'year'])
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'update_class_details', exc)


def update_directory_settings(school_class, flags):
    """Store the public directory visibility flags; unknown keys are ignored."""
    merged = school_class.get_directory_settings()
    for key in DEFAULT_DIRECTORY_SETTINGS:
        if key in flags:
            merged[key] = bool(flags[key])
    try:
        school_class.directory_settings = merged
        school_class.save(update_fields=['directory_settings'])
        return ok(data=merged)
    except STORE_ERRORS as exc:
        return failed(logger, 'update_directory_settings', exc)


def update_paybox_link(school_class, link):
    try:
        link = _text(link)
        if link:
            URLValidator()(link)
        school_class.paybox_link = link
        school_class.save(update_fields=['paybox_link'])
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'update_paybox_link', exc)


# ── Co-admins ─────────────────────────────────────────────────────────────────

def class_admins(school_class):
    return (
        ClassMember.objects
        .filter(school_class=school_class, role=ClassMember.Role.ADMIN)
        .select_related('user')
    )


def invite_admin(school_class, invited_by, email):
    """Invite another user, by e-mail, to co-administer *school_class*."""
    email = _text(email).lower()
    if not email:
        return {'success': False, 'error': 'Email is required'}

    if class_admins(school_class).filter(user__email__iexact=email).exists():
        return {'success': False, 'error': 'This user is already an admin of the class'}
    if AdminInvitation.objects.filter(
        school_class=school_class,
        email__iexact=email,
        status=AdminInvitation.Status.PENDING,
    ).exists():
        return {'success': False, 'error': 'An invitation was already sent to this email'}

    try:
        invitation = AdminInvitation.objects.create(
            school_class=school_class,
            email=email,
            invited_by=invited_by,
        )
        logger.info('Admin invitation %s sent for class %s', invitation.pk, school_class.pk)
        return ok(data=invitation)
    except STORE_ERRORS as exc:
        return failed(logger, 'invite_admin', exc)


def accept_pending_invitations(user):
    """Turn the user's pending invitations into admin memberships; returns the count."""
    if not user.email:
        return 0
    accepted = 0
    pending = AdminInvitation.objects.filter(
        email__iexact=user.email,
        status=AdminInvitation.Status.PENDING,
    )
    for invitation in pending:
        ClassMember.objects.get_or_create(
            school_class=invitation.school_class,
            user=user,
            defaults={'role': ClassMember.Role.ADMIN},
        )
        invitation.status = AdminInvitation.Status.ACCEPTED
        invitation.save(update_fields=['status'])
        accepted += 1
    if accepted:
        logger.info('User %s accepted %d admin invitation(s)', user.pk, accepted)
    return accepted


def remove_admin(school_class, member_id):
    admins = class_admins(school_class)
    if not admins.filter(pk=member_id).exists():
        return {'success': False, 'error': 'Admin not found'}
    if admins.count() <= 1:
        return {'success': False, 'error': 'The last admin of a class cannot be removed'}
    try:
        admins.filter(pk=member_id).delete()
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'remove_admin', exc)


# ── Onboarding ────────────────────────────────────────────────────────────────

def save_onboarding_responses(user, responses):
    try:
        record, _ = OnboardingResponse.objects.update_or_create(
            user=user,
            defaults={'responses': responses, 'completed_at': timezone.now()},
        )
        return ok(data=record)
    except STORE_ERRORS as exc:
        return failed(logger, 'save_onboarding_responses', exc)
