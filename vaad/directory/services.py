"""
directory/services.py
─────────────────────
Directory manager: add / update / delete children (with their parent links)
and staff, plus the public parent-intake submission.

Every public function returns a result dict from core.results:
    {'success': True, 'data': …}  or  {'success': False, 'error': '…'}

Each operation is a short sequence of dependent writes with no surrounding
transaction; a failure half-way leaves the earlier rows in place.
"""

import datetime
import logging
import re

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError
from django.db.models import Prefetch

from core.results import failed, ok

from .birthdays import format_full_date, parse_day_month, parse_full_date
from .models import Child, ChildParent, Parent, Staff

logger = logging.getLogger(__name__)

STORE_ERRORS = (DatabaseError, ValidationError, ObjectDoesNotExist, ValueError)

PHONE_RE = re.compile(r'^0[0-9]{8,9}$')


def clean_phone(phone):
    """Strip dashes and whitespace: "050-123 4567" → "0501234567"."""
    return re.sub(r'[-\s]', '', phone or '')


def is_valid_phone(phone):
    """Israeli phone: leading 0 followed by 8–9 digits, after clean_phone()."""
    return bool(PHONE_RE.match(clean_phone(phone)))


# ── Children ──────────────────────────────────────────────────────────────────

def add_child(user, school_class, data):
    """
    Create a child and, for each parent name given, a Parent row linked as
    "parent1" / "parent2" in order.  `birthday` is "DD/MM/YYYY" text.
    """
    try:
        child = Child.objects.create(
            school_class=school_class,
            name=data['name'],
            address=data.get('address') or None,
            birthday=parse_full_date(data.get('birthday')),
        )

        parents = []
        for slot in ('parent1', 'parent2'):
            name = data.get(f'{slot}_name')
            if name:
                parents.append(Parent.objects.create(
                    user=user,
                    name=name,
                    phone=data.get(f'{slot}_phone') or None,
                ))

        ChildParent.objects.bulk_create([
            ChildParent(
                child=child,
                parent=parent,
                relationship=ChildParent.Relationship.PARENT1 if idx == 0
                else ChildParent.Relationship.PARENT2,
            )
            for idx, parent in enumerate(parents)
        ])

        logger.info('Added child %s (%d parents) to class %s', child.pk, len(parents), school_class.pk)
        return ok(data=child)
    except STORE_ERRORS as exc:
        return failed(logger, 'add_child', exc)


def update_child(school_class, child_id, data):
    """
    Update a child and the parent rows referenced by `parent1_id` /
    `parent2_id`.  A blank name is rejected; an invalid birthday is stored
    as empty.
    """
    birthday = parse_full_date(data.get('birthday'))
    logger.debug('update_child %s: birthday %r → %r', child_id, data.get('birthday'), birthday)

    name = (data.get('name') or '').strip()
    if not name:
        return {'success': False, 'error': 'Child name is required'}

    try:
        updated = Child.objects.filter(pk=child_id, school_class=school_class).update(
            name=name,
            address=(data.get('address') or '').strip() or None,
            birthday=birthday,
        )
        if not updated:
            raise Child.DoesNotExist(f'Child {child_id} not found')

        for slot in ('parent1', 'parent2'):
            parent_id = data.get(f'{slot}_id')
            if parent_id:
                Parent.objects.filter(
                    pk=parent_id,
                    child_links__child_id=child_id,
                ).update(
                    name=data.get(f'{slot}_name') or '',
                    phone=data.get(f'{slot}_phone') or None,
                )

        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'update_child', exc)


def delete_child(school_class, child_id):
    try:
        deleted, _ = Child.objects.filter(pk=child_id, school_class=school_class).delete()
        if not deleted:
            raise Child.DoesNotExist(f'Child {child_id} not found')
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'delete_child', exc)


# ── Staff ─────────────────────────────────────────────────────────────────────

def add_staff(school_class, data):
    """Create a staff member; `birthday` is "DD/MM" stored in the current year."""
    try:
        staff = Staff.objects.create(
            school_class=school_class,
            name=data['name'],
            role=data.get('role') or Staff.Role.TEACHER,
            birthday=parse_day_month(data.get('birthday')),
        )
        return ok(data=staff)
    except STORE_ERRORS as exc:
        return failed(logger, 'add_staff', exc)


def update_staff(school_class, staff_id, data):
    try:
        updated = Staff.objects.filter(pk=staff_id, school_class=school_class).update(
            name=data['name'],
            role=data.get('role') or Staff.Role.TEACHER,
            birthday=parse_day_month(data.get('birthday')),
        )
        if not updated:
            raise Staff.DoesNotExist(f'Staff member {staff_id} not found')
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'update_staff', exc)


def delete_staff(school_class, staff_id):
    try:
        deleted, _ = Staff.objects.filter(pk=staff_id, school_class=school_class).delete()
        if not deleted:
            raise Staff.DoesNotExist(f'Staff member {staff_id} not found')
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'delete_staff', exc)


# ── Public parent intake ──────────────────────────────────────────────────────

def submit_parent_form(school_class, data):
    """
    Save a parent-intake submission.

    The child is matched by case-insensitive name within the class: a match
    is updated, otherwise a new child is inserted.  Then, per parent slot
    that has both a name and a phone, the already-linked parent is updated
    or a new parent + link is created.

    The lookup and the insert are separate queries, so two submissions for
    the same new child arriving together can both insert.
    """
    child_name = data['name'].strip()
    try:
        child = (
            Child.objects
            .filter(school_class=school_class, name__iexact=child_name)
            .order_by('pk')
            .first()
        )
        created = child is None
        if created:
            child = Child.objects.create(
                school_class=school_class,
                name=child_name,
                birthday=data.get('birthday') or None,
                address=data.get('address') or None,
            )
        else:
            child.name = child_name
            child.birthday = data.get('birthday') or None
            child.address = data.get('address') or None
            child.save(update_fields=['name', 'birthday', 'address', 'updated_at'])

        links = {link.relationship: link for link in child.parent_links.all()}

        for slot in ('parent1', 'parent2'):
            name = (data.get(f'{slot}_name') or '').strip()
            phone = clean_phone(data.get(f'{slot}_phone'))
            if not (name and phone):
                continue
            link = links.get(slot)
            if link:
                Parent.objects.filter(pk=link.parent_id).update(name=name, phone=phone)
            else:
                parent = Parent.objects.create(
                    school_class=school_class,
                    name=name,
                    phone=phone,
                )
                ChildParent.objects.create(child=child, parent=parent, relationship=slot)

        logger.info(
            'Parent form for class %s: %s child %s',
            school_class.pk, 'created' if created else 'updated', child.pk,
        )
        return ok(data=child, created=created)
    except STORE_ERRORS as exc:
        return failed(logger, 'submit_parent_form', exc)


# ── Read helpers ──────────────────────────────────────────────────────────────

def children_with_parents(school_class):
    """
    Children of *school_class* ordered by name, each as
    {'child': Child, 'parents': [{'id', 'name', 'phone', 'relationship'}]}.
    """
    children = (
        Child.objects
        .filter(school_class=school_class)
        .prefetch_related(
            Prefetch('parent_links', queryset=ChildParent.objects.select_related('parent')),
        )
        .order_by('name')
    )
    return [
        {
            'child':   child,
            'parents': [
                {
                    'id':           link.parent.pk,
                    'name':         link.parent.name,
                    'phone':        link.parent.phone,
                    'relationship': link.relationship,
                }
                for link in child.parent_links.all()
            ],
        }
        for child in children
    ]


# ── Spreadsheet import ────────────────────────────────────────────────────────

def _iso_to_text(value):
    try:
        return format_full_date(datetime.date.fromisoformat(value))
    except (TypeError, ValueError):
        return ''


def _import_key(name, phone):
    return ((name or '').strip().lower(), re.sub(r'\s', '', phone or ''))


def _existing_import_keys(school_class):
    """(lower-cased child name, parent phone) for every child already in the class."""
    links = ChildParent.objects.filter(
        child__school_class=school_class, parent__phone__isnull=False,
    ).values_list('child__name', 'parent__phone')
    return {_import_key(name, phone) for name, phone in links}


def import_children(user, school_class, rows):
    """
    add_child() for every row of directory.spreadsheet.parse_children_workbook().

    A row is skipped when the class already has a child of the same name
    (any case) sharing one of the row's parent phones, or when the same
    name and parent-1 phone appeared earlier in the batch.  A failing row
    is reported and the rest still imported.
    """
    try:
        existing = _existing_import_keys(school_class)
    except STORE_ERRORS as exc:
        return failed(logger, 'import_children', exc)

    imported, skipped, errors = 0, 0, []
    seen_in_batch = set()
    for row in rows:
        phones = [row.get('parent1_phone'), row.get('parent2_phone')]
        if any(_import_key(row.get('name'), p) in existing for p in phones if p):
            skipped += 1
            continue
        batch_key = _import_key(row.get('name'), row.get('parent1_phone'))
        if batch_key in seen_in_batch:
            skipped += 1
            continue
        seen_in_batch.add(batch_key)

        data = dict(row, birthday=_iso_to_text(row.get('birthday')))
        result = add_child(user, school_class, data)
        if result['success']:
            imported += 1
        else:
            errors.append(f"{row.get('name')}: {result['error']}")
    logger.info(
        'Imported %d/%d children into class %s (%d duplicates skipped)',
        imported, len(rows), school_class.pk, skipped,
    )
    return ok(imported=imported, skipped=skipped, errors=errors)
