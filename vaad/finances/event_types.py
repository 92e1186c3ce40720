"""
finances/event_types.py
───────────────────────
Fixed lookup tables for the event ids the onboarding wizard and the
allocation editor offer: display icon, Hebrew label and an estimated date.
"""

import datetime

from django.utils import timezone

FALLBACK_ICON = '✨'

EVENT_ICONS = {
    'birthdays-kids':       '🎂',
    'birthdays-staff':      '🎉',
    'rosh-hashana':         '🍎',
    'hanukkah':             '🕎',
    'tu-bishvat':           '🌳',
    'purim':                '🎭',
    'pesach':               '🍷',
    'independence-day':     '🇮🇱',
    'end-year-gifts-kids':  '🎁',
    'end-year-gifts-staff': '💐',
    'trips':                '🚌',
    'shows':                '🎪',
    'other':                '➕',
    # ids used by the allocation editor
    'passover':             '🍷',
    'teacher-day':          '💝',
    'end-of-year':          '🎓',
    'kids-birthdays':       '🎂',
    'staff-birthdays':      '🎁',
}

# Events offered by the allocation editor, in display order.
DEFAULT_EVENTS = [
    ('rosh-hashana',     'ראש השנה'),
    ('hanukkah',         'חנוכה'),
    ('tu-bishvat',       'ט"ו בשבט'),
    ('purim',            'פורים'),
    ('passover',         'פסח'),
    ('teacher-day',      'יום המחנך'),
    ('independence-day', 'יום העצמאות'),
    ('end-of-year',      'מתנות סוף שנה'),
    ('kids-birthdays',   'ימי הולדת ילדים'),
    ('staff-birthdays',  'ימי הולדת צוות'),
]

DEFAULT_EVENT_IDS = {event_id for event_id, _ in DEFAULT_EVENTS}

# (month, day, years after the current year)
_EVENT_DATES = {
    'rosh-hashana':     (9, 15, 0),
    'hanukkah':         (12, 7, 0),
    'tu-bishvat':       (2, 5, 1),
    'purim':            (3, 15, 1),
    'pesach':           (4, 10, 1),
    'passover':         (4, 10, 1),
    'independence-day': (5, 14, 1),
}


def get_event_icon(event_id):
    """Icon for a fixed event id; unknown ids get the sparkles fallback."""
    return EVENT_ICONS.get(event_id, FALLBACK_ICON)


def get_event_date(event_id, today=None):
    """
    Estimated date of a recurring holiday, or None for events without a fixed
    date (birthdays, trips, custom events).
    """
    entry = _EVENT_DATES.get(event_id)
    if entry is None:
        return None
    today = today or timezone.localdate()
    month, day, year_offset = entry
    return datetime.date(today.year + year_offset, month, day)
