"""
directory/birthdays.py
──────────────────────
Birthday text parsing shared by the bootstrap writer, the directory manager
and the spreadsheet importer.

Children's birthdays are entered as "DD/MM/YYYY"; staff birthdays as "DD/MM"
and stored against the current year.  Anything unparseable becomes None.
"""

import datetime
import logging

from django.utils import timezone

logger = logging.getLogger(__name__)


def _as_iso(year, month, day):
    try:
        return datetime.date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_day_month(text, year=None):
    """
    "DD/MM" → "YYYY-MM-DD" using *year* (default: the current year).

    >>> parse_day_month('3/3', year=2026)
    '2026-03-03'
    """
    if not text or '/' not in text:
        return None
    parts = text.strip().split('/')
    day, month = parts[0].strip(), parts[1].strip()
    if not day or not month:
        return None
    try:
        day_num, month_num = int(day), int(month)
    except ValueError:
        logger.debug('Ignoring non-numeric day/month birthday %r', text)
        return None
    year = year or timezone.localdate().year
    return _as_iso(year, month_num, day_num)


def parse_full_date(text):
    """
    "DD/MM/YYYY" → "YYYY-MM-DD".

    Incomplete, non-numeric or out-of-range dates (day 1–31, month 1–12,
    year after 1900, and a real calendar day) give None.
    """
    if not text or not text.strip() or '/' not in text:
        return None
    parts = [p.strip() for p in text.strip().split('/')]
    if len(parts) != 3 or not all(parts):
        return None
    try:
        day, month, year = (int(p) for p in parts)
    except ValueError:
        logger.debug('Ignoring non-numeric birthday %r', text)
        return None
    if not (1 <= day <= 31 and 1 <= month <= 12 and year > 1900):
        logger.debug('Ignoring out-of-range birthday %r', text)
        return None
    return _as_iso(year, month, day)


def format_day_month(value):
    """date → "DD/MM" (the staff birthday input format)."""
    if not value:
        return ''
    return value.strftime('%d/%m')


def format_full_date(value):
    """date → "DD/MM/YYYY"."""
    if not value:
        return ''
    return value.strftime('%d/%m/%Y')
