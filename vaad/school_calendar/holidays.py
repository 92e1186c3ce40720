"""
school_calendar/holidays.py
───────────────────────────
Jewish / Israeli holidays and school breaks for the public calendar.

pyluach does the calendar arithmetic; this module walks the school year
(1 September → 31 August) day by day, asks pyluach which festival or fast
falls on each day, and keeps only the names in HOLIDAY_METADATA, relabelled
in Hebrew with an icon, a category and whether schools are closed.
The Israeli national and memorial days pyluach does not know about are
placed from their Hebrew dates.

All functions take an optional `today` that picks the school year; it
defaults to the current local date.
"""

import datetime
import logging

from django.utils import timezone
from pyluach import dates, hebrewcal

logger = logging.getLogger(__name__)

# Hebrew month numbers as pyluach counts them
NISAN, IYAR, TISHREI, KISLEV, ADAR, ADAR_II = 1, 2, 7, 9, 12, 13

RELIGIOUS = 'religious'
NATIONAL = 'national'
MEMORIAL = 'memorial'
MINOR = 'minor'

# calendar name → (Hebrew name, icon, school off, category)
HOLIDAY_METADATA = {
    'Rosh Hashana':     ('ראש השנה',     '🍎', True,  RELIGIOUS),
    'Erev Yom Kippur':  ('ערב יום כיפור', '🕯️', True,  RELIGIOUS),
    'Yom Kippur':       ('יום כיפור',     '🕯️', True,  RELIGIOUS),
    'Succos':           ('סוכות',        '🌿', True,  RELIGIOUS),
    'Shmini Atzeres':   ('שמיני עצרת',    '🌿', True,  RELIGIOUS),
    'Simchas Torah':    ('שמחת תורה',     '📜', True,  RELIGIOUS),
    'Chanuka':          ('חנוכה',        '🕎', False, MINOR),
    "Tu B'shvat":       ('ט״ו בשבט',     '🌳', False, MINOR),
    'Purim':            ('פורים',        '🎭', True,  MINOR),
    'Shushan Purim':    ('שושן פורים',    '🎭', False, MINOR),
    'Pesach':           ('פסח',          '🍷', True,  RELIGIOUS),
    "Lag Ba'omer":      ('ל״ג בעומר',    '🔥', False, MINOR),
    'Shavuos':          ('שבועות',       '🌾', True,  RELIGIOUS),
    'Yom HaShoah':      ('יום השואה',     '🕯️', False, MEMORIAL),
    'Yom HaZikaron':    ('יום הזיכרון',   '🕯️', False, MEMORIAL),
    "Yom HaAtzma'ut":   ('יום העצמאות',   '🇮🇱', True,  NATIONAL),
    'Yom Yerushalayim': ('יום ירושלים',   '🏛️', False, NATIONAL),
    '9 of Av':          ('תשעה באב',     '📖', False, MEMORIAL),
}

# Festivals shown with a day number ("סוכות ג׳")
MULTI_DAY = {'Rosh Hashana', 'Succos', 'Pesach', 'Chanuka'}

DAY_LETTERS = ['א׳', 'ב׳', 'ג׳', 'ד׳', 'ה׳', 'ו׳', 'ז׳', 'ח׳']

GREGORIAN_MONTHS_HE = [
    'ינואר', 'פברואר', 'מרץ', 'אפריל', 'מאי', 'יוני',
    'יולי', 'אוגוסט', 'ספטמבר', 'אוקטובר', 'נובמבר', 'דצמבר',
]

# pyluach weekday(): 1 = Sunday … 7 = Saturday
SUNDAY, MONDAY, FRIDAY, SATURDAY = 1, 2, 6, 7


def _today(today):
    return today or timezone.localdate()


def _hebrew(day):
    return dates.GregorianDate.from_pydate(day).to_heb()


# ── School year ───────────────────────────────────────────────────────────────

def get_school_year_range(today=None):
    """(1 Sep, 31 Aug) of the school year containing *today*."""
    today = _today(today)
    start_year = today.year if today.month >= 9 else today.year - 1
    return datetime.date(start_year, 9, 1), datetime.date(start_year + 1, 8, 31)


def _school_hebrew_year(start):
    """The Hebrew year whose Tishrei falls in the autumn of *start*."""
    return start.year + 3761


# ── Holidays ──────────────────────────────────────────────────────────────────

def _israeli_days(hebrew_year):
    """Modern Israeli days of *hebrew_year* as {pydate: name}."""
    result = {}

    shoah = dates.HebrewDate(hebrew_year, NISAN, 27)
    if shoah.weekday() == FRIDAY:
        shoah = shoah - 1
    elif shoah.weekday() == SUNDAY:
        shoah = shoah + 1
    result[shoah.to_pydate()] = 'Yom HaShoah'

    atzmaut = dates.HebrewDate(hebrew_year, IYAR, 5)
    if atzmaut.weekday() == FRIDAY:
        atzmaut = atzmaut - 1
    elif atzmaut.weekday() == SATURDAY:
        atzmaut = atzmaut - 2
    elif atzmaut.weekday() == MONDAY:
        atzmaut = atzmaut + 1
    result[atzmaut.to_pydate()] = "Yom HaAtzma'ut"
    result[(atzmaut - 1).to_pydate()] = 'Yom HaZikaron'

    result[dates.HebrewDate(hebrew_year, IYAR, 28).to_pydate()] = 'Yom Yerushalayim'
    return result


def _calendar_name(hebrew_date, israeli_days):
    pydate = hebrew_date.to_pydate()
    if pydate in israeli_days:
        return israeli_days[pydate]
    if hebrew_date.month == TISHREI and hebrew_date.day == 9:
        return 'Erev Yom Kippur'
    name = hebrew_date.festival(israel=True, include_working_days=True)
    if name is None and hebrew_date.fast_day() == '9 of Av':
        name = '9 of Av'
    return name


def _holiday(pydate, calendar_name, day_number):
    hebrew_name, icon, is_school_off, category = HOLIDAY_METADATA[calendar_name]
    if calendar_name in MULTI_DAY and day_number <= len(DAY_LETTERS):
        hebrew_name = f'{hebrew_name} {DAY_LETTERS[day_number - 1]}'
    date_string = pydate.isoformat()
    slug = calendar_name.replace("'", '').replace(' ', '-').lower()
    return {
        'id':            f'jewish-holiday-{date_string}-{slug}',
        'name':          hebrew_name,
        'date':          pydate,
        'date_string':   date_string,
        'icon':          icon,
        'is_school_off': is_school_off,
        'category':      category,
    }


def get_jewish_holidays(today=None):
    """Every recognised holiday of the school year containing *today*, by date."""
    start, end = get_school_year_range(today)
    israeli_days = _israeli_days(_school_hebrew_year(start))

    holidays = []
    previous, run = None, 0
    day = start
    while day <= end:
        name = _calendar_name(_hebrew(day), israeli_days)
        run = run + 1 if name is not None and name == previous else 1
        previous = name
        if name in HOLIDAY_METADATA:
            holidays.append(_holiday(day, name, run))
        elif name is not None:
            logger.debug('Skipping calendar day %s (%s)', day, name)
        day += datetime.timedelta(days=1)
    return holidays


def get_holidays_for_month(year, month, today=None):
    """Holidays falling in *month* (1–12) of *year*, within the school year of *today*."""
    return [
        h for h in get_jewish_holidays(today)
        if h['date'].year == year and h['date'].month == month
    ]


def get_holidays_for_day(year, month, day, today=None):
    target = datetime.date(year, month, day)
    return [h for h in get_jewish_holidays(today) if h['date'] == target]


# ── School breaks ─────────────────────────────────────────────────────────────

def _break(break_id, name, start, end, icon):
    return {'id': break_id, 'name': name, 'start_date': start, 'end_date': end, 'icon': icon}


def get_school_breaks(today=None):
    """Ministry of Education style breaks of the school year containing *today*."""
    start, end = get_school_year_range(today)
    first, second = start.year, end.year
    hebrew_year = _school_hebrew_year(start)

    sukkot = dates.HebrewDate(hebrew_year, TISHREI, 15)
    simchat_torah = dates.HebrewDate(hebrew_year, TISHREI, 22)
    hanukkah = dates.HebrewDate(hebrew_year, KISLEV, 25)
    purim_month = ADAR_II if hebrewcal.Year(hebrew_year).leap else ADAR
    purim = dates.HebrewDate(hebrew_year, purim_month, 14)
    pesach = dates.HebrewDate(hebrew_year, NISAN, 15)

    breaks = [
        _break(f'break-sukkot-{first}', 'חופשת סוכות',
               (sukkot - 1).to_pydate(), simchat_torah.to_pydate(), '🌿'),
        _break(f'break-hanukkah-{first}', 'חופשת חנוכה',
               hanukkah.to_pydate(), (hanukkah + 7).to_pydate(), '🕎'),
        _break(f'break-winter-{second}', 'חופשת סמסטר',
               datetime.date(second, 2, 1), datetime.date(second, 2, 5), '❄️'),
        _break(f'break-purim-{second}', 'חופשת פורים',
               (purim - 1).to_pydate(), (purim + 1).to_pydate(), '🎭'),
        _break(f'break-passover-{second}', 'חופשת פסח',
               (pesach - 1).to_pydate(), (pesach + 7).to_pydate(), '🍷'),
        _break(f'break-summer-{second}', 'חופשת קיץ',
               datetime.date(second, 7, 1), datetime.date(second, 8, 31), '☀️'),
    ]
    return [b for b in breaks if start <= b['start_date'] <= end]


def is_school_break(day, today=None):
    """The break *day* falls in, or None."""
    for brk in get_school_breaks(today or day):
        if brk['start_date'] <= day <= brk['end_date']:
            return brk
    return None


def get_school_breaks_for_month(year, month, today=None):
    """Breaks overlapping *month* (1–12) of *year*."""
    month_start = datetime.date(year, month, 1)
    month_end = (month_start + datetime.timedelta(days=32)).replace(day=1) - datetime.timedelta(days=1)
    return [
        b for b in get_school_breaks(today)
        if b['start_date'] <= month_end and b['end_date'] >= month_start
    ]


# ── Hebrew date formatting ────────────────────────────────────────────────────

def get_hebrew_month_name(day):
    return _hebrew(day).month_name(hebrew=True)


def get_hebrew_year(day):
    """Hebrew year in letters, e.g. 5786 → "תשפ״ו"."""
    return _hebrew(day).hebrew_year()


def format_hebrew_date(day):
    """e.g. "טבת תשפ״ו"."""
    return f'{get_hebrew_month_name(day)} {get_hebrew_year(day)}'


def format_gregorian_hebrew_date(day):
    """e.g. "ינואר 2026"."""
    return f'{GREGORIAN_MONTHS_HE[day.month - 1]} {day.year}'
