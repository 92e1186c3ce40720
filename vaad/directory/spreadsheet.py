"""
directory/spreadsheet.py
────────────────────────
Excel import / export of the children + parents list.

The uploaded workbook's first sheet is read row by row against a fixed set
of Hebrew (or English) column headers.  The template generator writes the
same headers plus an instructions sheet.
"""

import datetime
import io
import logging

from openpyxl import Workbook, load_workbook
from openpyxl.utils.datetime import from_excel

from .birthdays import parse_full_date

logger = logging.getLogger(__name__)

DATA_SHEET_TITLE = 'ילדים והורים'
INSTRUCTIONS_SHEET_TITLE = 'הוראות'
TEMPLATE_FILENAME = 'תבנית_ילדים_והורים.xlsx'

# field → accepted header spellings, first one is what the template writes
COLUMNS = {
    'name':          ('שם הילד/ה', 'שם הילד', 'Child Name'),
    'parent1_name':  ('שם הורה 1', 'Parent 1 Name'),
    'parent1_phone': ('טלפון הורה 1', 'Parent 1 Phone'),
    'parent2_name':  ('שם הורה 2', 'Parent 2 Name'),
    'parent2_phone': ('טלפון הורה 2', 'Parent 2 Phone'),
    'address':       ('כתובת', 'Address'),
    'birthday':      ('תאריך לידה', 'Birthday'),
}

TEMPLATE_FIELDS = ['name', 'parent1_name', 'parent1_phone', 'parent2_name', 'parent2_phone', 'address']
TEMPLATE_WIDTHS = [20, 20, 15, 20, 15, 30]

TEMPLATE_EXAMPLE = {
    'name':          'דוגמה: יוסי כהן',
    'parent1_name':  'דוגמה: דוד כהן',
    'parent1_phone': '050-1234567',
    'parent2_name':  'דוגמה: שרה כהן',
    'parent2_phone': '050-7654321',
    'address':       'רחוב הדקל 5, תל אביב',
}

INSTRUCTIONS = [
    'הוראות שימוש:',
    '',
    "1. מלא את הפרטים בגיליון 'ילדים והורים'",
    '2. שדות חובה: שם הילד/ה, שם הורה 1, טלפון הורה 1',
    '3. שדות אופציונליים: שם הורה 2, טלפון הורה 2, כתובת',
    '4. אל תשנה את שמות העמודות',
    '5. שמור את הקובץ והעלה אותו למערכת',
    '',
    'דוגמה למילוי:',
    'שם הילד/ה: יוסי כהן',
    'שם הורה 1: דוד כהן',
    'טלפון הורה 1: 050-1234567',
]


class SpreadsheetError(ValueError):
    """The uploaded file is not a readable workbook."""


def _cell_text(value):
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _birthday_value(value):
    """Date cell, Excel serial number or "DD/MM/YYYY" text → "YYYY-MM-DD"."""
    if value in (None, ''):
        return ''
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        converted = from_excel(value)
        return converted.date().isoformat() if converted else ''
    text = str(value).strip()
    if text.count('/') == 2:
        return parse_full_date(text) or ''
    return text


def _header_map(header_row):
    """Column index → field name, for the headers we recognise."""
    mapping = {}
    for idx, header in enumerate(header_row):
        label = _cell_text(header)
        for field, spellings in COLUMNS.items():
            if label in spellings and field not in mapping.values():
                mapping[idx] = field
    return mapping


def parse_children_workbook(file_obj):
    """
    Read the first sheet of an uploaded .xlsx into a list of dicts with the
    keys of COLUMNS.  Phones are kept as text; rows without a child name are
    skipped.
    """
    try:
        workbook = load_workbook(file_obj, read_only=True, data_only=True)
    except Exception as exc:
        logger.warning('Unreadable children workbook: %s', exc)
        raise SpreadsheetError('The file is not a valid Excel workbook (.xlsx).') from exc

    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        mapping = _header_map(header)
        if 'name' not in mapping.values():
            raise SpreadsheetError('Missing the child name column ("שם הילד/ה").')

        children = []
        for row in rows:
            record = {field: '' for field in COLUMNS}
            for idx, field in mapping.items():
                value = row[idx] if idx < len(row) else None
                if field == 'birthday':
                    record[field] = _birthday_value(value)
                else:
                    record[field] = _cell_text(value)
            if record['name']:
                children.append(record)
        logger.info('Parsed %d children from workbook', len(children))
        return children
    finally:
        workbook.close()


def build_children_template():
    """Return the bytes of the import template workbook."""
    workbook = Workbook()

    sheet = workbook.active
    sheet.title = DATA_SHEET_TITLE
    sheet.sheet_view.rightToLeft = True
    sheet.append([COLUMNS[field][0] for field in TEMPLATE_FIELDS])
    sheet.append([TEMPLATE_EXAMPLE[field] for field in TEMPLATE_FIELDS])
    for column, width in zip('ABCDEF', TEMPLATE_WIDTHS):
        sheet.column_dimensions[column].width = width

    instructions = workbook.create_sheet(INSTRUCTIONS_SHEET_TITLE)
    instructions.sheet_view.rightToLeft = True
    for line in INSTRUCTIONS:
        instructions.append([line])
    instructions.column_dimensions['A'].width = 50

    buf = io.BytesIO()
    workbook.save(buf)
    return buf.getvalue()
