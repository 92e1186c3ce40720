import datetime

from django.test import SimpleTestCase

from . import holidays

# a date inside the 2025/26 school year
IN_SCHOOL_YEAR = datetime.date(2025, 10, 1)


def names_on(day):
    return [h['name'] for h in holidays.get_holidays_for_day(day.year, day.month, day.day, today=IN_SCHOOL_YEAR)]


class SchoolYearTests(SimpleTestCase):
    def test_range_from_autumn_and_spring(self):
        expected = (datetime.date(2025, 9, 1), datetime.date(2026, 8, 31))
        self.assertEqual(holidays.get_school_year_range(datetime.date(2025, 9, 1)), expected)
        self.assertEqual(holidays.get_school_year_range(datetime.date(2026, 8, 31)), expected)
        self.assertEqual(
            holidays.get_school_year_range(datetime.date(2025, 8, 31)),
            (datetime.date(2024, 9, 1), datetime.date(2025, 8, 31)),
        )


class HolidayTests(SimpleTestCase):
    def test_known_dates(self):
        self.assertIn('ראש השנה א׳', names_on(datetime.date(2025, 9, 23)))
        self.assertIn('ראש השנה ב׳', names_on(datetime.date(2025, 9, 24)))
        self.assertIn('חנוכה א׳', names_on(datetime.date(2025, 12, 15)))
        self.assertIn('פורים', names_on(datetime.date(2026, 3, 3)))
        self.assertIn('פסח א׳', names_on(datetime.date(2026, 4, 2)))

    def test_israeli_days(self):
        self.assertIn('יום הזיכרון', names_on(datetime.date(2026, 4, 21)))
        self.assertIn('יום העצמאות', names_on(datetime.date(2026, 4, 22)))

    def test_holiday_shape(self):
        [purim] = [
            h for h in holidays.get_holidays_for_month(2026, 3, today=IN_SCHOOL_YEAR)
            if h['name'] == 'פורים'
        ]
        self.assertEqual(purim['date'], datetime.date(2026, 3, 3))
        self.assertEqual(purim['date_string'], '2026-03-03')
        self.assertEqual(purim['icon'], '🎭')
        self.assertTrue(purim['is_school_off'])
        self.assertTrue(purim['id'].startswith('jewish-holiday-2026-03-03-'))

    def test_month_outside_school_year_is_empty(self):
        self.assertEqual(holidays.get_holidays_for_month(2024, 12, today=IN_SCHOOL_YEAR), [])

    def test_every_holiday_is_in_the_school_year(self):
        start, end = holidays.get_school_year_range(IN_SCHOOL_YEAR)
        result = holidays.get_jewish_holidays(IN_SCHOOL_YEAR)
        self.assertTrue(result)
        self.assertTrue(all(start <= h['date'] <= end for h in result))
        self.assertEqual(len({h['id'] for h in result}), len(result))


class SchoolBreakTests(SimpleTestCase):
    def test_breaks_of_the_year(self):
        breaks = {b['id']: b for b in holidays.get_school_breaks(IN_SCHOOL_YEAR)}
        self.assertIn('break-winter-2026', breaks)
        self.assertEqual(breaks['break-summer-2026']['start_date'], datetime.date(2026, 7, 1))
        self.assertEqual(breaks['break-summer-2026']['end_date'], datetime.date(2026, 8, 31))
        self.assertEqual(breaks['break-purim-2026']['start_date'], datetime.date(2026, 3, 2))

    def test_is_school_break(self):
        self.assertEqual(holidays.is_school_break(datetime.date(2026, 2, 3))['id'], 'break-winter-2026')
        self.assertIsNone(holidays.is_school_break(datetime.date(2026, 1, 12)))

    def test_breaks_for_month_overlap(self):
        ids = [b['id'] for b in holidays.get_school_breaks_for_month(2026, 4, today=IN_SCHOOL_YEAR)]
        self.assertIn('break-passover-2026', ids)


class HebrewFormattingTests(SimpleTestCase):
    def test_gregorian_month_in_hebrew(self):
        self.assertEqual(holidays.format_gregorian_hebrew_date(datetime.date(2026, 1, 10)), 'ינואר 2026')

    def test_hebrew_month_and_year(self):
        day = datetime.date(2026, 3, 3)
        self.assertEqual(holidays.get_hebrew_month_name(day), 'אדר')
        self.assertEqual(holidays.format_hebrew_date(day), f'אדר {holidays.get_hebrew_year(day)}')
