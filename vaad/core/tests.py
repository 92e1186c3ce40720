import datetime
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from classes.models import SchoolClass
from directory.models import Child, ChildParent, Parent, Staff
from finances.models import Event

from .public import (
    DIRECTORY_NOT_PUBLIC,
    DirectoryNotPublic,
    get_class_by_invite_code,
    public_calendar,
    public_directory,
)


class PublicTestCase(TestCase):
    def setUp(self):
        self.school_class = SchoolClass.objects.create(
            name='גן חבצלת', invite_code='ABCD1234', paybox_link='https://payboxapp.page.link/abc',
        )
        self.noa = Child.objects.create(
            school_class=self.school_class, name='נועה לוי',
            birthday=datetime.date(2019, 3, 7), address='הרימון 4',
        )
        parent = Parent.objects.create(school_class=self.school_class, name='רונית לוי', phone='0501234567')
        ChildParent.objects.create(child=self.noa, parent=parent, relationship='parent1')
        Child.objects.create(school_class=self.school_class, name='איתי', birthday=datetime.date(2019, 8, 1))
        Staff.objects.create(school_class=self.school_class, name='מירב', birthday=datetime.date(2026, 3, 20))
        Event.objects.create(
            school_class=self.school_class, name='פורים', event_type='purim', icon='🎭',
            event_date=datetime.date(2026, 3, 3),
            allocated_for_kids=Decimal('400'), allocated_for_staff=Decimal('100'),
            allocated_budget=Decimal('500'),
        )


class PublicCalendarTests(PublicTestCase):
    def test_lookup_by_code_is_case_insensitive(self):
        self.assertEqual(get_class_by_invite_code(' abcd1234 '), self.school_class)
        self.assertIsNone(get_class_by_invite_code('NOPE0000'))
        self.assertIsNone(get_class_by_invite_code(''))

    def test_month_projection(self):
        data = public_calendar(self.school_class, 2026, 3)

        [event] = data['events']
        self.assertEqual(event['allocated_budget'], Decimal('500'))
        self.assertEqual(event['icon'], '🎭')
        self.assertEqual([c['name'] for c in data['children']], ['נועה לוי'])
        self.assertEqual(set(data['children'][0]), {'id', 'name', 'birthday'})
        self.assertEqual([s['name'] for s in data['staff']], ['מירב'])
        self.assertIn('פורים', [h['name'] for h in data['holidays']])

    def test_calendar_page(self):
        resp = self.client.get(reverse('public_calendar', args=['ABCD1234']), {'year': 2026, 'month': 3})
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'פורים')
        self.assertContains(resp, 'נועה לוי')

    def test_bad_month_falls_back(self):
        resp = self.client.get(reverse('public_calendar', args=['ABCD1234']), {'year': 'x', 'month': 13})
        self.assertEqual(resp.status_code, 200)

    def test_unknown_code_is_404(self):
        resp = self.client.get(reverse('public_calendar', args=['NOPE0000']))
        self.assertEqual(resp.status_code, 404)


class PublicDirectoryTests(PublicTestCase):
    def test_hidden_fields_are_trimmed(self):
        self.school_class.directory_settings = {'show_phone': False, 'show_address': False}
        self.school_class.save()

        data = public_directory(self.school_class)
        noa = next(c for c in data['children'] if c['name'] == 'נועה לוי')
        self.assertIsNone(noa['address'])
        self.assertIsNone(noa['parents'][0]['phone'])
        self.assertEqual(noa['birthday'], datetime.date(2019, 3, 7))

    def test_search_matches_parent_name(self):
        data = public_directory(self.school_class, 'רונית')
        self.assertEqual([c['name'] for c in data['children']], ['נועה לוי'])
        self.assertEqual(data['staff'], [])

    def test_not_public(self):
        self.school_class.directory_settings = {'is_public': False}
        self.school_class.save()

        with self.assertRaises(DirectoryNotPublic):
            public_directory(self.school_class)

        resp = self.client.get(reverse('public_directory', args=['ABCD1234']))
        self.assertEqual(resp.status_code, 403)
        self.assertContains(resp, DIRECTORY_NOT_PUBLIC, status_code=403)

    def test_directory_page(self):
        resp = self.client.get(reverse('public_directory', args=['ABCD1234']))
        self.assertContains(resp, '0501234567')


class ParentIntakeViewTests(PublicTestCase):
    def test_join_redirects_to_form(self):
        resp = self.client.get(reverse('public_join', args=['abcd1234']))
        self.assertRedirects(resp, reverse('parent_form', args=['ABCD1234']))

    def test_submission_updates_existing_child(self):
        resp = self.client.post(reverse('parent_form', args=['ABCD1234']), {
            'name': 'נועה לוי',
            'birthday': '2019-03-07',
            'address': 'האלון 9',
            'parent1_name': 'רונית לוי',
            'parent1_phone': '052-765-4321',
        })
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'payboxapp.page.link')

        self.assertEqual(Child.objects.filter(name='נועה לוי').count(), 1)
        self.noa.refresh_from_db()
        self.assertEqual(self.noa.address, 'האלון 9')
        self.assertEqual(self.noa.parent_links.get().parent.phone, '0527654321')

    def test_invalid_submission_redisplays_form(self):
        resp = self.client.post(reverse('parent_form', args=['ABCD1234']), {'name': ''})
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'שם מלא הוא שדה חובה')
        self.assertEqual(Child.objects.count(), 2)


class HomeTests(TestCase):
    def test_home_page(self):
        resp = self.client.get(reverse('homepage'))
        self.assertEqual(resp.status_code, 200)
