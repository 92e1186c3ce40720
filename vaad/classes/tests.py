import base64
import datetime
import json
from decimal import Decimal
from unittest import mock

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import PermissionDenied
from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from accounts.models import User
from directory.models import Child, ChildParent, Parent, Staff
from finances.models import Event

from . import services
from .models import AdminInvitation, ClassMember, OnboardingResponse, SchoolClass


def wizard_payload(**overrides):
    payload = {
        'class_details': {
            'class_name': 'גן חבצלת',
            'school_name': 'בית ספר אלון',
            'city': 'חיפה',
            'year': '2026',
        },
        'children': [{'name': f'ילד {i}'} for i in range(1, 6)],
        'staff': [],
        'budget_type': 'per-child',
        'budget_amount': 100,
        'budget_allocations': [],
    }
    payload.update(overrides)
    return payload


def make_class(user=None, **fields):
    fields.setdefault('name', 'גן חבצלת')
    fields.setdefault('invite_code', 'ABCD1234')
    school_class = SchoolClass.objects.create(created_by=user, **fields)
    if user is not None:
        ClassMember.objects.create(school_class=school_class, user=user, role=ClassMember.Role.ADMIN)
    return school_class


class CreateClassTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user('dana', 'dana@example.com', 'pass12345')

    def test_per_child_budget_is_amount_times_children(self):
        result = services.create_class(self.user, wizard_payload())
        self.assertTrue(result['success'])

        school_class = SchoolClass.objects.get(pk=result['class_id'])
        self.assertEqual(school_class.total_budget, Decimal('500'))
        self.assertEqual(school_class.estimated_children, 5)
        self.assertEqual(school_class.children.count(), 5)

    def test_total_budget_mode_keeps_flat_amount(self):
        result = services.create_class(self.user, wizard_payload(budget_type='total', budget_amount=3000))
        school_class = SchoolClass.objects.get(pk=result['class_id'])
        self.assertEqual(school_class.total_budget, Decimal('3000'))

    def test_creator_becomes_admin_and_gets_invite_code(self):
        result = services.create_class(self.user, wizard_payload())
        school_class = SchoolClass.objects.get(pk=result['class_id'])

        self.assertEqual(result['invite_code'], school_class.invite_code)
        self.assertEqual(len(school_class.invite_code), 8)
        self.assertTrue(ClassMember.objects.filter(
            school_class=school_class, user=self.user, role=ClassMember.Role.ADMIN,
        ).exists())

    def test_parents_need_both_name_and_phone(self):
        children = [{
            'name': 'נועה',
            'parent1_name': 'רונית', 'parent1_phone': '0501234567',
            'parent2_name': 'אבי', 'parent2_phone': '',
        }]
        services.create_class(self.user, wizard_payload(children=children))

        child = Child.objects.get(name='נועה')
        links = list(child.parent_links.all())
        self.assertEqual(len(links), 1)
        self.assertEqual(links[0].relationship, ChildParent.Relationship.PARENT1)
        self.assertEqual(links[0].parent.name, 'רונית')

    def test_parent_without_phone_is_dropped(self):
        children = [{'name': 'איתי', 'parent1_name': 'רונית', 'parent1_phone': ''}]
        services.create_class(self.user, wizard_payload(children=children))
        self.assertFalse(Parent.objects.exists())

    def test_blank_children_are_skipped(self):
        children = [{'name': 'נועה'}, {'name': '   '}, {'name': ''}]
        result = services.create_class(self.user, wizard_payload(children=children))
        school_class = SchoolClass.objects.get(pk=result['class_id'])
        self.assertEqual(school_class.children.count(), 1)
        self.assertEqual(school_class.total_budget, Decimal('100'))

    def test_staff_birthdays_land_in_current_year(self):
        staff = [
            {'name': 'מירב', 'role': 'teacher', 'birthday': '15/03'},
            {'name': 'שרית', 'role': 'assistant', 'birthday': '3/3'},
            {'name': 'יעל', 'role': 'assistant', 'birthday': ''},
        ]
        services.create_class(self.user, wizard_payload(staff=staff))

        year = timezone.localdate().year
        self.assertEqual(Staff.objects.get(name='מירב').birthday, datetime.date(year, 3, 15))
        self.assertEqual(Staff.objects.get(name='שרית').birthday, datetime.date(year, 3, 3))
        self.assertIsNone(Staff.objects.get(name='יעל').birthday)

    def test_allocations_become_events_with_icons(self):
        allocations = [
            {'event_id': 'purim', 'event_name': 'פורים', 'amount': 300},
            {'event_id': 'pizza-party', 'event_name': 'מסיבת פיצה', 'amount': 150},
        ]
        result = services.create_class(self.user, wizard_payload(budget_allocations=allocations))

        events = Event.objects.filter(school_class_id=result['class_id']).order_by('sort_order')
        self.assertEqual([e.icon for e in events], ['🎭', '✨'])
        self.assertEqual(events[0].allocated_budget, Decimal('300'))
        self.assertIsNotNone(events[0].event_date)
        self.assertIsNone(events[1].event_date)

    def test_failing_parent_is_skipped_and_bootstrap_continues(self):
        children = [
            {'name': 'נועה', 'parent1_name': 'רונית', 'parent1_phone': '0501234567'},
            {'name': 'איתי', 'parent1_name': 'אבי', 'parent1_phone': '0527654321'},
            {'name': 'תמר', 'parent1_name': 'שירה', 'parent1_phone': '0541112222'},
        ]
        staff = [{'name': 'מירב', 'role': 'teacher', 'birthday': '15/03'}]
        allocations = [{'event_id': 'purim', 'event_name': 'פורים', 'amount': 300}]
        real_create = Parent.objects.create

        def create_parent(**fields):
            if fields['name'] == 'אבי':
                raise DatabaseError('insert failed')
            return real_create(**fields)

        with mock.patch.object(Parent.objects, 'create', side_effect=create_parent):
            result = services.create_class(self.user, wizard_payload(
                children=children, staff=staff, budget_allocations=allocations,
            ))

        self.assertTrue(result['success'])
        school_class = SchoolClass.objects.get(pk=result['class_id'])
        self.assertEqual(
            sorted(ChildParent.objects.values_list('child__name', 'parent__name')),
            sorted([('נועה', 'רונית'), ('תמר', 'שירה')]),
        )
        self.assertFalse(Child.objects.get(name='איתי').parent_links.exists())
        self.assertEqual(school_class.children.count(), 3)
        self.assertEqual(school_class.staff.count(), 1)
        self.assertEqual(Event.objects.filter(school_class=school_class).count(), 1)

    def test_non_dict_entries_are_rejected(self):
        for key in ('children', 'staff', 'budget_allocations'):
            result = services.create_class(self.user, wizard_payload(**{key: ['יוסי']}))
            self.assertFalse(result['success'], key)
            self.assertIn('error', result)
        self.assertFalse(SchoolClass.objects.exists())

    def test_unknown_choices_are_rejected(self):
        result = services.create_class(self.user, wizard_payload(budget_type='bogus'))
        self.assertEqual(result, {'success': False, 'error': 'Unknown budget type: bogus'})

        staff = [{'name': 'מירב', 'role': 'גננת'}]
        result = services.create_class(self.user, wizard_payload(staff=staff))
        self.assertFalse(result['success'])
        self.assertFalse(SchoolClass.objects.exists())
        self.assertFalse(Staff.objects.exists())

    def test_allocation_without_event_is_rejected(self):
        result = services.create_class(self.user, wizard_payload(budget_allocations=[{'amount': 100}]))
        self.assertFalse(result['success'])
        self.assertFalse(SchoolClass.objects.exists())

    def test_anonymous_user_is_rejected(self):
        with self.assertRaises(PermissionDenied):
            services.create_class(AnonymousUser(), wizard_payload())
        self.assertFalse(SchoolClass.objects.exists())


class InviteCodeTests(TestCase):
    def test_code_is_uppercase_alphanumeric(self):
        code = services.generate_invite_code()
        self.assertEqual(len(code), 8)
        self.assertTrue(all(c in services.INVITE_CODE_CHARS for c in code))

    def test_invite_link_points_at_public_route(self):
        school_class = make_class(invite_code='QWER5678')
        link = services.invite_link(school_class, 'public_calendar')
        self.assertTrue(link.endswith('/calendar/QWER5678/'))

    def test_qr_code_is_base64_png(self):
        png = base64.b64decode(services.invite_qr_code('https://example.com/join/ABCD1234/'))
        self.assertTrue(png.startswith(b'\x89PNG'))


class ClassSettingsTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user('dana', 'dana@example.com', 'pass12345')
        self.school_class = make_class(self.user)

    def test_blank_class_name_is_rejected(self):
        result = services.update_class_details(self.school_class, {'name': '  '})
        self.assertFalse(result['success'])

    def test_directory_settings_merge_known_flags(self):
        services.update_directory_settings(self.school_class, {'show_phone': False, 'bogus': True})
        self.school_class.refresh_from_db()
        flags = self.school_class.get_directory_settings()
        self.assertFalse(flags['show_phone'])
        self.assertTrue(flags['is_public'])
        self.assertNotIn('bogus', flags)

    def test_invalid_paybox_link_is_rejected(self):
        result = services.update_paybox_link(self.school_class, 'not a url')
        self.assertFalse(result['success'])
        result = services.update_paybox_link(self.school_class, 'https://payboxapp.page.link/abc')
        self.assertTrue(result['success'])

    def test_duplicate_pending_invitation_is_rejected(self):
        first = services.invite_admin(self.school_class, self.user, 'yossi@example.com')
        second = services.invite_admin(self.school_class, self.user, 'YOSSI@example.com')
        self.assertTrue(first['success'])
        self.assertFalse(second['success'])

    def test_existing_admin_cannot_be_invited(self):
        result = services.invite_admin(self.school_class, self.user, 'dana@example.com')
        self.assertFalse(result['success'])

    def test_pending_invitation_is_accepted_on_login(self):
        services.invite_admin(self.school_class, self.user, 'yossi@example.com')
        yossi = User.objects.create_user('yossi', 'yossi@example.com', 'pass12345')

        self.assertEqual(services.accept_pending_invitations(yossi), 1)
        self.assertTrue(ClassMember.objects.filter(school_class=self.school_class, user=yossi).exists())
        self.assertEqual(
            AdminInvitation.objects.get(email='yossi@example.com').status,
            AdminInvitation.Status.ACCEPTED,
        )

    def test_last_admin_cannot_be_removed(self):
        member = ClassMember.objects.get(school_class=self.school_class, user=self.user)
        result = services.remove_admin(self.school_class, member.pk)
        self.assertFalse(result['success'])

        other = User.objects.create_user('yossi', 'yossi@example.com', 'pass12345')
        ClassMember.objects.create(school_class=self.school_class, user=other, role=ClassMember.Role.ADMIN)
        result = services.remove_admin(self.school_class, member.pk)
        self.assertTrue(result['success'])

    def test_onboarding_responses_are_upserted(self):
        services.save_onboarding_responses(self.user, {'role': 'committee'})
        services.save_onboarding_responses(self.user, {'role': 'treasurer'})
        self.assertEqual(OnboardingResponse.objects.get(user=self.user).responses, {'role': 'treasurer'})


class ClassViewsTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user('dana', 'dana@example.com', 'pass12345')

    def test_dashboard_requires_login(self):
        resp = self.client.get(reverse('dashboard'))
        self.assertRedirects(resp, reverse('login'), fetch_redirect_response=False)

    def test_dashboard_without_class_goes_to_onboarding(self):
        self.client.force_login(self.user)
        resp = self.client.get(reverse('dashboard'))
        self.assertRedirects(resp, reverse('onboarding'), fetch_redirect_response=False)

    def test_dashboard_renders_for_admin(self):
        make_class(self.user)
        self.client.force_login(self.user)
        resp = self.client.get(reverse('dashboard'))
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, '/join/ABCD1234/')

    def test_create_class_endpoint(self):
        self.client.force_login(self.user)
        resp = self.client.post(
            reverse('create_class'),
            data=json.dumps(wizard_payload()),
            content_type='application/json',
        )
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()['success'])
        self.assertEqual(SchoolClass.objects.count(), 1)

    def test_create_class_endpoint_rejects_bad_json(self):
        self.client.force_login(self.user)
        resp = self.client.post(reverse('create_class'), data='{oops', content_type='application/json')
        self.assertEqual(resp.status_code, 400)

    def test_create_class_endpoint_rejects_malformed_payload(self):
        self.client.force_login(self.user)
        resp = self.client.post(
            reverse('create_class'),
            data=json.dumps(wizard_payload(children=['יוסי'])),
            content_type='application/json',
        )
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()['success'])
        self.assertFalse(SchoolClass.objects.exists())

    def test_create_class_endpoint_sends_anonymous_to_login(self):
        resp = self.client.post(
            reverse('create_class'),
            data=json.dumps(wizard_payload()),
            content_type='application/json',
        )
        self.assertRedirects(resp, reverse('login'), fetch_redirect_response=False)

    def test_create_class_endpoint_is_post_only(self):
        self.client.force_login(self.user)
        resp = self.client.get(reverse('create_class'))
        self.assertEqual(resp.status_code, 405)

    def test_settings_invite_action(self):
        school_class = make_class(self.user)
        self.client.force_login(self.user)
        resp = self.client.post(reverse('class_settings'), {'action': 'invite', 'email': 'new@example.com'})
        self.assertRedirects(resp, reverse('class_settings'), fetch_redirect_response=False)
        self.assertTrue(AdminInvitation.objects.filter(school_class=school_class, email='new@example.com').exists())

