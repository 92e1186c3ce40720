from django.test import TestCase
from django.urls import reverse

from classes.models import AdminInvitation, ClassMember, SchoolClass

from .models import User


class SignUpTests(TestCase):
    def test_signup_logs_in_and_goes_to_onboarding(self):
        resp = self.client.post(reverse('signup'), {
            'username': 'dana',
            'email': 'Dana@Example.com',
            'first_name': 'דנה',
            'last_name': 'כהן',
            'phone': '0501234567',
            'password1': 'a-long-Passphrase-42',
            'password2': 'a-long-Passphrase-42',
        })
        self.assertRedirects(resp, reverse('onboarding'), fetch_redirect_response=False)
        user = User.objects.get(username='dana')
        self.assertEqual(user.email, 'dana@example.com')
        self.assertEqual(int(self.client.session['_auth_user_id']), user.pk)

    def test_duplicate_email_is_rejected(self):
        User.objects.create_user('dana', 'dana@example.com', 'pass12345')
        resp = self.client.post(reverse('signup'), {
            'username': 'dana2',
            'email': 'DANA@example.com',
            'password1': 'a-long-Passphrase-42',
            'password2': 'a-long-Passphrase-42',
        })
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(User.objects.count(), 1)


class LoginTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user('yossi', 'yossi@example.com', 'pass12345')

    def test_login_accepts_pending_invitations(self):
        school_class = SchoolClass.objects.create(name='גן חבצלת', invite_code='ABCD1234')
        AdminInvitation.objects.create(school_class=school_class, email='yossi@example.com')

        resp = self.client.post(reverse('login'), {'username': 'yossi', 'password': 'pass12345'})
        self.assertRedirects(resp, reverse('dashboard'), fetch_redirect_response=False)
        self.assertTrue(ClassMember.objects.filter(
            school_class=school_class, user=self.user, role=ClassMember.Role.ADMIN,
        ).exists())

    def test_bad_password(self):
        resp = self.client.post(reverse('login'), {'username': 'yossi', 'password': 'wrong'})
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_external_next_is_ignored(self):
        resp = self.client.post(reverse('login'), {
            'username': 'yossi', 'password': 'pass12345', 'next': 'https://evil.example.com/',
        })
        self.assertRedirects(resp, reverse('dashboard'), fetch_redirect_response=False)

    def test_logout_is_post_only(self):
        self.client.force_login(self.user)
        self.assertEqual(self.client.get(reverse('logout')).status_code, 405)
        resp = self.client.post(reverse('logout'))
        self.assertRedirects(resp, reverse('login'), fetch_redirect_response=False)
