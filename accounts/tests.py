from django.contrib.auth.models import User
from django.core import mail
from django.test import TestCase
from django.urls import reverse

from .models import Profile, UserRole
from .roles import has_role, is_admin_or_staff, set_role
from .services import create_account, invite_user


class SignUpTests(TestCase):
    def test_signup_creates_user_profile_and_sponsor_role(self):
        resp = self.client.post(reverse("accounts:signup"), {
            "full_name": "Amina Yusuf",
            "email": "Amina@Example.com",
            "phone": "+966 50 123 4567",
            "password1": "a-long-password-42",
            "password2": "a-long-password-42",
        })
        self.assertRedirects(resp, reverse("homepage:homepage"))

        user = User.objects.get(email="amina@example.com")
        self.assertEqual(user.profile.full_name, "Amina Yusuf")
        self.assertEqual(user.profile.phone, "+966501234567")
        self.assertEqual(user.first_name, "Amina")
        self.assertTrue(has_role(user, UserRole.SPONSOR))
        self.assertFalse(user.is_staff)

    def test_signup_rejects_short_phone_and_password_mismatch(self):
        resp = self.client.post(reverse("accounts:signup"), {
            "full_name": "Amina Yusuf",
            "email": "amina@example.com",
            "phone": "12345",
            "password1": "a-long-password-42",
            "password2": "another-password-42",
        })
        self.assertEqual(resp.status_code, 200)
        form = resp.context["form"]
        self.assertIn("phone", form.errors)
        self.assertIn("password2", form.errors)
        self.assertFalse(User.objects.exists())

    def test_duplicate_email_rejected(self):
        create_account(full_name="First User", email="dup@example.com", phone="0501234567", password="x-pass-12345")
        resp = self.client.post(reverse("accounts:signup"), {
            "full_name": "Second User",
            "email": "DUP@example.com",
            "phone": "0509999999",
            "password1": "a-long-password-42",
            "password2": "a-long-password-42",
        })
        self.assertIn("email", resp.context["form"].errors)


class SignInTests(TestCase):
    def setUp(self):
        self.user = create_account(
            full_name="Omar Ali", email="omar@example.com", phone="0551234567", password="secret-pass-99"
        )

    def test_signin_with_email(self):
        resp = self.client.post(reverse("accounts:signin"), {"identifier": "OMAR@example.com", "password": "secret-pass-99"})
        self.assertRedirects(resp, reverse("homepage:homepage"))
        self.assertEqual(int(self.client.session["_auth_user_id"]), self.user.pk)

    def test_signin_with_phone(self):
        resp = self.client.post(reverse("accounts:signin"), {"identifier": "055 123 4567", "password": "secret-pass-99"})
        self.assertRedirects(resp, reverse("homepage:homepage"))

    def test_wrong_password(self):
        resp = self.client.post(reverse("accounts:signin"), {"identifier": "omar@example.com", "password": "nope"})
        self.assertEqual(resp.status_code, 200)
        self.assertIn("Invalid credentials", resp.context["form"].non_field_errors())


class RoleTests(TestCase):
    def test_role_syncs_is_staff(self):
        user = User.objects.create_user("u1", "u1@example.com", "pw")
        set_role(user, UserRole.STAFF)
        user.refresh_from_db()
        self.assertTrue(user.is_staff)
        self.assertTrue(is_admin_or_staff(user))

        set_role(user, UserRole.SPONSOR)
        user.refresh_from_db()
        self.assertFalse(user.is_staff)
        self.assertFalse(is_admin_or_staff(user))

    def test_superuser_counts_as_admin(self):
        user = User.objects.create_superuser("root", "root@example.com", "pw")
        self.assertTrue(has_role(user, UserRole.ADMIN))

    def test_backoffice_forbidden_for_sponsor(self):
        create_account(full_name="Plain Sponsor", email="s@example.com", phone="0561234567", password="pw-123456789")
        self.client.login(username=User.objects.get(email="s@example.com").username, password="pw-123456789")
        resp = self.client.get(reverse("backoffice:dashboard"))
        self.assertEqual(resp.status_code, 403)


class InviteUserTests(TestCase):
    def test_existing_user_gets_role_updated(self):
        user = create_account(full_name="Existing One", email="old@example.com", phone="0571234567", password="pw-123456789")
        result = invite_user(email="OLD@example.com", role=UserRole.STAFF)
        self.assertTrue(result.updated_existing)
        self.assertEqual(result.user, user)
        user.refresh_from_db()
        self.assertEqual(user.role.role, UserRole.STAFF)
        self.assertEqual(len(mail.outbox), 0)

    def test_new_user_is_invited_with_set_password_link(self):
        result = invite_user(email="new@example.com", role=UserRole.ADMIN, full_name="New Admin")
        self.assertFalse(result.updated_existing)
        self.assertTrue(result.email_sent)
        user = result.user
        self.assertFalse(user.has_usable_password())
        self.assertTrue(user.is_staff)
        self.assertEqual(Profile.objects.get(user=user).full_name, "New Admin")

        self.assertEqual(len(mail.outbox), 1)
        body = mail.outbox[0].body
        self.assertIn("/accounts/set-password/", body)

        path = body[body.index("/accounts/set-password/"):].split()[0]
        resp = self.client.post(path, {"new_password1": "brand-new-pass-77", "new_password2": "brand-new-pass-77"})
        self.assertRedirects(resp, reverse("homepage:homepage"))
        user.refresh_from_db()
        self.assertTrue(user.check_password("brand-new-pass-77"))

    def test_set_password_rejects_bad_token(self):
        user = User.objects.create_user("x", "x@example.com")
        resp = self.client.get(reverse("accounts:set_password", kwargs={"uidb64": "MQ", "token": "bad-token"}))
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(resp.context["invalid_link"])
        self.assertFalse(user.has_usable_password())
