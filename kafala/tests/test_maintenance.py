from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.urls import reverse

from accounts.roles import set_role
from homepage.models import SiteSetting


class MaintenanceModeTests(TestCase):
    def tearDown(self):
        cache.clear()

    @override_settings(MAINTENANCE_MODE=True)
    def test_visitors_redirected_when_setting_enabled(self):
        resp = self.client.get(reverse("orphans:list"))
        self.assertRedirects(resp, reverse("maintenance"), target_status_code=503)

    def test_site_setting_enables_maintenance(self):
        SiteSetting.objects.create(key="maintenance_mode", value="true")
        resp = self.client.get(reverse("homepage:homepage"))
        self.assertRedirects(resp, reverse("maintenance"), target_status_code=503)

    def test_signin_page_still_reachable(self):
        SiteSetting.objects.create(key="maintenance_mode", value="on")
        resp = self.client.get(reverse("accounts:signin"))
        self.assertEqual(resp.status_code, 200)

    @override_settings(MAINTENANCE_MODE=True)
    def test_staff_bypass(self):
        user = User.objects.create_user("staff", "staff@example.com", "pw")
        set_role(user, "staff")
        self.client.force_login(user)
        resp = self.client.get(reverse("orphans:list"))
        self.assertEqual(resp.status_code, 200)

    def test_disabled_by_default(self):
        resp = self.client.get(reverse("homepage:homepage"))
        self.assertEqual(resp.status_code, 200)
