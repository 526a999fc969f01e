from decimal import Decimal

from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse

from orphans.models import Orphan

from .models import SiteSetting
from .settings_store import get_setting


class SiteSettingTests(TestCase):
    def tearDown(self):
        cache.clear()

    def test_default_when_missing(self):
        self.assertEqual(get_setting("hero_title", "Fallback"), "Fallback")

    def test_value_is_cached_and_invalidated_on_save(self):
        setting = SiteSetting.objects.create(key="hero_title", value="Hello")
        self.assertEqual(get_setting("hero_title"), "Hello")

        # Bypasses save(): cached value still served
        SiteSetting.objects.filter(pk=setting.pk).update(value="Stale")
        self.assertEqual(get_setting("hero_title"), "Hello")

        setting.value = "Updated"
        setting.save()
        self.assertEqual(get_setting("hero_title"), "Updated")

    def test_delete_invalidates(self):
        setting = SiteSetting.objects.create(key="about_text", value="We help")
        self.assertEqual(get_setting("about_text"), "We help")
        setting.delete()
        self.assertEqual(get_setting("about_text", "gone"), "gone")

    def test_admin_bulk_delete_invalidates(self):
        setting = SiteSetting.objects.create(key="maintenance_mode", value="true")
        self.assertEqual(get_setting("maintenance_mode"), "true")

        self.client.force_login(User.objects.create_superuser("root", "root@example.com", "pw"))
        resp = self.client.post(
            reverse("admin:homepage_sitesetting_changelist"),
            {"action": "delete_selected", "_selected_action": [setting.pk], "post": "yes"},
        )
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(get_setting("maintenance_mode"), "")


class HomePageTests(TestCase):
    def tearDown(self):
        cache.clear()

    def test_home_lists_available_orphans_only(self):
        Orphan.objects.create(full_name="Available Kid", gender="male", age=7, monthly_amount=Decimal("100"))
        Orphan.objects.create(full_name="Hidden Kid", gender="female", age=9, monthly_amount=Decimal("100"), status="inactive")
        resp = self.client.get(reverse("homepage:homepage"))
        self.assertEqual(resp.status_code, 200)
        self.assertTemplateUsed(resp, "home.html")
        self.assertContains(resp, "Available Kid")
        self.assertNotContains(resp, "Hidden Kid")
        self.assertEqual(resp.context["stats"]["total_orphans"], 2)

    def test_about_uses_site_setting(self):
        SiteSetting.objects.create(key="about_text", value="Founded to care for orphans.")
        resp = self.client.get(reverse("homepage:about"))
        self.assertContains(resp, "Founded to care for orphans.")
