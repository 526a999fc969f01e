import io
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db.models import ProtectedError
from django.test import TestCase
from django.urls import reverse
from PIL import Image

from .forms import OrphanForm
from .models import Orphan


def make_orphan(**kwargs):
    defaults = {"full_name": "Test Orphan", "gender": "male", "age": 8, "country": "Yemen", "monthly_amount": Decimal("150.00")}
    defaults.update(kwargs)
    return Orphan.objects.create(**defaults)


class OrphanModelTests(TestCase):
    def test_legacy_status_normalised_on_save(self):
        self.assertEqual(make_orphan(status="partially_sponsored").status, Orphan.STATUS_PARTIAL)
        self.assertEqual(make_orphan(status="fully_sponsored").status, Orphan.STATUS_FULL)
        self.assertEqual(make_orphan(status="sponsored").status, Orphan.STATUS_FULL)

    def test_accepts_requests(self):
        self.assertTrue(make_orphan().accepts_requests)
        self.assertTrue(make_orphan(status="partial").accepts_requests)
        self.assertFalse(make_orphan(status="full").accepts_requests)
        self.assertFalse(make_orphan(status="inactive").accepts_requests)

    def test_delete_removes_photo(self):
        buf = io.BytesIO()
        Image.new("RGB", (20, 20), "blue").save(buf, format="JPEG")
        orphan = make_orphan(photo=SimpleUploadedFile("p.jpg", buf.getvalue(), content_type="image/jpeg"))
        storage, name = orphan.photo.storage, orphan.photo.name
        self.assertTrue(storage.exists(name))
        orphan.delete()
        self.assertFalse(storage.exists(name))

    def test_delete_protected_when_sponsored(self):
        from sponsorships.services import create_sponsorship

        orphan = make_orphan()
        create_sponsorship({"full_name": "Sponsor Person", "phone": "0501234567"}, orphan, "monthly", "cash", Decimal("150"))
        with self.assertRaises(ProtectedError):
            orphan.delete()


class OrphanAdminTests(TestCase):
    def setUp(self):
        self.client.force_login(User.objects.create_superuser("root", "root@example.com", "pw"))

    def test_bulk_delete_removes_photo(self):
        buf = io.BytesIO()
        Image.new("RGB", (20, 20), "green").save(buf, format="JPEG")
        orphan = make_orphan(photo=SimpleUploadedFile("bulk.jpg", buf.getvalue(), content_type="image/jpeg"))
        storage, name = orphan.photo.storage, orphan.photo.name

        resp = self.client.post(
            reverse("admin:orphans_orphan_changelist"),
            {"action": "delete_selected", "_selected_action": [orphan.pk], "post": "yes"},
        )
        self.assertEqual(resp.status_code, 302)
        self.assertFalse(Orphan.objects.filter(pk=orphan.pk).exists())
        self.assertFalse(storage.exists(name))


class OrphanFormTests(TestCase):
    def test_rejects_non_image_photo(self):
        form = OrphanForm(
            data={"full_name": "Kid", "gender": "female", "age": 4, "status": "available", "monthly_amount": "100"},
            files={"photo": SimpleUploadedFile("a.pdf", b"%PDF", content_type="application/pdf")},
        )
        self.assertFalse(form.is_valid())
        self.assertIn("photo", form.errors)

    def test_age_limit(self):
        form = OrphanForm(data={"full_name": "Kid", "gender": "female", "age": 31, "status": "available", "monthly_amount": "100"})
        self.assertFalse(form.is_valid())
        self.assertIn("age", form.errors)


class OrphanViewTests(TestCase):
    def setUp(self):
        self.visible = make_orphan(full_name="Salim Hassan", city="Aden")
        self.hidden = make_orphan(full_name="Hidden Child", status="inactive")

    def test_list_hides_inactive(self):
        resp = self.client.get(reverse("orphans:list"))
        self.assertContains(resp, "Salim Hassan")
        self.assertNotContains(resp, "Hidden Child")

    def test_search_by_city(self):
        make_orphan(full_name="Other Child", city="Sanaa")
        resp = self.client.get(reverse("orphans:list"), {"q": "aden"})
        self.assertContains(resp, "Salim Hassan")
        self.assertNotContains(resp, "Other Child")

    def test_status_filter(self):
        make_orphan(full_name="Partly Covered", status="partial")
        resp = self.client.get(reverse("orphans:list"), {"status": "partial"})
        self.assertContains(resp, "Partly Covered")
        self.assertNotContains(resp, "Salim Hassan")

    def test_detail_404_for_inactive(self):
        self.assertEqual(self.client.get(reverse("orphans:detail", args=[self.hidden.pk])).status_code, 404)
        resp = self.client.get(reverse("orphans:detail", args=[self.visible.pk]))
        self.assertEqual(resp.status_code, 200)
        self.assertTemplateUsed(resp, "orphans/detail.html")
