import io
import json
from datetime import date
from decimal import Decimal

from django.contrib.auth.models import User
from django.core import mail
from django.test import TestCase
from django.urls import reverse
from openpyxl import load_workbook

from accounts.models import UserRole
from accounts.roles import set_role
from deposits.models import DepositReceiptRequest
from orphans.models import Orphan
from sponsorships.models import Receipt, Sponsorship, SponsorshipRequest
from sponsorships.services import create_sponsorship, submit_request

from .stats import dashboard_chart_data, monthly_revenue, orphan_stats


def make_orphan(**kwargs):
    defaults = {"full_name": "Orphan", "gender": "male", "age": 4, "country": "Sudan", "monthly_amount": Decimal("100")}
    defaults.update(kwargs)
    return Orphan.objects.create(**defaults)


class StatsTests(TestCase):
    def setUp(self):
        make_orphan(full_name="A", age=3)
        make_orphan(full_name="B", age=8, gender="female", country="Yemen")
        make_orphan(full_name="C", age=19, status="partial", country="Yemen")
        Orphan.objects.create(full_name="Legacy", gender="female", age=12, monthly_amount=1, country="Yemen")
        # Legacy value written directly, as older rows may carry it
        Orphan.objects.filter(full_name="Legacy").update(status="fully_sponsored")

    def test_orphan_stats_counts_legacy_as_sponsored(self):
        stats = orphan_stats()
        self.assertEqual(stats["total_orphans"], 4)
        self.assertEqual(stats["available_orphans"], 2)
        self.assertEqual(stats["sponsored_orphans"], 1)

    def test_chart_data(self):
        data = dashboard_chart_data()
        self.assertEqual({g["name"]: g["value"] for g in data["gender"]}, {"Male": 2, "Female": 2})
        self.assertEqual(
            {a["name"]: a["value"] for a in data["age_groups"]},
            {"0-5": 1, "6-10": 1, "11-15": 1, "16-18": 0, "18+": 1},
        )
        self.assertEqual({s["name"]: s["value"] for s in data["status"]}, {"Available": 2, "Partial": 1, "Sponsored": 1})
        self.assertEqual(data["top_countries"][0], {"name": "Yemen", "value": 3})
        self.assertEqual(len(data["monthly_revenue"]), 6)
        self.assertEqual(data["total_monthly_amount"], 301.0)

    def test_monthly_revenue_buckets(self):
        orphan = make_orphan(full_name="Rev")
        sp = create_sponsorship({"full_name": "Rev Sponsor", "phone": "0501234567"}, orphan, "monthly", "cash", Decimal("100"))
        Receipt.objects.filter(sponsorship=sp).update(issue_date=date(2026, 3, 15))
        Receipt.objects.create(sponsorship=sp, receipt_number="RCP-OLD", issue_date=date(2025, 9, 30), amount=Decimal("50"))
        rows = monthly_revenue(today=date(2026, 3, 20))
        self.assertEqual([r["month"] for r in rows], ["Oct 2025", "Nov 2025", "Dec 2025", "Jan 2026", "Feb 2026", "Mar 2026"])
        self.assertEqual(rows[-1]["amount"], 100.0)
        self.assertEqual(sum(r["amount"] for r in rows), 100.0)


class BackofficeViewTests(TestCase):
    def setUp(self):
        self.staff = User.objects.create_user("staff", "staff@example.com", "pw")
        set_role(self.staff, UserRole.STAFF)
        self.client.force_login(self.staff)
        self.orphan = make_orphan(full_name="Nadia")
        with self.captureOnCommitCallbacks(execute=True):
            self.req = submit_request(self.orphan, {
                "sponsor_full_name": "Faisal Karim",
                "sponsor_phone": "0509990000",
                "sponsor_email": "faisal@example.com",
                "sponsorship_type": "monthly",
            })
        mail.outbox.clear()

    def test_dashboard_and_json(self):
        resp = self.client.get(reverse("backoffice:dashboard"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.context["pending_requests"], 1)
        data = json.loads(self.client.get(reverse("backoffice:dashboard_data")).content)
        self.assertEqual(data["stats"]["total_orphans"], 1)
        self.assertIn("age_groups", data["charts"])

    def test_request_list_filter_and_search(self):
        resp = self.client.get(reverse("backoffice:requests"), {"status": "pending", "q": "faisal"})
        self.assertContains(resp, "Faisal Karim")
        resp = self.client.get(reverse("backoffice:requests"), {"status": "approved"})
        self.assertNotContains(resp, "Faisal Karim")

    def test_approve_via_view(self):
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.post(reverse("backoffice:request_approve", args=[self.req.pk]), {"notes": "ok"})
        self.assertRedirects(resp, reverse("backoffice:request_detail", args=[self.req.pk]))
        self.req.refresh_from_db()
        self.assertEqual(self.req.admin_status, SponsorshipRequest.STATUS_APPROVED)
        self.assertEqual(self.req.approved_by, self.staff)
        self.assertEqual(len(mail.outbox), 2)

    def test_reject_requires_reason(self):
        self.client.post(reverse("backoffice:request_reject", args=[self.req.pk]), {"notes": ""})
        self.req.refresh_from_db()
        self.assertEqual(self.req.admin_status, SponsorshipRequest.STATUS_PENDING)
        self.client.post(reverse("backoffice:request_reject", args=[self.req.pk]), {"notes": "No transfer"})
        self.req.refresh_from_db()
        self.assertEqual(self.req.admin_status, SponsorshipRequest.STATUS_REJECTED)

    def test_sponsorship_status_and_receipt(self):
        sp = create_sponsorship({"full_name": "Walk In", "phone": "0501010101"}, self.orphan, "monthly", "cash", Decimal("100"))
        self.client.post(reverse("backoffice:sponsorship_status", args=[sp.pk]), {"status": "paused"})
        sp.refresh_from_db()
        self.assertEqual(sp.status, Sponsorship.STATUS_PAUSED)
        self.client.post(reverse("backoffice:sponsorship_add_receipt", args=[sp.pk]), {"amount": "100.00", "payment_reference": "TRX"})
        self.assertEqual(sp.receipts.count(), 2)

    def test_create_sponsorship_defaults_amount(self):
        resp = self.client.post(reverse("backoffice:sponsorship_create"), {
            "full_name": "Walk In Sponsor",
            "phone": "0502020202",
            "orphan": self.orphan.pk,
            "type": "monthly",
            "payment_method": "cash",
        })
        self.assertRedirects(resp, reverse("backoffice:sponsorships"))
        self.assertEqual(Sponsorship.objects.get().monthly_amount, Decimal("100.00"))

    def test_deposit_status(self):
        deposit = DepositReceiptRequest.objects.create(sponsor_name="Dep", phone_number="0501231231", deposit_amount=5, bank_method="Bank")
        self.client.post(reverse("backoffice:deposit_status", args=[deposit.pk]), {"status": "rejected", "notes": "Unreadable"})
        deposit.refresh_from_db()
        self.assertEqual(deposit.status, "rejected")

    def test_notifications_page_counts(self):
        resp = self.client.get(reverse("backoffice:notifications"))
        self.assertEqual(resp.context["counts"]["sent"], 1)

    def test_export_orphans_xlsx(self):
        resp = self.client.get(reverse("backoffice:export", args=["orphans"]))
        self.assertEqual(resp.status_code, 200)
        self.assertIn("attachment;", resp["Content-Disposition"])
        wb = load_workbook(io.BytesIO(resp.content))
        rows = list(wb.active.values)
        self.assertEqual(rows[0][0], "Full name")
        self.assertEqual(rows[1][0], "Nadia")
        self.assertEqual(self.client.get(reverse("backoffice:export", args=["unknown"])).status_code, 404)

    def test_users_page_admin_only(self):
        self.assertEqual(self.client.get(reverse("backoffice:users")).status_code, 403)

    def test_admin_invites_user(self):
        admin = User.objects.create_user("boss", "boss@example.com", "pw")
        set_role(admin, UserRole.ADMIN)
        self.client.force_login(admin)
        resp = self.client.post(reverse("backoffice:user_invite"), {"email": "helper@example.com", "role": "staff"})
        self.assertRedirects(resp, reverse("backoffice:users"))
        invited = User.objects.get(email="helper@example.com")
        self.assertTrue(invited.is_staff)
        self.assertEqual(len(mail.outbox), 1)

        self.client.post(reverse("backoffice:user_role", args=[invited.pk]), {"role": "sponsor"})
        invited.refresh_from_db()
        self.assertFalse(invited.is_staff)
