import io
import re
from decimal import Decimal
from unittest import mock

from django.contrib.auth.models import User
from django.core import mail
from django.core.files.base import ContentFile
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse

from accounts.roles import set_role
from notifications.models import NotificationLog
from orphans.models import Orphan

from .exceptions import InvalidTransition, OrphanUnavailable
from .models import Receipt, Sponsor, Sponsorship, SponsorshipRequest
from .services import (
    approve_request,
    attach_cash_receipt,
    create_receipt,
    create_sponsorship,
    get_or_create_sponsor,
    lookup_receipt,
    receipts_for_user,
    reject_request,
    submit_request,
    update_sponsorship_status,
)
from .utils import generate_receipt_number


def make_orphan(**kwargs):
    defaults = {"full_name": "Layla Noor", "gender": "female", "age": 6, "monthly_amount": Decimal("120.00")}
    defaults.update(kwargs)
    return Orphan.objects.create(**defaults)


REQUEST_DATA = {
    "sponsor_full_name": "Khalid Mansour",
    "sponsor_phone": "0501234567",
    "sponsor_email": "Khalid@Example.com",
    "sponsor_country": "Saudi Arabia",
    "sponsorship_type": "monthly",
}


class ReceiptNumberTests(TestCase):
    def test_format(self):
        self.assertRegex(generate_receipt_number(), r"^RCP-\d{8}-\d{4}$")

    def test_retries_until_unused(self):
        orphan = make_orphan()
        sponsor = Sponsor.objects.create(full_name="S")
        sp = Sponsorship.objects.create(orphan=orphan, sponsor=sponsor, monthly_amount=1, start_date="2026-01-01", receipt_number="RCP-20260101-0001")
        Receipt.objects.create(sponsorship=sp, receipt_number="RCP-20260101-0002", issue_date="2026-01-01", amount=1)
        with mock.patch(
            "sponsorships.utils._receipt_candidate",
            side_effect=["RCP-20260101-0001", "RCP-20260101-0002", "RCP-20260101-0003"],
        ):
            self.assertEqual(generate_receipt_number(), "RCP-20260101-0003")


class GetOrCreateSponsorTests(TestCase):
    def test_matches_by_normalised_email_then_phone(self):
        sponsor = get_or_create_sponsor("Ali", email="ALI@example.com", phone="0501111111")
        self.assertEqual(sponsor.email_norm, "ali@example.com")
        self.assertEqual(get_or_create_sponsor("Ali", email=" ali@EXAMPLE.com ").pk, sponsor.pk)
        self.assertEqual(get_or_create_sponsor("Ali", phone="050 111 1111").pk, sponsor.pk)
        self.assertEqual(Sponsor.objects.count(), 1)

    def test_fills_blanks_and_prefers_longer_name(self):
        sponsor = Sponsor.objects.create(full_name="Ali", phone="0502222222")
        get_or_create_sponsor("Ali Hassan Omar", email="ali@example.com", phone="0502222222", country="Oman")
        sponsor.refresh_from_db()
        self.assertEqual(sponsor.full_name, "Ali Hassan Omar")
        self.assertEqual(sponsor.email_norm, "ali@example.com")
        self.assertEqual(sponsor.country, "Oman")

    def test_shorter_name_does_not_override(self):
        sponsor = Sponsor.objects.create(full_name="Robert Smith", email="bob@example.com", email_norm="bob@example.com")
        get_or_create_sponsor("Bob", email="bob@example.com")
        sponsor.refresh_from_db()
        self.assertEqual(sponsor.full_name, "Robert Smith")

    def test_links_user_when_missing(self):
        user = User.objects.create_user("u", "u@example.com", "pw")
        sponsor = get_or_create_sponsor("Umar", email="u@example.com")
        self.assertIsNone(sponsor.user)
        get_or_create_sponsor("Umar", email="u@example.com", user=user)
        sponsor.refresh_from_db()
        self.assertEqual(sponsor.user, user)


class SubmitRequestTests(TestCase):
    def test_amount_doubles_as_yearly_total(self):
        orphan = make_orphan()
        with self.captureOnCommitCallbacks(execute=True):
            req = submit_request(orphan, dict(REQUEST_DATA, sponsorship_type="yearly"))
        self.assertEqual(req.amount, Decimal("1440.00"))
        self.assertEqual(req.admin_status, SponsorshipRequest.STATUS_PENDING)
        self.assertEqual(req.sponsor_email, "khalid@example.com")

    def test_admin_notified(self):
        with self.captureOnCommitCallbacks(execute=True):
            submit_request(make_orphan(), REQUEST_DATA)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["admin@example.com"])
        log = NotificationLog.objects.get()
        self.assertEqual(log.notification_type, NotificationLog.TYPE_REQUEST_ADMIN)
        self.assertEqual(log.status, NotificationLog.STATUS_SENT)

    def test_full_or_inactive_orphan_rejected(self):
        for status in ("full", "inactive"):
            with self.assertRaises(OrphanUnavailable):
                submit_request(make_orphan(status=status), REQUEST_DATA)

    def test_email_failure_does_not_break_submission(self):
        with mock.patch("django.core.mail.EmailMultiAlternatives.send", side_effect=OSError("smtp down")):
            with self.captureOnCommitCallbacks(execute=True):
                req = submit_request(make_orphan(), REQUEST_DATA)
        self.assertTrue(SponsorshipRequest.objects.filter(pk=req.pk).exists())
        log = NotificationLog.objects.get()
        self.assertEqual(log.status, NotificationLog.STATUS_FAILED)
        self.assertIn("smtp down", log.error_message)


class RequestFormViewTests(TestCase):
    def setUp(self):
        self.orphan = make_orphan()
        self.url = reverse("orphans:detail", args=[self.orphan.pk])

    def test_submit_with_transfer_receipt(self):
        upload = SimpleUploadedFile("transfer.pdf", b"%PDF-1.4", content_type="application/pdf")
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.post(self.url, dict(REQUEST_DATA, transfer_receipt=upload))
        self.assertRedirects(resp, reverse("sponsorships:thanks"))
        req = SponsorshipRequest.objects.get()
        self.assertTrue(req.transfer_receipt.name.startswith("transfer-receipts/"))
        self.assertEqual(req.sponsor_phone, "0501234567")

        thanks = self.client.get(reverse("sponsorships:thanks"))
        self.assertContains(thanks, self.orphan.full_name)

    def test_validation_errors(self):
        resp = self.client.post(self.url, dict(REQUEST_DATA, sponsor_full_name="Al", sponsor_phone="123", sponsor_email="nope"))
        self.assertEqual(resp.status_code, 200)
        errors = resp.context["form"].errors
        self.assertIn("sponsor_full_name", errors)
        self.assertIn("sponsor_phone", errors)
        self.assertIn("sponsor_email", errors)
        self.assertFalse(SponsorshipRequest.objects.exists())

    def test_rejects_bad_receipt_type(self):
        upload = SimpleUploadedFile("x.exe", b"MZ", content_type="application/octet-stream")
        resp = self.client.post(self.url, dict(REQUEST_DATA, transfer_receipt=upload))
        self.assertIn("transfer_receipt", resp.context["form"].errors)

    def test_logged_in_user_linked(self):
        user = User.objects.create_user("sp", "sp@example.com", "pw")
        self.client.force_login(user)
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post(self.url, REQUEST_DATA)
        self.assertEqual(SponsorshipRequest.objects.get().user, user)


class ApproveRequestTests(TestCase):
    def setUp(self):
        self.staff = User.objects.create_user("staff", "staff@example.com", "pw")
        set_role(self.staff, "staff")
        self.orphan = make_orphan()
        with self.captureOnCommitCallbacks(execute=True):
            self.req = submit_request(self.orphan, REQUEST_DATA)
        mail.outbox.clear()

    def test_approval_creates_sponsor_sponsorship_receipt(self):
        with self.captureOnCommitCallbacks(execute=True):
            sponsorship = approve_request(self.req.pk, by_user=self.staff, notes="Transfer checked")

        self.req.refresh_from_db()
        self.assertEqual(self.req.admin_status, SponsorshipRequest.STATUS_APPROVED)
        self.assertEqual(self.req.approved_by, self.staff)
        self.assertIsNotNone(self.req.approved_at)
        self.assertEqual(self.req.admin_notes, "Transfer checked")

        self.assertEqual(sponsorship.request, self.req)
        self.assertEqual(sponsorship.sponsor.email_norm, "khalid@example.com")
        self.assertEqual(sponsorship.monthly_amount, Decimal("120.00"))
        self.assertEqual(sponsorship.status, Sponsorship.STATUS_ACTIVE)

        receipt = Receipt.objects.get()
        self.assertEqual(receipt.receipt_number, sponsorship.receipt_number)
        self.assertEqual(receipt.amount, Decimal("120.00"))

        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_FULL)

        recipients = sorted(addr for m in mail.outbox for addr in m.to)
        self.assertEqual(recipients, ["admin@example.com", "khalid@example.com"])

    def test_yearly_monthly_amount(self):
        orphan = make_orphan(full_name="Yearly Kid")
        with self.captureOnCommitCallbacks(execute=True):
            req = submit_request(orphan, dict(REQUEST_DATA, sponsorship_type="yearly"))
        with self.captureOnCommitCallbacks(execute=True):
            sponsorship = approve_request(req.pk, by_user=self.staff)
        self.assertEqual(sponsorship.monthly_amount, Decimal("120.00"))
        self.assertEqual(Receipt.objects.get(sponsorship=sponsorship).amount, Decimal("1440.00"))

    def test_reapproval_is_idempotent(self):
        with self.captureOnCommitCallbacks(execute=True):
            first = approve_request(self.req.pk, by_user=self.staff)
        mail.outbox.clear()
        with self.captureOnCommitCallbacks(execute=True):
            second = approve_request(self.req.pk, by_user=self.staff)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.receipt_number, second.receipt_number)
        self.assertEqual(Sponsorship.objects.count(), 1)
        self.assertEqual(Receipt.objects.count(), 1)
        self.assertEqual(Sponsor.objects.count(), 1)
        self.assertEqual(mail.outbox, [])

    def test_failure_rolls_back(self):
        with mock.patch("sponsorships.services.refresh_orphan_status", side_effect=RuntimeError("boom")):
            with self.assertRaises(RuntimeError):
                approve_request(self.req.pk, by_user=self.staff)
        self.req.refresh_from_db()
        self.assertEqual(self.req.admin_status, SponsorshipRequest.STATUS_PENDING)
        self.assertFalse(Sponsorship.objects.exists())
        self.assertFalse(Receipt.objects.exists())

    def test_partial_coverage(self):
        orphan = make_orphan(full_name="Costly Kid", monthly_amount=Decimal("300"))
        create_sponsorship({"full_name": "Part Sponsor", "phone": "0509876543"}, orphan, "monthly", "cash", Decimal("100"))
        orphan.refresh_from_db()
        self.assertEqual(orphan.status, Orphan.STATUS_PARTIAL)

    def test_reject_requires_notes_and_not_approved(self):
        with self.assertRaises(InvalidTransition):
            reject_request(self.req.pk, by_user=self.staff, notes="  ")
        reject_request(self.req.pk, by_user=self.staff, notes="Transfer not found")
        self.req.refresh_from_db()
        self.assertEqual(self.req.admin_status, SponsorshipRequest.STATUS_REJECTED)

        with self.captureOnCommitCallbacks(execute=True):
            approve_request(self.req.pk, by_user=self.staff)
        with self.assertRaises(InvalidTransition):
            reject_request(self.req.pk, by_user=self.staff, notes="Changed mind")

    def test_cash_receipt_propagates_to_receipt(self):
        with self.captureOnCommitCallbacks(execute=True):
            sponsorship = approve_request(self.req.pk, by_user=self.staff)
        attach_cash_receipt(
            self.req.pk,
            upload=ContentFile(b"%PDF-cash", name="cash.pdf"),
            number="CR-778",
            date="2026-02-01",
        )
        self.req.refresh_from_db()
        self.assertTrue(self.req.cash_receipt.name.startswith("cash-receipts/"))
        self.assertEqual(Receipt.objects.get(receipt_number=sponsorship.receipt_number).payment_reference, "CR-778")


class SponsorshipManagementTests(TestCase):
    def setUp(self):
        self.orphan = make_orphan()

    def test_create_sponsorship_first_receipt_yearly(self):
        sponsorship = create_sponsorship(
            {"full_name": "Direct Sponsor", "email": "d@example.com", "phone": "0501231234"},
            self.orphan, "yearly", "bank_transfer", Decimal("120"),
        )
        self.assertEqual(sponsorship.receipts.get().amount, Decimal("1440.00"))
        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_FULL)

    def test_status_change_refreshes_orphan(self):
        sponsorship = create_sponsorship({"full_name": "Direct Sponsor", "phone": "0501231234"}, self.orphan, "monthly", "cash", Decimal("120"))
        update_sponsorship_status(sponsorship, Sponsorship.STATUS_CANCELLED)
        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_AVAILABLE)
        sponsorship.refresh_from_db()
        self.assertIsNotNone(sponsorship.end_date)

    def test_inactive_orphan_keeps_status(self):
        sponsorship = create_sponsorship({"full_name": "Direct Sponsor", "phone": "0501231234"}, self.orphan, "monthly", "cash", Decimal("120"))
        Orphan.objects.filter(pk=self.orphan.pk).update(status="inactive")
        sponsorship.orphan.refresh_from_db()
        update_sponsorship_status(sponsorship, Sponsorship.STATUS_PAUSED)
        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_INACTIVE)

    def test_create_receipt_generates_new_number(self):
        sponsorship = create_sponsorship({"full_name": "Direct Sponsor", "phone": "0501231234"}, self.orphan, "monthly", "cash", Decimal("120"))
        receipt = create_receipt(sponsorship, Decimal("120"), payment_reference="TRX-1")
        self.assertNotEqual(receipt.receipt_number, sponsorship.receipt_number)
        self.assertEqual(sponsorship.receipts.count(), 2)

    def test_sync_command(self):
        create_sponsorship({"full_name": "Direct Sponsor", "phone": "0501231234"}, self.orphan, "monthly", "cash", Decimal("120"))
        Orphan.objects.filter(pk=self.orphan.pk).update(status="available")
        out = io.StringIO()
        call_command("sync_orphan_statuses", stdout=out)
        self.assertIn("updated 1 orphans", out.getvalue())
        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_FULL)


class LookupAndReceiptTests(TestCase):
    def setUp(self):
        self.orphan = make_orphan()
        self.user = User.objects.create_user("owner", "owner@example.com", "pw")
        with self.captureOnCommitCallbacks(execute=True):
            self.req = submit_request(self.orphan, REQUEST_DATA, user=self.user)
        with self.captureOnCommitCallbacks(execute=True):
            self.sponsorship = approve_request(self.req.pk)

    def test_lookup_matches_partial_name_and_exact_phone(self):
        self.assertEqual(lookup_receipt("khalid", "050 123 4567"), self.req)
        self.assertIsNone(lookup_receipt("khalid", "0500000000"))
        self.assertIsNone(lookup_receipt("someone else", "0501234567"))

    def test_lookup_ignores_pending(self):
        with self.captureOnCommitCallbacks(execute=True):
            submit_request(make_orphan(full_name="Other"), dict(REQUEST_DATA, sponsor_full_name="Pending Person", sponsor_phone="0507777777"))
        self.assertIsNone(lookup_receipt("Pending", "0507777777"))

    def test_lookup_view_shows_cash_receipt_link(self):
        attach_cash_receipt(self.req.pk, upload=ContentFile(b"%PDF", name="c.pdf"), number="CR-1")
        resp = self.client.post(reverse("sponsorships:lookup"), {"name": "Khalid", "phone": "0501234567"})
        self.assertContains(resp, "Download cash receipt")
        link = re.search(r'href="(/files/[^"]+)"', resp.content.decode()).group(1)
        self.assertEqual(self.client.get(link).status_code, 200)

    def test_receipts_for_user_deduplicated(self):
        # Linked both as sponsor user and as request submitter
        Sponsor.objects.filter(pk=self.sponsorship.sponsor_id).update(user=self.user)
        receipts = list(receipts_for_user(self.user))
        self.assertEqual(len(receipts), 1)
        self.assertEqual(receipts[0].receipt_number, self.sponsorship.receipt_number)

    def test_receipt_page_owner_only(self):
        url = reverse("sponsorships:receipt", args=[self.sponsorship.receipt_number])
        self.assertEqual(self.client.get(url).status_code, 302)

        stranger = User.objects.create_user("stranger", "x@example.com", "pw")
        self.client.force_login(stranger)
        self.assertEqual(self.client.get(url).status_code, 404)

        self.client.force_login(self.user)
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, self.sponsorship.receipt_number)

    def test_my_pages(self):
        self.client.force_login(self.user)
        self.assertContains(self.client.get(reverse("sponsorships:my_receipts")), self.sponsorship.receipt_number)
        self.assertContains(self.client.get(reverse("sponsorships:my_requests")), self.orphan.full_name)


class SponsorshipAdminTests(TestCase):
    def setUp(self):
        self.root = User.objects.create_superuser("root", "root@example.com", "pw")
        self.client.force_login(self.root)
        self.orphan = make_orphan(monthly_amount=Decimal("100.00"))
        self.sponsorship = create_sponsorship(
            {"full_name": "Walk In Sponsor", "phone": "0507778888"}, self.orphan, "monthly", "cash", Decimal("100")
        )
        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_FULL)

    def test_delete_refreshes_orphan(self):
        resp = self.client.post(
            reverse("admin:sponsorships_sponsorship_delete", args=[self.sponsorship.pk]), {"post": "yes"}
        )
        self.assertEqual(resp.status_code, 302)
        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_AVAILABLE)

    def test_bulk_delete_refreshes_orphan(self):
        self.client.post(
            reverse("admin:sponsorships_sponsorship_changelist"),
            {"action": "delete_selected", "_selected_action": [self.sponsorship.pk], "post": "yes"},
        )
        self.assertFalse(Sponsorship.objects.exists())
        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_AVAILABLE)

    def test_saving_status_refreshes_orphan(self):
        from django.contrib import admin
        from django.test import RequestFactory

        from .admin import SponsorshipAdmin

        request = RequestFactory().post("/")
        request.user = self.root
        self.sponsorship.status = Sponsorship.STATUS_PAUSED
        SponsorshipAdmin(Sponsorship, admin.site).save_model(request, self.sponsorship, None, True)
        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_AVAILABLE)

        self.sponsorship.status = Sponsorship.STATUS_ACTIVE
        self.sponsorship.monthly_amount = Decimal("40.00")
        SponsorshipAdmin(Sponsorship, admin.site).save_model(request, self.sponsorship, None, True)
        self.orphan.refresh_from_db()
        self.assertEqual(self.orphan.status, Orphan.STATUS_PARTIAL)
