from django.contrib.auth.models import User
from django.core import mail
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse

from notifications.models import NotificationLog
from sponsorships.exceptions import InvalidTransition

from .models import BankAccount, DepositReceiptRequest
from .services import active_bank_accounts, update_deposit_status


class BankAccountCacheTests(TestCase):
    def tearDown(self):
        cache.clear()

    def test_active_accounts_ordered_and_invalidated(self):
        second = BankAccount.objects.create(bank_name="Second Bank", display_order=2)
        BankAccount.objects.create(bank_name="First Bank", display_order=1)
        BankAccount.objects.create(bank_name="Closed Bank", display_order=0, is_active=False)
        self.assertEqual([a.bank_name for a in active_bank_accounts()], ["First Bank", "Second Bank"])

        second.is_active = False
        second.save()
        self.assertEqual([a.bank_name for a in active_bank_accounts()], ["First Bank"])

    def test_cached_until_invalidated(self):
        BankAccount.objects.create(bank_name="Only Bank")
        self.assertEqual(len(active_bank_accounts()), 1)
        with self.assertNumQueries(0):
            active_bank_accounts()

    def test_admin_bulk_delete_invalidates(self):
        account = BankAccount.objects.create(bank_name="Bank A")
        self.assertEqual(active_bank_accounts(), [account])

        self.client.force_login(User.objects.create_superuser("root", "root@example.com", "pw"))
        resp = self.client.post(
            reverse("admin:deposits_bankaccount_changelist"),
            {"action": "delete_selected", "_selected_action": [account.pk], "post": "yes"},
        )
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(active_bank_accounts(), [])


class DepositRequestViewTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user("dep", "dep@example.com", "pw")
        self.url = reverse("deposits:request")

    def tearDown(self):
        cache.clear()

    def test_login_required(self):
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, 302)
        self.assertIn(reverse("accounts:signin"), resp["Location"])

    def test_submit_notifies_admin_and_user(self):
        self.client.force_login(self.user)
        upload = SimpleUploadedFile("slip.jpg", b"\xff\xd8\xff", content_type="image/jpeg")
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.client.post(self.url, {
                "sponsor_name": "Huda Saleh",
                "phone_number": "0551112222",
                "deposit_amount": "250.00",
                "bank_method": "Al Rajhi transfer",
                "receipt_image": upload,
            })
        self.assertRedirects(resp, self.url)
        deposit = DepositReceiptRequest.objects.get()
        self.assertEqual(deposit.user, self.user)
        self.assertEqual(deposit.status, DepositReceiptRequest.STATUS_PENDING)
        self.assertTrue(deposit.receipt_image.name.startswith("deposit-receipts/"))

        kinds = set(NotificationLog.objects.values_list("notification_type", flat=True))
        self.assertEqual(kinds, {NotificationLog.TYPE_DEPOSIT_ADMIN, NotificationLog.TYPE_DEPOSIT_SPONSOR})
        self.assertEqual(len(mail.outbox), 2)

    def test_validation(self):
        self.client.force_login(self.user)
        resp = self.client.post(self.url, {
            "sponsor_name": "Hu",
            "phone_number": "12",
            "deposit_amount": "0",
            "bank_method": "x",
        })
        errors = resp.context["form"].errors
        for field in ("sponsor_name", "phone_number", "deposit_amount", "bank_method"):
            self.assertIn(field, errors)
        self.assertFalse(DepositReceiptRequest.objects.exists())

    def test_update_status(self):
        deposit = DepositReceiptRequest.objects.create(
            user=self.user, sponsor_name="Huda", phone_number="0551112222", deposit_amount=10, bank_method="Cash"
        )
        update_deposit_status(deposit.pk, DepositReceiptRequest.STATUS_APPROVED, "Checked")
        deposit.refresh_from_db()
        self.assertEqual(deposit.status, DepositReceiptRequest.STATUS_APPROVED)
        self.assertEqual(deposit.notes, "Checked")
        with self.assertRaises(InvalidTransition):
            update_deposit_status(deposit.pk, "lost")
