from decimal import Decimal
from unittest import mock

import requests
from django.core import mail
from django.core.mail import EmailMultiAlternatives
from django.test import TestCase, override_settings

from orphans.models import Orphan
from sponsorships.services import create_sponsorship

from .backends import ResendEmailBackend, ResendError
from .models import NotificationLog
from .services import admin_recipients, send_notification, send_sponsorship_notification


class SendNotificationTests(TestCase):
    def test_sponsorship_notification_escapes_html(self):
        orphan = Orphan.objects.create(full_name="<b>Sara</b>", gender="female", age=5, monthly_amount=Decimal("100"))
        sponsorship = create_sponsorship(
            {"full_name": "<script>alert(1)</script>", "email": "s@example.com", "phone": "0501234567"},
            orphan, "monthly", "cash", Decimal("100"),
        )
        results = send_sponsorship_notification(sponsorship)
        self.assertEqual(results, {"admin": True, "sponsor": True})
        self.assertEqual(len(mail.outbox), 2)
        for message in mail.outbox:
            html = message.alternatives[0][0]
            self.assertNotIn("<script>", html)
            self.assertIn("&lt;script&gt;", html)
            self.assertNotIn("<b>Sara</b>", html)

    @override_settings(ADMIN_EMAILS="")
    def test_admin_notification_skipped_without_recipients(self):
        orphan = Orphan.objects.create(full_name="Sara", gender="female", age=5, monthly_amount=Decimal("100"))
        sponsorship = create_sponsorship({"full_name": "No Mail Sponsor", "phone": "0501234567"}, orphan, "monthly", "cash", Decimal("100"))
        results = send_sponsorship_notification(sponsorship)
        self.assertEqual(results, {"admin": False, "sponsor": False})
        self.assertEqual(mail.outbox, [])

    @override_settings(ADMIN_EMAILS="a@example.com, b@example.com,")
    def test_admin_recipients_parsed(self):
        self.assertEqual(admin_recipients(), ["a@example.com", "b@example.com"])

    def test_missing_template_logged_as_failure(self):
        ok = send_notification(NotificationLog.TYPE_INVITATION, "x@example.com", "Hi", "emails/does_not_exist", {})
        self.assertFalse(ok)
        log = NotificationLog.objects.get()
        self.assertEqual(log.status, NotificationLog.STATUS_FAILED)
        self.assertTrue(log.error_message)


@override_settings(RESEND_API_KEY="re_test", RESEND_API_URL="https://resend.test/emails")
class ResendBackendTests(TestCase):
    def _message(self):
        msg = EmailMultiAlternatives("Subject", "Text body", "from@example.com", ["to@example.com"], cc=["cc@example.com"])
        msg.attach_alternative("<p>Html body</p>", "text/html")
        return msg

    def test_posts_payload_with_bearer_token(self):
        backend = ResendEmailBackend()
        response = mock.Mock(status_code=200, text='{"id": "abc"}')
        with mock.patch("requests.Session.post", return_value=response) as post:
            sent = backend.send_messages([self._message()])
        self.assertEqual(sent, 1)
        args, kwargs = post.call_args
        self.assertEqual(args[0], "https://resend.test/emails")
        self.assertEqual(kwargs["json"]["to"], ["to@example.com"])
        self.assertEqual(kwargs["json"]["cc"], ["cc@example.com"])
        self.assertEqual(kwargs["json"]["html"], "<p>Html body</p>")
        self.assertEqual(kwargs["json"]["text"], "Text body")

    def test_api_error_raises_unless_silent(self):
        response = mock.Mock(status_code=422, text="invalid from")
        with mock.patch("requests.Session.post", return_value=response):
            with self.assertRaises(ResendError):
                ResendEmailBackend().send_messages([self._message()])
            self.assertEqual(ResendEmailBackend(fail_silently=True).send_messages([self._message()]), 0)

    def test_network_error_silent(self):
        with mock.patch("requests.Session.post", side_effect=requests.ConnectionError("down")):
            self.assertEqual(ResendEmailBackend(fail_silently=True).send_messages([self._message()]), 0)

    @override_settings(RESEND_API_KEY="")
    def test_missing_key(self):
        with self.assertRaises(ResendError):
            ResendEmailBackend().send_messages([self._message()])
