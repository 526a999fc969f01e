import logging

import requests
from django.conf import settings
from django.core.mail.backends.base import BaseEmailBackend
from django.core.mail.message import EmailMultiAlternatives

logger = logging.getLogger(__name__)


class ResendError(Exception):
    pass


class ResendEmailBackend(BaseEmailBackend):
    """Email backend that delivers through the Resend HTTP API.

    Enable with ``EMAIL_BACKEND = "notifications.backends.ResendEmailBackend"``
    and ``RESEND_API_KEY``.
    """

    def __init__(self, api_key=None, api_url=None, timeout=15, fail_silently=False, **kwargs):
        super().__init__(fail_silently=fail_silently, **kwargs)
        self.api_key = api_key or getattr(settings, "RESEND_API_KEY", "")
        self.api_url = api_url or getattr(settings, "RESEND_API_URL", "https://api.resend.com/emails")
        self.timeout = timeout
        self.session = None

    def open(self):
        if self.session is not None:
            return False
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        })
        return True

    def close(self):
        if self.session is not None:
            self.session.close()
            self.session = None

    def send_messages(self, email_messages):
        if not email_messages:
            return 0
        if not self.api_key:
            if not self.fail_silently:
                raise ResendError("RESEND_API_KEY is not configured")
            logger.error("RESEND_API_KEY is not configured; %d message(s) dropped", len(email_messages))
            return 0

        new_session = self.open()
        sent = 0
        try:
            for message in email_messages:
                try:
                    self._send(message)
                    sent += 1
                except (requests.RequestException, ResendError):
                    if not self.fail_silently:
                        raise
                    logger.exception("Resend delivery failed for %s", message.to)
        finally:
            if new_session:
                self.close()
        return sent

    def _payload(self, message) -> dict:
        payload = {
            "from": message.from_email or settings.DEFAULT_FROM_EMAIL,
            "to": list(message.to),
            "subject": message.subject,
            "text": message.body,
        }
        if message.cc:
            payload["cc"] = list(message.cc)
        if message.bcc:
            payload["bcc"] = list(message.bcc)
        if message.reply_to:
            payload["reply_to"] = list(message.reply_to)
        if isinstance(message, EmailMultiAlternatives):
            for content, mimetype in message.alternatives:
                if mimetype == "text/html":
                    payload["html"] = content
                    break
        return payload

    def _send(self, message) -> None:
        resp = self.session.post(self.api_url, json=self._payload(message), timeout=self.timeout)
        if resp.status_code >= 400:
            raise ResendError(f"Resend API error {resp.status_code}: {resp.text[:500]}")
        logger.info("Resend accepted message to %s: %s", message.to, resp.text[:200])
