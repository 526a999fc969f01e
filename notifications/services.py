"""Templated notification emails.

Every send is recorded in ``NotificationLog``. Failures are logged and
recorded but never raised into the calling request flow.
"""
import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template import TemplateDoesNotExist, engines
from django.template.loader import render_to_string

from .models import NotificationLog

logger = logging.getLogger(__name__)

FROM = getattr(settings, "DEFAULT_FROM_EMAIL", "noreply@kafala.local")


def _fail_silently() -> bool:
    return getattr(settings, "EMAIL_FAIL_SILENTLY", True)


def _template_exists(path: str) -> bool:
    try:
        engines["django"].get_template(path)
        return True
    except TemplateDoesNotExist:
        return False


def admin_recipients() -> list[str]:
    raw = getattr(settings, "ADMIN_EMAILS", "") or ""
    if isinstance(raw, (list, tuple)):
        return [e.strip() for e in raw if e and e.strip()]
    return [e.strip() for e in raw.split(",") if e.strip()]


def send_notification(kind: str, to: str, subject: str, template: str, context: dict,
                      recipient_name: str = "", metadata: dict | None = None) -> bool:
    """Render ``<template>.txt`` (+ ``.html`` when present) and send it to ``to``.

    Returns True when the message was handed to the backend.
    """
    log = NotificationLog.objects.create(
        notification_type=kind,
        recipient_email=to,
        recipient_name=(recipient_name or "")[:100],
        subject=subject[:255],
        metadata=metadata or {},
    )
    try:
        text = render_to_string(f"{template}.txt", context)
        msg = EmailMultiAlternatives(subject, text, FROM, [to])
        if _template_exists(f"{template}.html"):
            msg.attach_alternative(render_to_string(f"{template}.html", context), "text/html")
        sent = msg.send(fail_silently=_fail_silently())
    except Exception as exc:
        logger.exception("Failed to send %s notification to %s", kind, to)
        log.status = NotificationLog.STATUS_FAILED
        log.error_message = str(exc)[:2000]
        log.save(update_fields=["status", "error_message"])
        return False

    if sent:
        log.status = NotificationLog.STATUS_SENT
        log.save(update_fields=["status"])
        return True
    log.status = NotificationLog.STATUS_FAILED
    log.error_message = "Backend reported no message sent"
    log.save(update_fields=["status", "error_message"])
    logger.error("Backend did not send %s notification to %s", kind, to)
    return False


def _send_to_admins(kind: str, subject: str, template: str, context: dict, metadata: dict) -> bool:
    recipients = admin_recipients()
    if not recipients:
        logger.error("ADMIN_EMAILS is not configured; skipping %s notification", kind)
        return False
    results = [
        send_notification(kind, to, subject, template, context, recipient_name="Admin", metadata=metadata)
        for to in recipients
    ]
    return all(results)


def send_sponsorship_notification(sponsorship) -> dict:
    """Notify admins and the sponsor about an approved sponsorship."""
    sponsor = sponsorship.sponsor
    orphan = sponsorship.orphan
    request_obj = getattr(sponsorship, "request", None)
    context = {
        "sponsorship": sponsorship,
        "sponsor": sponsor,
        "orphan": orphan,
        "total_amount": sponsorship.total_amount,
        "has_receipt_image": bool(request_obj and request_obj.transfer_receipt),
        "site_url": settings.SITE_URL,
    }
    metadata = {
        "sponsorship_id": sponsorship.pk,
        "receipt_number": sponsorship.receipt_number,
        "orphan": orphan.full_name,
    }
    results = {
        "admin": _send_to_admins(
            NotificationLog.TYPE_SPONSORSHIP_ADMIN,
            f"New sponsorship - {orphan.full_name}",
            "emails/sponsorship_admin",
            context,
            metadata,
        ),
        "sponsor": False,
    }
    if sponsor.email:
        results["sponsor"] = send_notification(
            NotificationLog.TYPE_SPONSORSHIP_SPONSOR,
            sponsor.email,
            f"Thank you for sponsoring {orphan.full_name}",
            "emails/sponsorship_sponsor",
            context,
            recipient_name=sponsor.full_name,
            metadata=metadata,
        )
    return results


def send_request_notification(sponsorship_request) -> bool:
    """Tell admins a new sponsorship request is waiting for review."""
    context = {
        "req": sponsorship_request,
        "orphan": sponsorship_request.orphan,
        "site_url": settings.SITE_URL,
    }
    return _send_to_admins(
        NotificationLog.TYPE_REQUEST_ADMIN,
        f"New sponsorship request - {sponsorship_request.orphan.full_name}",
        "emails/request_admin",
        context,
        {"request_id": sponsorship_request.pk},
    )


def send_deposit_notification(deposit) -> dict:
    """Notify admins about a deposit receipt request and acknowledge it to the user."""
    context = {"deposit": deposit, "site_url": settings.SITE_URL}
    metadata = {"deposit_id": deposit.pk}
    results = {
        "admin": _send_to_admins(
            NotificationLog.TYPE_DEPOSIT_ADMIN,
            f"New deposit receipt request - {deposit.sponsor_name}",
            "emails/deposit_admin",
            context,
            metadata,
        ),
        "sponsor": False,
    }
    user_email = getattr(deposit.user, "email", "") if deposit.user_id else ""
    if user_email:
        results["sponsor"] = send_notification(
            NotificationLog.TYPE_DEPOSIT_SPONSOR,
            user_email,
            "We received your deposit receipt request",
            "emails/deposit_sponsor",
            context,
            recipient_name=deposit.sponsor_name,
            metadata=metadata,
        )
    return results


def send_invitation_email(*, user, role: str, link: str, invited_by=None) -> bool:
    context = {
        "user": user,
        "role": role,
        "link": link,
        "invited_by": invited_by,
    }
    return send_notification(
        NotificationLog.TYPE_INVITATION,
        user.email,
        "You have been invited to Kafala",
        "emails/invitation",
        context,
        recipient_name=user.get_full_name(),
        metadata={"role": role, "user_id": user.pk},
    )
