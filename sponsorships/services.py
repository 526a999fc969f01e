import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from accounts.utils import normalize_phone
from orphans.models import Orphan
from orphans.services import refresh_orphan_status

from .exceptions import InvalidTransition, OrphanUnavailable
from .models import (
    PAYMENT_BANK_TRANSFER,
    Receipt,
    Sponsor,
    Sponsorship,
    SponsorshipRequest,
)
from .utils import generate_receipt_number, monthly_from_total, normalize_email, period_total

logger = logging.getLogger(__name__)


@transaction.atomic
def get_or_create_sponsor(full_name: str, email: str | None = None, phone: str | None = None,
                          country: str = "", preferred_contact: str = "", user=None) -> Sponsor:
    email_norm = normalize_email(email)
    phone_norm = normalize_phone(phone)

    sponsor = None
    if email_norm:
        sponsor = Sponsor.objects.select_for_update().filter(email_norm=email_norm).first()
    if sponsor is None and phone_norm:
        sponsor = Sponsor.objects.select_for_update().filter(phone=phone_norm).first()

    if user is not None and Sponsor.objects.filter(user=user).exclude(pk=getattr(sponsor, "pk", None)).exists():
        # One sponsor per user; the other row keeps the link
        user = None

    if sponsor is None:
        return Sponsor.objects.create(
            full_name=full_name or "",
            email=email or "",
            email_norm=email_norm,
            phone=phone_norm,
            country=country or "",
            preferred_contact=preferred_contact or "email",
            user=user,
        )

    changed = False
    if not sponsor.email and email:
        sponsor.email = email; changed = True
    if email_norm and not sponsor.email_norm:
        sponsor.email_norm = email_norm; changed = True
    if not sponsor.phone and phone_norm:
        sponsor.phone = phone_norm; changed = True
    if not sponsor.country and country:
        sponsor.country = country; changed = True
    if full_name and (not sponsor.full_name or len(full_name) > len(sponsor.full_name)):
        sponsor.full_name = full_name; changed = True
    if user is not None and sponsor.user_id is None:
        sponsor.user = user; changed = True
    if changed:
        sponsor.save()
    return sponsor


def submit_request(orphan: Orphan, data: dict, user=None, transfer_receipt=None) -> SponsorshipRequest:
    """Record a public sponsorship request and notify the admins.

    ``data`` carries cleaned form values: sponsor_full_name, sponsor_phone,
    sponsor_email, sponsor_country and sponsorship_type.
    """
    from notifications.services import send_request_notification

    if not orphan.accepts_requests:
        raise OrphanUnavailable("This orphan is not accepting new sponsorships.")

    sponsorship_type = data.get("sponsorship_type") or "monthly"
    req = SponsorshipRequest(
        sponsor_full_name=data["sponsor_full_name"],
        sponsor_phone=normalize_phone(data["sponsor_phone"]),
        sponsor_email=(data.get("sponsor_email") or "").strip().lower(),
        sponsor_country=data.get("sponsor_country") or "",
        orphan=orphan,
        sponsorship_type=sponsorship_type,
        amount=period_total(orphan.monthly_amount, sponsorship_type),
        payment_method=data.get("payment_method") or PAYMENT_BANK_TRANSFER,
        user=user if user is not None and user.is_authenticated else None,
    )
    if transfer_receipt:
        req.transfer_receipt = transfer_receipt
    req.save()
    logger.info("Sponsorship request %s submitted for orphan %s", req.pk, orphan.pk)

    transaction.on_commit(lambda: send_request_notification(req))
    return req


def approve_request(request_id: int, by_user=None, notes: str = "") -> Sponsorship:
    """Approve a request and materialise its sponsor, sponsorship and receipt.

    Runs in one transaction with the request row locked. Approving an
    already approved request refreshes the same rows and sends nothing.
    """
    from notifications.services import send_sponsorship_notification

    with transaction.atomic():
        req = SponsorshipRequest.objects.select_for_update().select_related("orphan").get(pk=request_id)
        first_approval = not req.is_approved
        if req.orphan.is_inactive:
            raise OrphanUnavailable("This orphan is inactive and cannot be sponsored.")

        now = timezone.now()
        if first_approval:
            req.admin_status = SponsorshipRequest.STATUS_APPROVED
            req.approved_at = now
            req.approved_by = by_user
        if notes:
            req.admin_notes = notes
        req.save()

        sponsor = get_or_create_sponsor(
            req.sponsor_full_name,
            email=req.sponsor_email,
            phone=req.sponsor_phone,
            country=req.sponsor_country,
            user=req.user,
        )

        monthly = monthly_from_total(req.amount, req.sponsorship_type)
        sponsorship = Sponsorship.objects.select_for_update().filter(request=req).first()
        if sponsorship is None:
            sponsorship = Sponsorship.objects.create(
                request=req,
                orphan=req.orphan,
                sponsor=sponsor,
                type=req.sponsorship_type,
                monthly_amount=monthly,
                start_date=timezone.localdate(),
                payment_method=req.payment_method,
                status=Sponsorship.STATUS_ACTIVE,
                receipt_number=generate_receipt_number(),
                approved_at=req.approved_at or now,
                approved_by=req.approved_by,
            )
        else:
            sponsorship.orphan = req.orphan
            sponsorship.sponsor = sponsor
            sponsorship.type = req.sponsorship_type
            sponsorship.monthly_amount = monthly
            sponsorship.payment_method = req.payment_method
            sponsorship.save()

        receipt = Receipt.objects.filter(receipt_number=sponsorship.receipt_number).first()
        if receipt is None:
            Receipt.objects.create(
                sponsorship=sponsorship,
                receipt_number=sponsorship.receipt_number,
                issue_date=timezone.localdate(),
                amount=req.amount,
                payment_reference=req.cash_receipt_number,
            )
        else:
            receipt.sponsorship = sponsorship
            receipt.amount = req.amount
            receipt.payment_reference = req.cash_receipt_number
            receipt.save()

        refresh_orphan_status(req.orphan)

        if first_approval:
            transaction.on_commit(lambda: send_sponsorship_notification(sponsorship))

    logger.info("Sponsorship request %s approved by %s -> %s", req.pk, by_user, sponsorship.receipt_number)
    return sponsorship


@transaction.atomic
def reject_request(request_id: int, by_user=None, notes: str = "") -> SponsorshipRequest:
    notes = (notes or "").strip()
    if not notes:
        raise InvalidTransition("A rejection reason is required.")
    req = SponsorshipRequest.objects.select_for_update().get(pk=request_id)
    if req.is_approved:
        raise InvalidTransition("An approved request cannot be rejected.")
    req.admin_status = SponsorshipRequest.STATUS_REJECTED
    req.admin_notes = notes
    req.save(update_fields=["admin_status", "admin_notes", "updated_at"])
    logger.info("Sponsorship request %s rejected by %s", req.pk, by_user)
    return req


@transaction.atomic
def attach_cash_receipt(request_id: int, upload=None, number: str = "", date=None) -> SponsorshipRequest:
    """Store the scanned cash receipt and its number; an approved request's receipt follows the number."""
    req = SponsorshipRequest.objects.select_for_update().get(pk=request_id)
    if upload:
        if req.cash_receipt:
            req.cash_receipt.delete(save=False)
        req.cash_receipt = upload
    if number:
        req.cash_receipt_number = number.strip()
    if date:
        req.cash_receipt_date = date
    req.save()

    if req.is_approved and req.cash_receipt_number:
        sponsorship = Sponsorship.objects.filter(request=req).first()
        if sponsorship is not None:
            Receipt.objects.filter(receipt_number=sponsorship.receipt_number).update(
                payment_reference=req.cash_receipt_number
            )
    return req


@transaction.atomic
def create_sponsorship(sponsor_data: dict, orphan: Orphan, sponsorship_type: str,
                       payment_method: str, monthly_amount, by_user=None) -> Sponsorship:
    """Staff entry of a sponsorship agreed outside the request form."""
    if orphan.is_inactive:
        raise OrphanUnavailable("This orphan is inactive and cannot be sponsored.")
    sponsor = get_or_create_sponsor(
        sponsor_data.get("full_name", ""),
        email=sponsor_data.get("email"),
        phone=sponsor_data.get("phone"),
        country=sponsor_data.get("country", ""),
        preferred_contact=sponsor_data.get("preferred_contact", ""),
    )
    sponsorship = Sponsorship.objects.create(
        orphan=orphan,
        sponsor=sponsor,
        type=sponsorship_type,
        monthly_amount=monthly_amount,
        start_date=timezone.localdate(),
        payment_method=payment_method,
        status=Sponsorship.STATUS_ACTIVE,
        receipt_number=generate_receipt_number(),
        approved_at=timezone.now(),
        approved_by=by_user,
    )
    Receipt.objects.create(
        sponsorship=sponsorship,
        receipt_number=sponsorship.receipt_number,
        issue_date=timezone.localdate(),
        amount=period_total(monthly_amount, sponsorship_type),
    )
    refresh_orphan_status(orphan)
    logger.info("Sponsorship %s created by %s", sponsorship.receipt_number, by_user)
    return sponsorship


@transaction.atomic
def update_sponsorship_status(sponsorship: Sponsorship, status: str) -> Sponsorship:
    if status not in dict(Sponsorship.STATUS_CHOICES):
        raise InvalidTransition(f"Unknown sponsorship status: {status}")
    sponsorship.status = status
    if status in (Sponsorship.STATUS_COMPLETED, Sponsorship.STATUS_CANCELLED) and not sponsorship.end_date:
        sponsorship.end_date = timezone.localdate()
    sponsorship.save()
    refresh_orphan_status(sponsorship.orphan)
    return sponsorship


@transaction.atomic
def create_receipt(sponsorship: Sponsorship, amount, payment_reference: str = "", issue_date=None) -> Receipt:
    return Receipt.objects.create(
        sponsorship=sponsorship,
        receipt_number=generate_receipt_number(),
        issue_date=issue_date or timezone.localdate(),
        amount=amount,
        payment_reference=payment_reference or "",
    )


def lookup_receipt(name: str, phone: str) -> SponsorshipRequest | None:
    """Latest approved request matching part of the sponsor name and the exact phone."""
    name = (name or "").strip()
    phone = normalize_phone(phone)
    if not name or not phone:
        return None
    return (
        SponsorshipRequest.objects.filter(
            admin_status=SponsorshipRequest.STATUS_APPROVED,
            sponsor_full_name__icontains=name,
            sponsor_phone=phone,
        )
        .select_related("orphan")
        .order_by("-approved_at", "-created_at")
        .first()
    )


def receipts_for_user(user):
    if not user or not user.is_authenticated:
        return Receipt.objects.none()
    return (
        Receipt.objects.filter(Q(sponsorship__sponsor__user=user) | Q(sponsorship__request__user=user))
        .select_related("sponsorship__orphan", "sponsorship__sponsor")
        .distinct()
        .order_by("-issue_date", "-id")
    )


def user_can_view_sponsorship(user, sponsorship: Sponsorship) -> bool:
    from accounts.roles import is_admin_or_staff

    if not user or not user.is_authenticated:
        return False
    if is_admin_or_staff(user):
        return True
    if sponsorship.sponsor.user_id == user.pk:
        return True
    return bool(sponsorship.request_id and sponsorship.request.user_id == user.pk)
