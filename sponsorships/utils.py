import secrets
from decimal import ROUND_HALF_UP, Decimal

from django.utils import timezone

CENT = Decimal("0.01")


def normalize_email(email: str | None) -> str | None:
    return email.strip().lower() if email and email.strip() else None


def _receipt_candidate() -> str:
    # e.g., RCP-20260118-0042
    today = timezone.localdate()
    return f"RCP-{today:%Y%m%d}-{secrets.randbelow(10_000):04d}"


def generate_receipt_number() -> str:
    from .models import Receipt, Sponsorship

    number = _receipt_candidate()
    while (
        Sponsorship.objects.filter(receipt_number=number).exists()
        or Receipt.objects.filter(receipt_number=number).exists()
    ):
        number = _receipt_candidate()
    return number


def to_money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def period_total(monthly_amount, sponsorship_type: str) -> Decimal:
    """Amount charged for one period: the monthly amount, or twelve of them for yearly."""
    months = 12 if sponsorship_type == "yearly" else 1
    return to_money(Decimal(monthly_amount) * months)


def monthly_from_total(amount, sponsorship_type: str) -> Decimal:
    if sponsorship_type == "yearly":
        return to_money(Decimal(amount) / 12)
    return to_money(amount)
