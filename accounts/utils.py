import uuid

from django.contrib.auth.models import User


def normalize_phone(phone: str | None) -> str:
    """Keep digits and a leading plus sign."""
    phone = (phone or "").strip()
    digits = "".join(ch for ch in phone if ch.isdigit())
    if phone.startswith("+") and digits:
        return f"+{digits}"
    return digits


def phone_digit_count(phone: str | None) -> int:
    return sum(1 for ch in (phone or "") if ch.isdigit())


def generate_username() -> str:
    base = f"U{uuid.uuid4().hex[:10].upper()}"
    while User.objects.filter(username=base).exists():
        base = f"U{uuid.uuid4().hex[:10].upper()}"
    return base


def clean_phone(value: str) -> str:
    """Return the normalised phone or raise ``ValidationError`` unless it has 10-15 digits."""
    from django.core.exceptions import ValidationError

    count = phone_digit_count(value)
    if count < 10 or count > 15:
        raise ValidationError("Enter a phone number with 10 to 15 digits.")
    return normalize_phone(value)


def clean_full_name(value: str) -> str:
    from django.core.exceptions import ValidationError

    value = " ".join((value or "").split())
    if len(value) < 3 or len(value) > 100:
        raise ValidationError("Name must be between 3 and 100 characters.")
    return value
