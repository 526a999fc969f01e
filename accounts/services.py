import logging
from dataclasses import dataclass

from django.conf import settings
from django.contrib.auth.models import User
from django.contrib.auth.tokens import default_token_generator
from django.db import transaction
from django.urls import reverse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from .models import Profile, UserRole
from .roles import set_role
from .utils import generate_username

logger = logging.getLogger(__name__)


@dataclass
class InviteResult:
    user: User
    role: str
    updated_existing: bool
    email_sent: bool = False


@transaction.atomic
def create_account(*, full_name: str, email: str, phone: str, password: str) -> User:
    """Create a sponsor account with its profile and role."""
    user = User.objects.create_user(username=generate_username(), email=email, password=password)
    Profile.objects.create(user=user, full_name=full_name, phone=phone, email=email)
    set_role(user, UserRole.SPONSOR)
    logger.info("Account created for %s", email)
    return user


def set_password_url(user, base_url: str | None = None) -> str:
    uidb64 = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)
    path = reverse("accounts:set_password", kwargs={"uidb64": uidb64, "token": token})
    return (base_url or settings.SITE_URL).rstrip("/") + path


def invite_user(*, email: str, role: str, full_name: str = "", invited_by=None, base_url: str | None = None) -> InviteResult:
    """Grant ``role`` to the account owning ``email``, creating and inviting it when missing.

    An existing account only gets its role updated. A new account has an
    unusable password and receives an invitation email with a set-password
    link; email failures are logged by the notification layer.
    """
    from notifications.services import send_invitation_email

    email = (email or "").strip().lower()
    if role not in dict(UserRole.ROLE_CHOICES):
        raise ValueError(f"Unknown role: {role}")

    existing = User.objects.filter(email__iexact=email).first()
    if existing is not None:
        set_role(existing, role)
        logger.info("Role %s granted to existing user %s by %s", role, email, invited_by)
        return InviteResult(user=existing, role=role, updated_existing=True)

    with transaction.atomic():
        user = User.objects.create_user(username=generate_username(), email=email)
        user.set_unusable_password()
        user.save(update_fields=["password"])
        Profile.objects.create(user=user, full_name=full_name or email.split("@")[0], email=email)
        set_role(user, role)

    link = set_password_url(user, base_url=base_url)
    sent = send_invitation_email(user=user, role=role, link=link, invited_by=invited_by)
    logger.info("Invited %s as %s (email sent: %s)", email, role, sent)
    return InviteResult(user=user, role=role, updated_existing=False, email_sent=sent)
