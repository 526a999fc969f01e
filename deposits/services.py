import logging

from django.core.cache import cache
from django.db import transaction

from accounts.utils import normalize_phone
from sponsorships.exceptions import InvalidTransition

from .models import BankAccount, DepositReceiptRequest

logger = logging.getLogger(__name__)

BANK_ACCOUNTS_CACHE_KEY = "deposits:active-bank-accounts"
BANK_ACCOUNTS_CACHE_TIMEOUT = 60 * 10


def active_bank_accounts() -> list:
    accounts = cache.get(BANK_ACCOUNTS_CACHE_KEY)
    if accounts is None:
        accounts = list(BankAccount.objects.filter(is_active=True).order_by("display_order", "id"))
        cache.set(BANK_ACCOUNTS_CACHE_KEY, accounts, BANK_ACCOUNTS_CACHE_TIMEOUT)
    return accounts


def invalidate_bank_accounts() -> None:
    cache.delete(BANK_ACCOUNTS_CACHE_KEY)


def submit_deposit_request(user, data: dict, receipt_image=None) -> DepositReceiptRequest:
    from notifications.services import send_deposit_notification

    deposit = DepositReceiptRequest(
        user=user,
        sponsor_name=data["sponsor_name"],
        phone_number=normalize_phone(data["phone_number"]),
        deposit_amount=data["deposit_amount"],
        bank_method=data["bank_method"],
    )
    if receipt_image:
        deposit.receipt_image = receipt_image
    deposit.save()
    logger.info("Deposit receipt request %s submitted by user %s", deposit.pk, user.pk)

    transaction.on_commit(lambda: send_deposit_notification(deposit))
    return deposit


@transaction.atomic
def update_deposit_status(deposit_id: int, status: str, notes: str | None = None) -> DepositReceiptRequest:
    if status not in dict(DepositReceiptRequest.STATUS_CHOICES):
        raise InvalidTransition(f"Unknown deposit status: {status}")
    deposit = DepositReceiptRequest.objects.select_for_update().get(pk=deposit_id)
    deposit.status = status
    if notes is not None:
        deposit.notes = notes
    deposit.save(update_fields=["status", "notes", "updated_at"])
    logger.info("Deposit request %s marked %s", deposit.pk, status)
    return deposit
