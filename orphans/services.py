import logging
from decimal import Decimal

from django.db.models import Sum

from .models import Orphan

logger = logging.getLogger(__name__)


def status_for_coverage(covered, monthly_amount) -> str:
    covered = Decimal(covered or 0)
    if monthly_amount and covered >= Decimal(monthly_amount):
        return Orphan.STATUS_FULL
    if covered > 0:
        return Orphan.STATUS_PARTIAL
    return Orphan.STATUS_AVAILABLE


def refresh_orphan_status(orphan: Orphan) -> str:
    """Recompute ``orphan.status`` from its active sponsorships and persist it.

    Inactive orphans keep their status.
    """
    from sponsorships.models import Sponsorship

    if orphan.is_inactive:
        return orphan.status
    covered = (
        Sponsorship.objects.filter(orphan=orphan, status=Sponsorship.STATUS_ACTIVE)
        .aggregate(total=Sum("monthly_amount"))["total"]
    )
    status = status_for_coverage(covered, orphan.monthly_amount)
    if status != orphan.status:
        logger.info("Orphan %s status %s -> %s", orphan.pk, orphan.status, status)
        orphan.status = status
        orphan.save(update_fields=["status", "updated_at"])
    return status
