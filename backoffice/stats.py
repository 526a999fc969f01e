"""Dashboard figures.

Legacy orphan statuses are folded into ``partial`` and ``full`` when
counting, so rows saved before the status rename are not lost.
"""
from datetime import date

from django.db.models import Count, Q, Sum
from django.utils import timezone

from orphans.models import Orphan
from sponsorships.models import Receipt, Sponsor, Sponsorship

PARTIAL_STATUSES = [Orphan.STATUS_PARTIAL, "partially_sponsored"]
FULL_STATUSES = [Orphan.STATUS_FULL, "fully_sponsored", "sponsored"]

AGE_GROUPS = [
    ("0-5", Q(age__gte=0, age__lte=5)),
    ("6-10", Q(age__gte=6, age__lte=10)),
    ("11-15", Q(age__gte=11, age__lte=15)),
    ("16-18", Q(age__gte=16, age__lte=18)),
    ("18+", Q(age__gt=18)),
]


def orphan_stats() -> dict:
    counts = Orphan.objects.aggregate(
        total=Count("id"),
        available=Count("id", filter=Q(status=Orphan.STATUS_AVAILABLE)),
        sponsored=Count("id", filter=Q(status__in=FULL_STATUSES)),
    )
    return {
        "total_orphans": counts["total"],
        "available_orphans": counts["available"],
        "sponsored_orphans": counts["sponsored"],
        "total_sponsors": Sponsor.objects.count(),
        "active_sponsorships": Sponsorship.objects.filter(status=Sponsorship.STATUS_ACTIVE).count(),
    }


def _month_start(day: date, months_back: int) -> date:
    year, month = day.year, day.month - months_back
    while month < 1:
        month += 12
        year -= 1
    return date(year, month, 1)


def _next_month(day: date) -> date:
    return date(day.year + 1, 1, 1) if day.month == 12 else date(day.year, day.month + 1, 1)


def monthly_revenue(months: int = 6, today: date | None = None) -> list[dict]:
    """Receipt totals for the last ``months`` calendar months, oldest first."""
    today = today or timezone.localdate()
    rows = []
    for back in range(months - 1, -1, -1):
        start = _month_start(today, back)
        total = (
            Receipt.objects.filter(issue_date__gte=start, issue_date__lt=_next_month(start))
            .aggregate(total=Sum("amount"))["total"]
        )
        rows.append({"month": start.strftime("%b %Y"), "amount": float(total or 0)})
    return rows


def dashboard_chart_data(today: date | None = None) -> dict:
    orphans = Orphan.objects.all()
    sponsorships = Sponsorship.objects.all()

    gender = [
        {"name": label, "value": orphans.filter(gender=value).count()}
        for value, label in Orphan.GENDER_CHOICES
    ]
    status = [
        {"name": "Available", "value": orphans.filter(status=Orphan.STATUS_AVAILABLE).count()},
        {"name": "Partial", "value": orphans.filter(status__in=PARTIAL_STATUSES).count()},
        {"name": "Sponsored", "value": orphans.filter(status__in=FULL_STATUSES).count()},
    ]
    age_groups = [{"name": name, "value": orphans.filter(cond).count()} for name, cond in AGE_GROUPS]
    sponsorship_types = [
        {"name": label, "value": sponsorships.filter(type=value).count()}
        for value, label in Sponsorship._meta.get_field("type").choices
    ]
    sponsorship_status = [
        {"name": label, "value": sponsorships.filter(status=value).count()}
        for value, label in Sponsorship.STATUS_CHOICES
    ]
    top_countries = [
        {"name": row["country"] or "Unknown", "value": row["n"]}
        for row in orphans.values("country").annotate(n=Count("id")).order_by("-n", "country")[:5]
    ]
    total_monthly = orphans.aggregate(total=Sum("monthly_amount"))["total"] or 0
    total_received = Receipt.objects.aggregate(total=Sum("amount"))["total"] or 0

    return {
        "gender": gender,
        "status": status,
        "age_groups": age_groups,
        "sponsorship_types": sponsorship_types,
        "sponsorship_status": sponsorship_status,
        "monthly_revenue": monthly_revenue(today=today),
        "top_countries": top_countries,
        "total_monthly_amount": float(total_monthly),
        "total_received_amount": float(total_received),
    }
