from django.core.management.base import BaseCommand
from django.db.models import Sum

from orphans.models import Orphan
from orphans.services import refresh_orphan_status, status_for_coverage
from sponsorships.models import Sponsorship


class Command(BaseCommand):
    help = "Recompute orphan statuses from their active sponsorships"

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Report changes without saving them")

    def handle(self, *args, **opts):
        cnt = 0
        changed = 0
        for orphan in Orphan.objects.exclude(status=Orphan.STATUS_INACTIVE).order_by("pk"):
            cnt += 1
            before = orphan.status
            if opts["dry_run"]:
                covered = (
                    orphan.sponsorships.filter(status=Sponsorship.STATUS_ACTIVE)
                    .aggregate(total=Sum("monthly_amount"))["total"]
                )
                after = status_for_coverage(covered, orphan.monthly_amount)
            else:
                after = refresh_orphan_status(orphan)
            if after != before:
                changed += 1
                self.stdout.write(self.style.SUCCESS(f"Orphan {orphan.pk} ({orphan.full_name}): {before} -> {after}"))

        verb = "would change" if opts["dry_run"] else "updated"
        self.stdout.write(self.style.SUCCESS(f"Checked {cnt}, {verb} {changed} orphans."))
