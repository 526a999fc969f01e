"""Spreadsheet exports built with openpyxl."""
from datetime import date, datetime
from io import BytesIO

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from orphans.models import Orphan
from sponsorships.models import Receipt, Sponsor, Sponsorship

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _fmt(value):
    if value is None:
        return ""
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return value


def build_workbook(title: str, columns: list[tuple[str, str]], rows) -> Workbook:
    """``columns`` are ``(key, header)`` pairs; ``rows`` yield dicts keyed by ``key``."""
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]
    ws.append([header for _, header in columns])
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append([_fmt(row.get(key)) for key, _ in columns])
    for idx in range(1, len(columns) + 1):
        ws.column_dimensions[get_column_letter(idx)].width = 20
    return wb


def workbook_response(wb: Workbook, basename: str) -> HttpResponse:
    buf = BytesIO()
    wb.save(buf)
    filename = f"{basename}-{timezone.localdate():%Y-%m-%d}.xlsx"
    resp = HttpResponse(buf.getvalue(), content_type=XLSX_CONTENT_TYPE)
    resp["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


def orphans_workbook() -> Workbook:
    columns = [
        ("full_name", "Full name"),
        ("age", "Age"),
        ("gender", "Gender"),
        ("city", "City"),
        ("country", "Country"),
        ("status", "Status"),
        ("monthly_amount", "Monthly amount"),
        ("created_at", "Added"),
    ]
    rows = (
        {
            "full_name": o.full_name,
            "age": o.age,
            "gender": o.get_gender_display(),
            "city": o.city,
            "country": o.country,
            "status": o.get_status_display(),
            "monthly_amount": float(o.monthly_amount),
            "created_at": o.created_at,
        }
        for o in Orphan.objects.all()
    )
    return build_workbook("Orphans", columns, rows)


def sponsors_workbook() -> Workbook:
    columns = [
        ("full_name", "Full name"),
        ("email", "Email"),
        ("phone", "Phone"),
        ("country", "Country"),
        ("preferred_contact", "Preferred contact"),
        ("created_at", "Registered"),
    ]
    rows = (
        {
            "full_name": s.full_name,
            "email": s.email,
            "phone": s.phone,
            "country": s.country,
            "preferred_contact": s.get_preferred_contact_display(),
            "created_at": s.created_at,
        }
        for s in Sponsor.objects.all()
    )
    return build_workbook("Sponsors", columns, rows)


def sponsorships_workbook() -> Workbook:
    columns = [
        ("orphan_name", "Orphan"),
        ("sponsor_name", "Sponsor"),
        ("type", "Type"),
        ("monthly_amount", "Monthly amount"),
        ("status", "Status"),
        ("payment_method", "Payment method"),
        ("start_date", "Start date"),
        ("receipt_number", "Receipt number"),
    ]
    rows = (
        {
            "orphan_name": sp.orphan.full_name,
            "sponsor_name": sp.sponsor.full_name,
            "type": sp.get_type_display(),
            "monthly_amount": float(sp.monthly_amount),
            "status": sp.get_status_display(),
            "payment_method": sp.get_payment_method_display(),
            "start_date": sp.start_date,
            "receipt_number": sp.receipt_number,
        }
        for sp in Sponsorship.objects.select_related("orphan", "sponsor")
    )
    return build_workbook("Sponsorships", columns, rows)


def receipts_workbook() -> Workbook:
    columns = [
        ("receipt_number", "Receipt number"),
        ("sponsor_name", "Sponsor"),
        ("orphan_name", "Orphan"),
        ("amount", "Amount"),
        ("payment_reference", "Payment reference"),
        ("issue_date", "Issue date"),
    ]
    rows = (
        {
            "receipt_number": r.receipt_number,
            "sponsor_name": r.sponsorship.sponsor.full_name,
            "orphan_name": r.sponsorship.orphan.full_name,
            "amount": float(r.amount),
            "payment_reference": r.payment_reference,
            "issue_date": r.issue_date,
        }
        for r in Receipt.objects.select_related("sponsorship__sponsor", "sponsorship__orphan")
    )
    return build_workbook("Receipts", columns, rows)


EXPORTS = {
    "orphans": orphans_workbook,
    "sponsors": sponsors_workbook,
    "sponsorships": sponsorships_workbook,
    "receipts": receipts_workbook,
}
