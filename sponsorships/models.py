from django.conf import settings
from django.db import models

from kafala.files import UploadPath, get_private_storage, signed_file_url
from orphans.models import Orphan

from .utils import period_total

TYPE_MONTHLY = "monthly"
TYPE_YEARLY = "yearly"
TYPE_CHOICES = [
    (TYPE_MONTHLY, "Monthly"),
    (TYPE_YEARLY, "Yearly"),
]

PAYMENT_BANK_TRANSFER = "bank_transfer"
PAYMENT_CASH = "cash"
PAYMENT_CARD = "credit_card"
PAYMENT_METHOD_CHOICES = [
    (PAYMENT_BANK_TRANSFER, "Bank transfer"),
    (PAYMENT_CASH, "Cash"),
    (PAYMENT_CARD, "Credit card"),
]


class Sponsor(models.Model):
    CONTACT_CHOICES = [
        ("email", "Email"),
        ("phone", "Phone"),
        ("whatsapp", "WhatsApp"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="sponsor"
    )
    full_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    email_norm = models.EmailField(unique=True, null=True, blank=True)
    phone = models.CharField(max_length=20, blank=True, db_index=True)
    country = models.CharField(max_length=100, blank=True)
    preferred_contact = models.CharField(max_length=10, choices=CONTACT_CHOICES, default="email")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self):
        return self.full_name


class SponsorshipRequest(models.Model):
    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    sponsor_full_name = models.CharField(max_length=100)
    sponsor_phone = models.CharField(max_length=20, db_index=True)
    sponsor_email = models.EmailField(blank=True)
    sponsor_country = models.CharField(max_length=100, blank=True)
    orphan = models.ForeignKey(Orphan, on_delete=models.PROTECT, related_name="sponsorship_requests")
    sponsorship_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_MONTHLY)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default=PAYMENT_BANK_TRANSFER)
    transfer_receipt = models.FileField(
        storage=get_private_storage, upload_to=UploadPath("transfer-receipts"), blank=True
    )
    admin_status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    admin_notes = models.TextField(blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    cash_receipt = models.FileField(
        storage=get_private_storage, upload_to=UploadPath("cash-receipts"), blank=True
    )
    cash_receipt_number = models.CharField(max_length=100, blank=True)
    cash_receipt_date = models.DateField(null=True, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="sponsorship_requests"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self):
        return f"{self.sponsor_full_name} -> {self.orphan} ({self.admin_status})"

    @property
    def is_approved(self) -> bool:
        return self.admin_status == self.STATUS_APPROVED

    @property
    def transfer_receipt_url(self) -> str | None:
        return signed_file_url(self.transfer_receipt.name) if self.transfer_receipt else None

    @property
    def cash_receipt_url(self) -> str | None:
        return signed_file_url(self.cash_receipt.name) if self.cash_receipt else None


class Sponsorship(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_PAUSED = "paused"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_PAUSED, "Paused"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    orphan = models.ForeignKey(Orphan, on_delete=models.PROTECT, related_name="sponsorships")
    sponsor = models.ForeignKey(Sponsor, on_delete=models.PROTECT, related_name="sponsorships")
    request = models.OneToOneField(
        SponsorshipRequest, null=True, blank=True, on_delete=models.SET_NULL, related_name="sponsorship"
    )
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_MONTHLY)
    monthly_amount = models.DecimalField(max_digits=10, decimal_places=2)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default=PAYMENT_BANK_TRANSFER)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    receipt_number = models.CharField(max_length=32, unique=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self):
        return f"{self.receipt_number}: {self.sponsor} -> {self.orphan}"

    @property
    def total_amount(self):
        return period_total(self.monthly_amount, self.type)


class Receipt(models.Model):
    sponsorship = models.ForeignKey(Sponsorship, on_delete=models.CASCADE, related_name="receipts")
    receipt_number = models.CharField(max_length=32, unique=True)
    issue_date = models.DateField()
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_reference = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-issue_date", "-id")

    def __str__(self):
        return self.receipt_number
