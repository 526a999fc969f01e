from django.conf import settings
from django.db import models

from kafala.files import UploadPath, get_private_storage, signed_file_url


class DepositReceiptRequest(models.Model):
    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name="deposit_requests")
    sponsor_name = models.CharField(max_length=100)
    phone_number = models.CharField(max_length=20)
    deposit_amount = models.DecimalField(max_digits=10, decimal_places=2)
    bank_method = models.CharField(max_length=200)
    receipt_image = models.FileField(storage=get_private_storage, upload_to=UploadPath("deposit-receipts"), blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self):
        return f"{self.sponsor_name} - {self.deposit_amount} ({self.status})"

    @property
    def receipt_image_url(self) -> str | None:
        return signed_file_url(self.receipt_image.name) if self.receipt_image else None


class BankAccount(models.Model):
    bank_name = models.CharField(max_length=100)
    account_number = models.CharField(max_length=50, blank=True)
    iban = models.CharField(max_length=50, blank=True)
    beneficiary_name = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("display_order", "id")

    def __str__(self):
        return self.bank_name

    def save(self, *args, **kwargs):
        from .services import invalidate_bank_accounts

        super().save(*args, **kwargs)
        invalidate_bank_accounts()

    def delete(self, *args, **kwargs):
        from .services import invalidate_bank_accounts

        result = super().delete(*args, **kwargs)
        invalidate_bank_accounts()
        return result
