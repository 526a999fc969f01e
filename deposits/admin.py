from django.contrib import admin

from accounts.admin import AdminOnlyAdmin, RoleGatedAdmin

from .models import BankAccount, DepositReceiptRequest


@admin.register(DepositReceiptRequest)
class DepositReceiptRequestAdmin(RoleGatedAdmin):
    list_display = ("id", "sponsor_name", "phone_number", "deposit_amount", "bank_method", "status", "created_at")
    search_fields = ("sponsor_name", "phone_number", "bank_method")
    list_filter = ("status", "created_at")
    raw_id_fields = ("user",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(BankAccount)
class BankAccountAdmin(AdminOnlyAdmin):
    list_display = ("bank_name", "beneficiary_name", "iban", "is_active", "display_order")
    list_editable = ("is_active", "display_order")
    search_fields = ("bank_name", "iban", "account_number", "beneficiary_name")
    list_filter = ("is_active",)
