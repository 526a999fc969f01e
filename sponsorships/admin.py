from django.contrib import admin

from accounts.admin import RoleGatedAdmin
from orphans.models import Orphan
from orphans.services import refresh_orphan_status

from .models import Receipt, Sponsor, Sponsorship, SponsorshipRequest


@admin.register(Sponsor)
class SponsorAdmin(RoleGatedAdmin):
    list_display = ("id", "full_name", "email_norm", "phone", "country", "user", "created_at")
    search_fields = ("full_name", "email", "email_norm", "phone")
    list_filter = ("preferred_contact", "country")
    raw_id_fields = ("user",)
    readonly_fields = ("created_at", "updated_at")

    def save_model(self, request, obj, form, change):
        from .utils import normalize_email

        obj.email_norm = normalize_email(obj.email)
        super().save_model(request, obj, form, change)


class ReceiptInline(admin.TabularInline):
    model = Receipt
    extra = 0
    readonly_fields = ("created_at",)


@admin.register(Sponsorship)
class SponsorshipAdmin(RoleGatedAdmin):
    list_display = ("receipt_number", "sponsor", "orphan", "type", "monthly_amount", "status", "start_date")
    search_fields = ("receipt_number", "sponsor__full_name", "orphan__full_name")
    list_filter = ("status", "type", "payment_method")
    raw_id_fields = ("orphan", "sponsor", "request", "approved_by")
    readonly_fields = ("created_at", "updated_at")
    inlines = [ReceiptInline]

    def save_model(self, request, obj, form, change):
        previous_orphan_id = None
        if change:
            previous_orphan_id = Sponsorship.objects.filter(pk=obj.pk).values_list("orphan_id", flat=True).first()
        super().save_model(request, obj, form, change)
        refresh_orphan_status(obj.orphan)
        if previous_orphan_id and previous_orphan_id != obj.orphan_id:
            refresh_orphan_status(Orphan.objects.get(pk=previous_orphan_id))

    def delete_model(self, request, obj):
        orphan = obj.orphan
        super().delete_model(request, obj)
        refresh_orphan_status(orphan)

    def delete_queryset(self, request, queryset):
        orphans = {s.orphan_id: s.orphan for s in queryset.select_related("orphan")}
        super().delete_queryset(request, queryset)
        for orphan in orphans.values():
            refresh_orphan_status(orphan)


@admin.register(SponsorshipRequest)
class SponsorshipRequestAdmin(RoleGatedAdmin):
    list_display = ("id", "sponsor_full_name", "sponsor_phone", "orphan", "sponsorship_type", "amount", "admin_status", "created_at")
    search_fields = ("sponsor_full_name", "sponsor_phone", "sponsor_email", "orphan__full_name")
    list_filter = ("admin_status", "sponsorship_type")
    raw_id_fields = ("orphan", "user", "approved_by")
    readonly_fields = ("admin_status", "approved_at", "approved_by", "created_at", "updated_at")


@admin.register(Receipt)
class ReceiptAdmin(RoleGatedAdmin):
    list_display = ("receipt_number", "sponsorship", "issue_date", "amount", "payment_reference")
    search_fields = ("receipt_number", "payment_reference", "sponsorship__sponsor__full_name")
    list_filter = ("issue_date",)
    raw_id_fields = ("sponsorship",)
    readonly_fields = ("created_at",)
