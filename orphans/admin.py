from django.contrib import admin

from accounts.admin import RoleGatedAdmin

from .forms import OrphanForm
from .models import Orphan


@admin.register(Orphan)
class OrphanAdmin(RoleGatedAdmin):
    form = OrphanForm
    list_display = ("full_name", "gender", "age", "country", "status", "monthly_amount", "created_at")
    search_fields = ("full_name", "city", "country")
    list_filter = ("status", "gender", "country")
    readonly_fields = ("created_at", "updated_at")
