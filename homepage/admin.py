from django.contrib import admin

from accounts.admin import AdminOnlyAdmin

from .models import SiteSetting


@admin.register(SiteSetting)
class SiteSettingAdmin(AdminOnlyAdmin):
    list_display = ("key", "label", "value", "updated_at")
    search_fields = ("key", "label", "value")
    readonly_fields = ("updated_at",)
