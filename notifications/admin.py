from django.contrib import admin

from accounts.admin import RoleGatedAdmin

from .models import NotificationLog


@admin.register(NotificationLog)
class NotificationLogAdmin(RoleGatedAdmin):
    list_display = ("created_at", "notification_type", "recipient_email", "subject", "status")
    search_fields = ("recipient_email", "recipient_name", "subject")
    list_filter = ("notification_type", "status", "created_at")
    readonly_fields = ("created_at",)

    def has_add_permission(self, request):
        return False
