from django.contrib import admin
from django.db import transaction

from .models import Profile, UserRole


class RoleGatedAdmin(admin.ModelAdmin):
    """ModelAdmin visible to admin and staff roles only."""

    def has_module_permission(self, request):
        from .roles import is_admin_or_staff

        return is_admin_or_staff(request.user)

    def has_view_permission(self, request, obj=None):
        return self.has_module_permission(request)

    def has_add_permission(self, request):
        return self.has_module_permission(request)

    def has_change_permission(self, request, obj=None):
        return self.has_module_permission(request)

    def has_delete_permission(self, request, obj=None):
        return self.has_module_permission(request)

    def delete_queryset(self, request, queryset):
        # Per object so each model's delete() cleanup also runs for bulk actions
        with transaction.atomic():
            for obj in queryset:
                obj.delete()


class AdminOnlyAdmin(RoleGatedAdmin):
    def has_module_permission(self, request):
        from .roles import is_admin

        return is_admin(request.user)


@admin.register(Profile)
class ProfileAdmin(AdminOnlyAdmin):
    list_display = ("full_name", "user", "email", "phone", "country", "created_at")
    search_fields = ("full_name", "user__username", "email", "phone")
    list_filter = ("preferred_contact", "created_at")
    raw_id_fields = ("user",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(UserRole)
class UserRoleAdmin(AdminOnlyAdmin):
    list_display = ("user", "role", "updated_at")
    search_fields = ("user__username", "user__email")
    list_filter = ("role",)
    raw_id_fields = ("user",)
