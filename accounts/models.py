from django.conf import settings
from django.db import models


class Profile(models.Model):
    CONTACT_EMAIL = "email"
    CONTACT_PHONE = "phone"
    CONTACT_WHATSAPP = "whatsapp"
    CONTACT_CHOICES = [
        (CONTACT_EMAIL, "Email"),
        (CONTACT_PHONE, "Phone"),
        (CONTACT_WHATSAPP, "WhatsApp"),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    full_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=20, blank=True, db_index=True)
    email = models.EmailField(blank=True)
    country = models.CharField(max_length=100, blank=True)
    preferred_contact = models.CharField(max_length=10, choices=CONTACT_CHOICES, default=CONTACT_EMAIL)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return self.full_name or self.user.get_username()

    def save(self, *args, **kwargs):
        # Keep linked Django User in sync: name and email
        if self.user_id:
            first, _, last = (self.full_name or "").strip().partition(" ")
            updated = []
            if self.user.first_name != first[:150]:
                self.user.first_name = first[:150]
                updated.append("first_name")
            if self.user.last_name != last[:150]:
                self.user.last_name = last[:150]
                updated.append("last_name")
            if self.email and self.user.email != self.email:
                self.user.email = self.email
                updated.append("email")
            if updated:
                self.user.save(update_fields=updated)
        super().save(*args, **kwargs)


class UserRole(models.Model):
    ADMIN = "admin"
    STAFF = "staff"
    SPONSOR = "sponsor"
    ROLE_CHOICES = [
        (ADMIN, "Admin"),
        (STAFF, "Staff"),
        (SPONSOR, "Sponsor"),
    ]
    STAFF_ROLES = (ADMIN, STAFF)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="role")
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=SPONSOR, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user.get_username()} ({self.get_role_display()})"

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        is_staff = self.role in self.STAFF_ROLES or self.user.is_superuser
        if self.user.is_staff != is_staff:
            self.user.is_staff = is_staff
            self.user.save(update_fields=["is_staff"])
