from django.db import models


class NotificationLog(models.Model):
    TYPE_SPONSORSHIP_ADMIN = "sponsorship_admin"
    TYPE_SPONSORSHIP_SPONSOR = "sponsorship_sponsor"
    TYPE_DEPOSIT_ADMIN = "deposit_admin"
    TYPE_DEPOSIT_SPONSOR = "deposit_sponsor"
    TYPE_REQUEST_ADMIN = "request_admin"
    TYPE_INVITATION = "invitation"
    TYPE_CHOICES = [
        (TYPE_SPONSORSHIP_ADMIN, "Sponsorship (admin)"),
        (TYPE_SPONSORSHIP_SPONSOR, "Sponsorship (sponsor)"),
        (TYPE_DEPOSIT_ADMIN, "Deposit (admin)"),
        (TYPE_DEPOSIT_SPONSOR, "Deposit (sponsor)"),
        (TYPE_REQUEST_ADMIN, "New request (admin)"),
        (TYPE_INVITATION, "Invitation"),
    ]

    STATUS_PENDING = "pending"
    STATUS_SENT = "sent"
    STATUS_FAILED = "failed"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_SENT, "Sent"),
        (STATUS_FAILED, "Failed"),
    ]

    notification_type = models.CharField(max_length=30, choices=TYPE_CHOICES, db_index=True)
    recipient_email = models.EmailField()
    recipient_name = models.CharField(max_length=100, blank=True)
    subject = models.CharField(max_length=255)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    error_message = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self):
        return f"{self.get_notification_type_display()} -> {self.recipient_email} ({self.status})"
