from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from kafala.files import UploadPath


class OrphanQuerySet(models.QuerySet):
    def public(self):
        return self.exclude(status=Orphan.STATUS_INACTIVE)

    def search(self, term: str | None):
        term = (term or "").strip()
        if not term:
            return self
        return self.filter(
            models.Q(full_name__icontains=term)
            | models.Q(city__icontains=term)
            | models.Q(country__icontains=term)
        )


class Orphan(models.Model):
    GENDER_MALE = "male"
    GENDER_FEMALE = "female"
    GENDER_CHOICES = [
        (GENDER_MALE, "Male"),
        (GENDER_FEMALE, "Female"),
    ]

    STATUS_AVAILABLE = "available"
    STATUS_PARTIAL = "partial"
    STATUS_FULL = "full"
    STATUS_INACTIVE = "inactive"
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, "Available"),
        (STATUS_PARTIAL, "Partially sponsored"),
        (STATUS_FULL, "Fully sponsored"),
        (STATUS_INACTIVE, "Inactive"),
    ]
    # Older rows may still carry these values
    LEGACY_STATUSES = {
        "partially_sponsored": STATUS_PARTIAL,
        "fully_sponsored": STATUS_FULL,
        "sponsored": STATUS_FULL,
    }

    full_name = models.CharField(max_length=100)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    age = models.PositiveSmallIntegerField(validators=[MaxValueValidator(30)])
    city = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_AVAILABLE, db_index=True)
    monthly_amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))])
    story = models.TextField(blank=True)
    photo = models.ImageField(upload_to=UploadPath("orphans"), blank=True)
    intro_video_url = models.URLField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrphanQuerySet.as_manager()

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self):
        return self.full_name

    @classmethod
    def normalize_status(cls, status: str | None) -> str:
        status = (status or "").strip()
        return cls.LEGACY_STATUSES.get(status, status or cls.STATUS_AVAILABLE)

    @property
    def is_inactive(self) -> bool:
        return self.status == self.STATUS_INACTIVE

    @property
    def accepts_requests(self) -> bool:
        return self.status in (self.STATUS_AVAILABLE, self.STATUS_PARTIAL)

    def save(self, *args, **kwargs):
        self.status = self.normalize_status(self.status)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        photo_name = self.photo.name if self.photo else None
        storage = self.photo.storage if self.photo else None
        result = super().delete(*args, **kwargs)
        if photo_name:
            storage.delete(photo_name)
        return result
