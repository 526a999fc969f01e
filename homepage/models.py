from django.db import models


class SiteSetting(models.Model):
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True)
    label = models.CharField(max_length=255, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("key",)

    def __str__(self):
        return self.label or self.key

    def save(self, *args, **kwargs):
        from .settings_store import invalidate_setting

        super().save(*args, **kwargs)
        invalidate_setting(self.key)

    def delete(self, *args, **kwargs):
        from .settings_store import invalidate_setting

        key = self.key
        result = super().delete(*args, **kwargs)
        invalidate_setting(key)
        return result
