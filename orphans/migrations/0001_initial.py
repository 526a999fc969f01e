from decimal import Decimal

import django.core.validators
from django.db import migrations, models

import kafala.files


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Orphan",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("full_name", models.CharField(max_length=100)),
                ("gender", models.CharField(choices=[("male", "Male"), ("female", "Female")], max_length=10)),
                ("age", models.PositiveSmallIntegerField(validators=[django.core.validators.MaxValueValidator(30)])),
                ("city", models.CharField(blank=True, max_length=100)),
                ("country", models.CharField(blank=True, max_length=100)),
                ("status", models.CharField(choices=[("available", "Available"), ("partial", "Partially sponsored"), ("full", "Fully sponsored"), ("inactive", "Inactive")], db_index=True, default="available", max_length=20)),
                ("monthly_amount", models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.01"))])),
                ("story", models.TextField(blank=True)),
                ("photo", models.ImageField(blank=True, upload_to=kafala.files.UploadPath("orphans"))),
                ("intro_video_url", models.URLField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ("-created_at", "-id"),
            },
        ),
    ]
