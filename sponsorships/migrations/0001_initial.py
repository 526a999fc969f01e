from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

import kafala.files


PAYMENT_METHOD_CHOICES = [("bank_transfer", "Bank transfer"), ("cash", "Cash"), ("credit_card", "Credit card")]
TYPE_CHOICES = [("monthly", "Monthly"), ("yearly", "Yearly")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("orphans", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Sponsor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("full_name", models.CharField(max_length=100)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("email_norm", models.EmailField(blank=True, max_length=254, null=True, unique=True)),
                ("phone", models.CharField(blank=True, db_index=True, max_length=20)),
                ("country", models.CharField(blank=True, max_length=100)),
                ("preferred_contact", models.CharField(choices=[("email", "Email"), ("phone", "Phone"), ("whatsapp", "WhatsApp")], default="email", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="sponsor", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at",),
            },
        ),
        migrations.CreateModel(
            name="SponsorshipRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sponsor_full_name", models.CharField(max_length=100)),
                ("sponsor_phone", models.CharField(db_index=True, max_length=20)),
                ("sponsor_email", models.EmailField(blank=True, max_length=254)),
                ("sponsor_country", models.CharField(blank=True, max_length=100)),
                ("sponsorship_type", models.CharField(choices=TYPE_CHOICES, default="monthly", max_length=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("payment_method", models.CharField(choices=PAYMENT_METHOD_CHOICES, default="bank_transfer", max_length=20)),
                ("transfer_receipt", models.FileField(blank=True, storage=kafala.files.get_private_storage, upload_to=kafala.files.UploadPath("transfer-receipts"))),
                ("admin_status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], db_index=True, default="pending", max_length=10)),
                ("admin_notes", models.TextField(blank=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("cash_receipt", models.FileField(blank=True, storage=kafala.files.get_private_storage, upload_to=kafala.files.UploadPath("cash-receipts"))),
                ("cash_receipt_number", models.CharField(blank=True, max_length=100)),
                ("cash_receipt_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("approved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("orphan", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sponsorship_requests", to="orphans.orphan")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="sponsorship_requests", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at", "-id"),
            },
        ),
        migrations.CreateModel(
            name="Sponsorship",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=TYPE_CHOICES, default="monthly", max_length=10)),
                ("monthly_amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(blank=True, null=True)),
                ("payment_method", models.CharField(choices=PAYMENT_METHOD_CHOICES, default="bank_transfer", max_length=20)),
                ("status", models.CharField(choices=[("active", "Active"), ("paused", "Paused"), ("completed", "Completed"), ("cancelled", "Cancelled")], db_index=True, default="active", max_length=10)),
                ("receipt_number", models.CharField(max_length=32, unique=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("approved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("orphan", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sponsorships", to="orphans.orphan")),
                ("request", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="sponsorship", to="sponsorships.sponsorshiprequest")),
                ("sponsor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sponsorships", to="sponsorships.sponsor")),
            ],
            options={
                "ordering": ("-created_at", "-id"),
            },
        ),
        migrations.CreateModel(
            name="Receipt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("receipt_number", models.CharField(max_length=32, unique=True)),
                ("issue_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("payment_reference", models.CharField(blank=True, max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("sponsorship", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="receipts", to="sponsorships.sponsorship")),
            ],
            options={
                "ordering": ("-issue_date", "-id"),
            },
        ),
    ]
