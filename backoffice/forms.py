from decimal import Decimal

from django import forms

from accounts.utils import clean_full_name, clean_phone
from orphans.models import Orphan
from sponsorships.models import PAYMENT_METHOD_CHOICES, TYPE_CHOICES, Sponsorship, SponsorshipRequest
from deposits.models import DepositReceiptRequest
from notifications.models import NotificationLog


class RequestFilterForm(forms.Form):
    status = forms.ChoiceField(required=False, choices=[("", "All")] + SponsorshipRequest.STATUS_CHOICES, widget=forms.Select(attrs={"class": "form-select"}))
    q = forms.CharField(required=False, widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "Sponsor, phone or orphan"}))


class SponsorshipFilterForm(forms.Form):
    status = forms.ChoiceField(required=False, choices=[("", "All")] + Sponsorship.STATUS_CHOICES, widget=forms.Select(attrs={"class": "form-select"}))
    q = forms.CharField(required=False, widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "Sponsor, orphan or receipt"}))


class DepositFilterForm(forms.Form):
    status = forms.ChoiceField(required=False, choices=[("", "All")] + DepositReceiptRequest.STATUS_CHOICES, widget=forms.Select(attrs={"class": "form-select"}))


class NotificationFilterForm(forms.Form):
    notification_type = forms.ChoiceField(required=False, choices=[("", "All")] + NotificationLog.TYPE_CHOICES, widget=forms.Select(attrs={"class": "form-select"}))
    status = forms.ChoiceField(required=False, choices=[("", "All")] + NotificationLog.STATUS_CHOICES, widget=forms.Select(attrs={"class": "form-select"}))


class CreateSponsorshipForm(forms.Form):
    full_name = forms.CharField(label="Sponsor name", max_length=100, widget=forms.TextInput(attrs={"class": "form-control"}))
    email = forms.EmailField(required=False, widget=forms.EmailInput(attrs={"class": "form-control"}))
    phone = forms.CharField(max_length=20, widget=forms.TextInput(attrs={"class": "form-control"}))
    country = forms.CharField(max_length=100, required=False, widget=forms.TextInput(attrs={"class": "form-control"}))
    orphan = forms.ModelChoiceField(
        queryset=Orphan.objects.exclude(status=Orphan.STATUS_INACTIVE),
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    type = forms.ChoiceField(choices=TYPE_CHOICES, widget=forms.Select(attrs={"class": "form-select"}))
    payment_method = forms.ChoiceField(choices=PAYMENT_METHOD_CHOICES, widget=forms.Select(attrs={"class": "form-select"}))
    monthly_amount = forms.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.01"), required=False,
        help_text="Defaults to the orphan's monthly amount.",
        widget=forms.NumberInput(attrs={"class": "form-control"}),
    )

    def clean_full_name(self):
        return clean_full_name(self.cleaned_data["full_name"])

    def clean_phone(self):
        return clean_phone(self.cleaned_data["phone"])

    def clean(self):
        cleaned_data = super().clean()
        orphan = cleaned_data.get("orphan")
        if orphan and not cleaned_data.get("monthly_amount"):
            cleaned_data["monthly_amount"] = orphan.monthly_amount
        return cleaned_data
