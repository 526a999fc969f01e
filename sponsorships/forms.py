from decimal import Decimal

from django import forms

from accounts.utils import clean_full_name, clean_phone
from kafala.files import validate_upload

from .models import TYPE_CHOICES, Sponsorship


class SponsorshipRequestForm(forms.Form):
    sponsor_full_name = forms.CharField(label="Full name", max_length=100, widget=forms.TextInput(attrs={"class": "form-control"}))
    sponsor_phone = forms.CharField(label="Phone", max_length=20, widget=forms.TextInput(attrs={"class": "form-control"}))
    sponsor_email = forms.EmailField(label="Email", required=False, widget=forms.EmailInput(attrs={"class": "form-control"}))
    sponsor_country = forms.CharField(label="Country", max_length=100, required=False, widget=forms.TextInput(attrs={"class": "form-control"}))
    sponsorship_type = forms.ChoiceField(choices=TYPE_CHOICES, initial="monthly", widget=forms.RadioSelect)
    transfer_receipt = forms.FileField(
        label="Transfer receipt",
        required=False,
        help_text="JPG, PNG, WebP or PDF, up to 5 MB.",
        widget=forms.ClearableFileInput(attrs={"class": "form-control", "accept": "image/jpeg,image/png,image/webp,application/pdf"}),
    )

    def clean_sponsor_full_name(self):
        return clean_full_name(self.cleaned_data["sponsor_full_name"])

    def clean_sponsor_phone(self):
        return clean_phone(self.cleaned_data["sponsor_phone"])

    def clean_transfer_receipt(self):
        return validate_upload(self.cleaned_data.get("transfer_receipt"))


class ReceiptLookupForm(forms.Form):
    name = forms.CharField(max_length=100, widget=forms.TextInput(attrs={"class": "form-control"}))
    phone = forms.CharField(max_length=20, widget=forms.TextInput(attrs={"class": "form-control"}))

    def clean_phone(self):
        return clean_phone(self.cleaned_data["phone"])


class ApproveRequestForm(forms.Form):
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={"class": "form-control", "rows": 2}))


class RejectRequestForm(forms.Form):
    notes = forms.CharField(label="Reason", widget=forms.Textarea(attrs={"class": "form-control", "rows": 2}))

    def clean_notes(self):
        notes = self.cleaned_data["notes"].strip()
        if not notes:
            raise forms.ValidationError("Please give a reason for the rejection.")
        return notes


class CashReceiptForm(forms.Form):
    cash_receipt = forms.FileField(
        required=False,
        widget=forms.ClearableFileInput(attrs={"class": "form-control", "accept": "image/jpeg,image/png,image/webp,application/pdf"}),
    )
    cash_receipt_number = forms.CharField(max_length=100, required=False, widget=forms.TextInput(attrs={"class": "form-control"}))
    cash_receipt_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"class": "form-control", "type": "date"}))

    def clean_cash_receipt(self):
        return validate_upload(self.cleaned_data.get("cash_receipt"))

    def clean(self):
        cleaned_data = super().clean()
        if not any(cleaned_data.get(f) for f in ("cash_receipt", "cash_receipt_number", "cash_receipt_date")):
            raise forms.ValidationError("Upload a receipt or enter its number.")
        return cleaned_data


class SponsorshipStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Sponsorship.STATUS_CHOICES, widget=forms.Select(attrs={"class": "form-select form-select-sm"}))


class AddReceiptForm(forms.Form):
    amount = forms.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"), widget=forms.NumberInput(attrs={"class": "form-control"}))
    payment_reference = forms.CharField(max_length=100, required=False, widget=forms.TextInput(attrs={"class": "form-control"}))
    issue_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"class": "form-control", "type": "date"}))
