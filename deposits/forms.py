from decimal import Decimal

from django import forms

from accounts.utils import clean_full_name, clean_phone
from kafala.files import validate_upload

from .models import DepositReceiptRequest


class DepositReceiptRequestForm(forms.Form):
    sponsor_name = forms.CharField(label="Sponsor name", max_length=100, widget=forms.TextInput(attrs={"class": "form-control"}))
    phone_number = forms.CharField(label="Phone", max_length=20, widget=forms.TextInput(attrs={"class": "form-control"}))
    deposit_amount = forms.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"), widget=forms.NumberInput(attrs={"class": "form-control"}))
    bank_method = forms.CharField(label="Bank / method", min_length=2, max_length=200, widget=forms.TextInput(attrs={"class": "form-control"}))
    receipt_image = forms.FileField(
        required=False,
        widget=forms.ClearableFileInput(attrs={"class": "form-control", "accept": "image/jpeg,image/png,image/webp,application/pdf"}),
    )

    def clean_sponsor_name(self):
        return clean_full_name(self.cleaned_data["sponsor_name"])

    def clean_phone_number(self):
        return clean_phone(self.cleaned_data["phone_number"])

    def clean_bank_method(self):
        return self.cleaned_data["bank_method"].strip()

    def clean_receipt_image(self):
        return validate_upload(self.cleaned_data.get("receipt_image"))


class DepositStatusForm(forms.Form):
    status = forms.ChoiceField(choices=DepositReceiptRequest.STATUS_CHOICES, widget=forms.Select(attrs={"class": "form-select form-select-sm"}))
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={"class": "form-control", "rows": 2}))
