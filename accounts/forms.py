from django import forms
from django.contrib.auth import password_validation
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from .models import Profile, UserRole
from .utils import clean_full_name, clean_phone, normalize_phone


class SignUpForm(forms.Form):
    full_name = forms.CharField(max_length=100, widget=forms.TextInput(attrs={"class": "form-control"}))
    email = forms.EmailField(widget=forms.EmailInput(attrs={"class": "form-control"}))
    phone = forms.CharField(max_length=20, widget=forms.TextInput(attrs={"class": "form-control"}))
    password1 = forms.CharField(label="Password", widget=forms.PasswordInput(attrs={"class": "form-control"}))
    password2 = forms.CharField(label="Confirm password", widget=forms.PasswordInput(attrs={"class": "form-control"}))

    def clean_full_name(self):
        return clean_full_name(self.cleaned_data["full_name"])

    def clean_email(self):
        email = self.cleaned_data["email"].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationError("An account with this email already exists.")
        return email

    def clean_phone(self):
        phone = clean_phone(self.cleaned_data["phone"])
        if Profile.objects.filter(phone=phone).exists():
            raise ValidationError("This phone is already registered.")
        return phone

    def clean(self):
        cleaned_data = super().clean()
        p1 = cleaned_data.get("password1")
        p2 = cleaned_data.get("password2")
        if p1 and p2 and p1 != p2:
            self.add_error("password2", "The two passwords do not match.")
        elif p1:
            try:
                password_validation.validate_password(p1)
            except ValidationError as exc:
                self.add_error("password1", exc)
        return cleaned_data


class SignInForm(forms.Form):
    """Authenticate using either email or phone identifier."""

    identifier = forms.CharField(
        label="Email or phone",
        widget=forms.TextInput(attrs={"class": "form-control", "required": True}),
    )
    password = forms.CharField(
        widget=forms.PasswordInput(attrs={"class": "form-control", "required": True})
    )

    user_cache = None

    def clean(self):
        cleaned_data = super().clean()
        identifier = (cleaned_data.get("identifier") or "").strip()
        password = cleaned_data.get("password")
        user = None

        if identifier and password:
            try:
                validate_email(identifier)
                user = User.objects.filter(email__iexact=identifier).first()
            except ValidationError:
                profile = (
                    Profile.objects.filter(phone=normalize_phone(identifier))
                    .select_related("user")
                    .first()
                )
                user = profile.user if profile else None

            if not user or not user.is_active or not user.check_password(password):
                raise forms.ValidationError("Invalid credentials")

            self.user_cache = user

        return cleaned_data

    def get_user(self):
        return self.user_cache


class ProfileForm(forms.ModelForm):
    class Meta:
        model = Profile
        fields = ("full_name", "phone", "email", "country", "preferred_contact")
        widgets = {
            "full_name": forms.TextInput(attrs={"class": "form-control"}),
            "phone": forms.TextInput(attrs={"class": "form-control"}),
            "email": forms.EmailInput(attrs={"class": "form-control"}),
            "country": forms.TextInput(attrs={"class": "form-control"}),
            "preferred_contact": forms.Select(attrs={"class": "form-select"}),
        }

    def clean_full_name(self):
        return clean_full_name(self.cleaned_data["full_name"])

    def clean_phone(self):
        phone = self.cleaned_data.get("phone")
        if not phone:
            return ""
        phone = clean_phone(phone)
        if Profile.objects.filter(phone=phone).exclude(pk=self.instance.pk).exists():
            raise ValidationError("This phone is already registered.")
        return phone

    def clean_email(self):
        email = (self.cleaned_data.get("email") or "").strip().lower()
        if email and User.objects.filter(email__iexact=email).exclude(pk=self.instance.user_id).exists():
            raise ValidationError("An account with this email already exists.")
        return email


class InviteUserForm(forms.Form):
    email = forms.EmailField(widget=forms.EmailInput(attrs={"class": "form-control"}))
    full_name = forms.CharField(max_length=100, required=False, widget=forms.TextInput(attrs={"class": "form-control"}))
    role = forms.ChoiceField(choices=UserRole.ROLE_CHOICES, initial=UserRole.STAFF, widget=forms.Select(attrs={"class": "form-select"}))

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()


class RoleChangeForm(forms.Form):
    role = forms.ChoiceField(choices=UserRole.ROLE_CHOICES, widget=forms.Select(attrs={"class": "form-select form-select-sm"}))
