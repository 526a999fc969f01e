from django import forms
from django.core.files.uploadedfile import UploadedFile

from kafala.files import prepare_photo

from .models import Orphan


class OrphanForm(forms.ModelForm):
    """Orphan create/update form; large photos are compressed before saving."""

    class Meta:
        model = Orphan
        fields = (
            "full_name",
            "gender",
            "age",
            "city",
            "country",
            "status",
            "monthly_amount",
            "story",
            "photo",
            "intro_video_url",
        )

    def clean_photo(self):
        photo = self.cleaned_data.get("photo")
        if isinstance(photo, UploadedFile):
            return prepare_photo(photo)
        return photo


class OrphanFilterForm(forms.Form):
    q = forms.CharField(required=False, widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "Name, city or country"}))
    status = forms.ChoiceField(
        required=False,
        choices=[("", "All")] + [c for c in Orphan.STATUS_CHOICES if c[0] != Orphan.STATUS_INACTIVE],
        widget=forms.Select(attrs={"class": "form-select"}),
    )
