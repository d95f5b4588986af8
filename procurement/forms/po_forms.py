import os

from django import forms

from .base import StyledFormMixin

ALLOWED_PO_EXTENSIONS = {".pdf", ".png", ".jpg", ".jpeg"}
MAX_PO_SIZE = 10 * 1024 * 1024


class ClientPOUploadForm(StyledFormMixin, forms.Form):
    file = forms.FileField(label="Client PO")

    def clean_file(self):
        upload = self.cleaned_data["file"]
        ext = os.path.splitext(upload.name)[1].lower()
        if ext not in ALLOWED_PO_EXTENSIONS:
            raise forms.ValidationError("Upload a PDF or image file.")
        if upload.size > MAX_PO_SIZE:
            raise forms.ValidationError("File is larger than 10 MB.")
        return upload


class RejectPOForm(StyledFormMixin, forms.Form):
    reason = forms.CharField(widget=forms.Textarea(attrs={"rows": 2}), required=False)
