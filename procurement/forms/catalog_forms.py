from django import forms

from ..validators import format_specifications, parse_specifications
from .base import StyledFormMixin


class MasterProductForm(StyledFormMixin, forms.Form):
    name = forms.CharField(max_length=255)
    category = forms.CharField(
        max_length=100, widget=forms.TextInput(attrs={"list": "category-options"})
    )
    subcategory = forms.CharField(max_length=100, required=False)
    brand = forms.CharField(max_length=100, required=False)
    model_number = forms.CharField(max_length=100, required=False, label="Model number / SKU")
    description = forms.CharField(widget=forms.Textarea(attrs={"rows": 3}), required=False)
    specifications = forms.CharField(
        widget=forms.Textarea(attrs={"rows": 4}),
        required=False,
        help_text="One 'key: value' pair per line.",
    )
    image_url = forms.URLField(required=False, label="Image URL")

    def __init__(self, *args, product=None, **kwargs):
        if product is not None and "initial" not in kwargs:
            initial = {name: product.get(name) for name in self.base_fields}
            initial["specifications"] = format_specifications(product.get("specifications"))
            kwargs["initial"] = initial
        super().__init__(*args, **kwargs)

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Product name is required.")
        return name

    def clean_specifications(self):
        return parse_specifications(self.cleaned_data.get("specifications")) or None
