from django import forms

from ..services.supplier_performance_service import DATE_RANGES
from .base import StyledFormMixin


class PerformanceFilterForm(StyledFormMixin, forms.Form):
    date_range = forms.ChoiceField(choices=list(DATE_RANGES.items()), required=False)
    min_rating = forms.DecimalField(
        min_value=0, max_value=5, decimal_places=1, required=False, label="Minimum rating"
    )
    category = forms.ChoiceField(required=False)

    def __init__(self, *args, categories=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["category"].choices = [("ALL", "All categories")] + [
            (c, c) for c in categories
        ]
