from __future__ import annotations

from django import forms

INPUT_CLASS = "w-full px-3 py-2 border border-gray-300 rounded-lg text-sm"
CHECKBOX_CLASS = "h-4 w-4 text-primary"


class StyledFormMixin:
    """Apply Tailwind CSS classes to form fields."""

    def apply_styling(self) -> None:
        for field in self.fields.values():
            widget = field.widget
            if getattr(widget, "input_type", None) == "checkbox":
                widget.attrs.update({"class": CHECKBOX_CLASS})
            elif getattr(widget, "input_type", None) == "file":
                widget.attrs.update({"class": "text-sm"})
            else:
                widget.attrs.update({"class": INPUT_CLASS})

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.apply_styling()
