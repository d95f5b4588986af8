from django.apps import AppConfig


class ProcurementConfig(AppConfig):
    """Admin features of the procurement console."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "procurement"
    verbose_name = "Procurement"
