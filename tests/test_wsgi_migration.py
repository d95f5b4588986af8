import sys
from unittest.mock import patch

from django.db.utils import OperationalError


def _import_wsgi():
    sys.modules.pop("console_app.wsgi", None)
    import console_app.wsgi  # noqa: F401


def test_wsgi_runs_migrate():
    with patch("django.core.management.call_command") as call, patch(
        "django.core.wsgi.get_wsgi_application"
    ):
        _import_wsgi()

    call.assert_called_with("migrate", interactive=False)


def test_wsgi_starts_when_database_unavailable(caplog):
    with patch(
        "django.core.management.call_command", side_effect=OperationalError("locked")
    ), patch("django.core.wsgi.get_wsgi_application"):
        with caplog.at_level("WARNING"):
            _import_wsgi()

    assert "skipping migrations" in caplog.text
