import pytest
from postgrest.exceptions import APIError

from procurement.services import user_service

ADMIN_ID = "2c5ea4c0-4067-11e9-8bad-9b1deb4d3b7d"


@pytest.fixture
def marketplace_users(fake_supabase):
    fake_supabase.seed(
        "users",
        [
            {"id": "c1", "role": "CLIENT", "email": "buyer@acme.sa", "company_name": "Acme Trading"},
            {"id": ADMIN_ID, "role": "ADMIN", "email": "ops@mwrd.sa", "name": "Ops Lead"},
            {"id": "not-a-uuid", "role": "ADMIN", "email": "legacy@mwrd.sa"},
        ],
    )
    return fake_supabase


def test_resolve_admin_prefers_configured_id(marketplace_users, settings):
    settings.CONSOLE_ADMIN_USER_ID = "0b7e3c1a-9d42-4f8e-a5c6-7e1d2b3f4a58"
    assert user_service.resolve_admin_user_id("ops@mwrd.sa") == "0b7e3c1a-9d42-4f8e-a5c6-7e1d2b3f4a58"


def test_resolve_admin_ignores_configured_username(marketplace_users, settings):
    settings.CONSOLE_ADMIN_USER_ID = "admin"
    assert user_service.resolve_admin_user_id("ops@mwrd.sa") == ADMIN_ID


def test_resolve_admin_by_email(marketplace_users, settings):
    settings.CONSOLE_ADMIN_USER_ID = ""
    assert user_service.resolve_admin_user_id("ops@mwrd.sa") == ADMIN_ID


def test_resolve_admin_only_matches_admin_role(marketplace_users, settings):
    settings.CONSOLE_ADMIN_USER_ID = ""
    assert user_service.resolve_admin_user_id("buyer@acme.sa") is None


def test_resolve_admin_skips_non_uuid_ids(marketplace_users, settings):
    settings.CONSOLE_ADMIN_USER_ID = ""
    assert user_service.resolve_admin_user_id("legacy@mwrd.sa") is None


def test_resolve_admin_without_email_or_backend(no_supabase, settings):
    settings.CONSOLE_ADMIN_USER_ID = ""
    assert user_service.resolve_admin_user_id("") is None
    assert user_service.resolve_admin_user_id("ops@mwrd.sa") is None


def test_resolve_admin_backend_error(marketplace_users, settings):
    settings.CONSOLE_ADMIN_USER_ID = ""
    marketplace_users.errors[("users", "select")] = APIError({"message": "boom"})
    assert user_service.resolve_admin_user_id("ops@mwrd.sa") is None


def test_is_uuid():
    assert user_service.is_uuid(ADMIN_ID)
    assert not user_service.is_uuid("admin")
    assert not user_service.is_uuid(None)
