import pytest
from django.contrib.auth import get_user_model
from django.test import override_settings

from core.apps import _create_admin_user


@pytest.mark.django_db
def test_admin_user_exists_and_can_login(client):
    User = get_user_model()
    assert User.objects.filter(username="admin", is_superuser=True).exists()
    client.logout()
    assert client.login(username="admin", password="admin")


@pytest.mark.django_db
@override_settings(CONSOLE_ADMIN_USERNAME="ops", CONSOLE_ADMIN_PASSWORD="s3cret")
def test_create_admin_user_is_idempotent():
    User = get_user_model()
    _create_admin_user(sender=None)
    _create_admin_user(sender=None)
    assert User.objects.filter(username="ops").count() == 1
    assert User.objects.get(username="ops").check_password("s3cret")


@pytest.mark.django_db
@override_settings(CONSOLE_ADMIN_USERNAME="")
def test_create_admin_user_can_be_disabled():
    User = get_user_model()
    before = User.objects.count()
    _create_admin_user(sender=None)
    assert User.objects.count() == before
