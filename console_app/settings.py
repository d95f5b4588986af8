"""
Django settings for console_app project.

Deploy-specific values are read from environment variables. Marketplace data
lives in Supabase; the local database only backs auth and sessions.

For the full list of settings and their values, see
https://docs.djangoproject.com/en/5.2/ref/settings/
"""

import os
from pathlib import Path

from .logging import configure_logging

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-procurement-console-dev-key")

DEBUG = _env_bool("DJANGO_DEBUG", True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]


INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "core",
    "procurement",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "core.middleware.LoginRequiredMiddleware",
]

ROOT_URLCONF = "console_app.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "console_app.wsgi.application"


DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("DATABASE_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}


AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LOGIN_URL = "/login/"
LOGIN_REDIRECT_URL = "/"
LOGIN_EXEMPT_URLS = [r"^login/$", r"^healthz$", r"^admin/", r"^static/", r"^api/"]

# Console operator created after migrations
CONSOLE_ADMIN_USERNAME = os.getenv("CONSOLE_ADMIN_USERNAME", "admin")
CONSOLE_ADMIN_PASSWORD = os.getenv("CONSOLE_ADMIN_PASSWORD", "admin")
CONSOLE_ADMIN_EMAIL = os.getenv("CONSOLE_ADMIN_EMAIL", "")
# Marketplace users.id recorded as the acting admin; looked up by email when unset
CONSOLE_ADMIN_USER_ID = os.getenv("CONSOLE_ADMIN_USER_ID", "")


LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Riyadh"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

MESSAGE_STORAGE = "django.contrib.messages.storage.session.SessionStorage"


REST_FRAMEWORK = {
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAdminUser"],
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
    ],
    "EXCEPTION_HANDLER": "procurement.exceptions.custom_exception_handler",
}


# Supabase backend
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")
ORDER_DOCUMENTS_BUCKET = os.getenv("ORDER_DOCUMENTS_BUCKET", "order-documents")
SIGNED_URL_TTL_SECONDS = _env_int("SIGNED_URL_TTL_SECONDS", 60 * 60)

# PO verification queue
PO_DOCUMENT_FETCH_TIMEOUT = _env_int("PO_DOCUMENT_FETCH_TIMEOUT", 15)
PO_DOCUMENT_WORKERS = _env_int("PO_DOCUMENT_WORKERS", 4)

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "SAR")
# TrueType font with Unicode coverage for generated POs
PO_PDF_FONT_PATH = os.getenv("PO_PDF_FONT_PATH", "")


configure_logging()
