"""
URL configuration for console_app project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from core.views import health_check, logout_view, root_view

urlpatterns = [
    path("admin/", admin.site.urls),
    path("login/", root_view, name="login"),
    path("logout/", logout_view, name="logout"),
    path("", root_view, name="root"),
    path("healthz", health_check, name="health-check"),
    path("api/", include("procurement.urls")),   # DRF API
    path("", include("procurement.ui_urls")),    # HTML UI routes
]
