import re

from django.conf import settings
from django.contrib.auth.views import redirect_to_login
from django.http import HttpResponse, HttpResponseForbidden


class LoginRequiredMiddleware:
    """Keep the console to signed-in staff.

    Anonymous users are redirected to the login page. htmx requests get an
    ``HX-Redirect`` header instead so the whole page navigates rather than the
    login form being swapped into a fragment. Signed-in users without
    ``is_staff`` get a 403.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.exempt_urls = [re.compile(expr) for expr in getattr(settings, "LOGIN_EXEMPT_URLS", [])]

    def __call__(self, request):
        path = request.path_info.lstrip("/")
        if any(pattern.match(path) for pattern in self.exempt_urls):
            return self.get_response(request)
        if not request.user.is_authenticated:
            if request.headers.get("HX-Request") == "true":
                response = HttpResponse(status=401)
                response["HX-Redirect"] = settings.LOGIN_URL
                return response
            return redirect_to_login(request.get_full_path(), settings.LOGIN_URL)
        if not request.user.is_staff:
            return HttpResponseForbidden("This account does not have console access.")
        return self.get_response(request)
