from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


class CookieJWTAuthentication(JWTAuthentication):
    """
    JWT authentication that reads the bearer header first and falls back to
    the auth cookie set at login.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
        else:
            cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE")
            raw_token = request.COOKIES.get(cookie_name) if cookie_name else None
            if raw_token:
                raw_token = raw_token.encode()

        if raw_token is None:
            return None

        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token
