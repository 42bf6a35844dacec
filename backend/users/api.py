from __future__ import annotations

from django.conf import settings
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import FlexibleTokenObtainPairSerializer


class FlexibleTokenObtainPairView(TokenObtainPairView):
    """Login endpoint that returns the JWT pair and also sets the access cookie."""

    permission_classes = [permissions.AllowAny]
    serializer_class = FlexibleTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        response = Response(serializer.validated_data, status=status.HTTP_200_OK)
        jwt_settings = settings.SIMPLE_JWT
        response.set_cookie(
            jwt_settings["AUTH_COOKIE"],
            serializer.validated_data["access"],
            max_age=int(jwt_settings["ACCESS_TOKEN_LIFETIME"].total_seconds()),
            secure=jwt_settings.get("AUTH_COOKIE_SECURE", True),
            httponly=jwt_settings.get("AUTH_COOKIE_HTTP_ONLY", True),
            samesite=jwt_settings.get("AUTH_COOKIE_SAMESITE", "Lax"),
        )
        return response
