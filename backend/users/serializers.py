from __future__ import annotations

from typing import Optional

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()


class FlexibleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Accepts email or username for authentication and returns a JWT pair.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["identifier"] = serializers.CharField(required=False, allow_blank=True)
        if self.username_field in self.fields:
            self.fields[self.username_field].required = False

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["accountType"] = user.account_type
        return token

    def validate(self, attrs: dict) -> dict:
        identifier = attrs.get("identifier") or attrs.get(self.username_field) or ""
        password = attrs.get("password")
        if not identifier or not password:
            raise serializers.ValidationError(
                {"non_field_errors": ["Provide credentials to log in."]}
            )

        user = self._resolve_user(identifier)
        if not user:
            raise AuthenticationFailed(self.error_messages["no_active_account"])

        # TokenObtainPairSerializer expects the username field in attrs.
        attrs[self.username_field] = user.get_username()
        self.user = user
        return super().validate(attrs)

    def _resolve_user(self, identifier: str) -> Optional[User]:
        value = identifier.strip()
        if not value:
            return None

        if "@" in value:
            user = User.objects.filter(email__iexact=value).first()
            if user:
                return user

        return User.objects.filter(username__iexact=value).first()
