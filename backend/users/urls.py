from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .api import FlexibleTokenObtainPairView

app_name = "users"

urlpatterns = [
    path("token/", FlexibleTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
]
