from django.urls import path

from .api import SettlementListView

app_name = "settlements"

urlpatterns = [
    path("", SettlementListView.as_view(), name="settlement-list"),
]
