from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics, permissions
from rest_framework.response import Response

from .filters import SettlementFilter
from .models import Settlement
from .serializers import SettlementSerializer


class IsVendorOrAdmin(permissions.BasePermission):
    message = "Only vendors and admins can view settlements."

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and (user.is_admin() or user.is_vendor()))


class SettlementListView(generics.ListAPIView):
    """Read-only settlement list: vendors see their own, admins see everything."""

    serializer_class = SettlementSerializer
    permission_classes = [IsVendorOrAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_class = SettlementFilter
    http_method_names = ["get"]

    def get_queryset(self):
        qs = Settlement.objects.select_related("booking").order_by("scheduled_date", "id")
        user = self.request.user
        if user.is_admin():
            return qs
        return qs.filter(vendor=user)

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_serializer(queryset, many=True)
        return Response({"success": True, "settlements": serializer.data})
