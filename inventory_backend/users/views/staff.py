from rest_framework import mixins, viewsets
from rest_framework.permissions import IsAuthenticated

from permissions.roles import CAP_USERS_MANAGE, HasCapability
from users.models import User
from users.serializers import UserSerializer, UserUpdateSerializer


class UserViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Staff account management (admin only).

    Accounts are deactivated via PATCH {"is_active": false}; never deleted.
    """

    queryset = User.objects.all().order_by("username")
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_USERS_MANAGE

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return UserUpdateSerializer
        return UserSerializer
