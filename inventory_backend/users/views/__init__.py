from .auth import LoginView, RegisterView
from .me import MeView
from .staff import UserViewSet

__all__ = [
    "RegisterView",
    "LoginView",
    "MeView",
    "UserViewSet",
]
