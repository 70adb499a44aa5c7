"""
PATH: users/auth_backends.py

AUTH BACKEND: Username OR Email login

Rules:
- The identifier is treated as an email when it contains "@", otherwise as
  a username. Both lookups are case-insensitive.
- Inactive users never authenticate.
- Email is optional and not unique; an email shared by several accounts
  cannot be used to log in (use the username).
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import BaseBackend

User = get_user_model()


class UsernameOrEmailBackend(BaseBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        identifier = (username or kwargs.get("email") or "").strip()
        if not identifier or password is None:
            return None

        if "@" in identifier:
            matches = list(User.objects.filter(email__iexact=identifier)[:2])
        else:
            matches = list(User.objects.filter(username__iexact=identifier)[:2])

        if len(matches) != 1:
            # Run the hasher anyway so timing does not reveal unknown users.
            User().set_password(password)
            return None

        user = matches[0]
        if user.is_active and user.check_password(password):
            return user
        return None

    def get_user(self, user_id):
        try:
            return User.objects.get(pk=user_id)
        except User.DoesNotExist:
            return None
