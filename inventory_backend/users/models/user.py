"""
PATH: users/models/user.py

CUSTOM USER MODEL

Staff accounts for the shop back office.

- Login identity is the username; email is optional.
- role drives capabilities (permissions/roles.py).
- Users are deactivated, never deleted (documents keep created_by).
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models

from permissions.roles import ROLE_ADMIN, ROLE_CHOICES, ROLE_SALES


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def create_user(self, username, password=None, **extra_fields):
        username = (username or "").strip()
        if not username:
            raise ValueError("Username is required")

        email = (extra_fields.pop("email", "") or "").strip()
        extra_fields["email"] = self.normalize_email(email) if email else ""
        extra_fields.setdefault("is_active", True)

        user = self.model(username=username, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean(exclude=["password"])
        user.save(using=self._db)
        return user

    def create_superuser(self, username, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", ROLE_ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(username, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=50, unique=True)
    full_name = models.CharField(max_length=100, blank=True, default="")
    email = models.EmailField(blank=True, default="")

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_SALES)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "username"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["username"]

    def clean(self):
        self.username = (self.username or "").strip()
        if not self.username:
            raise ValidationError({"username": "username is required"})
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()

    def __str__(self):
        return f"{self.username} ({self.role})"
