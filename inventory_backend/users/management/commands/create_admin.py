"""
PATH: users/management/commands/create_admin.py

Create an admin account.

Interactive by default; --username/--password (or ADMIN_PASSWORD in the
environment) for scripted installs. Refuses to overwrite an existing user.
"""

from __future__ import annotations

import getpass
import os

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from users.models import User

MIN_PASSWORD_LENGTH = 6


class Command(BaseCommand):
    help = "Create a new admin user"

    def add_arguments(self, parser):
        parser.add_argument("--username")
        parser.add_argument("--full-name", dest="full_name", default=None)
        parser.add_argument("--email", default=None)
        parser.add_argument(
            "--password",
            default=None,
            help="Defaults to ADMIN_PASSWORD from the environment, else prompts",
        )

    def _ask(self, label, value):
        if value is not None:
            return value
        return input(f"{label}: ").strip()

    def handle(self, *args, **options):
        username = self._ask("Username", options["username"])
        full_name = self._ask("Full name", options["full_name"])
        email = self._ask("Email", options["email"])

        password = options["password"] or os.environ.get("ADMIN_PASSWORD")
        if not password:
            password = getpass.getpass("Password: ")
            if password != getpass.getpass("Confirm password: "):
                raise CommandError("Passwords do not match")

        if not username:
            raise CommandError("Username is required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise CommandError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        with transaction.atomic():
            if User.objects.filter(username__iexact=username).exists():
                raise CommandError(f"Username already exists: {username}")
            try:
                user = User.objects.create_superuser(
                    username,
                    password=password,
                    full_name=full_name or "",
                    email=email or "",
                )
            except (ValidationError, ValueError) as exc:
                raise CommandError(str(exc)) from exc

        self.stdout.write(self.style.SUCCESS(f"Admin user created: {user.username} ({user.id})"))
