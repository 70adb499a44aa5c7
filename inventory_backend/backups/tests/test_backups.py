# backups/tests/test_backups.py

import shutil
import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import call_command
from django.db import transaction
from django.test import TransactionTestCase, override_settings
from rest_framework.test import APIClient

from backups.services import (
    create_backup,
    delete_backup,
    list_backups,
    prune_backups,
    restore_backup,
    run_scheduled_backup,
)
from core.exceptions import BackupError, InvalidInputError, ReferenceNotFoundError
from core.tests.factories import make_customer, make_user
from permissions.roles import ROLE_MANAGER
from sales.models import Customer


class BackupTestCase(TransactionTestCase):
    """
    Backups refuse to run inside a transaction, so these tests cannot use
    the transaction-wrapped TestCase.
    """

    def setUp(self):
        self.directory = Path(tempfile.mkdtemp(prefix="backups-"))
        self.addCleanup(shutil.rmtree, self.directory, ignore_errors=True)
        overrides = override_settings(BACKUP_DIR=self.directory)
        overrides.enable()
        self.addCleanup(overrides.disable)


class CreateAndListTests(BackupTestCase):
    def test_create_writes_a_named_file(self):
        info = create_backup()

        self.assertRegex(info.filename, r"^backup_.+\.db$")
        self.assertTrue((self.directory / info.filename).is_file())
        self.assertGreater(info.size, 0)

    def test_list_is_newest_first_and_ignores_strangers(self):
        first = create_backup()
        second = create_backup()
        (self.directory / "notes.txt").write_text("not a backup")

        names = [b.filename for b in list_backups()]

        self.assertEqual(set(names), {first.filename, second.filename})
        self.assertEqual(names[0], max(first.filename, second.filename))

    def test_refused_inside_a_transaction(self):
        with self.assertRaises(BackupError):
            with transaction.atomic():
                create_backup()

    @override_settings(BACKUP_DIR="/nonexistent/place")
    def test_listing_a_missing_directory_is_empty(self):
        self.assertEqual(list_backups(), [])


class RetentionTests(BackupTestCase):
    def test_prune_keeps_newest(self):
        for _ in range(4):
            create_backup()

        removed = prune_backups(keep=2)

        self.assertEqual(len(removed), 2)
        self.assertEqual(len(list_backups()), 2)

    @override_settings(BACKUP_RETENTION=1)
    def test_scheduled_backup_applies_retention(self):
        create_backup()

        info = run_scheduled_backup()

        self.assertEqual([b.filename for b in list_backups()], [info.filename])


class DeleteTests(BackupTestCase):
    def test_delete(self):
        info = create_backup()

        delete_backup(info.filename)

        self.assertEqual(list_backups(), [])

    def test_path_tricks_are_rejected(self):
        with self.assertRaises(InvalidInputError):
            delete_backup("../inventory.db")

    def test_missing_file(self):
        with self.assertRaises(ReferenceNotFoundError):
            delete_backup("backup_2020-01-01T00-00-00-000000Z.db")


class RestoreTests(BackupTestCase):
    def test_restore_rolls_data_back(self):
        make_customer(name="Before Backup")
        info = create_backup()
        make_customer(name="After Backup")

        restore_backup(info.filename)

        self.assertEqual(
            list(Customer.objects.values_list("name", flat=True)), ["Before Backup"]
        )

    def test_management_command(self):
        out = StringIO()

        call_command("backup_database", "--keep", "5", stdout=out)
        call_command("backup_database", "--list", stdout=out)

        self.assertIn("Backup created", out.getvalue())
        self.assertEqual(len(list_backups()), 1)


class BackupApiTests(BackupTestCase):
    def test_admin_only(self):
        manager = APIClient()
        manager.force_authenticate(user=make_user(role=ROLE_MANAGER))

        self.assertEqual(manager.get("/api/backups/").status_code, 403)

    def test_create_and_list(self):
        admin = APIClient()
        admin.force_authenticate(user=make_user())

        created = admin.post("/api/backups/")
        listing = admin.get("/api/backups/")

        self.assertEqual(created.status_code, 201)
        self.assertEqual(listing.data["count"], 1)
        self.assertEqual(listing.data["results"][0]["filename"], created.data["filename"])
