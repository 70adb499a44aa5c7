from django.core.management.base import BaseCommand, CommandError

from backups.services import list_backups, restore_backup, run_scheduled_backup
from core.exceptions import InventoryAppError


class Command(BaseCommand):
    help = "Create a database backup (and prune old ones), list backups, or restore one"

    def add_arguments(self, parser):
        group = parser.add_mutually_exclusive_group()
        group.add_argument("--list", action="store_true", help="List existing backups")
        group.add_argument("--restore", metavar="FILENAME", help="Restore the named backup")
        parser.add_argument(
            "--keep",
            type=int,
            default=None,
            help="How many backups to keep after creating one (default: BACKUP_RETENTION)",
        )

    def handle(self, *args, **options):
        try:
            if options["list"]:
                backups = list_backups()
                if not backups:
                    self.stdout.write("No backups found.")
                for info in backups:
                    self.stdout.write(f"{info.filename}\t{info.size}\t{info.created_at.isoformat()}")
                return

            if options["restore"]:
                info = restore_backup(options["restore"])
                self.stdout.write(self.style.SUCCESS(f"Database restored from {info.filename}."))
                return

            info = run_scheduled_backup(keep=options["keep"])
        except InventoryAppError as exc:
            raise CommandError(exc.message) from exc

        self.stdout.write(self.style.SUCCESS(f"Backup created: {info.filename} ({info.size} bytes)."))
