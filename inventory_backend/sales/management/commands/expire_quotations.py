from django.core.management.base import BaseCommand, CommandError

from core.exceptions import InventoryAppError
from sales.services.quotation_service import expire_quotations


class Command(BaseCommand):
    help = "Expire sent quotations whose validity date has passed"

    def add_arguments(self, parser):
        parser.add_argument("--as-of", dest="as_of", help="YYYY-MM-DD (default: today)")

    def handle(self, *args, **options):
        try:
            changed = expire_quotations(as_of=options.get("as_of"))
        except InventoryAppError as exc:
            raise CommandError(exc.message) from exc

        self.stdout.write(self.style.SUCCESS(f"{changed} quotation(s) expired."))
