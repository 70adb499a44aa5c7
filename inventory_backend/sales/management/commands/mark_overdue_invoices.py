from django.core.management.base import BaseCommand, CommandError

from core.exceptions import InventoryAppError
from sales.services.payment_service import mark_overdue_invoices


class Command(BaseCommand):
    help = "Flag unpaid invoices past their due date as Overdue"

    def add_arguments(self, parser):
        parser.add_argument("--as-of", dest="as_of", help="YYYY-MM-DD (default: today)")

    def handle(self, *args, **options):
        try:
            changed = mark_overdue_invoices(as_of=options.get("as_of"))
        except InventoryAppError as exc:
            raise CommandError(exc.message) from exc

        self.stdout.write(self.style.SUCCESS(f"{changed} invoice(s) marked overdue."))
