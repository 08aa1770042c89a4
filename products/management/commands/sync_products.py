from django.core.management.base import BaseCommand

from products.currency import sync_currencies
from products.sync import sync_products


class Command(BaseCommand):
    help = "Pull products (and optionally currencies) from HubSpot."

    def add_arguments(self, parser):
        parser.add_argument(
            "--currencies",
            action="store_true",
            help="Sync enabled currencies before products",
        )

    def handle(self, *args, **options):
        if options["currencies"]:
            result = sync_currencies()
            self.stdout.write(
                f"Currencies: company={result['company_currency']} enabled={len(result['enabled_currencies'])}"
            )
            for err in result["errors"]:
                self.stderr.write(self.style.WARNING(err))

        result = sync_products()
        for err in result["errors"]:
            self.stderr.write(self.style.WARNING(err))
        self.stdout.write(self.style.SUCCESS(f"Synced {result['synced']} products."))
