from django.core.management.base import BaseCommand

from users.tasks import sync_all_customers


class Command(BaseCommand):
    help = "Create or update HubSpot contacts for every user with an email."

    def add_arguments(self, parser):
        parser.add_argument(
            "--only-unsynced",
            action="store_true",
            help="Skip users that already have a HubSpot contact",
        )

    def handle(self, *args, **options):
        result = sync_all_customers(only_unsynced=options["only_unsynced"])
        for err in result["errors"]:
            self.stderr.write(self.style.WARNING(f"Failed: {err}"))
        self.stdout.write(
            self.style.SUCCESS(f"Synced {result['synced']} customers ({result['skipped']} skipped).")
        )
