from django.core.management.base import BaseCommand

from pins.services.issuance import purge_expired_pins


class Command(BaseCommand):
    help = "Delete unused PINs that expired more than N days ago. Used PINs are kept."

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=0,
            help="Only purge PINs expired for more than N days (default: 0, any expired PIN).",
        )

    def handle(self, *args, **options):
        deleted = purge_expired_pins(older_than_days=options["days"])
        self.stdout.write(self.style.SUCCESS(f"Purge done (> {options['days']} days): {deleted} PINs deleted"))
