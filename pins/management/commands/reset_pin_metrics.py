from django.core.management.base import BaseCommand

from pins.services.metrics import reset_metrics


class Command(BaseCommand):
    help = "Reset the Redis counters used to monitor PIN issuance and redemption."

    def handle(self, *args, **options):
        reset_metrics()
        self.stdout.write(self.style.SUCCESS("PIN metrics reset."))
