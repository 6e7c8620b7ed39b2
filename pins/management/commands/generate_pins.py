from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from pins.services.issuance import generate_pins
from results.models import TERM_CHOICES
from schools import exceptions
from schools.models import School


class Command(BaseCommand):
    help = "Generate a batch of result-checking PINs for a school, session and term."

    def add_arguments(self, parser):
        parser.add_argument("school_code", help="School code (e.g. GRV).")
        parser.add_argument("--session", required=True, help="Academic session, e.g. 2024/2025.")
        parser.add_argument("--term", required=True, choices=[c[0] for c in TERM_CHOICES])
        parser.add_argument("--quantity", type=int, required=True, help="Number of PINs to generate (1-1000).")
        parser.add_argument(
            "--expiry-days",
            dest="expiry_days",
            type=int,
            default=None,
            help="Days before the PINs expire (default: PIN_DEFAULT_EXPIRY_DAYS).",
        )
        parser.add_argument("--issuer", required=True, help="Username recorded as generator of the batch.")
        parser.add_argument("--show", action="store_true", help="Print the generated codes.")

    def handle(self, *args, **options):
        school = School.objects.filter(code=options["school_code"].strip().upper()).first()
        if school is None:
            raise CommandError(f"Unknown school code: {options['school_code']}")
        issuer = get_user_model().objects.filter(username=options["issuer"]).first()
        if issuer is None:
            raise CommandError(f"Unknown user: {options['issuer']}")

        try:
            pins = generate_pins(
                school_id=school.pk,
                session=options["session"],
                term=options["term"],
                quantity=options["quantity"],
                expiry_days=options["expiry_days"],
                issuer_id=issuer.pk,
            )
        except exceptions.PlatformError as exc:
            raise CommandError(exc.message)

        if options["show"]:
            for pin in pins:
                self.stdout.write(pin.pin)
        self.stdout.write(
            self.style.SUCCESS(
                f"{len(pins)} PINs generated for {school.code} {options['session']} {options['term']} "
                f"(expire {pins[0].expiry_date:%Y-%m-%d})"
            )
        )
