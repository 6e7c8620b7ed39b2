from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


TERM_CHOICES = [("First", "First"), ("Second", "Second"), ("Third", "Third")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("schools", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PINRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("session", models.CharField(max_length=16)),
                ("term", models.CharField(choices=TERM_CHOICES, max_length=8)),
                ("quantity", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=10,
                    ),
                ),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "processed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="processed_pin_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "requested_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="pin_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "school",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="pin_requests", to="schools.school"
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["school", "status"], name="pin_request_school_status_idx"),
                    models.Index(fields=["status", "created_at"], name="pin_request_status_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "pending")),
                        fields=("school", "session", "term"),
                        name="pin_request_one_pending_per_period",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="PIN",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("pin", models.CharField(max_length=32, unique=True)),
                ("session", models.CharField(max_length=16)),
                ("term", models.CharField(choices=TERM_CHOICES, max_length=8)),
                ("is_used", models.BooleanField(default=False)),
                ("used_by", models.JSONField(blank=True, null=True)),
                ("max_attempts", models.PositiveSmallIntegerField(default=3)),
                ("expiry_date", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "generated_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="generated_pins",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "request",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="generated_pins",
                        to="pins.pinrequest",
                    ),
                ),
                (
                    "school",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="pins", to="schools.school"
                    ),
                ),
            ],
            options={
                "verbose_name": "PIN",
                "indexes": [
                    models.Index(fields=["school", "session", "term"], name="pin_school_period_idx"),
                    models.Index(fields=["is_used", "expiry_date"], name="pin_used_expiry_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PinAttempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("admission_number", models.CharField(max_length=64)),
                ("attempted_at", models.DateTimeField()),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("success", models.BooleanField(default=False)),
                (
                    "pin",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="attempts", to="pins.pin"
                    ),
                ),
            ],
            options={
                "ordering": ["attempted_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="PinAccessLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("pin_code", models.CharField(max_length=64)),
                ("admission_number", models.CharField(blank=True, max_length=64)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("success", models.BooleanField(default=False)),
                ("outcome", models.CharField(max_length=64)),
                ("attempted_at", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "pin",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="access_logs",
                        to="pins.pin",
                    ),
                ),
                (
                    "school",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="pin_access_logs",
                        to="schools.school",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["pin_code", "attempted_at"], name="pin_access_code_time_idx"),
                    models.Index(fields=["ip_address", "attempted_at"], name="pin_access_ip_time_idx"),
                ],
            },
        ),
    ]
