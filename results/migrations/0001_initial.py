from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("schools", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Result",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("session", models.CharField(max_length=16)),
                (
                    "term",
                    models.CharField(
                        choices=[("First", "First"), ("Second", "Second"), ("Third", "Third")], max_length=8
                    ),
                ),
                ("class_name", models.CharField(blank=True, max_length=64)),
                ("subjects", models.JSONField(default=list)),
                ("total_score", models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ("average_score", models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ("position", models.PositiveIntegerField(blank=True, null=True)),
                ("total_students", models.PositiveIntegerField(blank=True, null=True)),
                ("teacher_comment", models.TextField(blank=True)),
                ("principal_comment", models.TextField(blank=True)),
                ("attendance", models.JSONField(blank=True, default=dict)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("submitted", "Submitted"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        default="draft",
                        max_length=12,
                    ),
                ),
                ("rejection_reason", models.TextField(blank=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_results",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "school",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="results", to="schools.school"
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="results", to="schools.student"
                    ),
                ),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="uploaded_results",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["school", "session", "term", "status"], name="result_period_status_idx")
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("school", "student", "session", "term"), name="result_school_student_session_term_uniq"
                    )
                ],
            },
        ),
    ]
