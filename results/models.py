from django.conf import settings
from django.db import models

from results.services.grading import apply_grading
from schools.models import School, Student


TERM_CHOICES = [("First", "First"), ("Second", "Second"), ("Third", "Third")]


class Result(models.Model):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    STATUS_CHOICES = [
        (DRAFT, "Draft"),
        (SUBMITTED, "Submitted"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
    ]

    school = models.ForeignKey(School, on_delete=models.PROTECT, related_name="results")
    student = models.ForeignKey(Student, on_delete=models.PROTECT, related_name="results")
    session = models.CharField(max_length=16)
    term = models.CharField(max_length=8, choices=TERM_CHOICES)
    class_name = models.CharField(max_length=64, blank=True)
    subjects = models.JSONField(default=list)  # SubjectScore entries, totals filled by grading
    total_score = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    average_score = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    position = models.PositiveIntegerField(null=True, blank=True)
    total_students = models.PositiveIntegerField(null=True, blank=True)
    teacher_comment = models.TextField(blank=True)
    principal_comment = models.TextField(blank=True)
    attendance = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=DRAFT)
    rejection_reason = models.TextField(blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="approved_results"
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="uploaded_results"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        apply_grading(self)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.student} - {self.session} {self.term} ({self.status})"

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["school", "student", "session", "term"], name="result_school_student_session_term_uniq"
            ),
        ]
        indexes = [
            models.Index(fields=["school", "session", "term", "status"], name="result_period_status_idx"),
        ]
