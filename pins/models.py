from django.conf import settings
from django.db import models
from django.db.models import Q

from results.models import TERM_CHOICES
from schools.models import School


class PINRequest(models.Model):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
    ]

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="pin_requests")
    requested_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="pin_requests")
    session = models.CharField(max_length=16)
    term = models.CharField(max_length=8, choices=TERM_CHOICES)
    quantity = models.PositiveIntegerField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_pin_requests",
    )
    processed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.school.code} {self.session} {self.term} x{self.quantity} ({self.status})"

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["school", "session", "term"],
                condition=Q(status="pending"),
                name="pin_request_one_pending_per_period",
            ),
        ]
        indexes = [
            models.Index(fields=["school", "status"], name="pin_request_school_status_idx"),
            models.Index(fields=["status", "created_at"], name="pin_request_status_created_idx"),
        ]


class PIN(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="pins")
    pin = models.CharField(max_length=32, unique=True)
    session = models.CharField(max_length=16)
    term = models.CharField(max_length=8, choices=TERM_CHOICES)
    is_used = models.BooleanField(default=False)
    used_by = models.JSONField(null=True, blank=True)  # admission_number, student_name, used_at, ip_address
    max_attempts = models.PositiveSmallIntegerField(default=3)
    expiry_date = models.DateTimeField()
    generated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="generated_pins")
    request = models.ForeignKey(
        PINRequest, on_delete=models.PROTECT, null=True, blank=True, related_name="generated_pins"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.pin} ({self.session} {self.term})"

    class Meta:
        verbose_name = "PIN"
        indexes = [
            models.Index(fields=["school", "session", "term"], name="pin_school_period_idx"),
            models.Index(fields=["is_used", "expiry_date"], name="pin_used_expiry_idx"),
        ]


class PinAttempt(models.Model):
    """Redemption attempt that reached result lookup; counts toward ``PIN.max_attempts``."""

    pin = models.ForeignKey(PIN, on_delete=models.CASCADE, related_name="attempts")
    admission_number = models.CharField(max_length=64)
    attempted_at = models.DateTimeField()
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    success = models.BooleanField(default=False)

    class Meta:
        ordering = ["attempted_at", "id"]


class PinAccessLog(models.Model):
    """Append-only audit trail of every redemption attempt, whatever its outcome."""

    pin = models.ForeignKey(PIN, on_delete=models.SET_NULL, null=True, blank=True, related_name="access_logs")
    pin_code = models.CharField(max_length=64)
    school = models.ForeignKey(School, on_delete=models.SET_NULL, null=True, blank=True, related_name="pin_access_logs")
    admission_number = models.CharField(max_length=64, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    success = models.BooleanField(default=False)
    outcome = models.CharField(max_length=64)
    attempted_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.pin_code} {self.outcome} @ {self.attempted_at:%Y-%m-%d %H:%M}"

    class Meta:
        indexes = [
            models.Index(fields=["pin_code", "attempted_at"], name="pin_access_code_time_idx"),
            models.Index(fields=["ip_address", "attempted_at"], name="pin_access_ip_time_idx"),
        ]
