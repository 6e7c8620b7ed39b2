from django.conf import settings
from django.db import models


class School(models.Model):
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=32, unique=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=128, blank=True)
    state = models.CharField(max_length=128, blank=True)
    country = models.CharField(max_length=64, default="Nigeria")
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    logo = models.CharField(max_length=512, blank=True)
    motto = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.code})"


class Student(models.Model):
    GENDER_CHOICES = [("Male", "Male"), ("Female", "Female")]

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="students")
    admission_number = models.CharField(max_length=64)
    first_name = models.CharField(max_length=64)
    last_name = models.CharField(max_length=64)
    other_names = models.CharField(max_length=128, blank=True)
    gender = models.CharField(max_length=8, choices=GENDER_CHOICES, blank=True)
    class_name = models.CharField(max_length=64, blank=True)
    class_arm = models.CharField(max_length=16, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def save(self, *args, **kwargs):
        self.admission_number = (self.admission_number or "").strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.full_name} ({self.admission_number})"

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["school", "admission_number"], name="student_school_admission_uniq"),
        ]
        indexes = [
            models.Index(fields=["school", "class_name"], name="student_school_class_idx"),
        ]


class StaffProfile(models.Model):
    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"
    TEACHER = "teacher"
    ROLE_CHOICES = [
        (SUPER_ADMIN, "Super admin"),
        (SCHOOL_ADMIN, "School admin"),
        (TEACHER, "Teacher"),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="staff_profile")
    role = models.CharField(max_length=16, choices=ROLE_CHOICES)
    school = models.ForeignKey(School, on_delete=models.CASCADE, null=True, blank=True, related_name="staff")

    def __str__(self):
        return f"{self.user} - {self.get_role_display()}"


class AdmissionSequence(models.Model):
    """Last admission number issued for a school in a given year."""

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="admission_sequences")
    year = models.PositiveIntegerField()
    last_value = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.school.code} {self.year}: {self.last_value}"

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["school", "year"], name="admission_sequence_school_year_uniq"),
        ]
