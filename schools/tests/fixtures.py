from django.contrib.auth import get_user_model

from results.models import Result
from schools.models import School, StaffProfile, Student

MATH_87 = [{"subject_name": "Mathematics", "ca1": 8, "ca2": 9, "exam": 70}]


def make_school(code="GRV", name="Greenview College", **kwargs):
    return School.objects.create(code=code, name=name, **kwargs)


def make_student(school, admission_number="GRV2025001", first_name="Ada", last_name="Okafor", **kwargs):
    return Student.objects.create(
        school=school, admission_number=admission_number, first_name=first_name, last_name=last_name, **kwargs
    )


def make_staff(username, role, school=None):
    user = get_user_model().objects.create_user(username=username, password="p")
    StaffProfile.objects.create(user=user, role=role, school=school)
    return user


def make_result(school, student, uploader, session="2024/2025", term="First", subjects=None, status=Result.DRAFT, **kwargs):
    return Result.objects.create(
        school=school,
        student=student,
        session=session,
        term=term,
        subjects=subjects if subjects is not None else list(MATH_87),
        uploaded_by=uploader,
        status=status,
        **kwargs,
    )
