import random

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from pins.services.issuance import generate_pins
from results.models import TERM_CHOICES, Result
from results.services import workflow
from schools.models import School, StaffProfile, Student
from schools.services.sequences import next_admission_number

SUBJECTS = ["Mathematics", "English Language", "Basic Science", "Civic Education", "Computer Studies"]
FIRST_NAMES = ["Ada", "Chinedu", "Fatima", "Tunde", "Ngozi", "Ibrahim", "Amaka", "Yusuf", "Funke", "Emeka"]
LAST_NAMES = ["Okafor", "Adeyemi", "Bello", "Eze", "Abubakar", "Okonkwo", "Balogun", "Nwosu", "Lawal", "Obi"]


class Command(BaseCommand):
    help = "Create demo data (school, staff, students, approved results, a PIN batch) to try the result checker."

    def add_arguments(self, parser):
        parser.add_argument("--students", type=int, default=10, help="Number of students to create (default: 10)")
        parser.add_argument("--session", type=str, default="2024/2025", help="Academic session for the results")
        parser.add_argument("--term", type=str, default="First", choices=[c[0] for c in TERM_CHOICES])
        parser.add_argument("--class-name", type=str, default="JSS 1", help="Class to put the students in")
        parser.add_argument("--code", type=str, default="DEMO", help="School code (default: DEMO)")

    def _staff(self, username, role, school):
        user, created = get_user_model().objects.get_or_create(username=username)
        if created:
            user.set_password("demo-pass-123")
            user.save(update_fields=["password"])
        StaffProfile.objects.update_or_create(user=user, defaults={"role": role, "school": school})
        return user

    def handle(self, *args, **options):
        target_students = options["students"]
        session = options["session"]
        term = options["term"]
        class_name = options["class_name"]

        school, _ = School.objects.get_or_create(
            code=options["code"].upper(),
            defaults={
                "name": "Demo Grammar School",
                "address": "12 Demo Street",
                "city": "Ikeja",
                "state": "Lagos",
                "motto": "Knowledge and Character",
            },
        )
        admin = self._staff(f"{school.code.lower()}_admin", StaffProfile.SCHOOL_ADMIN, school)
        teacher = self._staff(f"{school.code.lower()}_teacher", StaffProfile.TEACHER, school)

        created = 0
        for i in range(target_students):
            student = Student.objects.create(
                school=school,
                admission_number=next_admission_number(school),
                first_name=FIRST_NAMES[i % len(FIRST_NAMES)],
                last_name=LAST_NAMES[(i // len(FIRST_NAMES)) % len(LAST_NAMES)],
                gender=random.choice(["Male", "Female"]),
                class_name=class_name,
            )
            subjects = [
                {
                    "subject_name": name,
                    "ca1": random.randint(4, 10),
                    "ca2": random.randint(4, 10),
                    "exam": random.randint(30, 80),
                }
                for name in SUBJECTS
            ]
            result = workflow.create_result(
                school_id=school.pk,
                student_id=student.pk,
                session=session,
                term=term,
                subjects=subjects,
                uploader_id=teacher.pk,
                class_name=class_name,
                attendance={"present": 58, "absent": 2, "total": 60},
                teacher_comment="A diligent student.",
            )
            workflow.submit_result(result.pk, school_id=school.pk)
            workflow.approve_result(result.pk, approver_id=admin.pk, school_id=school.pk)
            created += 1

        pins = generate_pins(
            school_id=school.pk, session=session, term=term, quantity=max(target_students, 1), issuer_id=admin.pk
        )
        approved = Result.objects.filter(school=school, session=session, term=term, status=Result.APPROVED).count()
        self.stdout.write(
            self.style.SUCCESS(
                f"School: {school.name} ({school.code}), students created: {created}, "
                f"approved results: {approved}, PINs generated: {len(pins)}"
            )
        )
        for pin in pins[:3]:
            self.stdout.write(f"  sample PIN: {pin.pin}")
