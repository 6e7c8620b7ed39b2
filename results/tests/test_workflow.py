from decimal import Decimal

from django.test import TestCase

from results.models import Result
from results.services import workflow
from schools import exceptions
from schools.models import StaffProfile
from schools.tests.fixtures import MATH_87, make_result, make_school, make_staff, make_student


class ResultWorkflowTests(TestCase):
    def setUp(self):
        self.school = make_school()
        self.student = make_student(self.school)
        self.teacher = make_staff("teacher", StaffProfile.TEACHER, self.school)
        self.admin = make_staff("admin", StaffProfile.SCHOOL_ADMIN, self.school)

    def _create(self, **kwargs):
        params = {
            "school_id": self.school.id,
            "student_id": self.student.id,
            "session": "2024/2025",
            "term": "First",
            "subjects": MATH_87,
            "uploader_id": self.teacher.id,
        }
        params.update(kwargs)
        return workflow.create_result(**params)

    def test_create_starts_as_graded_draft(self):
        result = self._create(class_name="JSS 1", attendance={"present": 50, "absent": 2, "total": 52})
        self.assertEqual(result.status, Result.DRAFT)
        self.assertEqual(result.total_score, Decimal("87.00"))
        self.assertEqual(result.average_score, Decimal("87.00"))
        self.assertEqual(result.subjects[0]["grade"], "A")
        self.assertEqual(result.attendance["present"], 50)

    def test_duplicate_period_is_rejected(self):
        self._create()
        with self.assertRaises(exceptions.DuplicateResult):
            self._create(subjects=[{"subject_name": "English", "exam": 40}])
        self.assertEqual(Result.objects.count(), 1)

    def test_student_of_other_school_is_not_found(self):
        other = make_school(code="OAK", name="Oak")
        with self.assertRaises(exceptions.StudentNotFound):
            self._create(school_id=other.id)

    def test_status_cannot_be_set_directly(self):
        with self.assertRaises(exceptions.ValidationError):
            self._create(status=Result.APPROVED)

    def test_happy_path_to_approved(self):
        result = self._create()
        workflow.submit_result(result.id, school_id=self.school.id)
        approved = workflow.approve_result(result.id, approver_id=self.admin.id, school_id=self.school.id)
        self.assertEqual(approved.status, Result.APPROVED)
        self.assertEqual(approved.approved_by_id, self.admin.id)
        self.assertIsNotNone(approved.approved_at)

    def test_approve_requires_submitted(self):
        result = self._create()
        with self.assertRaises(exceptions.InvalidTransitionError) as ctx:
            workflow.approve_result(result.id, approver_id=self.admin.id)
        self.assertEqual(ctx.exception.payload["current_status"], Result.DRAFT)

    def test_second_approval_loses(self):
        result = self._create()
        workflow.submit_result(result.id)
        workflow.approve_result(result.id, approver_id=self.admin.id)
        with self.assertRaises(exceptions.InvalidTransitionError):
            workflow.approve_result(result.id, approver_id=self.admin.id)

    def test_reject_without_reason_leaves_result_submitted(self):
        result = self._create()
        workflow.submit_result(result.id)
        for reason in ("", "   ", None):
            with self.assertRaises(exceptions.MissingReason):
                workflow.reject_result(result.id, reason=reason)
        result.refresh_from_db()
        self.assertEqual(result.status, Result.SUBMITTED)

    def test_rejected_result_stays_rejected_on_edit_until_reopened(self):
        result = self._create()
        workflow.submit_result(result.id)
        workflow.reject_result(result.id, reason="Check the exam scores")
        edited = workflow.update_result(result.id, subjects=[{"subject_name": "Mathematics", "ca1": 8, "ca2": 9, "exam": 60}])
        self.assertEqual(edited.status, Result.REJECTED)
        self.assertEqual(edited.total_score, Decimal("77.00"))
        self.assertEqual(edited.subjects[0]["grade"], "B")
        with self.assertRaises(exceptions.InvalidTransitionError):
            workflow.submit_result(result.id)

        reopened = workflow.reopen_result(result.id)
        self.assertEqual(reopened.status, Result.DRAFT)
        self.assertEqual(reopened.rejection_reason, "")
        self.assertEqual(workflow.submit_result(result.id).status, Result.SUBMITTED)

    def test_approved_result_is_frozen(self):
        result = make_result(self.school, self.student, self.teacher, status=Result.APPROVED)
        with self.assertRaises(exceptions.InvalidTransitionError):
            workflow.update_result(result.id, teacher_comment="Late edit")
        with self.assertRaises(exceptions.InvalidTransitionError):
            workflow.delete_result(result.id)
        with self.assertRaises(exceptions.InvalidTransitionError):
            workflow.reopen_result(result.id)
        result.refresh_from_db()
        self.assertEqual(result.teacher_comment, "")

    def test_delete_draft(self):
        result = self._create()
        workflow.delete_result(result.id, school_id=self.school.id)
        self.assertFalse(Result.objects.filter(pk=result.id).exists())
        with self.assertRaises(exceptions.ResultNotFound):
            workflow.delete_result(result.id)

    def test_other_tenant_cannot_see_or_transition(self):
        other = make_school(code="OAK", name="Oak")
        result = self._create()
        with self.assertRaises(exceptions.ResultNotFound):
            workflow.get_result(result.id, school_id=other.id)
        with self.assertRaises(exceptions.ResultNotFound):
            workflow.submit_result(result.id, school_id=other.id)

    def test_list_filters_and_search(self):
        self._create()
        bola = make_student(self.school, admission_number="GRV2025002", first_name="Bola", last_name="Ade")
        self._create(student_id=bola.id, term="Second")
        self.assertEqual(workflow.list_results(school_id=self.school.id).count(), 2)
        self.assertEqual(workflow.list_results(school_id=self.school.id, term="Second").count(), 1)
        self.assertEqual(list(workflow.list_results(search="bola").values_list("student_id", flat=True)), [bola.id])

    def test_find_approved_result_ignores_other_statuses(self):
        result = self._create()
        find = dict(school_id=self.school.id, student_id=self.student.id, session="2024/2025", term="First")
        self.assertIsNone(workflow.find_approved_result(**find))
        workflow.submit_result(result.id)
        workflow.approve_result(result.id, approver_id=self.admin.id)
        self.assertEqual(workflow.find_approved_result(**find).id, result.id)

    def test_uploader_cannot_approve_own_result(self):
        result = self._create(uploader_id=self.admin.id)
        workflow.submit_result(result.id, school_id=self.school.id)
        with self.assertRaises(exceptions.SelfApproval):
            workflow.approve_result(result.id, approver_id=self.admin.id, school_id=self.school.id)
        result.refresh_from_db()
        self.assertEqual(result.status, Result.SUBMITTED)
        self.assertIsNone(result.approved_by_id)

    def test_self_approval_of_draft_is_still_a_transition_error(self):
        result = self._create(uploader_id=self.admin.id)
        with self.assertRaises(exceptions.InvalidTransitionError):
            workflow.approve_result(result.id, approver_id=self.admin.id)


class BulkCreateResultsTests(TestCase):
    def setUp(self):
        self.school = make_school()
        self.ada = make_student(self.school, class_name="JSS 1")
        self.bola = make_student(self.school, admission_number="GRV2025002", first_name="Bola", last_name="Ade")
        self.teacher = make_staff("teacher", StaffProfile.TEACHER, self.school)

    def _bulk(self, rows, **kwargs):
        params = dict(school_id=self.school.id, session="2024/2025", term="First", rows=rows, uploader_id=self.teacher.id)
        params.update(kwargs)
        return workflow.bulk_create_results(**params)

    def test_rows_fail_independently(self):
        make_result(self.school, self.bola, self.teacher)
        report = self._bulk(
            [
                {"admission_number": "grv2025001", "subjects": MATH_87},
                {"admission_number": "GRV2025002", "subjects": MATH_87},
                {"admission_number": "GRV9999999", "subjects": MATH_87},
                {"subjects": MATH_87},
            ]
        )
        self.assertEqual(report["success"], 1)
        self.assertEqual(report["failed"], 3)
        self.assertEqual(
            report["errors"],
            [
                "Row 2: Result already exists for GRV2025002",
                "Row 3: Student GRV9999999 not found",
                "Row 4: Missing admission number",
            ],
        )
        created = Result.objects.get(pk=report["result_ids"][0])
        self.assertEqual(created.student_id, self.ada.id)
        self.assertEqual(created.status, Result.DRAFT)
        self.assertEqual(created.class_name, "JSS 1")
        self.assertEqual(created.average_score, Decimal("87.00"))

    def test_bad_scores_fail_only_their_row(self):
        report = self._bulk(
            [
                {"admission_number": "GRV2025001", "subjects": [{"subject_name": "Mathematics", "exam": 95}]},
                {"admission_number": "GRV2025002", "subjects": MATH_87, "class_name": "JSS 2"},
            ]
        )
        self.assertEqual((report["success"], report["failed"]), (1, 1))
        self.assertTrue(report["errors"][0].startswith("Row 1: "))
        self.assertEqual(Result.objects.get().class_name, "JSS 2")

    def test_invalid_period_rejects_the_whole_batch(self):
        with self.assertRaises(exceptions.ValidationError):
            self._bulk([{"admission_number": "GRV2025001", "subjects": MATH_87}], term="Fourth")
        self.assertFalse(Result.objects.exists())
