import logging

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from results.models import Result
from schools.models import StaffProfile
from schools.tests.fixtures import make_result, make_school, make_staff, make_student


class ResultApiTests(TestCase):
    def setUp(self):
        self.school = make_school()
        self.student = make_student(self.school)
        self.teacher = make_staff("teacher", StaffProfile.TEACHER, self.school)
        self.admin = make_staff("admin", StaffProfile.SCHOOL_ADMIN, self.school)
        self.client = APIClient()

    def _as(self, user):
        self.client.force_authenticate(user=user)
        return self.client

    def test_teacher_creates_and_submits(self):
        payload = {
            "student_id": self.student.id,
            "session": "2024/2025",
            "term": "First",
            "subjects": [{"subject_name": "Mathematics", "ca1": 8, "ca2": 9, "exam": 70}],
            "attendance": {"present": 60, "absent": 0, "total": 60},
        }
        resp = self._as(self.teacher).post("/api/results/", payload, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertTrue(resp.data["success"])
        self.assertEqual(resp.data["data"]["status"], Result.DRAFT)
        self.assertEqual(resp.data["data"]["subjects"][0]["grade"], "A")

        result_id = resp.data["data"]["id"]
        resp = self.client.patch(f"/api/results/{result_id}/submit/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["status"], Result.SUBMITTED)

    def test_out_of_range_score_is_400(self):
        payload = {
            "student_id": self.student.id,
            "session": "2024/2025",
            "term": "First",
            "subjects": [{"subject_name": "Mathematics", "exam": 95}],
        }
        resp = self._as(self.teacher).post("/api/results/", payload, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Result.objects.count(), 0)

    def test_duplicate_is_409(self):
        make_result(self.school, self.student, self.teacher)
        payload = {
            "student_id": self.student.id,
            "session": "2024/2025",
            "term": "First",
            "subjects": [{"subject_name": "English", "exam": 40}],
        }
        resp = self._as(self.admin).post("/api/results/", payload, format="json")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["code"], "duplicate_result")
        self.assertFalse(resp.data["success"])

    def test_teacher_cannot_approve(self):
        result = make_result(self.school, self.student, self.teacher, status=Result.SUBMITTED)
        resp = self._as(self.teacher).patch(f"/api/results/{result.id}/approve/")
        self.assertEqual(resp.status_code, 403)
        result.refresh_from_db()
        self.assertEqual(result.status, Result.SUBMITTED)

    def test_admin_approves_and_rejects(self):
        first = make_result(self.school, self.student, self.teacher, status=Result.SUBMITTED)
        second_student = make_student(self.school, admission_number="GRV2025002", first_name="Bola")
        second = make_result(self.school, second_student, self.teacher, status=Result.SUBMITTED)

        resp = self._as(self.admin).patch(f"/api/results/{first.id}/approve/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["approved_by"], self.admin.id)

        resp = self.client.patch(f"/api/results/{second.id}/reject/", {"reason": ""}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "missing_reason")

        resp = self.client.patch(f"/api/results/{second.id}/reject/", {"reason": "Scores incomplete"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["rejection_reason"], "Scores incomplete")

    def test_update_approved_is_409(self):
        result = make_result(self.school, self.student, self.teacher, status=Result.APPROVED)
        resp = self._as(self.admin).put(f"/api/results/{result.id}/", {"teacher_comment": "x"}, format="json")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["code"], "invalid_transition")

    def test_list_is_tenant_scoped(self):
        make_result(self.school, self.student, self.teacher)
        other = make_school(code="OAK", name="Oak")
        other_student = make_student(other, admission_number="OAK2025001")
        other_teacher = make_staff("oak_teacher", StaffProfile.TEACHER, other)
        make_result(other, other_student, other_teacher)

        resp = self._as(self.teacher).get("/api/results/", {"school": other.id})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["count"], 1)
        self.assertEqual(resp.data["results"][0]["school_code"], "GRV")

        root = get_user_model().objects.create_superuser(username="root", password="p", email="r@x.io")
        resp = self._as(root).get("/api/results/")
        self.assertEqual(resp.data["count"], 2)
        resp = self.client.get("/api/results/", {"school": other.id})
        self.assertEqual(resp.data["count"], 1)

    def test_other_school_result_is_404(self):
        other = make_school(code="OAK", name="Oak")
        other_admin = make_staff("oak_admin", StaffProfile.SCHOOL_ADMIN, other)
        result = make_result(self.school, self.student, self.teacher)
        resp = self._as(other_admin).get(f"/api/results/{result.id}/")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["code"], "result_not_found")

    def test_delete_requires_school_admin(self):
        result = make_result(self.school, self.student, self.teacher)
        self.assertEqual(self._as(self.teacher).delete(f"/api/results/{result.id}/").status_code, 403)
        self.assertEqual(self._as(self.admin).delete(f"/api/results/{result.id}/").status_code, 200)
        self.assertFalse(Result.objects.exists())

    def test_self_approval_is_403(self):
        result = make_result(self.school, self.student, self.admin, status=Result.SUBMITTED)
        resp = self._as(self.admin).patch(f"/api/results/{result.id}/approve/")
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(resp.data["success"])
        self.assertEqual(resp.data["code"], "self_approval")
        self.assertEqual(resp.data["message"], "Cannot approve your own results")
        result.refresh_from_db()
        self.assertEqual(result.status, Result.SUBMITTED)

    def test_bulk_upload_reports_per_row(self):
        make_student(self.school, admission_number="GRV2025002", first_name="Bola", last_name="Ade")
        payload = {
            "session": "2024/2025",
            "term": "First",
            "results": [
                {"admission_number": "GRV2025001", "subjects": [{"subject_name": "Mathematics", "exam": 70}]},
                {"admission_number": "GRV2025002", "subjects": [{"subject_name": "Mathematics", "exam": 95}]},
                {"admission_number": "GRV0000000", "subjects": []},
            ],
        }
        resp = self._as(self.teacher).post("/api/results/bulk/", payload, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data["success"])
        self.assertEqual(resp.data["message"], "Uploaded 1 results successfully")
        report = resp.data["data"]
        self.assertEqual((report["success"], report["failed"]), (1, 2))
        self.assertEqual(report["errors"][1], "Row 3: Student GRV0000000 not found")
        created = Result.objects.get()
        self.assertEqual(report["result_ids"], [created.id])
        self.assertEqual(created.uploaded_by_id, self.teacher.id)
        self.assertEqual(created.status, Result.DRAFT)

    def test_bulk_upload_needs_school_staff(self):
        payload = {"session": "2024/2025", "term": "First", "results": [{"admission_number": "GRV2025001"}]}
        root = get_user_model().objects.create_superuser(username="root", password="p", email="r@x.io")
        self.assertEqual(self._as(root).post("/api/results/bulk/", payload, format="json").status_code, 403)
        resp = self._as(self.admin).post("/api/results/bulk/", dict(payload, results=[]), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Result.objects.exists())

    def test_handled_errors_are_logged(self):
        self.assertTrue(logging.getLogger("config.exceptions").isEnabledFor(logging.INFO))
        with self.assertLogs("config.exceptions", "INFO") as logs:
            resp = self._as(self.admin).get("/api/results/999999/")
        self.assertEqual(resp.status_code, 404)
        self.assertIn("result_not_found", logs.output[0])
