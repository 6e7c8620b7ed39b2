from rest_framework import serializers, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from results.models import TERM_CHOICES, Result
from results.services import workflow
from schools import exceptions
from schools.access import actor_for, role_required
from schools.models import StaffProfile

SUPER_ADMIN = StaffProfile.SUPER_ADMIN
SCHOOL_ADMIN = StaffProfile.SCHOOL_ADMIN
TEACHER = StaffProfile.TEACHER
TERMS = [c[0] for c in TERM_CHOICES]


class SubjectScoreSerializer(serializers.Serializer):
    subject_name = serializers.CharField(max_length=128)
    ca1 = serializers.DecimalField(max_digits=4, decimal_places=2, min_value=0, max_value=10, default=0)
    ca2 = serializers.DecimalField(max_digits=4, decimal_places=2, min_value=0, max_value=10, default=0)
    exam = serializers.DecimalField(max_digits=4, decimal_places=2, min_value=0, max_value=80, default=0)


class AttendanceSerializer(serializers.Serializer):
    present = serializers.IntegerField(min_value=0, default=0)
    absent = serializers.IntegerField(min_value=0, default=0)
    total = serializers.IntegerField(min_value=0, default=0)


class ResultContentSerializer(serializers.Serializer):
    class_name = serializers.CharField(max_length=64, required=False, allow_blank=True)
    teacher_comment = serializers.CharField(required=False, allow_blank=True)
    principal_comment = serializers.CharField(required=False, allow_blank=True)
    attendance = AttendanceSerializer(required=False)
    position = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    total_students = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class CreateResultSerializer(ResultContentSerializer):
    school_id = serializers.IntegerField(required=False)
    student_id = serializers.IntegerField()
    session = serializers.CharField(max_length=16)
    term = serializers.ChoiceField(choices=TERMS)
    subjects = serializers.ListField(child=SubjectScoreSerializer(), allow_empty=False)


class UpdateResultSerializer(ResultContentSerializer):
    subjects = serializers.ListField(child=SubjectScoreSerializer(), allow_empty=False, required=False)


class BulkResultRowSerializer(serializers.Serializer):
    # scores are checked per row by the grading policy, not here
    admission_number = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    subjects = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    class_name = serializers.CharField(max_length=64, required=False, allow_blank=True)
    teacher_comment = serializers.CharField(required=False, allow_blank=True)
    principal_comment = serializers.CharField(required=False, allow_blank=True)
    attendance = AttendanceSerializer(required=False)
    position = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    total_students = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class BulkResultSerializer(serializers.Serializer):
    session = serializers.CharField(max_length=16)
    term = serializers.ChoiceField(choices=TERMS)
    results = serializers.ListField(child=BulkResultRowSerializer(), allow_empty=False, max_length=1000)


class RejectResultSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class ResultSerializer(serializers.ModelSerializer):
    school_code = serializers.CharField(source="school.code", read_only=True)
    student_name = serializers.CharField(source="student.full_name", read_only=True)
    admission_number = serializers.CharField(source="student.admission_number", read_only=True)

    class Meta:
        model = Result
        fields = [
            "id",
            "school",
            "school_code",
            "student",
            "student_name",
            "admission_number",
            "session",
            "term",
            "class_name",
            "subjects",
            "total_score",
            "average_score",
            "position",
            "total_students",
            "teacher_comment",
            "principal_comment",
            "attendance",
            "status",
            "rejection_reason",
            "approved_by",
            "approved_at",
            "uploaded_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


def school_param(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise exceptions.ValidationError("school must be an integer id")


def _ok(result, http_status=status.HTTP_200_OK, message=None):
    payload = {"success": True, "data": ResultSerializer(result).data}
    if message:
        payload["message"] = message
    return Response(payload, status=http_status)


class RoleView(APIView):
    """APIView whose allowed roles depend on the HTTP method."""

    roles_by_method: dict = {}

    def get_permissions(self):
        roles = self.roles_by_method.get(self.request.method, ())
        return [IsAuthenticated(), role_required(*roles)()]


class ResultListCreateView(RoleView):
    roles_by_method = {"GET": (SUPER_ADMIN, SCHOOL_ADMIN, TEACHER), "POST": (SCHOOL_ADMIN, TEACHER)}

    def get(self, request):
        actor = actor_for(request.user)
        params = request.query_params
        qs = workflow.list_results(
            school_id=actor.scope(school_param(params.get("school"))),
            session=params.get("session"),
            term=params.get("term"),
            status=params.get("status"),
            search=params.get("search"),
        )
        paginator = PageNumberPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(ResultSerializer(page, many=True).data)

    def post(self, request):
        serializer = CreateResultSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        actor = actor_for(request.user)
        school_id = actor.scope(data.pop("school_id", None))
        result = workflow.create_result(
            school_id=school_id,
            student_id=data.pop("student_id"),
            session=data.pop("session"),
            term=data.pop("term"),
            subjects=data.pop("subjects"),
            uploader_id=actor.user_id,
            **data,
        )
        return _ok(result, status.HTTP_201_CREATED, "Result created successfully")


class BulkResultUploadView(RoleView):
    roles_by_method = {"POST": (SCHOOL_ADMIN, TEACHER)}

    def post(self, request):
        serializer = BulkResultSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        actor = actor_for(request.user)
        report = workflow.bulk_create_results(
            school_id=actor.school_id,
            session=data["session"],
            term=data["term"],
            rows=[dict(row) for row in data["results"]],
            uploader_id=actor.user_id,
        )
        return Response(
            {"success": True, "message": f"Uploaded {report['success']} results successfully", "data": report},
            status=status.HTTP_200_OK,
        )


class ResultDetailView(RoleView):
    roles_by_method = {
        "GET": (SUPER_ADMIN, SCHOOL_ADMIN, TEACHER),
        "PUT": (SCHOOL_ADMIN, TEACHER),
        "DELETE": (SCHOOL_ADMIN,),
    }

    def get(self, request, pk):
        actor = actor_for(request.user)
        return _ok(workflow.get_result(pk, school_id=actor.scope()))

    def put(self, request, pk):
        serializer = UpdateResultSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        actor = actor_for(request.user)
        result = workflow.update_result(pk, school_id=actor.scope(), **serializer.validated_data)
        return _ok(result, message="Result updated successfully")

    def delete(self, request, pk):
        actor = actor_for(request.user)
        workflow.delete_result(pk, school_id=actor.scope())
        return Response({"success": True, "message": "Result deleted successfully"}, status=status.HTTP_200_OK)


class SubmitResultView(RoleView):
    roles_by_method = {"PATCH": (TEACHER,)}

    def patch(self, request, pk):
        actor = actor_for(request.user)
        return _ok(workflow.submit_result(pk, school_id=actor.scope()), message="Result submitted for approval")


class ApproveResultView(RoleView):
    roles_by_method = {"PATCH": (SCHOOL_ADMIN,)}

    def patch(self, request, pk):
        actor = actor_for(request.user)
        result = workflow.approve_result(pk, approver_id=actor.user_id, school_id=actor.scope())
        return _ok(result, message="Result approved successfully")


class RejectResultView(RoleView):
    roles_by_method = {"PATCH": (SCHOOL_ADMIN,)}

    def patch(self, request, pk):
        serializer = RejectResultSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        actor = actor_for(request.user)
        result = workflow.reject_result(pk, reason=serializer.validated_data["reason"], school_id=actor.scope())
        return _ok(result, message="Result rejected")


class ReopenResultView(RoleView):
    roles_by_method = {"PATCH": (SCHOOL_ADMIN, TEACHER)}

    def patch(self, request, pk):
        actor = actor_for(request.user)
        return _ok(workflow.reopen_result(pk, school_id=actor.scope()), message="Result reopened as draft")
