from django.conf import settings
from rest_framework import serializers, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from pins.models import PIN, PINRequest
from pins.services import issuance, metrics
from pins.services.redemption import redeem_pin
from results.api import SCHOOL_ADMIN, SUPER_ADMIN, TERMS, RoleView, school_param
from results.models import Result
from schools import exceptions
from schools.access import actor_for


def _max_batch():
    return int(getattr(settings, "PIN_MAX_BATCH", 1000))


class GeneratePinsSerializer(serializers.Serializer):
    school_id = serializers.IntegerField(required=False)
    session = serializers.CharField(max_length=16)
    term = serializers.ChoiceField(choices=TERMS)
    quantity = serializers.IntegerField(min_value=1)
    expiry_days = serializers.IntegerField(min_value=1, max_value=365, required=False)

    def validate_quantity(self, value):
        if value > _max_batch():
            raise serializers.ValidationError(f"Ensure this value is less than or equal to {_max_batch()}.")
        return value


class PinRequestCreateSerializer(serializers.Serializer):
    session = serializers.CharField(max_length=16)
    term = serializers.ChoiceField(choices=TERMS)
    quantity = serializers.IntegerField(min_value=1, max_value=1000)


class ApprovePinRequestSerializer(serializers.Serializer):
    expiry_days = serializers.IntegerField(min_value=1, max_value=365, required=False)


class RejectPinRequestSerializer(serializers.Serializer):
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


class CheckResultSerializer(serializers.Serializer):
    school_code = serializers.CharField(max_length=32)
    admission_number = serializers.CharField(max_length=64)
    session = serializers.CharField(max_length=16)
    term = serializers.ChoiceField(choices=TERMS)
    pin = serializers.CharField(max_length=64)


class PinSerializer(serializers.ModelSerializer):
    school_code = serializers.CharField(source="school.code", read_only=True)
    attempt_count = serializers.SerializerMethodField()

    class Meta:
        model = PIN
        fields = [
            "id",
            "pin",
            "school",
            "school_code",
            "session",
            "term",
            "is_used",
            "used_by",
            "attempt_count",
            "max_attempts",
            "expiry_date",
            "generated_by",
            "request",
            "created_at",
        ]
        read_only_fields = fields

    def get_attempt_count(self, obj):
        # list_pins annotates the count; freshly generated PINs have none
        annotated = getattr(obj, "attempt_count", None)
        return annotated if annotated is not None else obj.attempts.count()


class PinRequestSerializer(serializers.ModelSerializer):
    school_code = serializers.CharField(source="school.code", read_only=True)
    generated_pins = serializers.SlugRelatedField(many=True, read_only=True, slug_field="pin")

    class Meta:
        model = PINRequest
        fields = [
            "id",
            "school",
            "school_code",
            "session",
            "term",
            "quantity",
            "status",
            "requested_by",
            "processed_by",
            "processed_at",
            "rejection_reason",
            "generated_pins",
            "created_at",
        ]
        read_only_fields = fields


class PublicResultSerializer(serializers.ModelSerializer):
    school_name = serializers.CharField(source="school.name", read_only=True)
    school_code = serializers.CharField(source="school.code", read_only=True)
    student_name = serializers.CharField(source="student.full_name", read_only=True)
    admission_number = serializers.CharField(source="student.admission_number", read_only=True)

    class Meta:
        model = Result
        fields = [
            "id",
            "school_name",
            "school_code",
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
            "approved_at",
        ]
        read_only_fields = fields


def _paginated(view, request, qs, serializer_class):
    paginator = PageNumberPagination()
    page = paginator.paginate_queryset(qs, request, view=view)
    return paginator.get_paginated_response(serializer_class(page, many=True).data)


class PinListCreateView(RoleView):
    roles_by_method = {"GET": (SUPER_ADMIN, SCHOOL_ADMIN), "POST": (SUPER_ADMIN, SCHOOL_ADMIN)}

    def get(self, request):
        actor = actor_for(request.user)
        params = request.query_params
        is_used = params.get("is_used")
        qs = issuance.list_pins(
            school_id=actor.scope(school_param(params.get("school"))),
            session=params.get("session"),
            term=params.get("term"),
            is_used=None if is_used in (None, "") else is_used.lower() == "true",
        )
        return _paginated(self, request, qs, PinSerializer)

    def post(self, request):
        serializer = GeneratePinsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        actor = actor_for(request.user)
        school_id = actor.scope(data.get("school_id"))
        if school_id is None:
            raise exceptions.ValidationError("school_id is required")
        pins = issuance.generate_pins(
            school_id=school_id,
            session=data["session"],
            term=data["term"],
            quantity=data["quantity"],
            expiry_days=data.get("expiry_days"),
            issuer_id=actor.user_id,
        )
        return Response(
            {
                "success": True,
                "message": f"{len(pins)} PINs generated successfully",
                "data": PinSerializer(pins, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )


class PinDetailView(RoleView):
    roles_by_method = {"DELETE": (SUPER_ADMIN, SCHOOL_ADMIN)}

    def delete(self, request, pk):
        actor = actor_for(request.user)
        issuance.delete_pin(pk, school_id=actor.scope())
        return Response({"success": True, "message": "PIN deleted successfully"}, status=status.HTTP_200_OK)


class PinRequestListCreateView(RoleView):
    roles_by_method = {"GET": (SUPER_ADMIN, SCHOOL_ADMIN), "POST": (SCHOOL_ADMIN,)}

    def get(self, request):
        actor = actor_for(request.user)
        params = request.query_params
        qs = issuance.list_pin_requests(
            school_id=actor.scope(school_param(params.get("school"))), status=params.get("status")
        )
        return _paginated(self, request, qs.prefetch_related("generated_pins"), PinRequestSerializer)

    def post(self, request):
        serializer = PinRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        actor = actor_for(request.user)
        req = issuance.request_pins(school_id=actor.school_id, requester_id=actor.user_id, **serializer.validated_data)
        return Response(
            {"success": True, "message": "PIN request submitted successfully", "data": PinRequestSerializer(req).data},
            status=status.HTTP_201_CREATED,
        )


class ApprovePinRequestView(RoleView):
    roles_by_method = {"PATCH": (SUPER_ADMIN,)}

    def patch(self, request, pk):
        serializer = ApprovePinRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        actor = actor_for(request.user)
        req = issuance.approve_pin_request(
            pk, approver_id=actor.user_id, expiry_days=serializer.validated_data.get("expiry_days")
        )
        return Response(
            {
                "success": True,
                "message": f"PIN request approved. {req.quantity} PINs generated successfully",
                "data": PinRequestSerializer(req).data,
            }
        )


class RejectPinRequestView(RoleView):
    roles_by_method = {"PATCH": (SUPER_ADMIN,)}

    def patch(self, request, pk):
        serializer = RejectPinRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        actor = actor_for(request.user)
        req = issuance.reject_pin_request(
            pk, approver_id=actor.user_id, reason=serializer.validated_data["rejection_reason"]
        )
        return Response({"success": True, "message": "PIN request rejected", "data": PinRequestSerializer(req).data})


class CheckResultView(APIView):
    """Public endpoint: exchange a one-time PIN for an approved result."""

    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "check_result"

    def post(self, request):
        serializer = CheckResultSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = redeem_pin(
            school_code=data["school_code"],
            admission_number=data["admission_number"],
            session=data["session"],
            term=data["term"],
            pin_code=data["pin"],
            caller_ip=getattr(request, "client_ip", None) or request.META.get("REMOTE_ADDR"),
        )
        return Response(
            {"success": True, "message": "Result retrieved successfully", "data": PublicResultSerializer(result).data}
        )


class PinMetricsView(RoleView):
    roles_by_method = {"GET": (SUPER_ADMIN,)}

    def get(self, request):
        data = metrics.get_metrics()
        return Response({"success": True, "available": data is not None, "data": data or {}})


class ResetPinMetricsView(RoleView):
    roles_by_method = {"POST": (SUPER_ADMIN,)}

    def post(self, request):
        metrics.reset_metrics()
        return Response({"success": True, "message": "Metrics reset"}, status=status.HTTP_200_OK)
