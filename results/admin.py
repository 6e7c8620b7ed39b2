from django.contrib import admin

from .models import Result


@admin.register(Result)
class ResultAdmin(admin.ModelAdmin):
    list_display = ("student", "school", "session", "term", "average_score", "status", "updated_at")
    list_filter = ("status", "term", "session", "school")
    search_fields = ("student__first_name", "student__last_name", "student__admission_number", "school__code")
    # status only moves through the workflow services
    readonly_fields = (
        "status",
        "rejection_reason",
        "total_score",
        "average_score",
        "approved_by",
        "approved_at",
        "created_at",
        "updated_at",
    )

    def get_readonly_fields(self, request, obj=None):
        if obj is not None and obj.status == Result.APPROVED:
            return [field.name for field in self.model._meta.fields]
        return super().get_readonly_fields(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.status == Result.APPROVED:
            return False
        return super().has_delete_permission(request, obj)

    def delete_queryset(self, request, queryset):
        queryset.exclude(status=Result.APPROVED).delete()
