from django.contrib import admin

from .models import PIN, PINRequest, PinAccessLog, PinAttempt


class PinAttemptInline(admin.TabularInline):
    model = PinAttempt
    extra = 0
    can_delete = False
    readonly_fields = ("admission_number", "attempted_at", "ip_address", "success")


@admin.register(PIN)
class PINAdmin(admin.ModelAdmin):
    list_display = ("pin", "school", "session", "term", "is_used", "expiry_date", "created_at")
    list_filter = ("is_used", "term", "session", "school")
    search_fields = ("pin", "school__code")
    readonly_fields = ("pin", "is_used", "used_by", "request", "generated_by", "created_at", "updated_at")
    inlines = [PinAttemptInline]


@admin.register(PINRequest)
class PINRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "school", "session", "term", "quantity", "status", "created_at", "processed_at")
    list_filter = ("status", "term", "school")
    search_fields = ("school__name", "school__code")
    readonly_fields = ("status", "processed_by", "processed_at", "created_at")


@admin.register(PinAccessLog)
class PinAccessLogAdmin(admin.ModelAdmin):
    list_display = ("pin_code", "school", "admission_number", "ip_address", "outcome", "success", "attempted_at")
    list_filter = ("success", "outcome")
    search_fields = ("pin_code", "admission_number", "ip_address")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
