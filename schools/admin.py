from django.contrib import admin

from .models import AdmissionSequence, School, StaffProfile, Student


@admin.register(School)
class SchoolAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "city", "state", "is_active")
    list_filter = ("is_active", "state")
    search_fields = ("name", "code", "city")


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("admission_number", "first_name", "last_name", "class_name", "school", "is_active")
    list_filter = ("school", "class_name", "is_active")
    search_fields = ("first_name", "last_name", "admission_number", "school__code")


@admin.register(StaffProfile)
class StaffProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "school")
    list_filter = ("role", "school")
    search_fields = ("user__username", "user__email", "school__code")


@admin.register(AdmissionSequence)
class AdmissionSequenceAdmin(admin.ModelAdmin):
    list_display = ("school", "year", "last_value")
    list_filter = ("year",)
