from django.contrib import admin
from .models import Patient, Program, Assignment, ProgressRecord


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ['name', 'clinic', 'date_of_birth', 'created_at']
    list_filter = ['clinic']
    search_fields = ['name']  # Required for autocomplete_fields
    readonly_fields = ['created_at']


@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ['name', 'clinic', 'created_at']
    list_filter = ['clinic']
    search_fields = ['name']
    readonly_fields = ['created_at']


class ProgressRecordInline(admin.TabularInline):
    model = ProgressRecord
    extra = 0
    fields = ['session_date', 'therapist_id', 'attempts', 'successes', 'score']
    readonly_fields = fields
    can_delete = False


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'patient', 'program', 'therapist', 'status', 'current_prompt_level', 'assigned_at']
    list_filter = ['status']
    search_fields = ['patient__name', 'program__name', 'therapist__username']
    autocomplete_fields = ['patient', 'program', 'therapist']
    inlines = [ProgressRecordInline]


@admin.register(ProgressRecord)
class ProgressRecordAdmin(admin.ModelAdmin):
    list_display = ['id', 'assignment', 'therapist_id', 'session_date', 'score']
    list_filter = ['session_date']
    raw_id_fields = ['assignment', 'therapist']
