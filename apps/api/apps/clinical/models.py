"""
Clinical models: patient, program, program assignment, progress record
"""
from django.db import models
from django.conf import settings
from django.utils import timezone


# ============================================================================
# Enums
# ============================================================================

class AssignmentStatusChoices(models.TextChoices):
    """Lifecycle of a patient's program assignment"""
    ACTIVE = 'active', 'Active'
    PAUSED = 'paused', 'Paused'
    COMPLETED = 'completed', 'Completed'


# ============================================================================
# Patients & Programs
# ============================================================================

class Patient(models.Model):
    """
    Patient of one clinic.

    The clinic FK is the tenant boundary used by every admin query.
    """
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        related_name='patients'
    )
    name = models.CharField(max_length=255)
    date_of_birth = models.DateField(null=True, blank=True)
    diagnosis = models.TextField(blank=True, default='')
    general_notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'patients'
        verbose_name = 'Patient'
        verbose_name_plural = 'Patients'
        ordering = ['name']
        indexes = [
            models.Index(fields=['clinic', 'name'], name='idx_patient_clinic_name'),
        ]

    def __str__(self):
        return self.name


class Program(models.Model):
    """Therapy program. Programs without a clinic are shared by all clinics."""
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='programs'
    )
    name = models.CharField(max_length=255)
    objective = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'programs'
        verbose_name = 'Program'
        verbose_name_plural = 'Programs'
        ordering = ['name']

    def __str__(self):
        return self.name


# ============================================================================
# Assignments & Progress
# ============================================================================

class Assignment(models.Model):
    """
    Binding of one patient to one program, owned by one therapist.

    Ownership changes replace the row (see
    apps.clinical.services.transfer_assignments); therapist_id is never
    updated in place. assigned_at is the original start date and survives
    transfers.

    No (patient, program) uniqueness: a transfer inserts the replacement
    before deleting the original.
    """
    patient = models.ForeignKey(
        Patient,
        on_delete=models.CASCADE,
        related_name='assignments'
    )
    program = models.ForeignKey(
        Program,
        on_delete=models.CASCADE,
        related_name='assignments'
    )
    therapist = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='assignments'
    )
    status = models.CharField(
        max_length=20,
        choices=AssignmentStatusChoices.choices,
        default=AssignmentStatusChoices.ACTIVE
    )
    current_prompt_level = models.CharField(max_length=50, null=True, blank=True)
    assigned_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'patient_program_assignments'
        verbose_name = 'Program Assignment'
        verbose_name_plural = 'Program Assignments'
        indexes = [
            models.Index(fields=['therapist'], name='idx_assignment_therapist'),
            models.Index(fields=['patient', 'program'], name='idx_assignment_patient_prog'),
        ]

    def __str__(self):
        return f"Assignment {self.pk} (patient={self.patient_id}, program={self.program_id})"


class ProgressRecord(models.Model):
    """
    One session's result for an assignment.

    ``therapist`` is the session's author and is what identifies who
    performed historical sessions. It is not touched by transfers and
    survives deletion of the author's account.
    """
    assignment = models.ForeignKey(
        Assignment,
        on_delete=models.CASCADE,
        related_name='progress_records'
    )
    therapist = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='recorded_sessions'
    )
    session_date = models.DateField()
    attempts = models.PositiveIntegerField(null=True, blank=True)
    successes = models.PositiveIntegerField(null=True, blank=True)
    score = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'patient_program_progress'
        verbose_name = 'Progress Record'
        verbose_name_plural = 'Progress Records'
        ordering = ['session_date', 'id']
        indexes = [
            models.Index(fields=['assignment', 'session_date'], name='idx_progress_assignment_date'),
        ]

    def __str__(self):
        return f"Progress {self.pk} ({self.session_date})"
