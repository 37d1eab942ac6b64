"""
Discussions models: case_discussions, parent_therapist_chat

Authors are referenced without a database constraint. These tables are
cleaned up best-effort when an account is deleted and may keep orphaned
rows if that cleanup fails.
"""
from django.db import models
from django.conf import settings


class CaseDiscussion(models.Model):
    """Post in a patient's case discussion thread (therapists and admins)."""
    patient = models.ForeignKey(
        'clinical.Patient',
        on_delete=models.CASCADE,
        related_name='case_discussions'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='+'
    )
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'case_discussions'
        verbose_name = 'Case Discussion'
        verbose_name_plural = 'Case Discussions'
        ordering = ['created_at']

    def __str__(self):
        return f"Discussion {self.pk} (patient={self.patient_id})"


class ParentChatMessage(models.Model):
    """Message between a patient's parent and their therapists."""
    patient = models.ForeignKey(
        'clinical.Patient',
        on_delete=models.CASCADE,
        related_name='parent_chat_messages'
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='+'
    )
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'parent_therapist_chat'
        verbose_name = 'Parent Chat Message'
        verbose_name_plural = 'Parent Chat Messages'
        ordering = ['created_at']

    def __str__(self):
        return f"Chat message {self.pk} (patient={self.patient_id})"
