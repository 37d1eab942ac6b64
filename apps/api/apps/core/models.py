"""
Core models: clinic (tenant)
"""
from django.db import models


class Clinic(models.Model):
    """
    Tenant boundary.

    Every user, patient and clinic-owned program hangs off one clinic, and
    every admin read/write is scoped by clinic_id.
    """
    name = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'clinics'
        verbose_name = 'Clinic'
        verbose_name_plural = 'Clinics'
        ordering = ['name']

    def __str__(self):
        return self.name
