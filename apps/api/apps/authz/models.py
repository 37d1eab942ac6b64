"""
Authz models: users (therapists, parents, clinic admins)
"""
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin


# ============================================================================
# Enums
# ============================================================================

class UserRoleChoices(models.TextChoices):
    """
    Role flag of a clinic user.

    Admin rights are orthogonal (``is_admin``): an admin is usually also a
    therapist.
    """
    THERAPIST = 'therapist', 'Therapist'
    PARENT = 'parent', 'Parent'


# ============================================================================
# User Management
# ============================================================================

class UserManager(BaseUserManager):
    """Custom user manager for username-based authentication."""

    def create_user(self, username, password=None, **extra_fields):
        if not username:
            raise ValueError('Username is required')
        user = self.model(username=username, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('is_admin', True)
        return self.create_user(username, password, **extra_fields)

    def therapists(self, clinic_id):
        """Therapists of one clinic."""
        return self.filter(clinic_id=clinic_id, role=UserRoleChoices.THERAPIST)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Clinic user.

    Scoped to exactly one clinic (superusers may have none). Therapists own
    program assignments; see apps.clinical.models.Assignment.
    """
    username = models.CharField(max_length=150, unique=True)
    full_name = models.CharField(max_length=255)
    role = models.CharField(
        max_length=20,
        choices=UserRoleChoices.choices,
        default=UserRoleChoices.THERAPIST
    )
    is_admin = models.BooleanField(
        default=False,
        help_text='Clinic administrator (user management, transfers)'
    )
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='users'
    )
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)  # Required for admin access
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'username'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['clinic', 'role'], name='idx_user_clinic_role'),
        ]

    def __str__(self):
        return self.username

    @property
    def is_therapist(self):
        return self.role == UserRoleChoices.THERAPIST
