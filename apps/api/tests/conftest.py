"""
Global test fixtures for pytest.

Provides reusable fixtures for API and service testing:
- Clinics and an authenticated clinic-admin API client
- Factories for therapists, patients, programs, assignments and progress records
"""
import datetime

import pytest
from rest_framework.test import APIClient

from apps.authz.models import User, UserRoleChoices
from apps.clinical.models import Assignment, Patient, Program, ProgressRecord
from apps.core.db import TransactionContext
from apps.core.models import Clinic


# ============================================================================
# Clinics
# ============================================================================

@pytest.fixture
def clinic(db):
    """Clinic the admin under test administers."""
    return Clinic.objects.create(name='Sunrise Therapy Center')


@pytest.fixture
def other_clinic(db):
    """A second tenant, used to check clinic scoping."""
    return Clinic.objects.create(name='Harbor Therapy Center')


@pytest.fixture
def ctx():
    """Transaction context on the default database."""
    return TransactionContext()


# ============================================================================
# Users & API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def admin_user(clinic):
    """Clinic administrator (also a therapist, as in most clinics)."""
    return User.objects.create_user(
        username='admin',
        password='testpass123',
        full_name='Clinic Admin',
        role=UserRoleChoices.THERAPIST,
        is_admin=True,
        clinic=clinic,
    )


@pytest.fixture
def admin_client(admin_user):
    """
    Authenticated API client for the clinic administrator.
    """
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def make_therapist(clinic):
    """Factory: therapist of ``clinic`` unless another clinic is given."""
    counter = {'n': 0}

    def _make(username=None, clinic_obj=None, role=UserRoleChoices.THERAPIST, **kwargs):
        counter['n'] += 1
        return User.objects.create_user(
            username=username or f"therapist{counter['n']}",
            password='testpass123',
            full_name=kwargs.pop('full_name', f"Therapist {counter['n']}"),
            role=role,
            clinic=clinic_obj or clinic,
            **kwargs
        )

    return _make


@pytest.fixture
def therapist(make_therapist):
    return make_therapist(username='source_therapist')


@pytest.fixture
def other_therapist(make_therapist):
    return make_therapist(username='destination_therapist')


# ============================================================================
# Clinical data
# ============================================================================

@pytest.fixture
def make_patient(clinic):
    def _make(name='Patient', clinic_obj=None, **kwargs):
        return Patient.objects.create(clinic=clinic_obj or clinic, name=name, **kwargs)
    return _make


@pytest.fixture
def make_program(clinic):
    def _make(name='Program', clinic_obj=None, **kwargs):
        return Program.objects.create(clinic=clinic_obj or clinic, name=name, **kwargs)
    return _make


@pytest.fixture
def make_assignment():
    def _make(patient, program, therapist, **kwargs):
        return Assignment.objects.create(
            patient=patient,
            program=program,
            therapist=therapist,
            **kwargs
        )
    return _make


@pytest.fixture
def add_sessions():
    """Factory: attach ``count`` progress records to an assignment."""
    def _add(assignment, count, author=None):
        author = author or assignment.therapist
        return [
            ProgressRecord.objects.create(
                assignment=assignment,
                therapist=author,
                session_date=datetime.date(2024, 1, 1) + datetime.timedelta(days=i),
                attempts=10,
                successes=i,
            )
            for i in range(count)
        ]
    return _add
