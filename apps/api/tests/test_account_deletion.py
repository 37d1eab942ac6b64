"""
Tests for account deletion.

Critical Behavior: delete_user_account refuses to remove a therapist that
still owns assignments, cleans up loosely-coupled tables best-effort, and
reports how many user rows were removed.
"""
from unittest.mock import patch

import pytest
from django.test import override_settings

from apps.authz.models import User
from apps.authz.services import (
    ActiveAssignmentsExist,
    cleanup_ancillary_records,
    delete_user_account,
)
from apps.clinical.models import Assignment, ProgressRecord
from apps.clinical.services import transfer_assignments
from apps.discussions.models import CaseDiscussion, ParentChatMessage


@pytest.mark.django_db
class TestDeleteUserAccount:

    def test_deletes_therapist_without_assignments(self, clinic, therapist):
        assert delete_user_account(therapist.pk, clinic.pk) == 1
        assert not User.objects.filter(pk=therapist.pk).exists()

    def test_second_delete_reports_zero(self, clinic, therapist):
        """Deleting an already deleted user is a no-op."""
        delete_user_account(therapist.pk, clinic.pk)

        assert delete_user_account(therapist.pk, clinic.pk) == 0

    def test_unknown_user_reports_zero(self, clinic):
        assert delete_user_account(987654, clinic.pk) == 0

    def test_user_of_other_clinic_is_not_deleted(self, other_clinic, make_therapist, clinic):
        outsider = make_therapist(clinic_obj=other_clinic)

        assert delete_user_account(outsider.pk, clinic.pk) == 0
        assert User.objects.filter(pk=outsider.pk).exists()

    def test_parent_account_is_deleted(self, clinic, make_therapist):
        parent = make_therapist(role='parent')

        assert delete_user_account(parent.pk, clinic.pk) == 1

    def test_session_history_survives_author_deletion(
        self, clinic, therapist, other_therapist, make_patient, make_program, make_assignment, add_sessions
    ):
        """Progress records keep the id of the therapist who ran the session."""
        assignment = make_assignment(make_patient(name='Alice'), make_program(name='Colors'), other_therapist)
        add_sessions(assignment, 3, author=therapist)

        assert delete_user_account(therapist.pk, clinic.pk) == 1

        authors = list(
            ProgressRecord.objects.filter(assignment=assignment).values_list('therapist_id', flat=True)
        )
        assert authors == [therapist.pk] * 3


@pytest.mark.django_db
class TestActiveAssignmentGuard:
    """Therapists owning assignments cannot be deleted."""

    def test_therapist_with_assignments_is_refused(
        self, clinic, therapist, make_patient, make_program, make_assignment, add_sessions
    ):
        """
        Expected:
        - ActiveAssignmentsExist carrying the assignment count
        - user, assignments and progress untouched
        """
        patient = make_patient(name='Alice')
        make_assignment(patient, make_program(name='Colors'), therapist)
        assignment = make_assignment(patient, make_program(name='Shapes'), therapist)
        add_sessions(assignment, 2)

        with pytest.raises(ActiveAssignmentsExist) as exc_info:
            delete_user_account(therapist.pk, clinic.pk)

        assert exc_info.value.count == 2
        assert exc_info.value.code == 'active_assignments_exist'
        assert '2 active assignment(s)' in str(exc_info.value)
        assert User.objects.filter(pk=therapist.pk).exists()
        assert Assignment.objects.filter(therapist=therapist).count() == 2
        assert ProgressRecord.objects.count() == 2

    def test_refusal_happens_before_cleanup(
        self, clinic, therapist, make_patient, make_program, make_assignment
    ):
        patient = make_patient(name='Alice')
        make_assignment(patient, make_program(name='Colors'), therapist)
        CaseDiscussion.objects.create(patient=patient, user=therapist, content='Progress looks good')

        with patch('apps.authz.services.cleanup_ancillary_records') as mock_cleanup:
            with pytest.raises(ActiveAssignmentsExist):
                delete_user_account(therapist.pk, clinic.pk)

        mock_cleanup.assert_not_called()
        assert CaseDiscussion.objects.filter(user_id=therapist.pk).count() == 1

    def test_delete_succeeds_after_transfer(
        self, clinic, therapist, other_therapist, make_patient, make_program, make_assignment, add_sessions
    ):
        """Transfer then delete: the intended admin workflow."""
        assignment = make_assignment(make_patient(name='Alice'), make_program(name='Colors'), therapist)
        add_sessions(assignment, 3)

        transfer_assignments(
            therapist.pk,
            [{'assignment_id': assignment.pk, 'to_therapist_id': other_therapist.pk}],
            clinic_id=clinic.pk,
        )

        assert delete_user_account(therapist.pk, clinic.pk) == 1
        assert ProgressRecord.objects.filter(assignment__therapist=other_therapist).count() == 3


@pytest.mark.django_db
class TestAncillaryCleanup:
    """Best-effort cleanup of discussion and chat rows."""

    def test_removes_authored_rows(self, clinic, therapist, other_therapist, make_patient):
        patient = make_patient(name='Alice')
        CaseDiscussion.objects.create(patient=patient, user=therapist, content='Note 1')
        CaseDiscussion.objects.create(patient=patient, user=other_therapist, content='Note 2')
        ParentChatMessage.objects.create(patient=patient, sender=therapist, message='See you Monday')

        assert delete_user_account(therapist.pk, clinic.pk) == 1

        assert list(CaseDiscussion.objects.values_list('user_id', flat=True)) == [other_therapist.pk]
        assert not ParentChatMessage.objects.exists()

    def test_cleanup_reports_counts(self, therapist, make_patient):
        patient = make_patient(name='Alice')
        CaseDiscussion.objects.create(patient=patient, user=therapist, content='Note')

        counts = cleanup_ancillary_records(therapist.pk)

        assert counts == {'case_discussions': 1, 'parent_therapist_chat': 0}

    @override_settings(ACCOUNT_CLEANUP_TARGETS=[
        ('legacy_notes', 'author_id'),
        ('case_discussions', 'user_id'),
    ])
    def test_missing_table_is_ignored(self, clinic, therapist, make_patient):
        """A cleanup target that does not exist never blocks deletion."""
        patient = make_patient(name='Alice')
        CaseDiscussion.objects.create(patient=patient, user=therapist, content='Note')

        counts = cleanup_ancillary_records(therapist.pk)

        assert counts == {'legacy_notes': None, 'case_discussions': 1}

    @override_settings(ACCOUNT_CLEANUP_TARGETS=[('legacy_notes', 'author_id')])
    def test_delete_succeeds_when_cleanup_fails(self, clinic, therapist):
        assert delete_user_account(therapist.pk, clinic.pk) == 1
        assert not User.objects.filter(pk=therapist.pk).exists()

    @override_settings(ACCOUNT_CLEANUP_TARGETS=[
        ('case_discussions',),
        'parent_therapist_chat',
        ('case_discussions', 'user_id'),
    ])
    def test_malformed_target_is_ignored(self, clinic, therapist, make_patient):
        """A broken cleanup entry is skipped like a failed delete."""
        patient = make_patient(name='Alice')
        CaseDiscussion.objects.create(patient=patient, user=therapist, content='Note')

        counts = cleanup_ancillary_records(therapist.pk)

        assert counts["'parent_therapist_chat'"] is None
        assert counts['case_discussions'] == 1
        assert not CaseDiscussion.objects.exists()

    @override_settings(ACCOUNT_CLEANUP_TARGETS=[('case_discussions', 'user_id', 'extra')])
    def test_delete_succeeds_with_malformed_target(self, clinic, therapist):
        assert delete_user_account(therapist.pk, clinic.pk) == 1
