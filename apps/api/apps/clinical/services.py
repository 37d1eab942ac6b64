"""
Therapist assignment services.

Used by clinic admins before removing a therapist:
1. get_therapist_assignments - read-only summary of what the therapist owns
2. transfer_assignments - re-home assignments (and every progress record
   attached to them) to other therapists

Once a therapist owns nothing, apps.authz.services.delete_user_account can
remove the account.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.db.models import Count

from apps.clinical.models import Assignment, ProgressRecord
from apps.core.db import TransactionContext, resolve_context
from apps.core.observability.events import log_transfer_aborted, log_transfer_completed
from apps.core.observability.metrics import metrics

User = get_user_model()
logger = logging.getLogger(__name__)


class AssignmentTransferError(Exception):
    """Base error for transfer batches that cannot be applied."""
    pass


class InvalidTransferTarget(AssignmentTransferError):
    """Destination is not a therapist of the clinic the batch is scoped to."""

    def __init__(self, assignment_id, to_therapist_id):
        self.assignment_id = assignment_id
        self.to_therapist_id = to_therapist_id
        super().__init__(
            f"Therapist {to_therapist_id} cannot receive assignment {assignment_id}: "
            f"not a therapist of this clinic"
        )


class TransferOutcome(enum.Enum):
    APPLIED = 'applied'
    SKIPPED_NOT_FOUND = 'skipped_not_found'
    FAILED = 'failed'


@dataclass
class TransferItemResult:
    """Outcome of one transfer-list entry."""
    assignment_id: Any
    to_therapist_id: Any
    outcome: TransferOutcome
    new_assignment_id: Optional[int] = None
    patient_id: Optional[int] = None
    program_id: Optional[int] = None
    sessions_transferred: int = 0
    error: Optional[Exception] = None

    def as_detail(self) -> Dict[str, Any]:
        return {
            'old_assignment_id': self.assignment_id,
            'new_assignment_id': self.new_assignment_id,
            'patient_id': self.patient_id,
            'program_id': self.program_id,
            'to_therapist_id': self.to_therapist_id,
            'sessions_transferred': self.sessions_transferred,
        }


# ============================================================================
# Query
# ============================================================================

def get_therapist_assignments(
    therapist_id: int,
    clinic_id: int,
    *,
    ctx: Optional[TransactionContext] = None
) -> Dict[str, Any]:
    """
    Summarize a therapist's assignments, grouped by patient.

    Only patients of ``clinic_id`` are considered. Assignments without any
    progress record are included with ``session_count == 0``.

    Returns:
        {
            'therapist_id': ...,
            'patients': [{'patient_id', 'patient_name', 'programs': [...]}],
            'summary': {'total_patients', 'total_programs', 'total_sessions'}
        }
    """
    ctx = resolve_context(ctx)

    assignments = (
        ctx.objects(Assignment)
        .filter(therapist_id=therapist_id, patient__clinic_id=clinic_id)
        .select_related('patient', 'program')
        .annotate(session_count=Count('progress_records'))
        .order_by('patient__name', 'patient_id', 'program__name', 'id')
    )

    patients: Dict[int, Dict[str, Any]] = {}
    total_programs = 0
    total_sessions = 0

    for assignment in assignments:
        entry = patients.get(assignment.patient_id)
        if entry is None:
            entry = patients[assignment.patient_id] = {
                'patient_id': assignment.patient_id,
                'patient_name': assignment.patient.name,
                'programs': [],
            }
        entry['programs'].append({
            'assignment_id': assignment.id,
            'program_id': assignment.program_id,
            'program_name': assignment.program.name,
            'status': assignment.status,
            'current_prompt_level': assignment.current_prompt_level,
            'assigned_at': assignment.assigned_at,
            'session_count': assignment.session_count,
        })
        total_programs += 1
        total_sessions += assignment.session_count

    return {
        'therapist_id': therapist_id,
        'patients': list(patients.values()),
        'summary': {
            'total_patients': len(patients),
            'total_programs': total_programs,
            'total_sessions': total_sessions,
        },
    }


# ============================================================================
# Transfer
# ============================================================================

@metrics.track_duration(metrics.assignment_transfer_duration_seconds)
def transfer_assignments(
    from_therapist_id: int,
    transfer_list: Iterable[Dict[str, Any]],
    *,
    clinic_id: Optional[int] = None,
    ctx: Optional[TransactionContext] = None
) -> Dict[str, Any]:
    """
    Move assignments owned by ``from_therapist_id`` to other therapists.

    For each ``{'assignment_id', 'to_therapist_id'}`` entry:
    - an assignment not owned by ``from_therapist_id`` (or, when
      ``clinic_id`` is given, not belonging to a patient of that clinic)
      is skipped and processing continues
    - otherwise a copy is created for the destination (patient, program,
      status, current_prompt_level and assigned_at unchanged), all progress
      records are re-pointed to the copy in one UPDATE, and the original
      row is deleted

    The whole list runs in one transaction. Any error other than a skip
    rolls back every entry of the call, including those already applied,
    and is re-raised.

    Returns:
        {'success': True, 'transferred_count', 'details', 'skipped'}
    """
    ctx = resolve_context(ctx)
    results = apply_transfer_batch(
        from_therapist_id, transfer_list, clinic_id=clinic_id, ctx=ctx
    )

    details = [r.as_detail() for r in results if r.outcome is TransferOutcome.APPLIED]
    skipped = [r.assignment_id for r in results if r.outcome is TransferOutcome.SKIPPED_NOT_FOUND]

    return {
        'success': True,
        'transferred_count': len(details),
        'details': details,
        'skipped': skipped,
    }


def apply_transfer_batch(
    from_therapist_id: int,
    transfer_list: Iterable[Dict[str, Any]],
    *,
    clinic_id: Optional[int] = None,
    ctx: Optional[TransactionContext] = None
) -> List[TransferItemResult]:
    """
    Run a transfer list and return one tagged result per processed entry.

    A FAILED result stops the batch: its error is raised inside the
    transaction, so nothing from this call is committed.
    """
    ctx = resolve_context(ctx)
    results: List[TransferItemResult] = []

    try:
        with ctx.atomic():
            for item in transfer_list:
                result = _transfer_one(
                    ctx,
                    from_therapist_id,
                    item['assignment_id'],
                    item['to_therapist_id'],
                    clinic_id,
                )
                results.append(result)
                metrics.assignment_transfer_items_total.labels(outcome=result.outcome.value).inc()

                if result.outcome is TransferOutcome.FAILED:
                    raise result.error
    except Exception as exc:
        failed = results[-1] if results else None
        metrics.assignment_transfer_batches_total.labels(result='rolled_back').inc()
        log_transfer_aborted(
            from_therapist_id,
            failed_assignment_id=failed.assignment_id if failed else None,
            processed_count=len(results),
            error_type=exc.__class__.__name__,
        )
        raise

    applied = [r for r in results if r.outcome is TransferOutcome.APPLIED]
    sessions_transferred = sum(r.sessions_transferred for r in applied)

    metrics.assignment_transfer_batches_total.labels(result='committed').inc()
    metrics.assignment_transfer_sessions_total.inc(sessions_transferred)
    log_transfer_completed(
        from_therapist_id,
        transferred_count=len(applied),
        skipped_count=len(results) - len(applied),
        sessions_transferred=sessions_transferred,
    )
    return results


def _transfer_one(
    ctx: TransactionContext,
    from_therapist_id,
    assignment_id,
    to_therapist_id,
    clinic_id,
) -> TransferItemResult:
    """Apply one entry; never raises, the outcome carries the error."""
    try:
        lookup = ctx.objects(Assignment).filter(pk=assignment_id, therapist_id=from_therapist_id)
        if clinic_id is not None:
            lookup = lookup.filter(patient__clinic_id=clinic_id)
        original = lookup.get()
    except Assignment.DoesNotExist:
        logger.debug(
            "Assignment not owned by source therapist, skipping",
            extra={
                'assignment_id': str(assignment_id),
                'from_therapist_id': str(from_therapist_id),
            }
        )
        return TransferItemResult(
            assignment_id=assignment_id,
            to_therapist_id=to_therapist_id,
            outcome=TransferOutcome.SKIPPED_NOT_FOUND,
        )
    except Exception as exc:
        return _failed(assignment_id, to_therapist_id, exc)

    try:
        if clinic_id is not None:
            _ensure_transfer_target(ctx, assignment_id, to_therapist_id, clinic_id)

        replacement = ctx.objects(Assignment).create(
            patient_id=original.patient_id,
            program_id=original.program_id,
            therapist_id=to_therapist_id,
            status=original.status,
            current_prompt_level=original.current_prompt_level,
            assigned_at=original.assigned_at,
        )
        sessions_transferred = _repoint_progress_records(ctx, original.pk, replacement.pk)
        ctx.objects(Assignment).filter(pk=original.pk).delete()
    except Exception as exc:
        return _failed(assignment_id, to_therapist_id, exc)

    logger.debug(
        "Assignment transferred",
        extra={
            'old_assignment_id': str(original.pk),
            'new_assignment_id': str(replacement.pk),
            'to_therapist_id': str(to_therapist_id),
            'sessions_transferred': sessions_transferred,
        }
    )

    return TransferItemResult(
        assignment_id=original.pk,
        to_therapist_id=to_therapist_id,
        outcome=TransferOutcome.APPLIED,
        new_assignment_id=replacement.pk,
        patient_id=original.patient_id,
        program_id=original.program_id,
        sessions_transferred=sessions_transferred,
    )


def _failed(assignment_id, to_therapist_id, exc) -> TransferItemResult:
    logger.warning(
        "Assignment transfer entry failed",
        extra={
            'assignment_id': str(assignment_id),
            'to_therapist_id': str(to_therapist_id),
            'error_type': exc.__class__.__name__,
        }
    )
    return TransferItemResult(
        assignment_id=assignment_id,
        to_therapist_id=to_therapist_id,
        outcome=TransferOutcome.FAILED,
        error=exc,
    )


def _ensure_transfer_target(ctx, assignment_id, to_therapist_id, clinic_id) -> None:
    is_clinic_therapist = ctx.objects(User).therapists(clinic_id).filter(pk=to_therapist_id).exists()
    if not is_clinic_therapist:
        raise InvalidTransferTarget(assignment_id, to_therapist_id)


def _repoint_progress_records(ctx, old_assignment_id, new_assignment_id) -> int:
    """Re-point every progress record in a single UPDATE; returns the row count."""
    return ctx.objects(ProgressRecord).filter(
        assignment_id=old_assignment_id
    ).update(assignment_id=new_assignment_id)
