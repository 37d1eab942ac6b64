"""
Account deletion service.

Deleting a user runs in strictly ordered phases:

0. Lookup scoped by id + clinic (absent -> 0 rows, not an error)
1. Therapists that still own assignments are refused with
   ActiveAssignmentsExist; nothing is modified
2. Best-effort cleanup of loosely-coupled tables (chat messages, case
   discussion posts). Each delete is isolated and its failure ignored
3. Atomic delete of the user row

Assignments are moved away beforehand with
apps.clinical.services.transfer_assignments.
"""
import logging
from typing import Dict, Optional

from django.conf import settings

from apps.authz.models import User
from apps.clinical.models import Assignment
from apps.core.db import TransactionContext, resolve_context
from apps.core.observability.events import log_account_deletion
from apps.core.observability.metrics import metrics

logger = logging.getLogger(__name__)


DEFAULT_CLEANUP_TARGETS = (
    ('case_discussions', 'user_id'),
    ('parent_therapist_chat', 'sender_id'),
)


class ActiveAssignmentsExist(Exception):
    """
    The therapist still owns assignments and cannot be deleted.

    ``count`` is the number of assignments that must be transferred first.
    """
    code = 'active_assignments_exist'

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"Therapist has {count} active assignment(s); "
            f"transfer them before deleting the account."
        )


def delete_user_account(
    user_id: int,
    clinic_id: int,
    *,
    ctx: Optional[TransactionContext] = None
) -> int:
    """
    Delete a clinic user.

    Args:
        user_id: User to delete
        clinic_id: Clinic the caller administers; users of other clinics
            are treated as absent

    Returns:
        Number of user rows deleted (0 when absent or already gone, else 1)

    Raises:
        ActiveAssignmentsExist: therapist still owns assignments
    """
    ctx = resolve_context(ctx)

    # Phase 0: lookup
    user = ctx.objects(User).filter(pk=user_id, clinic_id=clinic_id).first()
    if user is None:
        metrics.account_deletion_total.labels(result='not_found').inc()
        log_account_deletion(user_id, clinic_id, 'not_found')
        return 0

    # Phase 1: invariant check
    if user.is_therapist:
        active_count = ctx.objects(Assignment).filter(therapist_id=user.pk).count()
        if active_count > 0:
            metrics.account_deletion_total.labels(result='blocked').inc()
            log_account_deletion(user_id, clinic_id, 'blocked', active_assignments=active_count)
            raise ActiveAssignmentsExist(active_count)

    # Phase 2: best-effort ancillary cleanup, finished before the core delete
    cleanup_counts = cleanup_ancillary_records(user.pk, ctx=ctx)

    # Phase 3: atomic core deletion
    with ctx.atomic():
        _, deleted_per_model = ctx.objects(User).filter(pk=user_id, clinic_id=clinic_id).delete()
    deleted = deleted_per_model.get(User._meta.label, 0)

    metrics.account_deletion_total.labels(result='deleted' if deleted else 'not_found').inc()
    log_account_deletion(
        user_id,
        clinic_id,
        'deleted' if deleted else 'not_found',
        rows_deleted=deleted,
        cleanup=cleanup_counts,
    )
    return deleted


def cleanup_ancillary_records(
    user_id: int,
    *,
    ctx: Optional[TransactionContext] = None
) -> Dict[str, Optional[int]]:
    """
    Delete rows authored by ``user_id`` in the configured ancillary tables.

    Targets come from ``settings.ACCOUNT_CLEANUP_TARGETS`` as
    ``(table, column)`` pairs. Every delete runs in its own atomic block so a
    database failure (missing table included) cannot poison the surrounding
    connection state. Any failure, malformed entries included, is ignored.

    Returns:
        ``{table: rows_deleted}``, ``None`` for targets that failed
    """
    ctx = resolve_context(ctx)
    targets = getattr(settings, 'ACCOUNT_CLEANUP_TARGETS', DEFAULT_CLEANUP_TARGETS)
    quote = ctx.connection.ops.quote_name

    counts: Dict[str, Optional[int]] = {}
    for target in targets:
        table = _target_label(target)
        try:
            _, column = target
            sql = f'DELETE FROM {quote(table)} WHERE {quote(column)} = %s'
            with ctx.atomic():
                with ctx.connection.cursor() as cursor:
                    cursor.execute(sql, [user_id])
                    counts[table] = cursor.rowcount
        except Exception as e:
            counts[table] = None
            metrics.account_cleanup_failures_total.labels(table=table).inc()
            logger.debug(
                'Ancillary cleanup skipped',
                extra={
                    'event': 'account_cleanup_skipped',
                    'table': table,
                    'error_type': e.__class__.__name__,
                }
            )

    return counts


def _target_label(target) -> str:
    """Table name of a cleanup target, or its repr when the entry is malformed."""
    if isinstance(target, (list, tuple)) and target and isinstance(target[0], str):
        return target[0]
    return repr(target)
