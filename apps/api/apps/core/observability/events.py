"""
Domain events logging helpers.

Provides structured event logging for business operations.
"""
from typing import Dict, Optional
from .logging import get_sanitized_logger, sanitize_dict

logger = get_sanitized_logger(__name__)


def log_domain_event(
    event_name: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    entity_ids: Optional[Dict[str, str]] = None,
    result: str = 'success',
    **extra_fields
):
    """
    Log a domain event with structured data.

    Args:
        event_name: Name of the event (e.g., 'assignment_transfer_completed')
        entity_type: Type of entity (e.g., 'Assignment', 'User')
        entity_id: ID of primary entity
        entity_ids: Dictionary of related entity IDs
        result: Result of operation (success, failure, blocked, etc.)
        **extra_fields: Additional fields to log (will be sanitized)

    Example:
        log_domain_event(
            'assignment_transfer_completed',
            entity_type='User',
            entity_id=str(from_therapist_id),
            result='success',
            transferred_count=3,
            sessions_transferred=12
        )
    """
    event_data = {
        'event': event_name,
        'result': result,
    }

    if entity_type:
        event_data['entity_type'] = entity_type

    if entity_id:
        event_data['entity_id'] = entity_id

    if entity_ids:
        event_data.update(entity_ids)

    # Sanitize extra fields
    sanitized_extra = sanitize_dict(extra_fields)
    event_data.update(sanitized_extra)

    # Log at appropriate level based on result
    if result in ['failure', 'error']:
        logger.error(f'Domain event: {event_name}', extra=event_data)
    elif result in ['warning', 'blocked']:
        logger.warning(f'Domain event: {event_name}', extra=event_data)
    else:
        logger.info(f'Domain event: {event_name}', extra=event_data)


def log_transfer_completed(from_therapist_id, transferred_count, skipped_count, sessions_transferred):
    """Log a committed assignment transfer batch."""
    log_domain_event(
        'assignment_transfer_completed',
        entity_type='User',
        entity_id=str(from_therapist_id),
        entity_ids={'from_therapist_id': str(from_therapist_id)},
        result='success',
        transferred_count=transferred_count,
        skipped_count=skipped_count,
        sessions_transferred=sessions_transferred,
    )


def log_transfer_aborted(from_therapist_id, failed_assignment_id, processed_count, error_type):
    """Log a transfer batch that was rolled back."""
    log_domain_event(
        'assignment_transfer_aborted',
        entity_type='User',
        entity_id=str(from_therapist_id),
        entity_ids={
            'from_therapist_id': str(from_therapist_id),
            'failed_assignment_id': str(failed_assignment_id),
        },
        result='failure',
        processed_count=processed_count,
        error_type=error_type,
    )


def log_account_deletion(user_id, clinic_id, result, **extra):
    """Log an account deletion outcome (deleted, not_found, blocked)."""
    event_name = {
        'blocked': 'account_deletion_blocked',
        'not_found': 'account_deletion_not_found',
    }.get(result, 'account_deleted')

    log_domain_event(
        event_name,
        entity_type='User',
        entity_id=str(user_id),
        entity_ids={'target_user_id': str(user_id), 'target_clinic_id': str(clinic_id)},
        result='blocked' if result == 'blocked' else 'success',
        **extra
    )
