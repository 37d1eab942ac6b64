"""
Tests for observability layer.

Validates that metrics, logs, and events are emitted correctly
without logging patient data or credentials.
"""
import json
import logging

import pytest
from unittest.mock import Mock, patch, MagicMock
from django.db import DatabaseError
from django.http import HttpResponse

from apps.core.observability.correlation import (
    RequestCorrelationMiddleware,
    get_request_id,
    clear_request_context,
)
from apps.core.observability.logging import (
    SanitizedJSONFormatter,
    sanitize_dict,
)
from apps.core.observability.metrics import metrics
from apps.core.observability.events import (
    log_account_deletion,
    log_domain_event,
    log_transfer_aborted,
    log_transfer_completed,
)


@pytest.mark.django_db
class TestRequestCorrelation:
    """Test request correlation middleware."""

    def test_generates_request_id_if_missing(self):
        """Middleware generates request ID if not in headers."""
        middleware = RequestCorrelationMiddleware(lambda r: HttpResponse())
        request = Mock(META={}, path='/api/test', method='GET')
        request.user = Mock(is_authenticated=False)

        middleware.process_request(request)

        assert request.request_id
        assert get_request_id() == request.request_id
        clear_request_context()

    def test_propagates_existing_request_id(self):
        """Middleware uses existing request ID from headers."""
        middleware = RequestCorrelationMiddleware(lambda r: HttpResponse())
        request = Mock(
            META={'HTTP_X_REQUEST_ID': 'test-request-123'},
            path='/api/test',
            method='GET'
        )
        request.user = Mock(is_authenticated=False)

        middleware.process_request(request)

        assert request.request_id == 'test-request-123'
        clear_request_context()

    def test_adds_request_id_to_response_and_clears_context(self):
        """Middleware adds X-Request-ID to response."""
        middleware = RequestCorrelationMiddleware(lambda r: HttpResponse())
        request = Mock(META={'HTTP_X_REQUEST_ID': 'test-123'}, path='/api/test', method='GET')
        request.user = Mock(is_authenticated=False)
        middleware.process_request(request)

        result = middleware.process_response(request, HttpResponse(status=204))

        assert result['X-Request-ID'] == 'test-123'
        assert get_request_id() is None

    def test_response_header_on_real_request(self, client):
        response = client.get('/healthz', HTTP_X_REQUEST_ID='abc-789')

        assert response['X-Request-ID'] == 'abc-789'


class TestSanitization:
    """Test patient-data sanitization."""

    def test_sanitize_dict_redacts_sensitive_fields(self):
        data = {
            'assignment_id': 12,
            'patient_name': 'Alice',
            'full_name': 'Jane Therapist',
            'diagnosis': 'ASD',
            'general_notes': 'Allergic to peanuts',
            'password': 'secret',
            'status': 'active',
        }

        sanitized = sanitize_dict(data)

        assert sanitized['assignment_id'] == 12
        assert sanitized['status'] == 'active'
        for key in ('patient_name', 'full_name', 'diagnosis', 'general_notes', 'password'):
            assert sanitized[key] == '[REDACTED]'

    def test_sanitize_dict_handles_nested_objects(self):
        data = {
            'cleanup': {'case_discussions': 2},
            'patients': [{'patient_id': 1, 'patient_name': 'Alice'}],
        }

        sanitized = sanitize_dict(data)

        assert sanitized['cleanup'] == {'case_discussions': 2}
        assert sanitized['patients'] == [{'patient_id': 1, 'patient_name': '[REDACTED]'}]

    def test_json_formatter_redacts_extra_fields(self):
        record = logging.LogRecord('apps.test', logging.INFO, __file__, 1, 'Event', None, None)
        record.patient_name = 'Alice'
        record.assignment_id = '42'

        payload = json.loads(SanitizedJSONFormatter().format(record))

        assert payload['message'] == 'Event'
        assert payload['patient_name'] == '[REDACTED]'
        assert payload['assignment_id'] == '42'


class TestMetricsEmission:
    """Test that metrics are emitted correctly."""

    def test_metrics_registry_has_all_metrics(self):
        assert hasattr(metrics, 'http_requests_total')
        assert hasattr(metrics, 'exceptions_total')
        assert hasattr(metrics, 'assignment_transfer_items_total')
        assert hasattr(metrics, 'assignment_transfer_batches_total')
        assert hasattr(metrics, 'assignment_transfer_sessions_total')
        assert hasattr(metrics, 'assignment_transfer_duration_seconds')
        assert hasattr(metrics, 'account_deletion_total')
        assert hasattr(metrics, 'account_cleanup_failures_total')

    def test_track_duration_observes_on_error(self):
        histogram = Mock()

        @metrics.track_duration(histogram)
        def boom():
            raise ValueError('boom')

        with pytest.raises(ValueError):
            boom()

        histogram.observe.assert_called_once()


class TestDomainEvents:
    """Test domain event logging."""

    @patch('apps.core.observability.events.logger')
    def test_log_domain_event_structure(self, mock_logger):
        log_domain_event(
            'test_event',
            entity_type='Assignment',
            entity_id='12',
            result='success',
            custom_field='value'
        )

        mock_logger.info.assert_called_once()
        extra = mock_logger.info.call_args[1]['extra']
        assert extra['event'] == 'test_event'
        assert extra['entity_type'] == 'Assignment'
        assert extra['entity_id'] == '12'
        assert extra['result'] == 'success'
        assert extra['custom_field'] == 'value'

    @patch('apps.core.observability.events.logger')
    def test_transfer_completed_is_info(self, mock_logger):
        log_transfer_completed(7, transferred_count=2, skipped_count=1, sessions_transferred=9)

        extra = mock_logger.info.call_args[1]['extra']
        assert extra['event'] == 'assignment_transfer_completed'
        assert extra['from_therapist_id'] == '7'
        assert extra['sessions_transferred'] == 9

    @patch('apps.core.observability.events.logger')
    def test_transfer_aborted_is_error(self, mock_logger):
        log_transfer_aborted(7, failed_assignment_id=3, processed_count=2, error_type='DatabaseError')

        mock_logger.error.assert_called_once()
        extra = mock_logger.error.call_args[1]['extra']
        assert extra['event'] == 'assignment_transfer_aborted'
        assert extra['failed_assignment_id'] == '3'

    @patch('apps.core.observability.events.logger')
    def test_account_deletion_blocked_is_warning(self, mock_logger):
        log_account_deletion(5, 1, 'blocked', active_assignments=4)

        mock_logger.warning.assert_called_once()
        extra = mock_logger.warning.call_args[1]['extra']
        assert extra['event'] == 'account_deletion_blocked'
        assert extra['target_user_id'] == '5'
        assert extra['active_assignments'] == 4


@pytest.mark.django_db
class TestHealthChecks:
    """Test health check endpoints."""

    def test_healthz_returns_200(self, client):
        response = client.get('/healthz')

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'ok'
        assert 'version' in data

    def test_readyz_checks_database(self, client):
        response = client.get('/readyz')

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'ready'
        assert data['checks']['database'] is True

    @patch('apps.core.observability.health.TransactionContext.for_request')
    def test_readyz_fails_on_db_error(self, mock_for_request, client):
        """Readiness check returns 503 on DB failure."""
        ctx = MagicMock(using='default')
        ctx.connection.cursor.side_effect = DatabaseError('DB connection failed')
        mock_for_request.return_value = ctx

        response = client.get('/readyz')

        assert response.status_code == 503
        data = response.json()
        assert data['status'] == 'not_ready'
        assert data['checks']['database'] is False
