"""
Metrics instrumentation wrapper.

Thin registry over prometheus_client so call sites reference metrics by
attribute instead of re-declaring collectors.
"""
import time
from functools import wraps

from prometheus_client import Counter, Histogram


class MetricsRegistry:
    """
    Central metrics registry.

    Provides typed access to all application metrics.
    """

    def __init__(self):
        """Initialize metrics registry."""
        self._setup_metrics()

    def _create_counter(self, name, description, labels=None):
        """Create a counter metric."""
        return Counter(name, description, labels or [])

    def _create_histogram(self, name, description, labels=None, buckets=None):
        """Create a histogram metric."""
        if buckets:
            return Histogram(name, description, labels or [], buckets=buckets)
        return Histogram(name, description, labels or [])

    def _setup_metrics(self):
        """Setup all application metrics."""

        # ===================================================================
        # HTTP Metrics
        # ===================================================================
        self.http_requests_total = self._create_counter(
            'http_requests_total',
            'Total HTTP requests',
            ['path', 'method', 'status']
        )

        self.exceptions_total = self._create_counter(
            'exceptions_total',
            'Total exceptions',
            ['exception_type', 'location']
        )

        # ===================================================================
        # Assignment Transfer Metrics
        # ===================================================================
        self.assignment_transfer_items_total = self._create_counter(
            'assignment_transfer_items_total',
            'Assignment transfer items processed',
            ['outcome']  # applied, skipped_not_found, failed
        )

        self.assignment_transfer_batches_total = self._create_counter(
            'assignment_transfer_batches_total',
            'Assignment transfer batches',
            ['result']  # committed, rolled_back
        )

        self.assignment_transfer_sessions_total = self._create_counter(
            'assignment_transfer_sessions_total',
            'Progress records re-pointed by assignment transfers'
        )

        self.assignment_transfer_duration_seconds = self._create_histogram(
            'assignment_transfer_duration_seconds',
            'Duration of an assignment transfer batch',
            buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
        )

        # ===================================================================
        # Account Deletion Metrics
        # ===================================================================
        self.account_deletion_total = self._create_counter(
            'account_deletion_total',
            'Account deletion attempts',
            ['result']  # deleted, not_found, blocked
        )

        self.account_cleanup_failures_total = self._create_counter(
            'account_cleanup_failures_total',
            'Ancillary cleanup deletes that failed and were ignored',
            ['table']
        )

    def track_duration(self, histogram_metric):
        """
        Decorator to track function duration.

        Usage:
            @metrics.track_duration(metrics.assignment_transfer_duration_seconds)
            def transfer_assignments(...):
                ...
        """
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    return func(*args, **kwargs)
                finally:
                    duration = time.time() - start_time
                    histogram_metric.observe(duration)
            return wrapper
        return decorator


# Global metrics instance
metrics = MetricsRegistry()
