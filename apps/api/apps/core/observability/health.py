"""
Health check endpoints.

Provides /healthz and /readyz endpoints for monitoring.
"""
import logging
from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.views import View

from apps.core.db import TransactionContext

logger = logging.getLogger(__name__)


class HealthzView(View):
    """
    Liveness endpoint. Does not check dependencies.
    """

    def get(self, request):
        return JsonResponse(
            {'status': 'ok', 'version': getattr(settings, 'VERSION', 'unknown')},
            status=200,
        )


class ReadyzView(View):
    """
    Readiness endpoint.

    Returns 503 when the clinic database cannot answer a trivial query.
    """

    def get(self, request):
        checks = {
            'database': self._check_database(TransactionContext.for_request(request)),
        }
        all_healthy = all(checks.values())

        return JsonResponse(
            {'status': 'ready' if all_healthy else 'not_ready', 'checks': checks},
            status=200 if all_healthy else 503,
        )

    def _check_database(self, ctx):
        try:
            with ctx.connection.cursor() as cursor:
                cursor.execute('SELECT 1')
                return True
        except DatabaseError as e:
            logger.error(
                'Database health check failed',
                extra={
                    'event': 'health_check_failed',
                    'check': 'database',
                    'database_alias': ctx.using,
                    'error': str(e)
                }
            )
            return False
