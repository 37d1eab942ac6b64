"""
Tests for TransactionContext.
"""
import pytest
from django.db import DEFAULT_DB_ALIAS, connections
from django.test import override_settings

from apps.core.db import TransactionContext, resolve_context
from apps.core.models import Clinic


class TestTransactionContext:

    def test_defaults_to_default_alias(self):
        ctx = TransactionContext()

        assert ctx.using == DEFAULT_DB_ALIAS
        assert ctx.connection is connections[DEFAULT_DB_ALIAS]

    @override_settings(CLINIC_DB_ALIAS='default')
    def test_for_request_uses_configured_alias(self):
        assert TransactionContext.for_request(None).using == 'default'

    def test_resolve_context_keeps_given_context(self):
        ctx = TransactionContext()

        assert resolve_context(ctx) is ctx
        assert isinstance(resolve_context(), TransactionContext)


@pytest.mark.django_db
class TestTransactionContextAtomic:

    def test_exception_rolls_back_block(self):
        ctx = TransactionContext()

        with pytest.raises(RuntimeError):
            with ctx.atomic():
                ctx.objects(Clinic).create(name='Ephemeral')
                raise RuntimeError('abort')

        assert not Clinic.objects.filter(name='Ephemeral').exists()

    def test_commit_keeps_rows(self):
        ctx = TransactionContext()

        with ctx.atomic():
            ctx.objects(Clinic).create(name='Kept')

        assert Clinic.objects.filter(name='Kept').exists()
