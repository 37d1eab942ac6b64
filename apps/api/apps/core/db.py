"""
Per-request transaction context.

Services receive the context explicitly instead of reaching for a
process-wide connection. A context is bound to one database alias; the
underlying connection is owned by the current thread, so two requests
never share one.
"""
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, connections, transaction


class TransactionContext:
    """
    Database alias + transaction boundary handed to service calls.

    Usage:
        ctx = TransactionContext.for_request(request)
        with ctx.atomic():
            ctx.objects(Assignment).filter(...).update(...)
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    @classmethod
    def for_request(cls, request=None) -> 'TransactionContext':
        """Build the context used for one incoming request."""
        return cls(using=getattr(settings, 'CLINIC_DB_ALIAS', DEFAULT_DB_ALIAS))

    @property
    def connection(self):
        return connections[self.using]

    def atomic(self):
        """
        Open a transaction (or a savepoint when already inside one).

        Leaving the block with an exception rolls back everything done in it
        and re-raises; the connection is released on every exit path.
        """
        return transaction.atomic(using=self.using)

    def objects(self, model):
        """Default manager of ``model`` bound to this context's database."""
        return model._default_manager.db_manager(self.using)

    def __repr__(self):
        return f'TransactionContext(using={self.using!r})'


def resolve_context(ctx=None) -> TransactionContext:
    """Return ``ctx`` or a default context when none was passed."""
    return ctx if ctx is not None else TransactionContext()
