"""Database bootstrap utilities for the session and survey service.

Exposes engine construction, the connection and transaction scopes used by
the logic layer, and the SQL migrations runner that applies files from
`migrations/`.
"""

from botaniq.db.base import build_engine, connect, ping, transaction
from botaniq.db.migrations_runner import apply_migrations

__all__ = [
    "build_engine",
    "connect",
    "ping",
    "transaction",
    "apply_migrations",
]
