"""SQLite Foreign Keys - connect hook that makes SQLite enforce the schema's FKs.

Invariants:
    - SQLite connections always run with PRAGMA foreign_keys=ON, otherwise
      ON DELETE CASCADE and required-parent FKs are silently ignored
    - Applied by DatabaseSessionManager and by the test engine fixtures
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on FK enforcement for every new SQLite DBAPI connection. No-op elsewhere."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
