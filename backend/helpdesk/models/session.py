# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Server-side session ORM model – one row per issued cookie token.

The table name is configurable (``SESSION_TABLE``), so the mapped class is
built on demand by :func:`session_model` for the name found in the
application's settings.  Each distinct name gets exactly one class.
"""

from functools import lru_cache

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func

from helpdesk.database import Base

DEFAULT_SESSION_TABLE = "user_sessions"

# Marks session tables in Base.metadata; see session_model()
SESSION_TABLE_INFO = "helpdesk_sessions"


class _SessionColumns:
    # Opaque random token; the cookie carries it (signed) and nothing else.
    sid = Column(String(128), primary_key=True)

    # NULL means anonymous – never authorises a protected route.
    @declared_attr
    def user_id(cls):
        return Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        )

    # Cookie metadata as issued: name, expires, secure, sameSite
    data = Column(JSON, nullable=False, default=dict)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


def session_model(table_name: str = DEFAULT_SESSION_TABLE) -> type:
    """Mapped session class stored in *table_name*."""
    return _mapped_session_class(table_name)


@lru_cache(maxsize=None)
def _mapped_session_class(table_name: str) -> type:
    class_name = "".join(part.title() for part in table_name.split("_")) or "Sessions"
    return type(
        f"{class_name}Record",
        (_SessionColumns, Base),
        {
            "__tablename__": table_name,
            "__table_args__": {"info": {SESSION_TABLE_INFO: True}},
        },
    )


def app_tables(session_table: str) -> list:
    """
    Tables one deployment uses: every non-session table plus the session
    table it is configured for.
    """
    sessions = session_model(session_table).__table__
    return [
        table
        for table in Base.metadata.sorted_tables
        if not table.info.get(SESSION_TABLE_INFO) or table is sessions
    ]
