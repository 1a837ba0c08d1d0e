# ============================================================================
# POSTGRESQL CONNECTION INFRASTRUCTURE
# ============================================================================
# STATUS: Infrastructure - PostgreSQL connection handling
# PURPOSE: Database connectivity and the per-run session handle
# ============================================================================
"""
PostgreSQL Connection Infrastructure

Provides database connectivity for schema sync runs:
- Connection string from DATABASE_URL or POSTGRES_* variables
- Context managers for safe resource management
- One explicit session handle per sync run

A sync run never looks a connection up from ambient state. The caller opens
one session and passes it to every component:

    repo = PostgreSQLRepository()
    with repo.session() as handle:
        catalog = CatalogReader(handle)
        ...

Sessions run in autocommit mode. Each DDL statement stands alone, so a
failed statement does not poison the ones that follow it.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import psycopg
from psycopg.rows import dict_row

from core.config import DatabaseDefaults, get_defaults

logger = logging.getLogger(__name__)


# ============================================================================
# SESSION HANDLE
# ============================================================================

class PostgreSQLSession:
    """
    Database handle bound to a single connection.

    Exposes what the sync engine needs:
        fetch_all(query, params) -> list of dict rows
        execute(query, params)   -> None
        render(query)            -> SQL text
    """

    def __init__(self, conn: psycopg.Connection):
        self.conn = conn

    def fetch_all(self, query, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        """Run a query and return every row as a dict."""
        with self.conn.cursor() as cur:
            cur.execute(query, params)
            return cur.fetchall()

    def execute(self, query, params: Optional[tuple] = None) -> None:
        """Run a statement, discarding any result."""
        with self.conn.cursor() as cur:
            cur.execute(query, params)

    def render(self, query) -> str:
        """Render a composed statement to SQL text (for logs and dry runs)."""
        if isinstance(query, str):
            return query
        return query.as_string(self.conn)


# ============================================================================
# REPOSITORY
# ============================================================================

class PostgreSQLRepository:
    """
    Connection factory for sync runs.

    Usage:
        repo = PostgreSQLRepository()
        with repo.session() as handle:
            handle.fetch_all("SELECT 1 AS ok")
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        defaults: Optional[DatabaseDefaults] = None,
    ):
        """
        Args:
            connection_string: Explicit connection string (overrides defaults)
            defaults: Database settings (defaults to environment)
        """
        self.defaults = defaults or get_defaults().database
        self._conn_string = connection_string
        self._conn_string_lock = threading.Lock()

    @property
    def conn_string(self) -> str:
        """Connection string, built from defaults on first use."""
        if self._conn_string is None:
            with self._conn_string_lock:
                if self._conn_string is None:
                    self._conn_string = self.defaults.get_connection_string()
        return self._conn_string

    @property
    def target(self) -> str:
        """host/database for log lines (never includes credentials)."""
        if self._conn_string and not self.defaults.host:
            return self._conn_string.rsplit("@", 1)[-1]
        return self.defaults.target

    @contextmanager
    def get_connection(self, autocommit: bool = False) -> Iterator[psycopg.Connection]:
        """
        Open a connection with dict rows, closed on exit.

        Raises:
            psycopg.Error: Connection or query failure (after rollback)
        """
        conn = None
        try:
            logger.debug(f"Connecting to PostgreSQL at {self.target}")
            conn = psycopg.connect(self.conn_string, row_factory=dict_row, autocommit=autocommit)
            yield conn
        except psycopg.Error as e:
            logger.error(f"PostgreSQL error ({self.target}): {e}")
            if conn is not None and not autocommit:
                conn.rollback()
            raise
        finally:
            if conn is not None:
                conn.close()

    @contextmanager
    def session(self) -> Iterator[PostgreSQLSession]:
        """Open the single autocommit handle used by one sync run."""
        with self.get_connection(autocommit=True) as conn:
            yield PostgreSQLSession(conn)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "PostgreSQLSession",
    "PostgreSQLRepository",
]
