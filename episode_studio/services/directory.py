"""
Recipient directory on Azure SQL.

Read-only lookups against the recipients table:

    recipients(user_id, line_user_id, email)

Each lookup opens its own connection and closes it on every exit path.
pyodbc calls are blocking, so they run in a small thread pool.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from typing import Optional

from episode_studio.services.errors import ExternalDependencyError

logger = logging.getLogger(__name__)

DEPENDENCY_NAME = "recipient_directory"


class RecipientDirectory:
    """Looks up how a recipient can be reached."""

    def __init__(
        self,
        server: str,
        database: str,
        username: str,
        password: str
    ):
        """
        Args:
            server: Azure SQL server (e.g., episodes-db.database.windows.net)
            database: Database name
            username: SQL username
            password: SQL password
        """
        self.connection_string = (
            f"Driver={{ODBC Driver 18 for SQL Server}};"
            f"Server=tcp:{server},1433;"
            f"Database={database};"
            f"Uid={username};"
            f"Pwd={password};"
            f"Encrypt=yes;TrustServerCertificate=no;Connection Timeout=30;"
        )
        self._executor = ThreadPoolExecutor(max_workers=5)

    @classmethod
    def from_settings(cls, settings) -> Optional["RecipientDirectory"]:
        """Build a directory from Settings, or None when SQL is not configured."""
        if not settings.directory_configured:
            return None
        return cls(
            server=settings.directory_sql_server,
            database=settings.directory_sql_database,
            username=settings.directory_sql_username,
            password=settings.directory_sql_password,
        )

    def close(self):
        """Release the lookup thread pool."""
        self._executor.shutdown(wait=False)

    def _get_connection(self):
        """Get a database connection."""
        # pyodbc loads the system ODBC driver manager on import
        import pyodbc
        return pyodbc.connect(self.connection_string)

    async def _run_async(self, func, *args, **kwargs):
        """Run a sync function in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor,
            lambda: func(*args, **kwargs)
        )

    def _fetch_column_sync(self, column: str, user_id: str) -> Optional[str]:
        start = time.time()
        try:
            with closing(self._get_connection()) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"SELECT {column} FROM recipients WHERE user_id = ?",
                    (user_id,)
                )
                row = cursor.fetchone()
        except Exception as e:
            raise ExternalDependencyError(DEPENDENCY_NAME, f"{column} lookup failed: {e}") from e

        value = row[0] if row else None
        logger.debug(f"[DB SELECT] recipients.{column} for {user_id}: "
                     f"{'found' if value else 'none'} ({time.time() - start:.3f}s)")
        return value or None

    async def get_push_account_id(self, user_id: str) -> Optional[str]:
        """Linked LINE user id for a recipient, or None."""
        return await self._run_async(self._fetch_column_sync, "line_user_id", user_id)

    async def get_email_address(self, user_id: str) -> Optional[str]:
        """Email address for a recipient, or None."""
        return await self._run_async(self._fetch_column_sync, "email", user_id)
