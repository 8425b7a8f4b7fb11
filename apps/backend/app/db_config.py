"""
Database configuration module.
Prefers SUPABASE_DB_URL; falls back to DATABASE_URL for local PostgreSQL.
"""

import os
import logging
from urllib.parse import urlparse, unquote

logger = logging.getLogger(__name__)


class DBConfig:
    """Connection settings for the applications row-store."""

    def __init__(self):
        self.supabase_db_url = os.getenv("SUPABASE_DB_URL")
        self.database_url = os.getenv("DATABASE_URL")

        if self.supabase_db_url and self.database_url:
            logger.info("[db_config] Both SUPABASE_DB_URL and DATABASE_URL set; using SUPABASE_DB_URL.")

        self.db_url = self.supabase_db_url or self.database_url

        if self.db_url:
            try:
                parsed = urlparse(self.db_url.replace('[', '').replace(']', ''))
                logger.info(
                    f"[db_config] Database configured: {parsed.scheme}://{parsed.username}:***@"
                    f"{parsed.hostname}:{parsed.port or 5432}{parsed.path}"
                )
            except ValueError as e:
                logger.info(f"[db_config] Database configured (unable to parse for logging: {e})")
        else:
            logger.warning("[db_config] No SUPABASE_DB_URL or DATABASE_URL set - applications API disabled")

    @property
    def is_db_enabled(self) -> bool:
        return bool(self.db_url)

    def get_connection_params(self) -> dict | None:
        """
        Get psycopg2 connection parameters.
        Returns dict with host, port, database, user and optional password.
        """
        if not self.db_url:
            return None

        # Handles URLs like: postgresql://user:pass@[hostname]:port/db
        cleaned_url = self.db_url.replace('[', '').replace(']', '')
        try:
            parsed = urlparse(cleaned_url)
        except ValueError as e:
            logger.error(f"[db_config] Failed to parse database URL: {e}")
            return None

        if not parsed.hostname:
            return None

        params = {
            "host": parsed.hostname,
            "port": parsed.port or 5432,
            "database": parsed.path.lstrip('/') or 'postgres',
            "user": parsed.username or 'postgres',
        }
        # URL-decode to handle special characters
        if parsed.password:
            params["password"] = unquote(parsed.password)

        return params


# Global instance
db_config = DBConfig()
