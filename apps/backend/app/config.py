import os

import psycopg2

from app.db_config import db_config


class Capabilities:
    @staticmethod
    def is_db_enabled() -> bool:
        return db_config.is_db_enabled

    @staticmethod
    def check_db_connection() -> bool:
        """Verify database connection with a trivial query"""
        if not Capabilities.is_db_enabled():
            return False

        conn_params = db_config.get_connection_params()
        if not conn_params:
            return False

        try:
            # Health checks must answer fast (1 second max)
            conn = psycopg2.connect(**conn_params, connect_timeout=1)
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.fetchone()
            cursor.close()
            conn.close()
            return True
        except psycopg2.Error:
            return False

    @staticmethod
    def is_auth_enabled() -> bool:
        has_provider = bool(os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_ANON_KEY"))
        return has_provider and bool(os.getenv("COOKIE_SECRET"))

    @classmethod
    def get_status(cls) -> dict:
        db = cls.check_db_connection()
        auth = cls.is_auth_enabled()

        return {
            "status": "green" if db and auth else "amber",
            "components": {
                "db": db,
                "auth": auth,
            },
        }

    @classmethod
    def get_capabilities(cls) -> dict:
        return {
            "scrape": True,
            "applications": cls.is_db_enabled(),
            "auth": cls.is_auth_enabled(),
        }


def get_env_presence() -> dict:
    required_vars = [
        "TRACKER_ENV",
        "TRACKER_FETCH_TIMEOUT",
        "TRACKER_FETCH_MAX_KB",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "SUPABASE_DB_URL",
        "DATABASE_URL",
        "COOKIE_SECRET",
        "RATE_LIMIT_SCRAPE",
        "RATE_LIMIT_WRITE",
        "CORS_ORIGINS",
    ]

    return {var: bool(os.getenv(var)) for var in required_vars}
