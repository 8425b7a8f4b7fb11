"""
Row-store adapter for tracked job applications.

Every query is scoped by the owner's user_id, so a row owned by someone else
looks exactly like a missing row.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

logger = logging.getLogger(__name__)

STATUS_PIPELINE = ("Saved", "Applied", "Rejected", "Interview", "Offer")
INITIAL_STATUS = "Saved"

EDITABLE_FIELDS = ("title", "company", "location", "deadline", "link")
RETURNING = "id, user_id, title, company, location, status, deadline, link, created_at"


class StoreError(Exception):
    """Raised when the row-store rejects or fails a query."""
    pass


def _serialize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    item = dict(row)
    for key, value in item.items():
        if isinstance(value, (datetime, date)):
            item[key] = value.isoformat()
        elif key in ("id", "user_id") and value is not None:
            item[key] = str(value)
    return item


class ApplicationStore:
    """psycopg2-backed CRUD for the applications table."""

    def __init__(self, conn_params: Dict[str, Any], connect_timeout: int = 5):
        self.conn_params = conn_params
        self.connect_timeout = connect_timeout

    def _get_db_conn(self):
        return psycopg2.connect(**self.conn_params, connect_timeout=self.connect_timeout)

    def _execute(self, sql: str, params: tuple, fetch: str = "one", commit: bool = False):
        conn = None
        try:
            conn = self._get_db_conn()
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(sql, params)
                if fetch == "all":
                    rows = cur.fetchall()
                elif fetch == "one":
                    rows = cur.fetchone()
                else:
                    rows = cur.rowcount
            if commit:
                conn.commit()
            return rows
        except psycopg2.Error as e:
            logger.error(f"[applications] Query failed: {e}")
            if conn:
                conn.rollback()
            raise StoreError(str(e)) from e
        finally:
            if conn:
                conn.close()

    def list_for_owner(self, user_id: str) -> List[Dict[str, Any]]:
        rows = self._execute(
            f"""
            SELECT {RETURNING}
            FROM applications
            WHERE user_id = %s
            ORDER BY created_at DESC
            """,
            (user_id,),
            fetch="all",
        )
        return [_serialize_row(r) for r in rows]

    def insert(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        row = self._execute(
            f"""
            INSERT INTO applications (user_id, title, company, location, status, deadline, link)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING {RETURNING}
            """,
            (
                user_id,
                fields["title"],
                fields["company"],
                fields["location"],
                INITIAL_STATUS,
                fields.get("deadline"),
                fields.get("link"),
            ),
            commit=True,
        )
        logger.info(f"[applications] Inserted {row['id']} for {user_id}")
        return _serialize_row(row)

    def update(self, user_id: str, application_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        columns = [f for f in EDITABLE_FIELDS if f in fields]
        if not columns:
            raise ValueError("No editable fields given")
        assignments = ", ".join(f"{c} = %s" for c in columns)
        row = self._execute(
            f"""
            UPDATE applications SET {assignments}
            WHERE id = %s AND user_id = %s
            RETURNING {RETURNING}
            """,
            tuple(fields[c] for c in columns) + (application_id, user_id),
            commit=True,
        )
        return _serialize_row(row) if row else None

    def update_status(self, user_id: str, application_id: str, status: str) -> Optional[Dict[str, Any]]:
        if status not in STATUS_PIPELINE:
            raise ValueError(f"Unknown status: {status}")
        row = self._execute(
            f"""
            UPDATE applications SET status = %s
            WHERE id = %s AND user_id = %s
            RETURNING {RETURNING}
            """,
            (status, application_id, user_id),
            commit=True,
        )
        return _serialize_row(row) if row else None

    def delete(self, user_id: str, application_id: str) -> bool:
        deleted = self._execute(
            "DELETE FROM applications WHERE id = %s AND user_id = %s",
            (application_id, user_id),
            fetch="rowcount",
            commit=True,
        )
        return deleted > 0
