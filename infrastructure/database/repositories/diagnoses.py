"""
Diagnosis Repository
====================
Data access layer for crop-disease diagnoses.

A diagnosis row is a document: symptoms, recommendations and AI model
metadata are stored as JSON text next to the scalar columns used for
filtering and aggregation. Rows are written once; ``status`` is the only
column updated afterwards.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from agritech.utils.time import iso_now
from infrastructure.database.pagination import PaginationParams

logger = logging.getLogger(__name__)

_JSON_COLUMNS = ("symptoms", "recommendations", "ai_model_metadata")

_INSERT_COLUMNS = (
    "id",
    "user_id",
    "crop_type",
    "crop_age_days",
    "region",
    "symptoms",
    "image_url",
    "image_path",
    "disease_name",
    "disease_name_local",
    "confidence",
    "severity",
    "description",
    "recommendations",
    "language",
    "ai_model_metadata",
    "status",
    "created_at",
    "updated_at",
)

DISEASE_DISTRIBUTION_LIMIT = 10


class DiagnosisRepository:
    """Repository for diagnosis records."""

    def __init__(self, database_handler):
        """
        Initialize repository.

        Args:
            database_handler: SQLiteDatabaseHandler instance
        """
        self.db = database_handler

    # ========================================================================
    # CREATE / UPDATE
    # ========================================================================

    def create(self, record: dict[str, Any]) -> str:
        """
        Insert a diagnosis document.

        Args:
            record: Column values; embedded lists/dicts are JSON-encoded here.
                ``id`` is generated when absent. ``created_at`` and
                ``updated_at`` must be ISO-8601 strings.

        Returns:
            The diagnosis id
        """
        values = dict(record)
        values.setdefault("id", uuid.uuid4().hex)
        for key in _JSON_COLUMNS:
            if key in values and not isinstance(values[key], str) and values[key] is not None:
                values[key] = json.dumps(values[key], ensure_ascii=False)

        placeholders = ", ".join("?" for _ in _INSERT_COLUMNS)
        sql = f"INSERT INTO diagnoses ({', '.join(_INSERT_COLUMNS)}) VALUES ({placeholders})"
        with self.db.connection() as conn:
            conn.execute(sql, tuple(values.get(column) for column in _INSERT_COLUMNS))

        logger.debug("Stored diagnosis %s for user %s", values["id"], values.get("user_id"))
        return values["id"]

    def update_status(self, record_id: str, status: str) -> bool:
        """Set the lifecycle status of a diagnosis. Returns False when no row matched."""
        with self.db.connection() as conn:
            cursor = conn.execute(
                "UPDATE diagnoses SET status = ?, updated_at = ? WHERE id = ?",
                (status, iso_now(), record_id),
            )
            return cursor.rowcount > 0

    # ========================================================================
    # READ
    # ========================================================================

    def get(self, record_id: str) -> dict[str, Any] | None:
        with self.db.connection() as conn:
            row = conn.execute("SELECT * FROM diagnoses WHERE id = ?", (record_id,)).fetchone()
        return dict(row) if row else None

    def list_for_user(
        self,
        user_id: str,
        *,
        crop_type: str | None = None,
        region: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        List a user's diagnoses, newest first.

        Args:
            user_id: Owner of the diagnoses
            crop_type: Exact crop type filter
            region: Exact region filter
            limit: Page size (default 20, max 100)
            offset: Rows to skip

        Raises:
            ValueError: If limit or offset are out of range
        """
        pagination = PaginationParams.from_request(limit=limit, offset=offset)

        clauses = ["user_id = ?"]
        params: list[Any] = [user_id]
        if crop_type:
            clauses.append("crop_type = ?")
            params.append(crop_type)
        if region:
            clauses.append("region = ?")
            params.append(region)

        sql = (
            f"SELECT * FROM diagnoses WHERE {' AND '.join(clauses)} "
            # rowid breaks ties between rows written in the same instant
            f"ORDER BY created_at DESC, rowid DESC {pagination.to_sql_clause()}"
        )
        with self.db.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [dict(row) for row in rows]

    # ========================================================================
    # AGGREGATES
    # ========================================================================

    def count_for_user(self, user_id: str) -> int:
        with self.db.connection() as conn:
            row = conn.execute("SELECT COUNT(*) FROM diagnoses WHERE user_id = ?", (user_id,)).fetchone()
        return int(row[0]) if row else 0

    def disease_distribution(self, user_id: str, limit: int = DISEASE_DISTRIBUTION_LIMIT) -> list[dict[str, Any]]:
        """Most frequent diseases for a user, highest count first."""
        with self.db.connection() as conn:
            rows = conn.execute(
                """
                SELECT disease_name AS name, COUNT(*) AS count
                FROM diagnoses
                WHERE user_id = ?
                GROUP BY disease_name
                ORDER BY count DESC, name ASC
                LIMIT ?
                """,
                (user_id, int(limit)),
            ).fetchall()
        return [dict(row) for row in rows]

    def crop_distribution(self, user_id: str) -> list[dict[str, Any]]:
        """All crop types for a user, highest count first."""
        with self.db.connection() as conn:
            rows = conn.execute(
                """
                SELECT crop_type AS name, COUNT(*) AS count
                FROM diagnoses
                WHERE user_id = ?
                GROUP BY crop_type
                ORDER BY count DESC, name ASC
                """,
                (user_id,),
            ).fetchall()
        return [dict(row) for row in rows]

    def average_confidence(self, user_id: str) -> float:
        """Mean confidence over a user's diagnoses, 0.0 when there are none."""
        with self.db.connection() as conn:
            row = conn.execute("SELECT AVG(confidence) FROM diagnoses WHERE user_id = ?", (user_id,)).fetchone()
        if row is None or row[0] is None:
            return 0.0
        return float(row[0])
