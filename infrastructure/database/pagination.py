"""
Database Pagination Utilities
==============================
Helper for consistent pagination of history queries.

- Default limit: 20
- Maximum limit: 100
- Minimum limit: 1
- Minimum offset: 0

These constants are the single source of the pagination defaults; request
schemas import them rather than restating them.
"""

from dataclasses import dataclass

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MIN_LIMIT = 1
MIN_OFFSET = 0


@dataclass(frozen=True)
class PaginationParams:
    """Validated pagination parameters."""

    limit: int
    offset: int

    @classmethod
    def from_request(
        cls,
        limit: int | None = None,
        offset: int | None = None,
    ) -> "PaginationParams":
        """
        Create validated pagination parameters from request inputs.

        Args:
            limit: Number of results per page (default: 20, max: 100)
            offset: Number of results to skip (default: 0, min: 0)

        Returns:
            PaginationParams with validated values

        Raises:
            ValueError: If limit or offset are out of valid ranges
        """
        if limit is None:
            validated_limit = DEFAULT_LIMIT
        else:
            if limit < MIN_LIMIT:
                raise ValueError(f"Limit must be at least {MIN_LIMIT}")
            if limit > MAX_LIMIT:
                raise ValueError(f"Limit cannot exceed {MAX_LIMIT}")
            validated_limit = limit

        if offset is None:
            validated_offset = MIN_OFFSET
        else:
            if offset < MIN_OFFSET:
                raise ValueError(f"Offset must be at least {MIN_OFFSET}")
            validated_offset = offset

        return cls(limit=validated_limit, offset=validated_offset)

    def to_sql_clause(self) -> str:
        """
        Generate SQL LIMIT/OFFSET clause.

        Returns:
            SQL clause string (e.g., "LIMIT 20 OFFSET 0")
        """
        return f"LIMIT {int(self.limit)} OFFSET {int(self.offset)}"
