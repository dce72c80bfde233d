"""IBM DB2 specific dialect behaviour."""

from __future__ import annotations

from .models import Dialect


class Db2Dialect(Dialect):
    """DB2 rejects aggregates nested inside other aggregates."""

    __slots__ = ()

    supports_nested_aggregations = False

    def limit_clause(self, limit: int, offset: int = 0) -> str:
        """Render a row-limiting suffix using DB2's FETCH FIRST syntax."""

        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be non-negative")
        if offset and not self.supports("sort.fetch_offset"):
            raise ValueError(f"{self.name} does not support OFFSET")
        clause = f"FETCH FIRST {limit} ROWS ONLY"
        if offset:
            return f"OFFSET {offset} ROWS {clause}"
        return clause


__all__ = ["Db2Dialect"]
