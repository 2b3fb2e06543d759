"""Async read-only access to the history database."""

from __future__ import annotations

from typing import Any

import bittensor as bt
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql.elements import TextClause


def _redact_url(url: str) -> str:
    """Drop credentials from a database URL for logging."""
    if "@" not in url:
        return url
    scheme, _, rest = url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


class HistoryDatabase:
    """Thin wrapper over a SQLAlchemy async engine.

    Only exposes ``read``: this service never writes to the history store.
    """

    def __init__(self, url: str, *, echo: bool = False, engine: AsyncEngine | None = None):
        self.url = url
        self.engine = engine or create_async_engine(url, echo=echo, pool_pre_ping=True)

    async def read(
        self,
        query: TextClause,
        params: dict[str, Any] | None = None,
        mappings: bool = False,
    ) -> list[Any]:
        """Execute a SELECT and return all rows.

        With ``mappings=True`` each row is a column-name mapping.
        """
        async with self.engine.connect() as conn:
            result = await conn.execute(query, params or {})
            if mappings:
                return list(result.mappings().all())
            return list(result.all())

    async def ping(self) -> bool:
        try:
            await self.read(text("select 1"))
            bt.logging.info({"history_db": {"step": "ping", "status": "ok", "url": _redact_url(self.url)}})
            return True
        except Exception as exc:  # pragma: no cover - diagnostics only
            bt.logging.error({"history_db": {"step": "ping", "status": "error", "error": str(exc)}})
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


__all__ = ["HistoryDatabase"]
