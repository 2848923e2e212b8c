"""Dialect-aware INSERT ... ON CONFLICT DO UPDATE."""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite":     sqlite.insert,
}


async def upsert(
    session: AsyncSession,
    model: Any,
    values: dict[str, Any],
    key: Sequence[str],
) -> None:
    """Insert values, or overwrite every non-key column of the row with the same key.

    The write is a single statement, so it is atomic with respect to the
    key's unique constraint.
    """
    dialect = session.bind.dialect.name
    try:
        insert = _INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Upserts are not supported on {dialect!r}") from None

    stmt = insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(key),
        set_={name: stmt.excluded[name] for name in values if name not in key},
    )
    await session.execute(stmt)
