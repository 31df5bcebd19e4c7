# app/adapters/repos/upsert.py
from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Insert


def build_upsert(
    session: AsyncSession,
    model: Any,
    values: dict[str, Any],
    *,
    key: Sequence[str],
    update: Sequence[str],
) -> Insert:
    """
    INSERT ... ON CONFLICT (key) DO UPDATE SET col = excluded.col for every
    column in `update`. Column lists are supplied by the caller, never taken
    from the payload.
    """
    dialect = session.get_bind().dialect.name

    if dialect == "mysql" or dialect == "mariadb":
        stmt = mysql.insert(model).values(**values)
        return stmt.on_duplicate_key_update({c: stmt.inserted[c] for c in update})

    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values)
    else:
        raise NotImplementedError(f"upsert not supported for dialect {dialect!r}")

    return stmt.on_conflict_do_update(
        index_elements=list(key),
        set_={c: stmt.excluded[c] for c in update},
    )
