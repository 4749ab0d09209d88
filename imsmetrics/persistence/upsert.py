from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from imsmetrics.core.errors import DatabaseError


_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def upsert_row(
    session: AsyncSession,
    model: Any,
    *,
    key_columns: list[str],
    values: dict[str, Any],
) -> None:
    # Single INSERT .. ON CONFLICT statement so racing writers converge on the last full row.
    dialect = session.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise DatabaseError(f"upsert not supported for dialect {dialect}")
    stmt = insert(model).values(**values)
    update_values = {name: stmt.excluded[name] for name in values if name not in key_columns and name != "id"}
    stmt = stmt.on_conflict_do_update(index_elements=key_columns, set_=update_values)
    await session.execute(stmt)
