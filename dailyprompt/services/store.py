from typing import Any, Dict, List

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def upsert(q: Session, model, values: Dict[str, Any], conflict: List[str]):
    """
    INSERT ... ON CONFLICT (conflict) DO UPDATE for SQLite and PostgreSQL.

    Columns in `conflict` are the natural key and are never overwritten.
    Returns the stored row.
    """
    dialect = q.get_bind().dialect.name
    if dialect == "postgresql":
        insert = postgresql.insert
    elif dialect == "sqlite":
        insert = sqlite.insert
    else:
        raise NotImplementedError(f"upsert not supported on {dialect}")

    stmt = insert(model).values(**values)
    updates = {k: stmt.excluded[k] for k in values if k not in conflict}
    stmt = stmt.on_conflict_do_update(index_elements=conflict, set_=updates)
    q.execute(stmt)
    q.commit()

    filters = [getattr(model, k) == values[k] for k in conflict]
    row = q.query(model).filter(*filters).one()
    q.refresh(row)
    return row
