from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def upsert_insert(db: Session, table):
    """
    Dialect-specific INSERT supporting ON CONFLICT for the session's bind.

    PostgreSQL in production, SQLite in tests; both expose the same
    on_conflict_do_update / on_conflict_do_nothing API.
    """
    dialect = db.get_bind().dialect.name
    if dialect == 'postgresql':
        return postgresql.insert(table)
    if dialect == 'sqlite':
        return sqlite.insert(table)
    raise NotImplementedError(f"Upsert is not supported on dialect '{dialect}'")
