from typing import Any, Optional

from sqlalchemy.orm import Session


class BaseRepository:
    """
    Session-bound repository.

    Repositories never commit on their own; the surrounding unit of work
    (match_uow / db_session_scope / request session) owns the transaction.
    """
    model: Any = None

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: Any) -> Optional[Any]:
        if self.model is None:
            raise NotImplementedError(f"{type(self).__name__} has no model bound")
        return self.db.get(self.model, entity_id)

    def flush(self) -> None:
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
