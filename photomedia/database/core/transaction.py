# photomedia/database/core/transaction.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


@contextmanager
def transactional(db: Session) -> Iterator[Session]:
    """Run a block in its own transaction unless the session already has one open."""
    if db.in_transaction():
        yield db
        return
    with db.begin():
        yield db
