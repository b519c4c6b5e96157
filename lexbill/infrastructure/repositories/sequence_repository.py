"""
Sequence counter repository implementation using SQLAlchemy.
"""

from sqlalchemy.orm import Session

from lexbill.domain.repositories.sequence_repository import SequenceRepository as SequenceRepositoryInterface
from lexbill.infrastructure.db.models import SequenceModel

from .base import storage_errors


class SQLAlchemySequenceRepository(SequenceRepositoryInterface):
    """
    Counter rows locked with SELECT ... FOR UPDATE for the rest of the transaction.
    Two transactions racing to create the same row fail one of them with a
    retryable StorageError.
    """

    def __init__(self, session: Session):
        self.session = session

    async def increment(self, key: str, floor: int = 0) -> int:
        with storage_errors(f"advance sequence {key}"):
            row = self.session.query(SequenceModel).filter_by(key=key).with_for_update().first()

            if row is None:
                row = SequenceModel(key=key, value=floor)
                self.session.add(row)
            elif row.value < floor:
                row.value = floor

            row.value += 1
            self.session.flush()

        return row.value
