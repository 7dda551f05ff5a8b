"""In-memory record store used by the API layer.

Records are frozen dataclasses keyed by generated hex ids. The store is
process-local: it keeps templates and the quote schedule between requests
and is reset when the server restarts.
"""
import logging
import uuid
from dataclasses import fields, is_dataclass, replace
from typing import Dict, Generic, Iterable, List, Tuple, TypeVar

from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordStore(Generic[T]):
    """Generic CRUD over one kind of record."""

    def __init__(self, kind: str, records: Iterable[T] = ()):
        self.kind = kind
        self._records: Dict[str, T] = {}
        for record in records:
            self.create(record)

    def __len__(self) -> int:
        return len(self._records)

    def list(self) -> List[Tuple[str, T]]:
        return list(self._records.items())

    def get(self, record_id: str) -> T:
        try:
            return self._records[record_id]
        except KeyError:
            raise NotFoundError(self.kind, record_id) from None

    def create(self, record: T) -> str:
        record_id = uuid.uuid4().hex
        self._records[record_id] = record
        logger.info(f"Created {self.kind} {record_id}")
        return record_id

    def update(self, record_id: str, **changes) -> T:
        """Apply a partial update; unknown field names are rejected."""
        record = self.get(record_id)
        if is_dataclass(record):
            known = {f.name for f in fields(record)}
            unknown = sorted(set(changes) - known)
            if unknown:
                raise ValidationError(f"Unknown {self.kind} field(s): {', '.join(unknown)}")
        try:
            updated = replace(record, **changes)
        except TypeError as e:
            raise ValidationError(f"Invalid {self.kind} update: {e}") from e
        self._records[record_id] = updated
        logger.info(f"Updated {self.kind} {record_id}: {sorted(changes)}")
        return updated

    def delete(self, record_id: str) -> None:
        self.get(record_id)
        del self._records[record_id]
        logger.info(f"Deleted {self.kind} {record_id}")

    def replace_all(self, records: Iterable[T]) -> List[str]:
        """Swap the whole collection in one step."""
        staged = {uuid.uuid4().hex: r for r in records}
        self._records = staged
        logger.info(f"Replaced all {self.kind} records ({len(staged)})")
        return list(staged)

    def extend(self, records: Iterable[T]) -> List[str]:
        return [self.create(r) for r in records]
