"""Errors raised by ledger operations."""

from uuid import UUID

from health_ledger.domain.records import LedgerRecord, RecordKind


class LedgerError(Exception):
    """Base class for ledger failures."""


class InvalidInput(LedgerError, ValueError):
    """Raised when caller input violates a constraint; nothing was changed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFound(LedgerError, LookupError):
    """Raised when an id does not match any record of the given kind."""

    def __init__(self, kind: RecordKind, record_id: UUID | str) -> None:
        super().__init__(f"{kind} record {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class PersistenceFailure(LedgerError):
    """Raised when the storage collaborator did not save a collection.

    ``record`` is the record the mutation produced, when the mutation was
    already applied in memory.
    """

    def __init__(self, kind: RecordKind | str, record: LedgerRecord | None) -> None:
        super().__init__(f"failed to save {kind} records")
        self.kind = kind
        self.record = record
