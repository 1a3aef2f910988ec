# shortener/records.py
# Records held by the token tables, plus the stats objects their
# operations return for logging.

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Record:
    """Common part of every table entry. Immutable once created."""
    token: str
    created_at: float      # epoch seconds
    ttl_seconds: float

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl_seconds

    def is_expired(self, now: float) -> bool:
        """True once *now* is strictly past the expiry instant."""
        return now > self.expires_at


@dataclass(frozen=True)
class LinkRecord(Record):
    """A token pointing at an external URL."""
    target_url: str


@dataclass(frozen=True)
class FileRecord(Record):
    """A token pointing at bytes kept on the storage medium."""
    storage_key: str
    original_name: str
    mime_type: str


@dataclass(frozen=True)
class GenerationStats:
    """How much work a create() needed. Observability only."""
    attempts: int
    length: int
    elapsed_ms: float


@dataclass(frozen=True)
class PurgeStats:
    """Outcome of one purge pass over a table."""
    scanned: int
    deleted: int
    elapsed_ms: float
    removed: Tuple[Record, ...] = field(default=(), repr=False)
    delete_failures: int = 0
