# application/ports/token_table_port.py
# Port interface for a token-keyed table of expiring records.
# Domain layer — must not import infrastructure or adapter code.

from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple

from shortener.records import GenerationStats, PurgeStats, Record

# (token, created_at, ttl_seconds) -> Record
RecordBuilder = Callable[[str, float, float], Record]


class ITokenTable(ABC):
    @abstractmethod
    def create(
        self,
        build: RecordBuilder,
        ttl_seconds: Optional[float] = None,
    ) -> Tuple[Record, GenerationStats]:
        """Reserve an unused token and store the record *build* makes for it."""
        pass

    @abstractmethod
    def find(self, token: str) -> Optional[Record]:
        """Return the record for *token*, expired or not, or None."""
        pass

    @abstractmethod
    def purge(self, now: Optional[float] = None) -> PurgeStats:
        """Remove every record that expired before *now*."""
        pass

    @abstractmethod
    def recalculate_length(self) -> int:
        """Re-derive the token length from the current table size."""
        pass

    @property
    @abstractmethod
    def token_length(self) -> int:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...
