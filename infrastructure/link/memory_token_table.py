# infrastructure/link/memory_token_table.py
# Thread-safe in-memory token table with lazy TTL expiry.

import logging
import time
from threading import Lock
from typing import Callable, Dict, List, Optional, Tuple

from application.ports.token_table_port import ITokenTable, RecordBuilder
from shortener.errors import GenerationExhausted
from shortener.records import GenerationStats, PurgeStats, Record
from shortener.tokens import TokenGenerator

DEFAULT_TTL_SECONDS: float = 60 * 60
DEFAULT_MAX_ATTEMPTS: int = 16
DEFAULT_MAX_LENGTH: int = 12


class MemoryTokenTable(ITokenTable):
    """
    Maps tokens to records for a single store.

    Expiry is lazy: ``find`` never looks at the clock, so a record stays
    resolvable between its expiry instant and the next ``purge``. That
    window is intended, not a bug; callers that need a hard cut-off must
    purge first.

    ``create`` holds the lock across the uniqueness check and the insert,
    and ``purge`` holds it for the whole scan, so an insert racing a purge
    is either seen whole by the scan or not at all.
    """

    def __init__(
        self,
        generator: Optional[TokenGenerator] = None,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_length: int = DEFAULT_MAX_LENGTH,
        clock: Callable[[], float] = time.time,
        name: str = "table",
    ) -> None:
        if default_ttl_seconds <= 0:
            raise ValueError(f"default_ttl_seconds must be > 0. Got: {default_ttl_seconds}.")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1. Got: {max_attempts}.")

        self._generator: TokenGenerator = generator or TokenGenerator()
        self._store: Dict[str, Record] = {}
        self._lock: Lock = Lock()
        self._length: int = self._generator.recalculate_length(0)
        self.default_ttl_seconds: float = default_ttl_seconds
        self.max_attempts: int = max_attempts
        self.max_length: int = max(max_length, self._length)
        self.clock: Callable[[], float] = clock
        self.name: str = name
        self._logger = logging.getLogger(f"shortener.table.{name}")

    # ── Public API ───────────────────────────────────────────

    @property
    def token_length(self) -> int:
        return self._length

    def create(
        self,
        build: RecordBuilder,
        ttl_seconds: Optional[float] = None,
    ) -> Tuple[Record, GenerationStats]:
        """Insert the record *build* returns under a freshly generated token.

        Retries on collision. After ``max_attempts`` collisions at one length
        the length is bumped for good; past ``max_length`` it gives up with
        GenerationExhausted instead of spinning."""
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0. Got: {ttl_seconds}.")
        ttl: float = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds

        start: float = time.perf_counter()
        attempts: int = 0
        with self._lock:
            misses: int = 0
            while True:
                attempts += 1
                token: str = self._generator.generate(self._length)
                if token not in self._store:
                    break

                misses += 1
                if misses < self.max_attempts:
                    continue
                if self._length >= self.max_length:
                    raise GenerationExhausted(self._length, attempts)
                self._length += 1
                misses = 0
                self._logger.warning(
                    "forced length bump length=%d size=%d", self._length, len(self._store)
                )

            record: Record = build(token, self.clock(), ttl)
            self._store[token] = record
            length: int = self._length

        stats = GenerationStats(
            attempts=attempts,
            length=length,
            elapsed_ms=(time.perf_counter() - start) * 1000,
        )
        self._logger.info("created time=%.3fms tries=%d", stats.elapsed_ms, stats.attempts)
        return record, stats

    def find(self, token: str) -> Optional[Record]:
        """Return the record for *token*, or None. Does not check expiry."""
        with self._lock:
            return self._store.get(token)

    def purge(self, now: Optional[float] = None) -> PurgeStats:
        """Remove every record whose expiry instant is before *now*."""
        start: float = time.perf_counter()
        with self._lock:
            if now is None:
                now = self.clock()
            scanned: int = len(self._store)
            expired: List[Record] = [r for r in self._store.values() if r.is_expired(now)]
            for record in expired:
                del self._store[record.token]

        stats = PurgeStats(
            scanned=scanned,
            deleted=len(expired),
            elapsed_ms=(time.perf_counter() - start) * 1000,
            removed=tuple(expired),
        )
        self._logger.info(
            "purged time=%.3fms loops=%d deleted=%d",
            stats.elapsed_ms, stats.scanned, stats.deleted,
        )
        return stats

    def recalculate_length(self) -> int:
        """Set the token length from the current number of entries."""
        with self._lock:
            self._length = self._generator.recalculate_length(len(self._store))
            self.max_length = max(self.max_length, self._length)
            length: int = self._length
        self._logger.info("token length=%d", length)
        return length

    # ── Container protocol ───────────────────────────────────

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._store
