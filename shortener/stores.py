# shortener/stores.py
# Link Store and Resource Store: the operations the request layer calls.

import dataclasses
import logging
from typing import Optional, Tuple

from application.dto.store_dto import FileMetadata, ReasonCode, StandardResult
from application.ports.token_table_port import ITokenTable
from infrastructure.link.memory_token_table import MemoryTokenTable
from infrastructure.storage.reconciler import ResourceExistenceReconciler
from shortener import codec
from shortener.errors import (
    DanglingReference,
    DeleteFailed,
    GenerationExhausted,
    TokenNotFound,
)
from shortener.records import FileRecord, LinkRecord, PurgeStats

logger = logging.getLogger("shortener.stores")


class LinkStore:
    """token → external URL."""

    def __init__(self, table: Optional[ITokenTable] = None, public_base_url: str = "") -> None:
        self.table: ITokenTable = table if table is not None else MemoryTokenTable(name="links")
        self.public_base_url: str = public_base_url

    def create_link(
        self,
        target_url: str,
        ttl_seconds: Optional[float] = None,
        base_url: Optional[str] = None,
    ) -> StandardResult:
        def build(token: str, created_at: float, ttl: float) -> LinkRecord:
            return LinkRecord(token, created_at, ttl, target_url)

        try:
            record, _ = self.table.create(build, ttl_seconds)
        except GenerationExhausted as e:
            logger.error("link creation failed: %s", e)
            return codec.encode_exhausted()
        return codec.encode_record(record, base_url if base_url is not None else self.public_base_url)

    def resolve_link(self, token: str, base_url: Optional[str] = None) -> StandardResult:
        record = self.table.find(token)
        if not isinstance(record, LinkRecord):
            return codec.encode_not_found(token)
        return codec.encode_record(record, base_url if base_url is not None else self.public_base_url)

    def purge(self, now: Optional[float] = None) -> PurgeStats:
        return self.table.purge(now)

    def recalculate_length(self) -> int:
        return self.table.recalculate_length()


class ResourceStore:
    """token → file descriptor, reconciled against the storage medium."""

    def __init__(
        self,
        reconciler: ResourceExistenceReconciler,
        table: Optional[ITokenTable] = None,
        public_base_url: str = "",
    ) -> None:
        self.reconciler: ResourceExistenceReconciler = reconciler
        self.table: ITokenTable = table if table is not None else MemoryTokenTable(name="files")
        self.public_base_url: str = public_base_url

    def create_file_record(
        self,
        metadata: FileMetadata,
        ttl_seconds: Optional[float] = None,
        base_url: Optional[str] = None,
    ) -> StandardResult:
        def build(token: str, created_at: float, ttl: float) -> FileRecord:
            return FileRecord(
                token,
                created_at,
                ttl,
                storage_key=metadata.storage_key,
                original_name=metadata.original_name,
                mime_type=metadata.mime_type,
            )

        try:
            record, _ = self.table.create(build, ttl_seconds)
        except GenerationExhausted as e:
            logger.error("file record creation failed: %s", e)
            return codec.encode_exhausted()
        return codec.encode_record(record, base_url if base_url is not None else self.public_base_url)

    def find_file(self, token: str) -> FileRecord:
        """Table lookup followed by a medium check.

        Raises:
            TokenNotFound:     the table has no such token.
            DanglingReference: the table has it but the bytes are gone.
        """
        record = self.table.find(token)
        if not isinstance(record, FileRecord):
            raise TokenNotFound(token)
        if not self.reconciler.verify(record.storage_key):
            raise DanglingReference(token, record.storage_key)
        return record

    def resolve_file_record(self, token: str, base_url: Optional[str] = None) -> StandardResult:
        try:
            record = self.find_file(token)
        except TokenNotFound:
            return codec.encode_not_found(token)
        except DanglingReference as e:
            logger.warning("dangling reference token=%s key=%s", e.token, e.storage_key)
            return codec.encode_dangling(token)
        return codec.encode_record(record, base_url if base_url is not None else self.public_base_url)

    def purge(self, now: Optional[float] = None) -> PurgeStats:
        """Drop expired records, then ask the medium to delete their bytes.

        Deletion failures are logged and counted but never retried, and the
        table entry stays removed."""
        stats: PurgeStats = self.table.purge(now)
        failures: int = 0
        for record in stats.removed:
            if not isinstance(record, FileRecord):
                continue
            try:
                self.reconciler.delete(record.storage_key)
            except DeleteFailed as e:
                failures += 1
                logger.warning("purge cleanup failed token=%s: %s", record.token, e)
        return dataclasses.replace(stats, delete_failures=failures)


def resolve_any(
    link_store: LinkStore,
    resource_store: ResourceStore,
    token: str,
    base_url: Optional[str] = None,
) -> Tuple[Optional[str], StandardResult]:
    """Resolve *token* against both stores. Links take precedence over files.

    Returns ("link", result), ("file", result) or (None, not-found result).
    A dangling file reference is reported as ("file", dangling result)."""
    result = link_store.resolve_link(token, base_url)
    if result.ok:
        return "link", result

    result = resource_store.resolve_file_record(token, base_url)
    if result.reason_code is not ReasonCode.NOT_FOUND:
        return "file", result
    return None, result
