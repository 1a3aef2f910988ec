# infrastructure/storage/reconciler.py
# Cross-checks file records against the storage medium.

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout

from application.ports.storage_medium_port import IStorageMedium
from shortener.errors import DeleteFailed

logger = logging.getLogger("shortener.reconciler")

DEFAULT_TIMEOUT_SECONDS: float = 2.0


class ResourceExistenceReconciler:
    """
    Asks the medium whether referenced bytes are still there, and removes
    them when their record expires.

    ``verify`` runs the medium check on a small worker pool so a hung disk
    can only delay the caller by ``timeout_seconds``. A check that times
    out or errors counts as missing.
    """

    def __init__(
        self,
        medium: IStorageMedium,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_workers: int = 4,
    ) -> None:
        self.medium: IStorageMedium = medium
        self.timeout_seconds: float = timeout_seconds
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="reconcile")

    def verify(self, storage_key: str) -> bool:
        """True if *storage_key* is present and readable on the medium."""
        future = self._pool.submit(self.medium.exists, storage_key)
        try:
            return bool(future.result(timeout=self.timeout_seconds))
        except FutureTimeout:
            future.cancel()
            logger.warning(
                "verify timed out key=%s timeout=%.2fs", storage_key, self.timeout_seconds
            )
            return False
        except OSError as e:
            logger.warning("verify failed key=%s: %s", storage_key, e)
            return False

    def delete(self, storage_key: str) -> None:
        """Best-effort removal. Already-absent bytes count as deleted.

        Raises:
            DeleteFailed: the medium refused the removal.
        """
        try:
            self.medium.delete(storage_key)
        except FileNotFoundError:
            logger.debug("delete skipped key=%s reason=already_absent", storage_key)
        except OSError as e:
            raise DeleteFailed(storage_key, str(e)) from e

    def shutdown(self, wait: bool = False) -> None:
        self._pool.shutdown(wait=wait)
