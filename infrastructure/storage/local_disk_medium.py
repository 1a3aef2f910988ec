# infrastructure/storage/local_disk_medium.py
# Storage medium backed by a single directory on the local filesystem.

import logging
import os
import re
import shutil
import uuid
from typing import BinaryIO, Tuple

from application.ports.storage_medium_port import IStorageMedium

logger = logging.getLogger("shortener.storage")

# Storage keys are flat file names: no separators, no dots
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class LocalDiskMedium(IStorageMedium):
    """Keeps each uploaded file as ``<root>/<storage_key>``."""

    def __init__(self, root: str) -> None:
        self.root: str = os.path.realpath(root)
        os.makedirs(self.root, exist_ok=True)

    def _resolve(self, storage_key: str) -> str:
        """Absolute path for *storage_key*; ValueError if it could escape root."""
        if not _KEY_PATTERN.match(storage_key or ""):
            raise ValueError(f"Invalid storage key: '{storage_key}'.")
        path: str = os.path.realpath(os.path.join(self.root, storage_key))
        if os.path.dirname(path) != self.root:
            raise ValueError(f"Storage key resolves outside root: '{storage_key}'.")
        return path

    def save(self, stream: BinaryIO) -> Tuple[str, int]:
        storage_key: str = uuid.uuid4().hex
        path: str = self._resolve(storage_key)
        try:
            with open(path, "wb") as out:
                shutil.copyfileobj(stream, out)
        except Exception:
            if os.path.exists(path):
                os.unlink(path)
            raise
        size: int = os.path.getsize(path)
        logger.debug("saved key=%s size=%dB", storage_key, size)
        return storage_key, size

    def exists(self, storage_key: str) -> bool:
        try:
            path: str = self._resolve(storage_key)
        except ValueError:
            return False
        return os.path.isfile(path) and os.access(path, os.R_OK)

    def path_for(self, storage_key: str) -> str:
        return self._resolve(storage_key)

    def delete(self, storage_key: str) -> None:
        try:
            path: str = self._resolve(storage_key)
        except ValueError as exc:
            raise OSError(str(exc)) from exc
        os.unlink(path)
