# application/ports/storage_medium_port.py
# Port interface for the medium holding uploaded file bytes.
# Domain layer — must not import infrastructure or adapter code.

from abc import ABC, abstractmethod
from typing import BinaryIO, Tuple


class IStorageMedium(ABC):
    """System of record for file bytes. The stores never cache its answers."""

    @abstractmethod
    def save(self, stream: BinaryIO) -> Tuple[str, int]:
        """
        Persist the bytes of *stream* under a fresh storage key.

        Returns:
            (storage_key, size_in_bytes)
        """
        ...

    @abstractmethod
    def exists(self, storage_key: str) -> bool:
        """True if the object is present and readable. Reads no content."""
        ...

    @abstractmethod
    def path_for(self, storage_key: str) -> str:
        """Location handed to the response renderer for streaming."""
        ...

    @abstractmethod
    def delete(self, storage_key: str) -> None:
        """
        Remove the object.

        Raises:
            FileNotFoundError: nothing is stored under *storage_key*.
            OSError:           the medium refused the removal.
        """
        ...
