# application/dto/store_dto.py
# Data Transfer Objects exchanged between the stores and the request layer.

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ReasonCode(str, Enum):
    """Machine-stable outcome codes. Values are part of the JSON contract."""
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    DANGLING_REFERENCE = "dangling_reference"
    GENERATION_EXHAUSTED = "generation_exhausted"
    INVALID_REQUEST = "invalid_request"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class FileMetadata:
    """What the upload path hands over once the bytes are on the medium."""
    storage_key: str
    original_name: str
    mime_type: str = "application/octet-stream"


@dataclass(frozen=True)
class StandardResult:
    """Uniform success/error shape returned by every store operation."""
    ok: bool
    reason_code: ReasonCode
    reason_text: Optional[str] = None
    record: Optional[dict] = None
    share_address: Optional[str] = None

    def to_dict(self) -> dict:
        """JSON body for the HTTP layer. Empty optional fields are omitted."""
        body: dict = {"ok": self.ok, "reasonCode": self.reason_code.value}
        if self.reason_text is not None:
            body["reasonText"] = self.reason_text
        if self.record is not None:
            body["record"] = dict(self.record)
        if self.share_address is not None:
            body["shareAddress"] = self.share_address
        return body
