# shortener/codec.py
# Maps store outcomes to StandardResult. Pure functions: no I/O, no state.

from datetime import datetime, timezone
from typing import Optional

from application.dto.store_dto import ReasonCode, StandardResult
from shortener.records import FileRecord, LinkRecord, Record


def _iso(epoch_seconds: float) -> str:
    """Epoch seconds → ISO-8601 UTC with a trailing Z."""
    stamp = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def share_address(record: Record, base_url: str) -> str:
    """Public address a client can hand out for *record*."""
    base: str = (base_url or "").rstrip("/")
    if isinstance(record, FileRecord):
        return f"{base}/api/hash/file/{record.token}?dl=0"
    return f"{base}/{record.token}"


def record_fields(record: Record) -> dict:
    """camelCase view of a record for JSON bodies. TTL is in milliseconds."""
    fields: dict = {
        "token":     record.token,
        "created":   _iso(record.created_at),
        "expiresAt": _iso(record.expires_at),
        "ttl":       int(round(record.ttl_seconds * 1000)),
    }
    if isinstance(record, LinkRecord):
        fields["link"] = record.target_url
    elif isinstance(record, FileRecord):
        fields["storageKey"] = record.storage_key
        fields["originalName"] = record.original_name
        fields["mimeType"] = record.mime_type
    return fields


def encode_record(record: Record, base_url: Optional[str] = "") -> StandardResult:
    return StandardResult(
        ok=True,
        reason_code=ReasonCode.SUCCESS,
        record=record_fields(record),
        share_address=share_address(record, base_url or ""),
    )


def encode_not_found(token: str) -> StandardResult:
    return StandardResult(
        ok=False,
        reason_code=ReasonCode.NOT_FOUND,
        reason_text=f"Nothing associated with token '{token}'.",
    )


def encode_dangling(token: str) -> StandardResult:
    return StandardResult(
        ok=False,
        reason_code=ReasonCode.DANGLING_REFERENCE,
        reason_text=(
            f"The file for token '{token}' could not be found on the storage medium, "
            f"but there is a reference to it."
        ),
    )


def encode_exhausted() -> StandardResult:
    return StandardResult(
        ok=False,
        reason_code=ReasonCode.GENERATION_EXHAUSTED,
        reason_text="No free token is available right now. Retry shortly.",
    )


def encode_invalid(reason: str) -> StandardResult:
    return StandardResult(ok=False, reason_code=ReasonCode.INVALID_REQUEST, reason_text=reason)
