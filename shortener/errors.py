# shortener/errors.py
# Error taxonomy for the token stores.
# TokenNotFound / DanglingReference never escape a store: they are turned
# into StandardResult objects at the store boundary.


class ShortenerError(Exception):
    """Base class for every error raised by the shortener core."""


class TokenNotFound(ShortenerError):
    """The token was never issued, or it has already been purged."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Nothing associated with token '{token}'.")
        self.token = token


class DanglingReference(ShortenerError):
    """The table knows the token but the backing bytes are gone."""

    def __init__(self, token: str, storage_key: str) -> None:
        super().__init__(
            f"Token '{token}' references '{storage_key}', "
            f"which is no longer on the storage medium."
        )
        self.token = token
        self.storage_key = storage_key


class GenerationExhausted(ShortenerError):
    """No free token could be found without exceeding the length ceiling."""

    def __init__(self, length: int, attempts: int) -> None:
        super().__init__(
            f"Token space exhausted at length {length} after {attempts} attempts."
        )
        self.length = length
        self.attempts = attempts


class DeleteFailed(ShortenerError):
    """Best-effort removal of backing bytes failed. Never fatal."""

    def __init__(self, storage_key: str, reason: str) -> None:
        super().__init__(f"Could not delete '{storage_key}': {reason}")
        self.storage_key = storage_key
        self.reason = reason
