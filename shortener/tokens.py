# shortener/tokens.py
# Short token generation and the adaptive length policy.

import secrets
import string

# 0-9 followed by a-z, the same symbols a base-36 number uses
ALPHABET: str = string.digits + string.ascii_lowercase
ALPHABET_SIZE: int = len(ALPHABET)

MIN_TOKEN_LENGTH: int = 2


class TokenGenerator:
    """
    Produces random tokens over a fixed alphabet and decides how long they
    should be for a given table size.

    Length policy: below ``36 ** min_length`` entries the length is
    ``min_length + 1``. From there on it is ``min_length + floor(log36(size))``,
    so tokens grow by one symbol each time the table gains a factor of 36.
    The floor is computed with integer powers rather than ``math.log`` so
    exact boundaries (1296, 46656, ...) land on the right side.
    """

    def __init__(self, min_length: int = MIN_TOKEN_LENGTH, alphabet: str = ALPHABET) -> None:
        if min_length < 1:
            raise ValueError(f"min_length must be >= 1. Got: {min_length}.")
        if len(set(alphabet)) < 2:
            raise ValueError("alphabet needs at least two distinct symbols.")
        self.min_length: int = min_length
        self.alphabet: str = alphabet

    def generate(self, length: int) -> str:
        """Return a token of exactly *length* symbols."""
        if length < 1:
            raise ValueError(f"Token length must be >= 1. Got: {length}.")
        return "".join(secrets.choice(self.alphabet) for _ in range(length))

    def recalculate_length(self, table_size: int) -> int:
        """Token length to use for a table currently holding *table_size* entries."""
        base: int = len(self.alphabet)
        if table_size < base ** self.min_length:
            return self.min_length + 1

        growth: int = 0
        while base ** (growth + 1) <= table_size:
            growth += 1
        return self.min_length + growth

    def capacity(self, length: int) -> int:
        """Number of distinct tokens of *length* symbols."""
        return len(self.alphabet) ** length
