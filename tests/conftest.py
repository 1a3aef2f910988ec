import itertools
from typing import Iterable, Iterator

import pytest

from shortener.tokens import TokenGenerator

# Fixed instant so ISO timestamps in assertions are stable
T0: float = 1_700_000_000.0


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = T0) -> None:
        self.now: float = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedGenerator(TokenGenerator):
    """Hands out a fixed sequence of tokens, ignoring the requested length."""

    def __init__(self, tokens: Iterable[str]) -> None:
        super().__init__()
        self._tokens: Iterator[str] = iter(tokens)

    def generate(self, length: int) -> str:
        return next(self._tokens)


class RepeatingGenerator(TokenGenerator):
    """Always returns 'a' * length, so every length has exactly one token."""

    def generate(self, length: int) -> str:
        return "a" * length


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def cycle_tokens(*tokens: str) -> Iterator[str]:
    return itertools.cycle(tokens)
