import hashlib
from typing import Protocol


class IdGenerator(Protocol):
    def next_id(self) -> str: ...


class SequentialIds:
    """Predictable ids (c1, c2, ...) for tests and scripted lessons."""

    def __init__(self, prefix: str = "c", start: int = 1) -> None:
        self.prefix = prefix
        self._next = start

    def next_id(self) -> str:
        new_id = f"{self.prefix}{self._next}"
        self._next += 1
        return new_id


class HashIds:
    """Short hex ids derived from a seed and a counter, so a given seed always replays the same ids."""

    def __init__(self, seed: str = "gitsim", length: int = 7) -> None:
        self.seed = seed
        self.length = length
        self._counter = 0

    def next_id(self) -> str:
        self._counter += 1
        digest = hashlib.sha256(f"{self.seed}-{self._counter}".encode()).hexdigest()
        return digest[:self.length]
