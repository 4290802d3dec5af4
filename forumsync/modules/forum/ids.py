"""
Entity identity.

A forum id is either persisted (the remote service assigned an integer)
or local (client-made content the remote service has never seen).
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class PersistedId:
    """Id assigned by the remote service."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class LocalId:
    """Id of content that only exists in this process."""

    value: str

    def __str__(self) -> str:
        return self.value


EntityId = PersistedId | LocalId

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def classify_id(raw: str | int) -> EntityId:
    """
    Classify an id by whether it parses as an integer.

    Args:
        raw: Id as held in the cache (or an int from a caller)

    Returns:
        PersistedId for integer-parseable ids, LocalId otherwise
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        return PersistedId(raw)

    text = str(raw)
    # ASCII digits only; int() also takes "1_000" and non-Latin digits
    if _INTEGER_RE.fullmatch(text.strip()):
        return PersistedId(int(text.strip()))
    return LocalId(text)


def is_persisted(raw: str | int) -> bool:
    """True when the id belongs to remotely persisted content."""
    return isinstance(classify_id(raw), PersistedId)
