"""Explicit results returned by every recursive build step."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Generic, TypeAlias, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Committed(Generic[T]):
    """A step finished and produced ``value``."""

    value: T


@dataclass(frozen=True, slots=True)
class Rewind:
    """A step was abandoned; unwind until a frame whose checkpoint is below ``depth``."""

    depth: int

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError("rewind depth must be >= 0")


class Stop(Enum):
    """Collection step marker meaning "no further elements"."""

    STOP = "stop"

    def __repr__(self) -> str:
        return "STOP"


STOP: Final = Stop.STOP

Outcome: TypeAlias = Committed[T] | Rewind

__all__ = ["STOP", "Committed", "Outcome", "Rewind", "Stop"]
