"""Success/failure outcomes returned by the gateway."""

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from calories_info.domain.errors import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Operation completed with a value."""

    value: T
    ok: Literal[True] = True


@dataclass(frozen=True)
class Failure:
    """Operation failed; ``message`` is safe to show to clients."""

    kind: ErrorKind
    message: str
    ok: Literal[False] = False


Outcome = Success[T] | Failure
