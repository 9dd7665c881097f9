from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Result of one adapter call: a value on success, or the failing stage and
    its message. An empty transcript is a success with value "".
    """
    value: Optional[T] = None
    error: Optional[str] = None
    stage: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, stage: str, error: str) -> "Outcome[T]":
        return cls(error=error or "unknown error", stage=stage)
