"""
Explicit outcomes for backend calls.

Services never raise for expected I/O failures; they return a Failure
carrying the backend's message so the caller can branch after awaiting.

Usage:
    result = await users.save(data_source, user)
    if isinstance(result, Failure):
        notifications.show_status(error_status(result.message))
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A completed call and its value, if any."""
    value: Optional[T] = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A failed call. The message is opaque text meant for the operator."""
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure]
