from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    payload: T

    def __post_init__(self) -> None:
        if self.payload is None:
            raise ValueError("Success payload must not be None")


@dataclass(frozen=True, slots=True)
class Failure:
    message: str

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("Failure message must not be empty")


Result = Union[Success[T], Failure]


def is_success(result: Result[T]) -> bool:
    return isinstance(result, Success)


def map_result(result: Result[T], fn: Callable[[T], Result[U]]) -> Result[U]:
    """Chain ``fn`` onto a successful result.

    A failure is passed through untouched so the original message survives
    any number of chained steps.
    """
    if isinstance(result, Failure):
        return result
    return fn(result.payload)


def failure_from(exc: BaseException) -> Failure:
    """Build a failure whose message describes ``exc``.

    Exceptions with an empty ``str()`` fall back to their class name so the
    message is never blank.
    """
    return Failure(str(exc) or exc.__class__.__name__)
