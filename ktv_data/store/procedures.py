from __future__ import annotations

import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

from ..result import Failure, Result
from .gateway import run_blocking
from .protocols import ProcedureTransport

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMPTY_RESULT_MESSAGE = "empty result!"


@dataclass(frozen=True, slots=True)
class ProcedureValue:
    value: Any


@dataclass(frozen=True, slots=True)
class ProcedureEmpty:
    pass


@dataclass(frozen=True, slots=True)
class ProcedureError:
    message: str


ProcedureOutcome = Union[ProcedureValue, ProcedureEmpty, ProcedureError]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, bytearray)):
        return not value.strip()
    return False


class RemoteProcedureGateway:
    """Invokes a named server-side function and decodes its single value.

    Transport errors, empty results and decode errors each become a
    :class:`Failure` with their own message.
    """

    def __init__(self, transport: ProcedureTransport, executor: Optional[Executor] = None) -> None:
        self.transport = transport
        self.executor = executor

    async def call(self, name: str, params: Mapping[str, Any]) -> ProcedureOutcome:
        try:
            value = await run_blocking(self.executor, self.transport.call, name, dict(params))
        except Exception as exc:
            return ProcedureError(str(exc) or exc.__class__.__name__)
        if _is_empty(value):
            return ProcedureEmpty()
        return ProcedureValue(value)

    async def invoke(
        self,
        name: str,
        params: Mapping[str, Any],
        decode: Callable[[Any], Result[T]],
    ) -> Result[T]:
        outcome = await self.call(name, params)
        match outcome:
            case ProcedureError(message=message):
                logger.warning("Procedure %s failed: %s", name, message)
                return Failure(message)
            case ProcedureEmpty():
                logger.warning("Procedure %s returned no value", name)
                return Failure(EMPTY_RESULT_MESSAGE)
            case ProcedureValue(value=value):
                try:
                    result = decode(value)
                except Exception as exc:
                    logger.warning("Procedure %s result could not be decoded: %s", name, exc)
                    return Failure(f"could not decode {name} result: {exc}")
                if isinstance(result, Failure):
                    logger.warning("Procedure %s result could not be decoded: %s", name, result.message)
                return result
        raise AssertionError(f"unhandled procedure outcome {outcome!r}")  # pragma: no cover
