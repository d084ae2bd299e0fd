from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor
from functools import partial
from typing import Any, Callable, List, Optional, TypeVar

from ..result import Failure, Result, Success, failure_from
from .protocols import Contains, ObjectStoreTransport, Record, RecordDraft

logger = logging.getLogger(__name__)

T = TypeVar("T")

Transform = Callable[[Record], Result[T]]


async def run_blocking(executor: Optional[Executor], fn: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking transport call off the event loop."""
    return await asyncio.get_running_loop().run_in_executor(executor, partial(fn, *args))


class ObjectStoreGateway:
    """Async, never-raising front for an :class:`ObjectStoreTransport`.

    Each call resolves to exactly one :class:`Result`. Transport and mapping
    exceptions are converted to :class:`Failure` here and go no further.
    """

    def __init__(self, transport: ObjectStoreTransport, executor: Optional[Executor] = None) -> None:
        self.transport = transport
        self.executor = executor

    async def save(self, draft: RecordDraft) -> Result[str]:
        action = "insert" if draft.is_insert else f"update of {draft.object_id}"
        try:
            object_id = await run_blocking(self.executor, self.transport.save, draft)
        except Exception as exc:
            logger.warning("%s %s failed: %s", draft.collection, action, exc)
            return failure_from(exc)
        if not object_id:
            logger.warning("%s %s returned no object id", draft.collection, action)
            return Failure(f"{draft.collection} {action} returned no object id")
        if not draft.is_insert and object_id != draft.object_id:
            logger.debug(
                "%s update of %s reported id %s; keeping requested id",
                draft.collection,
                draft.object_id,
                object_id,
            )
            object_id = draft.object_id
        logger.debug("%s %s ok (%s)", draft.collection, action, object_id)
        return Success(object_id)

    async def query_one(
        self,
        collection: str,
        object_id: str,
        transform: Transform[T],
        predicate: Optional[Contains] = None,
    ) -> Result[T]:
        # An id lookup takes precedence over any predicate.
        if predicate is not None:
            logger.debug("Ignoring predicate %s for %s lookup by id", predicate, collection)
        if not object_id:
            return Failure(f"{collection} lookup requires an object id")
        try:
            record = await run_blocking(self.executor, self.transport.fetch, collection, object_id)
            result = transform(record)
        except Exception as exc:
            logger.warning("%s fetch of %s failed: %s", collection, object_id, exc)
            return failure_from(exc)
        if isinstance(result, Failure):
            logger.warning("%s record %s could not be mapped: %s", collection, object_id, result.message)
        return result

    async def query_many(
        self,
        collection: str,
        transform: Transform[T],
        predicate: Optional[Contains] = None,
    ) -> Result[List[T]]:
        try:
            records = await run_blocking(self.executor, self.transport.list, collection, predicate)
            items: List[T] = []
            for record in records:
                result = transform(record)
                if isinstance(result, Failure):
                    logger.warning("%s record %s could not be mapped: %s", collection, record.object_id, result.message)
                    return result
                items.append(result.payload)
        except Exception as exc:
            logger.warning("%s query failed: %s", collection, exc)
            return failure_from(exc)
        logger.debug("%s query returned %d record(s)", collection, len(items))
        return Success(items)
