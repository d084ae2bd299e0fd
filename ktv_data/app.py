from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .store.gateway import ObjectStoreGateway
from .store.leancloud import LeanCloudClient
from .store.procedures import RemoteProcedureGateway
from .store.protocols import ObjectStoreTransport, ProcedureTransport
from .store.sqlite import SqliteObjectStore, default_procedures
from .users import StoreUserManager

logger = logging.getLogger(__name__)


@dataclass
class KtvApp:
    settings: Settings
    objects: ObjectStoreTransport
    procedures: ProcedureTransport
    executor: ThreadPoolExecutor
    users: StoreUserManager
    sqlite: Optional[SqliteObjectStore] = None

    @classmethod
    def create(cls, settings: Settings) -> "KtvApp":
        executor = ThreadPoolExecutor(
            max_workers=settings.store.worker_concurrency,
            thread_name_prefix="ktv-store",
        )
        sqlite_store: Optional[SqliteObjectStore] = None
        objects: ObjectStoreTransport
        procedures: ProcedureTransport
        if settings.store.backend == "leancloud":
            client = LeanCloudClient(settings.leancloud)
            objects = client
            procedures = client
            logger.debug("Using LeanCloud backend at %s", settings.leancloud.server_url)
        else:
            sqlite_store = SqliteObjectStore(settings.sqlite.path)
            objects = sqlite_store
            procedures = default_procedures(sqlite_store)
            logger.debug("Using SQLite backend at %s", settings.sqlite.path)
        users = StoreUserManager(
            ObjectStoreGateway(objects, executor),
            RemoteProcedureGateway(procedures, executor),
        )
        return cls(
            settings=settings,
            objects=objects,
            procedures=procedures,
            executor=executor,
            users=users,
            sqlite=sqlite_store,
        )

    def close(self) -> None:
        self.executor.shutdown(wait=True)
        if self.sqlite is not None:
            self.sqlite.close()
