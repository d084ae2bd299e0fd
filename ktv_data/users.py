from __future__ import annotations

import logging
import random
from typing import List, Optional, Protocol

from .mapping import (
    build_rename_record,
    build_user_record,
    decode_lyric_track,
    to_lyric_track_summary,
    to_user,
)
from .meta_keys import GET_MUSIC_PROCEDURE, MUSIC_NAME, MUSIC_TABLE, USER_TABLE
from .models import LyricTrack, User
from .result import Failure, Result, Success, map_result
from .store.gateway import ObjectStoreGateway
from .store.procedures import RemoteProcedureGateway
from .store.protocols import Contains
from .utils import random_avatar, random_string

logger = logging.getLogger(__name__)


class UserManager(Protocol):
    async def random_user(self) -> Result[User]: ...

    async def create(self, user: User) -> Result[str]: ...

    async def get_user(self, object_id: str) -> Result[User]: ...

    async def update(self, user: User, name: str) -> Result[User]: ...

    async def get_music_list(self, key: Optional[str] = None) -> Result[List[LyricTrack]]: ...

    async def get_music(self, music_id: str) -> Result[LyricTrack]: ...


class StoreUserManager:
    """:class:`UserManager` backed by an object store and its cloud functions."""

    def __init__(
        self,
        objects: ObjectStoreGateway,
        procedures: RemoteProcedureGateway,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.objects = objects
        self.procedures = procedures
        self.rng = rng or random.Random()

    async def random_user(self) -> Result[User]:
        user = User(name=random_string(8, self.rng), avatar=random_avatar(self.rng))

        def adopt_id(object_id: str) -> Result[User]:
            user.id = object_id
            return Success(user)

        result = map_result(await self.create(user), adopt_id)
        if isinstance(result, Success):
            logger.info("Provisioned user %s (%s)", user.id, user.name)
        return result

    async def create(self, user: User) -> Result[str]:
        if user.is_persisted:
            return Failure(f"{USER_TABLE} {user.id} already exists")
        return await self.objects.save(build_user_record(user.name, user.avatar))

    async def get_user(self, object_id: str) -> Result[User]:
        return await self.objects.query_one(USER_TABLE, object_id, to_user)

    async def update(self, user: User, name: str) -> Result[User]:
        if not user.is_persisted:
            return Failure(f"{USER_TABLE} has not been created yet")

        def apply_name(_object_id: str) -> Result[User]:
            # Local state only follows an acknowledged write.
            user.name = name
            return Success(user)

        return map_result(await self.objects.save(build_rename_record(user.id, name)), apply_name)

    async def get_music_list(self, key: Optional[str] = None) -> Result[List[LyricTrack]]:
        predicate = Contains(MUSIC_NAME, key) if key else None
        return await self.objects.query_many(MUSIC_TABLE, to_lyric_track_summary, predicate)

    async def get_music(self, music_id: str) -> Result[LyricTrack]:
        return await self.procedures.invoke(GET_MUSIC_PROCEDURE, {"id": music_id}, decode_lyric_track)
