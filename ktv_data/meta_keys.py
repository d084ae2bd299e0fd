from __future__ import annotations

# Collection and field names used by the remote object store.
# Keep these centralized to reduce magic strings and accidental divergence.

USER_TABLE = "User"
USER_NAME = "name"
USER_AVATAR = "avatar"

MUSIC_TABLE = "MUSIC_REPOSITORY"
MUSIC_ID = "musicId"
MUSIC_NAME = "name"
MUSIC_SONG = "song"
MUSIC_LRC = "lrc"

GET_MUSIC_PROCEDURE = "getMusic"
