import json
import unittest

from ktv_data.mapping import (
    build_rename_record,
    build_user_record,
    decode_lyric_track,
    to_lyric_track_summary,
    to_user,
)
from ktv_data.models import LyricTrack, User
from ktv_data.result import Failure, Success
from ktv_data.store.protocols import Record


class TestToUser(unittest.TestCase):
    def test_maps_complete_record(self) -> None:
        record = Record("abc", {"name": "alice", "avatar": "a1"})
        self.assertEqual(to_user(record), Success(User(id="abc", name="alice", avatar="a1")))

    def test_missing_name_is_failure(self) -> None:
        result = to_user(Record("abc", {"avatar": "a1"}))
        self.assertIsInstance(result, Failure)
        self.assertIn("'name'", result.message)

    def test_non_string_avatar_is_failure(self) -> None:
        result = to_user(Record("abc", {"name": "alice", "avatar": 3}))
        self.assertIsInstance(result, Failure)
        self.assertIn("'avatar'", result.message)

    def test_missing_object_id_is_failure(self) -> None:
        result = to_user(Record("", {"name": "alice", "avatar": "a1"}))
        self.assertIsInstance(result, Failure)

    def test_mapped_user_is_persisted(self) -> None:
        self.assertFalse(User(name="alice", avatar="a1").is_persisted)
        self.assertTrue(to_user(Record("abc", {"name": "alice", "avatar": "a1"})).payload.is_persisted)


class TestLyricTrackMapping(unittest.TestCase):
    def test_summary_leaves_song_and_lrc_empty(self) -> None:
        record = Record("row1", {"musicId": "1", "name": "Love Song", "song": "x.m4a", "lrc": "[00:01]hi"})
        result = to_lyric_track_summary(record)
        self.assertEqual(result, Success(LyricTrack(id="1", name="Love Song")))
        self.assertTrue(result.payload.is_summary)

    def test_summary_missing_music_id_is_failure(self) -> None:
        result = to_lyric_track_summary(Record("row1", {"name": "Love Song"}))
        self.assertIsInstance(result, Failure)
        self.assertIn("musicId", result.message)

    def test_decode_full_document(self) -> None:
        raw = json.dumps({"id": "1", "name": "Love Song", "song": "https://cdn/1.m4a", "lrc": "[00:01.00]la"})
        result = decode_lyric_track(raw)
        self.assertEqual(
            result,
            Success(LyricTrack(id="1", name="Love Song", song="https://cdn/1.m4a", lrc="[00:01.00]la")),
        )

    def test_decode_accepts_mapping_and_bytes(self) -> None:
        doc = {"id": "1", "name": "n", "song": "s", "lrc": "l", "extra": True}
        self.assertIsInstance(decode_lyric_track(doc), Success)
        self.assertIsInstance(decode_lyric_track(json.dumps(doc).encode("utf-8")), Success)

    def test_decode_invalid_json_is_failure(self) -> None:
        result = decode_lyric_track("400 Bad Request")
        self.assertIsInstance(result, Failure)
        self.assertTrue(result.message.startswith("could not decode lyric track"))

    def test_decode_missing_field_is_failure(self) -> None:
        result = decode_lyric_track(json.dumps({"id": "1", "name": "n", "song": "s"}))
        self.assertIsInstance(result, Failure)
        self.assertIn("lrc", result.message)

    def test_decode_blank_song_or_lrc_is_failure(self) -> None:
        for blank in ("song", "lrc"):
            doc = {"id": "2", "name": "Hate", "song": "s.m4a", "lrc": "[00:01.00]x"}
            doc[blank] = ""
            result = decode_lyric_track(json.dumps(doc))
            self.assertIsInstance(result, Failure)
            self.assertIn(blank, result.message)

    def test_decode_unsupported_type_is_failure(self) -> None:
        self.assertIsInstance(decode_lyric_track(42), Failure)


class TestRecordBuilders(unittest.TestCase):
    def test_user_record_is_an_insert(self) -> None:
        draft = build_user_record("alice", "a1")
        self.assertEqual(draft.collection, "User")
        self.assertIsNone(draft.object_id)
        self.assertTrue(draft.is_insert)
        self.assertEqual(draft.fields, {"name": "alice", "avatar": "a1"})

    def test_rename_record_only_sets_name(self) -> None:
        draft = build_rename_record("abc", "bob")
        self.assertEqual(draft.object_id, "abc")
        self.assertFalse(draft.is_insert)
        self.assertEqual(draft.fields, {"name": "bob"})


if __name__ == "__main__":
    unittest.main()
