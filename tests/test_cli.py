import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from ktv_data.app import KtvApp
from ktv_data.cli import main
from ktv_data.commands.doctor import run as run_doctor
from ktv_data.config import LeanCloudSettings, Settings, SqliteSettings, StoreSettings
from ktv_data.store.sqlite import SqliteObjectStore


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.config = self.tmp / "ktv.yaml"
        self.config.write_text(
            f"store:\n  backend: sqlite\nsqlite:\n  path: {self.tmp / 'ktv.sqlite3'}\n",
            encoding="utf-8",
        )
        (self.tmp / "send_it.lrc").write_text("[00:02.00]send it\n", encoding="utf-8")
        self.catalog = self.tmp / "catalog.yaml"
        self.catalog.write_text(
            "- musicId: qinghuaci\n"
            "  name: Qing Hua Ci\n"
            "  song: qinghuaci.m4a\n"
            "  lrc: \"[00:01.00]tian qing se\"\n"
            "- musicId: send_it\n"
            "  name: Send It\n"
            "  song: send_it.m4a\n"
            "  lrc_file: send_it.lrc\n",
            encoding="utf-8",
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(["--config", str(self.config), *argv])
        return code, out.getvalue(), err.getvalue()

    def test_user_lifecycle(self) -> None:
        code, out, _ = self._run("create-user", "alice", "a1")
        self.assertEqual(code, 0)
        user_id = json.loads(out)

        code, out, _ = self._run("rename", user_id, "bob")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), {"id": user_id, "name": "bob", "avatar": "a1"})

        code, out, _ = self._run("get-user", user_id)
        self.assertEqual(json.loads(out)["name"], "bob")

    def test_missing_user_prints_error(self) -> None:
        code, out, err = self._run("get-user", "nobody")
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("error: User record nobody not found", err)

    def test_seed_search_and_fetch_song(self) -> None:
        code, out, _ = self._run("seed-catalog", str(self.catalog))
        self.assertEqual(code, 0)
        self.assertEqual(len(json.loads(out)), 2)

        code, out, _ = self._run("songs", "--key", "SEND")
        self.assertEqual(json.loads(out), [{"id": "send_it", "name": "Send It", "song": "", "lrc": ""}])

        code, out, _ = self._run("song", "send_it")
        self.assertEqual(json.loads(out)["lrc"], "[00:02.00]send it\n")

        code, out, _ = self._run("song", "qinghuaci", "--lyrics")
        self.assertEqual(code, 0)
        self.assertIn("[00:01.00] tian qing se", out)

    def test_unknown_song_is_empty_result(self) -> None:
        code, _, err = self._run("song", "missing")
        self.assertEqual(code, 1)
        self.assertIn("empty result!", err)

    def test_doctor_reports_sqlite_store(self) -> None:
        code, out, _ = self._run("doctor")
        self.assertEqual(code, 0)
        self.assertIn("Backend: OK (sqlite)", out)
        self.assertIn("Catalog: SKIPPED", out)


class TestDoctorCommand(unittest.TestCase):
    def test_leancloud_network_check_is_skipped_offline(self) -> None:
        settings = Settings(
            store=StoreSettings(backend="leancloud"),
            leancloud=LeanCloudSettings(app_id="a", app_key="k", server_url="https://api.example.com"),
        )
        report = run_doctor(settings)
        self.assertTrue(report.ok)
        joined = "\n".join(report.checks)
        self.assertIn("LeanCloud: OK (https://api.example.com/1.1)", joined)
        self.assertIn("LeanCloud (network): SKIPPED", joined)

    def test_sqlite_counts_records(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = Settings(sqlite=SqliteSettings(path=Path(tmpdir) / "ktv.sqlite3"))
            report = run_doctor(settings)
        self.assertTrue(report.ok)
        self.assertIn("Users: OK (0 record(s))", report.checks)


class TestKtvApp(unittest.TestCase):
    def test_sqlite_backend_exposes_its_store(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            app = KtvApp.create(Settings(sqlite=SqliteSettings(path=Path(tmpdir) / "ktv.sqlite3")))
            try:
                self.assertIsInstance(app.sqlite, SqliteObjectStore)
                self.assertIs(app.objects, app.sqlite)
            finally:
                app.close()

    def test_leancloud_backend_has_no_sqlite_store(self) -> None:
        app = KtvApp.create(
            Settings(
                store=StoreSettings(backend="leancloud"),
                leancloud=LeanCloudSettings(app_id="a", app_key="k", server_url="https://api.example.com"),
            )
        )
        try:
            self.assertIsNone(app.sqlite)
        finally:
            app.close()


if __name__ == "__main__":
    unittest.main()
