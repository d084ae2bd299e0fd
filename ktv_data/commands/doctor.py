from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..app import KtvApp
from ..config import Settings
from ..meta_keys import MUSIC_TABLE, USER_TABLE
from ..store.leancloud import LeanCloudClient
from ..store.protocols import StoreError


@dataclass(slots=True)
class DoctorReport:
    ok: bool
    checks: list[str]


def _check(label: str, status: str, detail: Optional[str] = None) -> str:
    if detail:
        return f"{label}: {status} ({detail})"
    return f"{label}: {status}"


def ok_line(label: str, detail: Optional[str] = None) -> str:
    return _check(label, "OK", detail)


def error(label: str, detail: Optional[str] = None) -> str:
    return _check(label, "ERROR", detail)


def skipped(label: str, detail: Optional[str] = None) -> str:
    return _check(label, "SKIPPED", detail)


def run(settings: Settings, *, check_online: bool = False) -> DoctorReport:
    checks: list[str] = []
    ok = True

    checks.append(ok_line("Backend", settings.store.backend))
    checks.append(ok_line("Workers", str(settings.store.worker_concurrency)))

    app = KtvApp.create(settings)
    try:
        if app.sqlite is not None:
            store = app.sqlite
            checks.append(ok_line("SQLite store", str(store.path)))
            checks.append(ok_line("Users", f"{store.count(USER_TABLE)} record(s)"))
            songs = store.count(MUSIC_TABLE)
            if songs:
                checks.append(ok_line("Catalog", f"{songs} song(s)"))
            else:
                checks.append(skipped("Catalog", "empty; run `ktv-data seed-catalog`"))
        elif isinstance(app.objects, LeanCloudClient):
            checks.append(ok_line("LeanCloud", app.objects.base_url))
            if check_online:
                try:
                    app.objects.ping()
                    checks.append(ok_line("LeanCloud (network)"))
                except StoreError as exc:
                    ok = False
                    checks.append(error("LeanCloud (network)", str(exc)))
            else:
                checks.append(skipped("LeanCloud (network)", "pass --online"))
    finally:
        app.close()

    return DoctorReport(ok=ok, checks=checks)
