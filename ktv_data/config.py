from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class StoreSettings(BaseModel):
    backend: Literal["sqlite", "leancloud"] = "sqlite"
    worker_concurrency: int = Field(default=4, ge=1)


class SqliteSettings(BaseModel):
    path: Path = Path("./ktv.sqlite3")

    @field_validator("path", mode="before")
    @classmethod
    def _expand_path(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()


class LeanCloudSettings(BaseModel):
    app_id: str
    app_key: str
    server_url: str
    timeout_seconds: float = Field(default=10.0, gt=0)
    useragent: str = "ktv-data/0.1"

    @field_validator("server_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("server_url must be an http(s) URL")
        return value


class Settings(BaseModel):
    store: StoreSettings = StoreSettings()
    sqlite: SqliteSettings = SqliteSettings()
    leancloud: Optional[LeanCloudSettings] = None

    @model_validator(mode="after")
    def _require_backend_section(self) -> "Settings":
        if self.store.backend == "leancloud" and self.leancloud is None:
            raise ValueError("store.backend 'leancloud' requires a leancloud section")
        return self

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Path:
    if explicit_path:
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "ktv.yaml", cwd / "ktv.yml"):
        if candidate.exists():
            return candidate
    raise FileNotFoundError("Could not find ktv.yaml - pass --config explicitly.")
