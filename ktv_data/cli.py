from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from .app import KtvApp
from .commands import doctor as cmd_doctor
from .commands import seed as cmd_seed
from .config import Settings, find_config
from .lrc import format_timestamp
from .models import LyricTrack, User
from .result import Failure, Result
from .users import UserManager

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


def configure_logging(level_name: str) -> None:
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)
    handler = logging.StreamHandler()
    if sys.stderr.isatty():
        handler.setFormatter(ColorFormatter(LOG_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def _to_jsonable(payload: Any) -> Any:
    if isinstance(payload, (User, LyricTrack)):
        return payload.to_record()
    if isinstance(payload, list):
        return [_to_jsonable(item) for item in payload]
    return payload


def _emit(result: Result[Any]) -> int:
    if isinstance(result, Failure):
        print(f"error: {result.message}", file=sys.stderr)
        return 1
    print(json.dumps(_to_jsonable(result.payload), ensure_ascii=False, indent=2))
    return 0


def _print_lyrics(track: LyricTrack) -> None:
    print(f"{track.name} ({track.id})")
    if track.song:
        print(f"song: {track.song}")
    lines = track.lines()
    if not lines:
        print("(no timed lyrics)")
    for line in lines:
        print(f"[{format_timestamp(line.start_ms)}] {line.text}")


async def _run_user_command(args: argparse.Namespace, users: UserManager) -> Result[Any]:
    match args.command:
        case "random-user":
            return await users.random_user()
        case "create-user":
            return await users.create(User(name=args.name, avatar=args.avatar))
        case "get-user":
            return await users.get_user(args.id)
        case "rename":
            found = await users.get_user(args.id)
            if isinstance(found, Failure):
                return found
            return await users.update(found.payload, args.name)
        case "songs":
            return await users.get_music_list(args.key)
        case "song":
            return await users.get_music(args.id)
    raise ValueError(f"Unknown command {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Karaoke user and song catalog access")
    parser.add_argument("--config", type=Path, help="Path to ktv.yaml")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("random-user", help="Create a user with a random name and avatar")
    create_parser = subparsers.add_parser("create-user", help="Create a user")
    create_parser.add_argument("name")
    create_parser.add_argument("avatar")
    get_parser = subparsers.add_parser("get-user", help="Fetch a user by id")
    get_parser.add_argument("id")
    rename_parser = subparsers.add_parser("rename", help="Change a user's name")
    rename_parser.add_argument("id")
    rename_parser.add_argument("name")
    songs_parser = subparsers.add_parser("songs", help="List or search the song catalog")
    songs_parser.add_argument("--key", default=None, help="Substring to search song names for")
    song_parser = subparsers.add_parser("song", help="Fetch a song with its audio and lyrics")
    song_parser.add_argument("id")
    song_parser.add_argument(
        "--lyrics", action="store_true", help="Print timed lyrics instead of JSON"
    )
    seed_parser = subparsers.add_parser(
        "seed-catalog", help="Add songs from a YAML list to the catalog"
    )
    seed_parser.add_argument("file", type=Path)
    doctor_parser = subparsers.add_parser("doctor", help="Run basic config/store checks")
    doctor_parser.add_argument(
        "--online", action="store_true", help="Also contact the remote store"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        settings = Settings.load(find_config(args.config))
    except (FileNotFoundError, ValidationError) as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    if args.command == "doctor":
        report = cmd_doctor.run(settings, check_online=args.online)
        for line in report.checks:
            print(line)
        return 0 if report.ok else 1

    app = KtvApp.create(settings)
    try:
        if args.command == "seed-catalog":
            try:
                result = asyncio.run(cmd_seed.run(app.users.objects, args.file))
            except (OSError, ValueError) as exc:
                raise SystemExit(f"Could not load catalog: {exc}") from exc
            return _emit(result)
        result = asyncio.run(_run_user_command(args, app.users))
        if args.command == "song" and args.lyrics and not isinstance(result, Failure):
            _print_lyrics(result.payload)
            return 0
        return _emit(result)
    finally:
        app.close()


if __name__ == "__main__":
    raise SystemExit(main())
