"""Operator CLI for the logpoints store."""

from __future__ import annotations

import argparse
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from rich.console import Console

import settings
from adapters.formatting import build_log_point_table
from adapters.sqlite_storage import SQLiteLogPointStore
from core.expiration import now_millis
from core.models import ApplicationFilter
from core.service import LogPointService

NAME = "LOGPOINTS"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging(config: dict) -> None:
    if not config.get("enabled", True):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/logpoints.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)
    logging.getLogger(__name__).info(
        "Logging configured: level=%s, file=%s",
        level_name,
        file_cfg.get("path", "logs/logpoints.log") if file_cfg.get("enabled", False) else "off",
    )


def parse_tags(raw_tags: Optional[list[str]]) -> dict[str, str]:
    """Parse repeated key=value options into a tag mapping."""

    tags: dict[str, str] = {}
    for raw in raw_tags or []:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            raise ValueError(f"Tag must be key=value: {raw}")
        tags[key] = value
    return tags


def _require(value: Optional[str], option: str) -> str:
    if not value:
        raise SystemExit(f"{option} is required (pass it or set it under query in config.json)")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="logpoints")
    parser.add_argument("--config", help="Path to config.json")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Create the log point schema")

    list_parser = subparsers.add_parser("list", help="List a user's log points")
    list_parser.add_argument("--workspace")
    list_parser.add_argument("--user")
    list_parser.add_argument("--predefined", action="store_true", help="Only predefined log points")

    query_parser = subparsers.add_parser(
        "query",
        help="Show the log points a running application would receive",
    )
    query_parser.add_argument("--workspace")
    query_parser.add_argument("--name")
    query_parser.add_argument("--version")
    query_parser.add_argument("--stage")
    query_parser.add_argument("--tag", action="append", help="Custom tag as key=value (repeatable)")

    for command in ("enable", "disable"):
        toggle_parser = subparsers.add_parser(command, help=f"{command.capitalize()} a log point")
        toggle_parser.add_argument("--workspace")
        toggle_parser.add_argument("--user")
        toggle_parser.add_argument("log_point_id")

    remove_parser = subparsers.add_parser("remove", help="Remove one or more log points")
    remove_parser.add_argument("--workspace")
    remove_parser.add_argument("--user")
    remove_parser.add_argument("log_point_ids", nargs="+")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return

    config = settings.load_settings(args.config)
    _configure_logging(config.logging)
    logger = logging.getLogger(__name__)

    storage = SQLiteLogPointStore(config.db_path)
    if args.command == "init-db":
        _print_banner()
        storage.init_db()
        logger.info("Schema ready at %s", config.db_path)
        return

    service = LogPointService(storage)
    console = Console()
    workspace_id = _require(args.workspace or config.default_workspace, "--workspace")

    if args.command == "query":
        try:
            tags = parse_tags(args.tag)
        except ValueError as exc:
            parser.error(str(exc))
        requester = ApplicationFilter(
            name=args.name,
            version=args.version,
            stage=args.stage,
            custom_tags=tags,
        )
        log_points = service.query_log_points(workspace_id, requester)
        console.print(build_log_point_table(log_points, now_millis(), title="Targeted log points"))
        return

    user_id = _require(args.user or config.default_user, "--user")

    if args.command == "list":
        if args.predefined:
            log_points = service.list_predefined_log_points(workspace_id, user_id)
        else:
            log_points = service.list_log_points(workspace_id, user_id)
        console.print(build_log_point_table(log_points, now_millis(), title="Log points"))
    elif args.command in {"enable", "disable"}:
        service.enable_disable_log_point(
            workspace_id, user_id, args.log_point_id, disabled=args.command == "disable"
        )
    elif args.command == "remove":
        if len(args.log_point_ids) == 1:
            service.remove_log_point(workspace_id, user_id, args.log_point_ids[0])
        else:
            removed = service.remove_log_points(workspace_id, user_id, args.log_point_ids)
            console.print(f"Removed {removed} log point(s)")


if __name__ == "__main__":
    main()
