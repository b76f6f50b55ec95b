"""Command line entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from notes_index.config import AppConfig, CliOverrides, load_effective_config
from notes_index.index import (
    DEFAULT_INTERVAL,
    DEFAULT_PATH_LENGTH,
    DEFAULT_TIMESPAN,
    Agenda,
    AgendaError,
    Store,
    StoreLoadError,
    WalkError,
    build_agenda,
    cut_path,
    load_store,
    parse_duration,
    parse_path_length,
    parse_timespan,
    rank_hits,
    reindex_root,
    save_store,
)
from notes_index.logging import JsonlRunLogger, RunEvent, sanitize_arguments, utc_timestamp

EXIT_OK = 0
EXIT_FATAL = 2

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for all subcommands."""
    parser = argparse.ArgumentParser(prog="notes-index")
    parser.add_argument("--config", required=False, default=None)
    parser.add_argument("--store", required=False, default=None)
    parser.add_argument("--verbose", "-v", action="count", default=0)
    commands = parser.add_subparsers(dest="command", required=True)

    index_parser = commands.add_parser("index", help="reindex a directory of notes")
    index_parser.add_argument("path")

    search_parser = commands.add_parser("search", help="rank indexed files for a phrase")
    search_parser.add_argument("phrase")
    search_parser.add_argument("--json", action="store_true", dest="as_json")

    todo_parser = commands.add_parser("todo", help="todo commands")
    todo_commands = todo_parser.add_subparsers(dest="todo_command", required=True)
    todo_list_parser = todo_commands.add_parser("list", help="list all indexed todos")
    todo_list_parser.add_argument("--json", action="store_true", dest="as_json")
    agenda_parser = todo_commands.add_parser("agenda", help="group dated todos by interval")
    agenda_parser.add_argument("--timespan", default=DEFAULT_TIMESPAN)
    agenda_parser.add_argument("--interval", default=DEFAULT_INTERVAL)
    agenda_parser.add_argument("--path-len", default=DEFAULT_PATH_LENGTH, dest="path_len")
    agenda_parser.add_argument("--json", action="store_true", dest="as_json")

    commands.add_parser("status", help="show index counts and configuration")

    log_parser = commands.add_parser("log", help="show recent runs from the run log")
    log_parser.add_argument("--limit", type=int, default=20)
    return parser


class Application:
    """Runs one command against a loaded store."""

    def __init__(self, config: AppConfig, out_stream: TextIO) -> None:
        self._config = config
        self._out = out_stream
        self._run_logger = JsonlRunLogger(path=config.log_path)

    def index(self, path: str) -> int:
        store = load_store(self._config.store_path)
        summary = reindex_root(store, Path(path), self._config.index)
        save_store(store, self._config.store_path)
        self._write(
            f"added={summary.added} updated={summary.updated} removed={summary.removed} "
            f"unchanged={summary.unchanged} failed={summary.failed}"
        )
        return EXIT_OK

    def search(self, phrase: str, as_json: bool) -> int:
        store = load_store(self._config.store_path)
        hits = rank_hits(store, phrase)
        if as_json:
            self._write(json.dumps([asdict(hit) for hit in hits], indent=2, sort_keys=True))
            return EXIT_OK
        for hit in hits:
            self._write(hit.path)
        return EXIT_OK

    def todo_list(self, as_json: bool) -> int:
        store = load_store(self._config.store_path)
        rows = _todo_rows(store)
        if as_json:
            self._write(json.dumps(rows, indent=2, sort_keys=True))
            return EXIT_OK
        for row in rows:
            line = f"{row['path']}:{row['line_number']} TODO: {row['title']}"
            if row["scheduled"] is not None:
                line += f" SCHEDULED: {row['scheduled']}"
            if row["deadline"] is not None:
                line += f" DEADLINE: {row['deadline']}"
            self._write(line)
        return EXIT_OK

    def todo_agenda(self, timespan: str, interval: str, path_len: str, as_json: bool) -> int:
        path_length = parse_path_length(path_len)
        start, end = parse_timespan(timespan)
        step = parse_duration(interval)
        store = load_store(self._config.store_path)
        agenda = build_agenda(store, start, end, step)
        if as_json:
            self._write(json.dumps(agenda.to_dict(), indent=2, sort_keys=True))
            return EXIT_OK
        for line in _agenda_lines(agenda, path_length):
            self._write(line)
        return EXIT_OK

    def log(self, limit: int) -> int:
        self._write(json.dumps(self._run_logger.read(limit), indent=2, sort_keys=True))
        return EXIT_OK

    def status(self) -> int:
        store = load_store(self._config.store_path)
        payload = {
            "indexed_file_count": store.file_count,
            "term_count": store.term_count,
            "todo_count": store.todo_count,
            "config": self._config.to_public_dict(),
        }
        self._write(json.dumps(payload, indent=2, sort_keys=True))
        return EXIT_OK

    def log_run(self, command: str, arguments: dict[str, object], error_code: str | None) -> None:
        try:
            self._run_logger.append(
                RunEvent(
                    timestamp=utc_timestamp(),
                    command=command,
                    ok=error_code is None,
                    error_code=error_code,
                    metadata=sanitize_arguments(arguments),
                )
            )
        except OSError as exc:
            logger.warning("could not append run log %s: %s", self._run_logger.path, exc)

    def _write(self, line: str) -> None:
        self._out.write(f"{line}\n")


def configure_logging(verbosity: int) -> None:
    """Send diagnostics to stderr at a level chosen by ``-v`` flags."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    if verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(
    argv: list[str] | None = None,
    out_stream: TextIO | None = None,
    err_stream: TextIO | None = None,
) -> int:
    """Entrypoint for the notes-index command."""
    out = out_stream or sys.stdout
    err = err_stream or sys.stderr
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    overrides = CliOverrides(
        config_path=Path(args.config) if args.config is not None else None,
        store_path=Path(args.store) if args.store is not None else None,
    )
    try:
        config = load_effective_config(overrides)
    except ValueError as exc:
        err.write(f"error: invalid configuration: {exc}\n")
        return EXIT_FATAL
    except OSError as exc:
        err.write(f"error: cannot read configuration: {exc}\n")
        return EXIT_FATAL

    app = Application(config=config, out_stream=out)
    command = args.command if args.command != "todo" else f"todo.{args.todo_command}"
    arguments = {
        key: value
        for key, value in vars(args).items()
        if key not in {"command", "todo_command", "verbose"}
    }
    try:
        if args.command == "index":
            code = app.index(args.path)
        elif args.command == "search":
            code = app.search(args.phrase, args.as_json)
        elif args.command == "todo" and args.todo_command == "agenda":
            code = app.todo_agenda(args.timespan, args.interval, args.path_len, args.as_json)
        elif args.command == "todo":
            code = app.todo_list(args.as_json)
        elif args.command == "log":
            code = app.log(args.limit)
        else:
            code = app.status()
    except AgendaError as exc:
        app.log_run(command, arguments, "BAD_ARGUMENT")
        err.write(f"error: {exc}\n")
        return EXIT_FATAL
    except WalkError as exc:
        app.log_run(command, arguments, "WALK_FAILED")
        err.write(f"error: {exc}\n")
        return EXIT_FATAL
    except StoreLoadError as exc:
        app.log_run(command, arguments, "STORE_CORRUPT")
        err.write(f"error: {exc}\n")
        return EXIT_FATAL
    except OSError as exc:
        app.log_run(command, arguments, "IO_FAILED")
        err.write(f"error: {exc}\n")
        return EXIT_FATAL
    app.log_run(command, arguments, None)
    return code


def _todo_rows(store: Store) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for todo in store.todos():
        record = store.file_by_id(todo.file_id)
        if record is None:
            continue
        rows.append(
            {
                "path": record.path,
                "line_number": todo.line_number,
                "title": todo.title,
                "deadline": todo.deadline,
                "scheduled": todo.scheduled,
            }
        )
    return rows


def _agenda_lines(agenda: Agenda, path_length: int | None) -> list[str]:
    lines = ["Overdue"]
    for item in agenda.overdue:
        location = _location(item.path, item.line_number, path_length)
        column = f"{location} " if location else ""
        lines.append(f"\tO {column}TODO: {item.title}")
    for entry in agenda.entries:
        lines.append(entry.start.strftime("%Y-%m-%d %H:%M"))
        locations = [
            _location(item.path, item.line_number, path_length) for item in entry.todos
        ]
        pad = max((len(location) for location in locations), default=0) + 2
        for item, location in zip(entry.todos, locations):
            marker = "S" if item.scheduled else "D"
            column = location.ljust(pad) if location else ""
            lines.append(f"\t{marker} {column}TODO: {item.title}")
    return lines


def _location(path: str, line_number: int, path_length: int | None) -> str:
    shown = cut_path(path, path_length)
    if not shown:
        return ""
    return f"{shown}:{line_number}"


if __name__ == "__main__":
    raise SystemExit(main())
