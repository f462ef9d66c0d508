"""CLI entrypoint for browsing localized content."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from pathlib import Path

from . import __version__, config
from .content_loader import load_store, load_store_from_dir
from .locales import DEFAULT_LOCALE, LOCALES
from .models import COURSE_KINDS, DOMAIN_KINDS
from .service import ContentService

PrintFn = Callable[[str], None]

logger = logging.getLogger(__name__)


def _print_stderr(message: str) -> None:
    print(message, file=sys.stderr)


def _service(content_dir: Path | None) -> ContentService:
    """Create app service over bundled content or a content directory."""
    if content_dir is None:
        return ContentService(load_store())
    logger.debug("Loading content from %s", content_dir)
    return ContentService(load_store_from_dir(content_dir))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="localedocs", description="Localized course and documentation content")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--content-dir", type=Path, default=None, help="Load content from this directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List content domain ids")
    list_parser.add_argument("--kind", choices=DOMAIN_KINDS, default=None)

    show_parser = subparsers.add_parser("show", help="Print effective content as JSON")
    show_parser.add_argument("domain_id", help="Domain id such as docs/coroutines-basics")
    show_parser.add_argument("--locale", default=DEFAULT_LOCALE, help=f"One of {', '.join(LOCALES)}")

    lessons_parser = subparsers.add_parser("lessons", help="List lessons of a course")
    lessons_parser.add_argument("course", choices=COURSE_KINDS)
    lessons_parser.add_argument("--locale", default=DEFAULT_LOCALE, help=f"One of {', '.join(LOCALES)}")
    return parser


def run(argv: list[str] | None = None, print_fn: PrintFn = print, error_fn: PrintFn = _print_stderr) -> int:
    """Run the CLI application."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=config.log_level(args.verbose), format="%(levelname)s %(name)s: %(message)s")

    try:
        service = _service(config.content_dir(args.content_dir))
    except ValueError as exc:
        error_fn(f"Invalid content: {exc}")
        return 2

    if args.command == "list":
        for item in service.list_domains(args.kind):
            print_fn(item)
        return 0
    if args.command == "show":
        return _show(service, args.domain_id, args.locale, print_fn, error_fn)
    return _lessons(service, args.course, args.locale, print_fn)


def _show(service: ContentService, domain: str, locale: str, print_fn: PrintFn, error_fn: PrintFn) -> int:
    """Print one resolved record as indented JSON."""
    content = service.get_content_for_locale(domain, locale)
    if content is None:
        error_fn(f"Not found: {domain}")
        return 1
    print_fn(json.dumps(to_payload(content), indent=2, ensure_ascii=False))
    return 0


def _lessons(service: ContentService, course: str, locale: str, print_fn: PrintFn) -> int:
    """Print the lesson table of one course."""
    lessons = service.list_course_lesson_references(course, locale)
    if not lessons:
        print_fn("No lessons defined.")
        return 0
    step_width = max(len("Step"), max(len(str(item.step)) for item in lessons))
    id_width = max(len("Lesson ID"), max(len(item.lesson_id) for item in lessons))
    header = f"{'Step':>{step_width}} {'Lesson ID':<{id_width}} Title"
    print_fn(header)
    print_fn("-" * len(header))
    for item in lessons:
        print_fn(f"{item.step:>{step_width}} {item.lesson_id:<{id_width}} {item.title}")
    return 0


def to_payload(value: object) -> object:
    """Convert content records into JSON-ready data; blocks keep their type tag."""
    if is_dataclass(value) and not isinstance(value, type):
        payload: dict[str, object] = {}
        tag = getattr(type(value), "type", None)
        if isinstance(tag, str):
            payload["type"] = tag
        for item in fields(value):
            payload[item.name] = to_payload(getattr(value, item.name))
        return payload
    if isinstance(value, Mapping):
        return {str(key): to_payload(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [to_payload(item) for item in value]
    return value


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
