from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from .config import SOURCE_SUFFIX, Settings
from .diagnostics import Diagnostic, FormatError, GlyphIOError, LoadError
from .formatter import check_file, format_file, format_source
from .io_atomic import read_text_exact
from .parser_rd import parse
from .tree import items_to_lark

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_IO = 2
EXIT_INTERNAL = 3


def _expand(paths: Iterable[str]) -> Iterator[Path]:
    """Yield files; directories contribute every source file beneath them."""
    for arg in paths:
        p = Path(arg)
        if p.is_dir():
            yield from sorted(p.rglob(f"*{SOURCE_SUFFIX}"))
        else:
            yield p


def _report(diagnostics: Iterable[Diagnostic]) -> None:
    for diag in diagnostics:
        print(str(diag), file=sys.stderr)


def _dump_tree(source: str, path: Optional[Path]) -> int:
    items, errors = parse(source, path)
    if errors:
        _report(errors)
        return EXIT_DIAGNOSTICS
    print(items_to_lark(items).pretty(), end="")
    return EXIT_OK


def _run_stdin(args: argparse.Namespace) -> int:
    source = sys.stdin.read()
    if args.tree:
        return _dump_tree(source, None)

    formatted = format_source(source)
    if args.check:
        return EXIT_OK if formatted == source else EXIT_DIAGNOSTICS
    sys.stdout.write(formatted)
    return EXIT_OK


def _run_file(path: Path, args: argparse.Namespace) -> int:
    if args.tree:
        try:
            source = read_text_exact(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise LoadError(path, exc) from exc
        return _dump_tree(source, path)

    if args.check:
        if check_file(path):
            return EXIT_OK
        print(f"would reformat {path}", file=sys.stderr)
        return EXIT_DIAGNOSTICS

    format_file(path)
    return EXIT_OK


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="glyph-fmt",
        description="Rewrite Glyph source files in canonical form.",
    )
    ap.add_argument("paths", nargs="*", help="files or directories; '-' or nothing reads stdin")
    ap.add_argument("--check", action="store_true", help="report files that would change, write nothing")
    ap.add_argument("--tree", action="store_true", help="print the parsed syntax tree instead of formatting")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="more logging (repeatable)")
    return ap


def _guarded(action: Callable[[], int], settings: Settings) -> int:
    try:
        return action()
    except FormatError as exc:
        _report(exc.diagnostics)
        return EXIT_DIAGNOSTICS
    except GlyphIOError as exc:
        print(str(exc), file=sys.stderr)
        if settings.py_trace:
            traceback.print_exception(exc.cause)
        return EXIT_IO
    except Exception as exc:
        print(f"Internal error: {exc}", file=sys.stderr)
        if settings.py_trace:
            print("\nPython traceback:", file=sys.stderr)
            traceback.print_exception(exc)
        return EXIT_INTERNAL


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    settings = Settings.from_env()

    level = settings.log_level
    if args.verbose:
        level = "DEBUG" if args.verbose > 1 else "INFO"
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    status = EXIT_OK
    for target in args.paths or ["-"]:
        if target == "-":
            status = max(status, _guarded(lambda: _run_stdin(args), settings))
            continue

        for path in _expand([target]):
            log.info("formatting %s", path)
            status = max(status, _guarded(lambda: _run_file(path, args), settings))

    return status


if __name__ == "__main__":
    sys.exit(main())
