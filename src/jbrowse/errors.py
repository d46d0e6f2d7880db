"""Error taxonomy and the per-operation recovery boundary."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator

if TYPE_CHECKING:
    from .logs import LogContext


class BrowserError(Exception):
    """Base for recoverable failures. ``status`` is the short UI message."""

    status: str = "Operation failed. Check error log for details."


class FileReadError(BrowserError):
    status = "Failed to read file. Check error log for details."


class MalformedJson(BrowserError):
    status = "Invalid JSON. Check error log for details."


class InvalidPattern(BrowserError):
    status = "Invalid search pattern. Check error log for details."


class WalkTimeout(BrowserError):
    status = "Timed out loading JSON files. Check error log for details."


class CatalogError(BrowserError):
    status = "Failed to load JSON files. Check error log for details."


@contextmanager
def guarded(
    logs: LogContext, report: Callable[[str], None], what: str
) -> Iterator[None]:
    """Recovery boundary around one critical operation.

    Known failures are logged with context and reported by their status
    text. Anything else is logged with its traceback and reported as a
    recovered panic. Nothing escapes the block.
    """
    try:
        yield
    except BrowserError as exc:
        logs.error.error("%s: %s", what, exc)
        report(f"[red]{exc.status}[/]")
    except Exception as exc:
        logs.error.exception("Recovered from panic in %s", what)
        report(f"[red]Recovered from panic: {type(exc).__name__}[/]")
