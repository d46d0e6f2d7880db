"""Directory scan for JSON files."""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator

from .errors import CatalogError, WalkTimeout


@dataclass(frozen=True)
class CatalogEntry:
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


def _walk(directory: Path, check: Callable[[], None]) -> Iterator[Path]:
    """Yield non-directory paths under *directory* in lexical order."""
    try:
        with os.scandir(directory) as it:
            children = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        raise CatalogError(f"error accessing path {directory}: {exc}") from exc

    for child in children:
        check()
        if child.is_dir(follow_symlinks=False):
            yield from _walk(Path(child.path), check)
        else:
            yield Path(child.path)


def scan_catalog(
    root: str | Path = ".",
    extensions: tuple[str, ...] = (".json",),
    timeout: float | None = 30.0,
    cancel: threading.Event | None = None,
) -> list[CatalogEntry]:
    """Walk *root* recursively and list files with one of *extensions*.

    The deadline and *cancel* are checked at every visited entry; either
    one aborts the whole scan with ``WalkTimeout`` rather than returning a
    partial list. Paths are relative to *root*.
    """
    root = Path(root)
    if not root.is_dir():
        raise CatalogError(f"not a directory: {root}")

    deadline = None if timeout is None else time.monotonic() + timeout
    suffixes = set(extensions)

    def check() -> None:
        if cancel is not None and cancel.is_set():
            raise WalkTimeout(f"scan of {root} cancelled")
        if deadline is not None and time.monotonic() > deadline:
            raise WalkTimeout(f"scan of {root} exceeded {timeout:g}s")

    check()
    return [
        CatalogEntry(path.relative_to(root))
        for path in _walk(root, check)
        if path.suffix in suffixes
    ]
