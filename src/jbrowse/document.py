"""File read, pretty-print and colourize pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from .colorize import DEFAULT_SCHEME, ColorScheme, colorize_value
from .errors import FileReadError, MalformedJson


@dataclass(frozen=True)
class ColorizedDocument:
    path: Path
    raw_text: str
    marked_up: str

    @property
    def title(self) -> str:
        return self.path.name


def read_file(path: str | Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileReadError(f"failed to read file {path}: {exc}") from exc


def _decode(text: str, source: str) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedJson(
            f"invalid JSON in {source}: {exc.msg} (line {exc.lineno}, col {exc.colno})"
        ) from exc


def pretty_print(text: str, indent: int = 2, source: str = "<text>") -> str:
    """Decode then re-encode *text* with fixed indentation."""
    return json.dumps(_decode(text, source), indent=indent, ensure_ascii=False)


def load_document(
    path: str | Path, scheme: ColorScheme = DEFAULT_SCHEME, indent: int = 2
) -> ColorizedDocument:
    """Read, pretty-print and colourize one file. Never cached."""
    path = Path(path)
    value = _decode(read_file(path), str(path))
    return ColorizedDocument(
        path=path,
        raw_text=json.dumps(value, indent=indent, ensure_ascii=False),
        marked_up=colorize_value(value, scheme, indent),
    )
