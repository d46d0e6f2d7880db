"""JSON syntax colouring as Rich console markup."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

from rich.markup import escape
from rich.text import Text


@dataclass(frozen=True)
class ColorScheme:
    """Style per syntactic category."""

    key: str = "blue"
    string: str = "bright_green"
    array_string: str = "green"
    number: str = "yellow"
    array_number: str = "yellow"
    boolean: str = "bright_cyan"
    null: str = "red"


DEFAULT_SCHEME = ColorScheme()


def _wrap(style: str, token: str) -> str:
    return f"[{style}]{escape(token)}[/]"


def _scalar(value: object, scheme: ColorScheme, in_array: bool) -> str:
    token = json.dumps(value, ensure_ascii=False)
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return _wrap(scheme.boolean, token)
    if value is None:
        return _wrap(scheme.null, token)
    if isinstance(value, str):
        return _wrap(scheme.array_string if in_array else scheme.string, token)
    if isinstance(value, (int, float)):
        return _wrap(scheme.array_number if in_array else scheme.number, token)
    return escape(token)


def _emit(
    value: object,
    scheme: ColorScheme,
    indent: int,
    level: int,
    in_array: bool,
    out: list[str],
) -> None:
    pad = " " * (indent * (level + 1))
    closing_pad = " " * (indent * level)

    if isinstance(value, dict):
        if not value:
            out.append("{}")
            return
        out.append("{\n")
        for i, (key, item) in enumerate(value.items()):
            if i:
                out.append(",\n")
            out.append(pad)
            out.append(_wrap(scheme.key, json.dumps(str(key), ensure_ascii=False)))
            out.append(": ")
            _emit(item, scheme, indent, level + 1, False, out)
        out.append("\n" + closing_pad + "}")
        return

    if isinstance(value, (list, tuple)):
        if not value:
            out.append("[]")
            return
        out.append("[\n")
        for i, item in enumerate(value):
            if i:
                out.append(",\n")
            out.append(pad)
            _emit(item, scheme, indent, level + 1, True, out)
        out.append("\n" + closing_pad + "]")
        return

    out.append(_scalar(value, scheme, in_array))


def colorize_value(
    value: object, scheme: ColorScheme = DEFAULT_SCHEME, indent: int = 2
) -> str:
    """Serialize a decoded JSON value with colour directives around each token.

    The visible text equals ``json.dumps(value, indent=indent,
    ensure_ascii=False)``. Keys are coloured without their colon; strings
    and numbers inside arrays use the array styles of *scheme*.
    """
    out: list[str] = []
    _emit(value, scheme, indent, 0, False, out)
    return "".join(out)


_TOKEN = re.compile(
    r'(?P<string>"(?:[^"\\\n]|\\.)*")'
    r"|(?P<number>-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?)"
    r"|(?P<literal>true|false|null)"
    r"|(?P<open>[\[{])"
    r"|(?P<close>[\]}])"
)
_KEY_SEPARATOR = re.compile(r"[ \t\r\n]*:")


def _decodes(text: str) -> bool:
    try:
        json.loads(text)
    except (ValueError, RecursionError):
        return False
    return True


def colorize(pretty_json: str, scheme: ColorScheme = DEFAULT_SCHEME) -> str:
    """Colour pretty-printed JSON text in place.

    Directives are only inserted around tokens; every other character of
    *pretty_json* is kept as written, whatever its indentation, number
    spelling or string escapes. Never fails: text that does not decode is
    returned escaped but otherwise untouched.
    """
    if not _decodes(pretty_json):
        return escape(pretty_json)

    out: list[str] = []
    # innermost open container, "[" or "{"
    nesting: list[str] = []
    pos = 0
    for m in _TOKEN.finditer(pretty_json):
        if m.start() > pos:
            out.append(escape(pretty_json[pos : m.start()]))
        pos = m.end()
        token = m.group()
        kind = m.lastgroup
        in_array = bool(nesting) and nesting[-1] == "["

        if kind == "open":
            nesting.append(token)
            out.append(token)
        elif kind == "close":
            if nesting:
                nesting.pop()
            out.append(token)
        elif kind == "string":
            if _KEY_SEPARATOR.match(pretty_json, pos):
                style = scheme.key
            else:
                style = scheme.array_string if in_array else scheme.string
            out.append(_wrap(style, token))
        elif kind == "number":
            out.append(_wrap(scheme.array_number if in_array else scheme.number, token))
        else:
            out.append(_wrap(scheme.null if token == "null" else scheme.boolean, token))
    out.append(escape(pretty_json[pos:]))
    return "".join(out)


def strip_markup(marked_up: str) -> str:
    """Return the visible text of *marked_up* with every directive removed."""
    return Text.from_markup(marked_up, emoji=False).plain


def to_text(marked_up: str) -> Text:
    """Parse colour markup into a styled Text."""
    return Text.from_markup(marked_up, emoji=False)
