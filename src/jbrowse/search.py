"""Text search over rendered content and the interactive search session."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto

from .errors import InvalidPattern

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchOptions:
    case_sensitive: bool = True
    use_regex: bool = False


@dataclass(frozen=True)
class SearchMatch:
    line: int
    column: int
    length: int


def _compile(query: str, options: SearchOptions) -> re.Pattern[str]:
    flags = 0 if options.case_sensitive else re.IGNORECASE
    try:
        return re.compile(query, flags)
    except re.error as exc:
        raise InvalidPattern(f"invalid pattern {query!r}: {exc}") from exc


def find_offsets(
    content: str,
    query: str,
    options: SearchOptions = SearchOptions(),
    logger: logging.Logger = _log,
) -> list[int]:
    """Start offsets of every non-overlapping match of *query* in *content*.

    An invalid regular expression is logged to *logger* and yields no
    matches.
    """
    if not query:
        return []

    if options.use_regex:
        try:
            regex = _compile(query, options)
        except InvalidPattern as exc:
            logger.error("%s: %s", type(exc).__name__, exc)
            return []
        return [m.start() for m in regex.finditer(content)]

    if not options.case_sensitive:
        # match on the original text so offsets index *content*
        literal = re.compile(re.escape(query), re.IGNORECASE)
        return [m.start() for m in literal.finditer(content)]

    positions: list[int] = []
    pos = content.find(query)
    while pos != -1:
        positions.append(pos)
        pos = content.find(query, pos + len(query))
    return positions


def scan_lines(
    text: str, query: str, options: SearchOptions = SearchOptions()
) -> list[SearchMatch]:
    """Like :func:`find_line_matches` but raises :class:`InvalidPattern`."""
    if not query:
        return []

    matches: list[SearchMatch] = []
    lines = text.split("\n")

    if options.use_regex or not options.case_sensitive:
        if options.use_regex:
            regex = _compile(query, options)
        else:
            regex = re.compile(re.escape(query), re.IGNORECASE)
        for row, line in enumerate(lines):
            for m in regex.finditer(line):
                # zero-width matches have nothing to highlight
                if m.end() > m.start():
                    matches.append(SearchMatch(row, m.start(), m.end() - m.start()))
        return matches

    for row, line in enumerate(lines):
        col = line.find(query)
        while col != -1:
            matches.append(SearchMatch(row, col, len(query)))
            col = line.find(query, col + len(query))
    return matches


def find_line_matches(
    text: str,
    query: str,
    options: SearchOptions = SearchOptions(),
    logger: logging.Logger = _log,
) -> list[SearchMatch]:
    """Per-line matches of *query* in document order.

    Each line is scanned left to right and the scan resumes after every
    occurrence, so overlapping occurrences are counted once. Columns index
    the original line, also when matching ignores case.
    """
    try:
        return scan_lines(text, query, options)
    except InvalidPattern as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return []


_FLAGS = {"\\c", "\\C", "\\v"}


def parse_query(raw: str) -> tuple[str, SearchOptions]:
    """Split trailing ``\\c`` / ``\\C`` / ``\\v`` flags off a typed query."""
    case_sensitive = True
    use_regex = False
    query = raw
    while len(query) >= 2 and query[-2:] in _FLAGS:
        flag = query[-2:]
        query = query[:-2]
        if flag == "\\v":
            use_regex = True
        elif flag == "\\c":
            case_sensitive = False
        else:
            case_sensitive = True
    return query, SearchOptions(case_sensitive=case_sensitive, use_regex=use_regex)


class SearchState(Enum):
    IDLE = auto()
    COMPOSING = auto()
    BROWSING = auto()


class SearchSession:
    """Query composition, results and the current-result cursor."""

    HISTORY_MAX = 50

    def __init__(self) -> None:
        self.state: SearchState = SearchState.IDLE
        self.buffer: str = ""
        self.pattern: str = ""
        self.options: SearchOptions = SearchOptions()
        self.matches: list[SearchMatch] = []
        self.index: int = 0
        self.invalid: bool = False
        self.history: list[str] = []
        self._history_idx: int = -1

    @property
    def composing(self) -> bool:
        return self.state is SearchState.COMPOSING

    @property
    def current(self) -> SearchMatch | None:
        if not self.matches:
            return None
        return self.matches[self.index]

    def begin(self) -> None:
        self.state = SearchState.COMPOSING
        self.buffer = ""
        self.pattern = ""
        self.matches = []
        self.index = 0
        self.invalid = False
        self._history_idx = -1

    def type_char(self, char: str) -> None:
        if not self.composing:
            return
        self.buffer += char
        self._history_idx = -1

    def backspace(self) -> None:
        """Drop the last character; on an empty query this cancels."""
        if not self.composing:
            return
        if self.buffer:
            self.buffer = self.buffer[:-1]
            self._history_idx = -1
        else:
            self.cancel()

    def cancel(self) -> None:
        self.state = SearchState.IDLE
        self.buffer = ""
        self.pattern = ""
        self.matches = []
        self.index = 0
        self.invalid = False
        self._history_idx = -1

    def submit(self, text: str) -> list[SearchMatch]:
        """Run the composed query against *text* and start browsing results.

        Raises :class:`InvalidPattern` for a regex that does not compile; the
        session is then browsing an empty, invalid result.
        """
        raw = self.buffer
        self._history_idx = -1
        if not raw:
            self.cancel()
            return []
        self._add_to_history(raw)
        self.pattern, self.options = parse_query(raw)
        self.matches = []
        self.index = 0
        self.invalid = False
        self.state = SearchState.BROWSING if self.pattern else SearchState.IDLE
        try:
            self.matches = scan_lines(text, self.pattern, self.options)
        except InvalidPattern:
            self.invalid = True
            raise
        return self.matches

    def next(self) -> SearchMatch | None:
        if not self.matches:
            return None
        self.index = (self.index + 1) % len(self.matches)
        return self.current

    def previous(self) -> SearchMatch | None:
        if not self.matches:
            return None
        self.index = (self.index - 1) % len(self.matches)
        return self.current

    def status(self) -> str:
        if self.composing:
            return f"Search: {self.buffer}"
        if not self.pattern:
            return ""
        if self.invalid:
            return f"Invalid pattern: {self.pattern}"
        total = len(self.matches)
        if not total:
            return f"No results found for: {self.pattern}"
        return f"Result {self.index + 1} of {total}"

    # -- History -----------------------------------------------------------

    def _add_to_history(self, pattern: str) -> None:
        """Add pattern to search history, avoiding duplicates."""
        if pattern in self.history:
            self.history.remove(pattern)
        self.history.insert(0, pattern)
        if len(self.history) > self.HISTORY_MAX:
            self.history.pop()

    def history_prev(self) -> None:
        """Recall an older query."""
        if not self.composing or not self.history:
            return
        if self._history_idx < len(self.history) - 1:
            self._history_idx += 1
            self.buffer = self.history[self._history_idx]

    def history_next(self) -> None:
        """Recall a newer query, ending on an empty buffer."""
        if not self.composing:
            return
        if self._history_idx > 0:
            self._history_idx -= 1
            self.buffer = self.history[self._history_idx]
        elif self._history_idx == 0:
            self._history_idx = -1
            self.buffer = ""
