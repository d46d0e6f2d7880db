"""Focusable panes: file list, JSON content view and status line."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from .catalog import CatalogEntry
from .colorize import to_text
from .document import ColorizedDocument
from .search import SearchMatch, SearchSession


def _stop(event: events.Key) -> None:
    event.prevent_default()
    event.stop()


class FileList(Widget, can_focus=True):
    """Scrollable list of catalog entries with a cursor and an active entry."""

    DEFAULT_CSS = """
    FileList {
        width: 1fr;
        height: 1fr;
        border: solid grey;
        border-title-align: left;
    }
    FileList:focus {
        border: solid green;
    }
    """

    ACTIVE_STYLE = "bright_green"

    @dataclass
    class Selected(Message):
        index: int
        entry: CatalogEntry

    def __init__(
        self,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.entries: list[CatalogEntry] = []
        self.cursor: int = 0
        self.active: int = -1
        self._scroll_top: int = 0
        self.border_title = "Files"

    def _visible_height(self) -> int:
        return max(1, self.content_region.height)

    @property
    def highlighted(self) -> CatalogEntry | None:
        if not self.entries:
            return None
        return self.entries[self.cursor]

    @property
    def active_entry(self) -> CatalogEntry | None:
        if 0 <= self.active < len(self.entries):
            return self.entries[self.active]
        return None

    def set_entries(self, entries: list[CatalogEntry]) -> None:
        """Replace the list, keeping the active entry when it is still present."""
        previous = self.active_entry
        self.entries = list(entries)
        self.active = -1
        if previous is not None and previous in self.entries:
            self.active = self.entries.index(previous)
        self.cursor = self.active if self.active >= 0 else 0
        self._scroll_top = 0
        self.refresh()

    def mark_active(self, index: int) -> None:
        self.active = index
        self.refresh()

    def move_cursor(self, delta: int) -> None:
        if not self.entries:
            return
        self.cursor = max(0, min(len(self.entries) - 1, self.cursor + delta))
        self._ensure_cursor_visible()
        self.refresh()

    def _ensure_cursor_visible(self) -> None:
        vh = self._visible_height()
        if self.cursor < self._scroll_top:
            self._scroll_top = self.cursor
        elif self.cursor >= self._scroll_top + vh:
            self._scroll_top = self.cursor - vh + 1

    def render(self) -> Text:
        if not self.entries:
            return Text("(no JSON files)", style="dim")
        self._ensure_cursor_visible()
        vh = self._visible_height()
        result = Text(no_wrap=True, overflow="ellipsis")
        end = min(len(self.entries), self._scroll_top + vh)
        for i in range(self._scroll_top, end):
            style = self.ACTIVE_STYLE if i == self.active else ""
            if i == self.cursor:
                style = f"{style} reverse" if self.has_focus else f"{style} bold"
            result.append(str(self.entries[i].path), style=style.strip())
            if i < end - 1:
                result.append("\n")
        return result

    def on_key(self, event: events.Key) -> None:
        if self._handle_key(event):
            _stop(event)

    def _handle_key(self, event) -> bool:
        key = event.key
        if key == "up":
            self.move_cursor(-1)
        elif key == "down":
            self.move_cursor(1)
        elif key == "pageup":
            self.move_cursor(-self._visible_height())
        elif key == "pagedown":
            self.move_cursor(self._visible_height())
        elif key == "home":
            self.move_cursor(-len(self.entries))
        elif key == "end":
            self.move_cursor(len(self.entries))
        elif key == "enter":
            if self.entries:
                self.post_message(self.Selected(self.cursor, self.entries[self.cursor]))
        else:
            return False
        return True


class ContentPane(Widget, can_focus=True):
    """Read-only view of one colourized document."""

    DEFAULT_CSS = """
    ContentPane {
        width: 2fr;
        height: 1fr;
        border: solid grey;
        border-title-align: left;
    }
    ContentPane:focus {
        border: solid green;
    }
    """

    MATCH_STYLE = "black on yellow"
    MATCH_LINE_STYLE = "bold"

    def __init__(
        self,
        placeholder: str = "Select a file to view its content.",
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.placeholder = placeholder
        self.document: ColorizedDocument | None = None
        self._rows: list[Text] = []
        self._scroll_top: int = 0
        self._scroll_left: int = 0
        self._current_match: SearchMatch | None = None
        self._sync_target: ContentPane | None = None
        self.border_title = "Content"

    # -- Public API --------------------------------------------------------

    @property
    def plain_text(self) -> str:
        """The visible text that search positions refer to."""
        return self.document.raw_text if self.document else ""

    @property
    def line_count(self) -> int:
        return len(self._rows)

    def set_document(self, document: ColorizedDocument) -> None:
        self.document = document
        self._rows = list(to_text(document.marked_up).split("\n", allow_blank=True))
        self._scroll_top = 0
        self._scroll_left = 0
        self._current_match = None
        self.border_title = document.title
        self.refresh()

    def sync_with(self, other: ContentPane | None) -> None:
        """Mirror vertical scrolling done on this pane onto *other*."""
        self._sync_target = other

    def show_match(self, match: SearchMatch | None) -> None:
        """Highlight *match* and scroll it into view."""
        self._current_match = match
        if match is not None:
            self._scroll_match_into_view(match)
        self.refresh()

    def clear_highlight(self) -> None:
        self._current_match = None
        self.refresh()

    # -- Scrolling ---------------------------------------------------------

    def _visible_height(self) -> int:
        return max(1, self.content_region.height)

    def _visible_width(self) -> int:
        return max(1, self.content_region.width)

    def _max_scroll(self) -> int:
        return max(0, len(self._rows) - self._visible_height())

    def scroll_lines(self, delta: int) -> None:
        self._scroll_top = max(0, min(self._max_scroll(), self._scroll_top + delta))
        if self._sync_target is not None:
            self._sync_target._scroll_top = self._scroll_top
            self._sync_target.refresh()
        self.refresh()

    def scroll_columns(self, delta: int) -> None:
        self._scroll_left = max(0, self._scroll_left + delta)
        self.refresh()

    def _scroll_match_into_view(self, match: SearchMatch, ratio: float = 0.33) -> None:
        vh = self._visible_height()
        if not self._scroll_top <= match.line < self._scroll_top + vh:
            self._scroll_top = max(0, match.line - int(vh * ratio))
        width = self._visible_width()
        end = match.column + match.length
        if match.column < self._scroll_left or end > self._scroll_left + width:
            self._scroll_left = max(0, match.column - width // 3)

    # -- Rendering ---------------------------------------------------------

    def render(self) -> Text:
        return self.render_view(self._visible_width(), self._visible_height())

    def render_view(self, width: int, height: int) -> Text:
        if self.document is None:
            return Text(self.placeholder, style="dim")

        self._scroll_top = max(0, min(self._scroll_top, len(self._rows) - 1))
        left = self._scroll_left
        match = self._current_match
        result = Text(no_wrap=True, overflow="crop")
        end = min(len(self._rows), self._scroll_top + height)
        for row in range(self._scroll_top, end):
            segment = self._rows[row][left : left + width]
            if match is not None and match.line == row:
                segment.stylize(self.MATCH_LINE_STYLE)
                segment.stylize(
                    self.MATCH_STYLE,
                    max(0, match.column - left),
                    max(0, match.column + match.length - left),
                )
            result.append_text(segment)
            if row < end - 1:
                result.append("\n")
        return result

    def on_key(self, event: events.Key) -> None:
        if self._handle_key(event):
            _stop(event)

    def _handle_key(self, event) -> bool:
        key = event.key
        if key == "up":
            self.scroll_lines(-1)
        elif key == "down":
            self.scroll_lines(1)
        elif key == "pageup":
            self.scroll_lines(-self._visible_height())
        elif key == "pagedown":
            self.scroll_lines(self._visible_height())
        elif key == "home":
            self.scroll_lines(-len(self._rows))
        elif key == "end":
            self.scroll_lines(len(self._rows))
        elif key == "shift+left":
            self.scroll_columns(-8)
        elif key == "shift+right":
            self.scroll_columns(8)
        else:
            return False
        return True


class StatusLine(Widget, can_focus=True):
    """One-line status area that also takes the search prompt keystrokes."""

    DEFAULT_CSS = """
    StatusLine {
        height: 1;
        padding: 0 1;
    }
    """

    @dataclass
    class Submitted(Message):
        query: str

    @dataclass
    class Cancelled(Message):
        refocus: bool = True

    def __init__(
        self,
        session: SearchSession,
        message: str = "",
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.session = session
        self.message = message

    def set_message(self, markup: str) -> None:
        self.message = markup
        self.refresh()

    def render(self) -> Text:
        if self.session.composing:
            result = Text(self.session.status(), style="bold magenta")
            result.append(" ", style="reverse")
            return result
        return Text.from_markup(self.message, emoji=False)

    def on_key(self, event: events.Key) -> None:
        if not self.session.composing:
            return
        _stop(event)
        self._handle_search(event)
        self.refresh()

    def on_blur(self, event: events.Blur) -> None:
        # focus moved away mid-prompt: drop the half-typed query
        if self.session.composing:
            self.session.cancel()
            self.post_message(self.Cancelled(refocus=False))
            self.refresh()

    def _handle_search(self, event) -> None:
        key = event.key
        char = event.character

        if key == "escape":
            self.session.cancel()
            self.post_message(self.Cancelled())
        elif key == "enter":
            self.post_message(self.Submitted(self.session.buffer))
        elif key == "backspace":
            self.session.backspace()
            if not self.session.composing:
                self.post_message(self.Cancelled())
        elif key == "up":
            self.session.history_prev()
        elif key == "down":
            self.session.history_next()
        elif char and char.isprintable():
            self.session.type_char(char)
