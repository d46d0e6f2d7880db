"""Terminal JSON file browser."""

from __future__ import annotations

import sys
import threading
from pathlib import Path

from rich.markup import escape
from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Header, Static
from textual.worker import get_current_worker

from .catalog import CatalogEntry, scan_catalog
from .config import BrowserConfig, parse_config
from .document import ColorizedDocument, load_document
from .errors import WalkTimeout, guarded
from .logs import LogContext, null_logs, open_logs
from .search import SearchSession, SearchState
from .widget import ContentPane, FileList, StatusLine

HELP_TEXT = """\
[b]Shortcuts[/b]
  F1 ? h f     Show this help
  q Q          Quit
  Arrows       Navigate between files and content
  Enter        Open selected file
  r R          Reload files
  c C          Compare files
  o O          Toggle layout
  Tab          Switch focus
  /            Search  [dim](end with \\c ignore case, \\C match case, \\v regex)[/dim]
  n            Next search result
  N            Previous search result
  Esc          Cancel search / close help"""

FOOTER_TEXT = "F1/?/h - Help, q/Q - Quit, / - Search"
READY_TEXT = "Press F1, ?, or h for help. Press q to quit."


class JsonBrowserApp(App):
    """List, view, search and compare JSON files under one directory."""

    CSS = """
    Screen {
        layout: vertical;
    }
    #main {
        height: 1fr;
    }
    #main.vertical {
        layout: vertical;
    }
    #main.vertical FileList, #main.vertical ContentPane {
        width: 1fr;
        height: 1fr;
    }
    #compare {
        display: none;
    }
    #compare.visible {
        display: block;
    }
    #help-bar {
        height: 1;
        color: $text-muted;
        text-align: center;
    }
    #help-panel {
        display: none;
        margin: 0 4;
        padding: 1 2;
        height: auto;
        border: thick $accent;
        background: $surface;
    }
    #help-panel.visible {
        display: block;
    }
    #help-close {
        margin-top: 1;
    }
    """

    TITLE = "JSON Browser"
    BINDINGS = [
        Binding("tab", "toggle_focus", show=False, priority=True),
        Binding("shift+tab", "toggle_focus", show=False, priority=True),
    ]
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        config: BrowserConfig | None = None,
        logs: LogContext | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.browser_config = config or BrowserConfig()
        self.logs = logs or null_logs()
        self.search_session = SearchSession()
        self.horizontal: bool = True
        self.compare_visible: bool = False
        self._load_seq: dict[str, int] = {"content": 0, "compare": 0}
        self._scan_cancel: threading.Event | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main"):
            yield FileList(id="files")
            yield ContentPane(id="content")
            yield ContentPane("", id="compare")
        yield StatusLine(self.search_session, READY_TEXT, id="status")
        yield Static(FOOTER_TEXT, id="help-bar")
        with Vertical(id="help-panel"):
            yield Static(HELP_TEXT, id="help-text")
            yield Button("Close", id="help-close", variant="primary")

    def on_mount(self) -> None:
        self.sub_title = str(Path(self.browser_config.root).resolve())
        self.query_one("#files", FileList).focus()
        self.reload_catalog()

    def on_unmount(self) -> None:
        self._cancel_scan()

    # -- Helpers -----------------------------------------------------------

    @property
    def file_list(self) -> FileList:
        return self.query_one("#files", FileList)

    @property
    def content_pane(self) -> ContentPane:
        return self.query_one("#content", ContentPane)

    @property
    def compare_pane(self) -> ContentPane:
        return self.query_one("#compare", ContentPane)

    @property
    def status_line(self) -> StatusLine:
        return self.query_one("#status", StatusLine)

    def set_status(self, markup: str) -> None:
        self.status_line.set_message(markup)

    def _report_from_thread(self, markup: str) -> None:
        self.call_from_thread(self.set_status, markup)

    def _help_visible(self) -> bool:
        return self.query_one("#help-panel").has_class("visible")

    # -- Catalog -----------------------------------------------------------

    def reload_catalog(self) -> None:
        self._cancel_scan()
        self._scan_cancel = threading.Event()
        self.set_status("Loading JSON files...")
        self._scan_worker(self._scan_cancel)

    def _cancel_scan(self) -> None:
        if self._scan_cancel is not None:
            self._scan_cancel.set()

    @work(thread=True, exclusive=True, group="catalog")
    def _scan_worker(self, cancel: threading.Event) -> None:
        with guarded(self.logs, self._report_from_thread, "load JSON files"):
            try:
                entries = scan_catalog(
                    self.browser_config.root,
                    self.browser_config.extensions,
                    timeout=self.browser_config.walk_timeout,
                    cancel=cancel,
                )
            except WalkTimeout:
                # superseded by a newer scan or by shutdown
                if cancel.is_set():
                    return
                raise
            if not cancel.is_set() and not get_current_worker().is_cancelled:
                self.call_from_thread(self._apply_catalog, entries)

    def _apply_catalog(self, entries: list[CatalogEntry]) -> None:
        self.file_list.set_entries(entries)
        self.logs.info.info(
            "JSON files loaded successfully (%d from %s)",
            len(entries),
            self.browser_config.root,
        )
        self.set_status("Select a file to view its content.")

    # -- Documents ---------------------------------------------------------

    def open_file(self, index: int, entry: CatalogEntry, pane_id: str) -> None:
        """Load *entry* into a pane off the event loop."""
        self._load_seq[pane_id] += 1
        self._load_worker(index, entry, pane_id, self._load_seq[pane_id])

    @work(thread=True, group="load")
    def _load_worker(
        self, index: int, entry: CatalogEntry, pane_id: str, seq: int
    ) -> None:
        path = Path(self.browser_config.root) / entry.path
        with guarded(self.logs, self._report_from_thread, f"open {path}"):
            document = load_document(
                path, self.browser_config.scheme, self.browser_config.indent
            )
            self.call_from_thread(self._apply_document, index, document, pane_id, seq)

    def _apply_document(
        self, index: int, document: ColorizedDocument, pane_id: str, seq: int
    ) -> None:
        # A newer load for the same pane supersedes this one
        if seq != self._load_seq[pane_id]:
            return
        with guarded(self.logs, self.set_status, f"display {document.path}"):
            pane = self.query_one(f"#{pane_id}", ContentPane)
            pane.set_document(document)
            if pane_id == "compare":
                pane.add_class("visible")
                self.compare_visible = True
                self._sync_panes()
                return
            if self.search_session.state is not SearchState.IDLE:
                self.search_session.cancel()
            self.file_list.mark_active(index)
            self.logs.info.info("Opened %s", document.path)
            self.set_status(f"Viewing {escape(str(document.path))}")

    def _sync_panes(self) -> None:
        if self.compare_visible:
            self.content_pane.sync_with(self.compare_pane)
            self.compare_pane.sync_with(self.content_pane)
        else:
            self.content_pane.sync_with(None)
            self.compare_pane.sync_with(None)

    def toggle_compare(self) -> None:
        if self.compare_visible:
            self.compare_pane.remove_class("visible")
            self.compare_visible = False
            self._sync_panes()
            return
        files = self.file_list
        entry = files.highlighted
        if entry is None:
            self.set_status("[red]No file to compare.[/]")
            return
        self.open_file(files.cursor, entry, "compare")

    def toggle_layout(self) -> None:
        if not self.compare_visible:
            return
        self.horizontal = not self.horizontal
        self.query_one("#main").set_class(not self.horizontal, "vertical")

    # -- Search ------------------------------------------------------------

    def start_search(self) -> None:
        self.search_session.begin()
        self.content_pane.clear_highlight()
        self.status_line.focus()
        self.status_line.refresh()

    def on_status_line_submitted(self, event: StatusLine.Submitted) -> None:
        content = self.content_pane
        content.focus()
        content.clear_highlight()
        with guarded(self.logs, self.set_status, f"search {event.query!r}"):
            matches = self.search_session.submit(content.plain_text)
            if self.search_session.state is SearchState.IDLE:
                self.set_status("")
            elif matches:
                content.show_match(self.search_session.current)
                total = len(matches)
                self.set_status(
                    f"Found {total} occurrences. Result 1 of {total}. "
                    "Press 'n' for next, 'N' for previous."
                )
            else:
                pattern = escape(self.search_session.pattern)
                self.set_status(f"[red]No results found for: {pattern}[/]")

    def on_status_line_cancelled(self, event: StatusLine.Cancelled) -> None:
        self.content_pane.clear_highlight()
        self.set_status("")
        if event.refocus:
            self.content_pane.focus()

    def goto_result(self, forward: bool) -> None:
        session = self.search_session
        match = session.next() if forward else session.previous()
        if match is None:
            return
        self.content_pane.show_match(match)
        self.set_status(escape(self.search_session.status()))

    # -- Focus and help ----------------------------------------------------

    def action_toggle_focus(self) -> None:
        if self.search_session.composing or self._help_visible():
            return
        files = self.file_list
        if files.has_focus:
            self.content_pane.focus()
        else:
            if files.active >= 0:
                files.cursor = files.active
            files.focus()

    def show_help(self) -> None:
        self.query_one("#help-panel").add_class("visible")
        self.query_one("#help-close", Button).focus()

    def hide_help(self) -> None:
        self.query_one("#help-panel").remove_class("visible")
        self.file_list.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "help-close":
            self.hide_help()

    # -- Event handlers ----------------------------------------------------

    def on_file_list_selected(self, event: FileList.Selected) -> None:
        self.open_file(event.index, event.entry, "content")
        self.content_pane.focus()

    def on_key(self, event: events.Key) -> None:
        """Global commands for keys the focused pane did not consume."""
        if self.search_session.composing:
            return
        key = event.key
        char = event.character or ""

        if self._help_visible():
            if key == "escape":
                self.hide_help()
            return

        if key in ("left", "right"):
            self.action_toggle_focus()
        elif key == "f1" or char in ("?", "h", "H", "f", "F"):
            self.show_help()
        elif char in ("q", "Q"):
            self._cancel_scan()
            self.exit()
        elif char in ("r", "R"):
            self.reload_catalog()
        elif char in ("c", "C"):
            self.toggle_compare()
        elif char in ("o", "O"):
            self.toggle_layout()
        elif char == "/":
            self.start_search()
        elif char == "n":
            self.goto_result(forward=True)
        elif char == "N":
            self.goto_result(forward=False)
        else:
            return
        event.stop()


def main(argv: list[str] | None = None) -> None:
    config = parse_config(argv)
    try:
        logs = open_logs(config.log_dir)
    except OSError as exc:
        print(f"jbrowse: cannot open log files: {exc}", file=sys.stderr)
        sys.exit(1)

    app = JsonBrowserApp(config=config, logs=logs)
    try:
        app.run()
    except Exception:
        logs.error.exception("Application error")
        raise
    finally:
        logs.close()


if __name__ == "__main__":
    main()
