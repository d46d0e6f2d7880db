"""Tests for the search engine and search session."""

import logging

import pytest

from jbrowse.errors import InvalidPattern
from jbrowse.search import (
    SearchMatch,
    SearchOptions,
    SearchSession,
    SearchState,
    find_line_matches,
    find_offsets,
    parse_query,
    scan_lines,
)

REGEX = SearchOptions(use_regex=True)
NOCASE = SearchOptions(case_sensitive=False)

DOC = '{\n  "name": "alpha",\n  "tags": [\n    "Alpha",\n    "beta"\n  ]\n}'


class TestFindOffsets:
    def test_literal_positions(self):
        assert find_offsets("aXaYa", "a") == [0, 2, 4]

    def test_literal_no_overlap(self):
        assert find_offsets("aaaa", "aa") == [0, 2]

    def test_literal_case_insensitive(self):
        assert find_offsets("AbxaB", "ab", NOCASE) == [0, 3]

    def test_literal_case_sensitive_by_default(self):
        assert find_offsets("AbxaB", "ab") == []

    def test_regex_positions(self):
        assert find_offsets("aaXaa", "a+", REGEX) == [0, 3]

    def test_regex_case_insensitive(self):
        options = SearchOptions(case_sensitive=False, use_regex=True)
        assert find_offsets("Ab ab", "a.", options) == [0, 3]

    def test_empty_query(self):
        assert find_offsets("abc", "") == []

    def test_invalid_regex_logged_not_raised(self, caplog):
        logger = logging.getLogger("test.search.offsets")
        with caplog.at_level(logging.ERROR, logger="test.search.offsets"):
            assert find_offsets("a(b", "(", REGEX, logger) == []
        assert "InvalidPattern" in caplog.text

    def test_invalid_pattern_is_literal_without_regex(self):
        assert find_offsets("a(b", "(") == [1]

    def test_case_insensitive_offsets_index_original_text(self):
        # "İ".lower() is two characters long
        content = "İx target"
        assert find_offsets(content, "TARGET", NOCASE) == [3]


class TestFindLineMatches:
    def test_document_order(self):
        matches = find_line_matches("ab ab\nxx\nab", "ab")
        assert matches == [
            SearchMatch(0, 0, 2),
            SearchMatch(0, 3, 2),
            SearchMatch(2, 0, 2),
        ]

    def test_overlap_counted_once(self):
        assert find_line_matches("aaa", "aa") == [SearchMatch(0, 0, 2)]

    def test_case_insensitive(self):
        matches = find_line_matches(DOC, "alpha", NOCASE)
        assert [(m.line, m.column) for m in matches] == [(1, 11), (3, 5)]

    def test_regex_lengths(self):
        matches = find_line_matches(DOC, r'"\w+":', REGEX)
        assert [(m.line, m.column, m.length) for m in matches] == [
            (1, 2, 7),
            (2, 2, 7),
        ]

    def test_zero_width_regex_skipped(self):
        assert find_line_matches("ab", "x*", REGEX) == []

    def test_invalid_regex(self, caplog):
        logger = logging.getLogger("test.search.lines")
        with caplog.at_level(logging.ERROR, logger="test.search.lines"):
            assert find_line_matches(DOC, "[unclosed", REGEX, logger) == []
        assert "InvalidPattern" in caplog.text

    def test_no_match(self):
        assert find_line_matches(DOC, "gamma") == []

    def test_case_insensitive_columns_index_original_line(self):
        line = "İx target"
        assert find_line_matches(line, "TARGET", NOCASE) == [SearchMatch(0, 3, 6)]
        match = find_line_matches(line, "TARGET", NOCASE)[0]
        assert line[match.column : match.column + match.length] == "target"

    def test_scan_lines_raises_on_invalid_regex(self):
        with pytest.raises(InvalidPattern):
            scan_lines(DOC, "[unclosed", REGEX)


class TestParseQuery:
    def test_plain(self):
        assert parse_query("foo") == ("foo", SearchOptions())

    def test_ignore_case(self):
        assert parse_query("foo\\c") == ("foo", SearchOptions(case_sensitive=False))

    def test_match_case(self):
        assert parse_query("foo\\C") == ("foo", SearchOptions(case_sensitive=True))

    def test_regex(self):
        assert parse_query("a+\\v") == ("a+", SearchOptions(use_regex=True))

    def test_combined(self):
        query, options = parse_query("a+\\v\\c")
        assert query == "a+"
        assert options == SearchOptions(case_sensitive=False, use_regex=True)

    def test_backslash_inside_query_kept(self):
        assert parse_query("a\\cb") == ("a\\cb", SearchOptions())


def _browsing(count: int) -> SearchSession:
    session = SearchSession()
    session.begin()
    for ch in "a":
        session.type_char(ch)
    session.submit("\n".join("a" for _ in range(count)))
    return session


class TestNavigation:
    def test_wraps_both_ways(self):
        session = _browsing(3)
        assert session.index == 0
        session.previous()
        assert session.index == 2
        session.next()
        assert session.index == 0
        session.next()
        assert session.index == 1

    def test_returns_current_match(self):
        session = _browsing(3)
        assert session.next() == SearchMatch(1, 0, 1)
        assert session.current == SearchMatch(1, 0, 1)

    def test_empty_is_noop(self):
        session = SearchSession()
        assert session.next() is None
        assert session.previous() is None
        assert session.index == 0
        assert session.current is None

    def test_empty_results_after_search(self):
        session = SearchSession()
        session.begin()
        session.type_char("z")
        assert session.submit("abc") == []
        assert session.next() is None
        assert session.status() == "No results found for: z"


class TestSearchStates:
    def test_begin_composes(self):
        session = SearchSession()
        session.begin()
        assert session.state is SearchState.COMPOSING
        assert session.status() == "Search: "

    def test_typing_updates_status(self):
        session = SearchSession()
        session.begin()
        for ch in "ab":
            session.type_char(ch)
        assert session.buffer == "ab"
        assert session.status() == "Search: ab"

    def test_typing_ignored_when_idle(self):
        session = SearchSession()
        session.type_char("x")
        assert session.buffer == ""

    def test_submit_browses(self):
        session = SearchSession()
        session.begin()
        session.type_char("a")
        matches = session.submit("a a")
        assert session.state is SearchState.BROWSING
        assert len(matches) == 2
        assert session.status() == "Result 1 of 2"

    def test_submit_empty_goes_idle(self):
        session = SearchSession()
        session.begin()
        assert session.submit("abc") == []
        assert session.state is SearchState.IDLE

    def test_cancel_clears(self):
        session = _browsing(2)
        session.begin()
        session.type_char("q")
        session.cancel()
        assert session.state is SearchState.IDLE
        assert session.buffer == ""
        assert session.matches == []
        assert session.status() == ""

    def test_begin_from_browsing_clears_results(self):
        session = _browsing(2)
        session.begin()
        assert session.state is SearchState.COMPOSING
        assert session.matches == []
        assert session.index == 0

    def test_backspace(self):
        session = SearchSession()
        session.begin()
        session.type_char("a")
        session.type_char("b")
        session.backspace()
        assert session.buffer == "a"
        session.backspace()
        assert session.composing
        session.backspace()
        assert session.state is SearchState.IDLE

    def test_flags_apply(self):
        session = SearchSession()
        session.begin()
        for ch in "ALPHA\\c":
            session.type_char(ch)
        matches = session.submit(DOC)
        assert session.pattern == "ALPHA"
        assert len(matches) == 2

    def test_invalid_regex_raises_and_marks_session(self):
        session = SearchSession()
        session.begin()
        for ch in "(\\v":
            session.type_char(ch)
        with pytest.raises(InvalidPattern) as info:
            session.submit(DOC)
        assert info.value.status == InvalidPattern.status
        assert session.invalid
        assert session.matches == []
        assert session.state is SearchState.BROWSING
        assert session.status() == "Invalid pattern: ("
        assert session.next() is None


class TestSearchHistory:
    def _submit(self, session, query):
        session.begin()
        for ch in query:
            session.type_char(ch)
        session.submit("")

    def test_most_recent_first_without_duplicates(self):
        session = SearchSession()
        for query in ("foo", "bar", "foo"):
            self._submit(session, query)
        assert session.history == ["foo", "bar"]

    def test_walk_history(self):
        session = SearchSession()
        for query in ("foo", "bar"):
            self._submit(session, query)
        session.begin()
        session.history_prev()
        assert session.buffer == "bar"
        session.history_prev()
        assert session.buffer == "foo"
        session.history_prev()
        assert session.buffer == "foo"
        session.history_next()
        assert session.buffer == "bar"
        session.history_next()
        assert session.buffer == ""

    def test_history_limit(self):
        session = SearchSession()
        for i in range(SearchSession.HISTORY_MAX + 5):
            self._submit(session, f"q{i}")
        assert len(session.history) == SearchSession.HISTORY_MAX
        assert session.history[0] == f"q{SearchSession.HISTORY_MAX + 4}"
