"""Unit tests for resolver.py module.

Tests URL classification, file ID extraction, candidate chain construction
and the progressive resolver state machine, driven by simulated load
outcomes instead of a browser.
"""

import pytest
from unittest.mock import Mock

from drivelink.diagnostics import MemorySink
from drivelink.exceptions import InvalidTransitionError
from drivelink.models import ResolutionStatus
from drivelink.resolver import (
    CANDIDATE_TEMPLATES,
    ProgressiveResolver,
    ResolverState,
    build_candidate_chain,
    extract_file_id,
    is_drive_url,
    resolve,
)


def scripted_prober(*results):
    """Prober returning the given load results in order, recording every URL."""
    prober = Mock(side_effect=list(results))
    return prober


class TestIsDriveUrl:
    """Test cases for URL classification."""

    @pytest.mark.parametrize("url", [
        "https://drive.google.com/file/d/ABC123/view",
        "https://drive.google.com/open?id=XYZ789",
        "https://lh3.googleusercontent.com/d/ABC123",
        "https://docs.google.com/uc?id=ABC123",
    ])
    def test_drive_urls(self, url):
        """Test that Drive hosted URLs are recognised."""
        assert is_drive_url(url) is True

    @pytest.mark.parametrize("url", [
        "https://example.com/photo.jpg",
        "https://res.cloudinary.com/demo/image/upload/sample.jpg",
        "https://google.com/images/logo.png",
        "https://drive.usercontent.google.com/download?id=ABC123&export=view",
        "/images/placeholder-project.jpg",
    ])
    def test_non_drive_urls(self, url):
        """Test that other URLs are not recognised."""
        assert is_drive_url(url) is False

    @pytest.mark.parametrize("value", [None, "", 42, ["https://drive.google.com/file/d/a/view"]])
    def test_empty_and_non_string_input(self, value):
        """Test that empty or non-string input returns False without raising."""
        assert is_drive_url(value) is False


class TestExtractFileId:
    """Test cases for file ID extraction."""

    @pytest.mark.parametrize("url,expected", [
        ("https://drive.google.com/file/d/ABC123/view", "ABC123"),
        ("https://drive.google.com/file/d/ABC123/view?usp=sharing", "ABC123"),
        ("https://drive.google.com/file/d/ABC123?usp=sharing", "ABC123"),
        ("https://drive.google.com/file/d/ABC123", "ABC123"),
        ("https://drive.google.com/open?id=XYZ789", "XYZ789"),
        ("https://drive.google.com/uc?export=view&id=XYZ789", "XYZ789"),
        ("https://drive.google.com/open?id=XYZ789&usp=sharing", "XYZ789"),
        ("https://drive.google.com/d/QWE_r-t9/", "QWE_r-t9"),
        ("https://lh3.googleusercontent.com/d/QWE_r-t9", "QWE_r-t9"),
    ])
    def test_supported_formats(self, url, expected):
        """Test that every supported format yields the same ID."""
        assert extract_file_id(url) == expected

    def test_same_id_regardless_of_format(self):
        """Test that the three formats agree for one file."""
        urls = [
            "https://drive.google.com/file/d/1a2B3c_D-4/view",
            "https://drive.google.com/open?id=1a2B3c_D-4",
            "https://drive.google.com/d/1a2B3c_D-4/",
        ]

        assert {extract_file_id(url) for url in urls} == {"1a2B3c_D-4"}

    def test_declaration_order_wins(self):
        """Test that the /file/d/ pattern takes precedence over id=."""
        url = "https://drive.google.com/file/d/FIRST/view?id=SECOND"

        assert extract_file_id(url) == "FIRST"

    def test_id_query_beats_short_path(self):
        """Test that id= takes precedence over a /d/ segment."""
        url = "https://drive.google.com/d/PATHID/edit?id=QUERYID"

        assert extract_file_id(url) == "QUERYID"

    @pytest.mark.parametrize("url", [
        "https://drive.google.com/weird-format",
        "https://drive.google.com/drive/my-drive",
        "https://drive.google.com/open?id=bad.id",
        "https://drive.google.com/file/d/",
    ])
    def test_no_match(self, url):
        """Test that unrecognised shapes return None."""
        assert extract_file_id(url) is None

    @pytest.mark.parametrize("value", [None, "", 3.14])
    def test_empty_and_non_string_input(self, value):
        """Test that empty or non-string input returns None."""
        assert extract_file_id(value) is None


class TestBuildCandidateChain:
    """Test cases for candidate chain construction."""

    def test_chain_order_and_length(self):
        """Test the fixed order of the four candidates."""
        chain = build_candidate_chain("ABC123")

        assert chain == [
            "https://drive.usercontent.google.com/download?id=ABC123&export=view&authuser=0",
            "https://lh3.googleusercontent.com/d/ABC123",
            "https://drive.google.com/thumbnail?id=ABC123&sz=w800",
            "https://drive.google.com/uc?export=view&id=ABC123",
        ]

    def test_chain_is_deterministic(self):
        """Test that the same ID always yields the same chain."""
        assert build_candidate_chain("Z1") == build_candidate_chain("Z1")
        assert build_candidate_chain("Z1") is not build_candidate_chain("Z1")

    def test_format_sweep_appends_after_standard_candidates(self):
        """Test that extension variants never displace the standard four."""
        chain = build_candidate_chain("Z1", format_sweep=True)

        assert chain[:4] == build_candidate_chain("Z1")
        assert chain[4:] == [
            f"https://drive.google.com/uc?export=view&id=Z1&format={fmt}"
            for fmt in ("png", "jpg", "jpeg", "gif", "webp")
        ]

    def test_templates_count(self):
        """Test that exactly four templates are declared."""
        assert len(CANDIDATE_TEMPLATES) == 4


class TestProgressiveResolverTransitions:
    """Test cases for the resolver state machine driven by explicit signals."""

    def test_initial_state_is_idle(self):
        """Test that a new resolver is idle with no candidate."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/ABC123/view")

        assert resolver.state == ResolverState.IDLE
        assert resolver.current_candidate is None
        assert resolver.index is None

    def test_start_enters_probing_at_zero(self):
        """Test Idle -> Probing(0)."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/ABC123/view")

        first = resolver.start()

        assert resolver.state == ResolverState.PROBING
        assert resolver.index == 0
        assert first == "https://drive.usercontent.google.com/download?id=ABC123&export=view&authuser=0"

    def test_failure_advances_by_exactly_one(self):
        """Test Probing(i) -> Probing(i+1) on a load error."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/ABC123/view")
        resolver.start()

        next_candidate = resolver.report_failure()

        assert resolver.index == 1
        assert next_candidate == "https://lh3.googleusercontent.com/d/ABC123"

    def test_success_resolves_current_candidate(self):
        """Test Probing(i) -> Resolved on a load success."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/ABC123/view")
        resolver.start()
        resolver.report_failure()
        resolver.report_success()

        assert resolver.state == ResolverState.RESOLVED
        outcome = resolver.outcome()
        assert outcome.url == "https://lh3.googleusercontent.com/d/ABC123"
        assert outcome.attempts == build_candidate_chain("ABC123")[:2]

    def test_failure_at_last_index_exhausts(self):
        """Test Probing(last) -> Exhausted."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/Z1/view")
        resolver.start()

        results = [resolver.report_failure() for _ in range(4)]

        assert results[:3] == build_candidate_chain("Z1")[1:]
        assert results[3] is None
        assert resolver.state == ResolverState.EXHAUSTED
        assert resolver.is_terminal

    def test_signals_rejected_in_terminal_state(self):
        """Test that no further signals are accepted once exhausted."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/Z1/view")
        resolver.start()
        for _ in range(4):
            resolver.report_failure()

        with pytest.raises(InvalidTransitionError):
            resolver.report_failure()
        with pytest.raises(InvalidTransitionError):
            resolver.report_success()

    def test_signals_rejected_while_idle(self):
        """Test that load signals before start are rejected."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/Z1/view")

        with pytest.raises(InvalidTransitionError) as exc_info:
            resolver.report_success()

        assert exc_info.value.state == "idle"

    def test_start_twice_rejected(self):
        """Test that start only works from IDLE."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/Z1/view")
        resolver.start()

        with pytest.raises(InvalidTransitionError):
            resolver.start()

    def test_outcome_before_finish_rejected(self):
        """Test that an unfinished resolution has no outcome."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/Z1/view")
        resolver.start()

        with pytest.raises(InvalidTransitionError):
            resolver.outcome()

    def test_restart_reenters_first_candidate(self):
        """Test that a manual restart re-enters Probing(0) after exhaustion."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/Z1/view")
        resolver.start()
        for _ in range(4):
            resolver.report_failure()

        first = resolver.restart()

        assert resolver.state == ResolverState.PROBING
        assert resolver.index == 0
        assert first == build_candidate_chain("Z1")[0]

    def test_restart_while_probing_rejected(self):
        """Test that a restart cannot interrupt a running chain."""
        resolver = ProgressiveResolver("https://drive.google.com/file/d/Z1/view")
        resolver.start()

        with pytest.raises(InvalidTransitionError):
            resolver.restart()

    def test_non_drive_url_resolves_on_start(self):
        """Test that a non-Drive URL resolves to itself with no candidate."""
        resolver = ProgressiveResolver("https://example.com/photo.jpg")

        assert resolver.start() is None
        assert resolver.state == ResolverState.RESOLVED
        assert resolver.outcome().url == "https://example.com/photo.jpg"

    def test_drive_url_without_id_exhausts_on_start(self):
        """Test that extraction failure exhausts immediately."""
        resolver = ProgressiveResolver("https://drive.google.com/weird-format")

        assert resolver.start() is None
        assert resolver.state == ResolverState.EXHAUSTED
        assert resolver.chain == []


class TestResolveScenarios:
    """End-to-end resolution scenarios with simulated probers."""

    def test_scenario_share_link_first_candidate(self):
        """Scenario: /file/d/ link resolves on the first candidate."""
        prober = scripted_prober(True)

        outcome = resolve("https://drive.google.com/file/d/ABC123/view", prober)

        assert outcome.file_id == "ABC123"
        assert outcome.url == "https://drive.usercontent.google.com/download?id=ABC123&export=view&authuser=0"
        prober.assert_called_once_with(
            "https://drive.usercontent.google.com/download?id=ABC123&export=view&authuser=0"
        )

    def test_scenario_second_candidate_succeeds(self):
        """Scenario: candidate 1 fails, candidate 2 loads."""
        prober = scripted_prober(False, True)

        outcome = resolve("https://drive.google.com/open?id=XYZ789", prober)

        assert outcome.status == ResolutionStatus.RESOLVED
        assert outcome.url == "https://lh3.googleusercontent.com/d/XYZ789"
        assert prober.call_count == 2

    def test_scenario_non_drive_pass_through(self):
        """Scenario: non-Drive URL is returned unchanged with zero probes."""
        prober = Mock()

        outcome = resolve("https://example.com/photo.jpg", prober)

        assert outcome.is_resolved
        assert outcome.url == "https://example.com/photo.jpg"
        assert outcome.attempts == []
        prober.assert_not_called()

    def test_scenario_unrecognised_drive_url(self):
        """Scenario: Drive URL without an ID is exhausted with zero probes."""
        prober = Mock()

        outcome = resolve("https://drive.google.com/weird-format", prober)

        assert outcome.status == ResolutionStatus.EXHAUSTED
        assert outcome.attempts == []
        assert outcome.file_id is None
        prober.assert_not_called()

    def test_scenario_all_candidates_fail(self):
        """Scenario: all four candidates fail and nothing else is tried."""
        prober = scripted_prober(False, False, False, False)

        outcome = resolve("https://drive.google.com/file/d/Z1/view", prober)

        assert outcome.status == ResolutionStatus.EXHAUSTED
        assert outcome.url is None
        assert outcome.attempts == build_candidate_chain("Z1")
        assert [c.args[0] for c in prober.call_args_list] == build_candidate_chain("Z1")

    def test_probes_follow_chain_order_without_repeats(self):
        """Test that probes are strictly sequential and never repeated."""
        prober = scripted_prober(False, False, True)

        outcome = resolve("https://drive.google.com/file/d/ORDER/view", prober)

        probed = [c.args[0] for c in prober.call_args_list]
        assert probed == build_candidate_chain("ORDER")[:3]
        assert len(set(probed)) == len(probed)
        assert outcome.url == build_candidate_chain("ORDER")[2]

    def test_raising_prober_counts_as_failure(self):
        """Test that a prober exception advances the chain instead of escaping."""
        prober = Mock(side_effect=[ConnectionError("reset"), True])
        sink = MemorySink()

        outcome = resolve("https://drive.google.com/file/d/ERR/view", prober, sink=sink)

        assert outcome.url == build_candidate_chain("ERR")[1]
        assert sink.failures[0].error == "reset"

    def test_idempotent_for_same_pattern(self):
        """Test that the same URL and load pattern yield the same outcome."""
        url = "https://drive.google.com/open?id=SAME"

        first = resolve(url, scripted_prober(False, False, True))
        second = resolve(url, scripted_prober(False, False, True))

        assert first == second

    def test_format_sweep_extends_probing(self):
        """Test that the sweep variants are probed after the standard four."""
        prober = scripted_prober(False, False, False, False, True)

        outcome = resolve("https://drive.google.com/file/d/SW/view", prober, format_sweep=True)

        assert outcome.url == "https://drive.google.com/uc?export=view&id=SW&format=png"
        assert len(outcome.attempts) == 5

    def test_empty_url_exhausts_without_probing(self):
        """Test that an empty URL has nothing to resolve."""
        prober = Mock()

        outcome = resolve("", prober)

        assert outcome.status == ResolutionStatus.EXHAUSTED
        prober.assert_not_called()

    def test_sink_receives_one_event_per_probe(self):
        """Test diagnostics events carry index and result."""
        sink = MemorySink()

        resolve("https://drive.google.com/file/d/EV/view", scripted_prober(False, True), sink=sink)

        events = sink.events
        assert [(e.index, e.ok) for e in events] == [(0, False), (1, True)]
        assert all(e.file_id == "EV" for e in events)
        assert events[0].original_url == "https://drive.google.com/file/d/EV/view"

    def test_failing_sink_does_not_break_resolution(self):
        """Test that a sink raising an exception is contained."""
        sink = Mock()
        sink.record.side_effect = RuntimeError("sink down")

        outcome = resolve("https://drive.google.com/file/d/SK/view", scripted_prober(True), sink=sink)

        assert outcome.is_resolved
        sink.record.assert_called_once()

    def test_non_drive_url_returned_verbatim(self):
        """Test that surrounding whitespace survives a pass-through."""
        url = " https://example.com/photo.jpg\n"

        outcome = resolve(url, Mock())

        assert outcome.url == url
        assert outcome.raw_url == url

    def test_whitespace_only_url_passes_through(self):
        """Test that a blank but non-empty string is not a Drive URL."""
        loader = Mock()

        outcome = resolve("   ", loader)

        assert outcome.is_resolved
        assert outcome.url == "   "
        loader.assert_not_called()

    def test_drive_url_with_whitespace_still_matched(self):
        """Test that matching ignores surrounding whitespace."""
        outcome = resolve("  https://drive.google.com/open?id=WS\t", Mock(return_value=True))

        assert outcome.file_id == "WS"
        assert outcome.url == build_candidate_chain("WS")[0]
        assert outcome.raw_url == "  https://drive.google.com/open?id=WS\t"
