# tests/unit/test_context_resolver.py
"""
Unit tests for the corruption-marker context resolver.
"""

from notifier.services.text_repair.context import (
    CONTEXT_RULES,
    DEFAULT_REPLACEMENT,
    MARKER,
    ContextRule,
    resolve_marker,
    resolve_markers,
)


class TestResolveMarker:
    """Tests for resolve_marker on explicit windows."""

    def test_suffix_rules(self):
        assert resolve_marker("", "xito") == "ê"
        assert resolve_marker(" pr", "xima") == "ó"
        assert resolve_marker("per", "odo ") == "í"
        assert resolve_marker("atom", "tica") == "á"
        assert resolve_marker("spon", "veis") == "í"
        assert resolve_marker("nclu", "da") == "í"

    def test_prefix_rule(self):
        assert resolve_marker("ora", "o") == "ã"

    def test_default_when_nothing_matches(self):
        assert resolve_marker("xyz", "w") == DEFAULT_REPLACEMENT
        assert resolve_marker("", "") == "ç"

    def test_first_matching_rule_wins(self):
        rules = (ContextRule("", "o", "1"), ContextRule("", "o", "2"))
        assert resolve_marker("", "o", rules) == "1"

    def test_windows_compared_case_insensitively(self):
        assert resolve_marker("Per", "ODO") == "í"

    def test_upper_case_context_gives_upper_case(self):
        assert resolve_marker("PER", "ODO") == "Í"
        assert resolve_marker("GURA", "AO") == "Ç"

    def test_upper_before_lower_after_stays_lower(self):
        assert resolve_marker("A", "da") == "í"

    def test_rules_are_ordered_suffix_first(self):
        assert CONTEXT_RULES[0].after == "xito"
        assert CONTEXT_RULES[-1] == ContextRule("a", "o", "ã")


class TestResolveMarkers:
    """Tests for resolve_markers over whole strings."""

    def test_no_marker_returns_same_string(self):
        text = "nada a resolver"
        assert resolve_markers(text) is text

    def test_single_marker(self):
        assert resolve_markers(f"per{MARKER}odo") == "período"
        assert resolve_markers(f"{MARKER}xito") == "êxito"

    def test_each_marker_resolved_from_its_own_window(self):
        assert resolve_markers(f"per{MARKER}odo autom{MARKER}tica") == "período automática"

    def test_output_never_contains_marker(self):
        text = f"{MARKER}{MARKER} x{MARKER} {MARKER}"
        assert MARKER not in resolve_markers(text)

    def test_upper_case_word(self):
        assert resolve_markers(f"PER{MARKER}ODO") == "PERÍODO"
