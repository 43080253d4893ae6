"""Tests for id pattern compilation."""

import pytest

from graph_bridge.core.interfaces import PatternError
from graph_bridge.services.patterns import IdPattern, compile_or_never, compile_pattern


class TestCompilePattern:
    """Test suite for compile_pattern."""

    def test_exact_pattern_matches_only_itself(self):
        """Test a pattern without wildcard matches exactly one id."""
        pattern = compile_pattern("zone.3")

        assert pattern.matches("zone.3")
        assert not pattern.matches("zone.3.switch")
        assert not pattern.matches("azone.3")
        assert not pattern.has_wildcard

    def test_trailing_wildcard_matches_descendants(self):
        """Test 'zone.*' matches ids below zone."""
        pattern = compile_pattern("zone.*")

        assert pattern.matches("zone.3.switch")
        assert pattern.matches("zone.")
        assert not pattern.matches("zone")
        assert not pattern.matches("myzone.3")

    def test_leading_wildcard_is_unanchored_at_start(self):
        """Test '*.switch' matches any id ending with '.switch'."""
        pattern = compile_pattern("*.switch")

        assert pattern.matches("zone.3.switch")
        assert not pattern.matches("zone.3.switch.level")

    def test_inner_wildcard(self):
        """Test a wildcard in the middle matches any run of characters."""
        pattern = compile_pattern("hm-rpc.*.LEVEL")

        assert pattern.matches("hm-rpc.0.LEQ001.1.LEVEL")
        assert not pattern.matches("hm-rpc.0.LEQ001.1.ON")

    def test_lone_wildcard_matches_everything(self):
        """Test '*' matches every id."""
        pattern = compile_pattern("*")

        assert pattern.matches("anything.at.all")
        assert pattern.matches("")

    def test_regex_characters_are_literal(self):
        """Test dots and other regex characters are matched literally."""
        pattern = compile_pattern("a.b+c*")

        assert pattern.matches("a.b+c.d")
        assert not pattern.matches("aXbbc.d")

    def test_callable(self):
        """Test compiled patterns can be called like predicates."""
        pattern = compile_pattern("zone.*")

        assert pattern("zone.1")
        assert not pattern("other.1")

    @pytest.mark.parametrize("bad", ["", None, 42, ["zone.*"]])
    def test_invalid_pattern_raises(self, bad):
        """Test non-string and empty patterns are rejected."""
        with pytest.raises(PatternError):
            compile_pattern(bad)


class TestCompileOrNever:
    """Test suite for compile_or_never."""

    def test_valid_pattern_compiles(self):
        """Test a valid pattern compiles normally."""
        assert compile_or_never("zone.*").matches("zone.1")

    def test_invalid_pattern_never_matches(self, caplog):
        """Test an invalid pattern degrades to a never-matching pattern."""
        pattern = compile_or_never(None, "n1")

        assert pattern is IdPattern.NEVER
        assert not pattern.matches("")
        assert not pattern.matches("zone.1")
        assert "n1" in caplog.text
