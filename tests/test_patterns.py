"""Tests for the shared pattern table."""

import dataclasses
import re
import threading

import pytest

from slackmark.communication import patterns
from slackmark.communication.patterns import (
    CATEGORIES,
    PATTERN_SOURCES,
    PatternTableError,
    Patterns,
    build_patterns,
    get_patterns,
)


class TestBuildPatterns:

    def test_every_field_has_a_source(self):
        names = [name for name, _, _ in PATTERN_SOURCES]
        assert len(names) == len(set(names))
        assert set(names) == {f.name for f in dataclasses.fields(Patterns)}

    def test_compiles_all(self):
        table = build_patterns()
        for name, source, flags in PATTERN_SOURCES:
            compiled = getattr(table, name)
            assert isinstance(compiled, re.Pattern)
            assert compiled.pattern == source
            assert compiled.flags & flags == flags

    def test_malformed_pattern_raises(self):
        broken = tuple(
            (name, "(unclosed" if name == "md_bold" else source, flags)
            for name, source, flags in PATTERN_SOURCES
        )
        with pytest.raises(PatternTableError) as exc_info:
            build_patterns(broken)
        assert exc_info.value.name == "md_bold"
        assert exc_info.value.source == "(unclosed"
        assert isinstance(exc_info.value.__cause__, re.error)

    def test_incomplete_table_raises(self):
        with pytest.raises(PatternTableError, match="excess_newlines"):
            build_patterns(tuple(s for s in PATTERN_SOURCES if s[0] != "excess_newlines"))

    def test_pattern_table_error_is_runtime_error(self):
        assert issubclass(PatternTableError, RuntimeError)

    def test_table_is_immutable(self):
        table = build_patterns()
        with pytest.raises(dataclasses.FrozenInstanceError):
            table.md_bold = re.compile("x")


class TestGetPatterns:

    def test_same_instance_every_call(self):
        assert get_patterns() is get_patterns()

    def test_built_lazily_once(self, monkeypatch):
        calls = []
        real_build = patterns.build_patterns

        def counting_build():
            calls.append(1)
            return real_build()

        monkeypatch.setattr(patterns, "_patterns", None)
        monkeypatch.setattr(patterns, "build_patterns", counting_build)

        assert calls == []
        first = get_patterns()
        second = get_patterns()
        assert first is second
        assert len(calls) == 1

    def test_concurrent_first_use_builds_once(self, monkeypatch):
        calls = []
        real_build = patterns.build_patterns

        def counting_build():
            calls.append(1)
            return real_build()

        monkeypatch.setattr(patterns, "_patterns", None)
        monkeypatch.setattr(patterns, "build_patterns", counting_build)

        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(get_patterns())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert all(r is results[0] for r in results)

    def test_build_failure_propagates(self, monkeypatch):
        def broken_build():
            raise PatternTableError("md_bold", "(", re.error("missing )"))

        monkeypatch.setattr(patterns, "_patterns", None)
        monkeypatch.setattr(patterns, "build_patterns", broken_build)

        from slackmark.communication.mrkdwn import md_to_mrkdwn
        with pytest.raises(PatternTableError):
            md_to_mrkdwn("**x**")


class TestConstants:

    def test_category_tags(self):
        assert CATEGORIES == ("CB", "IC", "TB", "LK", "BI", "BD")
        assert all(len(tag) == 2 for tag in CATEGORIES)

    def test_sentinel_and_markers(self):
        assert patterns.SENTINEL == "\x00"
        assert patterns.ZWSP == "\u200b"
        assert patterns.BULLET == "\u2022"
