"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time
from collections.abc import Generator

import pytest

from cmkctl.services.result import ServiceResult
from cmkctl.services.telemetry import (
    Span,
    _current_span,
    disable_telemetry,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    yield
    disable_telemetry()
    _current_span.set(None)


# ── Span unit tests ──────────────────────────────────────────────────


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="test").duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="test")
        time.sleep(0.005)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict_minimal(self) -> None:
        span = Span(name="root")
        span.end()
        d = span.to_dict()
        assert d["name"] == "root"
        assert "children" not in d
        assert "annotations" not in d

    def test_to_dict_with_children_and_annotations(self) -> None:
        root = Span(name="root")
        child = Span(name="Build Debug", parent=root)
        child.annotate("attempts", 2)
        root.children.append(child)
        child.end()
        root.end()
        d = root.to_dict()
        assert d["children"][0]["name"] == "Build Debug"
        assert d["children"][0]["annotations"] == {"attempts": 2}


# ── trace_span ───────────────────────────────────────────────────────


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("x") as span:
            assert span is None

    def test_enabled_without_parent_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("x") as span:
            assert span is None

    def test_enabled_nests_under_current(self) -> None:
        enable_telemetry()
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            with trace_span("child") as span:
                assert span is not None
                assert get_current_span() is span
            assert get_current_span() is root
        finally:
            _current_span.reset(token)
        assert [c.name for c in root.children] == ["child"]
        assert root.children[0].end_time is not None


# ── @traced ──────────────────────────────────────────────────────────


class _Service:
    @traced
    def plain(self) -> ServiceResult:
        with trace_span("inner"):
            pass
        return ServiceResult(ok=True, op="plain", meta={"keep": 1})

    @traced
    async def awaited(self) -> ServiceResult:
        with trace_span("inner"):
            pass
        return ServiceResult(ok=True, op="awaited")

    @traced
    def boom(self) -> ServiceResult:
        raise RuntimeError("boom")


class TestTraced:
    def test_disabled_leaves_meta_untouched(self) -> None:
        result = _Service().plain()
        assert result.meta == {"keep": 1}

    def test_enabled_injects_telemetry(self) -> None:
        enable_telemetry()
        result = _Service().plain()
        assert result.meta is not None
        assert result.meta["keep"] == 1
        telemetry = result.meta["telemetry"]
        assert telemetry["name"].endswith("plain")
        assert telemetry["children"][0]["name"] == "inner"

    @pytest.mark.asyncio
    async def test_async_methods_are_traced(self) -> None:
        enable_telemetry()
        result = await _Service().awaited()
        assert result.meta is not None
        assert result.meta["telemetry"]["children"][0]["name"] == "inner"

    def test_exception_propagates_and_resets_span(self) -> None:
        enable_telemetry()
        with pytest.raises(RuntimeError):
            _Service().boom()
        assert get_current_span() is None

    def test_preserves_wrapped_name(self) -> None:
        assert _Service.plain.__name__ == "plain"
        assert _Service.awaited.__name__ == "awaited"
