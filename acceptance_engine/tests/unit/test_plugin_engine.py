"""Unit tests for the plugin engine, registry and timeout supervisor."""

from __future__ import annotations

import asyncio
import threading
import time
from pathlib import Path

import pytest

from acceptance_engine.config import EngineSettings
from acceptance_engine.errors import ErrorCode, ExecutionTimeoutError
from acceptance_engine.plugins.base import BasePluginCheck
from acceptance_engine.plugins.engine import PluginEngine, create_default_engine, to_external_checks
from acceptance_engine.plugins.models import (
    PluginContext,
    PluginKind,
    PluginResult,
    PluginStatus,
)
from acceptance_engine.plugins.registry import PluginCheckRegistry
from acceptance_engine.plugins.timeout import with_timeout
from acceptance_engine.plugins.validator import parse_plugin
from acceptance_engine.project_spec import FocusCard, ProjectSpec

# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class _HangingCheck(BasePluginCheck):
    """A grep check that never settles."""

    @property
    def kind(self) -> PluginKind:
        return PluginKind.GREP

    async def execute(self, context, definition) -> PluginResult:
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


class _ExplodingCheck(BasePluginCheck):
    @property
    def kind(self) -> PluginKind:
        return PluginKind.GREP

    async def execute(self, context, definition) -> PluginResult:
        raise RuntimeError("boom")


class _SpyCheck(BasePluginCheck):
    """Records the context it was given and passes."""

    def __init__(self) -> None:
        self.contexts: list[PluginContext] = []

    @property
    def kind(self) -> PluginKind:
        return PluginKind.FILE_EXISTS

    async def execute(self, context, definition) -> PluginResult:
        self.contexts.append(context)
        return self.make_result(definition, passed=True, evidence=None, default_title="spy")


def _file_exists(plugin_id: str, file: str, **extra):
    return parse_plugin({"id": plugin_id, "kind": "file_exists", "file": file, **extra})


def _grep(plugin_id: str, **extra):
    return parse_plugin({"id": plugin_id, "kind": "grep", "file": "a.txt", "pattern": "a", **extra})


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestPluginCheckRegistry:
    def test_register_and_get(self):
        registry = PluginCheckRegistry()
        check = _ExplodingCheck()
        registry.register(check)
        assert registry.get(PluginKind.GREP) is check
        assert registry.get("grep") is check
        assert PluginKind.GREP in registry
        assert len(registry) == 1

    def test_duplicate_registration_raises(self):
        registry = PluginCheckRegistry()
        registry.register(_ExplodingCheck())
        with pytest.raises(ValueError, match="already registered"):
            registry.register(_HangingCheck())

    def test_get_unknown_kind(self):
        registry = PluginCheckRegistry()
        assert registry.get("unknown_type") is None
        assert registry.get("glob") is None
        assert "unknown_type" not in registry
        assert 5 not in registry

    def test_get_kinds_sorted(self):
        engine = create_default_engine()
        assert engine.registry.get_kinds() == sorted(PluginKind, key=lambda k: k.value)


# ---------------------------------------------------------------------------
# Timeout supervisor
# ---------------------------------------------------------------------------


class TestWithTimeout:
    @pytest.mark.asyncio
    async def test_returns_value(self):
        async def _quick():
            return 42

        assert await with_timeout(_quick, 1.0, "quick") == 42

    @pytest.mark.asyncio
    async def test_times_out(self):
        async def _slow():
            await asyncio.sleep(10)

        start = time.monotonic()
        with pytest.raises(ExecutionTimeoutError) as exc_info:
            await with_timeout(_slow, 0.05, "slow-plugin")
        assert time.monotonic() - start < 2.0
        err = exc_info.value
        assert str(err) == 'Plugin "slow-plugin" timed out after 50ms'
        assert err.code == ErrorCode.PLUGIN_TIMEOUT
        assert err.label == "slow-plugin"

    @pytest.mark.asyncio
    async def test_propagates_failure_unchanged(self):
        async def _fail():
            raise ValueError("bad input")

        with pytest.raises(ValueError, match="bad input"):
            await with_timeout(_fail, 1.0)

    @pytest.mark.asyncio
    async def test_inner_timeout_error_not_reclassified(self):
        async def _own_timeout():
            raise TimeoutError("upstream timed out")

        with pytest.raises(TimeoutError, match="upstream") as exc_info:
            await with_timeout(_own_timeout, 1.0)
        assert not isinstance(exc_info.value, ExecutionTimeoutError)

    @pytest.mark.asyncio
    async def test_timed_out_work_is_cancelled(self):
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def _slow():
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        with pytest.raises(ExecutionTimeoutError):
            await with_timeout(_slow, 0.05)
        await asyncio.wait_for(cancelled.wait(), 1.0)
        assert started.is_set()


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class TestCreateDefaultEngine:
    def test_registers_every_kind(self):
        engine = create_default_engine()
        for kind in PluginKind:
            assert engine.registry.get(kind) is not None

    def test_empty_registry_is_kept(self):
        registry = PluginCheckRegistry()
        engine = PluginEngine(registry=registry)
        assert engine.registry is registry


class TestRunAll:
    @pytest.mark.asyncio
    async def test_empty_definitions(self, tmp_path: Path):
        assert await create_default_engine().run_all(tmp_path, []) == []

    @pytest.mark.asyncio
    async def test_results_in_definition_order(self, tmp_path: Path):
        (tmp_path / "present.txt").write_text("a", encoding="utf-8")
        definitions = [
            _file_exists("z-last-alphabetically", "present.txt"),
            _file_exists("a-first-alphabetically", "missing.txt"),
            _grep("m-middle", file="present.txt"),
        ]

        results = await create_default_engine().run_all(tmp_path, definitions)

        assert [r.plugin_id for r in results] == ["z-last-alphabetically", "a-first-alphabetically", "m-middle"]
        assert [r.status for r in results] == [PluginStatus.PASS, PluginStatus.FAIL, PluginStatus.PASS]

    @pytest.mark.asyncio
    async def test_duplicate_display_ids_both_kept(self, tmp_path: Path):
        definitions = [
            _file_exists("one", "a", report_as="AT-1"),
            _file_exists("two", "b", report_as="AT-1"),
        ]
        results = await create_default_engine().run_all(tmp_path, definitions)
        assert [r.id for r in results] == ["AT-1", "AT-1"]
        assert [r.plugin_id for r in results] == ["one", "two"]

    @pytest.mark.asyncio
    async def test_raising_check_becomes_fail(self, tmp_path: Path):
        engine = PluginEngine()
        engine.register(_ExplodingCheck())
        engine.register(_SpyCheck())

        results = await engine.run_all(tmp_path, [_grep("explodes"), _file_exists("after", "a")])

        assert results[0].status == PluginStatus.FAIL
        assert results[0].evidence == "boom"
        assert results[0].title == "Plugin explodes"
        assert results[1].status == PluginStatus.PASS

    @pytest.mark.asyncio
    async def test_failure_keeps_title_and_relations(self, tmp_path: Path):
        engine = PluginEngine()
        engine.register(_ExplodingCheck())

        (result,) = await engine.run_all(
            tmp_path,
            [_grep("x", title="Readable title", report_as="AT-9", relatedCuts=["CUT-1"])],
        )

        assert result.id == "AT-9"
        assert result.title == "Readable title"
        assert result.related_cuts == ["CUT-1"]

    @pytest.mark.asyncio
    async def test_unregistered_kind_becomes_fail(self, tmp_path: Path):
        engine = PluginEngine()
        (result,) = await engine.run_all(tmp_path, [_grep("orphan")])
        assert result.status == PluginStatus.FAIL
        assert "Unknown plugin kind: grep" in (result.evidence or "")

    @pytest.mark.asyncio
    async def test_hanging_check_times_out_and_run_continues(self, tmp_path: Path):
        engine = PluginEngine()
        engine.register(_HangingCheck())
        engine.register(_SpyCheck())

        start = time.monotonic()
        results = await engine.run_all(tmp_path, [_grep("hangs"), _file_exists("next", "a")], timeout=0.05)

        assert time.monotonic() - start < 2.0
        assert results[0].status == PluginStatus.FAIL
        assert results[0].evidence == 'Plugin "hangs" timed out after 50ms'
        assert results[1].status == PluginStatus.PASS

    @pytest.mark.asyncio
    async def test_slow_pattern_search_does_not_block_timeout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "a.txt").write_text("a" * 28 + "!", encoding="utf-8")
        searched = threading.Event()

        class _SlowPattern:
            def search(self, content, concurrent=None, timeout=None):
                searched.set()
                # Stands in for a catastrophically backtracking match.
                time.sleep(1.0)
                return None

        monkeypatch.setattr(
            "acceptance_engine.plugins.builtin.grep.compile_pattern", lambda pattern, flags="": _SlowPattern()
        )
        definition = _grep("backtracks", file="a.txt", pattern="^(a+)+$")

        start = time.monotonic()
        (result,) = await create_default_engine().run_all(tmp_path, [definition], timeout=0.1)
        elapsed = time.monotonic() - start

        assert searched.is_set()
        assert elapsed < 0.8
        assert result.status == PluginStatus.FAIL
        assert result.evidence == 'Plugin "backtracks" timed out after 100ms'

    @pytest.mark.asyncio
    async def test_search_bounded_by_check_timeout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "a.txt").write_text("content", encoding="utf-8")
        seen: list[tuple[bool | None, float | None]] = []

        class _RecordingPattern:
            def search(self, content, concurrent=None, timeout=None):
                seen.append((concurrent, timeout))
                return None

        monkeypatch.setattr(
            "acceptance_engine.plugins.builtin.grep.compile_pattern", lambda pattern, flags="": _RecordingPattern()
        )

        await create_default_engine().run_all(tmp_path, [_grep("g")], timeout=2.5)

        assert seen == [(True, 2.5)]

    @pytest.mark.asyncio
    async def test_default_timeout_from_settings(self, tmp_path: Path):
        engine = PluginEngine(settings=EngineSettings(plugin_timeout_seconds=0.05))
        engine.register(_HangingCheck())

        (result,) = await engine.run_all(tmp_path, [_grep("hangs")])

        assert "timed out after 50ms" in (result.evidence or "")

    @pytest.mark.asyncio
    async def test_context_carries_root_spec_and_cap(self, tmp_path: Path):
        spy = _SpyCheck()
        engine = PluginEngine(settings=EngineSettings(evidence_max_chars=120))
        engine.register(spy)
        spec = ProjectSpec(focus_card=FocusCard(focus_card_id="FC-1", title="t", goal="g"))

        await engine.run_all(str(tmp_path), [_file_exists("a", "a")], spec=spec)

        (context,) = spy.contexts
        assert context.root == tmp_path
        assert context.spec is spec
        assert context.evidence_max_chars == 120

    @pytest.mark.asyncio
    async def test_repeated_runs_are_identical(self, tmp_path: Path):
        (tmp_path / "README.md").write_text("## Usage\n", encoding="utf-8")
        definitions = [
            _grep("g", file="README.md", pattern="Usage"),
            parse_plugin({"id": "gl", "kind": "glob", "pattern": "*.md"}),
        ]
        engine = create_default_engine()

        first = await engine.run_all(tmp_path, definitions)
        second = await engine.run_all(tmp_path, definitions)

        assert first == second


# ---------------------------------------------------------------------------
# to_external_checks
# ---------------------------------------------------------------------------


class TestToExternalChecks:
    def test_maps_fields(self):
        result = PluginResult(
            id="AT-1", plugin_id="p", title="T", status=PluginStatus.PASS, evidence="found=true"
        )
        (external,) = to_external_checks([result])
        assert external.id == "AT-1"
        assert external.status == PluginStatus.PASS
        assert external.evidence == "found=true"

    def test_evidence_falls_back_to_title(self):
        result = PluginResult(id="AT-2", plugin_id="p", title="Title only", status=PluginStatus.FAIL)
        (external,) = to_external_checks([result])
        assert external.evidence == "Title only"

    def test_empty_evidence_is_kept(self):
        result = PluginResult(id="AT-3", plugin_id="p", title="T", status=PluginStatus.PASS, evidence="")
        (external,) = to_external_checks([result])
        assert external.evidence == ""

    def test_preserves_order(self):
        results = [
            PluginResult(id=str(i), plugin_id=str(i), title="t", status=PluginStatus.PASS) for i in range(5)
        ]
        assert [c.id for c in to_external_checks(results)] == ["0", "1", "2", "3", "4"]
