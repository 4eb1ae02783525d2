"""Plugin Engine -- runs loaded definitions and aggregates their results.

The :class:`PluginEngine` dispatches each definition to the check
registered for its kind, supervises it with :func:`with_timeout`, and
collects one :class:`PluginResult` per definition in definition order.
Definitions run strictly one at a time.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from acceptance_engine.config import EngineSettings
from acceptance_engine.errors import UnknownKindError
from acceptance_engine.plugins.base import BasePluginCheck
from acceptance_engine.plugins.loader import load_plugins
from acceptance_engine.plugins.models import (
    ExternalCheck,
    PluginContext,
    PluginDefinition,
    PluginResult,
    PluginRunReport,
    PluginStatus,
)
from acceptance_engine.plugins.registry import PluginCheckRegistry
from acceptance_engine.plugins.timeout import with_timeout
from acceptance_engine.project_spec import ProjectSpec

logger = logging.getLogger(__name__)


def _failure_result(definition: Any, exc: BaseException) -> PluginResult:
    plugin_id = getattr(definition, "id", "<unknown>")
    return PluginResult(
        id=getattr(definition, "report_as", None) or plugin_id,
        plugin_id=plugin_id,
        title=getattr(definition, "title", "") or f"Plugin {plugin_id}",
        status=PluginStatus.FAIL,
        evidence=str(exc) or type(exc).__name__,
        related_cuts=getattr(definition, "related_cuts", None),
        related_invariants=getattr(definition, "related_invariants", None),
    )


class PluginEngine:
    """Sequential orchestrator for plugin checks.

    Parameters
    ----------
    registry:
        Optional pre-configured registry.  When ``None``, a new
        empty registry is created.
    settings:
        Optional settings supplying the default timeout and evidence cap.
    """

    def __init__(
        self,
        registry: PluginCheckRegistry | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self._registry = registry if registry is not None else PluginCheckRegistry()
        self._settings = settings or EngineSettings()

    @property
    def registry(self) -> PluginCheckRegistry:
        """The check registry backing this engine."""
        return self._registry

    def register(self, check: BasePluginCheck) -> None:
        """Register a check implementation with the engine."""
        self._registry.register(check)

    async def _run_one(self, context: PluginContext, definition: Any, timeout: float) -> PluginResult:
        check = self._registry.get(getattr(definition, "kind", ""))
        if check is None:
            raise UnknownKindError(getattr(definition, "kind", None), getattr(definition, "id", "<unknown>"))
        return await with_timeout(lambda: check.execute(context, definition), timeout, definition.id)

    async def run_all(
        self,
        root: Path | str,
        definitions: Sequence[PluginDefinition],
        timeout: float | None = None,
        spec: ProjectSpec | None = None,
    ) -> list[PluginResult]:
        """Run every definition and return one result each, in order.

        Parameters
        ----------
        root:
            Project root that check paths resolve against.
        definitions:
            Validated definitions, typically from :func:`load_plugins`.
        timeout:
            Per-check timeout in seconds.  Defaults to the configured
            ``plugin_timeout_seconds``.
        spec:
            Optional project specification passed through to checks.

        Returns
        -------
        list[PluginResult]
            Exactly one result per definition.  A check that raises or
            times out yields a FAIL result carrying the error message.
        """
        per_check = timeout if timeout is not None else self._settings.plugin_timeout_seconds
        context = PluginContext(
            root=Path(root),
            spec=spec,
            evidence_max_chars=self._settings.evidence_max_chars,
            # Searches abandoned by the supervisor stop on their own.
            search_timeout=per_check,
        )

        results: list[PluginResult] = []
        for definition in definitions:
            logger.debug("Running plugin: %s", getattr(definition, "id", "<unknown>"))
            try:
                result = await self._run_one(context, definition, per_check)
            except Exception as exc:
                logger.error(
                    "Plugin %s failed: %s",
                    getattr(definition, "id", "<unknown>"),
                    exc,
                )
                result = _failure_result(definition, exc)
            results.append(result)

        logger.info(
            "Ran %d plugin(s): %d passed, %d failed.",
            len(results),
            sum(1 for r in results if r.status == PluginStatus.PASS),
            sum(1 for r in results if r.status == PluginStatus.FAIL),
        )
        return results


def to_external_checks(results: Sequence[PluginResult]) -> list[ExternalCheck]:
    """Reduce results to ``{id, status, evidence}`` records.

    Evidence falls back to the title for results that carry none.
    """
    return [
        ExternalCheck(
            id=r.id,
            status=r.status,
            evidence=r.evidence if r.evidence is not None else r.title,
        )
        for r in results
    ]


def create_default_engine(settings: EngineSettings | None = None) -> PluginEngine:
    """Create a :class:`PluginEngine` with all built-in checks registered."""
    from acceptance_engine.plugins.builtin import (
        FileExistsCheck,
        GlobCheck,
        GrepCheck,
        JsonPathCheck,
        MultiGrepCheck,
    )

    engine = PluginEngine(settings=settings)
    engine.register(GrepCheck())
    engine.register(FileExistsCheck())
    engine.register(JsonPathCheck())
    engine.register(MultiGrepCheck())
    engine.register(GlobCheck())
    return engine


async def run_plugins(
    root: Path | str,
    *,
    settings: EngineSettings | None = None,
    timeout: float | None = None,
    spec: ProjectSpec | None = None,
) -> PluginRunReport:
    """Load the project's plugin definitions and run them all.

    Raises
    ------
    PluginLoadError
        Only if the plugin directory exists but cannot be enumerated.
    """
    settings = settings or EngineSettings()
    definitions, diagnostics = load_plugins(root, settings)
    engine = create_default_engine(settings)
    results = await engine.run_all(root, definitions, timeout=timeout, spec=spec)
    return PluginRunReport(results=results, diagnostics=diagnostics)
