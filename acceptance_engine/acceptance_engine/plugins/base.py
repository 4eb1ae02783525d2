"""Abstract base class for plugin check implementations.

Each check kind has exactly one :class:`BasePluginCheck` subclass, which
the engine looks up by :attr:`BasePluginCheck.kind`.  Implementations are
stateless; the project root and spec arrive in the :class:`PluginContext`
and the definition carries everything else.
"""

from __future__ import annotations

import abc
from collections.abc import Iterable
from typing import Any

from acceptance_engine.plugins.models import (
    CheckMode,
    PluginContext,
    PluginKind,
    PluginResult,
    PluginStatus,
)


class BasePluginCheck(abc.ABC):
    """Abstract base for all check implementations."""

    @property
    @abc.abstractmethod
    def kind(self) -> PluginKind:
        """The definition kind this implementation evaluates."""

    @abc.abstractmethod
    async def execute(self, context: PluginContext, definition: Any) -> PluginResult:
        """Evaluate *definition* against the project and return its result.

        Implementations must fail closed: file, parse and pattern errors
        become a FAIL result (or a PASS where absence is explicitly allowed)
        rather than an exception.
        """

    @staticmethod
    def make_result(
        definition: Any,
        *,
        passed: bool,
        evidence: str | None,
        default_title: str,
    ) -> PluginResult:
        """Build the result record for *definition*."""
        return PluginResult(
            id=definition.display_id,
            plugin_id=definition.id,
            title=definition.title or default_title,
            status=PluginStatus.PASS if passed else PluginStatus.FAIL,
            evidence=evidence,
            related_cuts=definition.related_cuts,
            related_invariants=definition.related_invariants,
        )


def combine(passes: Iterable[bool], mode: CheckMode) -> bool:
    """Aggregate per-item outcomes: ``all`` needs every item, ``any`` one."""
    outcomes = list(passes)
    if mode == "any":
        return any(outcomes)
    return all(outcomes)


def fmt_bool(value: bool) -> str:
    return "true" if value else "false"


def truncate(text: str, limit: int) -> str:
    """Cut *text* to at most *limit* characters, marking the cut."""
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)] + "..."


def search_timeout_text(context: PluginContext) -> str:
    """Evidence for a pattern search cut off by ``context.search_timeout``."""
    limit = context.search_timeout or 0.0
    return f"pattern search timed out after {int(round(limit * 1000))}ms"
