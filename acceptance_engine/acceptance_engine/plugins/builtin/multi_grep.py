"""Built-in check: several grep sub-checks combined with ``all`` or ``any``."""

from __future__ import annotations

import logging

from acceptance_engine.plugins.base import BasePluginCheck, combine, truncate
from acceptance_engine.plugins.builtin.grep import GrepOutcome, evaluate_grep
from acceptance_engine.plugins.models import MultiGrepPlugin, PluginContext, PluginKind, PluginResult

logger = logging.getLogger(__name__)


class MultiGrepCheck(BasePluginCheck):
    """Evaluate every sub-check, then aggregate by ``mode``.

    Sub-checks are never short-circuited so that the evidence always
    covers each one, even once the aggregate is decided.
    """

    @property
    def kind(self) -> PluginKind:
        return PluginKind.MULTI_GREP

    async def execute(self, context: PluginContext, definition: MultiGrepPlugin) -> PluginResult:
        outcomes: list[tuple[str, GrepOutcome]] = []
        for item in definition.checks:
            outcome = await evaluate_grep(
                context,
                file=item.file,
                pattern=item.pattern,
                flags=item.flags,
                must_exist=item.must_exist,
            )
            outcomes.append((item.display_label, outcome))

        passed = combine((outcome.passed for _, outcome in outcomes), definition.mode)

        failures = [f"{label}: {outcome.evidence}" for label, outcome in outcomes if not outcome.passed]
        if failures:
            evidence = f"mode={definition.mode} failed {len(failures)}/{len(outcomes)}: " + " | ".join(failures)
        else:
            evidence = f"mode={definition.mode} all {len(outcomes)} sub-check(s) passed"

        logger.debug("multi_grep %s: %d/%d sub-check(s) failed", definition.id, len(failures), len(outcomes))
        return self.make_result(
            definition,
            passed=passed,
            evidence=truncate(evidence, context.evidence_max_chars),
            default_title=f"multi_grep ({definition.mode})",
        )
