"""Built-in check: a regex must (or must not) occur in one file."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from acceptance_engine.errors import FileAccessError, PatternCompileError
from acceptance_engine.plugins import files
from acceptance_engine.plugins.base import BasePluginCheck, fmt_bool, search_timeout_text
from acceptance_engine.plugins.models import GrepPlugin, PluginContext, PluginKind, PluginResult
from acceptance_engine.plugins.patterns import compile_pattern, search

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrepOutcome:
    passed: bool
    evidence: str


async def evaluate_grep(
    context: PluginContext,
    *,
    file: str,
    pattern: str,
    flags: str,
    must_exist: bool,
) -> GrepOutcome:
    """Run the grep algorithm shared by ``grep`` and ``multi_grep``.

    An unreadable file satisfies a ``must_exist=false`` check and fails a
    ``must_exist=true`` one.  An invalid pattern always fails, whatever the
    file contains, and so does a search that outlives
    ``context.search_timeout``.
    """
    try:
        content = await files.read_text(context.root, file)
    except FileAccessError as exc:
        if must_exist:
            return GrepOutcome(False, f"{exc.message}; must_exist=true")
        return GrepOutcome(True, f"{exc.message}; must_exist=false, treated as not found")

    try:
        compiled = compile_pattern(pattern, flags)
    except PatternCompileError as exc:
        return GrepOutcome(False, exc.message)

    try:
        found = await search(compiled, content, context.search_timeout)
    except TimeoutError:
        return GrepOutcome(False, f"pattern=/{pattern}/{flags} file={file} {search_timeout_text(context)}")

    passed = found if must_exist else not found
    evidence = f"pattern=/{pattern}/{flags} file={file} found={fmt_bool(found)} must_exist={fmt_bool(must_exist)}"
    return GrepOutcome(passed, evidence)


class GrepCheck(BasePluginCheck):
    """Assert that a pattern is present in (or absent from) a file."""

    @property
    def kind(self) -> PluginKind:
        return PluginKind.GREP

    async def execute(self, context: PluginContext, definition: GrepPlugin) -> PluginResult:
        outcome = await evaluate_grep(
            context,
            file=definition.file,
            pattern=definition.pattern,
            flags=definition.flags,
            must_exist=definition.must_exist,
        )
        logger.debug("grep %s: passed=%s", definition.id, outcome.passed)
        return self.make_result(
            definition,
            passed=outcome.passed,
            evidence=outcome.evidence,
            default_title=f"grep {definition.pattern} in {definition.file}",
        )
