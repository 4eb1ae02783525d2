"""Built-in check: count files matching a glob, optionally grepping each.

Expansion uses :mod:`wcmatch` rooted at the project directory, with ``**``
and brace expansion enabled and directories excluded from the matches.
Dotfiles are matched only when the definition sets ``dot``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from wcmatch import glob as wcglob

from acceptance_engine.errors import FileAccessError, PatternCompileError
from acceptance_engine.plugins import files
from acceptance_engine.plugins.base import BasePluginCheck, combine, fmt_bool, search_timeout_text, truncate
from acceptance_engine.plugins.models import GlobEachGrep, GlobPlugin, PluginContext, PluginKind, PluginResult
from acceptance_engine.plugins.patterns import compile_pattern, search

logger = logging.getLogger(__name__)

_BASE_FLAGS = wcglob.GLOBSTAR | wcglob.BRACE | wcglob.NODIR

# Failing files named in the evidence before eliding the rest.
_MAX_LISTED_FAILURES = 10


def expand_glob(root: Path, pattern: str, ignore: list[str], dot: bool) -> list[str]:
    """Return matching file paths relative to *root*, sorted."""
    flags = _BASE_FLAGS | (wcglob.DOTGLOB if dot else 0)
    matches = wcglob.glob(pattern, flags=flags, root_dir=str(root), exclude=ignore or None)
    return sorted(Path(match).as_posix() for match in matches)


class GlobCheck(BasePluginCheck):
    """Assert a match count range and, optionally, a pattern in each match."""

    @property
    def kind(self) -> PluginKind:
        return PluginKind.GLOB

    async def execute(self, context: PluginContext, definition: GlobPlugin) -> PluginResult:
        title = f"glob {definition.pattern}"

        try:
            matches = await asyncio.to_thread(
                expand_glob, context.root, definition.pattern, definition.ignore, definition.dot
            )
        except (OSError, ValueError) as exc:
            return self.make_result(
                definition,
                passed=False,
                evidence=f"Glob expansion failed for {definition.pattern}: {exc}",
                default_title=title,
            )

        count = len(matches)
        count_ok = (definition.min is None or count >= definition.min) and (
            definition.max is None or count <= definition.max
        )

        parts = [f"count={count}"]
        if definition.min is not None:
            parts.append(f"min={definition.min}")
        if definition.max is not None:
            parts.append(f"max={definition.max}")
        parts.append(f"count_ok={fmt_bool(count_ok)}")

        grep_ok = True
        if definition.each_grep is not None and count > 0:
            each_grep = definition.each_grep
            try:
                compiled = compile_pattern(each_grep.pattern, each_grep.flags)
            except PatternCompileError as exc:
                # A broken configuration fails outright, whatever the count.
                return self.make_result(
                    definition,
                    passed=False,
                    evidence=truncate(f"each_grep {exc.message}", context.evidence_max_chars),
                    default_title=title,
                )

            file_passes: list[tuple[str, bool]] = []
            for match in matches:
                try:
                    content = await files.read_text(context.root, match)
                except FileAccessError:
                    logger.debug("glob %s: %s vanished before it could be read", definition.id, match)
                    found = False
                else:
                    try:
                        found = await search(compiled, content, context.search_timeout)
                    except TimeoutError:
                        return self.make_result(
                            definition,
                            passed=False,
                            evidence=truncate(
                                f"each_grep /{each_grep.pattern}/{each_grep.flags} file={match} "
                                f"{search_timeout_text(context)}",
                                context.evidence_max_chars,
                            ),
                            default_title=title,
                        )
                file_passes.append((match, found if each_grep.must_exist else not found))

            grep_ok = combine((ok for _, ok in file_passes), definition.each_mode)
            parts.append(self._each_grep_evidence(each_grep, definition.each_mode, grep_ok, file_passes))

        return self.make_result(
            definition,
            passed=count_ok and grep_ok,
            evidence=truncate(" | ".join(parts), context.evidence_max_chars),
            default_title=title,
        )

    @staticmethod
    def _each_grep_evidence(
        each_grep: GlobEachGrep,
        mode: str,
        grep_ok: bool,
        file_passes: list[tuple[str, bool]],
    ) -> str:
        passed = sum(1 for _, ok in file_passes if ok)
        text = (
            f"each_grep=/{each_grep.pattern}/{each_grep.flags} must_exist={fmt_bool(each_grep.must_exist)} "
            f"mode={mode} passed={passed}/{len(file_passes)} grep_ok={fmt_bool(grep_ok)}"
        )
        failing = [path for path, ok in file_passes if not ok]
        if failing:
            listed = ", ".join(failing[:_MAX_LISTED_FAILURES])
            if len(failing) > _MAX_LISTED_FAILURES:
                listed += f", +{len(failing) - _MAX_LISTED_FAILURES} more"
            text += f" failing: {listed}"
        return text
