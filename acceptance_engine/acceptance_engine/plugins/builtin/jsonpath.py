"""Built-in check: assertions on values selected from a JSON document.

Expressions use the jsonpath-ng extended grammar (``$.a.b``, ``$..id``,
``$.items[*].name``, filters such as ``$.items[?(@.enabled == true)]``).
"""

from __future__ import annotations

import json
import logging
from typing import Any

from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError
from jsonpath_ng.ext import parse as parse_jsonpath

from acceptance_engine.errors import FileAccessError
from acceptance_engine.plugins import files
from acceptance_engine.plugins.base import BasePluginCheck, fmt_bool, truncate
from acceptance_engine.plugins.models import JsonPathPlugin, PluginContext, PluginKind, PluginResult

logger = logging.getLogger(__name__)

# Share of the evidence budget given to the rendered match list.
_VALUES_PREVIEW_CHARS = 200


def deep_equal(left: Any, right: Any) -> bool:
    """Structural equality over JSON values.

    Arrays compare element-wise in order, objects by key set regardless of
    key order.  Booleans never equal numbers, while ``1`` equals ``1.0``.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(deep_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(deep_equal(left[key], right[key]) for key in left)
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return False


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


class JsonPathCheck(BasePluginCheck):
    """Assert that a JSONPath selects something, nothing, or a given value."""

    @property
    def kind(self) -> PluginKind:
        return PluginKind.JSONPATH

    async def execute(self, context: PluginContext, definition: JsonPathPlugin) -> PluginResult:
        title = (
            f"jsonpath {definition.path} equals expected in {definition.file}"
            if definition.has_equals
            else f"jsonpath {definition.path} in {definition.file}"
        )

        try:
            document = await files.read_json(context.root, definition.file)
        except FileAccessError as exc:
            return self.make_result(
                definition, passed=False, evidence=f"Cannot read JSON: {exc.message}", default_title=title
            )
        except (json.JSONDecodeError, RecursionError) as exc:
            return self.make_result(
                definition,
                passed=False,
                evidence=f"Cannot parse JSON in {definition.file}: {exc}",
                default_title=title,
            )

        try:
            expression = parse_jsonpath(definition.path)
        except (JsonPathLexerError, JsonPathParserError) as exc:
            return self.make_result(
                definition,
                passed=False,
                evidence=f"Invalid JSONPath expression {definition.path!r}: {exc}",
                default_title=title,
            )

        values = [match.value for match in expression.find(document)]
        count = len(values)
        logger.debug("jsonpath %s matched %d value(s)", definition.id, count)

        if definition.has_equals:
            found = any(deep_equal(value, definition.equals) for value in values)
            evidence = (
                f"path={definition.path} matches={count} equals={_dump(definition.equals)} "
                f"found={fmt_bool(found)} values={truncate(_dump(values), _VALUES_PREVIEW_CHARS)}"
            )
            return self.make_result(
                definition,
                passed=found,
                evidence=truncate(evidence, context.evidence_max_chars),
                default_title=title,
            )

        passed = count > 0 if definition.exists else count == 0
        return self.make_result(
            definition,
            passed=passed,
            evidence=f"path={definition.path} matches={count} exists={fmt_bool(definition.exists)}",
            default_title=title,
        )
