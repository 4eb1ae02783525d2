"""Validate raw JSON values into typed plugin definitions.

:func:`validate_plugin` is total: whatever ``json.loads`` produced, it
returns a :class:`PluginValidation` holding either a definition (with all
documented defaults applied) or the list of schema violations.  It performs
no I/O.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import ErrorDetails

from acceptance_engine.errors import DefinitionValidationError
from acceptance_engine.plugins.models import (
    PluginDefinition,
    PluginKind,
    PluginValidation,
    ValidationIssue,
)

_PLUGIN_ADAPTER: TypeAdapter[Any] = TypeAdapter(PluginDefinition)

_VALID_KINDS = ", ".join(kind.value for kind in PluginKind)

# Pydantic error types raised by the ``kind`` discriminator itself.
_TAG_ERROR_TYPES: frozenset[str] = frozenset({"union_tag_invalid", "union_tag_not_found"})


def _issue_from_error(error: ErrorDetails, kind: object) -> ValidationIssue:
    loc_parts = list(error["loc"])
    # Errors inside a variant are prefixed with the tag; drop it.
    if loc_parts and isinstance(kind, str) and loc_parts[0] == kind:
        loc_parts = loc_parts[1:]
    loc = ".".join(str(part) for part in loc_parts)
    offending = error.get("input")

    if error["type"] in _TAG_ERROR_TYPES:
        if error["type"] == "union_tag_not_found":
            message = f"Missing 'kind'; expected one of: {_VALID_KINDS}"
        else:
            message = f"Unknown plugin kind {kind!r}; expected one of: {_VALID_KINDS}"
        return ValidationIssue(
            loc=loc or "kind",
            message=message,
            type=error["type"],
            input_type=type(kind).__name__ if error["type"] == "union_tag_invalid" else "missing",
            expected=_VALID_KINDS,
        )

    ctx = error.get("ctx") or {}
    expected = ctx.get("expected")
    return ValidationIssue(
        loc=loc,
        message=error["msg"],
        type=error["type"],
        input_type=type(offending).__name__,
        expected=str(expected) if expected is not None else None,
    )


def validate_plugin(raw: object) -> PluginValidation:
    """Validate one parsed JSON value as a plugin definition.

    Parameters
    ----------
    raw:
        Any value produced by ``json.loads``.

    Returns
    -------
    PluginValidation
        ``definition`` is set on success; otherwise ``issues`` lists every
        violation found.  Never raises for malformed input.
    """
    if not isinstance(raw, dict):
        return PluginValidation(
            issues=[
                ValidationIssue(
                    loc="",
                    message="Plugin definition must be a JSON object",
                    type="model_type",
                    input_type=type(raw).__name__,
                    expected="object",
                )
            ]
        )

    try:
        definition = _PLUGIN_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        kind = raw.get("kind")
        return PluginValidation(issues=[_issue_from_error(err, kind) for err in exc.errors()])

    return PluginValidation(definition=definition)


def parse_plugin(raw: object, source: str | None = None) -> PluginDefinition:
    """Validate *raw* and return the definition, raising on failure.

    Raises
    ------
    DefinitionValidationError
        If *raw* is not a valid plugin definition.
    """
    validation = validate_plugin(raw)
    if validation.definition is None:
        raise DefinitionValidationError(validation.issues, source=source)
    return validation.definition
