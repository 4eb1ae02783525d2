"""Exception hierarchy for the acceptance engine.

Every error carries a stable :class:`ErrorCode` so that callers rendering a
report (or a structured log line) can classify failures without parsing
messages.  Most of these errors never escape the public API: executors and
the engine recover them into FAIL results or load diagnostics.  Only
:class:`PluginLoadError` and :class:`ProjectSpecError` are raised to callers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable identifiers for engine failure classes."""

    PLUGIN_LOAD_FAILED = "E101"
    PLUGIN_EXECUTION_FAILED = "E102"
    PLUGIN_TIMEOUT = "E103"
    PLUGIN_INVALID_CONFIG = "E104"
    FILE_ACCESS = "E106"
    PATTERN_COMPILE = "E107"
    UNKNOWN_KIND = "E108"
    PROJECT_SPEC_INVALID = "E109"


class AcceptanceEngineError(Exception):
    """Base class for all engine errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.PLUGIN_EXECUTION_FAILED,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.context: dict[str, Any] = context or {}


class PluginLoadError(AcceptanceEngineError):
    """Raised when the plugin directory itself cannot be enumerated."""

    def __init__(self, plugin_dir: str, reason: str) -> None:
        super().__init__(
            f"Failed to read plugin directory {plugin_dir}: {reason}",
            ErrorCode.PLUGIN_LOAD_FAILED,
            {"plugin_dir": plugin_dir},
        )


class DefinitionValidationError(AcceptanceEngineError):
    """A raw plugin definition does not match any known check schema."""

    def __init__(self, issues: list[Any], source: str | None = None) -> None:
        rendered = "; ".join(str(issue) for issue in issues) or "invalid definition"
        prefix = f"Invalid plugin {source}" if source else "Invalid plugin definition"
        super().__init__(
            f"{prefix}: {rendered}",
            ErrorCode.PLUGIN_INVALID_CONFIG,
            {"source": source},
        )
        self.issues = list(issues)


class FileAccessError(AcceptanceEngineError):
    """A target file is missing or unreadable during a check."""

    def __init__(self, file: str, reason: str) -> None:
        super().__init__(
            f"Could not read {file}: {reason}",
            ErrorCode.FILE_ACCESS,
            {"file": file},
        )
        self.file = file
        self.reason = reason


class PatternCompileError(AcceptanceEngineError):
    """A grep pattern or its flags failed to compile."""

    def __init__(self, pattern: str, flags: str, reason: str) -> None:
        super().__init__(
            f"Invalid pattern /{pattern}/{flags}: {reason}",
            ErrorCode.PATTERN_COMPILE,
            {"pattern": pattern, "flags": flags},
        )


class ExecutionTimeoutError(AcceptanceEngineError):
    """A single check did not settle within its allotted time."""

    def __init__(self, label: str, timeout: float) -> None:
        timeout_ms = int(round(timeout * 1000))
        super().__init__(
            f'Plugin "{label}" timed out after {timeout_ms}ms',
            ErrorCode.PLUGIN_TIMEOUT,
            {"plugin_id": label, "timeout_ms": timeout_ms},
        )
        self.label = label
        self.timeout = timeout


class UnknownKindError(AcceptanceEngineError):
    """No check implementation is registered for a definition's kind."""

    def __init__(self, kind: object, plugin_id: str) -> None:
        super().__init__(
            f"Unknown plugin kind: {kind}",
            ErrorCode.UNKNOWN_KIND,
            {"plugin_id": plugin_id, "kind": str(kind)},
        )


class ProjectSpecError(AcceptanceEngineError):
    """The project specification file exists but cannot be used."""

    def __init__(self, spec_path: str, reason: str) -> None:
        super().__init__(
            f"Invalid project spec {spec_path}: {reason}",
            ErrorCode.PROJECT_SPEC_INVALID,
            {"spec_path": spec_path},
        )
