"""Structured logging helpers and the load-diagnostics sink.

The engine itself only returns diagnostics as data.  Callers that want them
in a log hand them to :func:`emit_diagnostics`; callers that want one JSON
object per line install :class:`JSONFormatter` via :func:`configure_logging`
(or by setting ``ACCEPTANCE_STRUCTURED_LOGGING=true``).

Output schema per line::

    {
        "timestamp": "2025-05-15T12:34:56.789012+00:00",
        "level": "WARNING",
        "logger": "acceptance_engine.plugins.loader",
        "message": "Invalid plugin bad.json: kind: ...",
        "diagnostic": { ... },       // present for emitted diagnostics
        "exc_info": "Traceback ..."  // present only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import traceback
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from acceptance_engine.config import EngineSettings
from acceptance_engine.plugins.models import Diagnostic

_DEFAULT_SINK = logging.getLogger("acceptance_engine.diagnostics")


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Render *record* as a single JSON line."""
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        diagnostic = getattr(record, "diagnostic", None)
        if diagnostic is not None:
            payload["diagnostic"] = diagnostic

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(settings: EngineSettings) -> None:
    """Install the JSON formatter on the root logger when enabled."""
    if not settings.structured_logging:
        return

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    root_logger.info("Structured JSON logging enabled")


def emit_diagnostics(
    diagnostics: Iterable[Diagnostic],
    logger: logging.Logger | None = None,
) -> int:
    """Log each diagnostic as a WARNING and return how many were written."""
    sink = logger or _DEFAULT_SINK
    count = 0
    for diagnostic in diagnostics:
        sink.warning(
            "%s",
            diagnostic.message,
            extra={"diagnostic": diagnostic.model_dump(mode="json")},
        )
        count += 1
    return count
