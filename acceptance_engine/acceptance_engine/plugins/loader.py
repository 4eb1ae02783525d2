"""Load plugin definition files from the project's configuration root.

Plugin files are ``*.json`` files in ``<root>/.ctdd/plugins/`` (both names
configurable through :class:`~acceptance_engine.config.EngineSettings`).
Filenames carry no meaning beyond ordering: files are processed sorted by
name so that runs are deterministic.

Typical usage::

    definitions, diagnostics = load_plugins(Path("."))
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NamedTuple

from acceptance_engine.config import EngineSettings
from acceptance_engine.errors import ErrorCode, PluginLoadError
from acceptance_engine.plugins.models import Diagnostic, PluginDefinition
from acceptance_engine.plugins.validator import validate_plugin

logger = logging.getLogger(__name__)


class LoadedPlugins(NamedTuple):
    """Valid definitions plus non-fatal diagnostics, in filename order."""

    definitions: list[PluginDefinition]
    diagnostics: list[Diagnostic]


def _list_plugin_files(plugin_dir: Path) -> list[Path]:
    try:
        entries = list(plugin_dir.iterdir())
    except OSError as exc:
        raise PluginLoadError(str(plugin_dir), exc.strerror or str(exc)) from exc
    return sorted((p for p in entries if p.name.endswith(".json")), key=lambda p: p.name)


def _load_one(path: Path) -> tuple[PluginDefinition | None, Diagnostic | None]:
    name = path.name

    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return None, Diagnostic(
            code=ErrorCode.PLUGIN_LOAD_FAILED,
            message=f"Failed to load plugin {name}: {exc}",
            file=name,
        )

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as exc:
        # Deeply nested documents exhaust the decoder's recursion limit.
        return None, Diagnostic(
            code=ErrorCode.PLUGIN_LOAD_FAILED,
            message=f"Failed to load plugin {name}: invalid JSON ({exc})",
            file=name,
        )

    validation = validate_plugin(data)
    if validation.definition is None:
        details = "; ".join(str(issue) for issue in validation.issues)
        return None, Diagnostic(
            code=ErrorCode.PLUGIN_INVALID_CONFIG,
            message=f"Invalid plugin {name}: {details}",
            file=name,
            issues=validation.issues,
        )

    return validation.definition, None


def load_plugins(root: Path | str, settings: EngineSettings | None = None) -> LoadedPlugins:
    """Discover and validate all plugin definitions under *root*.

    Parameters
    ----------
    root:
        Project root.  The plugin directory is resolved beneath it.
    settings:
        Optional settings overriding the directory layout.

    Returns
    -------
    LoadedPlugins
        ``(definitions, diagnostics)``.  A missing plugin directory yields
        two empty lists; every per-file problem becomes one diagnostic.

    Raises
    ------
    PluginLoadError
        If the plugin directory exists but cannot be enumerated.
    """
    settings = settings or EngineSettings()
    plugin_dir = settings.plugins_dir(root)

    try:
        is_dir = plugin_dir.is_dir()
        exists = is_dir or plugin_dir.exists()
    except OSError as exc:
        diagnostic = Diagnostic(
            code=ErrorCode.PLUGIN_LOAD_FAILED,
            message=f"Cannot access plugin directory {plugin_dir}: {exc}",
        )
        return LoadedPlugins([], [diagnostic])

    if not exists:
        logger.debug("No plugin directory at '%s'.", plugin_dir)
        return LoadedPlugins([], [])

    if not is_dir:
        diagnostic = Diagnostic(
            code=ErrorCode.PLUGIN_LOAD_FAILED,
            message=f"Plugin directory exists but is not a directory: {plugin_dir}",
        )
        return LoadedPlugins([], [diagnostic])

    files = _list_plugin_files(plugin_dir)

    definitions: list[PluginDefinition] = []
    diagnostics: list[Diagnostic] = []
    for path in files:
        definition, diagnostic = _load_one(path)
        if diagnostic is not None:
            diagnostics.append(diagnostic)
        if definition is not None:
            definitions.append(definition)

    logger.debug(
        "Loaded %d plugin definition(s) from '%s' with %d diagnostic(s).",
        len(definitions),
        plugin_dir,
        len(diagnostics),
    )
    return LoadedPlugins(definitions, diagnostics)
