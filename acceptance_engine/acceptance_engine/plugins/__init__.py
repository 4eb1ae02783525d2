"""Declarative acceptance-check plugins.

Plugin definitions are JSON files describing deterministic checks against
a project's files: pattern presence or absence (``grep``, ``multi_grep``),
path existence (``file_exists``), JSONPath assertions (``jsonpath``) and
globbed file counts with optional per-file grep (``glob``).

Quick start::

    from acceptance_engine.plugins import run_plugins

    report = await run_plugins(project_root)
    for result in report.results:
        print(result.id, result.status.value, result.evidence)
"""

from acceptance_engine.plugins.base import BasePluginCheck
from acceptance_engine.plugins.engine import (
    PluginEngine,
    create_default_engine,
    run_plugins,
    to_external_checks,
)
from acceptance_engine.plugins.loader import LoadedPlugins, load_plugins
from acceptance_engine.plugins.models import (
    Diagnostic,
    ExternalCheck,
    FileExistsPlugin,
    GlobPlugin,
    GrepPlugin,
    JsonPathPlugin,
    MultiGrepPlugin,
    PluginContext,
    PluginDefinition,
    PluginKind,
    PluginResult,
    PluginRunReport,
    PluginStatus,
    ValidationIssue,
)
from acceptance_engine.plugins.registry import PluginCheckRegistry
from acceptance_engine.plugins.timeout import with_timeout
from acceptance_engine.plugins.validator import parse_plugin, validate_plugin

__all__ = [
    "BasePluginCheck",
    "Diagnostic",
    "ExternalCheck",
    "FileExistsPlugin",
    "GlobPlugin",
    "GrepPlugin",
    "JsonPathPlugin",
    "LoadedPlugins",
    "MultiGrepPlugin",
    "PluginCheckRegistry",
    "PluginContext",
    "PluginDefinition",
    "PluginEngine",
    "PluginKind",
    "PluginResult",
    "PluginRunReport",
    "PluginStatus",
    "ValidationIssue",
    "create_default_engine",
    "load_plugins",
    "parse_plugin",
    "run_plugins",
    "to_external_checks",
    "validate_plugin",
    "with_timeout",
]
