"""Built-in check: a path must (or must not) exist."""

from __future__ import annotations

from acceptance_engine.plugins import files
from acceptance_engine.plugins.base import BasePluginCheck, fmt_bool
from acceptance_engine.plugins.models import FileExistsPlugin, PluginContext, PluginKind, PluginResult


class FileExistsCheck(BasePluginCheck):
    """Existence test only; the file is never opened."""

    @property
    def kind(self) -> PluginKind:
        return PluginKind.FILE_EXISTS

    async def execute(self, context: PluginContext, definition: FileExistsPlugin) -> PluginResult:
        exists = await files.exists(context.root, definition.file)
        should_exist = definition.should_exist
        verb = "exists" if should_exist else "does not exist"
        return self.make_result(
            definition,
            passed=exists == should_exist,
            evidence=f"file={definition.file} exists={fmt_bool(exists)} should_exist={fmt_bool(should_exist)}",
            default_title=f"file {verb}: {definition.file}",
        )
