"""Built-in check implementations, one per plugin kind."""

from acceptance_engine.plugins.builtin.file_exists import FileExistsCheck
from acceptance_engine.plugins.builtin.glob import GlobCheck
from acceptance_engine.plugins.builtin.grep import GrepCheck
from acceptance_engine.plugins.builtin.jsonpath import JsonPathCheck
from acceptance_engine.plugins.builtin.multi_grep import MultiGrepCheck

__all__ = [
    "FileExistsCheck",
    "GlobCheck",
    "GrepCheck",
    "JsonPathCheck",
    "MultiGrepCheck",
]
