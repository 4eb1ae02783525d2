"""Read-only file system access for checks.

Every call hands the blocking operation to a worker thread so that a slow
disk never stalls the event loop and the timeout supervisor can still fire.
Paths are resolved against the project root; nothing is ever written.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from acceptance_engine.errors import FileAccessError


def resolve(root: Path, relative: str) -> Path:
    return root / relative


def _read_text_sync(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


async def read_text(root: Path, relative: str) -> str:
    """Read *relative* under *root* as UTF-8 text.

    Raises
    ------
    FileAccessError
        If the file is missing, is a directory, or cannot be read.
    """
    path = resolve(root, relative)
    try:
        return await asyncio.to_thread(_read_text_sync, path)
    except FileNotFoundError as exc:
        raise FileAccessError(relative, "file not found") from exc
    except OSError as exc:
        raise FileAccessError(relative, exc.strerror or str(exc)) from exc
    except ValueError as exc:
        # Embedded NUL bytes and similar unrepresentable paths.
        raise FileAccessError(relative, str(exc)) from exc


async def read_json(root: Path, relative: str) -> Any:
    """Read and parse *relative* as JSON.

    Raises
    ------
    FileAccessError
        If the file cannot be read.
    json.JSONDecodeError
        If the content is not valid JSON.
    RecursionError
        If the document nests too deeply to decode.
    """
    content = await read_text(root, relative)
    return await asyncio.to_thread(json.loads, content)


def _exists_sync(path: Path) -> bool:
    try:
        return path.exists()
    except ValueError:
        return False


async def exists(root: Path, relative: str) -> bool:
    return await asyncio.to_thread(_exists_sync, resolve(root, relative))
