"""Compile and run grep patterns written with JavaScript-style regex flags.

Plugin files are authored with ``pattern`` / ``flags`` pairs such as
``"flags": "im"``.  The flags map onto :mod:`regex` as follows:

* ``i`` -> ``IGNORECASE``
* ``m`` -> ``MULTILINE``
* ``s`` -> ``DOTALL``
* ``y`` (sticky) -> the match must start at the beginning of the content
* ``g``, ``u``, ``d``, ``v`` -> accepted, no effect on a presence test

Any other character, or a repeated flag, is a compile error.

Patterns are hand-authored, so a search may backtrack for a long time.
:func:`search` therefore runs on a worker thread with the GIL released,
which keeps the event loop (and the timeout supervisor) responsive.
"""

from __future__ import annotations

import asyncio

import regex

from acceptance_engine.errors import PatternCompileError

_FLAG_MAP: dict[str, int] = {
    "i": regex.IGNORECASE,
    "m": regex.MULTILINE,
    "s": regex.DOTALL,
}

_NOOP_FLAGS: frozenset[str] = frozenset({"g", "u", "d", "v"})

_STICKY = "y"


def compile_pattern(pattern: str, flags: str = "") -> regex.Pattern:
    """Compile *pattern* with *flags*.

    Raises
    ------
    PatternCompileError
        If a flag is unknown or repeated, or the pattern is invalid.
    """
    seen: set[str] = set()
    re_flags = 0
    sticky = False
    for flag in flags:
        if flag in seen:
            raise PatternCompileError(pattern, flags, f"duplicate flag '{flag}'")
        seen.add(flag)
        if flag in _FLAG_MAP:
            re_flags |= _FLAG_MAP[flag]
        elif flag == _STICKY:
            sticky = True
        elif flag not in _NOOP_FLAGS:
            raise PatternCompileError(pattern, flags, f"unsupported flag '{flag}'")

    source = rf"\A(?:{pattern})" if sticky else pattern
    try:
        return regex.compile(source, re_flags)
    except regex.error as exc:
        raise PatternCompileError(pattern, flags, str(exc)) from exc


async def search(compiled: regex.Pattern, content: str, timeout: float | None = None) -> bool:
    """Return whether *compiled* occurs in *content*.

    Parameters
    ----------
    compiled:
        A pattern from :func:`compile_pattern`.
    content:
        Text to search.
    timeout:
        Upper bound in seconds for the match itself.  ``None`` means no
        bound.  An abandoned search stops once this elapses.

    Raises
    ------
    TimeoutError
        If the match ran longer than *timeout*.
    """
    match = await asyncio.to_thread(compiled.search, content, concurrent=True, timeout=timeout)
    return match is not None
