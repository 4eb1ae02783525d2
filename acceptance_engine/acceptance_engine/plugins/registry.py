"""Kind-to-implementation lookup used by the plugin engine."""

from __future__ import annotations

import logging

from acceptance_engine.plugins.base import BasePluginCheck
from acceptance_engine.plugins.models import PluginKind

logger = logging.getLogger(__name__)


class PluginCheckRegistry:
    """One :class:`BasePluginCheck` per :class:`PluginKind`.

    Definitions arrive with their ``kind`` as a plain string, so lookups
    accept either form and treat anything unrecognised as unregistered.
    """

    def __init__(self) -> None:
        self._by_kind: dict[PluginKind, BasePluginCheck] = {}

    def register(self, check: BasePluginCheck) -> None:
        """Add *check* under its kind.

        Raises
        ------
        ValueError
            If the kind already has an implementation.
        """
        kind = check.kind
        if kind in self._by_kind:
            existing = type(self._by_kind[kind]).__name__
            raise ValueError(f"Plugin kind {kind.value!r} already registered to {existing}.")
        self._by_kind[kind] = check
        logger.debug("Registered %s for plugin kind %s", type(check).__name__, kind.value)

    def get(self, kind: str | PluginKind) -> BasePluginCheck | None:
        try:
            return self._by_kind.get(PluginKind(kind))
        except ValueError:
            return None

    def get_kinds(self) -> list[PluginKind]:
        """Registered kinds in alphabetical order."""
        return sorted(self._by_kind, key=lambda k: k.value)

    def __len__(self) -> int:
        return len(self._by_kind)

    def __contains__(self, kind: object) -> bool:
        return self.get(kind) is not None if isinstance(kind, str) else False
