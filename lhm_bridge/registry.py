from __future__ import annotations

import logging
from typing import Callable, Hashable

from lhm_bridge.sensor_index import SensorIndex


class SourceNotFoundError(LookupError):
    """Raised when a reading names a source that was never declared."""


class SourceRegistry:
    """Sensor indexes keyed by display scope and optional source name.

    Readings that name no source share the scope's default index, created by
    the first of them to ask for it.
    """

    def __init__(self) -> None:
        self._named: dict[tuple[Hashable, str], SensorIndex] = {}
        self._defaults: dict[Hashable, SensorIndex] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def _key(scope: Hashable, name: str) -> tuple[Hashable, str]:
        return scope, name.casefold()

    def register(self, scope: Hashable, name: str, index: SensorIndex) -> SensorIndex:
        key = self._key(scope, name)
        previous = self._named.get(key)
        if previous is not None and previous is not index:
            previous.dispose()
        self._named[key] = index
        self.logger.debug("Registered source %r in scope %r: %r", name, scope, index)
        return index

    def lookup(self, scope: Hashable, name: str) -> SensorIndex:
        try:
            return self._named[self._key(scope, name)]
        except KeyError:
            raise SourceNotFoundError(
                f"No source named {name!r} in scope {scope!r}"
            ) from None

    def get(self, scope: Hashable, name: str) -> SensorIndex | None:
        return self._named.get(self._key(scope, name))

    def default(self, scope: Hashable, factory: Callable[[], SensorIndex]) -> SensorIndex:
        index = self._defaults.get(scope)
        if index is None:
            index = factory()
            self._defaults[scope] = index
            self.logger.debug("Created default source for scope %r: %r", scope, index)
        return index

    def remove(self, scope: Hashable, name: str | None = None) -> None:
        """Dispose and forget one named source, or the scope default if no name."""
        if name is None:
            index = self._defaults.pop(scope, None)
        else:
            index = self._named.pop(self._key(scope, name), None)
        if index is not None:
            index.dispose()

    def dispose_scope(self, scope: Hashable) -> None:
        for key in [key for key in self._named if key[0] == scope]:
            self._named.pop(key).dispose()
        self.remove(scope)

    def __contains__(self, item: tuple[Hashable, str | None]) -> bool:
        scope, name = item
        if name is None:
            return scope in self._defaults
        return self._key(scope, name) in self._named
