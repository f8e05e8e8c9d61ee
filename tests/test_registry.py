"""Tests for the per-scope source registry."""
from __future__ import annotations

import pytest

from conftest import FakeSource
from lhm_bridge.registry import SourceNotFoundError, SourceRegistry
from lhm_bridge.sensor_index import SensorIndex


@pytest.fixture
def registry():
    return SourceRegistry()


def _index() -> SensorIndex:
    return SensorIndex(FakeSource())


class TestSourceRegistry:
    """Test named and default source lookup."""

    def test_default_created_once_per_scope(self, registry):
        """Test that unqualified lookups in a scope share one index."""
        created = []

        def factory():
            created.append(_index())
            return created[-1]

        first = registry.default("desktop", factory)
        second = registry.default("desktop", factory)
        assert first is second
        assert len(created) == 1

    def test_defaults_are_per_scope(self, registry):
        """Test that different scopes get different default indexes."""
        assert registry.default("left", _index) is not registry.default("right", _index)

    def test_named_lookup(self, registry):
        """Test registering and looking up a named source case-insensitively."""
        index = registry.register("desktop", "Gaming Rig", _index())
        assert registry.lookup("desktop", "gaming rig") is index
        assert ("desktop", "GAMING RIG") in registry

    def test_named_lookup_is_scoped(self, registry):
        """Test that a named source is not visible from another scope."""
        registry.register("desktop", "Rig", _index())
        with pytest.raises(SourceNotFoundError):
            registry.lookup("laptop", "Rig")

    def test_missing_name_is_an_error(self, registry):
        """Test that an unknown name is not silently defaulted."""
        registry.default("desktop", _index)
        with pytest.raises(SourceNotFoundError, match="Nope"):
            registry.lookup("desktop", "Nope")

    def test_named_does_not_become_default(self, registry):
        """Test that declaring a named source leaves the default untouched."""
        registry.register("desktop", "Rig", _index())
        assert ("desktop", None) not in registry

    def test_reregister_disposes_previous(self, registry):
        """Test that replacing a named source disposes the old index."""
        old = registry.register("desktop", "Rig", _index())
        old.refresh_tree()
        registry.register("desktop", "Rig", _index())
        assert not old.populated

    def test_remove_is_idempotent(self, registry):
        """Test removing named and default sources twice."""
        named = registry.register("desktop", "Rig", _index())
        named.refresh_tree()
        registry.default("desktop", _index)
        registry.remove("desktop", "Rig")
        registry.remove("desktop", "Rig")
        registry.remove("desktop")
        registry.remove("desktop")
        assert not named.populated
        assert ("desktop", "Rig") not in registry
        assert ("desktop", None) not in registry

    def test_dispose_scope(self, registry):
        """Test that disposing a scope removes only that scope's sources."""
        registry.register("desktop", "Rig", _index())
        registry.default("desktop", _index)
        kept = registry.register("laptop", "Rig", _index())
        registry.dispose_scope("desktop")
        registry.dispose_scope("desktop")
        assert ("desktop", "Rig") not in registry
        assert ("desktop", None) not in registry
        assert registry.lookup("laptop", "Rig") is kept
