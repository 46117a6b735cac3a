"""Pytest configuration and shared fixtures."""
import pytest

from uikit.data import ALL_EVENTS, CollectionConfig


class EventRecorder:
    """Records every collection event as (name, *payload) tuples."""

    def __init__(self):
        self.events = []
        self.connections = []

    def attach(self, collection):
        for name in ALL_EVENTS:
            self.connections.append(
                collection.connect(name, lambda *args, _name=name: self.events.append((_name,) + args))
            )
        return self

    def names(self):
        return [event[0] for event in self.events]

    def clear(self):
        self.events.clear()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def strict_config():
    """Config that lets handler exceptions reach the test."""
    return CollectionConfig(raise_handler_errors=True)


@pytest.fixture
def tree():
    """Two-level tree: a branch with two leaves, a leaf, an empty branch."""
    return [
        {"label": "fruit", "children": [{"label": "apple"}, {"label": "pear"}]},
        {"label": "bread"},
        {"label": "empty", "children": []},
    ]
