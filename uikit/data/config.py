# uikit/data/config.py
"""
Collection configuration.
"""

from __future__ import annotations
from dataclasses import dataclass

from uikit.core.signal import SignalBridge, SignalDebugger


@dataclass
class CollectionConfig:
    children_field: str = "children"
    raise_handler_errors: bool = False
    log_events: bool = False

    def create_bridge(self) -> SignalBridge:
        """Notifier for one collection instance."""
        bridge = SignalBridge(raise_errors=self.raise_handler_errors)
        if self.log_events:
            SignalDebugger(bridge).watch_all()
        return bridge
