"""
Core

- signal: SignalBridge observer hub, Connection handles, SignalDebugger
"""

from uikit.core.signal import SignalBridge, Connection, SignalDebugger

__all__ = [
    "SignalBridge",
    "Connection",
    "SignalDebugger",
]
