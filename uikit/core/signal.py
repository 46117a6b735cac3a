# uikit/core/signal.py
"""
SignalBridge - Observer hub owned by every collection.

Collections never inherit from the bridge; each one embeds its own instance
and routes its change notifications through it. Renderers subscribe with
connect() and keep the returned Connection to unsubscribe later.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional, Set, Tuple
from dataclasses import dataclass
from itertools import count
from weakref import ref
import logging

logger = logging.getLogger(__name__)

Tracer = Callable[[str, Tuple[Any, ...], Dict[str, Any]], None]


# =============================================================================
# Connection Handle
# =============================================================================

@dataclass
class Connection:
    """Returned by connect(); disconnecting twice is harmless."""
    signal: str
    handler_id: int
    bridge: Optional[SignalBridge] = None

    @property
    def connected(self) -> bool:
        return self.bridge is not None

    def disconnect(self):
        bridge, self.bridge = self.bridge, None
        if bridge is not None:
            bridge._release(self.signal, self.handler_id)


# =============================================================================
# Signal Bridge
# =============================================================================

class SignalBridge:
    """Synchronous signal routing.

    Handlers run on the caller's thread, in connection order, before emit()
    returns. A handler that raises is logged and skipped unless the bridge
    was built with raise_errors=True.

    Disconnecting from inside a handler takes effect once the outermost
    emit() has finished; handlers already scheduled for that emit still run.
    """

    def __init__(self, raise_errors: bool = False):
        self.raise_errors = raise_errors
        self._handlers: Dict[str, Dict[int, Callable]] = {}
        self._ids = count()
        self._blocked: Set[str] = set()
        self._tracers: List[Tracer] = []
        self._depth = 0
        self._released: List[Tuple[str, int]] = []

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def connect(self, signal: str, handler: Callable) -> Connection:
        handler_id = next(self._ids)
        self._handlers.setdefault(signal, {})[handler_id] = handler
        return Connection(signal, handler_id, self)

    def connect_weak(self, signal: str, owner: object, method_name: str) -> Connection:
        """Connect owner.method_name without keeping owner alive."""
        owner_ref = ref(owner)
        connection: Optional[Connection] = None

        def call_owner(*args, **kwargs):
            target = owner_ref()
            if target is None:
                connection.disconnect()
                return
            getattr(target, method_name)(*args, **kwargs)

        connection = self.connect(signal, call_owner)
        return connection

    def disconnect_all(self, signal: str = None):
        if signal is None:
            self._handlers.clear()
        else:
            self._handlers.pop(signal, None)

    def is_connected(self, signal: str) -> bool:
        return self.handler_count(signal) > 0

    def handler_count(self, signal: str) -> int:
        return len(self._handlers.get(signal, ()))

    def _release(self, signal: str, handler_id: int):
        if self._depth:
            self._released.append((signal, handler_id))
            return
        handlers = self._handlers.get(signal)
        if handlers is not None:
            handlers.pop(handler_id, None)

    # -------------------------------------------------------------------------
    # Emission
    # -------------------------------------------------------------------------

    def emit(self, signal: str, *args, **kwargs):
        if signal in self._blocked:
            return
        for tracer in list(self._tracers):
            tracer(signal, args, kwargs)

        handlers = self._handlers.get(signal)
        if not handlers:
            return

        self._depth += 1
        try:
            for handler in list(handlers.values()):
                self._call(signal, handler, args, kwargs)
        finally:
            self._depth -= 1
            if not self._depth:
                self._flush_released()

    def _call(self, signal: str, handler: Callable, args: tuple, kwargs: dict):
        try:
            handler(*args, **kwargs)
        except Exception as e:
            if self.raise_errors:
                raise
            logger.error(f"Signal handler error [{signal}]: {e}")

    def _flush_released(self):
        released, self._released = self._released, []
        for signal, handler_id in released:
            self._release(signal, handler_id)

    def block(self, signal: str):
        self._blocked.add(signal)

    def unblock(self, signal: str):
        self._blocked.discard(signal)

    def is_blocked(self, signal: str) -> bool:
        return signal in self._blocked

    # -------------------------------------------------------------------------
    # Tracing
    # -------------------------------------------------------------------------

    def add_tracer(self, tracer: Tracer):
        """tracer(signal, args, kwargs) sees every unblocked emit, handlers or not."""
        self._tracers.append(tracer)

    def remove_tracer(self, tracer: Tracer):
        if tracer in self._tracers:
            self._tracers.remove(tracer)


# =============================================================================
# Signal Debugger
# =============================================================================

def format_call(signal: str, args: tuple, kwargs: dict) -> str:
    parts = [repr(a) for a in args]
    parts.extend(f"{k}={v!r}" for k, v in kwargs.items())
    return f"{signal}({', '.join(parts)})"


class SignalDebugger:
    """Logs watched signals at DEBUG level as SIGNAL: name(args)."""

    def __init__(self, bridge: SignalBridge):
        self.bridge = bridge
        self._watched: Set[str] = set()
        self._watch_all = False
        bridge.add_tracer(self._trace)

    def watch(self, signal: str):
        self._watched.add(signal)

    def unwatch(self, signal: str):
        self._watched.discard(signal)

    def watch_all(self, enabled: bool = True):
        self._watch_all = enabled

    def _trace(self, signal: str, args: tuple, kwargs: dict):
        if self._watch_all or signal in self._watched:
            logger.debug(f"SIGNAL: {format_call(signal, args, kwargs)}")

    def detach(self):
        self.bridge.remove_tracer(self._trace)
