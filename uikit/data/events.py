# uikit/data/events.py
"""
Collection event vocabulary.

Every structural mutation emits exactly one structural event and one CHANGE.
The relative order is fixed per event type (see dispatch_structural) because
some renderers only react to whichever arrives first.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uikit.core.signal import SignalBridge


# =============================================================================
# Event Types
# =============================================================================

CHANGE = 'change'

# Structural
RESET = 'reset'                # ()
ADD_ITEM = 'add_item'          # (index | location)
REMOVE_ITEM = 'remove_item'    # (index | location)
REPLACE_ITEM = 'replace_item'  # (index | location)
REMOVE_ALL = 'remove_all'      # ()

# Caller-driven re-render requests, no state change behind them
UPDATE_ITEM = 'update_item'    # (index | location)
UPDATE_ALL = 'update_all'      # ()

# View configuration
FILTER_CHANGE = 'filter_change'
SORT_CHANGE = 'sort_change'

STRUCTURAL_EVENTS = frozenset({RESET, ADD_ITEM, REMOVE_ITEM, REPLACE_ITEM, REMOVE_ALL})

# Structural events that are announced before the accompanying CHANGE
CHANGE_AFTER = frozenset({REPLACE_ITEM})

ALL_EVENTS = (
    CHANGE, RESET, ADD_ITEM, REMOVE_ITEM, REPLACE_ITEM, REMOVE_ALL,
    UPDATE_ITEM, UPDATE_ALL, FILTER_CHANGE, SORT_CHANGE,
)


# =============================================================================
# Dispatch
# =============================================================================

def dispatch_structural(bridge: SignalBridge, event: str, *payload):
    """Emit a structural event together with its CHANGE, in the fixed order."""
    if event not in STRUCTURAL_EVENTS:
        raise ValueError(f"Not a structural event: {event!r}")
    if event in CHANGE_AFTER:
        bridge.emit(event, *payload)
        bridge.emit(CHANGE)
    else:
        bridge.emit(CHANGE)
        bridge.emit(event, *payload)
