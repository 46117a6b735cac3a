# uikit/data/location.py
"""
Locations and item identity.

A Location is a tuple of indices from the root level down to a node:
location[:-1] walks branches, location[-1] picks the item inside the
innermost branch. Locations are snapshots; any structural mutation at or
above the path invalidates them.
"""

from __future__ import annotations
from typing import Any, Iterable, Sequence, Tuple, Union
import numbers

import numpy as np


Location = Tuple[int, ...]
LocationLike = Union[None, int, Sequence[int]]

# Returned by index lookups for items that are absent or filtered out
NOT_FOUND = -1

EMPTY_LOCATION: Location = ()

_VALUE_TYPES = (numbers.Number, str, bytes, np.generic)


def as_location(value: LocationLike) -> Location:
    """Normalise None, a bare index or any sequence of indices to a Location."""
    if value is None:
        return EMPTY_LOCATION
    if isinstance(value, (int, np.integer)):
        return (int(value),)
    return tuple(int(i) for i in value)


# =============================================================================
# Identity
# =============================================================================

def same_item(a: Any, b: Any) -> bool:
    """Strict equality: value types compare by value, everything else by identity."""
    if a is b:
        return True
    if isinstance(a, _VALUE_TYPES) and isinstance(b, _VALUE_TYPES):
        # bool is a Number; keep True distinct from 1
        if isinstance(a, (bool, np.bool_)) != isinstance(b, (bool, np.bool_)):
            return False
        return bool(a == b)
    return False


def index_of(items: Iterable[Any], item: Any) -> int:
    for i, candidate in enumerate(items):
        if same_item(candidate, item):
            return i
    return NOT_FOUND


def check_index(index: int, size: int):
    if not 0 <= index < size:
        raise IndexError(f"collection index out of range: {index} (length {size})")
