# uikit/data/view.py
"""
FilterSortView - the derived "visible" view shared by both collections.

Holds the filter predicate and 3-way comparator, and the pending flag that
defers recomputation until the next read. Setting both a filter and a
comparator back to back therefore costs a single rebuild.

The view never stores items itself; each collection keeps its own cache
(one list for the flat collection, one list per branch for the hierarchical
one) and asks the view to rebuild or extend it.
"""

from __future__ import annotations
from functools import cmp_to_key
from typing import Any, Callable, Iterable, List, Optional

from uikit.core.signal import SignalBridge
from uikit.data.events import CHANGE, FILTER_CHANGE, SORT_CHANGE


FilterFunction = Callable[[Any], bool]
CompareFunction = Callable[[Any, Any], int]


class FilterSortView:
    """Filter/sort configuration plus the Clean/Pending staleness state."""

    def __init__(
        self,
        bridge: SignalBridge,
        filter_function: FilterFunction = None,
        sort_compare_function: CompareFunction = None,
    ):
        self._bridge = bridge
        self._filter_function = filter_function
        self._sort_compare_function = sort_compare_function
        self._pending = self.active

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def filter_function(self) -> Optional[FilterFunction]:
        return self._filter_function

    @filter_function.setter
    def filter_function(self, value: Optional[FilterFunction]):
        if self._filter_function is value:
            return
        self._filter_function = value
        self._pending = True
        self._bridge.emit(CHANGE)
        self._bridge.emit(FILTER_CHANGE)

    @property
    def sort_compare_function(self) -> Optional[CompareFunction]:
        return self._sort_compare_function

    @sort_compare_function.setter
    def sort_compare_function(self, value: Optional[CompareFunction]):
        if self._sort_compare_function is value:
            return
        self._sort_compare_function = value
        self._pending = True
        self._bridge.emit(CHANGE)
        self._bridge.emit(SORT_CHANGE)

    @property
    def active(self) -> bool:
        """True when a filter or a comparator is configured."""
        return self._filter_function is not None or self._sort_compare_function is not None

    @property
    def pending(self) -> bool:
        return self._pending

    def refresh(self):
        """Re-derive the view on next read, e.g. after the predicate's inputs changed."""
        if not self.active:
            return
        self._pending = True
        self._bridge.emit(CHANGE)
        if self._filter_function is not None:
            self._bridge.emit(FILTER_CHANGE)
        if self._sort_compare_function is not None:
            self._bridge.emit(SORT_CHANGE)

    def invalidate(self):
        """Mark pending without announcing it (bulk mutations announce RESET themselves)."""
        if self.active:
            self._pending = True

    def mark_clean(self):
        """Clear the pending flag once the caller's rebuild has succeeded."""
        self._pending = False

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def includes(self, item: Any) -> bool:
        return self._filter_function is None or bool(self._filter_function(item))

    def build(self, items: Iterable[Any]) -> Optional[List[Any]]:
        """Filtered and sorted list of references, or None when no view is configured."""
        if not self.active:
            return None
        if self._filter_function is not None:
            visible = [item for item in items if self._filter_function(item)]
        else:
            visible = list(items)
        if self._sort_compare_function is not None:
            visible.sort(key=cmp_to_key(self._sort_compare_function))
        return visible

    def insertion_index(self, visible: List[Any], item: Any, requested: int) -> int:
        """Where a newly visible item goes.

        With a comparator: before the first element the item does not sort
        after, so equal elements end up behind the newcomer. Without one: the
        requested position, clamped to the end.
        """
        compare = self._sort_compare_function
        if compare is None:
            return max(0, min(requested, len(visible)))
        for i, other in enumerate(visible):
            if compare(item, other) <= 0:
                return i
        return len(visible)
