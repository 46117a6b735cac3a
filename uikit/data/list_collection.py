# uikit/data/list_collection.py
"""
FlatObservableCollection - observable, optionally filtered/sorted list view.

Wraps one caller-owned mutable sequence (the raw source). When a filter or a
comparator is configured, a cached visible view of references into the raw
source sits in front of it; otherwise every call passes straight through.

Indices given to and returned from this class are always in the visible
coordinate space. contains() is the one exception: it answers for the raw
source, whatever the filter says.

Usage:
    people = FlatObservableCollection([ada, grace, linus])
    people.connect(ADD_ITEM, list_view.on_add_item)
    people.filter_function = lambda p: p.active
    people.add_item_at(ken, 0)
"""

from __future__ import annotations
from collections.abc import MutableSequence
from typing import Any, Callable, Iterable, Iterator, List, Optional
import logging

from uikit.core.signal import Connection
from uikit.data.config import CollectionConfig
from uikit.data.errors import InvalidDataTypeError
from uikit.data.events import (
    ADD_ITEM, REMOVE_ITEM, REPLACE_ITEM, RESET, REMOVE_ALL,
    UPDATE_ITEM, UPDATE_ALL, dispatch_structural,
)
from uikit.data.location import NOT_FOUND, check_index, index_of
from uikit.data.view import FilterSortView, FilterFunction, CompareFunction

logger = logging.getLogger(__name__)


class FlatObservableCollection:
    """Observable list collection over a flat raw source."""

    def __init__(
        self,
        data: MutableSequence = None,
        filter_function: FilterFunction = None,
        sort_compare_function: CompareFunction = None,
        config: CollectionConfig = None,
    ):
        if data is None:
            data = []
        if not isinstance(data, MutableSequence):
            raise InvalidDataTypeError("a mutable sequence", data)

        self.config = config or CollectionConfig()
        self.signals = self.config.create_bridge()
        self._data = data
        self._view = FilterSortView(self.signals, filter_function, sort_compare_function)
        self._cache: Optional[List[Any]] = None

    def connect(self, event: str, handler: Callable) -> Connection:
        return self.signals.connect(event, handler)

    # -------------------------------------------------------------------------
    # View configuration
    # -------------------------------------------------------------------------

    @property
    def data(self) -> MutableSequence:
        """The raw source, unfiltered and unsorted."""
        return self._data

    @property
    def filter_function(self) -> Optional[FilterFunction]:
        return self._view.filter_function

    @filter_function.setter
    def filter_function(self, value: Optional[FilterFunction]):
        self._view.filter_function = value

    @property
    def sort_compare_function(self) -> Optional[CompareFunction]:
        return self._view.sort_compare_function

    @sort_compare_function.setter
    def sort_compare_function(self, value: Optional[CompareFunction]):
        self._view.sort_compare_function = value

    def refresh(self):
        self._view.refresh()

    def _ensure_view(self) -> Optional[List[Any]]:
        """Rebuild the cache if pending; None means no view is configured."""
        if self._view.pending:
            # a filter or comparator that raises leaves the view pending
            self._cache = self._view.build(self._data)
            self._view.mark_clean()
            if self._cache is not None:
                logger.debug(f"Rebuilt view: {len(self._cache)} of {len(self._data)} items visible")
        return self._cache

    def _visible(self):
        cache = self._ensure_view()
        return self._data if cache is None else cache

    def _raw_insertion_index(self, cache: List[Any], index: int) -> int:
        """Raw position in front of the visible item at index, or the raw end."""
        if 0 <= index < len(cache):
            raw_index = index_of(self._data, cache[index])
            if raw_index != NOT_FOUND:
                return raw_index
        return len(self._data)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    @property
    def length(self) -> int:
        return len(self._visible())

    def __len__(self) -> int:
        return self.length

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._visible()))

    def __contains__(self, item: Any) -> bool:
        return self.contains(item)

    def get_item_at(self, index: int) -> Any:
        """Visible item at index, or None when index is out of range."""
        items = self._visible()
        if 0 <= index < len(items):
            return items[index]
        return None

    def get_item_index(self, item: Any) -> int:
        """Visible index of item; NOT_FOUND when absent or filtered out."""
        return index_of(self._visible(), item)

    def contains(self, item: Any) -> bool:
        """Raw membership, independent of the filter."""
        return index_of(self._data, item) != NOT_FOUND

    # -------------------------------------------------------------------------
    # Item mutation
    # -------------------------------------------------------------------------

    def add_item_at(self, item: Any, index: int):
        """Insert item at a visible index.

        An item rejected by the filter still lands in the raw source but
        produces no events, since no visible row appeared.
        """
        cache = self._ensure_view()
        if cache is None:
            index = max(0, min(index, len(self._data)))
            self._data.insert(index, item)
            dispatch_structural(self.signals, ADD_ITEM, index)
            return

        self._data.insert(self._raw_insertion_index(cache, index), item)
        if not self._view.includes(item):
            return
        visible_index = self._view.insertion_index(cache, item, index)
        cache.insert(visible_index, item)
        dispatch_structural(self.signals, ADD_ITEM, visible_index)

    def remove_item_at(self, index: int) -> Any:
        cache = self._ensure_view()
        if cache is None:
            check_index(index, len(self._data))
            item = self._data.pop(index)
        else:
            check_index(index, len(cache))
            item = cache.pop(index)
            raw_index = index_of(self._data, item)
            if raw_index != NOT_FOUND:
                del self._data[raw_index]
        dispatch_structural(self.signals, REMOVE_ITEM, index)
        return item

    def remove_item(self, item: Any):
        """Remove a visible item; no-op when it is absent or filtered out."""
        index = self.get_item_index(item)
        if index != NOT_FOUND:
            self.remove_item_at(index)

    def set_item_at(self, item: Any, index: int):
        """Replace the visible item at index.

        With a comparator active the replacement moves to its sorted position
        (the REPLACE_ITEM payload stays index), so the visible view is always
        sorted. Without one it takes the old item's place.
        """
        cache = self._ensure_view()
        if cache is None:
            check_index(index, len(self._data))
            self._data[index] = item
            dispatch_structural(self.signals, REPLACE_ITEM, index)
            return

        check_index(index, len(cache))
        raw_index = index_of(self._data, cache[index])
        if raw_index != NOT_FOUND:
            self._data[raw_index] = item
        else:
            self._data.append(item)

        if not self._view.includes(item):
            # visible -> hidden is a removal as far as observers are concerned
            del cache[index]
            dispatch_structural(self.signals, REMOVE_ITEM, index)
            return

        if self._view.sort_compare_function is not None:
            del cache[index]
            cache.insert(self._view.insertion_index(cache, item, index), item)
        else:
            cache[index] = item
        # payload stays the pre-move index even when sorting moved the item
        dispatch_structural(self.signals, REPLACE_ITEM, index)

    def push(self, item: Any):
        self.add_item_at(item, self.length)

    def pop(self) -> Any:
        size = self.length
        if size == 0:
            return None
        return self.remove_item_at(size - 1)

    def unshift(self, item: Any):
        self.add_item_at(item, 0)

    def shift(self) -> Any:
        if self.length == 0:
            return None
        return self.remove_item_at(0)

    def update_item_at(self, index: int):
        """Ask renderers to redraw the item at index after an in-place property change."""
        self.signals.emit(UPDATE_ITEM, index)

    def update_all(self):
        self.signals.emit(UPDATE_ALL)

    # -------------------------------------------------------------------------
    # Bulk mutation
    # -------------------------------------------------------------------------

    def add_all(self, items: Iterable[Any]):
        self.add_all_at(items, self.length)

    def add_all_at(self, items: Iterable[Any], index: int):
        """Splice items into the raw source in front of the visible item at index.

        The view is only marked pending; it is rebuilt once on the next read.
        """
        items = list(items)
        if not items:
            return
        cache = self._ensure_view()
        if cache is None:
            raw_index = max(0, min(index, len(self._data)))
        else:
            raw_index = self._raw_insertion_index(cache, index)
        for offset, item in enumerate(items):
            self._data.insert(raw_index + offset, item)
        self._view.invalidate()
        logger.debug(f"Added {len(items)} items at raw index {raw_index}")
        dispatch_structural(self.signals, RESET)

    def reset(self, items: Iterable[Any] = None):
        """Replace the raw contents in place; the raw source object is kept."""
        new_items = list(items) if items is not None else []
        self._data.clear()
        self._data.extend(new_items)
        self._view.invalidate()
        dispatch_structural(self.signals, RESET)

    def remove_all(self):
        """Remove every visible item (all items when no filter is active)."""
        cache = self._ensure_view()
        if cache is None:
            if not self._data:
                return
            self._data.clear()
        else:
            if not cache:
                return
            if self._view.filter_function is None:
                self._data.clear()
            else:
                for item in cache:
                    raw_index = index_of(self._data, item)
                    if raw_index != NOT_FOUND:
                        del self._data[raw_index]
            cache.clear()
        dispatch_structural(self.signals, REMOVE_ALL)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def dispose(self, dispose_item: Callable[[Any], None] = None):
        """Tear down: drop the filter, then hand every raw item to dispose_item in raw order."""
        self.filter_function = None
        self._ensure_view()
        if dispose_item is None:
            return
        items = list(self._data)
        for item in items:
            dispose_item(item)
        logger.debug(f"Disposed {len(items)} items")
