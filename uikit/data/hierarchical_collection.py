# uikit/data/hierarchical_collection.py
"""
HierarchicalPathCollection - observable tree addressed by Location.

Wraps a caller-owned nested raw source and reads/writes it only through a
DataDescriptor, so lists of dicts, nested lists and numpy vectors all go
through the same algorithms.

Filtering and sorting apply at every level: a node is visible when it passes
the filter and so do all of its ancestors, and each branch's visible
children are sorted on their own. Each branch's visible list is cached and
built lazily the first time the branch is read after the view went pending.

Locations given to and returned from this class are in visible coordinates.
contains() and dispose() walk the raw tree instead.

Usage:
    tree = HierarchicalPathCollection([
        {"label": "Fruit", "children": [{"label": "Apple"}]},
    ])
    tree.get_item_location(apple)         # (0, 0)
    tree.add_item_at_location(pear, (0, 1))
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from uikit.core.signal import Connection
from uikit.data.config import CollectionConfig
from uikit.data.descriptors import ChildrenFieldDescriptor, DataDescriptor
from uikit.data.errors import BranchNotFoundError
from uikit.data.events import (
    ADD_ITEM, REMOVE_ITEM, REPLACE_ITEM, RESET, REMOVE_ALL,
    UPDATE_ITEM, UPDATE_ALL, dispatch_structural,
)
from uikit.data.location import (
    EMPTY_LOCATION, NOT_FOUND, Location, LocationLike,
    as_location, check_index, same_item,
)
from uikit.data.view import FilterSortView, FilterFunction, CompareFunction

logger = logging.getLogger(__name__)

# Marks "no item at this position"; None is a legal item value
_MISSING = object()


class HierarchicalPathCollection:
    """Observable hierarchical collection over a nested raw source.

    Internally a branch is referred to by its node; the root level, which has
    no node, is referred to as None.
    """

    def __init__(
        self,
        data: Any = None,
        descriptor: DataDescriptor = None,
        filter_function: FilterFunction = None,
        sort_compare_function: CompareFunction = None,
        config: CollectionConfig = None,
    ):
        self.config = config or CollectionConfig()
        self._descriptor = descriptor or ChildrenFieldDescriptor(self.config.children_field)
        if data is None:
            data = self._descriptor.create()
        self._descriptor.validate(data)

        self.signals = self.config.create_bridge()
        self._data = data
        self._view = FilterSortView(self.signals, filter_function, sort_compare_function)
        self._root_view: Optional[List[Any]] = None
        self._branch_views: Dict[int, Tuple[Any, List[Any]]] = {}

    def connect(self, event: str, handler: Callable) -> Connection:
        return self.signals.connect(event, handler)

    @property
    def data(self) -> Any:
        """The raw root container."""
        return self._data

    @property
    def descriptor(self) -> DataDescriptor:
        return self._descriptor

    # -------------------------------------------------------------------------
    # View configuration
    # -------------------------------------------------------------------------

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

    def _drop_views(self):
        self._root_view = None
        self._branch_views.clear()

    def _visible(self, branch: Any) -> Optional[List[Any]]:
        """Visible children of branch, or None when no view is configured."""
        if self._view.pending:
            # branch views rebuild lazily below, so a failed build is retried on the next read
            self._drop_views()
            self._view.mark_clean()
            logger.debug("Hierarchical view invalidated")
        if not self._view.active:
            return None

        if branch is None:
            if self._root_view is None:
                self._root_view = self._view.build(self._descriptor.iterate(self._data))
            return self._root_view

        entry = self._branch_views.get(id(branch))
        if entry is not None and entry[0] is branch:
            return entry[1]
        visible = self._view.build(self._descriptor.iterate(self._descriptor.get_children(branch)))
        self._branch_views[id(branch)] = (branch, visible)
        return visible

    def _forget_views(self, node: Any):
        """Drop cached views of node and its raw descendants after it left the tree."""
        if not self._branch_views or not self._descriptor.is_branch(node):
            return
        entry = self._branch_views.get(id(node))
        if entry is not None and entry[0] is node:
            del self._branch_views[id(node)]
        for child in self._descriptor.iterate(self._descriptor.get_children(node)):
            self._forget_views(child)

    # -------------------------------------------------------------------------
    # Raw access
    # -------------------------------------------------------------------------

    def _container(self, branch: Any) -> Any:
        if branch is None:
            return self._data
        return self._descriptor.get_children(branch)

    def _editable_container(self, branch: Any) -> Any:
        """Container of branch, checked against the descriptor before it is edited."""
        container = self._container(branch)
        if branch is not None:
            self._descriptor.validate(container)
        return container

    def _store(self, branch: Any, old: Any, new: Any):
        """Write back a container that a fixed-size descriptor reallocated."""
        if new is old:
            return
        if branch is None:
            self._data = new
        else:
            self._descriptor.set_children(branch, new)

    def _length(self, branch: Any) -> int:
        visible = self._visible(branch)
        if visible is not None:
            return len(visible)
        return self._descriptor.length(self._container(branch))

    def _item(self, branch: Any, index: int) -> Any:
        visible = self._visible(branch)
        if visible is not None:
            return visible[index] if 0 <= index < len(visible) else _MISSING
        container = self._container(branch)
        if 0 <= index < self._descriptor.length(container):
            return self._descriptor.get_item_at(container, index)
        return _MISSING

    def _iter_children(self, branch: Any):
        visible = self._visible(branch)
        if visible is not None:
            return iter(list(visible))
        return self._descriptor.iterate(self._container(branch))

    def _resolve_branch(self, path: Location) -> Any:
        """Walk path from the root; every step must land on a branch."""
        branch = None
        for depth, index in enumerate(path):
            node = self._item(branch, index)
            if node is _MISSING or not self._descriptor.is_branch(node):
                raise BranchNotFoundError(path[:depth + 1])
            branch = node
        return branch

    def _split(self, location: LocationLike) -> Tuple[Location, int]:
        loc = as_location(location)
        if not loc:
            raise BranchNotFoundError(loc)
        return loc[:-1], loc[-1]

    def _raw_insertion_index(self, container: Any, visible: List[Any], index: int) -> int:
        if 0 <= index < len(visible):
            raw_index = self._descriptor.index_of(container, visible[index])
            if raw_index != NOT_FOUND:
                return raw_index
        return self._descriptor.length(container)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def is_branch(self, node: Any) -> bool:
        return self._descriptor.is_branch(node)

    @property
    def length(self) -> int:
        """Number of visible items at the root level."""
        return self._length(None)

    def __len__(self) -> int:
        return self.length

    def __contains__(self, item: Any) -> bool:
        return self.contains(item)

    def get_length_at_location(self, location: LocationLike = None) -> int:
        """Child count of the branch at location (the root when location is empty)."""
        return self._length(self._resolve_branch(as_location(location)))

    def get_item_at_location(self, location: LocationLike) -> Any:
        """Item at location, or None for an empty location or an out-of-range final index.

        Raises BranchNotFoundError when an intermediate segment is not a branch.
        """
        loc = as_location(location)
        if not loc:
            return None
        item = self._item(self._resolve_branch(loc[:-1]), loc[-1])
        return None if item is _MISSING else item

    def get_item_location(self, item: Any) -> Location:
        """First visible location holding item, pre-order; () when not found."""
        found = self._find_location(None, EMPTY_LOCATION, item)
        return found if found is not None else EMPTY_LOCATION

    def _find_location(self, branch: Any, prefix: Location, item: Any) -> Optional[Location]:
        for i, node in enumerate(self._iter_children(branch)):
            location = prefix + (i,)
            if same_item(node, item):
                return location
            if self._descriptor.is_branch(node):
                found = self._find_location(node, location, item)
                if found is not None:
                    return found
        return None

    def contains(self, item: Any) -> bool:
        """Raw membership anywhere in the tree, independent of the filter."""
        return self._contains(self._data, item)

    def _contains(self, container: Any, item: Any) -> bool:
        for node in self._descriptor.iterate(container):
            if same_item(node, item):
                return True
            if self._descriptor.is_branch(node) and self._contains(self._descriptor.get_children(node), item):
                return True
        return False

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_item_at_location(self, item: Any, location: LocationLike):
        """Insert item into the branch at location[:-1], at visible index location[-1].

        Like the flat collection, an item the filter rejects is stored but
        announced to nobody.
        """
        parent, index = self._split(location)
        branch = self._resolve_branch(parent)
        container = self._editable_container(branch)
        visible = self._visible(branch)

        if visible is None:
            index = max(0, min(index, self._descriptor.length(container)))
            self._store(branch, container, self._descriptor.insert_at(container, item, index))
            dispatch_structural(self.signals, ADD_ITEM, parent + (index,))
            return

        raw_index = self._raw_insertion_index(container, visible, index)
        self._store(branch, container, self._descriptor.insert_at(container, item, raw_index))
        if not self._view.includes(item):
            return
        visible_index = self._view.insertion_index(visible, item, index)
        visible.insert(visible_index, item)
        dispatch_structural(self.signals, ADD_ITEM, parent + (visible_index,))

    def remove_item_at_location(self, location: LocationLike) -> Any:
        parent, index = self._split(location)
        branch = self._resolve_branch(parent)
        container = self._editable_container(branch)
        visible = self._visible(branch)

        if visible is None:
            check_index(index, self._descriptor.length(container))
            item = self._descriptor.get_item_at(container, index)
            self._store(branch, container, self._descriptor.remove_at(container, index))
        else:
            check_index(index, len(visible))
            item = visible.pop(index)
            raw_index = self._descriptor.index_of(container, item)
            if raw_index != NOT_FOUND:
                self._store(branch, container, self._descriptor.remove_at(container, raw_index))
        self._forget_views(item)
        dispatch_structural(self.signals, REMOVE_ITEM, parent + (index,))
        return item

    def remove_item(self, item: Any):
        """Remove the first visible occurrence of item; no-op when absent."""
        location = self.get_item_location(item)
        if location:
            self.remove_item_at_location(location)

    def set_item_at_location(self, item: Any, location: LocationLike):
        """Replace the visible item at location.

        Under a comparator the replacement is re-sorted within its branch while
        the REPLACE_ITEM payload keeps location, as in the flat collection.
        """
        parent, index = self._split(location)
        location = parent + (index,)
        branch = self._resolve_branch(parent)
        container = self._editable_container(branch)
        visible = self._visible(branch)

        if visible is None:
            check_index(index, self._descriptor.length(container))
            old = self._descriptor.get_item_at(container, index)
            self._descriptor.set_item_at(container, item, index)
            self._forget_views(old)
            dispatch_structural(self.signals, REPLACE_ITEM, location)
            return

        check_index(index, len(visible))
        old = visible[index]
        raw_index = self._descriptor.index_of(container, old)
        if raw_index != NOT_FOUND:
            self._descriptor.set_item_at(container, item, raw_index)
        else:
            size = self._descriptor.length(container)
            self._store(branch, container, self._descriptor.insert_at(container, item, size))
        self._forget_views(old)

        if not self._view.includes(item):
            del visible[index]
            dispatch_structural(self.signals, REMOVE_ITEM, location)
            return

        if self._view.sort_compare_function is not None:
            del visible[index]
            visible.insert(self._view.insertion_index(visible, item, index), item)
        else:
            visible[index] = item
        dispatch_structural(self.signals, REPLACE_ITEM, location)

    def update_item_at_location(self, location: LocationLike):
        """Ask renderers to redraw the item at location after an in-place change."""
        self.signals.emit(UPDATE_ITEM, as_location(location))

    def update_all(self):
        self.signals.emit(UPDATE_ALL)

    def remove_all(self):
        """Empty the root level (only its visible items when a filter is active)."""
        visible = self._visible(None)
        if visible is None:
            if self._descriptor.length(self._data) == 0:
                return
            self._data = self._descriptor.clear(self._data)
        else:
            if not visible:
                return
            if self._view.filter_function is None:
                self._data = self._descriptor.clear(self._data)
            else:
                for item in visible:
                    raw_index = self._descriptor.index_of(self._data, item)
                    if raw_index != NOT_FOUND:
                        self._data = self._descriptor.remove_at(self._data, raw_index)
            self._drop_views()
            self._root_view = []
        dispatch_structural(self.signals, REMOVE_ALL)

    def reset(self, data: Any = None):
        """Swap in a new raw root container."""
        if data is None:
            data = self._descriptor.create()
        self._descriptor.validate(data)
        self._data = data
        self._drop_views()
        self._view.invalidate()
        dispatch_structural(self.signals, RESET)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def dispose(
        self,
        dispose_branch: Callable[[Any], None] = None,
        dispose_item: Callable[[Any], None] = None,
    ):
        """Pre-order walk of the raw tree.

        Each branch goes to dispose_branch before any of its descendants;
        each leaf goes to dispose_item. Filtered-out nodes are included.
        """
        self.filter_function = None
        self._visible(None)
        counts = [0, 0]
        self._dispose_children(self._data, dispose_branch, dispose_item, counts)
        logger.debug(f"Disposed {counts[0]} branches, {counts[1]} items")

    def _dispose_children(self, container, dispose_branch, dispose_item, counts):
        for node in list(self._descriptor.iterate(container)):
            if self._descriptor.is_branch(node):
                counts[0] += 1
                if dispose_branch is not None:
                    dispose_branch(node)
                self._dispose_children(self._descriptor.get_children(node), dispose_branch, dispose_item, counts)
            else:
                counts[1] += 1
                if dispose_item is not None:
                    dispose_item(node)
