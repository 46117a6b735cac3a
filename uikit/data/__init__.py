"""
Data Collections

Observable collection layer consumed by list/tree controls:
- list_collection: FlatObservableCollection (flat source, filter/sort view)
- hierarchical_collection: HierarchicalPathCollection (Location addressing)
- descriptors: DataDescriptor adapters for nested raw storage
- view: FilterSortView, the deferred filter/sort state both collections own
- events: event vocabulary and ordering
- location: Location type, NOT_FOUND sentinel, item identity
- errors: BranchNotFoundError, InvalidDataTypeError
- config: CollectionConfig
"""

from uikit.data.config import CollectionConfig
from uikit.data.descriptors import (
    DataDescriptor,
    NestedListDescriptor,
    ChildrenFieldDescriptor,
    VectorDescriptor,
)
from uikit.data.errors import CollectionError, BranchNotFoundError, InvalidDataTypeError
from uikit.data.events import (
    CHANGE, RESET, ADD_ITEM, REMOVE_ITEM, REPLACE_ITEM, REMOVE_ALL,
    UPDATE_ITEM, UPDATE_ALL, FILTER_CHANGE, SORT_CHANGE,
    ALL_EVENTS, STRUCTURAL_EVENTS,
)
from uikit.data.location import Location, NOT_FOUND, EMPTY_LOCATION, as_location, same_item
from uikit.data.view import FilterSortView
from uikit.data.list_collection import FlatObservableCollection
from uikit.data.hierarchical_collection import HierarchicalPathCollection

__all__ = [
    # Collections
    "FlatObservableCollection",
    "HierarchicalPathCollection",
    "FilterSortView",
    "CollectionConfig",
    # Descriptors
    "DataDescriptor",
    "NestedListDescriptor",
    "ChildrenFieldDescriptor",
    "VectorDescriptor",
    # Errors
    "CollectionError",
    "BranchNotFoundError",
    "InvalidDataTypeError",
    # Events
    "CHANGE", "RESET", "ADD_ITEM", "REMOVE_ITEM", "REPLACE_ITEM", "REMOVE_ALL",
    "UPDATE_ITEM", "UPDATE_ALL", "FILTER_CHANGE", "SORT_CHANGE",
    "ALL_EVENTS", "STRUCTURAL_EVENTS",
    # Locations
    "Location", "NOT_FOUND", "EMPTY_LOCATION", "as_location", "same_item",
]
