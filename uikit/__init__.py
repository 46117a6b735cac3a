# uikit/__init__.py
"""
UIKit - observable data collections for list and tree controls.

Core components:
- SignalBridge: Synchronous event routing, owned by each collection
- FlatObservableCollection: Filtered/sorted view over a flat source
- HierarchicalPathCollection: Location-addressed view over a nested source
- DataDescriptor: Adapters for the raw storage behind a tree
"""

from .core import (
    SignalBridge,
    Connection,
    SignalDebugger,
)

from .data import (
    FlatObservableCollection,
    HierarchicalPathCollection,
    FilterSortView,
    CollectionConfig,
    DataDescriptor,
    NestedListDescriptor,
    ChildrenFieldDescriptor,
    VectorDescriptor,
    CollectionError,
    BranchNotFoundError,
    InvalidDataTypeError,
    Location,
    NOT_FOUND,
)

__version__ = '0.1.0'

__all__ = [
    # Signals
    'SignalBridge',
    'Connection',
    'SignalDebugger',

    # Collections
    'FlatObservableCollection',
    'HierarchicalPathCollection',
    'FilterSortView',
    'CollectionConfig',

    # Descriptors
    'DataDescriptor',
    'NestedListDescriptor',
    'ChildrenFieldDescriptor',
    'VectorDescriptor',

    # Errors
    'CollectionError',
    'BranchNotFoundError',
    'InvalidDataTypeError',

    # Locations
    'Location',
    'NOT_FOUND',
]
