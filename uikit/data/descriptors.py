# uikit/data/descriptors.py
"""
Data Descriptors

Adapters that let a hierarchical collection walk and edit caller-owned raw
storage through one set of primitive operations:

- NestedListDescriptor: branches are plain lists, e.g. [[1, 2], [3]]
- ChildrenFieldDescriptor: nodes carry their children under a named key or
  attribute, e.g. {"label": "a", "children": [...]}
- VectorDescriptor: like ChildrenFieldDescriptor, with fixed-size numpy
  vectors as child containers

Containers are passed in explicitly. Methods that change a container's size
return the container the caller must keep using: the same object for
growable storage, a freshly allocated one for fixed-size vectors.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping, MutableSequence
from typing import Any, Iterable, Iterator, Optional

import numpy as np

from uikit.data.errors import InvalidDataTypeError
from uikit.data.location import NOT_FOUND, index_of, same_item


# =============================================================================
# Base
# =============================================================================

class DataDescriptor(ABC):
    """Uniform access to one raw storage shape."""

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    @abstractmethod
    def validate(self, container: Any) -> None:
        """Raise InvalidDataTypeError unless container is supported storage."""

    @abstractmethod
    def create(self, items: Iterable[Any] = ()) -> Any:
        """New container holding items."""

    @abstractmethod
    def length(self, container: Any) -> int:
        ...

    @abstractmethod
    def get_item_at(self, container: Any, index: int) -> Any:
        ...

    @abstractmethod
    def set_item_at(self, container: Any, item: Any, index: int) -> None:
        ...

    @abstractmethod
    def insert_at(self, container: Any, item: Any, index: int) -> Any:
        ...

    @abstractmethod
    def remove_at(self, container: Any, index: int) -> Any:
        ...

    @abstractmethod
    def clear(self, container: Any) -> Any:
        ...

    def index_of(self, container: Any, item: Any) -> int:
        return index_of(self.iterate(container), item)

    def iterate(self, container: Any) -> Iterator[Any]:
        for i in range(self.length(container)):
            yield self.get_item_at(container, i)

    # -------------------------------------------------------------------------
    # Branches
    # -------------------------------------------------------------------------

    @abstractmethod
    def is_branch(self, node: Any) -> bool:
        ...

    @abstractmethod
    def get_children(self, node: Any) -> Any:
        ...

    @abstractmethod
    def set_children(self, node: Any, container: Any) -> None:
        ...


# =============================================================================
# List storage
# =============================================================================

class _ListStorage(DataDescriptor):
    """Growable Python sequences, edited in place."""

    def validate(self, container: Any) -> None:
        if not isinstance(container, MutableSequence):
            raise InvalidDataTypeError("a mutable sequence", container)

    def create(self, items: Iterable[Any] = ()) -> list:
        return list(items)

    def length(self, container: MutableSequence) -> int:
        return len(container)

    def get_item_at(self, container: MutableSequence, index: int) -> Any:
        return container[index]

    def set_item_at(self, container: MutableSequence, item: Any, index: int) -> None:
        container[index] = item

    def insert_at(self, container: MutableSequence, item: Any, index: int) -> MutableSequence:
        container.insert(index, item)
        return container

    def remove_at(self, container: MutableSequence, index: int) -> MutableSequence:
        del container[index]
        return container

    def clear(self, container: MutableSequence) -> MutableSequence:
        container.clear()
        return container

    def iterate(self, container: MutableSequence) -> Iterator[Any]:
        return iter(container)


class NestedListDescriptor(_ListStorage):
    """Every list is a branch and is its own children container."""

    def is_branch(self, node: Any) -> bool:
        return isinstance(node, MutableSequence)

    def get_children(self, node: MutableSequence) -> MutableSequence:
        return node

    def set_children(self, node: MutableSequence, container: MutableSequence) -> None:
        if container is not node:
            node[:] = container


class ChildrenFieldDescriptor(_ListStorage):
    """
    Branch marker is a named field.

    A node is a branch when the mapping key (for dicts) or attribute (for
    other objects) named children_field is present and not None, even if the
    children list is empty.
    """

    def __init__(self, children_field: str = "children"):
        self.children_field = children_field

    def _field_value(self, node: Any) -> Optional[Any]:
        if isinstance(node, Mapping):
            return node.get(self.children_field)
        return getattr(node, self.children_field, None)

    def is_branch(self, node: Any) -> bool:
        return self._field_value(node) is not None

    def get_children(self, node: Any) -> Any:
        return self._field_value(node)

    def set_children(self, node: Any, container: Any) -> None:
        if isinstance(node, MutableMapping):
            node[self.children_field] = container
        else:
            setattr(node, self.children_field, container)


# =============================================================================
# Vector storage
# =============================================================================

class VectorDescriptor(ChildrenFieldDescriptor):
    """
    Fixed-size numpy vectors.

    Vectors cannot grow in place, so insert_at/remove_at/clear allocate a new
    array. Object vectors hold arbitrary nodes (and therefore branches);
    numeric vectors only ever hold leaves.
    """

    def __init__(self, children_field: str = "children", dtype: Any = object):
        super().__init__(children_field)
        self.dtype = np.dtype(dtype)

    def validate(self, container: Any) -> None:
        if not isinstance(container, np.ndarray) or container.ndim != 1:
            raise InvalidDataTypeError("a one-dimensional numpy array", container)

    def create(self, items: Iterable[Any] = ()) -> np.ndarray:
        items = list(items)
        vector = np.empty(len(items), dtype=self.dtype)
        for i, item in enumerate(items):
            vector[i] = item
        return vector

    def length(self, container: np.ndarray) -> int:
        return int(container.shape[0])

    def get_item_at(self, container: np.ndarray, index: int) -> Any:
        if index < 0:
            raise IndexError(f"vector index out of range: {index}")
        return container[index]

    def set_item_at(self, container: np.ndarray, item: Any, index: int) -> None:
        if index < 0:
            raise IndexError(f"vector index out of range: {index}")
        container[index] = item

    def insert_at(self, container: np.ndarray, item: Any, index: int) -> np.ndarray:
        size = self.length(container)
        index = min(max(index, 0), size)
        grown = np.empty(size + 1, dtype=container.dtype)
        grown[:index] = container[:index]
        grown[index] = item
        grown[index + 1:] = container[index:]
        return grown

    def remove_at(self, container: np.ndarray, index: int) -> np.ndarray:
        if not 0 <= index < self.length(container):
            raise IndexError(f"vector index out of range: {index}")
        return np.delete(container, index)

    def clear(self, container: np.ndarray) -> np.ndarray:
        return np.empty(0, dtype=container.dtype)

    def iterate(self, container: np.ndarray) -> Iterator[Any]:
        return iter(container)

    def index_of(self, container: np.ndarray, item: Any) -> int:
        if container.dtype == object:
            return index_of(container, item)
        # numeric vectors hold value types only
        try:
            matches = np.flatnonzero(container == item)
        except (TypeError, ValueError):
            return NOT_FOUND
        for i in matches:
            if same_item(container[i], item):
                return int(i)
        return NOT_FOUND

    def is_branch(self, node: Any) -> bool:
        return isinstance(self._field_value(node), np.ndarray)

    def set_children(self, node: Any, container: Any) -> None:
        self.validate(container)
        super().set_children(node, container)
