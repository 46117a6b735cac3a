# uikit/data/errors.py
"""
Collection errors.

Both are programmer errors (a malformed location, or a descriptor paired with
the wrong kind of storage) and are raised straight to the caller.
"""

from __future__ import annotations
from typing import Any, Tuple


class CollectionError(Exception):
    """Base class for collection layer errors."""


class BranchNotFoundError(CollectionError, LookupError):
    """A location segment did not resolve to a branch."""

    def __init__(self, location: Tuple[int, ...]):
        self.location = tuple(location)
        super().__init__(f"Branch not found at location {list(self.location)}")


class InvalidDataTypeError(CollectionError, TypeError):
    """A raw source does not have the storage shape a descriptor requires."""

    def __init__(self, expected: str, actual: Any):
        self.expected = expected
        self.actual = type(actual)
        super().__init__(
            f"Expected {expected}, got {self.actual.__module__}.{self.actual.__qualname__}"
        )
