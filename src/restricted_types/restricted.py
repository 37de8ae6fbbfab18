"""Capability contract shared by every restricted value type."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class Restricted(ABC, Generic[T]):
    """Minimal interface of a value that keeps itself inside an allowed region.

    Implementations provide :meth:`get`, :meth:`is_allowed`, :meth:`sanitize`
    and :meth:`set_unchecked`; everything else is derived from those four.
    """

    @abstractmethod
    def get(self) -> T:
        """Return the stored value for reading."""

    @abstractmethod
    def is_allowed(self, value: T) -> bool:
        """Return whether ``value`` lies inside the allowed region."""

    @abstractmethod
    def sanitize(self, value: T) -> T:
        """Correct ``value`` until :meth:`is_allowed` accepts it and return it.

        There is no iteration bound unless the implementation adds one.
        """

    @abstractmethod
    def set_unchecked(self, value: T) -> None:
        """Store ``value`` without validating it.

        The stored value may now be disallowed; callers must restore the
        invariant afterwards.
        """

    def is_disallowed(self, value: T) -> bool:
        return not self.is_allowed(value)

    def is_valid(self) -> bool:
        """Check for invalid data, that may have been introduced by unchecked access."""
        return self.is_allowed(self.get())

    def is_invalid(self) -> bool:
        """Check for invalid data, that may have been introduced by unchecked access."""
        return self.is_disallowed(self.get())

    def set(self, value: T) -> None:
        self.set_unchecked(self.sanitize(value))

    def clone_inner(self) -> T:
        return copy.deepcopy(self.get())


__all__ = ["Restricted"]
