"""Restricted value wrapper with runtime-replaceable check and sanitizer.

:class:`RestrictedDyn` owns a value together with a validity check and a
sanitizer.  Whenever the value is modified through the wrapper and falls
outside the region accepted by the check, the sanitizer is applied until the
check holds again.  The sanitizer runs repeatedly if a single application is
not enough, which can loop forever when the pair is mismatched.  Bound the
loop with ``SanitizeConfig(max_iterations=...)`` where that matters.

Example::

    num = RestrictedDyn(2, lambda n: 20 <= n <= 40, lambda n: n % 20 + 20)
    assert num.get() == 22
    num = num.add(37)
    assert num.get() == 39

Arithmetic is exposed as named methods (``add``, ``rem``, ``shl``, ...)
rather than operator overloads so that the revalidation step is visible at
the call site.  Equality and ordering are deliberately not defined.
"""

from __future__ import annotations

import copy
import logging
import operator
from typing import Any, Callable, Iterator, Optional, TypeVar

import numpy as np

from .restricted import Restricted
from .restricted_common import (
    ConsumedError,
    SanitizeConfig,
    coerce_config,
    drive_to_valid,
    ensure_callable,
    readonly_view,
    take_ownership,
)
from .strategies import Check, Sanitizer, reject

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RestrictedDyn(Restricted[T]):
    """Value of arbitrary type kept inside a runtime-defined allowed region."""

    def __init__(
        self,
        data: T,
        check: Check,
        sanitizer: Sanitizer,
        *,
        config: Optional[SanitizeConfig | dict] = None,
    ) -> None:
        ensure_callable(check, "check")
        ensure_callable(sanitizer, "sanitizer")
        self._check = check
        self._sanitizer = sanitizer
        self._config = coerce_config(config)
        self._consumed = False
        self._data = drive_to_valid(take_ownership(data), check, sanitizer, self._config)

    @classmethod
    def strict(
        cls,
        data: T,
        check: Check,
        *,
        config: Optional[SanitizeConfig | dict] = None,
    ) -> "RestrictedDyn[T]":
        """Create a wrapper that raises instead of correcting disallowed values.

        Raises :class:`~restricted_types.restricted_common.InvalidAssignmentError`
        when ``check(data)`` is false; no wrapper is returned in that case.
        Later safe mutations that would leave the allowed region raise the
        same error and keep the previous value.
        """

        return cls(data, check, reject(), config=config)

    # ------------------------------------------------------------------
    # Capability contract
    # ------------------------------------------------------------------

    def get(self) -> T:
        self._ensure_live()
        return readonly_view(self._data)

    def is_allowed(self, value: T) -> bool:
        return bool(self._check(value))

    def sanitize(self, value: T) -> T:
        return drive_to_valid(value, self._check, self._sanitizer, self._config)

    def set_unchecked(self, value: T) -> None:
        """Replace the stored value without checking it.

        The wrapper may now hold a disallowed value.  Call :meth:`make_valid`
        before any other operation.
        """

        self._ensure_live()
        logger.debug("Unchecked write to %s", type(self).__name__)
        self._data = take_ownership(value)

    def set(self, value: T) -> None:
        self._ensure_live()
        self._data = self.sanitize(take_ownership(value))

    def clone_inner(self) -> T:
        self._ensure_live()
        return copy.deepcopy(self._data)

    # ------------------------------------------------------------------
    # Invariant management
    # ------------------------------------------------------------------

    @property
    def value(self) -> T:
        return self.get()

    @property
    def check(self) -> Check:
        return self._check

    @property
    def sanitizer(self) -> Sanitizer:
        return self._sanitizer

    @property
    def config(self) -> SanitizeConfig:
        return self._config

    @property
    def consumed(self) -> bool:
        return self._consumed

    def make_valid(self) -> "RestrictedDyn[T]":
        """Re-run the sanitize loop on the stored value.

        This is the repair step after :meth:`set_unchecked`,
        :meth:`set_item_unchecked` or :meth:`deref_mut_unchecked`.  An
        already valid value is left untouched.
        """

        self._ensure_live()
        self._data = drive_to_valid(self._data, self._check, self._sanitizer, self._config)
        return self

    def set_check(self, check: Check) -> None:
        """Change the validity check.

        If the current value is invalid under the new check, the existing
        sanitizer is applied until it passes; only then is ``check`` installed.

        Caution: a mismatch between sanitizer and check can loop forever here
        or later.
        """

        self._ensure_live()
        ensure_callable(check, "check")
        candidate = copy.copy(self._data)
        self._data = drive_to_valid(candidate, check, self._sanitizer, self._config)
        self._check = check
        logger.debug("Installed new check on %s", type(self).__name__)

    def set_sanitizer(self, sanitizer: Sanitizer) -> None:
        """Change the sanitizer. The stored value is not revalidated."""

        self._ensure_live()
        ensure_callable(sanitizer, "sanitizer")
        self._sanitizer = sanitizer
        logger.debug("Installed new sanitizer on %s", type(self).__name__)

    def set_bounds(self, check: Check, sanitizer: Sanitizer) -> None:
        """Change both check and sanitizer, sanitizing the value with the new pair."""

        self._ensure_live()
        ensure_callable(check, "check")
        ensure_callable(sanitizer, "sanitizer")
        candidate = copy.copy(self._data)
        self._data = drive_to_valid(candidate, check, sanitizer, self._config)
        self._check = check
        self._sanitizer = sanitizer
        logger.debug("Installed new check and sanitizer on %s", type(self).__name__)

    def with_config(self, config: SanitizeConfig | dict) -> "RestrictedDyn[T]":
        self._ensure_live()
        self._config = coerce_config(config)
        return self

    def into_inner(self) -> T:
        """Return the raw value, discarding check and sanitizer.

        The wrapper is consumed: any later use raises
        :class:`~restricted_types.restricted_common.ConsumedError`.
        """

        self._ensure_live()
        data = self._data
        self._consumed = True
        self._data = None  # type: ignore[assignment]
        return data

    # ------------------------------------------------------------------
    # Mutation surface
    # ------------------------------------------------------------------

    def apply(self, func: Callable[..., T], *args: Any) -> "RestrictedDyn[T]":
        """Replace the value with ``func(value, *args)`` and sanitize the result.

        The result is only stored once it is allowed, so a sanitizer that
        raises leaves the previous value in place.
        """

        self._ensure_live()
        candidate = func(self._data, *args)
        self._data = drive_to_valid(candidate, self._check, self._sanitizer, self._config)
        return self

    def add(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.add, rhs)

    def sub(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.sub, rhs)

    def mul(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.mul, rhs)

    def div(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.truediv, rhs)

    def floordiv(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.floordiv, rhs)

    def rem(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.mod, rhs)

    def pow(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.pow, rhs)

    def matmul(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.matmul, rhs)

    def bitand(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.and_, rhs)

    def bitor(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.or_, rhs)

    def bitxor(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.xor, rhs)

    def shl(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.lshift, rhs)

    def shr(self, rhs: Any) -> "RestrictedDyn[T]":
        return self.apply(operator.rshift, rhs)

    def neg(self) -> "RestrictedDyn[T]":
        return self.apply(operator.neg)

    def invert(self) -> "RestrictedDyn[T]":
        """Bitwise complement (``~value``)."""
        return self.apply(operator.invert)

    def not_(self) -> "RestrictedDyn[T]":
        """Logical negation (``not value``)."""
        return self.apply(operator.not_)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def __getitem__(self, index: Any) -> Any:
        self._ensure_live()
        return readonly_view(self._data[index])

    def __len__(self) -> int:
        self._ensure_live()
        return len(self._data)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.get())  # type: ignore[call-overload]

    def __array__(self, dtype: Any = None, copy: Optional[bool] = None) -> np.ndarray:
        self._ensure_live()
        if copy:
            return np.array(self._data, dtype=dtype, copy=True)
        arr = np.asarray(self._data, dtype=dtype)
        if copy is False and arr is not self._data:
            raise ValueError("Unable to avoid copy while creating an array from RestrictedDyn")
        if arr is self._data:
            arr = readonly_view(arr)
        return arr

    # ------------------------------------------------------------------
    # Unchecked write access
    # ------------------------------------------------------------------

    def set_item_unchecked(self, index: Any, value: Any) -> None:
        """Write ``value`` at ``index`` of the stored value without checking.

        Call :meth:`make_valid` afterwards.
        """

        self._ensure_live()
        logger.debug("Unchecked item write to %s", type(self).__name__)
        self._data[index] = value  # type: ignore[index]

    def deref_mut_unchecked(self) -> T:
        """Return the live, mutable stored value.

        Writes through the returned object are not checked.  Call
        :meth:`make_valid` once they are done.
        """

        self._ensure_live()
        return self._data

    # ------------------------------------------------------------------

    def _ensure_live(self) -> None:
        if self._consumed:
            raise ConsumedError(f"{type(self).__name__} was consumed by into_inner()")

    def __repr__(self) -> str:
        if self._consumed:
            return f"{type(self).__name__}(<consumed>)"
        return f"{type(self).__name__}({self._data!r})"


__all__ = ["RestrictedDyn"]
