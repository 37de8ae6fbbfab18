"""Predicate and sanitizer strategies for restricted values.

A predicate is any callable ``value -> bool`` without side effects.  A
sanitizer is any callable that moves a value towards the allowed region,
either by returning the corrected value or by mutating its argument in place
and returning ``None``.  The factories below cover the common cases: integer
ranges with wrap-around or saturation, and element-wise bounds for numpy
arrays.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

import numpy as np

from .restricted_common import INVALID_ASSIGNMENT_MESSAGE, InvalidAssignmentError


@runtime_checkable
class Check(Protocol):
    """Validity predicate. Must not mutate its argument."""

    def __call__(self, value: Any) -> bool:
        ...


@runtime_checkable
class Sanitizer(Protocol):
    """Corrective transformation applied to disallowed values."""

    def __call__(self, value: Any) -> Optional[Any]:
        ...


def _check_bounds(lo: Any, hi: Any) -> None:
    if lo > hi:
        raise ValueError(f"lo ({lo}) must be <= hi ({hi})")


def in_range(lo: Any, hi: Any) -> Check:
    """Predicate accepting ``lo <= value <= hi``."""

    _check_bounds(lo, hi)

    def check(value: Any) -> bool:
        return lo <= value <= hi

    return check


def modulo_offset(modulus: int, offset: int = 0) -> Sanitizer:
    """Sanitizer mapping ``n`` to ``n % modulus + offset``.

    A single application may still land outside the paired range; the
    sanitize loop repeats it until the predicate holds.
    """

    if modulus <= 0:
        raise ValueError("modulus must be positive")

    def sanitize(value: int) -> int:
        return value % modulus + offset

    return sanitize


def wrap_into(lo: int, hi: int) -> Sanitizer:
    """Modular wrap-around into the integer range ``[lo, hi]``."""

    _check_bounds(lo, hi)
    width = hi - lo + 1

    def sanitize(value: int) -> int:
        return lo + (value - lo) % width

    return sanitize


def clamp_into(lo: Any, hi: Any) -> Sanitizer:
    """Saturate values at ``lo`` / ``hi``."""

    _check_bounds(lo, hi)

    def sanitize(value: Any) -> Any:
        return max(lo, min(hi, value))

    return sanitize


def array_in_range(lo: float, hi: float) -> Check:
    """Predicate accepting arrays whose elements are finite and inside ``[lo, hi]``."""

    _check_bounds(lo, hi)

    def check(value: np.ndarray) -> bool:
        arr = np.asarray(value)
        if arr.size == 0:
            return True
        if np.issubdtype(arr.dtype, np.inexact) and not np.all(np.isfinite(arr)):
            return False
        return bool(np.all((arr >= lo) & (arr <= hi)))

    return check


def clip_array(lo: float, hi: float) -> Sanitizer:
    """In-place sanitizer clipping array elements into ``[lo, hi]``.

    Non-finite entries are replaced before clipping: ``nan`` becomes ``lo``
    and infinities saturate at the matching bound.
    """

    _check_bounds(lo, hi)

    def sanitize(value: np.ndarray) -> None:
        if np.issubdtype(value.dtype, np.inexact):
            np.nan_to_num(value, copy=False, nan=lo, posinf=hi, neginf=lo)
        np.clip(value, lo, hi, out=value)
        return None

    return sanitize


def reject(message: str = INVALID_ASSIGNMENT_MESSAGE) -> Sanitizer:
    """Sanitizer that refuses to correct anything."""

    def sanitize(value: Any) -> None:
        raise InvalidAssignmentError(message)

    return sanitize


__all__ = [
    "Check",
    "Sanitizer",
    "array_in_range",
    "clamp_into",
    "clip_array",
    "in_range",
    "modulo_offset",
    "reject",
    "wrap_into",
]
