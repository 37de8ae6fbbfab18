"""Shared helpers used by the restricted value types.

The module hosts the error hierarchy, the :class:`SanitizeConfig` knobs and
the sanitize loop itself.  :mod:`restricted_types.restricted` and
:mod:`restricted_types.restricted_dyn` both drive values through
:func:`drive_to_valid` so the loop semantics live in exactly one place.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

import numpy as np

T = TypeVar("T")

CheckFn = Callable[[Any], bool]
SanitizerFn = Callable[[Any], Any]

INVALID_ASSIGNMENT_MESSAGE = "Invalid assignment to variable of type Restricted"
DEFAULT_WARN_AFTER = 10_000

logger = logging.getLogger(__name__)


class RestrictedError(RuntimeError):
    """Base class for failures raised by restricted value types."""


class InvalidAssignmentError(RestrictedError):
    """Raised when a strict restricted value receives a disallowed value."""

    def __init__(self, message: str = INVALID_ASSIGNMENT_MESSAGE) -> None:
        super().__init__(message)


class SanitizeLimitError(RestrictedError):
    """Raised when a bounded sanitize loop fails to reach the allowed region."""

    def __init__(self, iterations: int, value: object) -> None:
        super().__init__(
            f"Sanitizer did not produce an allowed value after {iterations} iterations"
        )
        self.iterations = iterations
        self.value = value


class ConsumedError(RestrictedError):
    """Raised when a restricted value is used after :meth:`into_inner`."""


@dataclass(frozen=True)
class SanitizeConfig:
    """Runtime knobs for the sanitize loop.

    ``max_iterations`` left at ``None`` keeps the loop unbounded: a
    predicate/sanitizer pair that never converges loops forever.
    """

    max_iterations: Optional[int] = None
    warn_after: Optional[int] = DEFAULT_WARN_AFTER

    def __post_init__(self) -> None:
        if self.max_iterations is not None and self.max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        if self.warn_after is not None and self.warn_after <= 0:
            raise ValueError("warn_after must be positive")


def coerce_config(value: object) -> SanitizeConfig:
    """Return a :class:`SanitizeConfig` merging ``value`` with the defaults.

    ``None`` yields the default configuration and dictionaries override only
    the fields they name.  Unknown keys are ignored.
    """

    if value is None:
        return SanitizeConfig()
    if isinstance(value, SanitizeConfig):
        return value
    if isinstance(value, dict):
        default = SanitizeConfig()
        init_fields = {field.name for field in dataclasses.fields(SanitizeConfig) if field.init}
        merged = {name: getattr(default, name) for name in init_fields}
        for key, val in value.items():
            if key in init_fields:
                merged[key] = val
        return SanitizeConfig(**merged)
    raise TypeError(f"Expected SanitizeConfig or dict, got {type(value)!r}")


def ensure_callable(value: object, role: str) -> None:
    if not callable(value):
        raise TypeError(f"{role} must be callable, got {type(value)!r}")


def apply_sanitizer(sanitizer: SanitizerFn, value: T) -> T:
    """Apply ``sanitizer`` once and return the resulting candidate.

    Sanitizers either return a replacement value or mutate ``value`` in place
    and return ``None``.
    """

    result = sanitizer(value)
    if result is None:
        return value
    return result


def drive_to_valid(
    value: T,
    check: CheckFn,
    sanitizer: SanitizerFn,
    config: Optional[SanitizeConfig] = None,
) -> T:
    """Apply ``sanitizer`` until ``check`` accepts the candidate.

    Returns the accepted candidate.  An already allowed value is returned
    without touching the sanitizer.
    """

    config = config or SanitizeConfig()
    iterations = 0
    warned = False
    while not check(value):
        if config.max_iterations is not None and iterations >= config.max_iterations:
            raise SanitizeLimitError(iterations, value)
        value = apply_sanitizer(sanitizer, value)
        iterations += 1
        if not warned and config.warn_after is not None and iterations >= config.warn_after:
            logger.warning(
                "Sanitize loop has run %s iterations without reaching an allowed value",
                iterations,
            )
            warned = True
    if iterations:
        logger.debug("Sanitizer applied %s time(s) before the value was allowed", iterations)
    return value


def take_ownership(value: T) -> T:
    """Return a private copy of numpy arrays so callers cannot write through."""

    if isinstance(value, np.ndarray):
        return value.copy()  # type: ignore[return-value]
    return value


def readonly_view(value: T) -> T:
    """Return ``value`` with numpy arrays wrapped in a non-writeable view."""

    if isinstance(value, np.ndarray):
        view = value.view()
        view.flags.writeable = False
        return view  # type: ignore[return-value]
    return value


__all__ = [
    "DEFAULT_WARN_AFTER",
    "INVALID_ASSIGNMENT_MESSAGE",
    "ConsumedError",
    "InvalidAssignmentError",
    "RestrictedError",
    "SanitizeConfig",
    "SanitizeLimitError",
    "apply_sanitizer",
    "coerce_config",
    "drive_to_valid",
    "ensure_callable",
    "readonly_view",
    "take_ownership",
]
