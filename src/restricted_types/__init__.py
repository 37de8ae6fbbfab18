"""Values that carry their own validity check and sanitizer.

:class:`RestrictedDyn` wraps a value of arbitrary type together with a
runtime-replaceable check and sanitizer, correcting the value after every
mutation made through its API.  :class:`Restricted` is the capability
contract it implements.
"""

from .restricted import Restricted
from .restricted_common import (
    ConsumedError,
    InvalidAssignmentError,
    RestrictedError,
    SanitizeConfig,
    SanitizeLimitError,
    drive_to_valid,
)
from .restricted_dyn import RestrictedDyn
from .strategies import Check, Sanitizer

__all__ = [
    "Check",
    "ConsumedError",
    "InvalidAssignmentError",
    "Restricted",
    "RestrictedDyn",
    "RestrictedError",
    "SanitizeConfig",
    "SanitizeLimitError",
    "Sanitizer",
    "drive_to_valid",
]
