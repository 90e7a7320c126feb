"""
interpose: runtime call interception for tests.

Swap the implementation of a named function or method for a substitute,
observe or redirect the calls made by code under test, and restore the
original afterwards.

Submodules:
    - target: target naming, normalisation and reflection
    - responses: literal / producer / prototype response resolution
    - policies: hook, conditional, sequential, replace, constant, mute
    - store: backup and installation bookkeeping
    - installer: binds policies in place of targets
    - primitives: low-level attribute rebinding
    - attributes: access flags and constant redefinition
    - interposer: the test-facing facade and unittest mixin
"""

from interpose.attributes import Access
from interpose.config import InterposeConfig, configure_logging
from interpose.errors import (
    InterposeError,
    MissingBackupError,
    SequenceExhaustedError,
    UndefinedTargetError,
    UnsupportedTargetKindError,
)
from interpose.interposer import InterposeMixin, Interposer, get_interposer
from interpose.policies import Call, ConditionEntry, Slot
from interpose.responses import Literal, Producer, Prototype, resolve
from interpose.target import Target, as_target

__all__ = [
    "Access",
    "Call",
    "ConditionEntry",
    "InterposeConfig",
    "InterposeError",
    "InterposeMixin",
    "Interposer",
    "Literal",
    "MissingBackupError",
    "Producer",
    "Prototype",
    "SequenceExhaustedError",
    "Slot",
    "Target",
    "UndefinedTargetError",
    "UnsupportedTargetKindError",
    "as_target",
    "configure_logging",
    "get_interposer",
    "resolve",
]
