"""
Exception taxonomy for interpose.

Every failure is surfaced to the calling test; nothing here is caught
and recovered from inside the package.
"""

from __future__ import annotations


class InterposeError(Exception):
    """Base class for all interpose errors."""

    pass


class UnsupportedTargetKindError(InterposeError):
    """Raised when conditional dispatch is requested on an already-substituted target."""

    pass


class MissingBackupError(InterposeError):
    """Raised when restoring a target whose original was never preserved."""

    pass


class UndefinedTargetError(InterposeError, AttributeError):
    """Raised when a named function, method or owner does not exist."""

    pass


class SequenceExhaustedError(InterposeError, IndexError):
    """Raised when a sequential substitute is called more times than it has responses."""

    pass
