"""
Low-level override primitives.

Everything above this module issues commands ("back up X", "install this
substitute for X", "restore X") and never inspects how they are carried
out. ``OverridePrimitive`` is that command surface; ``AttributePrimitive``
carries the commands out by rebinding attributes on the owning module,
class or instance.

All effects are process-wide and immediate.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from interpose.attributes import Access, member_for, visible_name
from interpose.errors import MissingBackupError, UndefinedTargetError
from interpose.target import Target

LOG = logging.getLogger("interpose.primitives")

# Marks a member that the owner did not define itself (inherited or absent).
_ABSENT = object()


class OverridePrimitive(ABC):
    """
    Abstract command surface for swapping implementations.

    Implementations must make every operation atomic and globally visible
    as soon as it returns.
    """

    @abstractmethod
    def install_override(self, target: Target, substitute: Callable[..., Any]) -> None:
        """Make *substitute* the active implementation of *target*."""
        ...

    @abstractmethod
    def backup_original(self, target: Target) -> None:
        """Preserve the current implementation of *target*. A second backup keeps the first."""
        ...

    @abstractmethod
    def restore_original(self, target: Target) -> None:
        """
        Reinstate the preserved implementation of *target* and forget it.

        Raises:
            MissingBackupError: Nothing was preserved for *target*
        """
        ...

    @abstractmethod
    def set_flags(self, target: Target, flags: Access) -> None:
        ...

    @abstractmethod
    def redefine_constant(self, target: Target, value: Any) -> None:
        ...

    def revert_attributes(self) -> None:
        """Undo every set_flags/redefine_constant. Override if supported."""
        pass


class AttributePrimitive(OverridePrimitive):
    """Carries out overrides by rebinding attributes with setattr/delattr."""

    def __init__(self) -> None:
        self._originals: dict[Target, Any] = {}
        self._journal: list[tuple[Target, Any]] = []

    def install_override(self, target: Target, substitute: Callable[..., Any]) -> None:
        if not target.exists():
            raise UndefinedTargetError(f"Cannot override {target.label}: no such member")
        if target.owner_is_class:
            # called with the call arguments only, never with the instance
            substitute = staticmethod(substitute)
        setattr(target.owner, target.name, substitute)

    def backup_original(self, target: Target) -> None:
        if target in self._originals:
            LOG.debug("%s already backed up, keeping the first original", target.label)
            return
        if not target.exists():
            raise UndefinedTargetError(f"Cannot back up {target.label}: no such member")
        self._originals[target] = target.own_attribute(_ABSENT)

    def restore_original(self, target: Target) -> None:
        try:
            original = self._originals.pop(target)
        except KeyError:
            raise MissingBackupError(f"{target.label} was never backed up") from None
        _rebind(target, original)

    def has_backup(self, target: Target) -> bool:
        return target in self._originals

    def set_flags(self, target: Target, flags: Access) -> None:
        member = member_for(target.raw(), flags)
        exposed = Target(target.owner, visible_name(target, flags))
        self._journal.append((exposed, exposed.own_attribute(_ABSENT)))
        setattr(exposed.owner, exposed.name, member)

    def redefine_constant(self, target: Target, value: Any) -> None:
        self._journal.append((target, target.own_attribute(_ABSENT)))
        setattr(target.owner, target.name, value)

    def revert_attributes(self) -> None:
        while self._journal:
            target, previous = self._journal.pop()
            _rebind(target, previous)


def _rebind(target: Target, value: Any) -> None:
    if value is not _ABSENT:
        setattr(target.owner, target.name, value)
    elif target.own_attribute(_ABSENT) is not _ABSENT:
        delattr(target.owner, target.name)
