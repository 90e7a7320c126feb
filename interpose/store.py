"""
Backup and installation bookkeeping.

The store records which targets have a preserved original and which policy
is currently installed on each target. It is the only holder of that
state; callers go through ``ensure_backed_up`` / ``restore`` /
``restore_all`` rather than touching the records.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from interpose.target import Target

if TYPE_CHECKING:
    from interpose.policies import SubstitutePolicy
    from interpose.primitives import OverridePrimitive

LOG = logging.getLogger("interpose.store")


class BackupStore:
    def __init__(self, primitive: "OverridePrimitive") -> None:
        self._primitive = primitive
        # dict as an insertion-ordered set
        self._backed_up: dict[Target, None] = {}
        self._installations: dict[Target, "SubstitutePolicy"] = {}

    def ensure_backed_up(self, target: Target) -> None:
        """Preserve *target*'s original. Repeating this keeps the first original."""
        self._primitive.backup_original(target)
        self._backed_up[target] = None
        LOG.debug("Backed up %s", target.label)

    def restore(self, target: Target) -> None:
        """
        Reinstate *target*'s original and drop all bookkeeping for it.

        Raises:
            MissingBackupError: From the primitive, when *target* was never backed up
        """
        self._primitive.restore_original(target)
        self._backed_up.pop(target, None)
        self._installations.pop(target, None)
        LOG.debug("Restored %s", target.label)

    def restore_all(self) -> None:
        """
        Restore every backed-up target, most recent first. Meant for test teardown.

        Every target is attempted even when one fails; the first failure is
        re-raised once the rest are done.
        """
        first_error: Exception | None = None
        for target in reversed(list(self._backed_up)):
            try:
                self.restore(target)
            except Exception as exc:
                LOG.error("Failed to restore %s: %s", target.label, exc)
                self._backed_up.pop(target, None)
                if first_error is None:
                    first_error = exc

        for target in self._installations:
            LOG.warning("%s was overridden without a backup and stays overridden", target.label)
        self._installations.clear()

        if first_error is not None:
            raise first_error

    def is_backed_up(self, target: Target) -> bool:
        return target in self._backed_up

    def backed_up(self) -> tuple[Target, ...]:
        return tuple(self._backed_up)

    def record_installation(self, target: Target, policy: "SubstitutePolicy") -> None:
        previous = self._installations.get(target)
        if previous is not None:
            LOG.debug("Replacing %s on %s", type(previous).__name__, target.label)
        self._installations[target] = policy

    def active_policy(self, target: Target) -> "SubstitutePolicy | None":
        return self._installations.get(target)
