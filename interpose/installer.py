"""
Override installer.

Wraps a policy into a plain substitute function and binds it in place of
the target. Backing up, when requested, always happens before the new
implementation takes effect, so a later restore rewinds to the state
before any override rather than to an intermediate substitute.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from interpose.policies import Call, SubstitutePolicy
from interpose.primitives import OverridePrimitive
from interpose.store import BackupStore
from interpose.target import SUBSTITUTE_MARKER, TargetSpec, as_target

LOG = logging.getLogger("interpose.installer")

P = TypeVar("P", bound=SubstitutePolicy)


def make_substitute(policy: SubstitutePolicy) -> Callable[..., Any]:
    """Build the function that stands in for the target and routes calls to *policy*."""

    def substitute(*args: Any, **kwargs: Any) -> Any:
        return policy.resolve(Call(args, kwargs))

    setattr(substitute, SUBSTITUTE_MARKER, policy)
    substitute.__name__ = f"interposed_{type(policy).__name__}"
    return substitute


class Installer:
    def __init__(self, store: BackupStore, primitive: OverridePrimitive) -> None:
        self.store = store
        self.primitive = primitive

    def install(self, target: TargetSpec, policy: P, backup: bool = False) -> P:
        """
        Make *policy* answer every call to *target*.

        Installing over an existing override rebinds; nothing stacks.

        Args:
            target: Any accepted target spelling
            policy: The substitute policy to install
            backup: Preserve the original first (no-op if already preserved)

        Returns:
            The installed policy
        """
        target = as_target(target)
        if backup:
            self.store.ensure_backed_up(target)
        self.primitive.install_override(target, make_substitute(policy))
        self.store.record_installation(target, policy)
        LOG.debug("Installed %s on %s (backup=%s)", type(policy).__name__, target.label, backup)
        return policy

    def active_policy(self, target: TargetSpec) -> SubstitutePolicy | None:
        return self.store.active_policy(as_target(target))
