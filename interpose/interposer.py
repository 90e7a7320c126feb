"""
Test-facing entry point.

``Interposer`` bundles the dispatch strategies over one primitive, one
backup store and one installer. Example::

    interposer = Interposer()

    def test_report_uses_cached_rows():
        interposer.condition_return(
            "app.db.select_all",
            [
                ("table", "user", [{"id": 1}]),
                ("table", "post", lambda: load_fixture("posts")),
            ],
            default=[],
            backup=True,
        )
        try:
            assert build_report() == EXPECTED
        finally:
            interposer.reset()

Restoring is the caller's job: pair every ``backup=True`` with ``restore``
or ``reset`` in the test's teardown.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Sequence

from interpose import attributes
from interpose.attributes import Access
from interpose.config import InterposeConfig
from interpose.errors import UnsupportedTargetKindError
from interpose.installer import Installer
from interpose.policies import (
    ConditionalReturn,
    ConstantReturn,
    DelegatingReplace,
    Hook,
    Mute,
    Passthrough,
    SequentialReturn,
    Slot,
    SubstitutePolicy,
)
from interpose.primitives import AttributePrimitive, OverridePrimitive
from interpose.responses import ResponseSpec
from interpose.store import BackupStore
from interpose.target import TargetSpec, as_target, is_substitute, parameter_signature

LOG = logging.getLogger("interpose.interposer")


class Interposer:
    """Installs, inspects and restores substitutes for named functions and methods."""

    def __init__(
        self,
        config: InterposeConfig | None = None,
        primitive: OverridePrimitive | None = None,
    ) -> None:
        self.config = config if config is not None else InterposeConfig.from_env()
        self.primitive = primitive if primitive is not None else AttributePrimitive()
        self.store = BackupStore(self.primitive)
        self.installer = Installer(self.store, self.primitive)

    # -- dispatch strategies --

    def function(self, target: TargetSpec, fn: Callable[..., Any], backup: bool = False) -> Passthrough:
        """Install *fn* itself as the implementation of *target*."""
        return self.installer.install(target, Passthrough(fn), backup)

    def hook(
        self,
        target: TargetSpec,
        fn: Callable[..., Any],
        slot: Slot | None = None,
        backup: bool = False,
    ) -> Slot:
        """
        Route calls through *fn* and capture what it returns.

        Returns:
            The slot holding the latest result (the one passed in, or a new one)
        """
        policy = self.installer.install(target, Hook(fn, slot), backup)
        return policy.slot

    def condition_return(
        self,
        target: TargetSpec,
        conditions: Iterable[Any],
        default: ResponseSpec = None,
        backup: bool = False,
    ) -> ConditionalReturn:
        """
        Answer each call with the response of the first matching condition.

        Args:
            target: Function or method to stub
            conditions: Ordered (parameter name, expected value, response) entries
            default: Response when no condition matches
            backup: Preserve the original first

        Raises:
            UnsupportedTargetKindError: *target* is already a substitute or a
                lambda; restore it first
        """
        target = as_target(target)
        if is_substitute(target.raw()):
            raise UnsupportedTargetKindError(
                f"Cannot apply conditions to {target.label}: it is already replaced "
                "by an anonymous substitute. Restore it first."
            )
        policy = ConditionalReturn(
            parameter_signature(target),
            conditions,
            default,
            copier=self.config.copier,
            strict=self.config.strict_equality,
        )
        return self.installer.install(target, policy, backup)

    def consistent_return(
        self,
        target: TargetSpec,
        responses: Sequence[ResponseSpec],
        backup: bool = False,
    ) -> SequentialReturn:
        """Answer the n-th call with the n-th response."""
        return self.installer.install(target, SequentialReturn(responses, self.config.copier), backup)

    def replace(
        self,
        target: TargetSpec,
        delegate: TargetSpec | Callable[..., Any],
        backup: bool = False,
    ) -> DelegatingReplace:
        """Forward every call to *delegate*, looked up anew on each call when given by name."""
        return self.installer.install(target, DelegatingReplace(delegate), backup)

    def simple_return(self, target: TargetSpec, response: ResponseSpec, backup: bool = False) -> ConstantReturn:
        """Answer every call with *response*."""
        return self.installer.install(target, ConstantReturn(response, self.config.copier), backup)

    def mute(self, target: TargetSpec, backup: bool = False) -> Mute:
        """Make *target* do nothing and return None."""
        return self.installer.install(target, Mute(), backup)

    # -- backups --

    def backup(self, target: TargetSpec) -> None:
        self.store.ensure_backed_up(as_target(target))

    def restore(self, target: TargetSpec) -> None:
        self.store.restore(as_target(target))

    def is_backed_up(self, target: TargetSpec) -> bool:
        return self.store.is_backed_up(as_target(target))

    def active_policy(self, target: TargetSpec) -> SubstitutePolicy | None:
        return self.installer.active_policy(target)

    # -- attributes and constants --

    def set_flags(self, target: TargetSpec, flags: Access) -> None:
        attributes.set_flags(self.primitive, target, flags)

    def redefine(self, constant: TargetSpec, value: Any) -> None:
        attributes.redefine(self.primitive, constant, value)

    def reset(self) -> None:
        """Restore every backed-up target and undo attribute/constant changes."""
        try:
            self.store.restore_all()
        finally:
            self.primitive.revert_attributes()


_default: Interposer | None = None


def get_interposer() -> Interposer:
    """Return the process-wide default Interposer, creating it on first use."""
    global _default
    if _default is None:
        _default = Interposer()
    return _default


class InterposeMixin:
    """
    Adds interposer methods to a ``unittest.TestCase``.

    Each test instance gets its own Interposer. Call ``self.interposer.reset()``
    from ``tearDown`` (or ``addCleanup``) to put everything back.
    """

    _interposer: Interposer | None = None

    @property
    def interposer(self) -> Interposer:
        if self._interposer is None:
            self._interposer = Interposer()
        return self._interposer

    def interpose_function(self, target, fn, backup=False):
        return self.interposer.function(target, fn, backup)

    def interpose_hook(self, target, fn, slot=None, backup=False):
        return self.interposer.hook(target, fn, slot, backup)

    def interpose_condition_return(self, target, conditions, default=None, backup=False):
        return self.interposer.condition_return(target, conditions, default, backup)

    def interpose_consistent_return(self, target, responses, backup=False):
        return self.interposer.consistent_return(target, responses, backup)

    def interpose_replace(self, target, delegate, backup=False):
        return self.interposer.replace(target, delegate, backup)

    def interpose_simple_return(self, target, response, backup=False):
        return self.interposer.simple_return(target, response, backup)

    def interpose_mute(self, target, backup=False):
        return self.interposer.mute(target, backup)

    def interpose_backup(self, target):
        self.interposer.backup(target)

    def interpose_restore(self, target):
        self.interposer.restore(target)

    def interpose_flags(self, target, flags):
        self.interposer.set_flags(target, flags)

    def interpose_redefine(self, constant, value):
        self.interposer.redefine(constant, value)
