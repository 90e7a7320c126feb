"""
Interception targets and the reflection glue around them.

A target names one member on one owner namespace: a function in a module,
a method on a class, or an attribute on an instance. Accepted spellings:

    "package.module.func"            dotted path, resolved with pkgutil
    "package.module.Class.method"
    "open"                           bare name, looked up in builtins
    (SomeClass, "method")            explicit owner/member pair
    (module, "func")
    module.func / SomeClass.method   the function object itself
"""

from __future__ import annotations

import builtins
import inspect
import logging
import pkgutil
import sys
import types
from dataclasses import dataclass
from typing import Any, Union

from interpose.errors import UndefinedTargetError, UnsupportedTargetKindError

LOG = logging.getLogger("interpose.target")

# Attribute set on every substitute function installed by this package.
SUBSTITUTE_MARKER = "__interpose_policy__"


@dataclass(frozen=True, eq=False)
class Target:
    """An (owner, member name) pair. Two targets are equal when they name the same member of the same owner."""

    owner: Any
    name: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Target):
            return NotImplemented
        return self.owner is other.owner and self.name == other.name

    def __hash__(self) -> int:
        return hash((id(self.owner), self.name))

    @property
    def label(self) -> str:
        owner = getattr(self.owner, "__qualname__", None) or getattr(self.owner, "__name__", None)
        if owner is None:
            owner = f"<{type(self.owner).__qualname__} instance>"
        return f"{owner}.{self.name}"

    @property
    def owner_is_class(self) -> bool:
        return isinstance(self.owner, type)

    def exists(self) -> bool:
        return hasattr(self.owner, self.name)

    def current(self) -> Any:
        """Return the member as callers currently see it (bound, descriptors applied)."""
        try:
            return getattr(self.owner, self.name)
        except AttributeError:
            raise UndefinedTargetError(f"{self.label} is not defined") from None

    def raw(self) -> Any:
        """Return the member without invoking descriptors (staticmethod/classmethod wrappers intact)."""
        try:
            return inspect.getattr_static(self.owner, self.name)
        except AttributeError:
            raise UndefinedTargetError(f"{self.label} is not defined") from None

    def own_attribute(self, default: Any = None) -> Any:
        """Return the member only if the owner itself defines it, else *default*."""
        return getattr(self.owner, "__dict__", {}).get(self.name, default)

    def __repr__(self) -> str:
        return f"Target({self.label})"


TargetSpec = Union[Target, str, tuple, types.FunctionType, types.MethodType]


def _resolve_owner(path: str) -> Any:
    try:
        return pkgutil.resolve_name(path)
    except (ImportError, AttributeError, ValueError) as exc:
        raise UndefinedTargetError(f"Cannot resolve {path!r}: {exc}") from exc


def _from_callable(func: Any) -> Target:
    if isinstance(func, types.MethodType):
        return Target(func.__self__, func.__func__.__name__)

    qualname = getattr(func, "__qualname__", "")
    if "<locals>" in qualname or "<lambda>" in qualname:
        raise TypeError(f"{qualname} is not reachable by name and cannot be intercepted")

    module = sys.modules.get(getattr(func, "__module__", None) or "")
    if module is None:
        raise UndefinedTargetError(f"Module of {qualname!r} is not imported")

    owner: Any = module
    *path, name = qualname.split(".")
    for part in path:
        owner = getattr(owner, part)
    if path and name.startswith("__") and not name.endswith("__"):
        # private methods live under their mangled name
        name = f"_{path[-1].lstrip('_')}{name}"
    return Target(owner, name)


def as_target(spec: TargetSpec) -> Target:
    """Normalise any accepted target spelling to a Target."""
    if isinstance(spec, Target):
        return spec

    if isinstance(spec, tuple):
        if len(spec) != 2 or not isinstance(spec[1], str):
            raise TypeError(f"Target pair must be (owner, member_name), got {spec!r}")
        owner, name = spec
        if isinstance(owner, str):
            owner = _resolve_owner(owner)
        return Target(owner, name)

    if isinstance(spec, str):
        owner_path, _, name = spec.rpartition(".")
        if not name:
            raise UndefinedTargetError(f"Empty member name in {spec!r}")
        if not owner_path:
            return Target(builtins, name)
        return Target(_resolve_owner(owner_path), name)

    if isinstance(spec, (types.FunctionType, types.MethodType)):
        return _from_callable(spec)

    raise TypeError(f"Cannot interpret {spec!r} as an interception target")


def unwrap(member: Any) -> Any:
    """Strip staticmethod/classmethod/bound-method wrappers down to the function."""
    if isinstance(member, (staticmethod, classmethod, types.MethodType)):
        return member.__func__
    return member


def is_substitute(member: Any) -> bool:
    """True if *member* is an anonymous stand-in: one of our substitutes or a lambda."""
    func = unwrap(member)
    if getattr(func, SUBSTITUTE_MARKER, None) is not None:
        return True
    return getattr(func, "__name__", None) == "<lambda>"


def _takes_receiver(target: Target, raw: Any) -> bool:
    if isinstance(raw, classmethod):
        return True
    if not inspect.isfunction(raw) or isinstance(target.owner, types.ModuleType):
        return False
    if target.owner_is_class:
        return True
    # instance owner: functions found on the class bind self, ones stored on the instance do not
    return target.own_attribute() is None


def parameter_signature(target: Target) -> inspect.Signature:
    """
    Read the formal parameters of the target's current implementation.

    The receiver (``self``/``cls``) is dropped for methods, since installed
    substitutes are called with the call arguments only.
    """
    raw = target.raw()
    try:
        signature = inspect.signature(unwrap(raw))
    except (TypeError, ValueError) as exc:
        raise UnsupportedTargetKindError(f"Cannot read the parameters of {target.label}: {exc}") from exc

    if _takes_receiver(target, raw):
        parameters = list(signature.parameters.values())[1:]
        signature = signature.replace(parameters=parameters)

    LOG.debug("Captured signature of %s: %s", target.label, signature)
    return signature
