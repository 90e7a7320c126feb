"""
Access-attribute mutation and constant redefinition.

Python has no visibility modifiers; a member's visibility is carried by its
name (``secret``, ``_secret``, ``_Owner__secret``). Changing a member's
access flags therefore binds the same member under the name form for the
requested visibility, e.g. to call a name-mangled method directly from a
test. STATIC / CLASS rebind the member's function as a staticmethod or
classmethod.

Neither operation touches backup or installation state; the primitive keeps
its own journal so that ``Interposer.reset`` can undo them.
"""

from __future__ import annotations

import enum
import logging
import types
from typing import TYPE_CHECKING, Any

from interpose.target import Target, TargetSpec, as_target, unwrap

if TYPE_CHECKING:
    from interpose.primitives import OverridePrimitive

LOG = logging.getLogger("interpose.attributes")


class Access(enum.Flag):
    """Access flags accepted by ``set_flags``."""

    PUBLIC = enum.auto()
    PROTECTED = enum.auto()
    PRIVATE = enum.auto()
    STATIC = enum.auto()
    CLASS = enum.auto()


_VISIBILITY = Access.PUBLIC | Access.PROTECTED | Access.PRIVATE


def _mangle_prefix(owner: Any) -> str:
    cls = owner if isinstance(owner, type) else type(owner)
    return f"_{cls.__name__.lstrip('_')}__"


def base_name(target: Target) -> str:
    """Strip visibility prefixes from the member name."""
    name = target.name
    if name.startswith("__") and name.endswith("__"):
        return name
    prefix = _mangle_prefix(target.owner)
    if name.startswith(prefix):
        return name[len(prefix) :]
    return name.lstrip("_")


def visible_name(target: Target, flags: Access) -> str:
    """Name under which the member is exposed for *flags*."""
    visibility = flags & _VISIBILITY
    if not visibility:
        return target.name
    if visibility not in (Access.PUBLIC, Access.PROTECTED, Access.PRIVATE):
        raise ValueError(f"Conflicting visibility flags: {visibility!r}")

    base = base_name(target)
    if base.startswith("__") and base.endswith("__"):
        return base
    if visibility == Access.PUBLIC:
        return base
    if visibility == Access.PROTECTED:
        return f"_{base}"
    if isinstance(target.owner, types.ModuleType):
        return f"__{base}"
    return f"{_mangle_prefix(target.owner)}{base}"


def member_for(raw: Any, flags: Access) -> Any:
    """Rewrap *raw* as a staticmethod/classmethod when requested."""
    if Access.STATIC in flags and Access.CLASS in flags:
        raise ValueError("A member cannot be both STATIC and CLASS")
    if Access.STATIC in flags:
        return staticmethod(unwrap(raw))
    if Access.CLASS in flags:
        return classmethod(unwrap(raw))
    return raw


def set_flags(primitive: "OverridePrimitive", target: TargetSpec, flags: Access) -> None:
    """Change the access attributes of *target* through *primitive*."""
    target = as_target(target)
    LOG.debug("Setting %r on %s", flags, target.label)
    primitive.set_flags(target, flags)


def redefine(primitive: "OverridePrimitive", constant: TargetSpec, value: Any) -> None:
    """Rebind a named constant process-wide through *primitive*."""
    target = as_target(constant)
    LOG.debug("Redefining %s", target.label)
    primitive.redefine_constant(target, value)
