"""
Response specifications and their resolution.

A substitute hands back a *response*: either a literal value, a producer
(a function, bound method or partial taking no arguments, evaluated on
every call), or a prototype object duplicated on every call so that no two
callers share an instance. Callable objects such as mocks count as
prototypes, not producers; wrap them in ``Producer(...)`` to have them
called instead.

Raw values are classified automatically; wrap them explicitly in
Literal / Producer / Prototype to override the classification, e.g. to
return a function object itself rather than call it.
"""

from __future__ import annotations

import copy
import enum
import functools
import types
from dataclasses import dataclass
from typing import Any, Callable, Union

Copier = Callable[[Any], Any]


@dataclass(frozen=True)
class Literal:
    """Return ``value`` as is."""

    value: Any


@dataclass(frozen=True)
class Producer:
    """Call ``factory()`` on every resolution and return its result."""

    factory: Callable[[], Any]


@dataclass(frozen=True)
class Prototype:
    """Return a fresh copy of ``instance`` on every resolution."""

    instance: Any


ResponseSpec = Union[Literal, Producer, Prototype, Any]

# Values of these types are handed back untouched, containers included.
_LITERAL_TYPES = (
    type(None),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    tuple,
    list,
    dict,
    set,
    frozenset,
    range,
    type,
    types.ModuleType,
    enum.Enum,
)


# Only these callables are evaluated as producers. Other callable objects
# (mocks, instances with __call__) are duplicated like any other object.
_PRODUCER_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    functools.partial,
)


def is_object_like(value: Any) -> bool:
    return not isinstance(value, _LITERAL_TYPES + _PRODUCER_TYPES)


def classify(spec: ResponseSpec) -> Literal | Producer | Prototype:
    if isinstance(spec, (Literal, Producer, Prototype)):
        return spec
    if isinstance(spec, _PRODUCER_TYPES):
        return Producer(spec)
    if is_object_like(spec):
        return Prototype(spec)
    return Literal(spec)


def resolve(spec: ResponseSpec, copier: Copier = copy.copy) -> Any:
    """
    Turn a response specification into the value a substitute returns.

    Args:
        spec: Literal, Producer, Prototype, or a raw value to classify
        copier: Duplicates prototypes (shallow copy unless configured otherwise)

    Returns:
        The concrete return value. Exceptions raised by a producer propagate.
    """
    spec = classify(spec)
    if isinstance(spec, Producer):
        return spec.factory()
    if isinstance(spec, Prototype):
        return copier(spec.instance)
    return spec.value
