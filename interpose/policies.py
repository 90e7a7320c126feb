"""
Substitute policies: what an installed substitute does when it is called.

Each policy turns one intercepted call into a result through ``resolve``.
Policies hold all per-installation state (conditions, call counters, the
observation slot), so installing again always starts from a fresh policy.
"""

from __future__ import annotations

import copy
import inspect
import logging
import types
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from pydantic import BaseModel, ConfigDict, field_validator

from interpose.errors import SequenceExhaustedError
from interpose.responses import Copier, ResponseSpec, resolve as resolve_response
from interpose.target import Target, TargetSpec, as_target

LOG = logging.getLogger("interpose.policies")


@dataclass(frozen=True)
class Call:
    """Arguments of one intercepted call."""

    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)


@dataclass
class Slot:
    """Single-value cell written by a hook on every call; holds the latest result only."""

    value: Any = None
    calls: int = 0


class SubstitutePolicy(ABC):
    @abstractmethod
    def resolve(self, call: Call) -> Any:
        """Produce the substitute's return value for *call*."""
        ...

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.resolve(Call(args, kwargs))


class Passthrough(SubstitutePolicy):
    """Call a caller-supplied function in place of the original."""

    def __init__(self, fn: Callable[..., Any]) -> None:
        self.fn = fn

    def resolve(self, call: Call) -> Any:
        return self.fn(*call.args, **call.kwargs)


class Hook(SubstitutePolicy):
    """Forward to *fn* and record its result in *slot* before returning it."""

    def __init__(self, fn: Callable[..., Any], slot: Slot | None = None) -> None:
        self.fn = fn
        self.slot = slot if slot is not None else Slot()

    def resolve(self, call: Call) -> Any:
        result = self.fn(*call.args, **call.kwargs)
        self.slot.value = result
        self.slot.calls += 1
        return result


class ConditionEntry(BaseModel):
    """One (parameter, expected value, response) rule of a conditional return."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    parameter: str
    expected: Any = None
    response: Any = None

    @field_validator("parameter")
    @classmethod
    def _parameter_is_identifier(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"{value!r} is not a valid parameter name")
        return value

    @classmethod
    def coerce(cls, entry: "ConditionEntry | Mapping[str, Any] | Sequence[Any]") -> "ConditionEntry":
        """Accept a ConditionEntry, a mapping, or a (parameter, expected, response) triple."""
        if isinstance(entry, cls):
            return entry
        if isinstance(entry, Mapping):
            return cls.model_validate(dict(entry))
        parameter, expected, response = entry
        return cls(parameter=parameter, expected=expected, response=response)


class ConditionalReturn(SubstitutePolicy):
    """
    Pick a response by comparing named call arguments against expected values.

    Arguments are bound to the original target's signature, captured once at
    installation, so positional and keyword spellings of the same call match
    alike. Entries are tried in order and the first match wins; with no
    match the default response is used.
    """

    def __init__(
        self,
        signature: inspect.Signature,
        conditions: Iterable[Any],
        default: ResponseSpec = None,
        copier: Copier = copy.copy,
        strict: bool = False,
    ) -> None:
        self.signature = signature
        self.conditions = [ConditionEntry.coerce(c) for c in conditions]
        self.default = default
        self.copier = copier
        self.strict = strict

        unknown = [c.parameter for c in self.conditions if c.parameter not in signature.parameters]
        if unknown:
            LOG.warning("Conditions on unknown parameters %s will never match", unknown)

    def matches(self, actual: Any, expected: Any) -> bool:
        if actual is expected:
            return True
        if self.strict and type(actual) is not type(expected):
            return False
        return bool(actual == expected)

    def select(self, call: Call) -> ConditionEntry | None:
        """Return the first entry matching *call*, or None."""
        bound = self.signature.bind(*call.args, **call.kwargs)
        bound.apply_defaults()
        arguments = bound.arguments
        for entry in self.conditions:
            if entry.parameter in arguments and self.matches(arguments[entry.parameter], entry.expected):
                return entry
        return None

    def resolve(self, call: Call) -> Any:
        entry = self.select(call)
        if entry is None:
            return resolve_response(self.default, self.copier)
        return resolve_response(entry.response, self.copier)


class SequentialReturn(SubstitutePolicy):
    """Return the n-th response on the n-th call. Running past the end is an error, never a wrap-around."""

    def __init__(self, responses: Sequence[ResponseSpec], copier: Copier = copy.copy) -> None:
        self.responses = tuple(responses)
        self.copier = copier
        self.calls = 0

    def resolve(self, call: Call) -> Any:
        index = self.calls
        self.calls += 1
        if index >= len(self.responses):
            raise SequenceExhaustedError(
                f"Call #{index + 1} exceeds the {len(self.responses)} stubbed response(s)"
            )
        return resolve_response(self.responses[index], self.copier)


class DelegatingReplace(SubstitutePolicy):
    """
    Forward every call, arguments untouched, to a delegate.

    A delegate named as a target (dotted path or (owner, name) pair) is
    looked up on each call, so redefining it later is observed. A function
    or bound method that is reachable under its own name is treated the
    same way. Lambdas, local functions and callable objects are called
    directly.
    """

    def __init__(self, delegate: TargetSpec | Callable[..., Any]) -> None:
        if isinstance(delegate, (str, tuple, Target)):
            self.delegate: Target | Callable[..., Any] = as_target(delegate)
        elif isinstance(delegate, (types.FunctionType, types.MethodType)):
            self.delegate = _named_or_direct(delegate)
        elif callable(delegate):
            self.delegate = delegate
        else:
            raise TypeError(f"Delegate must be callable or name a target, got {delegate!r}")

    def resolve(self, call: Call) -> Any:
        fn = self.delegate.current() if isinstance(self.delegate, Target) else self.delegate
        return fn(*call.args, **call.kwargs)


def _named_or_direct(fn: Callable[..., Any]) -> Target | Callable[..., Any]:
    try:
        target = as_target(fn)
    except (TypeError, AttributeError):
        return fn
    # the name may already point at something else, e.g. a substitute
    if target.exists() and target.current() == fn:
        return target
    return fn


class ConstantReturn(SubstitutePolicy):
    """Return the same response on every call."""

    def __init__(self, response: ResponseSpec, copier: Copier = copy.copy) -> None:
        self.response = response
        self.copier = copier

    def resolve(self, call: Call) -> Any:
        return resolve_response(self.response, self.copier)


class Mute(SubstitutePolicy):
    """Do nothing, return None."""

    def resolve(self, call: Call) -> None:
        return None
