# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Member eligibility analysis — which members of a class can be intercepted.

The analyzer walks the MRO of a target class and reports every public or
protected instance function that a subclass may override, property accessors
included, in an order that depends only on the class hierarchy and never on
the enumeration order of ``vars()`` or ``dir()``.
"""

from __future__ import annotations

import inspect
import typing
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pyintercept.reflection.interfaces import is_dunder
from pyintercept.reflection.parameters import ParameterDescriptor, type_name

# Py_TPFLAGS_BASETYPE: set on every type that allows subclassing.
_TPFLAGS_BASETYPE = 1 << 10

RESERVED_PREFIX = "_pyintercept_"
DESCRIPTOR_ATTR = "__pyintercept_descriptor__"


class MemberKind(Enum):
    METHOD = "method"
    PROPERTY_GETTER = "getter"
    PROPERTY_SETTER = "setter"
    PROPERTY_DELETER = "deleter"
    CONSTRUCTOR = "constructor"


class Visibility(Enum):
    PUBLIC = "public"
    PROTECTED = "protected"


_KIND_RANK = {kind: rank for rank, kind in enumerate(MemberKind)}

_ACCESSORS = (
    ("fget", MemberKind.PROPERTY_GETTER),
    ("fset", MemberKind.PROPERTY_SETTER),
    ("fdel", MemberKind.PROPERTY_DELETER),
)


@dataclass(frozen=True)
class MemberDescriptor:
    """Immutable description of one interceptable member.

    Attributes:
        name: Member name; accessors share their property's name.
        kind: Method, property accessor or constructor.
        declaring_type: The class whose implementation a call reaches.
        introduced_by: The base-most class in the MRO declaring the name.
        function: The function object that declares the member.
        signature: Signature of ``function``, ``self`` included.
        parameters: Declared parameters, ``self`` excluded.
        return_type: Resolved return annotation, or ``None``.
        generic_arity: Number of type parameters of a generic method.
        visibility: Public or protected.
        index: Stable position within the proxy descriptor; ``-1`` for
            constructors.
        is_async: Whether ``function`` is a coroutine function.
        forwarded: ``True`` for additional-interface members, which have no
            base implementation.
        abstract: ``True`` for abstract methods, which have no base
            implementation either.
        interface: The interface declaring a forwarded member.
        unsupported: Reason the member cannot be overridden, or ``None``.
    """

    name: str
    kind: MemberKind
    declaring_type: type
    introduced_by: type
    function: Any = field(compare=False)
    signature: inspect.Signature | None = field(compare=False, repr=False)
    parameters: tuple[ParameterDescriptor, ...] = field(compare=False, repr=False)
    return_type: Any = field(compare=False, repr=False)
    generic_arity: int = 0
    visibility: Visibility = Visibility.PUBLIC
    index: int = -1
    is_async: bool = field(default=False, compare=False)
    forwarded: bool = False
    abstract: bool = False
    interface: type | None = None
    unsupported: str | None = field(default=None, compare=False)

    @property
    def qualified_name(self) -> str:
        owner = self.interface or self.declaring_type
        return f"{owner.__module__}.{owner.__qualname__}.{self.name}"

    @property
    def signature_key(self) -> str:
        return ",".join(f"{p.name}:{p.kind.name}:{type_name(p.annotation)}" for p in self.parameters)

    @property
    def implementation(self) -> Any:
        """The base function the terminal pipeline step calls; ``None`` when forwarded."""
        return None if self.forwarded or self.abstract else self.function

    @property
    def overridable(self) -> bool:
        return self.unsupported is None

    @property
    def is_accessor(self) -> bool:
        return self.kind in (MemberKind.PROPERTY_GETTER, MemberKind.PROPERTY_SETTER, MemberKind.PROPERTY_DELETER)

    def with_index(self, index: int) -> MemberDescriptor:
        return replace(self, index=index)

    def __str__(self) -> str:
        suffix = "" if self.kind is MemberKind.METHOD else f" [{self.kind.value}]"
        return f"{self.qualified_name}({self.signature_key}){suffix}"


def is_private(name: str, hierarchy: typing.Iterable[type]) -> bool:
    """Whether *name* is a name-mangled private attribute of any class in *hierarchy*."""
    return any(name.startswith(f"_{cls.__name__.lstrip('_')}__") for cls in hierarchy)


def visibility_of(name: str) -> Visibility:
    return Visibility.PROTECTED if name.startswith("_") and not is_dunder(name) else Visibility.PUBLIC


def is_subclassable(target: type) -> bool:
    """Whether a new class may derive from *target*."""
    if getattr(target, "__final__", False):
        return False
    return bool(target.__flags__ & _TPFLAGS_BASETYPE)


def _resolve_hints(function: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(function, include_extras=True)
    except Exception:
        # Unresolvable forward references: fall back to the raw annotations.
        return dict(getattr(function, "__annotations__", {}))


def describe_function(
    function: Any,
    name: str,
    kind: MemberKind,
    declaring_type: type,
    introduced_by: type,
    **extra: Any,
) -> MemberDescriptor:
    """Build a :class:`MemberDescriptor` for a plain Python function."""
    unsupported = extra.pop("unsupported", None)
    try:
        signature: inspect.Signature | None = inspect.signature(function)
    except (TypeError, ValueError) as exc:
        signature = None
        unsupported = unsupported or f"signature cannot be introspected ({exc})"

    parameters: tuple[ParameterDescriptor, ...] = ()
    return_type = None
    if signature is not None:
        hints = _resolve_hints(function)
        declared = list(signature.parameters.values())
        if not declared or declared[0].kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            unsupported = unsupported or "instance members must accept the instance as first parameter"
        parameters = tuple(
            ParameterDescriptor.from_parameter(p, hints.get(p.name, p.annotation)) for p in declared[1:]
        )
        return_type = hints.get("return")

    return MemberDescriptor(
        name=name,
        kind=kind,
        declaring_type=declaring_type,
        introduced_by=introduced_by,
        function=function,
        signature=signature,
        parameters=parameters,
        return_type=return_type,
        generic_arity=len(getattr(function, "__type_params__", ())),
        visibility=visibility_of(name),
        is_async=inspect.iscoroutinefunction(function),
        abstract=bool(getattr(function, "__isabstractmethod__", False)),
        unsupported=unsupported,
        **extra,
    )


def _sort_key(member: MemberDescriptor) -> tuple[int, str, int, str]:
    depth = len(member.introduced_by.__mro__) - 1
    return (depth, member.name, _KIND_RANK[member.kind], member.signature_key)


def _layer_rank(target: type) -> dict[tuple[str, MemberKind], int]:
    """Member positions of an already synthesized proxy class, if *target* is one."""
    descriptor = vars(target).get(DESCRIPTOR_ATTR)
    if descriptor is None:
        return {}
    return {(m.name, m.kind): m.index for m in descriptor.members}


def analyze_members(target: type) -> list[MemberDescriptor]:
    """Return the overridable members of *target*, indexed in canonical order.

    Eligible members are public or protected instance functions and property
    accessors found through the MRO (``object`` excluded) that are not dunder
    methods, name-mangled privates, static or class methods, or marked with
    :func:`typing.final`. Members that reflection deems overridable but that
    cannot be overridden carry an ``unsupported`` reason instead of being
    dropped.

    The order is a pure function of (depth of the introducing class, name,
    accessor kind, signature). For a class that is itself a synthesized
    proxy, the order of the inner descriptor is kept so stacked proxies
    agree on member positions.
    """
    hierarchy = [cls for cls in target.__mro__ if cls is not object]
    seen: set[str] = set()
    members: list[MemberDescriptor] = []

    for cls in hierarchy:
        for name, value in vars(cls).items():
            if name in seen:
                continue
            seen.add(name)

            if is_dunder(name) or is_private(name, hierarchy):
                continue

            introduced_by = [c for c in hierarchy if name in vars(c)][-1]
            unsupported = None
            if name.startswith(RESERVED_PREFIX):
                unsupported = f"names starting with {RESERVED_PREFIX!r} are reserved for proxy state"

            if inspect.isfunction(value):
                if getattr(value, "__final__", False):
                    continue
                members.append(
                    describe_function(
                        value, name, MemberKind.METHOD, cls, introduced_by, unsupported=unsupported
                    )
                )
            elif isinstance(value, property):
                for attr, kind in _ACCESSORS:
                    accessor = getattr(value, attr)
                    if accessor is None or getattr(accessor, "__final__", False):
                        continue
                    if not inspect.isfunction(accessor):
                        unsupported = unsupported or f"{attr} of property is not a Python function"
                    members.append(
                        describe_function(accessor, name, kind, cls, introduced_by, unsupported=unsupported)
                    )

    members.sort(key=_sort_key)
    rank = _layer_rank(target)
    if rank:
        members.sort(key=lambda m: rank.get((m.name, m.kind), len(rank)))
    return [member.with_index(position) for position, member in enumerate(members)]


def analyze_constructors(target: type) -> list[MemberDescriptor]:
    """Return the constructors a subclass of *target* can forward to.

    Python classes have a single constructor, ``__init__`` as resolved
    through the MRO. Classes that cannot be subclassed have none.
    """
    if not is_subclassable(target):
        return []

    owner = next(cls for cls in target.__mro__ if "__init__" in vars(cls))
    init = vars(owner)["__init__"]
    if inspect.isfunction(init):
        return [describe_function(init, "__init__", MemberKind.CONSTRUCTOR, owner, owner)]

    # object.__init__ or a builtin slot: mirror the class call signature.
    try:
        signature = inspect.signature(target)
        params = [inspect.Parameter("self", inspect.Parameter.POSITIONAL_ONLY), *signature.parameters.values()]
        signature = signature.replace(parameters=params)
    except (TypeError, ValueError):
        signature = None
    parameters = (
        tuple(ParameterDescriptor.from_parameter(p, p.annotation) for p in list(signature.parameters.values())[1:])
        if signature is not None
        else ()
    )
    return [
        MemberDescriptor(
            name="__init__",
            kind=MemberKind.CONSTRUCTOR,
            declaring_type=owner,
            introduced_by=owner,
            function=init,
            signature=signature,
            parameters=parameters,
            return_type=None,
        )
    ]
