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
"""ProxyTypeDescriptor — the published result of proxy synthesis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pyintercept.reflection.generics import GenericParameterMapper
from pyintercept.reflection.members import MemberDescriptor, MemberKind

_ACCESSOR_ATTRS = {
    MemberKind.PROPERTY_GETTER: "fget",
    MemberKind.PROPERTY_SETTER: "fset",
    MemberKind.PROPERTY_DELETER: "fdel",
}


@dataclass(frozen=True, eq=False)
class ProxyTypeDescriptor:
    """Everything known about one synthesized proxy type.

    Created once per distinct (target type, interface set) and never mutated
    after it is published in the synthesis cache.

    Attributes:
        target_type: The requested target, possibly a parameterized alias.
        base_type: The class the proxy derives from (the alias origin for
            generic targets).
        type_arguments: Type arguments of a parameterized target.
        additional_interfaces: Interfaces added by the proxy, transitively
            closed and excluding those the target already implements.
        implemented_interfaces: Interfaces the target implemented before
            interception.
        members: Target members followed by forwarded members; each member's
            ``index`` is its position here.
        constructor: The constructor the proxy forwards to.
        generic_mapper: Mapping from target to proxy type parameters.
        proxy_type: The synthesized class.
        pipeline_attr: Instance attribute holding the pipeline.
    """

    target_type: Any
    base_type: type
    type_arguments: tuple[Any, ...]
    additional_interfaces: tuple[type, ...]
    implemented_interfaces: frozenset[type]
    members: tuple[MemberDescriptor, ...]
    constructor: MemberDescriptor
    generic_mapper: GenericParameterMapper
    proxy_type: type
    pipeline_attr: str
    _by_name: dict[str, tuple[MemberDescriptor, ...]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        by_name: dict[str, list[MemberDescriptor]] = {}
        for member in self.members:
            by_name.setdefault(member.name, []).append(member)
        object.__setattr__(self, "_by_name", {name: tuple(group) for name, group in by_name.items()})

    @property
    def target_members(self) -> tuple[MemberDescriptor, ...]:
        return tuple(m for m in self.members if not m.forwarded)

    @property
    def forwarded_members(self) -> tuple[MemberDescriptor, ...]:
        return tuple(m for m in self.members if m.forwarded)

    def members_named(self, name: str) -> tuple[MemberDescriptor, ...]:
        return self._by_name.get(name, ())

    def member_for(self, function: Any) -> MemberDescriptor:
        """The member declared by *function*, or whose proxy override *function* is."""
        for member in self.members:
            if member.function is function or self._override_of(member) is function:
                return member
        raise KeyError(f"{function!r} is not a member of {self.proxy_type.__qualname__}")

    def _override_of(self, member: MemberDescriptor) -> Any:
        override = vars(self.proxy_type).get(member.name)
        if isinstance(override, property):
            return getattr(override, _ACCESSOR_ATTRS[member.kind])
        return override

    def member(self, key: str | int, kind: MemberKind | None = None) -> MemberDescriptor:
        """Look up a member by index, or by name and optionally accessor kind.

        Raises:
            KeyError: No member matches, or a name matches several accessors
                and no *kind* was given.
        """
        if isinstance(key, int):
            return self.members[key]
        candidates = [m for m in self.members_named(key) if kind is None or m.kind is kind]
        if len(candidates) != 1:
            raise KeyError(f"{key!r} matches {len(candidates)} members of {self.proxy_type.__qualname__}")
        return candidates[0]

    def __repr__(self) -> str:
        interfaces = ", ".join(i.__qualname__ for i in self.additional_interfaces)
        return f"ProxyTypeDescriptor({self.proxy_type.__qualname__}, target={self.base_type.__qualname__}, interfaces=[{interfaces}])"
