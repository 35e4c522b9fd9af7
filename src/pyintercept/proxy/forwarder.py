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
"""Interface forwarding — additional interfaces as pure interception surface."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pyintercept.kernel.exceptions import MemberCollisionException, NotAnInterfaceException
from pyintercept.proxy.overrides import DescriptorCell, build_override, build_property
from pyintercept.reflection.generics import GenericParameterMapper
from pyintercept.reflection.interfaces import (
    interface_closure,
    interface_members,
    interface_sort_key,
    is_interface,
    satisfies_protocol,
)
from pyintercept.reflection.members import RESERVED_PREFIX, MemberDescriptor, MemberKind, describe_function

_ACCESSORS = (
    ("fget", MemberKind.PROPERTY_GETTER),
    ("fset", MemberKind.PROPERTY_SETTER),
    ("fdel", MemberKind.PROPERTY_DELETER),
)


def normalize_interfaces(target: type, requested: Iterable[Any]) -> tuple[type, ...]:
    """Validate *requested* and return the interfaces a proxy of *target* has to add.

    The result is the transitive closure of the requested interfaces over
    their base interfaces, minus what *target* already implements, in a
    deterministic order (base interfaces first). *target* implements an
    interface nominally, or a Protocol structurally when it already defines
    every member the protocol declares. Requesting an interface twice, or one
    the target already implements, adds nothing.

    Raises:
        NotAnInterfaceException: An element of *requested* is not an interface.
    """
    closure: set[type] = set()
    for interface in requested:
        if not is_interface(interface):
            raise NotAnInterfaceException(interface)
        closure |= interface_closure(interface)
    closure -= interface_closure(target)
    return tuple(
        sorted(
            (interface for interface in closure if not satisfies_protocol(target, interface)),
            key=interface_sort_key,
        )
    )


def _derives(cls: type, base: type) -> bool:
    # issubclass() rejects protocols that are not runtime checkable.
    return base in cls.__mro__


def minimal_bases(interfaces: tuple[type, ...]) -> tuple[type, ...]:
    """Drop interfaces already inherited through another one, keeping a consistent MRO."""
    return tuple(
        interface
        for interface in sorted(interfaces, key=interface_sort_key, reverse=True)
        if not any(other is not interface and _derives(other, interface) for other in interfaces)
    )


class InterfaceForwarder:
    """Adds forwarding members for additional interfaces to a proxy namespace.

    Forwarded members route through the same instance pipeline as target
    members. With no handler answering them, their outcome is an
    :class:`~pyintercept.kernel.exceptions.UnimplementedMemberException`.
    """

    def __init__(self, target: type, interfaces: tuple[type, ...], mapper: GenericParameterMapper) -> None:
        self._target = target
        self._interfaces = interfaces
        self._implemented = interface_closure(target)
        self._mapper = mapper

    @property
    def interfaces(self) -> tuple[type, ...]:
        return self._interfaces

    @property
    def bases(self) -> tuple[type, ...]:
        return minimal_bases(self._interfaces)

    def describe(self, start_index: int, taken: set[str]) -> list[MemberDescriptor]:
        """Member descriptors for every forwarded member, numbered from *start_index*.

        A name declared by several interfaces of one inheritance chain is
        forwarded once, from the most derived of them. A name the target
        already provides through an interface it implements is left to the
        target.

        Raises:
            MemberCollisionException: A member name is already used by the
                target, or is declared by unrelated forwarded interfaces.
        """
        owners = self._owners()
        inherited = {name for interface in self._implemented for name, _ in interface_members(interface)}
        members: list[MemberDescriptor] = []
        index = start_index

        for interface in self._interfaces:
            for name, value in interface_members(interface):
                if owners[name] is not interface:
                    continue
                if name in inherited and hasattr(self._target, name):
                    continue
                if name in taken or hasattr(self._target, name):
                    raise MemberCollisionException(self._target, interface, name)
                unsupported = None
                if name.startswith(RESERVED_PREFIX):
                    unsupported = f"names starting with {RESERVED_PREFIX!r} are reserved for proxy state"

                if isinstance(value, property):
                    accessors = [(getattr(value, attr), kind) for attr, kind in _ACCESSORS]
                else:
                    accessors = [(value, MemberKind.METHOD)]

                for function, kind in accessors:
                    if function is None:
                        continue
                    member = describe_function(
                        function,
                        name,
                        kind,
                        interface,
                        interface,
                        index=index,
                        forwarded=True,
                        interface=interface,
                        unsupported=unsupported,
                    )
                    members.append(self._mapper.rewrite(member))
                    index += 1

        return members

    def _owners(self) -> dict[str, type]:
        """Map each forwarded name to the most derived interface declaring it."""
        declaring: dict[str, list[type]] = {}
        for interface in self._interfaces:
            for name, _ in interface_members(interface):
                declaring.setdefault(name, []).append(interface)

        owners: dict[str, type] = {}
        for name, interfaces in declaring.items():
            owner = next((i for i in interfaces if all(_derives(i, other) for other in interfaces)), None)
            if owner is None:
                raise MemberCollisionException(self._target, interfaces[-1], name)
            owners[name] = owner
        return owners

    def forward(
        self,
        namespace: dict[str, Any],
        members: list[MemberDescriptor],
        pipeline_attr: str,
        cell: DescriptorCell,
        qualname_prefix: str,
    ) -> None:
        """Install forwarding functions for *members* into *namespace*."""
        properties: dict[str, dict[MemberKind, Any]] = {}
        for member in members:
            function = build_override(member, pipeline_attr, cell, qualname_prefix)
            if member.kind is MemberKind.METHOD:
                namespace[member.name] = function
            else:
                properties.setdefault(member.name, {})[member.kind] = function

        for name, accessors in properties.items():
            namespace[name] = build_property(None, accessors)

    def __repr__(self) -> str:
        names = ", ".join(i.__qualname__ for i in self._interfaces)
        return f"InterfaceForwarder({self._target.__qualname__}, [{names}])"
