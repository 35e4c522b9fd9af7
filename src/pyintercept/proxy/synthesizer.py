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
"""Proxy type synthesis — derive an intercepting subclass of a target class."""

from __future__ import annotations

import types
import uuid
from collections.abc import Iterable
from typing import Any

import structlog

from pyintercept.core.properties import InterceptionProperties, get_properties
from pyintercept.kernel.exceptions import (
    ConfigurationException,
    NoAccessibleConstructorException,
    UnsupportedMemberException,
)
from pyintercept.proxy.descriptor import ProxyTypeDescriptor
from pyintercept.proxy.forwarder import InterfaceForwarder, normalize_interfaces
from pyintercept.proxy.overrides import DescriptorCell, build_constructor, build_override, build_property
from pyintercept.reflection.generics import GenericParameterMapper, split_generic
from pyintercept.reflection.interfaces import interface_closure
from pyintercept.reflection.members import (
    DESCRIPTOR_ATTR,
    RESERVED_PREFIX,
    MemberDescriptor,
    MemberKind,
    analyze_constructors,
    analyze_members,
)

logger = structlog.get_logger("pyintercept.proxy")


def resolve_target(target: Any) -> tuple[type, tuple[Any, ...]]:
    """Return ``(base class, type arguments)`` for a class or parameterized alias."""
    base, type_arguments = split_generic(target)
    if not isinstance(base, type):
        raise ConfigurationException(
            f"{target!r} is not a class and cannot be intercepted",
            code="INTERCEPT_000",
            context={"target": repr(target)},
        )
    return base, type_arguments


class ProxyTypeSynthesizer:
    """Builds the proxy class and descriptor for one (target, interfaces) pair.

    The synthesized class derives from the target (and from every added
    interface), owns one pipeline slot per instance, overrides every
    eligible member to route through that pipeline, and forwards its
    constructor to the target's. Nothing is published unless every step
    succeeds.

    Usage::

        descriptor = ProxyTypeSynthesizer(OrderService, [Auditable]).synthesize()
        service = descriptor.proxy_type(repository)
    """

    def __init__(
        self,
        target: Any,
        additional_interfaces: Iterable[Any] = (),
        properties: InterceptionProperties | None = None,
    ) -> None:
        self._target = target
        self._base, self._type_arguments = resolve_target(target)
        self._requested = tuple(additional_interfaces)
        self._properties = properties or get_properties()

    def synthesize(self) -> ProxyTypeDescriptor:
        base = self._base

        constructors = analyze_constructors(base)
        if not constructors:
            raise NoAccessibleConstructorException(base)
        constructor = constructors[0]

        mapper = GenericParameterMapper.for_type(base)
        members = [mapper.rewrite(member) for member in analyze_members(base)]
        for member in members:
            if member.unsupported is not None:
                raise UnsupportedMemberException(base, member.name, member.unsupported)

        implemented = interface_closure(base)
        forwarder = InterfaceForwarder(base, normalize_interfaces(base, self._requested), mapper)
        forwarded = forwarder.describe(len(members), {m.name for m in members})
        for member in forwarded:
            if member.unsupported is not None:
                raise UnsupportedMemberException(base, member.name, member.unsupported)

        name = f"{self._properties.proxy_name_prefix}{base.__name__}_{uuid.uuid4().hex}"
        pipeline_attr = f"{RESERVED_PREFIX}pipeline_{uuid.uuid4().hex[:12]}"
        cell = DescriptorCell()

        namespace: dict[str, Any] = {
            "__module__": self._properties.proxy_module,
            "__qualname__": name,
            "__doc__": base.__doc__,
        }
        if not base.__itemsize__:
            namespace["__slots__"] = (pipeline_attr,)

        self._add_methods(namespace, members, pipeline_attr, cell, name)
        namespace["__init__"] = build_constructor(base, constructor, pipeline_attr, cell, name)
        forwarder.forward(namespace, forwarded, pipeline_attr, cell, name)

        bases = (mapper.parameterize(base), *forwarder.bases)
        try:
            proxy_type = types.new_class(name, bases, exec_body=lambda ns: ns.update(namespace))
        except TypeError as exc:
            raise ConfigurationException(
                f"cannot derive a proxy class from {base.__qualname__}: {exc}",
                code="INTERCEPT_006",
                context={"target": base.__qualname__, "bases": [b.__qualname__ for b in forwarder.bases]},
            ) from exc

        descriptor = ProxyTypeDescriptor(
            target_type=self._target,
            base_type=base,
            type_arguments=self._type_arguments,
            additional_interfaces=forwarder.interfaces,
            implemented_interfaces=implemented,
            members=(*members, *forwarded),
            constructor=constructor,
            generic_mapper=mapper,
            proxy_type=proxy_type,
            pipeline_attr=pipeline_attr,
        )
        setattr(proxy_type, DESCRIPTOR_ATTR, descriptor)
        cell.descriptor = descriptor

        logger.debug(
            "proxy_synthesized",
            target=base.__qualname__,
            proxy=name,
            interfaces=[i.__qualname__ for i in forwarder.interfaces],
            members=len(members),
            forwarded=len(forwarded),
        )
        return descriptor

    @staticmethod
    def _add_methods(
        namespace: dict[str, Any],
        members: list[MemberDescriptor],
        pipeline_attr: str,
        cell: DescriptorCell,
        qualname_prefix: str,
    ) -> None:
        accessors: dict[str, dict[MemberKind, Any]] = {}
        for member in members:
            function = build_override(member, pipeline_attr, cell, qualname_prefix)
            if member.kind is MemberKind.METHOD:
                namespace[member.name] = function
            else:
                accessors.setdefault(member.name, {})[member.kind] = function

        for name, overridden in accessors.items():
            owner = next(m.declaring_type for m in members if m.name == name)
            namespace[name] = build_property(vars(owner)[name], overridden)
