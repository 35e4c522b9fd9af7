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
"""Interface detection and closure-of-implemented-interfaces."""

from __future__ import annotations

import inspect
from abc import ABC, ABCMeta
from typing import Any, Generic, Protocol

_ROOTS: frozenset[Any] = frozenset({object, ABC, Generic, Protocol})


def is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def _declared_members(cls: type) -> list[tuple[str, Any]]:
    """Public or protected functions and properties declared directly on *cls*."""
    return [
        (name, value)
        for name, value in vars(cls).items()
        if not is_dunder(name) and (inspect.isfunction(value) or isinstance(value, property))
    ]


def is_interface(candidate: Any) -> bool:
    """Return ``True`` if *candidate* is an interface.

    An interface is either a :class:`typing.Protocol` class, or an ABC whose
    locally declared members are all abstract and whose bases are all
    interfaces themselves. A member-less ABC counts as a marker interface.
    """
    if not isinstance(candidate, type) or candidate in _ROOTS:
        return False
    if getattr(candidate, "_is_protocol", False):
        return True
    if not isinstance(candidate, ABCMeta):
        return False
    if any(not getattr(value, "__isabstractmethod__", False) for _, value in _declared_members(candidate)):
        return False
    return all(base in _ROOTS or is_interface(base) for base in candidate.__bases__)


def interface_closure(root: type) -> frozenset[type]:
    """Every interface reachable from *root* through its bases, *root* included.

    A fixed-point walk over the base-class graph; the result does not depend on
    the order in which bases are declared.
    """
    seen: set[type] = set()
    pending = [root]
    while pending:
        current = pending.pop()
        if current in seen:
            continue
        seen.add(current)
        pending.extend(base for base in current.__bases__ if base not in _ROOTS)
    return frozenset(cls for cls in seen if is_interface(cls))


def interface_sort_key(interface: type) -> tuple[int, str, str]:
    """Base interfaces first, then by qualified name."""
    return (len(interface.__mro__), interface.__module__, interface.__qualname__)


def interface_members(interface: type) -> list[tuple[str, Any]]:
    """Members an interface requires from its implementors, declared locally.

    Includes abstract dunder methods (``__len__`` on a ``Sized``-style
    interface) besides ordinary public and protected members.
    """
    abstract = getattr(interface, "__abstractmethods__", frozenset())
    result = _declared_members(interface)
    for name in sorted(abstract):
        value = vars(interface).get(name)
        if is_dunder(name) and inspect.isfunction(value):
            result.append((name, value))
    return sorted(result, key=lambda item: item[0])


def satisfies_protocol(target: type, interface: type) -> bool:
    """Return ``True`` if *target* structurally implements the Protocol *interface*.

    Every member the protocol declares must already be reachable on *target*
    through its MRO. ABC interfaces are only ever implemented nominally.
    """
    if not getattr(interface, "_is_protocol", False):
        return False
    return all(hasattr(target, name) for name, _ in interface_members(interface))
