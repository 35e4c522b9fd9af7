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
"""Marker-driven matching — members flagged with ``@intercept``."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from pyintercept.reflection.members import MemberDescriptor

T = TypeVar("T")

MARKER_ATTR = "__pyintercept_handlers__"


def intercept(*handlers: Any) -> Callable[[T], T]:
    """Mark a function, property or class for interception.

    The handlers (or handler factories) are recorded on the decorated object
    for the policy layer that assembles pipelines; marking a class marks
    every member it declares or inherits. A property is marked through its
    accessor functions, and the decorator may sit above or below
    ``@property``::

        class OrderService:
            @intercept(AuditHandler())
            def place(self, order: Order) -> Receipt: ...

            @intercept()
            @property
            def status(self) -> str: ...
    """

    def mark(obj: Any) -> None:
        existing = tuple(vars(obj).get(MARKER_ATTR, ())) if hasattr(obj, "__dict__") else ()
        setattr(obj, MARKER_ATTR, existing + handlers)

    def decorator(obj: T) -> T:
        if isinstance(obj, property):
            for accessor in (obj.fget, obj.fset, obj.fdel):
                if accessor is not None:
                    mark(accessor)
        else:
            mark(obj)
        return obj

    return decorator


def marked_handlers(obj: Any) -> tuple[Any, ...] | None:
    """Handlers recorded by :func:`intercept` on *obj*, or ``None`` when unmarked."""
    marker = getattr(obj, MARKER_ATTR, None)
    return None if marker is None else tuple(marker)


class MarkerMatchingRule:
    """Matches members that carry the interception marker.

    A member matches when its own function, any accessor of its property, or
    its declaring type (including through inheritance) was decorated with
    :func:`intercept`.
    """

    def __init__(self, marker_attr: str = MARKER_ATTR) -> None:
        self.marker_attr = marker_attr

    def matches(self, member: MemberDescriptor) -> bool:
        if getattr(member.function, self.marker_attr, None) is not None:
            return True
        prop = vars(member.declaring_type).get(member.name)
        if isinstance(prop, property) and any(
            getattr(accessor, self.marker_attr, None) is not None for accessor in (prop.fget, prop.fset, prop.fdel)
        ):
            return True
        owner = member.interface or member.declaring_type
        return getattr(owner, self.marker_attr, None) is not None
