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
"""Call handler contract and ordering."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, runtime_checkable

from pyintercept.pipeline.context import InvocationContext, InvocationOutcome

HIGHEST_PRECEDENCE: int = -(2**31)
LOWEST_PRECEDENCE: int = 2**31 - 1

Proceed = Callable[[], InvocationOutcome]

H = TypeVar("H", bound=type)


@runtime_checkable
class CallHandler(Protocol):
    """A unit of cross-cutting behavior in an invocation pipeline.

    Handlers run in ascending ``order``. ``invoke`` receives the call's
    context and a ``proceed`` continuation that runs the rest of the chain
    (and eventually the real member) and returns its outcome. A handler may
    change ``context.arguments`` before proceeding, change or replace the
    outcome afterwards, return its own outcome without proceeding, or
    proceed more than once.
    """

    order: int

    def invoke(self, context: InvocationContext, proceed: Proceed) -> InvocationOutcome: ...


def order(value: int) -> Callable[[H], H]:
    """Set the pipeline order of a handler class.

    Lower value = runs earlier (outermost). Undecorated handlers without an
    ``order`` attribute default to 0.
    """

    def decorator(cls: H) -> H:
        cls.order = value  # type: ignore[attr-defined]
        return cls

    return decorator


def get_order(handler: Any) -> int:
    """Return the order of *handler*, defaulting to 0."""
    value = getattr(handler, "order", 0)
    return value if isinstance(value, int) else 0


@dataclass(frozen=True)
class FunctionCallHandler:
    """Adapts a plain ``(context, proceed) -> outcome`` function to :class:`CallHandler`."""

    function: Callable[[InvocationContext, Proceed], InvocationOutcome]
    order: int = 0

    def invoke(self, context: InvocationContext, proceed: Proceed) -> InvocationOutcome:
        return self.function(context, proceed)

    def __repr__(self) -> str:
        return f"FunctionCallHandler({getattr(self.function, '__qualname__', self.function)!r}, order={self.order})"


def call_handler(
    order: int = 0,
) -> Callable[[Callable[[InvocationContext, Proceed], InvocationOutcome]], FunctionCallHandler]:
    """Turn a function into a :class:`FunctionCallHandler`.

    Usage::

        @call_handler(order=10)
        def audit(context, proceed):
            outcome = proceed()
            log.info("called", member=context.member.name)
            return outcome
    """

    def decorator(fn: Callable[[InvocationContext, Proceed], InvocationOutcome]) -> FunctionCallHandler:
        return FunctionCallHandler(fn, order)

    return decorator
