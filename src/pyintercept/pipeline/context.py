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
"""Per-call invocation state — InvocationContext and InvocationOutcome."""

from __future__ import annotations

import inspect
from collections.abc import Iterator, MutableMapping
from dataclasses import dataclass
from typing import Any, NoReturn

from pyintercept.reflection.members import MemberDescriptor


@dataclass
class InvocationOutcome:
    """Result of running an invocation: a return value or an exception.

    Attributes:
        return_value: The value to hand back to the caller.
        exception: The exception to raise at the caller, with its original
            identity and traceback.
    """

    return_value: Any = None
    exception: BaseException | None = None

    @property
    def has_exception(self) -> bool:
        return self.exception is not None

    def unwrap(self) -> Any:
        """Return the value, or raise the carried exception unchanged."""
        if self.exception is not None:
            raise self.exception
        return self.return_value


class ArgumentCollection(MutableMapping[str, Any]):
    """Mutable view of the bound arguments of a call, ``self`` excluded.

    Keys are the member's parameter names. Values may be replaced but
    parameters cannot be added or removed.
    """

    __slots__ = ("_bound", "_self_name")

    def __init__(self, bound: inspect.BoundArguments) -> None:
        self._bound = bound
        self._self_name = next(iter(bound.signature.parameters))

    def _check(self, name: str) -> None:
        if name == self._self_name or name not in self._bound.arguments:
            raise KeyError(name)

    def __getitem__(self, name: str) -> Any:
        self._check(name)
        return self._bound.arguments[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._check(name)
        self._bound.arguments[name] = value

    def __delitem__(self, name: str) -> NoReturn:
        raise TypeError("arguments of an invocation cannot be removed")

    def __iter__(self) -> Iterator[str]:
        return (name for name in self._bound.arguments if name != self._self_name)

    def __len__(self) -> int:
        return len(self._bound.arguments) - 1

    def at(self, position: int) -> Any:
        """Argument value by declared position."""
        return self[list(self)[position]]

    def __repr__(self) -> str:
        return f"ArgumentCollection({dict(self.items())!r})"


class InvocationContext:
    """Mutable record of one intercepted call, handed to every handler.

    A context belongs to the call that created it and is completed when the
    outcome is returned to the caller; a completed context cannot be run
    through a pipeline again.

    Attributes:
        target: The proxy instance being called.
        member: Descriptor of the member being called.
        arguments: Bound arguments, mutable by handlers before proceeding.
        type_arguments: Type arguments the proxy was parameterized with.
        items: Scratch space shared by the handlers of this call.
    """

    __slots__ = ("target", "member", "type_arguments", "items", "_bound", "_arguments", "_completed")

    def __init__(
        self,
        target: Any,
        member: MemberDescriptor,
        bound: inspect.BoundArguments,
        type_arguments: tuple[Any, ...] = (),
    ) -> None:
        self.target = target
        self.member = member
        self.type_arguments = type_arguments
        self.items: dict[str, Any] = {}
        self._bound = bound
        self._arguments = ArgumentCollection(bound)
        self._completed = False

    @classmethod
    def for_call(
        cls,
        target: Any,
        member: MemberDescriptor,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        type_arguments: tuple[Any, ...] = (),
    ) -> InvocationContext:
        """Bind the live arguments of a call; raises ``TypeError`` like a direct call would."""
        assert member.signature is not None
        bound = member.signature.bind(target, *args, **kwargs)
        bound.apply_defaults()
        return cls(target, member, bound, type_arguments)

    @property
    def arguments(self) -> ArgumentCollection:
        return self._arguments

    @property
    def args(self) -> tuple[Any, ...]:
        """Positional arguments for the real call, ``self`` excluded."""
        return self._bound.args[1:]

    @property
    def kwargs(self) -> dict[str, Any]:
        return self._bound.kwargs

    @property
    def completed(self) -> bool:
        return self._completed

    def complete(self) -> None:
        self._completed = True

    def create_return(self, value: Any) -> InvocationOutcome:
        return InvocationOutcome(return_value=value)

    def create_exception(self, exception: BaseException) -> InvocationOutcome:
        return InvocationOutcome(exception=exception)

    def __repr__(self) -> str:
        return f"InvocationContext({self.member.qualified_name}, {self._arguments!r})"
