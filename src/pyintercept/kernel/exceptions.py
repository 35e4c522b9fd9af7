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
"""Unified exception hierarchy for pyintercept.

All interception errors inherit from InterceptionException, enabling unified
error handling across modules.

Categories:
- ConfigurationException: proxy synthesis failures, raised synchronously
  before any proxy type is published
- UnimplementedMemberException: the designed outcome of calling an
  additional-interface member that no handler answered
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class InterceptionException(Exception):
    """Base exception for all pyintercept errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "INTERCEPT_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Synthesis Exceptions
# =============================================================================


class ConfigurationException(InterceptionException):
    """A proxy type could not be synthesized for the requested configuration."""


class NotAnInterfaceException(ConfigurationException):
    """An additional interface argument is not an interface."""

    def __init__(self, interface: object) -> None:
        name = getattr(interface, "__qualname__", repr(interface))
        super().__init__(
            f"{name} is not an interface",
            code="INTERCEPT_001",
            context={"interface": name},
        )


class NoAccessibleConstructorException(ConfigurationException):
    """The target type has no constructor eligible for forwarding."""

    def __init__(self, target: type) -> None:
        super().__init__(
            f"{target.__qualname__} has no accessible constructor and cannot be subclassed",
            code="INTERCEPT_002",
            context={"target": target.__qualname__},
        )


class UnsupportedMemberException(ConfigurationException):
    """An otherwise eligible member cannot legally be overridden."""

    def __init__(self, target: type, member: str, reason: str) -> None:
        super().__init__(
            f"cannot intercept {target.__qualname__}.{member}: {reason}",
            code="INTERCEPT_003",
            context={"target": target.__qualname__, "member": member, "reason": reason},
        )


class MemberCollisionException(ConfigurationException):
    """Forwarding an additional interface would duplicate a member name or index."""

    def __init__(self, target: type, interface: type, member: str) -> None:
        super().__init__(
            f"{interface.__qualname__}.{member} collides with an existing member of {target.__qualname__}",
            code="INTERCEPT_004",
            context={
                "target": target.__qualname__,
                "interface": interface.__qualname__,
                "member": member,
            },
        )


# =============================================================================
# Call-time Outcomes
# =============================================================================


class UnimplementedMemberException(InterceptionException, NotImplementedError):
    """An additional-interface member was called and no handler produced a result.

    Additional interfaces carry no implementation of their own; behavior must
    come from a handler that short-circuits the pipeline.
    """

    def __init__(self, interface: type | None, member: str) -> None:
        owner = interface.__qualname__ if interface is not None else "<unknown>"
        super().__init__(
            f"{owner}.{member} has no implementation; attach a handler that answers it",
            code="INTERCEPT_005",
            context={"interface": owner, "member": member},
        )
