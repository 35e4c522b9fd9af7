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
"""Parameter and return type matching, aware of parameter direction."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from pyintercept.matching.rules import TypeMatchingRule
from pyintercept.reflection.members import MemberDescriptor


class ParameterKind(Enum):
    """Which side of a call a type pattern is compared against.

    * ``INPUT`` — ordinary (non-output) parameters.
    * ``OUTPUT`` — ``Out[T]`` parameters, compared against ``T``.
    * ``INPUT_OR_OUTPUT`` — either of the above.
    * ``RETURN_VALUE`` — the return annotation.
    """

    INPUT = "input"
    OUTPUT = "output"
    INPUT_OR_OUTPUT = "input_or_output"
    RETURN_VALUE = "return_value"


@dataclass(frozen=True)
class ParameterTypeMatchingInfo:
    """One (type-name pattern, direction, case sensitivity) entry."""

    match: str
    kind: ParameterKind = ParameterKind.INPUT_OR_OUTPUT
    ignore_case: bool = False


class ParameterTypeMatchingRule:
    """Matches members with a parameter or return value of a given type.

    The rule matches when any configured entry matches: an input entry
    against the annotation of any non-output parameter, an output entry
    against the dereferenced type of any ``Out[T]`` parameter, and a return
    entry against the return annotation.

    Usage::

        rule = ParameterTypeMatchingRule([
            ParameterTypeMatchingInfo("Result", ParameterKind.OUTPUT),
        ])
    """

    def __init__(self, matches: Iterable[ParameterTypeMatchingInfo]) -> None:
        self._matches = tuple(matches)

    @property
    def parameter_matches(self) -> tuple[ParameterTypeMatchingInfo, ...]:
        return self._matches

    def matches(self, member: MemberDescriptor) -> bool:
        for info in self._matches:
            type_rule = TypeMatchingRule(info.match, info.ignore_case)

            if info.kind is ParameterKind.RETURN_VALUE:
                if type_rule.matches_type(member.return_type):
                    return True
                continue

            for parameter in member.parameters:
                if parameter.is_output:
                    if info.kind in (ParameterKind.OUTPUT, ParameterKind.INPUT_OR_OUTPUT) and type_rule.matches_type(
                        parameter.element_type
                    ):
                        return True
                elif info.kind in (ParameterKind.INPUT, ParameterKind.INPUT_OR_OUTPUT) and type_rule.matches_type(
                    parameter.annotation
                ):
                    return True
        return False

    def __repr__(self) -> str:
        return f"ParameterTypeMatchingRule({list(self._matches)!r})"
