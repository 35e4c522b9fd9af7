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
"""Matching rule contract, name-based rules, and combinators."""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from pyintercept.reflection.members import MemberDescriptor
from pyintercept.reflection.parameters import unwrap_annotation


@runtime_checkable
class MatchingRule(Protocol):
    """Stateless predicate deciding whether a policy applies to a member."""

    def matches(self, member: MemberDescriptor) -> bool: ...


def matches(rule: MatchingRule, member: MemberDescriptor) -> bool:
    """Evaluate *rule* against *member*."""
    return rule.matches(member)


def _names_of(annotation: Any) -> list[str]:
    annotation = unwrap_annotation(annotation)
    if annotation is None:
        return []
    if isinstance(annotation, str):
        return [annotation]
    if isinstance(annotation, type):
        return [annotation.__name__, annotation.__qualname__, f"{annotation.__module__}.{annotation.__qualname__}"]
    return [repr(annotation)]


def name_matches(pattern: str, name: str, ignore_case: bool = False) -> bool:
    """Glob-match *name* against *pattern* (``*``, ``?``, ``[...]``)."""
    if ignore_case:
        return fnmatch.fnmatchcase(name.lower(), pattern.lower())
    return fnmatch.fnmatchcase(name, pattern)


class TypeMatchingRule:
    """Matches types by name: simple name, qualified name, or ``module.qualname``.

    Used directly on a member, it matches the member's declaring type (or
    its interface, for forwarded members).
    """

    def __init__(self, pattern: str, ignore_case: bool = False) -> None:
        self.pattern = pattern
        self.ignore_case = ignore_case

    def matches_type(self, annotation: Any) -> bool:
        return any(name_matches(self.pattern, name, self.ignore_case) for name in _names_of(annotation))

    def matches(self, member: MemberDescriptor) -> bool:
        return self.matches_type(member.interface or member.declaring_type)

    def __repr__(self) -> str:
        return f"TypeMatchingRule({self.pattern!r}, ignore_case={self.ignore_case})"


class MemberNameMatchingRule:
    """Matches members whose name fits any of the given glob patterns."""

    def __init__(self, patterns: str | Iterable[str], ignore_case: bool = False) -> None:
        self.patterns = (patterns,) if isinstance(patterns, str) else tuple(patterns)
        self.ignore_case = ignore_case

    def matches(self, member: MemberDescriptor) -> bool:
        return any(name_matches(p, member.name, self.ignore_case) for p in self.patterns)


class AndMatchingRule:
    def __init__(self, *rules: MatchingRule) -> None:
        self.rules = rules

    def matches(self, member: MemberDescriptor) -> bool:
        return all(rule.matches(member) for rule in self.rules)


class OrMatchingRule:
    def __init__(self, *rules: MatchingRule) -> None:
        self.rules = rules

    def matches(self, member: MemberDescriptor) -> bool:
        return any(rule.matches(member) for rule in self.rules)


class NotMatchingRule:
    def __init__(self, rule: MatchingRule) -> None:
        self.rule = rule

    def matches(self, member: MemberDescriptor) -> bool:
        return not self.rule.matches(member)
