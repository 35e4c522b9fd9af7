"""Tests for matching rules — marker, parameter type, names and combinators."""

from __future__ import annotations

import pytest

from pyintercept.matching import (
    AndMatchingRule,
    MarkerMatchingRule,
    MatchingRule,
    MemberNameMatchingRule,
    NotMatchingRule,
    OrMatchingRule,
    ParameterKind,
    ParameterTypeMatchingInfo,
    ParameterTypeMatchingRule,
    TypeMatchingRule,
    intercept,
    marked_handlers,
    matches,
)
from pyintercept.reflection.members import MemberDescriptor, analyze_members
from pyintercept.reflection.parameters import Out


class Result:
    pass


class Query:
    pass


class Parser:
    def try_parse(self, text: str, result: Out[Result]) -> bool:
        return False

    def parse(self, text: str, fallback: Result) -> Result:
        return fallback

    def run(self, query: Query) -> int:
        return 0

    @intercept("audit")
    def marked(self) -> None:
        pass

    @property
    @intercept()
    def state(self) -> str:
        return ""


@intercept("tracing")
class TracedParser:
    def step(self) -> None:
        pass


class TracedChild(TracedParser):
    def child_step(self) -> None:
        pass


def member(cls: type, name: str) -> MemberDescriptor:
    return next(m for m in analyze_members(cls) if m.name == name)


class TestParameterTypeMatching:
    def test_output_parameter_matches_output_kind(self) -> None:
        rule = ParameterTypeMatchingRule([ParameterTypeMatchingInfo("Result", ParameterKind.OUTPUT)])
        assert matches(rule, member(Parser, "try_parse"))

    def test_input_only_parameter_does_not_match_output_kind(self) -> None:
        rule = ParameterTypeMatchingRule([ParameterTypeMatchingInfo("Result", ParameterKind.OUTPUT)])
        assert not matches(rule, member(Parser, "parse"))

    def test_output_parameter_does_not_match_input_kind(self) -> None:
        rule = ParameterTypeMatchingRule([ParameterTypeMatchingInfo("Result", ParameterKind.INPUT)])
        assert not matches(rule, member(Parser, "try_parse"))
        assert matches(rule, member(Parser, "parse"))

    def test_input_or_output(self) -> None:
        rule = ParameterTypeMatchingRule([ParameterTypeMatchingInfo("Result")])
        assert matches(rule, member(Parser, "try_parse"))
        assert matches(rule, member(Parser, "parse"))
        assert not matches(rule, member(Parser, "run"))

    def test_return_value(self) -> None:
        rule = ParameterTypeMatchingRule([ParameterTypeMatchingInfo("Result", ParameterKind.RETURN_VALUE)])
        assert matches(rule, member(Parser, "parse"))
        assert not matches(rule, member(Parser, "try_parse"))

    def test_return_value_builtin(self) -> None:
        rule = ParameterTypeMatchingRule([ParameterTypeMatchingInfo("bool", ParameterKind.RETURN_VALUE)])
        assert matches(rule, member(Parser, "try_parse"))

    def test_ignore_case(self) -> None:
        sensitive = ParameterTypeMatchingRule([ParameterTypeMatchingInfo("query", ParameterKind.INPUT)])
        insensitive = ParameterTypeMatchingRule(
            [ParameterTypeMatchingInfo("query", ParameterKind.INPUT, ignore_case=True)]
        )
        assert not matches(sensitive, member(Parser, "run"))
        assert matches(insensitive, member(Parser, "run"))

    def test_qualified_and_wildcard_names(self) -> None:
        qualified = ParameterTypeMatchingRule([ParameterTypeMatchingInfo(f"{__name__}.Query", ParameterKind.INPUT)])
        wildcard = ParameterTypeMatchingRule([ParameterTypeMatchingInfo("Qu*", ParameterKind.INPUT)])
        assert matches(qualified, member(Parser, "run"))
        assert matches(wildcard, member(Parser, "run"))

    def test_any_entry_matches(self) -> None:
        rule = ParameterTypeMatchingRule(
            [
                ParameterTypeMatchingInfo("Missing"),
                ParameterTypeMatchingInfo("Query", ParameterKind.INPUT),
            ]
        )
        assert matches(rule, member(Parser, "run"))
        assert len(rule.parameter_matches) == 2

    def test_unresolved_string_annotations(self) -> None:
        class Local:
            def load(self, target: Out[Unknown]) -> None:  # noqa: F821
                pass

        rule = ParameterTypeMatchingRule([ParameterTypeMatchingInfo("Unknown", ParameterKind.OUTPUT)])
        assert matches(rule, member(Local, "load"))


class TestMarkerMatching:
    def test_marked_function(self) -> None:
        rule = MarkerMatchingRule()
        assert matches(rule, member(Parser, "marked"))
        assert not matches(rule, member(Parser, "run"))

    def test_marked_property_accessor(self) -> None:
        assert matches(MarkerMatchingRule(), member(Parser, "state"))

    def test_marked_class(self) -> None:
        assert matches(MarkerMatchingRule(), member(TracedParser, "step"))

    def test_inherited_class_marker(self) -> None:
        assert matches(MarkerMatchingRule(), member(TracedChild, "child_step"))

    def test_marked_handlers(self) -> None:
        assert marked_handlers(Parser.marked) == ("audit",)
        assert marked_handlers(Parser.run) is None
        assert marked_handlers(TracedParser) == ("tracing",)

    def test_stacked_markers_accumulate(self) -> None:
        @intercept("b")
        @intercept("a")
        def handler_target(self) -> None:
            pass

        assert marked_handlers(handler_target) == ("a", "b")

    def test_marker_above_property(self) -> None:
        class Gauge:
            @intercept("cache")
            @property
            def level(self) -> int:
                return 0

            @level.setter
            def level(self, value: int) -> None:
                pass

        assert marked_handlers(Gauge.level.fget) == ("cache",)
        accessors = [m for m in analyze_members(Gauge) if m.name == "level"]
        assert len(accessors) == 2
        assert all(matches(MarkerMatchingRule(), m) for m in accessors)


class TestNameAndCombinators:
    def test_member_name_patterns(self) -> None:
        rule = MemberNameMatchingRule(["*parse"])
        assert matches(rule, member(Parser, "try_parse"))
        assert not matches(rule, member(Parser, "run"))

    def test_member_name_ignore_case(self) -> None:
        assert matches(MemberNameMatchingRule("RUN", ignore_case=True), member(Parser, "run"))

    def test_type_rule_matches_declaring_type(self) -> None:
        assert matches(TypeMatchingRule("Parser"), member(Parser, "run"))
        assert not matches(TypeMatchingRule("Traced*"), member(Parser, "run"))

    @pytest.mark.parametrize(
        ("rule", "expected"),
        [
            (AndMatchingRule(MemberNameMatchingRule("run"), TypeMatchingRule("Parser")), True),
            (AndMatchingRule(MemberNameMatchingRule("run"), TypeMatchingRule("Other")), False),
            (OrMatchingRule(MemberNameMatchingRule("nope"), TypeMatchingRule("Parser")), True),
            (NotMatchingRule(MemberNameMatchingRule("run")), False),
        ],
    )
    def test_combinators(self, rule, expected) -> None:
        assert matches(rule, member(Parser, "run")) is expected

    def test_rules_satisfy_protocol(self) -> None:
        assert isinstance(MarkerMatchingRule(), MatchingRule)
        assert isinstance(NotMatchingRule(MarkerMatchingRule()), MatchingRule)
