"""Tests for the pyintercept exception hierarchy."""

import pytest

from pyintercept.kernel.exceptions import (
    ConfigurationException,
    InterceptionException,
    MemberCollisionException,
    NoAccessibleConstructorException,
    NotAnInterfaceException,
    UnimplementedMemberException,
    UnsupportedMemberException,
)


class Orders:
    pass


class Auditable:
    pass


class TestInterceptionException:
    def test_basic_creation(self):
        exc = InterceptionException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_with_code_and_context(self):
        exc = InterceptionException("bad", code="INTERCEPT_999", context={"target": "Orders"})
        assert exc.code == "INTERCEPT_999"
        assert exc.context["target"] == "Orders"

    def test_context_not_shared(self):
        exc = InterceptionException("a")
        exc.context["key"] = "value"
        assert InterceptionException("b").context == {}


class TestConfigurationErrors:
    @pytest.mark.parametrize(
        "exc_cls",
        [
            NotAnInterfaceException,
            NoAccessibleConstructorException,
            UnsupportedMemberException,
            MemberCollisionException,
        ],
    )
    def test_are_configuration_exceptions(self, exc_cls):
        assert issubclass(exc_cls, ConfigurationException)
        assert issubclass(exc_cls, InterceptionException)

    def test_not_an_interface(self):
        exc = NotAnInterfaceException(Orders)
        assert exc.code == "INTERCEPT_001"
        assert exc.context == {"interface": "Orders"}
        assert "is not an interface" in str(exc)

    def test_not_an_interface_accepts_non_types(self):
        exc = NotAnInterfaceException(42)
        assert exc.context == {"interface": "42"}

    def test_no_accessible_constructor(self):
        exc = NoAccessibleConstructorException(bool)
        assert exc.code == "INTERCEPT_002"
        assert exc.context == {"target": "bool"}

    def test_unsupported_member(self):
        exc = UnsupportedMemberException(Orders, "place", "no signature")
        assert exc.code == "INTERCEPT_003"
        assert exc.context == {"target": "Orders", "member": "place", "reason": "no signature"}
        assert "Orders.place" in str(exc)

    def test_member_collision(self):
        exc = MemberCollisionException(Orders, Auditable, "audit")
        assert exc.code == "INTERCEPT_004"
        assert exc.context["interface"] == "Auditable"
        assert exc.context["member"] == "audit"


class TestUnimplementedMember:
    def test_is_not_implemented_error(self):
        exc = UnimplementedMemberException(Auditable, "audit")
        assert isinstance(exc, NotImplementedError)
        assert isinstance(exc, InterceptionException)
        assert not isinstance(exc, ConfigurationException)

    def test_code_and_context(self):
        exc = UnimplementedMemberException(Auditable, "audit")
        assert exc.code == "INTERCEPT_005"
        assert exc.context == {"interface": "Auditable", "member": "audit"}

    def test_unknown_owner(self):
        exc = UnimplementedMemberException(None, "audit")
        assert exc.context["interface"] == "<unknown>"
