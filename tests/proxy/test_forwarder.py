"""Tests for additional-interface forwarding."""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

import pytest

from pyintercept import (
    ConfigurationException,
    MemberCollisionException,
    NotAnInterfaceException,
    UnimplementedMemberException,
    UnsupportedMemberException,
    attach_handlers,
    call_handler,
    instantiate,
    synthesize,
)
from pyintercept.proxy.forwarder import minimal_bases, normalize_interfaces


class Readable(ABC):
    @abstractmethod
    def read(self) -> bytes: ...


class Writable(ABC):
    @abstractmethod
    def write(self, data: bytes) -> int: ...


class Stream(Readable, Writable, ABC):
    @abstractmethod
    def flush(self) -> None: ...


class Labelled(ABC):
    @property
    @abstractmethod
    def label(self) -> str: ...


class Auditable(ABC):
    @abstractmethod
    def audit(self) -> str: ...


class AlsoAuditable(ABC):
    @abstractmethod
    def audit(self) -> str: ...


@runtime_checkable
class Closeable(Protocol):
    def close(self) -> None: ...


class Document:
    def __init__(self, text: str = "") -> None:
        self.text = text

    def render(self) -> str:
        return self.text


class AuditedDocument(Document):
    def audit(self) -> str:
        return "already audits"


class ReadableDocument(Document, Readable):
    def read(self) -> bytes:
        return self.text.encode()


class Reader(ABC):
    @abstractmethod
    def read(self) -> object: ...


class IntReader(Reader):
    @abstractmethod
    def read(self) -> int: ...

    @abstractmethod
    def skip(self, count: int) -> None: ...


class TextReader(Reader):
    @abstractmethod
    def read(self) -> str: ...


class Titled(Protocol):
    @property
    def title(self) -> str: ...


class TitledDocument(Document):
    @property
    def title(self) -> str:
        return self.text.title()


class ReaderDocument(Document, Reader):
    def read(self) -> object:
        return self.text


def answer(value):
    @call_handler()
    def handler(context, proceed):
        return context.create_return(value)

    return handler


class TestNormalization:
    def test_closure_and_order(self):
        assert normalize_interfaces(Document, [Stream]) == (Readable, Writable, Stream)

    def test_duplicates_collapse(self):
        assert normalize_interfaces(Document, [Auditable, Auditable]) == (Auditable,)

    def test_implemented_interfaces_skipped(self):
        assert normalize_interfaces(ReadableDocument, [Readable, Auditable]) == (Auditable,)

    def test_not_an_interface(self):
        with pytest.raises(NotAnInterfaceException) as info:
            normalize_interfaces(Document, [Document])
        assert info.value.code == "INTERCEPT_001"

    def test_minimal_bases(self):
        assert minimal_bases((Readable, Writable, Stream)) == (Stream,)

    def test_structurally_satisfied_protocol_skipped(self):
        assert normalize_interfaces(TitledDocument, [Titled, Auditable]) == (Auditable,)
        assert normalize_interfaces(Document, [Titled]) == (Titled,)


class TestForwarding:
    def test_proxy_implements_interfaces(self):
        descriptor = synthesize(Document, [Stream, Auditable])
        doc = instantiate(descriptor, "hello")
        assert isinstance(doc, Document)
        assert isinstance(doc, Stream)
        assert isinstance(doc, Readable)
        assert isinstance(doc, Auditable)
        assert doc.render() == "hello"
        assert descriptor.additional_interfaces == (Auditable, Readable, Writable, Stream)

    def test_forwarded_members_follow_target_members(self):
        descriptor = synthesize(Document, [Stream])
        target_count = len(descriptor.target_members)
        forwarded = descriptor.forwarded_members
        assert [m.index for m in forwarded] == list(range(target_count, target_count + len(forwarded)))
        assert [m.name for m in forwarded] == ["read", "write", "flush"]
        assert all(m.forwarded and m.implementation is None for m in forwarded)
        assert forwarded[0].interface is Readable

    def test_unanswered_member_faults(self):
        doc = instantiate(synthesize(Document, [Auditable]))
        with pytest.raises(UnimplementedMemberException) as info:
            doc.audit()
        assert isinstance(info.value, NotImplementedError)
        assert info.value.context == {"interface": "Auditable", "member": "audit"}

    def test_passthrough_handler_still_faults(self):
        doc = instantiate(synthesize(Document, [Auditable]))

        @call_handler()
        def passthrough(context, proceed):
            return proceed()

        attach_handlers(doc, {"audit": [passthrough]})
        with pytest.raises(UnimplementedMemberException):
            doc.audit()

    def test_handler_answers_forwarded_member(self):
        doc = instantiate(synthesize(Document, [Auditable, Writable]))
        attach_handlers(doc, {"audit": [answer("audited")], "write": [answer(5)]})
        assert doc.audit() == "audited"
        assert doc.write(b"abcde") == 5

    def test_forwarded_property(self):
        descriptor = synthesize(Document, [Labelled])
        doc = instantiate(descriptor)
        attach_handlers(doc, {"label": [answer("doc")]})
        assert doc.label == "doc"
        assert descriptor.member("label").kind.value == "getter"

    def test_protocol_interface(self):
        doc = instantiate(synthesize(Document, [Closeable]))
        assert isinstance(doc, Closeable)
        with pytest.raises(UnimplementedMemberException):
            doc.close()

    def test_redeclared_member_forwarded_once(self):
        descriptor = synthesize(Document, [IntReader])
        forwarded = descriptor.forwarded_members
        assert [m.name for m in forwarded] == ["read", "skip"]
        assert forwarded[0].interface is IntReader
        assert descriptor.additional_interfaces == (Reader, IntReader)

        doc = instantiate(descriptor)
        assert isinstance(doc, IntReader)
        attach_handlers(doc, {"read": [answer(7)]})
        assert doc.read() == 7

    def test_member_of_implemented_base_left_to_target(self):
        descriptor = synthesize(ReaderDocument, [IntReader])
        assert [m.name for m in descriptor.forwarded_members] == ["skip"]
        doc = instantiate(descriptor, "text")
        assert isinstance(doc, IntReader)
        assert doc.read() == "text"

    def test_plain_protocol_with_other_interfaces(self):
        descriptor = synthesize(Document, [Titled, Auditable])
        assert [m.name for m in descriptor.forwarded_members] == ["audit", "title"]
        doc = instantiate(descriptor)
        attach_handlers(doc, {"title": [answer("Untitled")]})
        assert doc.title == "Untitled"


class TestIdempotency:
    def test_repeated_interface(self):
        assert synthesize(Document, [Auditable, Auditable]) is synthesize(Document, [Auditable])

    def test_base_interface_implied(self):
        assert synthesize(Document, [Stream]) is synthesize(Document, [Stream, Readable, Writable])

    def test_already_implemented_interface_adds_nothing(self):
        descriptor = synthesize(ReadableDocument, [Readable])
        assert descriptor is synthesize(ReadableDocument)
        assert descriptor.additional_interfaces == ()
        assert Readable in descriptor.implemented_interfaces
        assert instantiate(descriptor, "x").read() == b"x"

    def test_structurally_implemented_protocol_adds_nothing(self):
        descriptor = synthesize(TitledDocument, [Titled])
        assert descriptor is synthesize(TitledDocument)
        assert descriptor.additional_interfaces == ()
        assert instantiate(descriptor, "a title").title == "A Title"


class TestCollisions:
    def test_collision_with_target_member(self):
        with pytest.raises(MemberCollisionException) as info:
            synthesize(AuditedDocument, [Auditable])
        assert info.value.code == "INTERCEPT_004"
        assert info.value.context["member"] == "audit"

    def test_collision_between_interfaces(self):
        with pytest.raises(MemberCollisionException):
            synthesize(Document, [Auditable, AlsoAuditable])

    def test_redeclaration_in_unrelated_interfaces(self):
        with pytest.raises(MemberCollisionException) as info:
            synthesize(Document, [IntReader, TextReader])
        assert info.value.context["member"] == "read"

    def test_reserved_name_in_interface(self):
        class Leaky(ABC):
            @abstractmethod
            def _pyintercept_state(self) -> None: ...

        with pytest.raises(UnsupportedMemberException):
            synthesize(Document, [Leaky])

    def test_metaclass_conflict(self):
        class Meta(type):
            pass

        class Odd(metaclass=Meta):
            def run(self) -> None: ...

        with pytest.raises(ConfigurationException) as info:
            synthesize(Odd, [Auditable])
        assert info.value.code == "INTERCEPT_006"
        assert isinstance(info.value.__cause__, TypeError)
