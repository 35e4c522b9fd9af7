"""Tests for the public interception API."""

import pytest

import pyintercept
from pyintercept import (
    FunctionCallHandler,
    attach_handlers,
    call_handler,
    configure,
    create_proxy,
    pipeline_of,
    synthesize,
)
from pyintercept.core.config import Config
from pyintercept.core.properties import get_properties


class Inventory:
    def __init__(self, stock: int = 0) -> None:
        self.stock = stock

    def take(self, amount: int) -> int:
        self.stock -= amount
        return self.stock

    def peek(self) -> int:
        return self.stock


def counting(calls: list[str]) -> FunctionCallHandler:
    @call_handler()
    def handler(context, proceed):
        calls.append(context.member.name)
        return proceed()

    return handler


class TestCreateProxy:
    def test_create_with_handlers(self):
        calls: list[str] = []
        inventory = create_proxy(Inventory, 10, handlers={"take": [counting(calls)]})
        assert inventory.take(3) == 7
        assert calls == ["take"]
        assert inventory.peek() == 7

    def test_create_with_keyword_arguments(self):
        inventory = create_proxy(Inventory, stock=4)
        assert inventory.peek() == 4

    def test_uses_cache(self):
        first = create_proxy(Inventory)
        second = create_proxy(Inventory)
        assert type(first) is type(second)


class TestAttachHandlers:
    def test_attach_by_descriptor_index_and_name(self):
        calls: list[str] = []
        descriptor = synthesize(Inventory)
        inventory = create_proxy(Inventory, 5)
        peek = descriptor.member("peek")
        attach_handlers(inventory, {peek: [counting(calls)]})
        attach_handlers(inventory, {descriptor.member("take").index: [counting(calls)]})
        inventory.peek()
        inventory.take(1)
        assert calls == ["peek", "take"]

    def test_attach_replaces_only_touched_members(self):
        calls: list[str] = []
        inventory = create_proxy(Inventory, 5, handlers={"peek": [counting(calls)], "take": [counting(calls)]})
        attach_handlers(inventory, {"take": []})
        inventory.take(1)
        inventory.peek()
        assert calls == ["peek"]

    def test_attach_replaces_list(self):
        first: list[str] = []
        second: list[str] = []
        inventory = create_proxy(Inventory, 5, handlers={"peek": [counting(first)]})
        attach_handlers(inventory, {"peek": [counting(second)]})
        inventory.peek()
        assert first == []
        assert second == ["peek"]

    def test_unknown_keys_rejected(self):
        inventory = create_proxy(Inventory)
        with pytest.raises(KeyError):
            attach_handlers(inventory, {"missing": []})
        with pytest.raises(KeyError):
            attach_handlers(inventory, {99: []})
        with pytest.raises(KeyError):
            attach_handlers(inventory, {True: []})

    def test_descriptor_from_other_proxy_rejected(self):
        class Other:
            def peek(self) -> int:
                return 0

        foreign = synthesize(Other).member("peek")
        with pytest.raises(KeyError):
            attach_handlers(create_proxy(Inventory), {foreign: []})

    def test_pipeline_inspection(self):
        handler = counting([])
        inventory = create_proxy(Inventory, handlers={"peek": [handler]})
        pipeline = pipeline_of(inventory)
        assert pipeline.get("peek").handlers == (handler,)
        assert len(pipeline.get("take")) == 0
        pipeline.clear()
        assert len(pipeline.get("peek")) == 0

    def test_replace(self):
        calls: list[str] = []
        inventory = create_proxy(Inventory)
        pipeline_of(inventory).replace("peek", [counting(calls)])
        inventory.peek()
        assert calls == ["peek"]


class TestPipelineThroughProxy:
    def test_nesting_order(self):
        log: list[str] = []

        def tracing(label: str, order: int) -> FunctionCallHandler:
            @call_handler(order=order)
            def handler(context, proceed):
                log.append(f"{label}-before")
                outcome = proceed()
                log.append(f"{label}-after")
                return outcome

            return handler

        class Traced(Inventory):
            def peek(self) -> int:
                log.append("target")
                return super().peek()

        inventory = create_proxy(Traced, handlers={"peek": [tracing("B", 2), tracing("A", 1)]})
        inventory.peek()
        assert log == ["A-before", "B-before", "target", "B-after", "A-after"]

    def test_short_circuit_skips_target(self):
        @call_handler()
        def reserved(context, proceed):
            return context.create_return(-1)

        inventory = create_proxy(Inventory, 5, handlers={"take": [reserved]})
        assert inventory.take(2) == -1
        assert inventory.peek() == 5


class TestConfigure:
    def test_configure_binds_properties(self):
        config = Config({"pyintercept": {"interception": {"proxy_name_prefix": "Traced_"}}})
        properties = configure(config)
        assert properties.proxy_name_prefix == "Traced_"
        assert get_properties() is properties
        assert synthesize(Inventory).proxy_type.__name__.startswith("Traced_Inventory_")

    def test_configure_from_defaults_file(self, tmp_path):
        properties = configure(Config.from_file(tmp_path / "missing.yaml"))
        assert properties.proxy_module == "pyintercept.dynamic"

    def test_configure_uses_given_logging_port(self):
        class RecordingPort:
            def __init__(self):
                self.configured = []

            def configure(self, config):
                self.configured.append(config)

            def set_level(self, name, level):
                pass

        port = RecordingPort()
        config = Config({})
        configure(config, port)
        assert port.configured == [config]


def test_public_api_exports():
    for name in pyintercept.__all__:
        assert hasattr(pyintercept, name), name
