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
"""Invocation pipeline — ordered handler chains and per-instance pipelines."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from pyintercept.pipeline.context import InvocationContext, InvocationOutcome
from pyintercept.pipeline.handlers import CallHandler, get_order
from pyintercept.reflection.members import MemberDescriptor

if TYPE_CHECKING:
    from pyintercept.proxy.descriptor import ProxyTypeDescriptor

logger = structlog.get_logger("pyintercept.pipeline")

Terminal = Callable[[InvocationContext], InvocationOutcome]


class HandlerPipeline:
    """Immutable, ordered chain of handlers for one member.

    Handlers are sorted by ascending order; equal orders keep the sequence
    they were supplied in.
    """

    __slots__ = ("_handlers",)

    def __init__(self, handlers: Iterable[CallHandler] = ()) -> None:
        self._handlers: tuple[CallHandler, ...] = tuple(sorted(handlers, key=get_order))

    @property
    def handlers(self) -> tuple[CallHandler, ...]:
        return self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def invoke(self, context: InvocationContext, terminal: Terminal) -> InvocationOutcome:
        """Run the chain for *context*, ending in *terminal* unless a handler short-circuits.

        An exception raised by a handler becomes an exception outcome for the
        enclosing handler; the pipeline never discards one.
        """
        if context.completed:
            raise RuntimeError(f"{context!r} has already completed and cannot be invoked again")

        handlers = self._handlers
        count = len(handlers)

        def step(position: int) -> InvocationOutcome:
            if position == count:
                return terminal(context)

            handler = handlers[position]
            try:
                outcome = handler.invoke(context, lambda: step(position + 1))
            except Exception as exc:
                return context.create_exception(exc)

            if not isinstance(outcome, InvocationOutcome):
                return context.create_exception(
                    TypeError(f"handler {handler!r} returned {type(outcome).__name__}, expected InvocationOutcome")
                )
            return outcome

        return step(0)


EMPTY_PIPELINE = HandlerPipeline()

HandlerKey = MemberDescriptor | int | str


class PipelineInstance:
    """Handler pipelines of one proxy instance, keyed by member index.

    Calls only read the current mapping. :meth:`attach` builds a new mapping
    and publishes it in one assignment, so concurrent calls observe either
    the old or the new pipelines for a member, never a partial list.
    Serializing configuration changes against live calls is the caller's
    concern.
    """

    __slots__ = ("_descriptor", "_pipelines", "_lock")

    def __init__(self, descriptor: ProxyTypeDescriptor) -> None:
        self._descriptor = descriptor
        self._pipelines: dict[int, HandlerPipeline] = {}
        self._lock = threading.Lock()

    @property
    def descriptor(self) -> ProxyTypeDescriptor:
        return self._descriptor

    def get(self, member: HandlerKey) -> HandlerPipeline:
        indices = self._resolve(member)
        return self._pipelines.get(indices[0], EMPTY_PIPELINE)

    def for_index(self, index: int) -> HandlerPipeline:
        return self._pipelines.get(index, EMPTY_PIPELINE)

    def attach(self, handlers: Mapping[HandlerKey, Iterable[CallHandler]]) -> None:
        """Replace the handler list of every member in *handlers*.

        Keys may be member descriptors, member indices, or member names; a
        property name addresses all of its accessors. Members not mentioned
        keep their current pipelines.
        """
        resolved = [(self._resolve(key), HandlerPipeline(chain)) for key, chain in handlers.items()]
        with self._lock:
            pipelines = dict(self._pipelines)
            for indices, pipeline in resolved:
                for index in indices:
                    if len(pipeline):
                        pipelines[index] = pipeline
                    else:
                        pipelines.pop(index, None)
            self._pipelines = pipelines

        logger.debug(
            "handlers_attached",
            proxy=self._descriptor.proxy_type.__qualname__,
            members=sorted(index for indices, _ in resolved for index in indices),
        )

    def replace(self, member: HandlerKey, handlers: Iterable[CallHandler]) -> None:
        self.attach({member: handlers})

    def clear(self) -> None:
        with self._lock:
            self._pipelines = {}

    def _resolve(self, key: Any) -> list[int]:
        descriptor = self._descriptor
        if isinstance(key, MemberDescriptor):
            members = descriptor.members
            if 0 <= key.index < len(members) and members[key.index] == key:
                return [key.index]
            raise KeyError(f"{key} is not a member of {descriptor.proxy_type.__qualname__}")
        if isinstance(key, bool):
            raise KeyError(key)
        if isinstance(key, int):
            if 0 <= key < len(descriptor.members):
                return [key]
            raise KeyError(f"no member with index {key} on {descriptor.proxy_type.__qualname__}")
        if isinstance(key, str):
            indices = [m.index for m in descriptor.members_named(key)]
            if indices:
                return indices
            raise KeyError(f"no member named {key!r} on {descriptor.proxy_type.__qualname__}")
        raise KeyError(key)
