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
"""Function builders for the members of synthesized proxy classes."""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, get_args

from pyintercept.kernel.exceptions import UnimplementedMemberException
from pyintercept.pipeline.context import InvocationContext, InvocationOutcome
from pyintercept.pipeline.pipeline import EMPTY_PIPELINE, HandlerPipeline, PipelineInstance
from pyintercept.reflection.members import MemberDescriptor, MemberKind

if TYPE_CHECKING:
    from pyintercept.proxy.descriptor import ProxyTypeDescriptor


class DescriptorCell:
    """Late-bound reference to the descriptor of the proxy being built.

    Member functions are created before their class and its descriptor
    exist; the synthesizer fills the cell once both are complete.
    """

    __slots__ = ("descriptor",)

    def __init__(self) -> None:
        self.descriptor: ProxyTypeDescriptor | None = None


def _pipeline_of(instance: Any, pipeline_attr: str) -> PipelineInstance | None:
    try:
        return object.__getattribute__(instance, pipeline_attr)
    except AttributeError:
        # Called before the proxy constructor ran, e.g. from __new__.
        return None


def _type_arguments(instance: Any, cell: DescriptorCell) -> tuple[Any, ...]:
    orig_class = getattr(instance, "__orig_class__", None)
    if orig_class is not None:
        return get_args(orig_class)
    return cell.descriptor.type_arguments if cell.descriptor is not None else ()


def _terminal(member: MemberDescriptor) -> Callable[[InvocationContext], InvocationOutcome]:
    implementation = member.implementation

    if implementation is None:
        owner = member.interface or member.declaring_type

        def unimplemented(context: InvocationContext) -> InvocationOutcome:
            return context.create_exception(UnimplementedMemberException(owner, member.name))

        return unimplemented

    def call_base(context: InvocationContext) -> InvocationOutcome:
        try:
            return context.create_return(implementation(context.target, *context.args, **context.kwargs))
        except Exception as exc:
            return context.create_exception(exc)

    return call_base


def build_override(
    member: MemberDescriptor,
    pipeline_attr: str,
    cell: DescriptorCell,
    qualname_prefix: str,
) -> Callable[..., Any]:
    """Build the function that replaces *member* on the proxy class.

    The function binds the live arguments into an :class:`InvocationContext`
    and runs the instance pipeline registered for ``member.index``. Without
    handlers, members with a base implementation call it directly.
    """
    implementation = member.implementation
    index = member.index
    terminal = _terminal(member)

    def intercept(self: Any, /, *args: Any, **kwargs: Any) -> Any:
        pipeline = _pipeline_of(self, pipeline_attr)
        handlers: HandlerPipeline = pipeline.for_index(index) if pipeline is not None else EMPTY_PIPELINE
        if implementation is not None and not len(handlers):
            return implementation(self, *args, **kwargs)

        context = InvocationContext.for_call(self, member, args, kwargs, _type_arguments(self, cell))
        try:
            outcome = handlers.invoke(context, terminal)
        finally:
            context.complete()
        return outcome.unwrap()

    functools.update_wrapper(intercept, member.function)
    intercept.__qualname__ = f"{qualname_prefix}.{member.name}"
    intercept.__isabstractmethod__ = False  # type: ignore[attr-defined]
    intercept.__signature__ = member.signature  # type: ignore[attr-defined]
    if member.is_async:
        inspect.markcoroutinefunction(intercept)
    return intercept


def build_property(
    original: property | None,
    accessors: dict[MemberKind, Callable[..., Any]],
) -> property:
    """Rebuild a property from intercepting accessors and the untouched originals."""
    fget = accessors.get(MemberKind.PROPERTY_GETTER, original.fget if original else None)
    fset = accessors.get(MemberKind.PROPERTY_SETTER, original.fset if original else None)
    fdel = accessors.get(MemberKind.PROPERTY_DELETER, original.fdel if original else None)
    return property(fget, fset, fdel, original.__doc__ if original else None)


def build_constructor(
    base: type,
    constructor: MemberDescriptor,
    pipeline_attr: str,
    cell: DescriptorCell,
    qualname_prefix: str,
) -> Callable[..., None]:
    """Build ``__init__``: install an empty pipeline, then run the base constructor.

    The pipeline exists before the base constructor runs, so members it calls
    are already intercepted. Value types (``int`` or ``tuple`` subclasses,
    named tuples) take their arguments in ``__new__`` and inherit
    ``object.__init__``; for those the arguments are not passed on.
    """
    base_init = constructor.function
    arguments_consumed_by_new = base_init is object.__init__ and base.__new__ is not object.__new__

    def __init__(self: Any, /, *args: Any, **kwargs: Any) -> None:
        object.__setattr__(self, pipeline_attr, PipelineInstance(cell.descriptor))  # type: ignore[arg-type]
        if arguments_consumed_by_new:
            base_init(self)
        else:
            base_init(self, *args, **kwargs)

    __init__.__qualname__ = f"{qualname_prefix}.__init__"
    __init__.__doc__ = getattr(base_init, "__doc__", None)
    if constructor.signature is not None:
        __init__.__signature__ = constructor.signature  # type: ignore[attr-defined]
    return __init__
