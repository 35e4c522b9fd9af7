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
"""Public interception API — synthesize, instantiate, and attach handlers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from pyintercept.core.config import Config
from pyintercept.core.properties import InterceptionProperties, set_properties
from pyintercept.logging.port import LoggingPort
from pyintercept.logging.structlog_adapter import StructlogAdapter
from pyintercept.pipeline.handlers import CallHandler
from pyintercept.pipeline.pipeline import HandlerKey, PipelineInstance
from pyintercept.proxy.cache import get_or_synthesize
from pyintercept.proxy.descriptor import ProxyTypeDescriptor
from pyintercept.reflection.members import DESCRIPTOR_ATTR

logger = structlog.get_logger("pyintercept")


def synthesize(target_type: Any, additional_interfaces: Iterable[Any] = ()) -> ProxyTypeDescriptor:
    """Return the proxy descriptor for *target_type* plus *additional_interfaces*.

    Descriptors are memoized process-wide: the same target and interface set
    always yield the identical descriptor.

    Raises:
        NotAnInterfaceException: An additional interface is not an interface.
        NoAccessibleConstructorException: The target cannot be subclassed.
        UnsupportedMemberException: An eligible member cannot be overridden.
        MemberCollisionException: A forwarded member name is already taken.
    """
    return get_or_synthesize(target_type, additional_interfaces)


def instantiate(descriptor: ProxyTypeDescriptor, *args: Any, **kwargs: Any) -> Any:
    """Create a proxy instance, passing the arguments to the target's constructor.

    Proxies of parameterized targets (``Repo[int]``) are created through the
    equally parameterized proxy class, so ``__orig_class__`` is kept.
    """
    proxy_type: Any = descriptor.proxy_type
    if descriptor.type_arguments and descriptor.generic_mapper.is_generic:
        proxy_type = proxy_type[descriptor.type_arguments]
    return proxy_type(*args, **kwargs)


def descriptor_of(obj: Any) -> ProxyTypeDescriptor | None:
    """The descriptor of a proxy instance or proxy class, ``None`` for anything else."""
    cls = obj if isinstance(obj, type) else type(obj)
    descriptor = getattr(cls, DESCRIPTOR_ATTR, None)
    return descriptor if isinstance(descriptor, ProxyTypeDescriptor) else None


def is_proxy(obj: Any) -> bool:
    return descriptor_of(obj) is not None


def pipeline_of(instance: Any) -> PipelineInstance:
    """The pipeline of a proxy instance (of its outermost proxy layer).

    Raises:
        TypeError: *instance* is not a constructed proxy.
    """
    descriptor = descriptor_of(instance)
    if descriptor is None or isinstance(instance, type):
        raise TypeError(f"{instance!r} is not a proxy instance")
    try:
        return object.__getattribute__(instance, descriptor.pipeline_attr)
    except AttributeError:
        raise TypeError(f"{instance!r} has not been initialized by its proxy constructor") from None


def attach_handlers(instance: Any, handlers: Mapping[HandlerKey, Iterable[CallHandler]]) -> None:
    """Replace the handler lists of the given members of *instance*.

    Members absent from *handlers* keep their current handlers.
    """
    pipeline_of(instance).attach(handlers)


def create_proxy(
    target_type: Any,
    *args: Any,
    interfaces: Iterable[Any] = (),
    handlers: Mapping[HandlerKey, Iterable[CallHandler]] | None = None,
    **kwargs: Any,
) -> Any:
    """Synthesize (or reuse) a proxy type, instantiate it, and attach *handlers*."""
    instance = instantiate(synthesize(target_type, interfaces), *args, **kwargs)
    if handlers:
        attach_handlers(instance, handlers)
    return instance


def configure(config: Config, logging_port: LoggingPort | None = None) -> InterceptionProperties:
    """Apply configuration: interception properties and logging.

    Logging is set up through *logging_port*, a :class:`StructlogAdapter`
    unless another backend is given. Only proxies synthesized afterwards pick
    up new naming properties.
    """
    if logging_port is None:
        logging_port = StructlogAdapter()
    logging_port.configure(config)
    properties = config.bind(InterceptionProperties)
    set_properties(properties)
    logger.debug(
        "interception_configured",
        proxy_name_prefix=properties.proxy_name_prefix,
        proxy_module=properties.proxy_module,
    )
    return properties
