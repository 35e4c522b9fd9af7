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
"""Generic parameter mapping for proxies over generic classes.

A proxy over ``Repository[T]`` declares its own type parameter ``T'`` and
derives from ``Repository[T']``, so ``Proxy[int]`` behaves like
``Repository[int]``. Every annotation that mentions ``T`` is rewritten to
``T'`` in the proxy's member descriptors.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, replace
from typing import Any, ParamSpec, TypeVar, TypeVarTuple, get_args, get_origin

from pyintercept.kernel.exceptions import UnsupportedMemberException
from pyintercept.reflection.interfaces import is_interface
from pyintercept.reflection.members import MemberDescriptor
from pyintercept.reflection.parameters import output_element


@dataclass(frozen=True)
class GenericParameter:
    """Correspondence between an original type parameter and its proxy twin.

    Attributes:
        original: The target class's parameter.
        parameter: The parameter declared on the proxy class.
        base_constraint: A concrete-class bound, if any.
        interface_constraints: Interface bounds and value constraints that
            are interfaces.
        value_constraints: Concrete value constraints (``TypeVar("T", int, str)``).
    """

    original: Any
    parameter: Any
    base_constraint: type | None = None
    interface_constraints: tuple[type, ...] = ()
    value_constraints: tuple[Any, ...] = ()

    @property
    def variance(self) -> str:
        if getattr(self.original, "__covariant__", False):
            return "covariant"
        if getattr(self.original, "__contravariant__", False):
            return "contravariant"
        return "invariant"


def _split_constraints(original: TypeVar) -> GenericParameter:
    bound = original.__bound__
    base_constraint: type | None = None
    interfaces: list[type] = []
    values: list[Any] = []

    if bound is not None:
        if is_interface(bound):
            interfaces.append(bound)
        else:
            base_constraint = bound

    for constraint in original.__constraints__:
        if is_interface(constraint):
            interfaces.append(constraint)
        else:
            values.append(constraint)

    clone = TypeVar(  # type: ignore[misc]
        original.__name__,
        *original.__constraints__,
        bound=bound,
        covariant=original.__covariant__,
        contravariant=original.__contravariant__,
        infer_variance=getattr(original, "__infer_variance__", False),
    )
    return GenericParameter(
        original=original,
        parameter=clone,
        base_constraint=base_constraint,
        interface_constraints=tuple(interfaces),
        value_constraints=tuple(values),
    )


class GenericParameterMapper:
    """Maps the type parameters of a generic target onto fresh proxy parameters.

    The identity mapping (``GenericParameterMapper.DEFAULT``) is used for
    non-generic targets.
    """

    DEFAULT: GenericParameterMapper

    __slots__ = ("_parameters", "_mapping")

    def __init__(self, parameters: tuple[GenericParameter, ...] = ()) -> None:
        self._parameters = parameters
        self._mapping = {p.original: p.parameter for p in parameters}

    @classmethod
    def for_type(cls, target: type) -> GenericParameterMapper:
        originals = getattr(target, "__parameters__", ())
        if not originals:
            return cls.DEFAULT

        parameters: list[GenericParameter] = []
        for original in originals:
            if isinstance(original, TypeVar):
                parameters.append(_split_constraints(original))
            elif isinstance(original, ParamSpec):
                parameters.append(GenericParameter(original, ParamSpec(original.__name__)))
            elif isinstance(original, TypeVarTuple):
                parameters.append(GenericParameter(original, TypeVarTuple(original.__name__)))
            else:
                raise UnsupportedMemberException(target, str(original), "unsupported kind of type parameter")
        return cls(tuple(parameters))

    @property
    def is_generic(self) -> bool:
        return bool(self._parameters)

    @property
    def parameters(self) -> tuple[GenericParameter, ...]:
        return self._parameters

    @property
    def proxy_parameters(self) -> tuple[Any, ...]:
        return tuple(p.parameter for p in self._parameters)

    def map(self, annotation: Any) -> Any:
        """Rewrite *annotation* so original parameters become proxy parameters."""
        if not self._mapping:
            return annotation
        if _hashable(annotation) and annotation in self._mapping:
            return self._mapping[annotation]
        if get_origin(annotation) is None:
            return annotation
        free = getattr(annotation, "__parameters__", ())
        if not free:
            return annotation
        try:
            return annotation[tuple(self.map(p) for p in free)]
        except TypeError:
            return annotation

    def parameterize(self, base: type) -> Any:
        """The base class expression a proxy of *base* derives from."""
        if not self._parameters:
            return base
        return base[self.proxy_parameters]

    def rewrite(self, member: MemberDescriptor) -> MemberDescriptor:
        """Return *member* with every annotation passed through :meth:`map`."""
        if not self._mapping:
            return member

        parameters = []
        for p in member.parameters:
            annotation = self.map(p.annotation)
            is_output, element = output_element(annotation)
            parameters.append(replace(p, annotation=annotation, is_output=is_output, element_type=element))

        signature = member.signature
        if signature is not None:
            signature = signature.replace(
                parameters=[
                    sp.replace(annotation=self.map(sp.annotation))
                    if sp.annotation is not inspect.Parameter.empty
                    else sp
                    for sp in signature.parameters.values()
                ],
                return_annotation=self.map(signature.return_annotation),
            )

        return replace(
            member,
            parameters=tuple(parameters),
            return_type=self.map(member.return_type),
            signature=signature,
        )

    def __len__(self) -> int:
        return len(self._parameters)


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


GenericParameterMapper.DEFAULT = GenericParameterMapper()


def split_generic(target: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split a parameterized alias such as ``Repo[int]`` into ``(Repo, (int,))``.

    Plain classes are returned unchanged with no type arguments.
    """
    origin = get_origin(target)
    if isinstance(origin, type) and not isinstance(target, type):
        return origin, get_args(target)
    return target, ()
