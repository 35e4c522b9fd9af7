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
"""Parameter model — output parameters and annotation unwrapping."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Annotated, Any, Generic, TypeVar, get_args, get_origin

T = TypeVar("T")


class Out(Generic[T]):
    """Box passed for an output parameter; the callee assigns :attr:`value`.

    Annotating a parameter as ``Out[Result]`` marks it as an output
    parameter whose dereferenced type is ``Result``::

        def try_parse(self, text: str, result: Out[Result]) -> bool:
            result.value = Result(text)
            return True
    """

    __slots__ = ("value",)

    def __init__(self, value: T | None = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Out({self.value!r})"


def unwrap_annotation(annotation: Any) -> Any:
    """Strip ``Annotated[...]`` metadata from *annotation*."""
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def output_element(annotation: Any) -> tuple[bool, Any]:
    """Return ``(is_output, element_type)`` for a parameter annotation.

    String annotations of the form ``"Out[X]"`` are recognised as written,
    for modules that postpone evaluation and cannot be resolved.
    """
    annotation = unwrap_annotation(annotation)
    if get_origin(annotation) is Out:
        args = get_args(annotation)
        return True, unwrap_annotation(args[0]) if args else None
    if annotation is Out:
        return True, None
    if isinstance(annotation, str):
        text = annotation.strip()
        if text.startswith("Out[") and text.endswith("]"):
            return True, text[4:-1].strip()
    return False, annotation


def type_name(annotation: Any) -> str:
    """Stable textual form of an annotation, used in signature keys."""
    if annotation is None or annotation is inspect.Parameter.empty:
        return ""
    if isinstance(annotation, str):
        return annotation
    if isinstance(annotation, type):
        return f"{annotation.__module__}.{annotation.__qualname__}"
    return repr(annotation)


@dataclass(frozen=True)
class ParameterDescriptor:
    """One declared parameter of an interceptable member.

    Attributes:
        name: Parameter name.
        annotation: Resolved annotation, or ``None`` when unannotated.
        kind: The :class:`inspect.Parameter` kind.
        is_output: Whether the parameter is annotated ``Out[T]``.
        element_type: The dereferenced type for output parameters, otherwise
            the unwrapped annotation.
    """

    name: str
    annotation: Any
    kind: inspect._ParameterKind
    is_output: bool = False
    element_type: Any = None

    @classmethod
    def from_parameter(cls, parameter: inspect.Parameter, annotation: Any) -> ParameterDescriptor:
        if annotation is inspect.Parameter.empty:
            annotation = None
        is_output, element = output_element(annotation)
        return cls(
            name=parameter.name,
            annotation=annotation,
            kind=parameter.kind,
            is_output=is_output,
            element_type=element,
        )
