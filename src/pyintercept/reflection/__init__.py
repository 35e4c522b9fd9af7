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
"""Reflection support — member eligibility, generics, and interfaces."""

from pyintercept.reflection.generics import GenericParameter, GenericParameterMapper, split_generic
from pyintercept.reflection.interfaces import interface_closure, is_interface, satisfies_protocol
from pyintercept.reflection.members import (
    MemberDescriptor,
    MemberKind,
    Visibility,
    analyze_constructors,
    analyze_members,
)
from pyintercept.reflection.parameters import Out, ParameterDescriptor

__all__ = [
    "GenericParameter",
    "GenericParameterMapper",
    "MemberDescriptor",
    "MemberKind",
    "Out",
    "ParameterDescriptor",
    "Visibility",
    "analyze_constructors",
    "analyze_members",
    "interface_closure",
    "is_interface",
    "satisfies_protocol",
    "split_generic",
]
