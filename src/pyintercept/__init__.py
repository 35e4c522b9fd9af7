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
"""pyintercept — transparent method interception through synthesized proxy types.

Usage::

    from pyintercept import call_handler, create_proxy

    @call_handler(order=1)
    def audit(context, proceed):
        outcome = proceed()
        print(context.member.name, outcome.return_value)
        return outcome

    service = create_proxy(OrderService, repository, handlers={"place": [audit]})
"""

from pyintercept.interception import (
    attach_handlers,
    configure,
    create_proxy,
    descriptor_of,
    instantiate,
    is_proxy,
    pipeline_of,
    synthesize,
)
from pyintercept.kernel.exceptions import (
    ConfigurationException,
    InterceptionException,
    MemberCollisionException,
    NoAccessibleConstructorException,
    NotAnInterfaceException,
    UnimplementedMemberException,
    UnsupportedMemberException,
)
from pyintercept.matching import (
    MarkerMatchingRule,
    MatchingRule,
    ParameterKind,
    ParameterTypeMatchingInfo,
    ParameterTypeMatchingRule,
    intercept,
    matches,
)
from pyintercept.pipeline import (
    CallHandler,
    FunctionCallHandler,
    HandlerPipeline,
    InvocationContext,
    InvocationOutcome,
    PipelineInstance,
    call_handler,
)
from pyintercept.proxy import ProxyTypeDescriptor
from pyintercept.reflection import MemberDescriptor, MemberKind, Out, analyze_members, is_interface

__version__ = "0.1.0"

__all__ = [
    "CallHandler",
    "ConfigurationException",
    "FunctionCallHandler",
    "HandlerPipeline",
    "InterceptionException",
    "InvocationContext",
    "InvocationOutcome",
    "MarkerMatchingRule",
    "MatchingRule",
    "MemberCollisionException",
    "MemberDescriptor",
    "MemberKind",
    "NoAccessibleConstructorException",
    "NotAnInterfaceException",
    "Out",
    "ParameterKind",
    "ParameterTypeMatchingInfo",
    "ParameterTypeMatchingRule",
    "PipelineInstance",
    "ProxyTypeDescriptor",
    "UnimplementedMemberException",
    "UnsupportedMemberException",
    "analyze_members",
    "attach_handlers",
    "call_handler",
    "configure",
    "create_proxy",
    "descriptor_of",
    "instantiate",
    "intercept",
    "is_interface",
    "is_proxy",
    "matches",
    "pipeline_of",
    "synthesize",
]
