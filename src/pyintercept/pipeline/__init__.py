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
"""Invocation pipeline — contexts, handlers, and ordered handler chains."""

from pyintercept.pipeline.context import ArgumentCollection, InvocationContext, InvocationOutcome
from pyintercept.pipeline.handlers import (
    HIGHEST_PRECEDENCE,
    LOWEST_PRECEDENCE,
    CallHandler,
    FunctionCallHandler,
    Proceed,
    call_handler,
    get_order,
    order,
)
from pyintercept.pipeline.pipeline import EMPTY_PIPELINE, HandlerPipeline, PipelineInstance

__all__ = [
    "ArgumentCollection",
    "CallHandler",
    "EMPTY_PIPELINE",
    "FunctionCallHandler",
    "HIGHEST_PRECEDENCE",
    "HandlerPipeline",
    "InvocationContext",
    "InvocationOutcome",
    "LOWEST_PRECEDENCE",
    "PipelineInstance",
    "Proceed",
    "call_handler",
    "get_order",
    "order",
]
