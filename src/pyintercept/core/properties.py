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
"""Interception configuration properties."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from pyintercept.core.config import config_properties


@config_properties(prefix="pyintercept.interception")
@dataclass(frozen=True)
class InterceptionProperties:
    """Configuration for proxy synthesis (pyintercept.interception.*).

    Attributes:
        proxy_name_prefix: Prefix of every synthesized class name.
        proxy_module: ``__module__`` reported by synthesized classes.
    """

    proxy_name_prefix: str = "Wrapped_"
    proxy_module: str = "pyintercept.dynamic"


_lock = threading.Lock()
_active = InterceptionProperties()


def get_properties() -> InterceptionProperties:
    """Return the process-wide interception properties."""
    return _active


def set_properties(properties: InterceptionProperties) -> None:
    """Replace the process-wide interception properties.

    Only proxy types synthesized afterwards are affected; published
    descriptors keep the names they were created with.
    """
    global _active
    with _lock:
        _active = properties
