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
"""Proxy synthesis — descriptors, synthesizer, interface forwarding, and cache."""

from pyintercept.proxy.cache import cache_key, cached_descriptors, clear_cache, get_or_synthesize
from pyintercept.proxy.descriptor import ProxyTypeDescriptor
from pyintercept.proxy.forwarder import InterfaceForwarder, normalize_interfaces
from pyintercept.proxy.synthesizer import ProxyTypeSynthesizer

__all__ = [
    "InterfaceForwarder",
    "ProxyTypeDescriptor",
    "ProxyTypeSynthesizer",
    "cache_key",
    "cached_descriptors",
    "clear_cache",
    "get_or_synthesize",
    "normalize_interfaces",
]
