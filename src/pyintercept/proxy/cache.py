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
"""Process-wide memoization of synthesized proxy types.

The cache starts empty, grows monotonically, and is only emptied
explicitly. Synthesis runs outside the lock; the first descriptor to be
published for a key wins and later racers adopt it.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Any

import structlog

from pyintercept.proxy.descriptor import ProxyTypeDescriptor
from pyintercept.proxy.forwarder import normalize_interfaces
from pyintercept.proxy.synthesizer import ProxyTypeSynthesizer, resolve_target

logger = structlog.get_logger("pyintercept.proxy.cache")

CacheKey = tuple[Any, frozenset[type]]

_lock = threading.Lock()
_cache: dict[CacheKey, ProxyTypeDescriptor] = {}


def cache_key(target: Any, additional_interfaces: Iterable[Any]) -> CacheKey:
    """Key under which the proxy for *target* and *additional_interfaces* is cached.

    Interfaces are normalized first, so duplicates, base interfaces of
    requested ones, and interfaces the target already implements do not
    produce distinct keys.
    """
    base, _ = resolve_target(target)
    added = normalize_interfaces(base, additional_interfaces)
    return target, frozenset(added)


def get_or_synthesize(target: Any, additional_interfaces: Iterable[Any] = ()) -> ProxyTypeDescriptor:
    """Return the published descriptor for the key, synthesizing it on first use."""
    requested = tuple(additional_interfaces)
    key = cache_key(target, requested)

    published = _cache.get(key)
    if published is not None:
        return published

    candidate = ProxyTypeSynthesizer(target, key[1]).synthesize()
    with _lock:
        published = _cache.setdefault(key, candidate)

    if published is not candidate:
        logger.debug(
            "proxy_cache_race_lost",
            target=candidate.base_type.__qualname__,
            discarded=candidate.proxy_type.__qualname__,
        )
    return published


def cached_descriptors() -> list[ProxyTypeDescriptor]:
    with _lock:
        return list(_cache.values())


def clear_cache() -> None:
    """Forget every published descriptor. Intended for tests."""
    with _lock:
        _cache.clear()
