"""Shared fixtures: every test starts with an empty synthesis cache."""

import pytest

from pyintercept.core.properties import get_properties, set_properties
from pyintercept.proxy.cache import clear_cache


@pytest.fixture(autouse=True)
def _isolated_interception():
    properties = get_properties()
    clear_cache()
    yield
    clear_cache()
    set_properties(properties)
