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
"""StructlogAdapter — default LoggingPort implementation using structlog."""

from __future__ import annotations

import logging
import sys

import structlog

from pyintercept.core.config import Config


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


class StructlogAdapter:
    """Logging adapter backed by structlog.

    Reads ``pyintercept.logging.format`` (``console`` or ``json``) and the
    ``pyintercept.logging.level`` section, where ``root`` sets the root level
    and any other key sets the level of that logger.
    """

    def configure(self, config: Config) -> None:
        levels = {k: str(v) for k, v in config.get_section("pyintercept.logging.level").items()}
        root_level = levels.pop("root", "INFO")
        json_output = str(config.get("pyintercept.logging.format", "console")).lower() == "json"

        renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                renderer,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", stream=sys.stdout, level=_level(root_level), force=True)

        for name, level in levels.items():
            self.set_level(name, level)

    def set_level(self, name: str, level: str) -> None:
        """Set the log level of a stdlib logger; unknown level names mean ``INFO``."""
        logging.getLogger(name).setLevel(_level(level))
