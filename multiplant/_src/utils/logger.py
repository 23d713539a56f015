# SPDX-FileCopyrightText: Copyright (c) 2025 The Newton Developers
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Message logging for plant assembly and model parsing.

Records are emitted on the ``"multiplant"`` logger, so applications can route
or silence them through the standard :mod:`logging` configuration. The first
use attaches a colored stream handler and sets the level to ``NOTIF``.
"""

import logging
from enum import IntEnum
from typing import ClassVar


class LogLevel(IntEnum):
    """Enumeration for log levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    NOTIF = logging.INFO + 5
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class Logger(logging.Formatter):
    """Formatter prefixing records with a colored header and coloring them by level."""

    NAME = "multiplant"
    """Name of the library logger."""

    HEADER = "[MULTIPLANT]"
    HEADERCOL = "\x1b[38;5;39m"

    WHITE = "\x1b[37m"
    RED = "\x1b[31;20m"
    BOLD_RED = "\x1b[31;1m"
    BLUE = "\x1b[34;20m"
    GREEN = "\x1b[32;20m"
    YELLOW = "\x1b[33;20m"
    RESET = "\x1b[0m"

    LINE_FORMAT = "[%(asctime)s][%(filename)s:%(lineno)d][%(levelname)s]: %(message)s"
    """Line format for the log messages, including timestamp, filename, line number, log level, and message."""

    COLORS: ClassVar[dict[int, str]] = {
        LogLevel.DEBUG: BLUE,
        LogLevel.INFO: WHITE,
        LogLevel.NOTIF: GREEN,
        LogLevel.WARNING: YELLOW,
        LogLevel.ERROR: RED,
        LogLevel.CRITICAL: BOLD_RED,
    }
    """Dictionary mapping log levels to their respective colors."""

    def __init__(self):
        super().__init__()

        logging.addLevelName(LogLevel.NOTIF, "NOTIF")

        self._streamhandler = logging.StreamHandler()
        self._streamhandler.setFormatter(self)

        logger = logging.getLogger(self.NAME)
        logger.addHandler(self._streamhandler)
        logger.setLevel(LogLevel.NOTIF)
        logger.propagate = False

    def format(self, record):
        """Format the log record with the appropriate color based on the log level."""
        color = self.COLORS.get(record.levelno, self.WHITE)
        formatter = logging.Formatter(self.HEADERCOL + self.HEADER + self.RESET + color + self.LINE_FORMAT + self.RESET)
        return formatter.format(record)

    def get(self) -> logging.Logger:
        """Get the library logger instance."""
        return logging.getLogger(self.NAME)


###
# Globals
###


LOGGER: Logger | None = None
"""Global formatter instance, created on first use."""


###
# Configurations
###


def get_default_logger() -> logging.Logger:
    """Initialize the library logger on first use and return it."""
    global LOGGER  # noqa: PLW0603
    if LOGGER is None:
        LOGGER = Logger()
    return LOGGER.get()


def set_log_level(level: LogLevel):
    """Set the logging level of the library logger."""
    get_default_logger().setLevel(level)
    get_default_logger().debug(f"Log level set to: {logging.getLevelName(level)}")


def reset_log_level():
    """Reset the logging level of the library logger to NOTIF."""
    get_default_logger().setLevel(LogLevel.NOTIF)


def set_log_header(header: str):
    """Set the header printed in front of every record."""
    Logger.HEADER = header


###
# Logging
###


def debug(msg: str, *args, **kwargs):
    """Log a debug message."""
    get_default_logger().debug(msg, *args, **kwargs, stacklevel=2)


def info(msg: str, *args, **kwargs):
    """Log an info message."""
    get_default_logger().info(msg, *args, **kwargs, stacklevel=2)


def notif(msg: str, *args, **kwargs):
    """Log a notification message."""
    get_default_logger().log(LogLevel.NOTIF, msg, *args, **kwargs, stacklevel=2)


def warning(msg: str, *args, **kwargs):
    """Log a warning message."""
    get_default_logger().warning(msg, *args, **kwargs, stacklevel=2)


def error(msg: str, *args, **kwargs):
    """Log an error message."""
    get_default_logger().error(msg, *args, **kwargs, stacklevel=2)
