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
Errors raised while assembling and querying a plant.

Every error derives from :class:`PlantError` and carries an :class:`ErrorKind`
in its ``kind`` attribute, so callers can dispatch on the kind of failure with
a single ``except PlantError`` clause. Each error also derives from the builtin
exception type matching its category (``ValueError`` for invalid input,
``LookupError`` for failed name resolution, ``RuntimeError`` for lifecycle and
resolution failures).
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum
from typing import ClassVar

from .types import EntityKind

###
# Module interface
###

__all__ = [
    "AlreadyFinalizedError",
    "AmbiguousNameError",
    "DocumentParseError",
    "DuplicateEntityNameError",
    "DuplicateInstanceNameError",
    "ErrorKind",
    "InvalidJointDampingError",
    "NotFoundError",
    "PlantError",
    "PlantFinalizedError",
    "ResolutionError",
]


###
# Enumerations
###


class ErrorKind(IntEnum):
    """Enumerates the failure categories reported by :class:`PlantError`."""

    DUPLICATE_INSTANCE_NAME = 0
    DUPLICATE_ENTITY_NAME = 1
    AMBIGUOUS_NAME = 2
    NOT_FOUND = 3
    INVALID_JOINT_DAMPING = 4
    PLANT_FINALIZED = 5
    ALREADY_FINALIZED = 6
    RESOLUTION = 7
    DOCUMENT_PARSE = 8


###
# Errors
###


class PlantError(Exception):
    """Base class of all errors raised by the plant, the registry and the parsers."""

    kind: ClassVar[ErrorKind]


class DuplicateInstanceNameError(PlantError, ValueError):
    """Raised when a model instance name is already registered."""

    kind = ErrorKind.DUPLICATE_INSTANCE_NAME

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"This model already contains a model instance named '{name}'. "
            "Model instance names must be unique within a given model."
        )


class DuplicateEntityNameError(PlantError, ValueError):
    """Raised when an entity name is already taken within its model instance."""

    kind = ErrorKind.DUPLICATE_ENTITY_NAME

    def __init__(self, entity_kind: EntityKind, name: str, model_instance: str):
        self.entity_kind = entity_kind
        self.name = name
        self.model_instance = model_instance
        super().__init__(
            f"Model instance '{model_instance}' already contains a {entity_kind.label.lower()} named '{name}'. "
            f"{entity_kind.label} names must be unique within a given model instance."
        )


class AmbiguousNameError(PlantError, LookupError):
    """Raised by unscoped lookups of a name that appears in more than one model instance."""

    kind = ErrorKind.AMBIGUOUS_NAME

    def __init__(self, entity_kind: EntityKind, name: str, model_instances: Sequence[str]):
        self.entity_kind = entity_kind
        self.name = name
        self.model_instances = list(model_instances)
        candidates = ", ".join(f"'{m}'" for m in self.model_instances)
        super().__init__(
            f"{entity_kind.label} {name} appears in multiple model instances. "
            f"Specify one of {candidates} to disambiguate."
        )


class NotFoundError(PlantError, LookupError):
    """Raised when a name or handle does not resolve to a model instance or entity."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str, name: str | None = None):
        self.name = name
        super().__init__(message)


class InvalidJointDampingError(PlantError, ValueError):
    """Raised when a joint declares a negative or non-finite damping coefficient."""

    kind = ErrorKind.INVALID_JOINT_DAMPING

    def __init__(self, joint_name: str, damping: float):
        self.joint_name = joint_name
        self.damping = damping
        problem = "negative" if damping < 0.0 else "non-finite"
        super().__init__(
            f"Joint damping is {problem} for joint '{joint_name}'. Joint damping must be a non-negative number."
        )


class PlantFinalizedError(PlantError, RuntimeError):
    """Raised when the structure of a finalized plant is modified."""

    kind = ErrorKind.PLANT_FINALIZED

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: the plant has already been finalized.")


class AlreadyFinalizedError(PlantError, RuntimeError):
    """Raised when :meth:`Plant.finalize` is called more than once."""

    kind = ErrorKind.ALREADY_FINALIZED

    def __init__(self):
        super().__init__("The plant has already been finalized. finalize() must be called exactly once.")


class ResolutionError(PlantError, RuntimeError):
    """Raised when a document reference cannot be resolved to a loadable document."""

    kind = ErrorKind.RESOLUTION

    def __init__(self, uri: str, reason: str):
        self.uri = uri
        self.reason = reason
        super().__init__(f'Could not resolve "{uri}": {reason}')


class DocumentParseError(PlantError, ValueError):
    """Raised when a description document is malformed or violates the supported schema."""

    kind = ErrorKind.DOCUMENT_PARSE

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        if source is not None:
            message = f"{message} (in {source})"
        super().__init__(message)
