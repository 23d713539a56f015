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

"""Handle types, entity kinds and reserved names shared across the plant."""

from __future__ import annotations

from enum import IntEnum

###
# Module interface
###

__all__ = [
    "DEFAULT_MODEL_INSTANCE",
    "DEFAULT_MODEL_INSTANCE_NAME",
    "SCOPE_DELIMITER",
    "WORLD_BODY_INDEX",
    "WORLD_BODY_NAME",
    "WORLD_MODEL_INSTANCE",
    "WORLD_MODEL_INSTANCE_NAME",
    "BodyIndex",
    "EntityKind",
    "FrameIndex",
    "JointActuatorIndex",
    "JointIndex",
    "ModelInstanceIndex",
    "scoped_name",
    "split_scoped_name",
]


###
# Handles
###

ModelInstanceIndex = int
"""Stable integer handle of a model instance."""

BodyIndex = int
"""Stable integer handle of a rigid body."""

JointIndex = int
"""Stable integer handle of a joint."""

FrameIndex = int
"""Stable integer handle of a frame."""

JointActuatorIndex = int
"""Stable integer handle of a joint actuator."""


###
# Reserved entities
###

WORLD_MODEL_INSTANCE: ModelInstanceIndex = 0
"""The model instance owning the world body."""

DEFAULT_MODEL_INSTANCE: ModelInstanceIndex = 1
"""The model instance receiving entities added without an explicit instance."""

WORLD_MODEL_INSTANCE_NAME = "WorldModelInstance"
DEFAULT_MODEL_INSTANCE_NAME = "DefaultModelInstance"

WORLD_BODY_INDEX: BodyIndex = 0
WORLD_BODY_NAME = "world"

SCOPE_DELIMITER = "::"
"""Separator between a sub-model name and an entity name in qualified names."""


###
# Enumerations
###


class EntityKind(IntEnum):
    """The kinds of entities tracked by the plant."""

    BODY = 0
    JOINT = 1
    FRAME = 2
    JOINT_ACTUATOR = 3

    @property
    def label(self) -> str:
        """Human-readable label used in error messages, e.g. ``"Joint actuator"``."""
        return _ENTITY_KIND_LABELS[self]

    def __str__(self):
        return self.label


_ENTITY_KIND_LABELS = {
    EntityKind.BODY: "Body",
    EntityKind.JOINT: "Joint",
    EntityKind.FRAME: "Frame",
    EntityKind.JOINT_ACTUATOR: "Joint actuator",
}


###
# Scoped names
###


def scoped_name(scope: str, name: str, delimiter: str = SCOPE_DELIMITER) -> str:
    """Qualify ``name`` with ``scope``, e.g. ``scoped_name("robot1", "base_link") == "robot1::base_link"``."""
    return f"{scope}{delimiter}{name}"


def split_scoped_name(name: str, delimiter: str = SCOPE_DELIMITER) -> tuple[str | None, str]:
    """Split off the outermost scope of a qualified name.

    Returns:
        tuple[str | None, str]: ``(scope, local_name)``, where ``scope`` is None for unqualified names.
    """
    scope, sep, local = name.partition(delimiter)
    if not sep:
        return None, name
    return scope, local
