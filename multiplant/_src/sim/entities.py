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

"""Entity records stored in the plant's entity tables."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum

from ..core.errors import DocumentParseError, InvalidJointDampingError
from ..core.types import BodyIndex, FrameIndex, JointActuatorIndex, JointIndex, ModelInstanceIndex

###
# Module interface
###

__all__ = [
    "Body",
    "Frame",
    "Joint",
    "JointActuator",
    "JointType",
    "validate_joint_damping",
]


###
# Enumerations
###


class JointType(IntEnum):
    """
    Enumeration of the joint types understood by the plant.

    The values follow the SDFormat ``<joint type="...">`` vocabulary.
    """

    FIXED = 0
    REVOLUTE = 1
    CONTINUOUS = 2
    PRISMATIC = 3
    SCREW = 4
    BALL = 5
    UNIVERSAL = 6
    REVOLUTE2 = 7
    GEARBOX = 8

    @classmethod
    def from_string(cls, joint_type: str) -> JointType:
        """Convert an SDFormat joint type string (case-insensitive) to a :class:`JointType`."""
        try:
            return cls[joint_type.strip().upper()]
        except KeyError:
            valid = ", ".join(t.name.lower() for t in cls)
            raise DocumentParseError(f"Invalid joint type: '{joint_type}'. Must be one of: {valid}.") from None

    @property
    def is_actuatable(self) -> bool:
        """Whether a single-axis actuator can drive this joint type."""
        return self in (JointType.REVOLUTE, JointType.CONTINUOUS, JointType.PRISMATIC, JointType.SCREW)

    def __str__(self):
        return self.name.lower()


###
# Entities
###


@dataclass(frozen=True)
class Body:
    """A rigid body."""

    index: BodyIndex
    name: str
    model_instance: ModelInstanceIndex


@dataclass(frozen=True)
class Frame:
    """A named frame rigidly attached to a body."""

    index: FrameIndex
    name: str
    model_instance: ModelInstanceIndex
    body: BodyIndex
    """Index of the body this frame is attached to."""


@dataclass(frozen=True)
class Joint:
    """A joint connecting a parent body to a child body."""

    index: JointIndex
    name: str
    model_instance: ModelInstanceIndex
    joint_type: JointType
    parent_body: BodyIndex
    child_body: BodyIndex
    damping: float = 0.0
    """Viscous damping coefficient, always non-negative."""


@dataclass(frozen=True)
class JointActuator:
    """An actuator applying effort along a single joint axis."""

    index: JointActuatorIndex
    name: str
    model_instance: ModelInstanceIndex
    joint: JointIndex
    effort_limit: float = math.inf
    """Maximum effort magnitude, ``inf`` when unbounded."""


###
# Validation
###


def validate_joint_damping(joint_name: str, damping: float) -> float:
    """
    Check that a joint damping coefficient is a finite, non-negative number.

    Raises:
        InvalidJointDampingError: If ``damping`` is negative, NaN or infinite.
    """
    damping = float(damping)
    if not (damping >= 0.0 and math.isfinite(damping)):
        raise InvalidJointDampingError(joint_name, damping)
    return damping
