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

"""Implementation of the finalized plant model."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import warp as wp

from ..core.types import ModelInstanceIndex

if TYPE_CHECKING:
    from warp import DeviceLike as Devicelike

###
# Module interface
###

__all__ = [
    "PlantModel",
]


class PlantModel:
    """
    Represents the frozen topology of a finalized :class:`Plant`.

    The PlantModel holds the per-entity model instance assignments and the
    joint/frame/actuator connectivity as Warp arrays on a single device, for
    consumption by downstream dynamics code. Names are kept as Python lists,
    indexed by entity index.

    Note:
        A PlantModel is created by :meth:`Plant.finalize`. Direct instantiation
        and manual population of its fields is possible but discouraged.
    """

    def __init__(self, device: Devicelike | None = None):
        self.device = wp.get_device(device)
        """Device on which the arrays were allocated."""

        self.num_model_instances = 0
        """Total number of model instances, including the world and default instances."""
        self.model_instance_name: list[str] = []
        """Model instance names, shape [num_model_instances], str."""

        self.body_count = 0
        """Total number of rigid bodies, including the world body."""
        self.body_name: list[str] = []
        """Rigid body names, shape [body_count], str."""
        self.body_model_instance: wp.array | None = None
        """Model instance index of each body, shape [body_count], int."""

        self.joint_count = 0
        """Total number of joints."""
        self.joint_name: list[str] = []
        """Joint names, shape [joint_count], str."""
        self.joint_model_instance: wp.array | None = None
        """Model instance index of each joint, shape [joint_count], int."""
        self.joint_type: wp.array | None = None
        """Joint type of each joint (see :class:`JointType`), shape [joint_count], int."""
        self.joint_parent: wp.array | None = None
        """Parent body index of each joint, shape [joint_count], int."""
        self.joint_child: wp.array | None = None
        """Child body index of each joint, shape [joint_count], int."""
        self.joint_damping: wp.array | None = None
        """Viscous damping coefficient of each joint, shape [joint_count], float."""

        self.frame_count = 0
        """Total number of frames, including body frames."""
        self.frame_name: list[str] = []
        """Frame names, shape [frame_count], str."""
        self.frame_model_instance: wp.array | None = None
        """Model instance index of each frame, shape [frame_count], int."""
        self.frame_body: wp.array | None = None
        """Index of the body each frame is attached to, shape [frame_count], int."""

        self.actuator_count = 0
        """Total number of joint actuators."""
        self.actuator_name: list[str] = []
        """Joint actuator names, shape [actuator_count], str."""
        self.actuator_model_instance: wp.array | None = None
        """Model instance index of each joint actuator, shape [actuator_count], int."""
        self.actuator_joint: wp.array | None = None
        """Index of the joint driven by each actuator, shape [actuator_count], int."""
        self.actuator_effort_limit: wp.array | None = None
        """Effort limit of each actuator (``inf`` when unbounded), shape [actuator_count], float."""

    def get_model_instance_bodies(self, model_instance: ModelInstanceIndex) -> np.ndarray:
        """Return the indices of the bodies owned by ``model_instance``."""
        return np.flatnonzero(self.body_model_instance.numpy() == model_instance)

    def get_model_instance_joints(self, model_instance: ModelInstanceIndex) -> np.ndarray:
        """Return the indices of the joints owned by ``model_instance``."""
        return np.flatnonzero(self.joint_model_instance.numpy() == model_instance)
