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

"""A module for assembling multibody plants."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import numpy as np
import warp as wp

from ..core.errors import AlreadyFinalizedError, DocumentParseError, NotFoundError, PlantFinalizedError
from ..core.types import (
    DEFAULT_MODEL_INSTANCE,
    WORLD_BODY_INDEX,
    WORLD_BODY_NAME,
    WORLD_MODEL_INSTANCE,
    BodyIndex,
    EntityKind,
    JointIndex,
    ModelInstanceIndex,
)
from ..utils import logger as msg
from .entities import Body, Frame, Joint, JointActuator, JointType, validate_joint_damping
from .model import PlantModel
from .registry import ModelInstance, ModelInstanceRegistry
from .tables import EntityTable

if TYPE_CHECKING:
    from warp import DeviceLike as Devicelike

    from ..utils.import_sdf import SdfDocument
    from ..utils.settings import ParserSettings

###
# Module interface
###

__all__ = [
    "Plant",
]


class Plant:
    """
    A kinematic multibody plant organized into named model instances.

    The Plant owns one :class:`EntityTable` per entity kind (bodies, joints,
    frames and joint actuators) and a :class:`ModelInstanceRegistry`. Every
    entity belongs to exactly one model instance, and entity names are unique
    within their model instance. Names can be resolved either scoped to a model
    instance, which is never ambiguous, or unscoped, which succeeds only when
    the name appears in a single model instance.

    A freshly constructed plant contains the world and default model instances,
    the world body and its frame. Models are added programmatically or loaded
    from SDFormat documents with :meth:`add_model` and :meth:`add_models`.
    Calling :meth:`finalize` locks the structure and produces a
    :class:`PlantModel` for downstream consumers.

    Example
    -------

    .. code-block:: python

        plant = Plant()
        robot = plant.add_model("robot.sdf")
        other = plant.add_model("robot.sdf", model_name="robot_2")
        model = plant.finalize(device="cpu")

        link = plant.get_body_by_name("base_link", robot)
    """

    def __init__(self):
        self._registry = ModelInstanceRegistry()
        instance_name = self._registry.get_instance_name
        self._bodies: EntityTable[Body] = EntityTable(EntityKind.BODY, Body, instance_name)
        self._joints: EntityTable[Joint] = EntityTable(EntityKind.JOINT, Joint, instance_name)
        self._frames: EntityTable[Frame] = EntityTable(EntityKind.FRAME, Frame, instance_name)
        self._actuators: EntityTable[JointActuator] = EntityTable(
            EntityKind.JOINT_ACTUATOR, JointActuator, instance_name
        )
        self._tables: dict[EntityKind, EntityTable] = {
            EntityKind.BODY: self._bodies,
            EntityKind.JOINT: self._joints,
            EntityKind.FRAME: self._frames,
            EntityKind.JOINT_ACTUATOR: self._actuators,
        }
        self._finalized: bool = False
        self._model: PlantModel | None = None

        # The world body and its frame
        world = self._bodies.insert(WORLD_BODY_NAME, WORLD_MODEL_INSTANCE)
        self._frames.insert(WORLD_BODY_NAME, WORLD_MODEL_INSTANCE, body=world.index)

    ###
    # Properties
    ###

    @property
    def num_model_instances(self) -> int:
        """Returns the number of model instances, including the world and default instances."""
        return len(self._registry)

    @property
    def num_bodies(self) -> int:
        """Returns the number of rigid bodies, including the world body."""
        return len(self._bodies)

    @property
    def num_joints(self) -> int:
        """Returns the number of joints."""
        return len(self._joints)

    @property
    def num_frames(self) -> int:
        """Returns the number of frames, including one frame per body."""
        return len(self._frames)

    @property
    def num_actuators(self) -> int:
        """Returns the number of joint actuators."""
        return len(self._actuators)

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    @property
    def model(self) -> PlantModel | None:
        """The model produced by :meth:`finalize`, or None before finalization."""
        return self._model

    @property
    def model_instances(self) -> list[ModelInstance]:
        return list(self._registry)

    @property
    def bodies(self) -> list[Body]:
        return list(self._bodies)

    @property
    def joints(self) -> list[Joint]:
        return list(self._joints)

    @property
    def frames(self) -> list[Frame]:
        return list(self._frames)

    @property
    def joint_actuators(self) -> list[JointActuator]:
        return list(self._actuators)

    @property
    def world_body(self) -> Body:
        return self._bodies.get(WORLD_BODY_INDEX)

    ###
    # Model Construction
    ###

    def add_model_instance(self, name: str) -> ModelInstanceIndex:
        """
        Add a new, empty model instance.

        Raises:
            DuplicateInstanceNameError: If an instance named ``name`` already exists.
            PlantFinalizedError: If the plant has been finalized.
        """
        self._check_not_finalized("add a model instance")
        index = self._registry.add_instance(name)
        msg.debug(f"Added model instance '{name}' (index {index}).")
        return index

    def add_rigid_body(self, name: str, model_instance: ModelInstanceIndex = DEFAULT_MODEL_INSTANCE) -> Body:
        """
        Add a rigid body, together with a body frame of the same name.

        Args:
            name (str): The body name, unique among the bodies and frames of ``model_instance``.
            model_instance (ModelInstanceIndex): The owning model instance.\n
                Defaults to the default model instance.

        Returns:
            Body: The newly added body.
        """
        self._check_not_finalized("add a rigid body")
        self._registry.get_instance(model_instance)
        self._bodies.check_available(name, model_instance)
        self._frames.check_available(name, model_instance)
        body = self._bodies.insert(name, model_instance)
        self._frames.insert(name, model_instance, body=body.index)
        return body

    def add_frame(self, name: str, body: BodyIndex, model_instance: ModelInstanceIndex | None = None) -> Frame:
        """
        Add a frame attached to ``body``.

        Args:
            name (str): The frame name, unique among the frames of ``model_instance``.
            body (BodyIndex): The body the frame is attached to.
            model_instance (ModelInstanceIndex | None): The owning model instance.\n
                If None, the model instance of ``body`` is used.
        """
        self._check_not_finalized("add a frame")
        attached = self._bodies.get(body)
        if model_instance is None:
            model_instance = attached.model_instance
        self._registry.get_instance(model_instance)
        return self._frames.insert(name, model_instance, body=attached.index)

    def add_joint(
        self,
        name: str,
        joint_type: JointType | str,
        parent_body: BodyIndex,
        child_body: BodyIndex,
        model_instance: ModelInstanceIndex = DEFAULT_MODEL_INSTANCE,
        damping: float = 0.0,
    ) -> Joint:
        """
        Add a joint between two bodies.

        Args:
            name (str): The joint name, unique among the joints of ``model_instance``.
            joint_type (JointType | str): The joint type.
            parent_body (BodyIndex): The parent body, possibly the world body.
            child_body (BodyIndex): The child body.
            model_instance (ModelInstanceIndex): The owning model instance.
            damping (float): The viscous damping coefficient. Must be non-negative.

        Raises:
            InvalidJointDampingError: If ``damping`` is negative.
            DuplicateEntityNameError: If ``name`` is already taken in ``model_instance``.
            NotFoundError: If either body index is invalid.
            DocumentParseError: If ``joint_type`` is unknown, or the parent and child bodies are the same.
        """
        self._check_not_finalized("add a joint")
        damping = validate_joint_damping(name, damping)
        if not isinstance(joint_type, JointType):
            joint_type = JointType.from_string(joint_type)
        self._registry.get_instance(model_instance)
        parent = self._bodies.get(parent_body)
        child = self._bodies.get(child_body)
        if parent.index == child.index:
            raise DocumentParseError(f"Joint '{name}' connects body '{parent.name}' to itself.")
        return self._joints.insert(
            name,
            model_instance,
            joint_type=joint_type,
            parent_body=parent.index,
            child_body=child.index,
            damping=damping,
        )

    def add_joint_actuator(self, name: str, joint: JointIndex, effort_limit: float = math.inf) -> JointActuator:
        """
        Add an actuator driving ``joint``. The actuator belongs to the joint's model instance.

        Args:
            name (str): The actuator name.
            joint (JointIndex): The actuated joint.
            effort_limit (float): The maximum effort. Negative values mean unbounded.
        """
        self._check_not_finalized("add a joint actuator")
        actuated = self._joints.get(joint)
        effort_limit = float(effort_limit)
        if effort_limit < 0.0:
            effort_limit = math.inf
        return self._actuators.insert(name, actuated.model_instance, joint=actuated.index, effort_limit=effort_limit)

    def add_entity_alias(self, kind: EntityKind, name: str, model_instance: ModelInstanceIndex, index: int) -> Any:
        """
        Expose an existing entity under an additional name within ``model_instance``.

        Aliases resolve to the original entity, whose own model instance is left
        unchanged. They do not count towards the number of entities.

        Raises:
            DuplicateEntityNameError: If ``name`` is already taken in ``model_instance``.
        """
        self._check_not_finalized("add an entity alias")
        self._registry.get_instance(model_instance)
        return self._tables[kind].add_alias(name, model_instance, index)

    def add_model(
        self,
        source: str | SdfDocument,
        model_name: str | None = None,
        resolver: Callable[[str | None, str], str] | None = None,
        settings: ParserSettings | None = None,
    ) -> ModelInstanceIndex:
        """
        Load a single model from an SDFormat file, XML string or parsed document.

        See :func:`multiplant.add_model` for details.
        """
        from ..utils.assembler import ModelAssembler  # noqa: PLC0415

        return ModelAssembler(self, resolver=resolver, settings=settings).add_model(source, model_name=model_name)

    def add_models(
        self,
        source: str | SdfDocument,
        resolver: Callable[[str | None, str], str] | None = None,
        settings: ParserSettings | None = None,
    ) -> list[ModelInstanceIndex]:
        """
        Load every top-level model declared by an SDFormat file, XML string or parsed document.

        See :func:`multiplant.add_models` for details.
        """
        from ..utils.assembler import ModelAssembler  # noqa: PLC0415

        return ModelAssembler(self, resolver=resolver, settings=settings).add_models(source)

    def finalize(self, device: Devicelike | None = None) -> PlantModel:
        """
        Lock the plant structure and build a :class:`PlantModel`.

        After this call no model instances or entities can be added. Lookups
        remain available and the structure is safe for concurrent reads.

        Args:
            device: The device on which to allocate the model arrays (e.g. ``"cpu"``, ``"cuda:0"``).
                If None, uses the current Warp device.

        Returns:
            PlantModel: The frozen plant topology.

        Raises:
            AlreadyFinalizedError: If the plant has already been finalized.
        """
        if self._finalized:
            raise AlreadyFinalizedError()

        with wp.ScopedDevice(device):
            m = PlantModel(device)

            m.num_model_instances = self.num_model_instances
            m.model_instance_name = [instance.name for instance in self._registry]

            m.body_count = self.num_bodies
            m.body_name = [body.name for body in self._bodies]
            m.body_model_instance = wp.array(
                np.array([body.model_instance for body in self._bodies], dtype=np.int32), dtype=wp.int32
            )

            m.joint_count = self.num_joints
            m.joint_name = [joint.name for joint in self._joints]
            m.joint_model_instance = wp.array(
                np.array([joint.model_instance for joint in self._joints], dtype=np.int32), dtype=wp.int32
            )
            m.joint_type = wp.array(np.array([int(j.joint_type) for j in self._joints], dtype=np.int32), dtype=wp.int32)
            m.joint_parent = wp.array(np.array([j.parent_body for j in self._joints], dtype=np.int32), dtype=wp.int32)
            m.joint_child = wp.array(np.array([j.child_body for j in self._joints], dtype=np.int32), dtype=wp.int32)
            m.joint_damping = wp.array(np.array([j.damping for j in self._joints], dtype=np.float32), dtype=wp.float32)

            m.frame_count = self.num_frames
            m.frame_name = [frame.name for frame in self._frames]
            m.frame_model_instance = wp.array(
                np.array([frame.model_instance for frame in self._frames], dtype=np.int32), dtype=wp.int32
            )
            m.frame_body = wp.array(np.array([f.body for f in self._frames], dtype=np.int32), dtype=wp.int32)

            m.actuator_count = self.num_actuators
            m.actuator_name = [actuator.name for actuator in self._actuators]
            m.actuator_model_instance = wp.array(
                np.array([a.model_instance for a in self._actuators], dtype=np.int32), dtype=wp.int32
            )
            m.actuator_joint = wp.array(np.array([a.joint for a in self._actuators], dtype=np.int32), dtype=wp.int32)
            m.actuator_effort_limit = wp.array(
                np.array([a.effort_limit for a in self._actuators], dtype=np.float32), dtype=wp.float32
            )

        self._finalized = True
        self._model = m
        msg.info(
            f"Finalized plant with {m.num_model_instances} model instances, {m.body_count} bodies, "
            f"{m.joint_count} joints, {m.frame_count} frames and {m.actuator_count} actuators on {m.device}."
        )
        return m

    ###
    # Model instances
    ###

    def has_model_instance_named(self, name: str) -> bool:
        return self._registry.has_instance_named(name)

    def get_model_instance_by_name(self, name: str) -> ModelInstanceIndex:
        """
        Raises:
            NotFoundError: If no model instance named ``name`` exists.
        """
        return self._registry.get_instance_by_name(name)

    def get_model_instance_name(self, model_instance: ModelInstanceIndex) -> str:
        return self._registry.get_instance_name(model_instance)

    ###
    # Entity lookup
    ###

    def has_body_named(self, name: str, model_instance: ModelInstanceIndex | None = None) -> bool:
        """
        Check whether a body named ``name`` exists, optionally within ``model_instance``.

        Raises:
            AmbiguousNameError: If ``model_instance`` is None and several model instances contain ``name``.
        """
        return self._has_named(EntityKind.BODY, name, model_instance)

    def get_body_by_name(self, name: str, model_instance: ModelInstanceIndex | None = None) -> Body:
        """
        Raises:
            AmbiguousNameError: If ``model_instance`` is None and several model instances contain ``name``.
            NotFoundError: If no such body exists.
        """
        return self._get_by_name(EntityKind.BODY, name, model_instance)

    def has_joint_named(self, name: str, model_instance: ModelInstanceIndex | None = None) -> bool:
        return self._has_named(EntityKind.JOINT, name, model_instance)

    def get_joint_by_name(self, name: str, model_instance: ModelInstanceIndex | None = None) -> Joint:
        return self._get_by_name(EntityKind.JOINT, name, model_instance)

    def has_frame_named(self, name: str, model_instance: ModelInstanceIndex | None = None) -> bool:
        return self._has_named(EntityKind.FRAME, name, model_instance)

    def get_frame_by_name(self, name: str, model_instance: ModelInstanceIndex | None = None) -> Frame:
        return self._get_by_name(EntityKind.FRAME, name, model_instance)

    def has_joint_actuator_named(self, name: str, model_instance: ModelInstanceIndex | None = None) -> bool:
        return self._has_named(EntityKind.JOINT_ACTUATOR, name, model_instance)

    def get_joint_actuator_by_name(self, name: str, model_instance: ModelInstanceIndex | None = None) -> JointActuator:
        return self._get_by_name(EntityKind.JOINT_ACTUATOR, name, model_instance)

    def get_body(self, index: BodyIndex) -> Body:
        return self._bodies.get(index)

    def get_joint(self, index: JointIndex) -> Joint:
        return self._joints.get(index)

    def get_frame(self, index: int) -> Frame:
        return self._frames.get(index)

    def get_joint_actuator(self, index: int) -> JointActuator:
        return self._actuators.get(index)

    def get_entity_names(self, kind: EntityKind, model_instance: ModelInstanceIndex) -> list[str]:
        """Return every name, own or aliased, under which ``kind`` entities are visible in ``model_instance``."""
        self._registry.get_instance(model_instance)
        return self._tables[kind].names(model_instance)

    def get_model_instance_entities(self, kind: EntityKind, model_instance: ModelInstanceIndex) -> Sequence[Any]:
        """Return the ``kind`` entities owned by ``model_instance``, excluding aliases."""
        self._registry.get_instance(model_instance)
        return [entity for entity in self._tables[kind] if entity.model_instance == model_instance]

    ###
    # Internals
    ###

    def _check_not_finalized(self, operation: str):
        if self._finalized:
            raise PlantFinalizedError(operation)

    def _has_named(self, kind: EntityKind, name: str, model_instance: ModelInstanceIndex | None) -> bool:
        if model_instance is not None:
            self._check_model_instance(model_instance)
        return self._tables[kind].has(name, model_instance)

    def _get_by_name(self, kind: EntityKind, name: str, model_instance: ModelInstanceIndex | None) -> Any:
        if model_instance is not None:
            self._check_model_instance(model_instance)
        return self._tables[kind].get_by_name(name, model_instance)

    def _check_model_instance(self, model_instance: ModelInstanceIndex):
        if not self._registry.is_valid(model_instance):
            raise NotFoundError(f"Invalid model instance index: {model_instance}.")
