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
Assembly of parsed SDFormat documents into a :class:`Plant`.

Each top-level model is loaded in two passes. The staging pass resolves
includes, allocates the model instances and entities the model will create,
and validates every name, reference and joint property against the plant
and against the other staged entities. Only once the whole model is valid
does the commit pass replay the staged additions into the plant, so a model
that fails to load leaves the plant unchanged.

Includes directly inside a ``<world>`` become sibling top-level model
instances. Includes and nested models inside a ``<model>`` become
sub-instances named ``"<model-instance>::<local-name>"``, and each of their
entities is also exposed in the enclosing instance as
``"<local-name>::<entity-name>"``, so that the enclosing model can declare
joints and frames referencing them.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING

from ..core.errors import (
    DocumentParseError,
    DuplicateEntityNameError,
    DuplicateInstanceNameError,
    NotFoundError,
    PlantError,
    PlantFinalizedError,
    ResolutionError,
)
from ..core.types import WORLD_BODY_INDEX, WORLD_BODY_NAME, EntityKind, ModelInstanceIndex, scoped_name
from ..sim.entities import validate_joint_damping
from . import logger as msg
from .import_sdf import FrameSpec, IncludeSpec, JointSpec, ModelSpec, SdfDocument, parse_sdf
from .import_utils import format_effort_limit, is_xml_content
from .settings import ParserSettings
from .uri_resolver import UriResolver

if TYPE_CHECKING:
    from ..sim.plant import Plant

###
# Module interface
###

__all__ = [
    "ModelAssembler",
    "add_model",
    "add_models",
]


###
# Staging
###


@dataclass
class _StagedInstance:
    """The namespace of a model instance that has been staged but not yet committed."""

    index: ModelInstanceIndex
    name: str
    names: dict[EntityKind, dict[str, int]] = field(default_factory=lambda: {kind: {} for kind in EntityKind})
    """Entity indices visible in the instance, own and aliased, keyed by kind and name."""
    bodies: list[int] = field(default_factory=list)
    """Indices of the bodies owned by the instance."""

    def check_available(self, kind: EntityKind, name: str):
        if name in self.names[kind]:
            raise DuplicateEntityNameError(kind, name, self.name)

    def canonical_body(self) -> int:
        """The body frames attach to by default: the first own body, else the first exposed body, else the world."""
        if self.bodies:
            return self.bodies[0]
        return next(iter(self.names[EntityKind.BODY].values()), WORLD_BODY_INDEX)


@dataclass
class _Operation:
    description: str
    apply: Callable[[], object]


class _Stage:
    """
    Prospective additions to a plant, with the indices they will receive on commit.

    Indices are predicted from the current plant sizes. Operations are replayed
    in staging order, so the predicted and committed indices agree.
    """

    def __init__(self, plant: Plant, delimiter: str):
        self.plant = plant
        self.delimiter = delimiter
        self.operations: list[_Operation] = []
        self.instance_names: set[str] = set()
        self.frame_bodies: dict[int, int] = {}
        self._next_instance = plant.num_model_instances
        self._next_index = {
            EntityKind.BODY: plant.num_bodies,
            EntityKind.JOINT: plant.num_joints,
            EntityKind.FRAME: plant.num_frames,
            EntityKind.JOINT_ACTUATOR: plant.num_actuators,
        }

    def _allocate(self, kind: EntityKind) -> int:
        index = self._next_index[kind]
        self._next_index[kind] += 1
        return index

    def add_instance(self, name: str) -> _StagedInstance:
        if name in self.instance_names or self.plant.has_model_instance_named(name):
            raise DuplicateInstanceNameError(name)
        self.instance_names.add(name)
        instance = _StagedInstance(index=self._next_instance, name=name)
        self._next_instance += 1
        self.operations.append(_Operation(f"model instance '{name}'", partial(self.plant.add_model_instance, name)))
        return instance

    def add_body(self, instance: _StagedInstance, name: str):
        instance.check_available(EntityKind.BODY, name)
        instance.check_available(EntityKind.FRAME, name)
        body = self._allocate(EntityKind.BODY)
        frame = self._allocate(EntityKind.FRAME)
        instance.names[EntityKind.BODY][name] = body
        instance.names[EntityKind.FRAME][name] = frame
        instance.bodies.append(body)
        self.frame_bodies[frame] = body
        self.operations.append(
            _Operation(f"body '{name}'", partial(self.plant.add_rigid_body, name, instance.index))
        )

    def add_frame(self, instance: _StagedInstance, name: str, body: int):
        instance.check_available(EntityKind.FRAME, name)
        frame = self._allocate(EntityKind.FRAME)
        instance.names[EntityKind.FRAME][name] = frame
        self.frame_bodies[frame] = body
        self.operations.append(_Operation(f"frame '{name}'", partial(self.plant.add_frame, name, body, instance.index)))

    def add_joint(self, instance: _StagedInstance, spec: JointSpec, damping: float, parent: int, child: int) -> int:
        instance.check_available(EntityKind.JOINT, spec.name)
        joint = self._allocate(EntityKind.JOINT)
        instance.names[EntityKind.JOINT][spec.name] = joint
        self.operations.append(
            _Operation(
                f"{spec.joint_type} joint '{spec.name}'",
                partial(self.plant.add_joint, spec.name, spec.joint_type, parent, child, instance.index, damping),
            )
        )
        return joint

    def add_joint_actuator(self, instance: _StagedInstance, name: str, joint: int, effort_limit: float):
        instance.check_available(EntityKind.JOINT_ACTUATOR, name)
        actuator = self._allocate(EntityKind.JOINT_ACTUATOR)
        instance.names[EntityKind.JOINT_ACTUATOR][name] = actuator
        self.operations.append(
            _Operation(
                f"joint actuator '{name}' (effort limit: {format_effort_limit(effort_limit)})",
                partial(self.plant.add_joint_actuator, name, joint, effort_limit),
            )
        )

    def expose(self, instance: _StagedInstance, sub_instance: _StagedInstance, local_name: str):
        """Alias every entity visible in ``sub_instance`` as ``"<local_name>::<name>"`` in ``instance``."""
        for kind in EntityKind:
            for name, index in sub_instance.names[kind].items():
                alias = scoped_name(local_name, name, self.delimiter)
                instance.check_available(kind, alias)
                instance.names[kind][alias] = index
                self.operations.append(
                    _Operation(
                        f"{kind.label.lower()} alias '{alias}'",
                        partial(self.plant.add_entity_alias, kind, alias, instance.index, index),
                    )
                )

    def commit(self):
        for operation in self.operations:
            operation.apply()
            msg.debug(f"Added {operation.description}.")


###
# Assembly
###


class ModelAssembler:
    """
    Loads SDFormat models into a :class:`Plant`.

    Args:
        plant (Plant): The plant to populate.
        resolver (Callable | None): Maps ``(base_dir, uri)`` of an ``<include>`` to either
            the path of an SDFormat file or its XML content. ``base_dir`` is the directory
            of the including document, or None if it was read from a string.
            Defaults to a :class:`UriResolver` built from ``settings``.
        settings (ParserSettings | None): Loading options. Defaults to :class:`ParserSettings`.
    """

    def __init__(
        self,
        plant: Plant,
        resolver: Callable[[str | None, str], str] | None = None,
        settings: ParserSettings | None = None,
    ):
        self._plant = plant
        self._settings = settings if settings is not None else ParserSettings()
        self._settings.check()
        self._resolver = resolver if resolver is not None else UriResolver(self._settings)

    def add_model(self, source: str | SdfDocument, model_name: str | None = None) -> ModelInstanceIndex:
        """
        Load the single model declared by ``source``.

        Args:
            source (str | SdfDocument): A file path, XML content or parsed document.
                A ``<world>`` is accepted if it declares exactly one model or include.
            model_name (str | None): The name of the new model instance.
                Defaults to the name declared by the model (or its ``<include>``).

        Returns:
            ModelInstanceIndex: The index of the new top-level model instance.

        Raises:
            PlantFinalizedError: If the plant has been finalized.
            DocumentParseError: If the document is invalid, declares several models,
                or the model has no name and ``model_name`` is None.
            DuplicateInstanceNameError: If the model instance name is already taken.
            InvalidJointDampingError: If a joint declares a negative damping.
            ResolutionError: If ``source`` or an include cannot be read, is circular, or nests too deeply.
        """
        self._check_not_finalized()
        document = self._load(source)
        if len(document.entries) != 1:
            raise DocumentParseError(
                f"Expected a single model but the document declares {len(document.entries)}. "
                "Use add_models() to load every model of a world.",
                source=document.source,
            )
        return self._add_entry(document, document.entries[0], model_name)

    def add_models(self, source: str | SdfDocument) -> list[ModelInstanceIndex]:
        """
        Load every top-level model declared by ``source``, in declaration order.

        Each model is loaded atomically. If a model fails, the models loaded
        before it remain in the plant.

        Returns:
            list[ModelInstanceIndex]: The indices of the new top-level model instances.
        """
        self._check_not_finalized()
        document = self._load(source)
        return [self._add_entry(document, entry) for entry in document.entries]

    ###
    # Internals
    ###

    def _check_not_finalized(self):
        if self._plant.is_finalized:
            raise PlantFinalizedError("add a model")

    @staticmethod
    def _load(source: str | SdfDocument) -> SdfDocument:
        if isinstance(source, SdfDocument):
            return source
        try:
            return parse_sdf(source)
        except OSError as e:
            raise ResolutionError(os.fspath(source), str(e)) from e

    def _add_entry(
        self, document: SdfDocument, entry: ModelSpec | IncludeSpec, model_name: str | None = None
    ) -> ModelInstanceIndex:
        stack = [document.source] if document.source is not None else []
        depth = 0
        if isinstance(entry, IncludeSpec):
            spec, path = self._resolve_include(entry, stack, 1)
            name = model_name or entry.name or spec.name
            if path is not None:
                stack = [*stack, path]
            depth = 1
        else:
            spec = entry
            name = model_name or spec.name
        if name is None:
            raise DocumentParseError(
                "The model does not declare a name. Provide one with the model_name argument.", source=spec.source
            )

        stage = _Stage(self._plant, self._settings.scope_delimiter)
        instance = self._stage_model(stage, spec, name, stack, depth)

        num_bodies, num_joints = self._plant.num_bodies, self._plant.num_joints
        stage.commit()
        msg.info(
            f"Loaded model '{name}' as model instance {instance.index} "
            f"({self._plant.num_bodies - num_bodies} bodies, {self._plant.num_joints - num_joints} joints)."
        )
        return instance.index

    def _stage_model(
        self, stage: _Stage, spec: ModelSpec, instance_name: str, stack: list[str], depth: int
    ) -> _StagedInstance:
        instance = stage.add_instance(instance_name)

        for link in spec.links:
            stage.add_body(instance, link.name)

        for child in spec.children:
            child_stack = stack
            child_depth = depth
            if isinstance(child, IncludeSpec):
                child_depth = depth + 1
                sub_spec, path = self._resolve_include(child, stack, child_depth)
                local_name = child.name or sub_spec.name
                if local_name is None:
                    raise DocumentParseError(
                        f"The model included from '{child.uri}' does not declare a name "
                        "and the <include> has no <name>.",
                        source=spec.source,
                    )
                if path is not None:
                    child_stack = [*stack, path]
            else:
                sub_spec = child
                local_name = child.name
            sub_name = scoped_name(instance_name, local_name, self._settings.scope_delimiter)
            sub_instance = self._stage_model(stage, sub_spec, sub_name, child_stack, child_depth)
            stage.expose(instance, sub_instance, local_name)

        frame_bodies = self._resolve_frame_bodies(stage, instance, spec)
        for frame in spec.frames:
            stage.add_frame(instance, frame.name, frame_bodies[frame.name])

        for joint in spec.joints:
            damping = validate_joint_damping(joint.name, joint.damping)
            parent = self._find_body(stage, instance, joint.parent, f"Joint '{joint.name}'")
            child = self._find_body(stage, instance, joint.child, f"Joint '{joint.name}'")
            if parent == child:
                raise DocumentParseError(
                    f"Joint '{joint.name}' in model instance '{instance.name}' "
                    f"connects body '{joint.parent}' to itself.",
                    source=spec.source,
                )
            index = stage.add_joint(instance, joint, damping, parent, child)
            if self._settings.create_joint_actuators and joint.joint_type.is_actuatable and joint.effort_limit != 0.0:
                stage.add_joint_actuator(instance, joint.name, index, joint.effort_limit)

        return instance

    def _resolve_frame_bodies(self, stage: _Stage, instance: _StagedInstance, spec: ModelSpec) -> dict[str, int]:
        """Resolve the body of every frame declared by ``spec``, following ``attached_to`` chains in any order."""
        declared = {frame.name: frame for frame in spec.frames}
        bodies: dict[str, int] = {}
        visiting: list[str] = []

        def visit(frame: FrameSpec) -> int:
            if frame.name in bodies:
                return bodies[frame.name]
            if frame.name in visiting:
                cycle = " -> ".join([*visiting[visiting.index(frame.name) :], frame.name])
                raise DocumentParseError(
                    f"Frame '{frame.name}' in model instance '{instance.name}' is part of an attachment cycle: "
                    f"{cycle}.",
                    source=spec.source,
                )
            visiting.append(frame.name)
            target = frame.attached_to
            if target is None:
                body = instance.canonical_body()
            elif target in declared and not self._is_visible(instance, target):
                body = visit(declared[target])
            else:
                body = self._find_body(stage, instance, target, f"Frame '{frame.name}'")
            visiting.pop()
            bodies[frame.name] = body
            return body

        for frame in spec.frames:
            visit(frame)
        return bodies

    @staticmethod
    def _is_visible(instance: _StagedInstance, name: str) -> bool:
        return name in instance.names[EntityKind.BODY] or name in instance.names[EntityKind.FRAME]

    @staticmethod
    def _find_body(stage: _Stage, instance: _StagedInstance, name: str, referrer: str) -> int:
        """Resolve a body or frame name visible in ``instance`` to a body index."""
        body = instance.names[EntityKind.BODY].get(name)
        if body is not None:
            return body
        frame = instance.names[EntityKind.FRAME].get(name)
        if frame is not None:
            return stage.frame_bodies[frame]
        if name == WORLD_BODY_NAME:
            return WORLD_BODY_INDEX
        raise NotFoundError(
            f"{referrer} references '{name}', but model instance '{instance.name}' "
            "has no body or frame with that name.",
            name=name,
        )

    def _resolve_include(self, include: IncludeSpec, stack: list[str], depth: int) -> tuple[ModelSpec, str | None]:
        """
        Resolve and read the model referenced by ``include``.

        Returns:
            The included model and the path of its file, or None if the resolver returned XML content.
        """
        if depth > self._settings.max_include_depth:
            raise ResolutionError(
                include.uri, f"includes are nested deeper than the maximum of {self._settings.max_include_depth}."
            )

        try:
            resolved = self._resolver(include.base_dir, include.uri)
        except PlantError:
            raise
        except Exception as e:
            raise ResolutionError(include.uri, str(e)) from e

        if is_xml_content(resolved):
            path = None
            document = parse_sdf(resolved, base_dir=include.base_dir)
        else:
            path = os.path.abspath(resolved)
            if path in stack:
                raise ResolutionError(include.uri, f"circular include detected: {path}")
            try:
                document = parse_sdf(path)
            except OSError as e:
                raise ResolutionError(include.uri, str(e)) from e

        if document.is_world:
            raise DocumentParseError("An included document must declare a single <model>.", source=document.source)
        return document.entries[0], path


###
# Public API
###


def add_model(
    source: str | SdfDocument,
    plant: Plant,
    model_name: str | None = None,
    resolver: Callable[[str | None, str], str] | None = None,
    settings: ParserSettings | None = None,
) -> ModelInstanceIndex:
    """
    Load the single model declared by an SDFormat file, XML string or parsed document into ``plant``.

    See :meth:`ModelAssembler.add_model`.
    """
    return ModelAssembler(plant, resolver=resolver, settings=settings).add_model(source, model_name=model_name)


def add_models(
    source: str | SdfDocument,
    plant: Plant,
    resolver: Callable[[str | None, str], str] | None = None,
    settings: ParserSettings | None = None,
) -> list[ModelInstanceIndex]:
    """
    Load every top-level model declared by an SDFormat file, XML string or parsed document into ``plant``.

    See :meth:`ModelAssembler.add_models`.
    """
    return ModelAssembler(plant, resolver=resolver, settings=settings).add_models(source)
