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
Append-only entity storage with per-model-instance name resolution.

An :class:`EntityTable` stores the entities of one kind (bodies, joints, frames
or joint actuators) in insertion order, so that the index of an entity is its
position in the table and never changes. Names are resolved through a
:class:`NameIndex`, which maps ``(model_instance, name)`` keys to entity
indices and keeps, for every name, the set of model instances in which the name
appears. Unscoped lookups use that set to detect ambiguity in constant time.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar

from ..core.errors import AmbiguousNameError, DuplicateEntityNameError, NotFoundError
from ..core.types import EntityKind, ModelInstanceIndex

###
# Module interface
###

__all__ = [
    "EntityTable",
    "NameIndex",
]


EntityT = TypeVar("EntityT")


###
# Containers
###


class NameIndex:
    """
    Secondary index resolving names to entity indices, scoped by model instance.
    """

    def __init__(self):
        self._scoped: dict[tuple[ModelInstanceIndex, str], int] = {}
        """Maps ``(model_instance, name)`` to an entity index."""

        self._instances: dict[str, dict[ModelInstanceIndex, None]] = {}
        """Maps a name to the ordered set of model instances containing it."""

        self._names: dict[ModelInstanceIndex, list[str]] = {}
        """Names registered in each model instance, in registration order."""

    def __contains__(self, key: tuple[ModelInstanceIndex, str]) -> bool:
        return key in self._scoped

    def __len__(self) -> int:
        return len(self._scoped)

    def add(self, name: str, model_instance: ModelInstanceIndex, index: int):
        """Register ``name`` in ``model_instance``. The caller guarantees the key is new."""
        self._scoped[(model_instance, name)] = index
        self._instances.setdefault(name, {})[model_instance] = None
        self._names.setdefault(model_instance, []).append(name)

    def find(self, name: str, model_instance: ModelInstanceIndex) -> int | None:
        """Return the entity index registered under ``(model_instance, name)``, or None."""
        return self._scoped.get((model_instance, name))

    def instances(self, name: str) -> list[ModelInstanceIndex]:
        """Return the model instances in which ``name`` appears, in registration order."""
        return list(self._instances.get(name, ()))

    def count(self, name: str) -> int:
        """Return the number of model instances in which ``name`` appears."""
        return len(self._instances.get(name, ()))

    def names(self, model_instance: ModelInstanceIndex) -> list[str]:
        """Return the names registered in ``model_instance``, in registration order."""
        return list(self._names.get(model_instance, ()))


class EntityTable(Generic[EntityT]):
    """
    A typed, append-only store of one kind of entity.

    Entities are created by the table itself (see :meth:`insert`) so that
    their ``index`` always equals their position in the table.

    Besides the entities' own names, a table can hold *aliases*: additional
    ``(model_instance, name)`` keys bound to an existing entity. Composite
    models use aliases to expose the entities of their sub-models under
    qualified names. Aliases take part in uniqueness and ambiguity checks,
    but do not create entities.
    """

    def __init__(
        self,
        kind: EntityKind,
        entity_type: type[EntityT],
        instance_name: Callable[[ModelInstanceIndex], str] | None = None,
    ):
        """
        Initializes an empty entity table.

        Args:
            kind (EntityKind): The kind of entity stored, used in error messages.
            entity_type (type): The entity record type. It is constructed as
                ``entity_type(index=..., name=..., model_instance=..., **payload)``.
            instance_name (Callable | None): Maps a model instance index to its name
                for error messages. If None, indices are printed instead.
        """
        self._kind = kind
        self._entity_type = entity_type
        self._instance_name = instance_name
        self._entities: list[EntityT] = []
        self._index = NameIndex()

    ###
    # Properties
    ###

    @property
    def kind(self) -> EntityKind:
        """The kind of entity stored in this table."""
        return self._kind

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[EntityT]:
        return iter(self._entities)

    def __getitem__(self, index: int) -> EntityT:
        return self.get(index)

    ###
    # Insertion
    ###

    def insert(self, name: str, model_instance: ModelInstanceIndex, **payload: Any) -> EntityT:
        """
        Create a new entity named ``name`` in ``model_instance``.

        Args:
            name (str): The entity name, unique within ``model_instance``.
            model_instance (ModelInstanceIndex): The owning model instance.
            **payload: Additional fields forwarded to the entity constructor.

        Returns:
            The newly created entity.

        Raises:
            DuplicateEntityNameError: If ``name`` is already taken in ``model_instance``.
        """
        self.check_available(name, model_instance)
        entity = self._entity_type(index=len(self._entities), name=name, model_instance=model_instance, **payload)
        self._entities.append(entity)
        self._index.add(name, model_instance, len(self._entities) - 1)
        return entity

    def add_alias(self, name: str, model_instance: ModelInstanceIndex, index: int) -> EntityT:
        """
        Expose the existing entity ``index`` as ``name`` within ``model_instance``.

        Raises:
            NotFoundError: If ``index`` is not a valid entity index.
            DuplicateEntityNameError: If ``name`` is already taken in ``model_instance``.
        """
        entity = self.get(index)
        self.check_available(name, model_instance)
        self._index.add(name, model_instance, index)
        return entity

    def check_available(self, name: str, model_instance: ModelInstanceIndex):
        """Raise :class:`DuplicateEntityNameError` if ``name`` is taken in ``model_instance``."""
        if (model_instance, name) in self._index:
            raise DuplicateEntityNameError(self._kind, name, self._format_instance(model_instance))

    ###
    # Lookup
    ###

    def get(self, index: int) -> EntityT:
        """
        Return the entity with the given index.

        Raises:
            NotFoundError: If ``index`` is outside the table bounds.
        """
        if not 0 <= index < len(self._entities):
            raise NotFoundError(
                f"{self._kind.label} index {index} is out of range. "
                f"Valid indices are in [0, {len(self._entities) - 1}]."
            )
        return self._entities[index]

    def has(self, name: str, model_instance: ModelInstanceIndex | None = None) -> bool:
        """
        Check whether an entity named ``name`` exists.

        Without ``model_instance`` the lookup is unscoped: it returns False if no
        model instance contains ``name``, True if exactly one does, and raises
        if several do. With ``model_instance`` the lookup is scoped and never
        ambiguous.

        Raises:
            AmbiguousNameError: If unscoped and ``name`` appears in several model instances.
        """
        if model_instance is not None:
            return (model_instance, name) in self._index
        count = self._index.count(name)
        if count > 1:
            raise self._ambiguous(name)
        return count == 1

    def get_by_name(self, name: str, model_instance: ModelInstanceIndex | None = None) -> EntityT:
        """
        Resolve ``name`` to an entity, optionally scoped to ``model_instance``.

        Raises:
            AmbiguousNameError: If unscoped and ``name`` appears in several model instances.
            NotFoundError: If no matching entity exists.
        """
        if model_instance is not None:
            index = self._index.find(name, model_instance)
            if index is None:
                raise NotFoundError(
                    f"There is no {self._kind.label.lower()} named '{name}' "
                    f"in model instance '{self._format_instance(model_instance)}'.",
                    name=name,
                )
            return self._entities[index]

        instances = self._index.instances(name)
        if len(instances) > 1:
            raise self._ambiguous(name)
        if not instances:
            raise NotFoundError(f"There is no {self._kind.label.lower()} named '{name}' in the model.", name=name)
        return self._entities[self._index.find(name, instances[0])]

    def names(self, model_instance: ModelInstanceIndex) -> list[str]:
        """Return all names (own and aliased) visible in ``model_instance``, in registration order."""
        return self._index.names(model_instance)

    def instances_with_name(self, name: str) -> list[ModelInstanceIndex]:
        """Return the model instances in which ``name`` is visible."""
        return self._index.instances(name)

    ###
    # Internals
    ###

    def _format_instance(self, model_instance: ModelInstanceIndex) -> str:
        if self._instance_name is None:
            return str(model_instance)
        return self._instance_name(model_instance)

    def _ambiguous(self, name: str) -> AmbiguousNameError:
        instances = [self._format_instance(m) for m in self._index.instances(name)]
        return AmbiguousNameError(self._kind, name, instances)
