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

"""Provides the registry of model instances."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from ..core.errors import DuplicateInstanceNameError, NotFoundError
from ..core.types import (
    DEFAULT_MODEL_INSTANCE_NAME,
    WORLD_MODEL_INSTANCE_NAME,
    ModelInstanceIndex,
)

###
# Module interface
###

__all__ = [
    "ModelInstance",
    "ModelInstanceRegistry",
]


###
# Containers
###


@dataclass(frozen=True)
class ModelInstance:
    """A namespace grouping the entities of one loaded model."""

    index: ModelInstanceIndex
    name: str


class ModelInstanceRegistry:
    """
    Allocates model instance indices and enforces unique instance names.

    The world and default model instances are registered on construction,
    at indices :data:`WORLD_MODEL_INSTANCE` and :data:`DEFAULT_MODEL_INSTANCE`.
    """

    def __init__(self):
        self._instances: list[ModelInstance] = []
        self._by_name: dict[str, ModelInstanceIndex] = {}

        self.add_instance(WORLD_MODEL_INSTANCE_NAME)
        self.add_instance(DEFAULT_MODEL_INSTANCE_NAME)

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[ModelInstance]:
        return iter(self._instances)

    def add_instance(self, name: str) -> ModelInstanceIndex:
        """
        Register a new model instance.

        Args:
            name (str): The instance name, unique across the registry.

        Returns:
            ModelInstanceIndex: The index of the new instance.

        Raises:
            DuplicateInstanceNameError: If ``name`` is already registered.
        """
        if name in self._by_name:
            raise DuplicateInstanceNameError(name)
        index = len(self._instances)
        self._instances.append(ModelInstance(index=index, name=name))
        self._by_name[name] = index
        return index

    def has_instance_named(self, name: str) -> bool:
        return name in self._by_name

    def get_instance_by_name(self, name: str) -> ModelInstanceIndex:
        """
        Raises:
            NotFoundError: If no instance named ``name`` exists.
        """
        index = self._by_name.get(name)
        if index is None:
            raise NotFoundError(f"There is no model instance named '{name}' in the model.", name=name)
        return index

    def is_valid(self, index: ModelInstanceIndex) -> bool:
        return 0 <= index < len(self._instances)

    def get_instance(self, index: ModelInstanceIndex) -> ModelInstance:
        """
        Raises:
            NotFoundError: If ``index`` is not a registered instance.
        """
        if not self.is_valid(index):
            raise NotFoundError(
                f"Model instance index {index} is out of range. "
                f"Valid indices are in [0, {len(self._instances) - 1}]."
            )
        return self._instances[index]

    def get_instance_name(self, index: ModelInstanceIndex) -> str:
        return self.get_instance(index).name
