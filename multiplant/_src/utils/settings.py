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

"""Configuration of the SDFormat front-end and the model assembler."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.types import SCOPE_DELIMITER

###
# Module interface
###

__all__ = [
    "ParserSettings",
]


###
# Types
###


@dataclass
class ParserSettings:
    """
    Holds the configuration settings for loading models into a plant.
    """

    max_include_depth: int = 32
    """
    The maximum nesting depth of ``<include>`` elements.\n
    Inline nested ``<model>`` elements do not count towards it.\n
    Deeper include chains are rejected with a :class:`ResolutionError`.\n
    Defaults to `32`.
    """

    scope_delimiter: str = SCOPE_DELIMITER
    """
    The separator joining a composite's local name and an entity name in qualified names.\n
    Defaults to `"::"`.
    """

    model_config_filename: str = "model.config"
    """The manifest read when an include URI resolves to a model directory."""

    default_model_filename: str = "model.sdf"
    """The model file used when a model directory has no manifest."""

    create_joint_actuators: bool = True
    """
    Creates a joint actuator for every actuatable joint whose effort limit is not zero.\n
    Defaults to `True`.
    """

    def check(self) -> None:
        """
        Checks the validity of the settings.
        """
        if self.max_include_depth < 1:
            raise ValueError(f"Invalid include depth: {self.max_include_depth}. Must be a positive value.")
        if not self.scope_delimiter:
            raise ValueError("Invalid scope delimiter: must be a non-empty string.")
