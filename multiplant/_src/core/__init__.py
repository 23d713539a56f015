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

from .errors import (
    AlreadyFinalizedError,
    AmbiguousNameError,
    DocumentParseError,
    DuplicateEntityNameError,
    DuplicateInstanceNameError,
    ErrorKind,
    InvalidJointDampingError,
    NotFoundError,
    PlantError,
    PlantFinalizedError,
    ResolutionError,
)
from .types import (
    DEFAULT_MODEL_INSTANCE,
    DEFAULT_MODEL_INSTANCE_NAME,
    SCOPE_DELIMITER,
    WORLD_BODY_INDEX,
    WORLD_BODY_NAME,
    WORLD_MODEL_INSTANCE,
    WORLD_MODEL_INSTANCE_NAME,
    BodyIndex,
    EntityKind,
    FrameIndex,
    JointActuatorIndex,
    JointIndex,
    ModelInstanceIndex,
    scoped_name,
    split_scoped_name,
)

__all__ = [
    "DEFAULT_MODEL_INSTANCE",
    "DEFAULT_MODEL_INSTANCE_NAME",
    "SCOPE_DELIMITER",
    "WORLD_BODY_INDEX",
    "WORLD_BODY_NAME",
    "WORLD_MODEL_INSTANCE",
    "WORLD_MODEL_INSTANCE_NAME",
    "AlreadyFinalizedError",
    "AmbiguousNameError",
    "BodyIndex",
    "DocumentParseError",
    "DuplicateEntityNameError",
    "DuplicateInstanceNameError",
    "EntityKind",
    "ErrorKind",
    "FrameIndex",
    "InvalidJointDampingError",
    "JointActuatorIndex",
    "JointIndex",
    "ModelInstanceIndex",
    "NotFoundError",
    "PlantError",
    "PlantFinalizedError",
    "ResolutionError",
    "scoped_name",
    "split_scoped_name",
]
