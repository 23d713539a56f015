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

# ==================================================================================
# core
# ==================================================================================
from ._src.core import (
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
from ._version import __version__

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
    "__version__",
    "scoped_name",
    "split_scoped_name",
]

# ==================================================================================
# errors
# ==================================================================================
from ._src.core import (  # noqa: E402
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

__all__ += [
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

# ==================================================================================
# sim
# ==================================================================================
from ._src.sim import (  # noqa: E402
    Body,
    Frame,
    Joint,
    JointActuator,
    JointType,
    ModelInstance,
    Plant,
    PlantModel,
)

__all__ += [
    "Body",
    "Frame",
    "Joint",
    "JointActuator",
    "JointType",
    "ModelInstance",
    "Plant",
    "PlantModel",
]

# ==================================================================================
# parsing
# ==================================================================================
from ._src.utils import (  # noqa: E402
    ParserSettings,
    UriResolver,
    add_model,
    add_models,
    parse_sdf,
)

__all__ += [
    "ParserSettings",
    "UriResolver",
    "add_model",
    "add_models",
    "parse_sdf",
]

# ==================================================================================
# submodule APIs
# ==================================================================================
from . import parsing  # noqa: E402

__all__ += [
    "parsing",
]
