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

from .entities import Body, Frame, Joint, JointActuator, JointType, validate_joint_damping
from .model import PlantModel
from .plant import Plant
from .registry import ModelInstance, ModelInstanceRegistry
from .tables import EntityTable, NameIndex

__all__ = [
    "Body",
    "EntityTable",
    "Frame",
    "Joint",
    "JointActuator",
    "JointType",
    "ModelInstance",
    "ModelInstanceRegistry",
    "NameIndex",
    "Plant",
    "PlantModel",
    "validate_joint_damping",
]
