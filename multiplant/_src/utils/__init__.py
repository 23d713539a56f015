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

from .assembler import ModelAssembler, add_model, add_models
from .import_sdf import FrameSpec, IncludeSpec, JointSpec, LinkSpec, ModelSpec, SdfDocument, parse_sdf
from .settings import ParserSettings
from .uri_resolver import UriResolver, default_path_resolver

__all__ = [
    "FrameSpec",
    "IncludeSpec",
    "JointSpec",
    "LinkSpec",
    "ModelAssembler",
    "ModelSpec",
    "ParserSettings",
    "SdfDocument",
    "UriResolver",
    "add_model",
    "add_models",
    "default_path_resolver",
    "parse_sdf",
]
