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
A reader for the subset of SDFormat describing the kinematic structure of a plant.

:func:`parse_sdf` turns an SDFormat file or XML string into an
:class:`SdfDocument`: a tree of plain description records (links, joints,
frames, nested models and unresolved includes). No plant state is touched
while reading; the :class:`ModelAssembler` resolves includes and commits the
records into a :class:`Plant`.

Geometry, inertia, poses and other dynamic properties are not read.
"""

from __future__ import annotations

import os
import warnings
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from ..core.errors import DocumentParseError
from ..sim.entities import JointType
from .import_utils import find_text, is_xml_content, parse_float_from_string, sanitize_xml_content

###
# Module interface
###

__all__ = [
    "FrameSpec",
    "IncludeSpec",
    "JointSpec",
    "LinkSpec",
    "ModelSpec",
    "SdfDocument",
    "parse_sdf",
]


IGNORED_MODEL_ELEMENTS = ("plugin", "gripper")
"""Elements of ``<model>`` that are dropped with a warning."""


###
# Types
###


@dataclass
class LinkSpec:
    name: str


@dataclass
class FrameSpec:
    name: str
    attached_to: str | None = None
    """Name of the body or frame this frame is attached to. If None, the model's canonical link is used."""


@dataclass
class JointSpec:
    name: str
    joint_type: JointType
    parent: str
    child: str
    damping: float = 0.0
    """The ``<axis><dynamics><damping>`` value, unvalidated."""
    effort_limit: float = -1.0
    """The ``<axis><limit><effort>`` value. Negative values mean unbounded."""


@dataclass
class IncludeSpec:
    uri: str
    name: str | None = None
    """Optional override of the included model's name."""
    base_dir: str | None = None
    """Directory of the including document, used to resolve relative URIs."""


@dataclass
class ModelSpec:
    """The contents of one ``<model>`` element."""

    name: str | None
    links: list[LinkSpec] = field(default_factory=list)
    joints: list[JointSpec] = field(default_factory=list)
    frames: list[FrameSpec] = field(default_factory=list)
    children: list[IncludeSpec | ModelSpec] = field(default_factory=list)
    """Nested includes and models, in declaration order."""
    base_dir: str | None = None
    source: str | None = None


@dataclass
class SdfDocument:
    """
    A parsed SDFormat document.

    A document declares either a single ``<model>`` or a ``<world>``, whose
    ``entries`` are the top-level models and includes in declaration order.
    """

    entries: list[ModelSpec | IncludeSpec] = field(default_factory=list)
    is_world: bool = False
    world_name: str | None = None
    base_dir: str | None = None
    """Directory of the document file, or None for documents read from a string."""
    source: str | None = None
    """Path of the document file, or None for documents read from a string."""

    @property
    def models(self) -> list[ModelSpec]:
        """The inline ``<model>`` entries of the document."""
        return [entry for entry in self.entries if isinstance(entry, ModelSpec)]


###
# Parsing
###


def parse_sdf(source: str, base_dir: str | None = None) -> SdfDocument:
    """
    Read an SDFormat document.

    Args:
        source (str): A path to an SDFormat file, or the XML content itself.
        base_dir (str | None): The directory used to resolve relative include URIs
            of XML content. Ignored for files, whose own directory is used.

    Returns:
        SdfDocument: The parsed document.

    Raises:
        FileNotFoundError: If ``source`` is a path to a missing file.
        DocumentParseError: If the XML is malformed or violates the supported schema.
    """
    source = os.fspath(source) if hasattr(source, "__fspath__") else source

    if is_xml_content(source):
        path = None
        try:
            root = ET.fromstring(sanitize_xml_content(source))
        except ET.ParseError as e:
            raise DocumentParseError(f"Malformed XML: {e}") from e
    else:
        path = os.path.abspath(source)
        base_dir = os.path.dirname(path)
        try:
            root = ET.parse(path).getroot()
        except ET.ParseError as e:
            raise DocumentParseError(f"Malformed XML: {e}", source=path) from e

    if root.tag != "sdf":
        raise DocumentParseError(f"Expected an <sdf> root element, found <{root.tag}>", source=path)

    models = root.findall("model")
    worlds = root.findall("world")
    document = SdfDocument(base_dir=base_dir, source=path)

    if len(worlds) == 1 and not models:
        world = worlds[0]
        document.is_world = True
        document.world_name = world.get("name")
        for child in world:
            if child.tag == "model":
                document.entries.append(_parse_model(child, base_dir, path))
            elif child.tag == "include":
                document.entries.append(_parse_include(child, base_dir, path))
    elif len(models) == 1 and not worlds:
        document.entries.append(_parse_model(models[0], base_dir, path))
    else:
        raise DocumentParseError(
            f"An <sdf> element must contain exactly one <model> or one <world>, "
            f"found {len(models)} model(s) and {len(worlds)} world(s)",
            source=path,
        )

    return document


def _require_attribute(element: ET.Element, attribute: str, source: str | None) -> str:
    value = element.get(attribute)
    if value is None or not value.strip():
        raise DocumentParseError(f'A <{element.tag}> element is missing the required "{attribute}" attribute', source)
    return value.strip()


def _parse_model(element: ET.Element, base_dir: str | None, source: str | None) -> ModelSpec:
    name = element.get("name")
    model = ModelSpec(name=name.strip() if name else None, base_dir=base_dir, source=source)

    for child in element:
        if child.tag == "link":
            model.links.append(LinkSpec(name=_require_attribute(child, "name", source)))
        elif child.tag == "joint":
            model.joints.append(_parse_joint(child, source))
        elif child.tag == "frame":
            attached_to = child.get("attached_to")
            model.frames.append(
                FrameSpec(name=_require_attribute(child, "name", source), attached_to=attached_to or None)
            )
        elif child.tag == "include":
            model.children.append(_parse_include(child, base_dir, source))
        elif child.tag == "model":
            nested = _parse_model(child, base_dir, source)
            if nested.name is None:
                raise DocumentParseError('A nested <model> element is missing the required "name" attribute', source)
            model.children.append(nested)
        elif child.tag in IGNORED_MODEL_ELEMENTS:
            warnings.warn(
                f"Ignoring <{child.tag}> element in model '{model.name}': only the kinematic structure is loaded.",
                stacklevel=3,
            )

    return model


def _parse_joint(element: ET.Element, source: str | None) -> JointSpec:
    name = _require_attribute(element, "name", source)
    type_name = _require_attribute(element, "type", source)
    try:
        joint_type = JointType.from_string(type_name)
    except DocumentParseError as e:
        raise DocumentParseError(f"Joint '{name}': {e}", source) from e

    parent = find_text(element, "parent")
    child = find_text(element, "child")
    if parent is None or child is None:
        raise DocumentParseError(f"Joint '{name}' must declare both a <parent> and a <child>", source)

    try:
        damping = parse_float_from_string(find_text(element, "axis/dynamics/damping"), 0.0)
        effort_limit = parse_float_from_string(find_text(element, "axis/limit/effort"), -1.0)
    except ValueError as e:
        raise DocumentParseError(f"Joint '{name}': {e}", source) from e

    return JointSpec(
        name=name,
        joint_type=joint_type,
        parent=parent,
        child=child,
        damping=damping,
        effort_limit=effort_limit,
    )


def _parse_include(element: ET.Element, base_dir: str | None, source: str | None) -> IncludeSpec:
    uri = find_text(element, "uri")
    if uri is None:
        raise DocumentParseError("An <include> element must declare a <uri>", source)
    return IncludeSpec(uri=uri, name=find_text(element, "name"), base_dir=base_dir)
