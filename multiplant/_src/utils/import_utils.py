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

from __future__ import annotations

import math
import xml.etree.ElementTree as ET


def is_xml_content(source: str) -> bool:
    """Return True if ``source`` holds XML markup rather than a file path."""
    return sanitize_xml_content(source).startswith("<")


def sanitize_xml_content(source: str) -> str:
    # Strip leading whitespace and byte-order marks
    xml_content = source.strip()
    if xml_content.startswith("\ufeff"):
        xml_content = xml_content[1:]
    # Remove leading XML comments
    while xml_content.strip().startswith("<!--"):
        end_comment = xml_content.find("-->")
        if end_comment != -1:
            xml_content = xml_content[end_comment + 3 :].strip()
        else:
            break
    return xml_content.strip()


def parse_float_from_string(value: str | None, default: float) -> float:
    """
    Parse a float from the text of an XML element.

    ``inf``, ``-inf`` and ``nan`` are accepted in any case.
    Returns ``default`` if ``value`` is None or blank.

    Raises:
        ValueError: If ``value`` is not a number.
    """
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError as e:
        raise ValueError(f"Unable to parse float value: {value}") from e


def find_text(element: ET.Element, path: str) -> str | None:
    """Return the stripped text of the first sub-element matching ``path``, or None."""
    child = element.find(path)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def format_effort_limit(effort: float) -> str:
    return "unbounded" if math.isinf(effort) else f"{effort:g}"
