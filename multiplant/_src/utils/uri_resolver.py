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

"""Resolution of ``<include>`` URIs to SDFormat files."""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET
from urllib.parse import unquote, urlsplit

from resolve_robotics_uri_py import resolve_robotics_uri

from ..core.errors import ResolutionError
from . import logger as msg
from .settings import ParserSettings

###
# Module interface
###

__all__ = [
    "UriResolver",
    "default_path_resolver",
]


MODEL_SCHEME = "model://"
PACKAGE_SCHEME = "package://"
FILE_SCHEME = "file://"


def default_path_resolver(base_dir: str | None, uri: str) -> str:
    """Resolve ``uri`` with a :class:`UriResolver` using the default settings and no registered paths."""
    return UriResolver()(base_dir, uri)


class UriResolver:
    """
    Maps include URIs to absolute SDFormat file paths.

    Instances are callables taking ``(base_dir, uri)`` and returning a file
    path, the same contract as the ``path_resolver`` argument of the loaders,
    so they can be passed wherever a resolver is expected.

    Supported references:

    - ``model://<path>`` and ``package://<path>`` are resolved with
      ``resolve_robotics_uri``, which searches the directories registered for
      the prefix with :meth:`add_uri_path` together with the resource paths
      of the environment (``GZ_SIM_RESOURCE_PATH``, ``SDF_PATH``,
      ``ROS_PACKAGE_PATH``, ``AMENT_PREFIX_PATH``, etc.).
    - Any other ``<prefix>://<path>`` is looked up the same way, provided at
      least one directory is registered for ``<prefix>://``.
    - ``file://<path>`` and absolute paths are used as-is.
    - Relative paths are resolved against the directory of the including document.

    When the target is a directory, the model file is read from its
    ``model.config`` manifest (the ``<sdf>`` entry with the highest version),
    falling back to ``model.sdf``.

    Example
    -------

    .. code-block:: python

        resolver = UriResolver()
        resolver.add_uri_path("model://", "/path/to/models")
        plant.add_model("world.sdf", resolver=resolver)
    """

    def __init__(self, settings: ParserSettings | None = None):
        self._settings = settings if settings is not None else ParserSettings()
        self._uri_paths: list[tuple[str, str]] = []

    @property
    def uri_paths(self) -> list[tuple[str, str]]:
        """The registered ``(prefix, directory)`` pairs, in registration order."""
        return list(self._uri_paths)

    def add_uri_path(self, prefix: str, path: str):
        """
        Register a search directory for URIs starting with ``prefix``.

        Args:
            prefix (str): A URI scheme prefix such as ``"model://"``. A missing ``"://"`` is appended.
            path (str): The directory to search.
        """
        if not prefix.endswith("://"):
            prefix = prefix.rstrip(":/") + "://"
        path = os.path.abspath(os.fspath(path))
        self._uri_paths.append((prefix, path))
        msg.debug(f"Registered search path '{path}' for '{prefix}' URIs.")

    def search_paths(self, prefix: str) -> list[str]:
        """Return the directories registered for URIs starting with ``prefix``."""
        return [path for p, path in self._uri_paths if p == prefix]

    def __call__(self, base_dir: str | None, uri: str) -> str:
        return self.resolve(base_dir, uri)

    def resolve(self, base_dir: str | None, uri: str) -> str:
        """
        Resolve ``uri`` to the absolute path of an SDFormat file.

        Raises:
            ResolutionError: If the URI scheme is unknown or no matching file exists.
        """
        if uri.startswith(FILE_SCHEME):
            path = unquote(urlsplit(uri).path)
        elif "://" in uri:
            path = self._resolve_scheme_uri(uri)
        elif os.path.isabs(uri):
            path = uri
        elif base_dir:
            path = os.path.join(base_dir, uri)
        else:
            raise ResolutionError(uri, "cannot resolve a relative path without a base directory.")

        return self.find_model_file(os.path.abspath(path), uri)

    def _resolve_scheme_uri(self, uri: str) -> str:
        prefix, _, remainder = uri.partition("://")
        prefix += "://"
        package_dirs = self.search_paths(prefix)
        scheme = prefix
        if prefix not in (MODEL_SCHEME, PACKAGE_SCHEME):
            if not package_dirs:
                raise ResolutionError(uri, f"unsupported URI scheme '{prefix}'.")
            # Custom prefixes are searched like model:// URIs
            scheme = MODEL_SCHEME

        # resolve_robotics_uri only locates files, so model directories are found through their manifest
        remainder = remainder.rstrip("/")
        targets = (
            remainder,
            f"{remainder}/{self._settings.model_config_filename}",
            f"{remainder}/{self._settings.default_model_filename}",
        )
        for target in targets:
            try:
                found = os.fspath(resolve_robotics_uri(scheme + target, package_dirs=package_dirs))
            except FileNotFoundError:
                continue
            except ValueError as e:
                raise ResolutionError(uri, f"malformed URI: {e}") from e
            return found if target == remainder else os.path.dirname(found)

        searched = ", ".join(package_dirs) if package_dirs else "none registered"
        raise ResolutionError(
            uri,
            f"not found in any of the search paths ({searched}) or the resource paths of the environment. "
            f"Register a directory with UriResolver.add_uri_path() or set one of the environment variables "
            f"(GZ_SIM_RESOURCE_PATH, SDF_PATH, ROS_PACKAGE_PATH, etc.).",
        )

    def find_model_file(self, path: str, uri: str) -> str:
        """
        Return the SDFormat file for ``path``, reading the manifest if ``path`` is a model directory.

        Raises:
            ResolutionError: If no model file exists at ``path``.
        """
        if os.path.isdir(path):
            config = os.path.join(path, self._settings.model_config_filename)
            if os.path.isfile(config):
                path = os.path.join(path, self._read_model_config(config, uri))
            else:
                path = os.path.join(path, self._settings.default_model_filename)
        if not os.path.isfile(path):
            raise ResolutionError(uri, f"file '{path}' does not exist.")
        return os.path.normpath(path)

    @staticmethod
    def _read_model_config(config: str, uri: str) -> str:
        try:
            root = ET.parse(config).getroot()
        except ET.ParseError as e:
            raise ResolutionError(uri, f"malformed model manifest '{config}': {e}") from e

        entries = [(_parse_version(sdf.get("version")), sdf.text.strip()) for sdf in root.iter("sdf") if sdf.text]
        entries = [entry for entry in entries if entry[1]]
        if not entries:
            raise ResolutionError(uri, f"model manifest '{config}' does not declare an <sdf> file.")
        return max(entries, key=lambda entry: entry[0])[1]


def _parse_version(version: str | None) -> tuple[int, ...]:
    if not version:
        return ()
    try:
        return tuple(int(part) for part in version.strip().split("."))
    except ValueError:
        return ()
