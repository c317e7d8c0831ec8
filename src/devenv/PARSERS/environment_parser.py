# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Parser for environment YAML files.
"""
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..MODELS.environment import Environment
from ..UTILS.string_interpolation import EnvironmentInterpolator
from ..errors import EnvironmentLoadError


class EnvironmentParser:
    """
    Parser for environment definition files.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional variable context for interpolation.

        :param context: Variables available to ${VAR} references. Defaults to the process environment.
        """
        self.context = context if context is not None else dict(os.environ)

    def parse(self, path: str) -> Environment:
        """
        Parses an environment file from a path.

        :param path: Path to the YAML file.
        :return: Parsed environment.
        :raises EnvironmentLoadError: If the file cannot be read or is invalid.
        """
        try:
            with open(path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise EnvironmentLoadError(f"failed to read environment file {path}: {e}") from e
        return self.parse_from_string(content, source=path)

    def parse_from_string(self, content: str, source: str = "<string>") -> Environment:
        """
        Parses an environment definition from a string.

        :param content: YAML content.
        :param source: Name used in error messages.
        :return: Parsed environment.
        :raises EnvironmentLoadError: On unknown variables, invalid YAML, schema errors or a missing name.
        """
        try:
            content = EnvironmentInterpolator.interpolate(content, self.context)
        except KeyError as e:
            raise EnvironmentLoadError(f"{source}: {e.args[0]}") from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise EnvironmentLoadError(f"failed to parse environment configuration {source}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise EnvironmentLoadError(f"{source}: environment configuration must be a mapping")

        env = self._build(data, source)
        if not env.name:
            raise EnvironmentLoadError(f"{source}: environment name is required")
        return env

    def _build(self, data: Dict[str, Any], source: str) -> Environment:
        try:
            return Environment.model_validate(data)
        except ValidationError as e:
            raise EnvironmentLoadError(f"{source}: invalid environment configuration: {e}") from e
