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
Models for environments and their lifecycle hooks.
"""
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .service_config import ServiceConfig
from ..UTILS.durations import parse_duration
from ..errors import EnvironmentValidationError

DEFAULT_HOOK_TIMEOUT = 30.0


class Hook(BaseModel):
    """
    A shell command run before or after an environment switch.
    """
    model_config = ConfigDict(populate_by_name=True)

    command: str
    timeout: Optional[float] = None  # seconds; None or 0 means DEFAULT_HOOK_TIMEOUT
    on_error: str = Field(default="fail", alias="onError")  # continue, fail, rollback

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: Any) -> Optional[float]:
        if value is None or value == "":
            return None
        return parse_duration(value)

    @property
    def effective_timeout(self) -> float:
        return self.timeout or DEFAULT_HOOK_TIMEOUT

    @property
    def continue_on_error(self) -> bool:
        return self.on_error == "continue"


class Environment(BaseModel):
    """
    A complete development environment: target configuration for each
    service, ordering constraints between them and lifecycle hooks.
    Equivalent to a parsed environment YAML file.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    description: str = ""
    services: Dict[str, ServiceConfig] = {}
    dependencies: List[str] = []
    pre_hooks: List[Hook] = Field(default_factory=list, alias="preHooks")
    post_hooks: List[Hook] = Field(default_factory=list, alias="postHooks")

    @field_validator("services", mode="before")
    @classmethod
    def _null_services(cls, value: Any) -> Any:
        # `aws:` with no body in YAML loads as None
        if value is None:
            return {}
        if isinstance(value, dict):
            return {k: (v if v is not None else {}) for k, v in value.items()}
        return value

    @field_validator("dependencies", "pre_hooks", "post_hooks", mode="before")
    @classmethod
    def _null_lists(cls, value: Any) -> Any:
        return [] if value is None else value

    def ensure_valid(self) -> None:
        """
        Checks the environment can be switched to.

        :raises EnvironmentValidationError: On an empty name, no services or an empty dependency.
        """
        if not self.name:
            raise EnvironmentValidationError("environment name is required")
        if not self.services:
            raise EnvironmentValidationError("at least one service must be configured")
        for dep in self.dependencies:
            if dep == "":
                raise EnvironmentValidationError("empty dependency string found")

    def service_names(self) -> List[str]:
        """Configured service names, sorted."""
        return sorted(self.services)

    def has_service(self, name: str) -> bool:
        return name in self.services

    def to_yaml(self) -> str:
        """
        Serializes the environment using the same keys the parser accepts.
        """
        data = self.model_dump(by_alias=True, exclude_none=True)
        return yaml.safe_dump(data, sort_keys=False)
