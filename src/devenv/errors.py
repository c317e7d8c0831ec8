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
Exception hierarchy for environment switching.
"""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .MODELS.switch_result import SwitchResult


class DevEnvError(Exception):
    """Base class for every error raised by devenv."""


class EnvironmentValidationError(DevEnvError, ValueError):
    """The environment definition is unusable (empty name, no services...)."""


class EnvironmentLoadError(DevEnvError):
    """An environment file could not be read, interpolated or parsed."""


class DependencyError(DevEnvError):
    """Dependency constraints could not be resolved into levels."""


class DependencyFormatError(DependencyError, ValueError):
    """A constraint is not of the form ``"from -> to"``."""


class UnknownServiceError(DependencyError, KeyError):
    """A constraint names a service that is not configured."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class CircularDependencyError(DependencyError):
    """The constraints contain a cycle (a self-dependency included)."""


class HookError(DevEnvError):
    """Base class for lifecycle hook failures."""


class HookValidationError(HookError, ValueError):
    """A hook command was rejected by the command gate."""


class HookExecutionError(HookError):
    """A hook command ran and failed, or timed out."""


class RegistrationError(DevEnvError):
    """No switcher is registered for a service, or it cannot be registered."""


class ConfigurationError(DevEnvError):
    """A service scheduled to switch has no matching configuration variant."""


class ServiceSwitchError(DevEnvError):
    """A switcher failed to capture state or to reach the target state."""

    def __init__(self, service: str, message: str):
        super().__init__(message)
        self.service = service


class SwitchCancelledError(DevEnvError):
    """The switch context was cancelled or its deadline passed."""


class SwitchAbortedError(DevEnvError):
    """
    A switch stopped before completing all levels.

    The partially populated result is available on ``result``.
    """

    def __init__(self, message: str, result: Optional["SwitchResult"] = None):
        super().__init__(message)
        self.result = result


class PreHookError(SwitchAbortedError):
    """A pre-hook failed and aborted the switch before any service was touched."""
