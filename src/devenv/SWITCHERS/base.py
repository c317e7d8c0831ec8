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
Base class for service switchers.
"""
from abc import ABC, abstractmethod
from typing import Any, Type

from pydantic import BaseModel

from ..UTILS.cancellation import SwitchContext


class ServiceSwitcher(ABC):
    """
    Switches one service (a cloud CLI, a container runtime...) between states.

    Implementations should be stateless and safe to call from several
    threads, since services of one level may switch concurrently.

    To create a new switcher:
        1. Subclass ServiceSwitcher and set ``config_type`` to the
           ServiceConfig variant it consumes
        2. Implement name, switch, get_current_state and rollback
        3. Register it in a SwitcherRegistry
    """

    config_type: Type[BaseModel]

    @property
    @abstractmethod
    def name(self) -> str:
        """The service identifier used in environment files (e.g. 'aws')."""

    @abstractmethod
    def switch(self, ctx: SwitchContext, config: BaseModel) -> None:
        """
        Brings the service to the state described by ``config``.

        Raises any exception if the target state was not reached.
        """

    @abstractmethod
    def get_current_state(self, ctx: SwitchContext) -> Any:
        """
        Captures the current state. The value is opaque to the caller and
        is handed back verbatim to :meth:`rollback`.
        """

    @abstractmethod
    def rollback(self, ctx: SwitchContext, previous_state: Any) -> None:
        """Restores a state previously returned by :meth:`get_current_state`."""

    def _expect(self, config: Any) -> Any:
        if not isinstance(config, self.config_type):
            raise TypeError(
                f"invalid {self.name} configuration type: {type(config).__name__}"
            )
        return config

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
