"""
Docker context switching.
"""
from typing import Any

from .base import ServiceSwitcher
from ..MODELS.service_config import DockerConfig
from ..UTILS.cancellation import SwitchContext
from ..UTILS.command import read_tool, run_tool


class DockerSwitcher(ServiceSwitcher):
    config_type = DockerConfig

    @property
    def name(self) -> str:
        return "docker"

    def switch(self, ctx: SwitchContext, config: Any) -> None:
        cfg: DockerConfig = self._expect(config)
        if cfg.context:
            run_tool(ctx, ["docker", "context", "use", cfg.context])

    def get_current_state(self, ctx: SwitchContext) -> DockerConfig:
        return DockerConfig(context=read_tool(ctx, ["docker", "context", "show"]))

    def rollback(self, ctx: SwitchContext, previous_state: Any) -> None:
        self.switch(ctx, previous_state)
