"""
AWS CLI profile and region switching.
"""
from typing import Any

from .base import ServiceSwitcher
from ..MODELS.service_config import AWSConfig
from ..UTILS.cancellation import SwitchContext
from ..UTILS.command import read_tool, run_tool


class AWSSwitcher(ServiceSwitcher):
    config_type = AWSConfig

    @property
    def name(self) -> str:
        return "aws"

    def switch(self, ctx: SwitchContext, config: Any) -> None:
        cfg: AWSConfig = self._expect(config)
        if cfg.profile:
            run_tool(ctx, ["aws", "configure", "set", "profile", cfg.profile])
        if cfg.region:
            args = ["aws", "configure", "set", "region", cfg.region]
            if cfg.profile:
                args += ["--profile", cfg.profile]
            run_tool(ctx, args)

    def get_current_state(self, ctx: SwitchContext) -> AWSConfig:
        return AWSConfig(
            profile=read_tool(ctx, ["aws", "configure", "get", "profile"]),
            region=read_tool(ctx, ["aws", "configure", "get", "region"]),
        )

    def rollback(self, ctx: SwitchContext, previous_state: Any) -> None:
        self.switch(ctx, previous_state)
