"""
Azure subscription switching.
"""
from typing import Any

from .base import ServiceSwitcher
from ..MODELS.service_config import AzureConfig
from ..UTILS.cancellation import SwitchContext
from ..UTILS.command import read_tool, run_tool


class AzureSwitcher(ServiceSwitcher):
    config_type = AzureConfig

    @property
    def name(self) -> str:
        return "azure"

    def switch(self, ctx: SwitchContext, config: Any) -> None:
        cfg: AzureConfig = self._expect(config)
        # the tenant follows from the subscription
        if cfg.subscription:
            run_tool(ctx, ["az", "account", "set", "--subscription", cfg.subscription])

    def get_current_state(self, ctx: SwitchContext) -> AzureConfig:
        return AzureConfig(
            subscription=read_tool(ctx, ["az", "account", "show", "--query", "id", "-o", "tsv"]),
            tenant=read_tool(ctx, ["az", "account", "show", "--query", "tenantId", "-o", "tsv"]),
        )

    def rollback(self, ctx: SwitchContext, previous_state: Any) -> None:
        self.switch(ctx, previous_state)
