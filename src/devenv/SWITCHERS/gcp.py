"""
gcloud project, account and region switching.
"""
from typing import Any

from .base import ServiceSwitcher
from ..MODELS.service_config import GCPConfig
from ..UTILS.cancellation import SwitchContext
from ..UTILS.command import read_tool, run_tool

# (config field, gcloud property)
_PROPERTIES = (
    ("project", "project"),
    ("account", "account"),
    ("region", "compute/region"),
)


class GCPSwitcher(ServiceSwitcher):
    config_type = GCPConfig

    @property
    def name(self) -> str:
        return "gcp"

    def switch(self, ctx: SwitchContext, config: Any) -> None:
        cfg: GCPConfig = self._expect(config)
        for field, prop in _PROPERTIES:
            value = getattr(cfg, field)
            if value:
                run_tool(ctx, ["gcloud", "config", "set", prop, value])

    def get_current_state(self, ctx: SwitchContext) -> GCPConfig:
        values = {
            field: read_tool(ctx, ["gcloud", "config", "get-value", prop])
            for field, prop in _PROPERTIES
        }
        return GCPConfig(**values)

    def rollback(self, ctx: SwitchContext, previous_state: Any) -> None:
        self.switch(ctx, previous_state)
