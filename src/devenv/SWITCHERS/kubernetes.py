"""
kubeconfig context and namespace switching.
"""
from typing import Any

from .base import ServiceSwitcher
from ..MODELS.service_config import KubernetesConfig
from ..UTILS.cancellation import SwitchContext
from ..UTILS.command import read_tool, run_tool


class KubernetesSwitcher(ServiceSwitcher):
    config_type = KubernetesConfig

    @property
    def name(self) -> str:
        return "kubernetes"

    def switch(self, ctx: SwitchContext, config: Any) -> None:
        cfg: KubernetesConfig = self._expect(config)
        if cfg.context:
            run_tool(ctx, ["kubectl", "config", "use-context", cfg.context])
        # namespace applies to whichever context is now current
        if cfg.namespace:
            run_tool(ctx, ["kubectl", "config", "set-context", "--current", "--namespace", cfg.namespace])

    def get_current_state(self, ctx: SwitchContext) -> KubernetesConfig:
        return KubernetesConfig(
            context=read_tool(ctx, ["kubectl", "config", "current-context"]),
            namespace=read_tool(
                ctx, ["kubectl", "config", "view", "--minify", "--output", "jsonpath={..namespace}"]
            ),
        )

    def rollback(self, ctx: SwitchContext, previous_state: Any) -> None:
        self.switch(ctx, previous_state)
