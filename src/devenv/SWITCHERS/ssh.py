"""
SSH configuration switching.

The active configuration is tracked in a small state file holding the
path of the selected SSH config, which tools and shell profiles can read
(``ssh -F "$(cat ~/.devenv/ssh_active)"``).
"""
import os
from pathlib import Path
from typing import Any, Optional

from .base import ServiceSwitcher
from ..MODELS.service_config import SSHConfig
from ..UTILS.cancellation import SwitchContext

DEFAULT_CONFIG = "default"


class SSHSwitcher(ServiceSwitcher):
    config_type = SSHConfig

    def __init__(self, state_file: Optional[str] = None):
        """
        Args:
            state_file: Where the active config path is stored. Defaults to ~/.devenv/ssh_active
        """
        if state_file:
            self.state_file = Path(state_file)
        else:
            self.state_file = Path.home() / ".devenv" / "ssh_active"

    @property
    def name(self) -> str:
        return "ssh"

    def switch(self, ctx: SwitchContext, config: Any) -> None:
        cfg: SSHConfig = self._expect(config)
        if not cfg.config:
            return
        ctx.check()

        target = cfg.config
        if target != DEFAULT_CONFIG:
            path = Path(os.path.expanduser(target))
            if not path.is_file():
                raise FileNotFoundError(f"SSH config not found: {target}")
            target = str(path.resolve())

        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        self.state_file.write_text(target + "\n")

    def get_current_state(self, ctx: SwitchContext) -> SSHConfig:
        if self.state_file.is_file():
            active = self.state_file.read_text().strip()
            if active:
                return SSHConfig(config=active)
        return SSHConfig(config=DEFAULT_CONFIG)

    def rollback(self, ctx: SwitchContext, previous_state: Any) -> None:
        self.switch(ctx, previous_state)
