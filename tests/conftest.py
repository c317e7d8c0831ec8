"""
Shared fixtures: in-memory switchers and environment builders.
"""
import threading
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

from devenv.MANAGERS.switcher_registry import SwitcherRegistry
from devenv.MODELS.environment import Environment, Hook
from devenv.MODELS.service_config import DockerConfig, ServiceConfig
from devenv.SWITCHERS.base import ServiceSwitcher


class FakeSwitcher(ServiceSwitcher):
    """
    Records every call. Consumes DockerConfig so it can stand in for any
    service name.
    """
    config_type = DockerConfig

    def __init__(self,
                 name: str,
                 state: Any = None,
                 switch_error: Optional[Exception] = None,
                 state_error: Optional[Exception] = None,
                 rollback_error: Optional[Exception] = None,
                 delay: float = 0.0,
                 journal: Optional[List[Tuple[str, str]]] = None):
        self._name = name
        self.state = state if state is not None else {"context": f"{name}-before"}
        self.switch_error = switch_error
        self.state_error = state_error
        self.rollback_error = rollback_error
        self.delay = delay
        self.journal = journal if journal is not None else []
        self.switched: List[Any] = []
        self.captured = 0
        self.rolled_back: List[Any] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def _log(self, event: str) -> None:
        with self._lock:
            self.journal.append((event, self._name))

    def switch(self, ctx, config):
        self._expect(config)
        self._log("switch-start")
        if self.delay:
            time.sleep(self.delay)
        self.switched.append(config)
        self._log("switch-end")
        if self.switch_error is not None:
            raise self.switch_error

    def get_current_state(self, ctx):
        self.captured += 1
        self._log("capture")
        if self.state_error is not None:
            raise self.state_error
        return self.state

    def rollback(self, ctx, previous_state):
        ctx.check()
        self.rolled_back.append(previous_state)
        self._log("rollback")
        if self.rollback_error is not None:
            raise self.rollback_error


def build_environment(services: Iterable[str],
                      dependencies: Iterable[str] = (),
                      pre_hooks: Iterable[Hook] = (),
                      post_hooks: Iterable[Hook] = (),
                      name: str = "test-env") -> Environment:
    return Environment(
        name=name,
        services={s: ServiceConfig(docker=DockerConfig(context=f"{s}-target")) for s in services},
        dependencies=list(dependencies),
        pre_hooks=list(pre_hooks),
        post_hooks=list(post_hooks),
    )


@pytest.fixture
def journal() -> List[Tuple[str, str]]:
    return []


@pytest.fixture
def fake_switcher():
    """Factory for FakeSwitcher instances."""
    return FakeSwitcher


@pytest.fixture
def environment_factory():
    return build_environment


@pytest.fixture
def registry_factory(journal):
    """
    Builds a registry of FakeSwitchers sharing one journal.
    Keyword arguments per name override FakeSwitcher options.
    """
    def make(names: Iterable[str], **overrides: Dict[str, Any]) -> Tuple[SwitcherRegistry, Dict[str, FakeSwitcher]]:
        registry = SwitcherRegistry()
        fakes = {}
        for name in names:
            fake = FakeSwitcher(name, journal=journal, **overrides.get(name, {}))
            registry.register(fake)
            fakes[name] = fake
        return registry, fakes

    return make
