"""
Registration of the bundled service switchers.
"""
from .aws import AWSSwitcher
from .azure import AzureSwitcher
from .docker import DockerSwitcher
from .gcp import GCPSwitcher
from .kubernetes import KubernetesSwitcher
from .ssh import SSHSwitcher
from ..MANAGERS.switcher_registry import SwitcherRegistry


def register_default_switchers(registry: SwitcherRegistry) -> SwitcherRegistry:
    """
    Registers the aws, gcp, azure, docker, kubernetes and ssh switchers.

    :param registry: Registry to populate.
    :return: The same registry.
    """
    for switcher in (
        AWSSwitcher(),
        GCPSwitcher(),
        AzureSwitcher(),
        DockerSwitcher(),
        KubernetesSwitcher(),
        SSHSwitcher(),
    ):
        registry.register(switcher)
    return registry
