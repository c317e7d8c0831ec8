"""
Registry mapping service names to their switchers.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel

from ..MODELS.service_config import ServiceConfig
from ..SWITCHERS.base import ServiceSwitcher
from ..errors import RegistrationError

logger = logging.getLogger(__name__)


class SwitcherRegistry:
    """
    Holds the switcher registered for each service name, together with the
    configuration variant it consumes.

    Lookups are safe from any number of threads. Switches hold the registry
    through :meth:`frozen`; registration and removal wait until no switch
    holds it.
    """

    def __init__(self):
        self._switchers: Dict[str, ServiceSwitcher] = {}
        self._config_fields: Dict[str, str] = {}
        self._cond = threading.Condition()
        self._readers = 0

    def register(self, switcher: ServiceSwitcher, name: Optional[str] = None) -> None:
        """
        Registers a switcher, under its own name unless ``name`` is given.

        :param switcher: The switcher instance.
        :param name: Service name to register it under.
        :raises RegistrationError: If its ``config_type`` is not a ServiceConfig variant.
        """
        name = name or switcher.name
        config_type = getattr(switcher, "config_type", None)
        field = ServiceConfig.field_for(config_type) if config_type else None
        if field is None:
            raise RegistrationError(
                f"switcher for '{name}' consumes an unsupported configuration type: {config_type!r}"
            )

        with self._write_lock():
            if name in self._switchers:
                logger.warning("Overwriting existing switcher: %s", name)
            self._switchers[name] = switcher
            self._config_fields[name] = field
        logger.debug("Registered switcher: %s (%s)", name, field)

    def unregister(self, name: str) -> None:
        """Removes a switcher; unknown names are ignored."""
        with self._write_lock():
            self._switchers.pop(name, None)
            self._config_fields.pop(name, None)

    def get(self, name: str) -> Optional[ServiceSwitcher]:
        """Looks up a switcher by service name."""
        with self._cond:
            return self._switchers.get(name)

    def config_for(self, name: str, service_config: ServiceConfig) -> Optional[BaseModel]:
        """
        Selects the variant of ``service_config`` consumed by the switcher
        registered for ``name``.

        :return: The variant, or None if no switcher is registered or the variant is not set.
        """
        with self._cond:
            field = self._config_fields.get(name)
        if field is None:
            return None
        return service_config.variant(field)

    def available_services(self) -> List[str]:
        """Registered service names, sorted."""
        with self._cond:
            return sorted(self._switchers)

    def __contains__(self, name: str) -> bool:
        with self._cond:
            return name in self._switchers

    def __len__(self) -> int:
        with self._cond:
            return len(self._switchers)

    @contextmanager
    def frozen(self) -> Iterator["SwitcherRegistry"]:
        """
        Holds the registry unchanged for the duration of the block.
        Several blocks may hold it at once.
        """
        with self._cond:
            self._readers += 1
        try:
            yield self
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def _write_lock(self) -> Iterator[None]:
        with self._cond:
            while self._readers:
                self._cond.wait()
            yield
