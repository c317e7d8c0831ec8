"""
Runtime records produced while switching an environment.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SwitchOptions:
    """Options controlling a single switch."""

    dry_run: bool = False
    force: bool = False
    parallel: bool = False
    rollback_on_error: bool = False
    timeout: Optional[float] = None  # seconds for the whole switch


@dataclass
class ServiceGroup:
    """Services that may switch together once every earlier level is done."""

    level: int
    services: List[str] = field(default_factory=list)


@dataclass
class ServiceError:
    """An error attributed to a service (or to a phase such as ``rollback``)."""

    service: str
    error: str
    time: datetime = field(default_factory=_now)


@dataclass
class SwitchResult:
    """Outcome of one environment switch."""

    success: bool = True
    switched_services: List[str] = field(default_factory=list)
    failed_services: List[str] = field(default_factory=list)
    rollback_performed: bool = False
    duration: float = 0.0  # seconds
    errors: List[ServiceError] = field(default_factory=list)

    def add_error(self, service: str, error: str) -> ServiceError:
        record = ServiceError(service=service, error=error)
        self.errors.append(record)
        return record


@dataclass
class SwitchProgress:
    """Snapshot emitted after each completed level."""

    total_services: int
    completed_services: int
    status: str
    start_time: datetime
    estimated_end: datetime
    current_service: str = ""
    errors: List[ServiceError] = field(default_factory=list)

    @property
    def percentage(self) -> float:
        if self.total_services == 0:
            return 100.0
        return self.completed_services / self.total_services * 100
