"""External collaborator interfaces consumed by the browser engine."""

from bib_browser.services.interfaces import (
    DefaultSideEffectPorts,
    PortError,
    RecordRepository,
    SideEffectPorts,
)

__all__ = [
    "DefaultSideEffectPorts",
    "PortError",
    "RecordRepository",
    "SideEffectPorts",
]
