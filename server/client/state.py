"""Connection state of the dashboard client"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Phase(str, Enum):
    LOADING = "loading"
    LIVE = "live"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class ConnectionState:
    """
    Loading -> Live on the first successful fetch, Loading/Live -> Degraded
    on the first failure. Further failures keep the first reason.
    """
    phase: Phase = Phase.LOADING
    reason: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.phase is Phase.LOADING

    @property
    def degraded(self) -> bool:
        return self.phase is Phase.DEGRADED

    @property
    def api_available(self) -> bool:
        return not self.degraded

    @property
    def error(self) -> Optional[str]:
        return self.reason if self.degraded else None

    def on_success(self) -> "ConnectionState":
        return ConnectionState(Phase.LIVE)

    def on_failure(self, reason: str) -> "ConnectionState":
        if self.degraded:
            return self
        return ConnectionState(Phase.DEGRADED, reason)
