"""Server health probe results."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class HealthState(str, Enum):
    HEALTHY = "healthy"
    OFFLINE = "offline"
    ERROR = "error"


@dataclass(frozen=True)
class ServerHealthStatus:
    """Outcome of a single GET /health probe. Never persisted."""
    state: HealthState
    detail: Optional[str] = None

    @classmethod
    def healthy(cls, detail: str = "OK") -> "ServerHealthStatus":
        return cls(HealthState.HEALTHY, detail)

    @classmethod
    def offline(cls) -> "ServerHealthStatus":
        return cls(HealthState.OFFLINE)

    @classmethod
    def error(cls, detail: str) -> "ServerHealthStatus":
        return cls(HealthState.ERROR, detail)

    @property
    def is_healthy(self) -> bool:
        return self.state == HealthState.HEALTHY

    @property
    def display_text(self) -> str:
        if self.state == HealthState.OFFLINE:
            return "Server: Offline"
        return f"Server: {self.detail}"


class HealthResponse(BaseModel):
    """Health status as exposed by the local API."""
    state: HealthState
    detail: Optional[str] = None
    display_text: str

    @classmethod
    def from_status(cls, status: ServerHealthStatus) -> "HealthResponse":
        return cls(state=status.state, detail=status.detail, display_text=status.display_text)
