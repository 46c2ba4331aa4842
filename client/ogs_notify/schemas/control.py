"""Request/response models for the local control API."""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .health import HealthResponse
from .registration import BindingStatus, RegistrationState


class UserIdUpdate(BaseModel):
    """Request to set the OGS user ID."""
    user_id: str = Field(..., min_length=1)


class DeviceTokenUpdate(BaseModel):
    """Token delivered by the OS push bridge, as text or hex of the raw bytes."""
    device_token: str = Field(..., min_length=1)


class RegistrationResponse(BaseModel):
    """Result of a reconciliation or manual re-registration."""
    state: RegistrationState
    message: str


class EnvironmentInfo(BaseModel):
    """A selectable notification service endpoint."""
    name: str
    display_name: str
    base_url: str


class EnvironmentResponse(BaseModel):
    current: EnvironmentInfo
    available: List[EnvironmentInfo]


class EnvironmentUpdate(BaseModel):
    environment: str


class EnvironmentChangeResponse(BaseModel):
    """Environment after a switch, with the fresh probe of the new server."""
    current: EnvironmentInfo
    health: HealthResponse
    message: str


class StatusOverview(BaseModel):
    """Main screen state."""
    binding: BindingStatus
    message: str
    user_id: Optional[str] = None
    has_device_token: bool
    environment: EnvironmentInfo
    health: Optional[HealthResponse] = None


class DeepLinkRequest(BaseModel):
    url: str


class NotificationTap(BaseModel):
    """userInfo dictionary of a tapped notification."""
    payload: Dict[str, Any] = Field(default_factory=dict)


class OpenResult(BaseModel):
    """Which URL, if any, was handed to the external opener."""
    opened: bool
    url: Optional[str] = None
