"""Pydantic schemas for wire formats and local API request/response models."""
from .diagnostics import GameInfo, UserDiagnostics
from .health import HealthState, ServerHealthStatus, HealthResponse
from .registration import DeviceRegistration, RegistrationState, BindingStatus
from .control import (
    UserIdUpdate,
    DeviceTokenUpdate,
    RegistrationResponse,
    EnvironmentInfo,
    EnvironmentResponse,
    EnvironmentUpdate,
    EnvironmentChangeResponse,
    StatusOverview,
    DeepLinkRequest,
    NotificationTap,
    OpenResult,
)

__all__ = [
    "GameInfo",
    "UserDiagnostics",
    "HealthState",
    "ServerHealthStatus",
    "HealthResponse",
    "DeviceRegistration",
    "RegistrationState",
    "BindingStatus",
    "UserIdUpdate",
    "DeviceTokenUpdate",
    "RegistrationResponse",
    "EnvironmentInfo",
    "EnvironmentResponse",
    "EnvironmentUpdate",
    "EnvironmentChangeResponse",
    "StatusOverview",
    "DeepLinkRequest",
    "NotificationTap",
    "OpenResult",
]
