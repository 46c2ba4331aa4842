"""Registration request and state schemas."""
from enum import Enum
from pydantic import BaseModel


class DeviceRegistration(BaseModel):
    """Body of POST /register on the notification service."""
    user_id: str
    device_token: str


class RegistrationState(str, Enum):
    REGISTERED = "registered"
    DEFERRED = "deferred"  # one half of the binding is not known yet
    SKIPPED = "skipped"  # pair already confirmed by this process
    FAILED = "failed"


class BindingStatus(str, Enum):
    READY = "ready"
    AWAITING_TOKEN = "awaiting_token"
    NEEDS_USER_ID = "needs_user_id"

