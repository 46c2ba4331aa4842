"""Database models."""
from .local_state import LocalState, USER_ID_KEY, DEVICE_TOKEN_KEY, SERVER_ENVIRONMENT_KEY

__all__ = ["LocalState", "USER_ID_KEY", "DEVICE_TOKEN_KEY", "SERVER_ENVIRONMENT_KEY"]
