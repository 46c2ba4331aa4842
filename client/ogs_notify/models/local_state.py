"""LocalState model - key-value rows that survive process restarts."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime

from ..database import Base


class LocalState(Base):
    """Persisted client state stored as key-value pairs."""

    __tablename__ = "local_state"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# Persisted keys
USER_ID_KEY = "user_id"
DEVICE_TOKEN_KEY = "device_token"
SERVER_ENVIRONMENT_KEY = "server_environment"
