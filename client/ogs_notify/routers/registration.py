"""Registration API endpoints - user ID, device token and re-registration."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..models.local_state import DEVICE_TOKEN_KEY, USER_ID_KEY
from ..schemas.control import (
    DeviceTokenUpdate,
    RegistrationResponse,
    StatusOverview,
    UserIdUpdate,
)
from ..schemas.health import HealthResponse
from ..services.container import ClientServices, get_services
from ..services.reconciler import RegistrationOutcome
from .environment import environment_info

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["registration"])


def _to_response(outcome: RegistrationOutcome, failure_prefix: str) -> RegistrationResponse:
    """Build the response, turning a failed registration into a 502 notice."""
    if not outcome.ok:
        detail = f"{failure_prefix}: {outcome.error.message if outcome.error else outcome.message}"
        raise HTTPException(status_code=502, detail=detail)
    return RegistrationResponse(
        state=outcome.state,
        message=outcome.message,
    )


@router.get("/status", response_model=StatusOverview)
async def get_status(services: ClientServices = Depends(get_services)):
    """Get the main screen state: binding progress, environment and last health."""
    binding, message = await services.reconciler.binding_status()
    current = await services.environment.get_current_environment()
    health = services.environment.cached_health

    return StatusOverview(
        binding=binding,
        message=message,
        user_id=await services.store.get(USER_ID_KEY),
        has_device_token=await services.store.get(DEVICE_TOKEN_KEY) is not None,
        environment=environment_info(services, current),
        health=HealthResponse.from_status(health) if health else None,
    )


@router.put("/user", response_model=RegistrationResponse)
async def set_user_id(
    request: UserIdUpdate,
    services: ClientServices = Depends(get_services),
):
    """Set the OGS user ID.

    The ID is saved even when registration fails or no device token exists yet.
    """
    try:
        outcome = await services.reconciler.on_user_id_set(request.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _to_response(outcome, "User ID saved but server registration failed")


@router.post("/device-token", response_model=RegistrationResponse)
async def receive_device_token(
    request: DeviceTokenUpdate,
    services: ClientServices = Depends(get_services),
):
    """Accept a device token issued by the OS push subsystem."""
    try:
        outcome = await services.reconciler.on_token_available(request.device_token)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _to_response(outcome, "Device token saved but server registration failed")


@router.post("/registration", response_model=RegistrationResponse)
async def reregister_device(services: ClientServices = Depends(get_services)):
    """Re-register the stored user ID and device token with the server."""
    outcome = await services.reconciler.reregister()
    return _to_response(outcome, "Registration failed")
