"""Environment and server health API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..schemas.control import (
    EnvironmentChangeResponse,
    EnvironmentInfo,
    EnvironmentResponse,
    EnvironmentUpdate,
)
from ..schemas.health import HealthResponse
from ..services.container import ClientServices, get_services
from ..services.environment import ServerEnvironment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["environment"])


def environment_info(services: ClientServices, environment: ServerEnvironment) -> EnvironmentInfo:
    return EnvironmentInfo(
        name=environment.value,
        display_name=environment.display_name,
        base_url=services.environment.url_for(environment),
    )


@router.get("/environment", response_model=EnvironmentResponse)
async def get_environment(services: ClientServices = Depends(get_services)):
    """Get the selected environment and the ones available."""
    current = await services.environment.get_current_environment()
    return EnvironmentResponse(
        current=environment_info(services, current),
        available=[environment_info(services, env) for env in ServerEnvironment],
    )


@router.put("/environment", response_model=EnvironmentChangeResponse)
async def set_environment(
    request: EnvironmentUpdate,
    services: ClientServices = Depends(get_services),
):
    """Switch environment and probe the new server.

    The device is not re-registered automatically; use POST /api/registration.
    """
    try:
        environment = await services.environment.set_environment(request.environment)
    except ValueError:
        names = ", ".join(env.value for env in ServerEnvironment)
        raise HTTPException(
            status_code=400,
            detail=f"Unknown environment '{request.environment}' (expected one of: {names})",
        )

    health = await services.environment.probe_health()
    return EnvironmentChangeResponse(
        current=environment_info(services, environment),
        health=HealthResponse.from_status(health),
        message=f"Now using: {environment.display_name}",
    )


@router.get("/health", response_model=HealthResponse)
async def check_server_health(services: ClientServices = Depends(get_services)):
    """Probe the selected notification server now."""
    status = await services.environment.probe_health()
    return HealthResponse.from_status(status)
