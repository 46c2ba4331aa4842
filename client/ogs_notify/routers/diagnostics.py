"""Diagnostics API endpoints."""
from fastapi import APIRouter, Depends

from ..schemas.diagnostics import UserDiagnostics
from ..services.container import ClientServices, get_services

router = APIRouter(prefix="/api/diagnostics", tags=["diagnostics"])


@router.get("", response_model=UserDiagnostics)
async def get_diagnostics(services: ClientServices = Depends(get_services)):
    """Load a fresh diagnostics snapshot for the stored user ID."""
    return await services.diagnostics.load_for_current_user()


@router.post("/check", response_model=UserDiagnostics)
async def trigger_manual_check(services: ClientServices = Depends(get_services)):
    """Ask the server to check this user's games now and return the reloaded snapshot."""
    user_id = await services.diagnostics.current_user_id()
    return await services.diagnostics.trigger_manual_check(user_id)
