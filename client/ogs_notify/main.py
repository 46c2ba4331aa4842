"""Local control API for the OGS notification client."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import async_session, close_db, init_db
from .error_handlers import setup_error_handlers
from .models.local_state import DEVICE_TOKEN_KEY, USER_ID_KEY
from .routers import diagnostics_router, environment_router, links_router, registration_router
from .services.container import ClientServices, build_services
from .store import SqlKeyValueStore

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def _log_stored_state(services: ClientServices):
    user_id = await services.store.get(USER_ID_KEY)
    token = await services.store.get(DEVICE_TOKEN_KEY)
    logger.info(f"Stored User ID: {user_id}" if user_id else "No User ID stored yet")
    logger.info(f"Stored Device Token: {token[:16]}..." if token else "No Device Token stored yet")


def create_app(services: Optional[ClientServices] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    When services are passed in (tests, embedding), the database is not touched.
    """
    owns_database = services is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - startup and shutdown."""
        logger.info("Starting OGS notification client")

        if owns_database:
            await init_db()
            logger.info("Database initialized")
            app.state.services = build_services(SqlKeyValueStore(async_session))
        current = app.state.services

        await _log_stored_state(current)

        # Re-register the stored binding once per process start
        outcome = await current.reconciler.reconcile()
        logger.info(f"Startup reconciliation: {outcome.state.value} - {outcome.message}")

        current.health_refresher.start()

        yield

        current.health_refresher.stop()
        if owns_database:
            await close_db()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="OGS Notifications",
        description="Device registration and diagnostics client for the OGS notification service",
        version="1.0.0",
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_error_handlers(app)

    app.include_router(registration_router)
    app.include_router(environment_router)
    app.include_router(diagnostics_router)
    app.include_router(links_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "ogs-notify"}

    return app


# Create the application instance
app = create_app()


def run():
    """Console entry point."""
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=settings.web_port)


if __name__ == "__main__":
    run()
