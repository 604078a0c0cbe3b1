"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires all services, registers routers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from backend.controllers.booking_controller import router as booking_router
from backend.controllers.exception_handlers import register_exception_handlers
from backend.controllers.seat_controller import router as seat_router
from backend.controllers.user_controller import router as user_router
from backend.repository.data_repository import DataRepository
from backend.services.auth_service import AuthService
from backend.services.availability_service import AvailabilityService
from backend.services.booking_service import BookingService
from backend.services.cancellation_service import CancellationService
from backend.services.role_service import RoleService
from backend.services.seat_service import SeatRegistryService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every service shares one repository and is exposed through app.state,
    so controllers resolve them per request instead of importing globals.
    """
    settings = settings or get_settings()

    # --- Repository (SQLite connection factory) ---
    repository = DataRepository(settings)

    # --- Services ---
    availability_service = AvailabilityService(repository=repository, settings=settings)
    booking_service = BookingService(
        repository=repository,
        availability_service=availability_service,
        settings=settings,
    )
    cancellation_service = CancellationService(repository=repository, settings=settings)
    role_service = RoleService(repository=repository, settings=settings)
    seat_service = SeatRegistryService(repository=repository, settings=settings)
    auth_service = AuthService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, settings)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(seat_router)
    app.include_router(booking_router)
    app.include_router(user_router)
    register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.availability_service = availability_service
    app.state.booking_service = booking_service
    app.state.cancellation_service = cancellation_service
    app.state.role_service = role_service
    app.state.seat_service = seat_service
    app.state.auth_service = auth_service

    return app


def _startup(app: FastAPI, settings: Settings) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Schema must exist before seeding; admin bootstrap runs last.
    """
    repository: DataRepository = app.state.repository
    role_service: RoleService = app.state.role_service

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_floor_plan:
        logger.info("Startup: seeding floor plan (skipped if Seats table not empty)")
        repository.seed_floor_plan_if_empty()

    for user_id in settings.bootstrap_admin_user_ids:
        role_service.bootstrap_admin(user_id)

    logger.info("Startup complete; accepting bookings")


# Module-level app object for uvicorn
app = create_app()
