import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from transport_desk.config import settings
from transport_desk.database import check_db_connection
from transport_desk.utils.exceptions import AppException
from transport_desk.middleware.error_handler import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    generic_exception_handler,
)

from transport_desk.api.v1 import auth
from transport_desk.api.v1 import drivers
from transport_desk.api.v1 import vehicles
from transport_desk.api.v1 import vips
from transport_desk.api.v1 import assignments
from transport_desk.api.v1 import checkins
from transport_desk.api.v1 import vehicle_observations
from transport_desk.api.v1 import tracking
from transport_desk.api.v1 import users

logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=VERSION,
        description="Driver, vehicle and VIP coordination API for event transport",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ─── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ─── Exception Handlers ───────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ─── Routers ──────────────────────────────────────────────────────────────
    PREFIX = "/api/v1"
    app.include_router(auth.router,                 prefix=PREFIX, tags=["Auth"])
    app.include_router(users.router,                prefix=PREFIX, tags=["Users"])
    app.include_router(drivers.router,              prefix=PREFIX, tags=["Drivers"])
    app.include_router(vehicles.router,             prefix=PREFIX, tags=["Vehicles"])
    app.include_router(vips.router,                 prefix=PREFIX, tags=["VIPs"])
    app.include_router(assignments.router,          prefix=PREFIX, tags=["Assignments"])
    app.include_router(checkins.router,             prefix=PREFIX, tags=["Check-ins"])
    app.include_router(vehicle_observations.router, prefix=PREFIX, tags=["Vehicle Observations"])
    app.include_router(tracking.router,             prefix=PREFIX, tags=["Tracking"])

    # ─── Startup ──────────────────────────────────────────────────────────────
    @app.on_event("startup")
    def on_startup():
        ok = check_db_connection()
        logger.info("DB connected" if ok else "DB connection FAILED")

    # ─── Health ───────────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": VERSION}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("transport_desk.main:app", host=settings.APP_HOST, port=settings.APP_PORT,
                reload=settings.is_development)
