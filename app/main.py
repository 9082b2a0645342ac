"""
Entry point de la API
"""

import logging
import re
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import get_settings
from app.database import Database, create_indexes
from app.services.classification_service import get_classification_policy

from app.controllers.leaderboard_controller import router as leaderboard_router
from app.controllers.competitors_controller import router as competitors_router
from app.controllers.competitions_controller import router as competitions_router
from app.controllers.scores_controller import router as scores_router
from app.controllers.health_controller import router as health_router

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Parse CORS origins
CORS_ORIGINS = [origin.strip() for origin in settings.cors_origins.split(",")]
CORS_ORIGIN_REGEX = re.compile(settings.cors_origin_regex) if settings.cors_origin_regex else None


def is_allowed_origin(origin: str) -> bool:
    """Check if origin is allowed by explicit list or regex pattern."""
    if not origin:
        return False
    if origin in CORS_ORIGINS:
        return True
    if CORS_ORIGIN_REGEX and CORS_ORIGIN_REGEX.match(origin):
        return True
    return False


class CORSMiddleware(BaseHTTPMiddleware):
    """
    Custom CORS middleware that handles OPTIONS preflight BEFORE routing.
    """

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin", "")

        # Handle preflight OPTIONS request IMMEDIATELY
        if request.method == "OPTIONS":
            if is_allowed_origin(origin):
                return Response(
                    status_code=200,
                    headers={
                        "Access-Control-Allow-Origin": origin,
                        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
                        "Access-Control-Allow-Headers": "Content-Type, Accept, Origin, X-Requested-With",
                        "Access-Control-Allow-Credentials": "true",
                        "Access-Control-Max-Age": "86400",  # Cache preflight for 24 hours
                    }
                )
            else:
                return Response(status_code=403, content="Origin not allowed")

        response = await call_next(request)

        if is_allowed_origin(origin):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Si la tabla de clasificaciones está mal, no arrancamos
    get_classification_policy()
    await Database.connect()
    await create_indexes()
    yield
    await Database.disconnect()

# Creo la app
app = FastAPI(
    title="X-Ring Classic API",
    description="Clasificaciones y leaderboards de tiro a partir de tarjetas aprobadas",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(CORSMiddleware)

# Agrego todos los routers de los controllers al app
app.include_router(health_router)
app.include_router(leaderboard_router)
app.include_router(competitors_router)
app.include_router(competitions_router)
app.include_router(scores_router)


@app.get("/")
async def root():
    # Endpoint raíz, sirve para verificar que la API está levantada
    return {
        "name": "X-Ring Classic API",
        "version": "1.0.0",
        "docs": "/docs"  # Link a la documentación interactiva de Swagger
    }
