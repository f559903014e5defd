from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agrolink import __version__
from agrolink.config import settings
from agrolink.middleware.exceptions import register_exception_handlers
from agrolink.middleware.security import SecurityHeadersMiddleware
from agrolink.routers import health, schedules, wizard


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open one pooled HTTP client to the AgroLink backend for the app's lifetime."""
    async with httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.api_timeout_seconds,
    ) as http_client:
        app.state.http_client = http_client
        yield


app = FastAPI(
    title="AgroLink",
    description="Harvest schedule wizard and tracking front-end service",
    version=__version__,
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(wizard.router, prefix="/api/wizard", tags=["wizard"])
app.include_router(schedules.router, prefix="/api/schedules", tags=["schedules"])
