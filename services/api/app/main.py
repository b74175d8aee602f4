"""FastAPI application: PEI Assistant API.

Form sessions, the saved-PEI list, the activity bank and support files.
"""

from __future__ import annotations

import os
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pei import __version__

from . import sessions
from .routers import activities, files, models, peis
from .routers import sessions as session_routes

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PEI Assistant API",
    version=__version__,
    description="AI-assisted Individualized Education Plans",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
ALLOWED_ORIGINS = os.environ.get(
    "CORS_ORIGINS",
    "http://localhost:3000",
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in ALLOWED_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(session_routes.router, prefix="/v1", tags=["sessions"])
app.include_router(peis.router, prefix="/v1", tags=["peis"])
app.include_router(activities.router, prefix="/v1", tags=["activities"])
app.include_router(files.router, prefix="/v1", tags=["files"])
app.include_router(models.router, prefix="/v1", tags=["models"])


@app.on_event("shutdown")
async def shutdown():
    await sessions.close_all()


# ---------------------------------------------------------------------------
# Health Check
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


@app.get("/")
async def root():
    return {"message": "PEI Assistant API", "docs": "/docs"}
