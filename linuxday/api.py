"""
FastAPI app entry point aggregating per-domain routers under linuxday/routes.
Keep as `uvicorn linuxday.api:app`.
"""
from __future__ import annotations


from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import ensure_schema
from .logs import ensure_log_schema
from .services.config_svc import ensure_default_config


app = FastAPI(title="linuxday-api", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "https://linuxdaytorino.org",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    ensure_schema()
    ensure_log_schema()
    ensure_default_config()


# Include routers (split by entity)
from .routes import base as base_routes
from .routes import tropical as tropical_routes
from .routes import users as users_routes
from .routes import skills as skills_routes
from .routes import conferences as conferences_routes
from .routes import events as events_routes
from .routes import settings as settings_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(tropical_routes.router)
app.include_router(users_routes.router)
app.include_router(skills_routes.router)
app.include_router(conferences_routes.router)
app.include_router(events_routes.router)
app.include_router(settings_routes.router)
app.include_router(logs_routes.router)
