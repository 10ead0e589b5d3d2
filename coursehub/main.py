from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coursehub.api.admin import router as admin_router
from coursehub.api.auth import router as auth_router
from coursehub.api.courses import router as courses_router
from coursehub.api.enrollments import router as enrollments_router
from coursehub.api.health import router as health_router
from coursehub.api.metrics_endpoint import router as metrics_router
from coursehub.api.modules import router as modules_router
from coursehub.api.notifications import router as notifications_router
from coursehub.api.users import router as users_router
from coursehub.core.config import SETTINGS
from coursehub.core.errors import install_exception_handlers
from coursehub.core.logging import setup_logging
from coursehub.db.engine import lifespan_db
from coursehub.middleware.metrics import MetricsMiddleware
from coursehub.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_db():
        yield


app = FastAPI(
    title="coursehub",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

install_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first (outermost):
# RequestContext -> Metrics -> CORS -> route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(courses_router)
app.include_router(modules_router)
app.include_router(enrollments_router)
app.include_router(notifications_router)
app.include_router(users_router)
app.include_router(admin_router)

logger.info(
    "coursehub started  env=%s log_level=%s port=%d storage=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "postgres" if SETTINGS.database_url else "memory",
)
