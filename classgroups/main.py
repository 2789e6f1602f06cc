# classgroups/main.py
"""
Application entrypoint. Includes routers and error mapping.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from classgroups.api.routers import classes, groups, members
from classgroups.config.settings import settings
from classgroups.infrastructure import models  # noqa: F401  registers tables on Base
from classgroups.infrastructure.db.session import create_tables
from classgroups.services.errors import ClassGroupsError

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting classgroups (%s)", settings.ENV)
    await create_tables()
    yield
    logger.info("Shutting down classgroups")


app = FastAPI(title="Class Groups Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ClassGroupsError)
async def class_groups_error_handler(request: Request, exc: ClassGroupsError):
    body = {"error": exc.message}
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


# include routers
app.include_router(classes.router, prefix="/api/v1/classes", tags=["classes"])
app.include_router(members.router, prefix="/api/v1/classes", tags=["members"])
app.include_router(groups.router, prefix="/api/v1/classes", tags=["groups"])


@app.get("/")
async def index():
    """Health / basic info endpoint."""
    return {"status": "ok", "service": "classgroups", "env": settings.ENV}
