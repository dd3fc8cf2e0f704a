from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from core.config_loader import settings
from core.database import init_db
from core.logging_config import setup_logging

from employee.router import employee_router
from leave.router import leave_router
import models_bootstrap

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

openapi_tags = [
    {
        "name": "Employees",
        "description": "Employee directory, availability and leave balance",
    },
    {
        "name": "Leave Records",
        "description": "Leave requests and their lifecycle",
    },
    {
        "name": "Health Checks",
        "description": "Application health checks",
    }
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title=settings.PROJECT_NAME, openapi_tags=openapi_tags, lifespan=lifespan)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(employee_router, prefix="/api")
app.include_router(leave_router, prefix="/api")


@app.get("/health", tags=['Health Checks'])
def read_root():
    return {"health": "true"}
