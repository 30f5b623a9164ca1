"""
Order Service
Order creation against inventory, order status transitions and the order audit trail
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import subprocess

from orderflow.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from orderflow.core_settings import get_settings
from orderflow.api.routes import router as orders_router
from orderflow.application.errors import OrderServiceError
from orderflow.infrastructure.db import engine, init_models

settings = get_settings()

SERVICE_DESCRIPTION = "Order lifecycle microservice"
PROJECT_ROOT = Path(__file__).resolve().parent.parent

setup_logging(
    service_name=settings.SERVICE_NAME,
    level=settings.LOG_LEVEL,
    version=settings.SERVICE_VERSION,
    environment=settings.ENVIRONMENT,
)

logger = get_logger(__name__)

def run_migrations(config_path: Optional[Path] = None) -> bool:
    config_path = config_path or Path(settings.ALEMBIC_CONFIG or PROJECT_ROOT / "alembic.ini")
    if not config_path.is_file():
        logger.error(f"Alembic config not found at {config_path}; set ALEMBIC_CONFIG to run migrations")
        return False

    logger.info("Running database migrations")
    result = subprocess.run(
        ["alembic", "-c", str(config_path), "upgrade", "head"],
        cwd=config_path.parent,
        capture_output=True,
        text=True,
        check=False
    )
    if result.returncode != 0:
        logger.error(f"Database migrations failed: {result.stderr}")
        return False
    logger.info("Database migrations completed")
    return True

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.SERVICE_NAME} version {settings.SERVICE_VERSION}")

    if settings.RUN_MIGRATIONS:
        try:
            run_migrations()
        except OSError as e:
            logger.error(f"Migration error: {e}")

    # Creates any table the migrations did not
    init_models()
    logger.info(f"{settings.SERVICE_NAME} started successfully")

    yield

    logger.info(f"Shutting down {settings.SERVICE_NAME}")

app = FastAPI(
    title=settings.SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

@app.exception_handler(OrderServiceError)
async def order_error_handler(request: Request, exc: OrderServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

health_service = ServiceHealth(settings.SERVICE_NAME, settings.SERVICE_VERSION, engine, settings.REDIS_URL)
app.include_router(health_service.create_health_router())

app.include_router(orders_router)

@app.get("/")
async def root():
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "status": "running",
        "docs": "/api/docs"
    }
