import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from milk_ops.core.config import AUTO_CREATE_TABLES, CORS_ORIGINS, ENV
from milk_ops.core.database import Base, engine
from milk_ops.core.logging_setup import configure_logging
from milk_ops.core.startup_checks import ensure_migrations_applied, validate_database_environment
from milk_ops.middleware.observability import ObservabilityMiddleware
import milk_ops.models  # garante que os models são importados antes do create_all

from milk_ops.routers.customers import router as customers_router
from milk_ops.routers.internal_metrics import router as internal_metrics_router
from milk_ops.routers.subscriptions import router as subscriptions_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        if AUTO_CREATE_TABLES:
            # Cria tabelas (dev). Em produção, use migrations.
            Base.metadata.create_all(bind=engine)
            logger.info("%s tables ensured env=%s", STARTUP_PREFIX, ENV)
        else:
            ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Milk Ops API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)

# Routers
app.include_router(customers_router)
app.include_router(subscriptions_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
