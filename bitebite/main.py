import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bitebite.core.config import CORS_ORIGINS, DATABASE_URL, SEED_MENU
from bitebite.core.database import Base, SessionLocal, engine
from bitebite.core.logging_setup import configure_logging
from bitebite.core.startup_checks import apply_migrations, ensure_migrations_applied, validate_database_environment
from bitebite.middleware.observability import ObservabilityMiddleware
import bitebite.models  # models must be imported before create_all

from bitebite.routers.cart import router as cart_router
from bitebite.routers.internal_metrics import router as internal_metrics_router
from bitebite.routers.menu import router as menu_router
from bitebite.routers.orders import router as orders_router
from bitebite.services.seed import seed_menu

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Bite Bite Ordering API",
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


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "kind": "validation_error",
                "message": "Invalid request",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


def _seed_menu_if_enabled() -> None:
    if not SEED_MENU:
        logger.info("%s menu seed disabled", STARTUP_PREFIX)
        return
    db = SessionLocal()
    try:
        seed_menu(db)
    finally:
        db.close()


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        if DATABASE_URL.startswith("sqlite"):
            Base.metadata.create_all(bind=engine)
        else:
            apply_migrations(alembic_config_path=ALEMBIC_CONFIG_PATH)
            ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
        _seed_menu_if_enabled()
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


# Routers
app.include_router(menu_router)
app.include_router(orders_router)
app.include_router(cart_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
