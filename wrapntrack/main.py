# wrapntrack/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from wrapntrack.core.config import get_settings
from wrapntrack.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from wrapntrack.models import user as _user_models  # noqa: F401
from wrapntrack.models import inventory as _inventory_models  # noqa: F401
from wrapntrack.models import cart as _cart_models  # noqa: F401
from wrapntrack.models import order as _order_models  # noqa: F401

# Routers
from wrapntrack.routers.inventory import router as inventory_router
from wrapntrack.routers.inventory import available_router
from wrapntrack.routers.cart import router as cart_router
from wrapntrack.routers.orders import router as orders_router
from wrapntrack.routers.otp import router as otp_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: verify DB connectivity and create tables.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(inventory_router, prefix=settings.API_PREFIX)
app.include_router(available_router, prefix=settings.API_PREFIX)
app.include_router(cart_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)
app.include_router(otp_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "wrapntrack-backend"}
