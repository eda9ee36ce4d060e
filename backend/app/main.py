import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import settings
from .database import SessionLocal
from .middleware.request_log import request_log_middleware
from .redis_client import redis_client
from .routers import bookings, configs, slots
from .services.slot_sweeper import slot_sweeper_loop
from .services.slots import InvalidConfig

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    sweeper_task = None
    if settings.sweeper_enabled:
        sweeper_task = asyncio.create_task(slot_sweeper_loop())

    yield

    if sweeper_task is not None:
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title="Car Cleaning Booking API", lifespan=lifespan)
app.middleware("http")(request_log_middleware)

app.include_router(slots.router)
app.include_router(bookings.router)
app.include_router(configs.router)


@app.exception_handler(InvalidConfig)
async def invalid_config_handler(request: Request, exc: InvalidConfig):
    logger.error(f"Scheduling configuration error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Scheduling configuration is invalid"},
    )


@app.get("/health")
def health():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database_ok = True
    except Exception:
        logger.exception("health: database check failed")
        database_ok = False
    finally:
        db.close()

    try:
        redis_ok = bool(redis_client.ping())
    except Exception as e:
        logger.warning(f"health: redis check failed: {e}")
        redis_ok = False

    return {"database": database_ok, "redis": redis_ok}
