import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis.exceptions import RedisError

from .database import engine
from .models.generated import Base
from .redis_client import get_redis
from .routers import bookings, categories, conflicts, seasonal_schedules, service_points, slots

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database tables ready")
    yield


app = FastAPI(title="Service Point Booking API", lifespan=lifespan)

app.include_router(service_points.router)
app.include_router(seasonal_schedules.router)
app.include_router(categories.router)
app.include_router(slots.router)
app.include_router(conflicts.router)
app.include_router(bookings.router)


@app.get("/health")
def health():
    redis = get_redis()
    if redis is None:
        return {"redis": None}
    try:
        return {"redis": redis.ping()}
    except RedisError:
        logger.exception("Redis ping failed")
        return {"redis": False}
