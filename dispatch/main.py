import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401 - registers tables on Base
from .config import ALLOWED_ORIGINS, SEED_DEFAULT_TIME_SLOTS, SWEEPER_ENABLED
from .database import Base, SessionLocal, engine
from .domain.preferences.router import router as preferences_router
from .domain.scheduling.errors import ErrorKind
from .domain.scheduling.router import router as jobs_router
from .domain.time_slots.router import router as time_slots_router
from .domain.time_slots.service import TimeSlotService
from .workers.completion_worker import run_completion_worker

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def seed_time_slots() -> None:
    db = SessionLocal()
    try:
        created = TimeSlotService(db).seed_default_time_slots()
        if created:
            logger.info(f"🌱 Seeded {created} default time slots")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Another worker process may have created them first
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    if SEED_DEFAULT_TIME_SLOTS:
        seed_time_slots()

    sweeper = None
    if SWEEPER_ENABLED:
        sweeper = asyncio.create_task(run_completion_worker())
    else:
        logger.info("Auto-completion sweeper disabled")

    yield

    logger.info("Application shutting down...")
    if sweeper:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            logger.info("Auto-completion sweeper stopped")


app = FastAPI(title="Dispatch API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "code": ErrorKind.VALIDATION_ERROR.value},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

app.include_router(jobs_router)
app.include_router(time_slots_router)
app.include_router(preferences_router)


@app.get("/")
def root():
    return {"message": "Dispatch API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
