import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import models so they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS, CLINIC_NAME
from .database import Base, engine
from .domain.appointments.exceptions import AllocationConflict, InvalidBookingRequest
from .domain.appointments.router import router as appointments_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title=f"{CLINIC_NAME} Appointments API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(InvalidBookingRequest)
async def invalid_booking_handler(request: Request, exc: InvalidBookingRequest):
    logger.warning(f"Booking rejected for {request.url.path}: {exc.errors}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation error", "errors": exc.errors},
    )


@app.exception_handler(AllocationConflict)
async def allocation_conflict_handler(request: Request, exc: AllocationConflict):
    logger.error(f"Booking failed for {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Failed to create appointment. Please try again.",
        },
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# Log CORS configuration for debugging
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
app.include_router(appointments_router)


@app.get("/")
def root():
    return {"message": f"{CLINIC_NAME} Appointments API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
