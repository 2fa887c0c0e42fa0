import os
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
from dotenv import load_dotenv

from app.core import setup_logging, ContestHubError, InternalError
from app.database import Database
from app.routes.auth.user_routes import router as user_router
from app.routes.contest.contest_routes import router as contest_router
from app.routes.contest.submission_routes import router as submission_router
from app.routes.contest.stats_routes import router as stats_router
from app.routes.contest.leaderboard_routes import router as leaderboard_router
from app.routes.payment.payment_routes import router as payment_router
from app.routes.contact.contact_routes import router as contact_router
from app.utils.response import error_response, validation_error_response

# Load environment variables
load_dotenv()

# Get environment variables
APP_NAME = os.getenv("APP_NAME", "ContestHub")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
CLIENT_DOMAIN = os.getenv("CLIENT_DOMAIN", "http://localhost:5173")

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for the application"""
    # Startup
    await Database.connect_db()
    yield
    # Shutdown
    await Database.close_db()


app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description="ContestHub API: contests, entry payments, submissions and winners",
    lifespan=lifespan
)

# CORS middleware
# In development, allow all origins for easier testing
DEBUG = os.getenv("DEBUG", "True").lower() == "true"

cors_origins = [
    CLIENT_DOMAIN,
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if not DEBUG else ["*"],
    allow_credentials=not DEBUG,  # Can't use credentials with wildcard origin
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ContestHubError)
async def contest_hub_error_handler(request: Request, exc: ContestHubError):
    if exc.status_code >= 500:
        logger.error(f"[ERROR] {request.method} {request.url.path}: {exc.message}")
    return error_response(message=exc.message, status_code=exc.status_code, extra=exc.extra)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return validation_error_response(errors=jsonable_encoder(exc.errors()))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"[ERROR] Unhandled error on {request.method} {request.url.path}")
    error = InternalError()
    return error_response(message=error.message, status_code=error.status_code)


# Routes are mounted at the root; paths are part of the public client contract
app.include_router(user_router)
app.include_router(contest_router)
app.include_router(submission_router)
app.include_router(payment_router)
app.include_router(stats_router)
app.include_router(leaderboard_router)
app.include_router(contact_router)


@app.get("/")
async def read_root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {APP_NAME} API",
        "version": APP_VERSION,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}
