from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

import config
from database import engine, Base
from exceptions import AskPulseError, RateLimitExceeded, ValidationError
from logging_config import configure_logging
from rate_limit import RateLimiter, rate_limit_headers
from routes import sessions, questions, votes, organizer, ws
from utils import get_utc_now

logger = configure_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.state.rate_limiter.start()
    logger.info("AskPulse API started")
    yield
    await app.state.rate_limiter.stop()
    await engine.dispose()

app = FastAPI(title="AskPulse API", lifespan=lifespan)
app.state.rate_limiter = RateLimiter(purge_interval=config.RATE_LIMIT_PURGE_SECONDS)

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://localhost:4173",
]
origins.extend(config.CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logging.getLogger("askpulse.access").info(
        "%s %s -> %d", request.method, request.url.path, response.status_code
    )
    return response

# Error responses

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message, "errors": exc.errors},
    )

@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message, "retry_after": exc.result.retry_after},
        headers=rate_limit_headers(exc.result),
    )

@app.exception_handler(AskPulseError)
async def askpulse_error_handler(request: Request, exc: AskPulseError):
    logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message},
    )

# Include Routers
app.include_router(sessions.router)
app.include_router(questions.router)
app.include_router(votes.router)
app.include_router(organizer.router)
app.include_router(ws.router)

@app.get("/")
async def root():
    return {"status": "ok", "message": "AskPulse API is running"}

@app.get("/health")
async def health():
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.exception("Database health check failed")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": {"success": False, "message": str(exc)}},
        )
    return {
        "status": "ok",
        "database": {"success": True},
        "timestamp": get_utc_now().isoformat() + "Z",
    }
