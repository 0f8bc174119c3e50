# FILE: quiz_backend/app.py
"""
FastAPI application entry point for the quiz attempt service
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quiz_backend import __version__
from quiz_backend.config import get_settings
from quiz_backend.errors import (
    AlreadyTerminal, Banned, Forbidden, InvalidAnswer, InvalidQuestion, InvalidState,
    NotFound, QuizError, StorageError, Unauthorized, WindowClosed
)
from quiz_backend.middleware.correlation import CorrelationIdMiddleware
from quiz_backend.routes import attempts, health, metrics, quizzes
from quiz_backend.services.container import get_services
from quiz_backend.services.deadline import DeadlineSweeper
from quiz_backend.services.telemetry import init_telemetry

logger = logging.getLogger(__name__)
settings = get_settings()

STATUS_CODES = {
    NotFound: 404,
    Unauthorized: 401,
    Forbidden: 403,
    WindowClosed: 403,
    Banned: 403,
    InvalidState: 409,
    AlreadyTerminal: 409,
    InvalidAnswer: 422,
    InvalidQuestion: 422,
}


def configure_logging():
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown"""
    configure_logging()
    logger.info(f"Starting quiz attempt service v{__version__}")

    init_telemetry()
    services = get_services()

    sweeper = None
    if settings.deadline_sweep_enabled:
        sweeper = DeadlineSweeper(services.enforcer, settings.deadline_sweep_interval_seconds)
        sweeper.start()
    app.state.sweeper = sweeper

    yield

    # Shutdown
    if sweeper is not None:
        await sweeper.stop()
    logger.info("Shutting down quiz attempt service")


app = FastAPI(
    title="Quiz Attempt API",
    description="Quiz attempt lifecycle: enrollment, auto-save, deadlines, grading",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(CorrelationIdMiddleware)


# Exception handlers
@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
    status_code = STATUS_CODES.get(type(exc), 400)
    logger.warning(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}", exc_info=exc.cause)
    return JSONResponse(
        status_code=503,
        content={"error": "StorageError", "detail": "Storage unavailable, retry the request"}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)}
    )


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(metrics.router, prefix="/metrics", tags=["metrics"])
app.include_router(quizzes.router, prefix="/quizzes", tags=["quizzes"])
app.include_router(attempts.router, prefix="/quiz-attempts", tags=["quiz-attempts"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Quiz Attempt API",
        "version": __version__,
        "status": "active"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "quiz_backend.app:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.environment == "development"
    )
