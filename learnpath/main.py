"""
Main FastAPI application with middleware and monitoring
"""
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
import time
import uuid
from contextlib import asynccontextmanager

from learnpath.config import settings, get_settings
from learnpath.core.logging import get_logger, setup_logging, request_id_var
from learnpath.core.exceptions import CourseGenException
from learnpath.core.llm import SUPPORTED_PROVIDERS, provider_api_key
from learnpath.routes import course_routes, resource_routes
from learnpath.schemas import HealthResponse

logger = get_logger(__name__)

SERVICE_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    setup_logging()
    logger.info("Learning Path service starting up",
                environment=settings.environment.value,
                debug=settings.debug,
                course_provider=settings.course_llm_provider,
                course_model=settings.course_llm_model)

    yield

    logger.info("Learning Path service shutting down")


app = FastAPI(
    title="Learning Path Service",
    version=SERVICE_VERSION,
    description="AI course generation with resource enrichment and template fallback",
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


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests"""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request_id_var.set(request_id)

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing"""
    start_time = time.time()

    logger.info("request_received",
                method=request.method,
                path=request.url.path,
                client=request.client.host if request.client else None)

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error("request_failed",
                     method=request.method,
                     path=request.url.path,
                     error=str(e),
                     duration_seconds=time.time() - start_time)
        raise

    duration = time.time() - start_time
    logger.info("request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_seconds=duration)

    response.headers["X-Process-Time"] = str(duration)
    return response


@app.exception_handler(CourseGenException)
async def handle_course_gen_exception(request: Request, exc: CourseGenException):
    """Handle custom exceptions"""
    logger.error("Application error",
                 error=exc.message,
                 details=exc.details,
                 path=request.url.path)

    return JSONResponse(
        status_code=400,
        content={
            "error": exc.message,
            "details": exc.details,
            "request_id": request_id_var.get()
        }
    )


@app.exception_handler(Exception)
async def handle_generic_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.error("Unexpected error",
                 error=str(exc),
                 error_type=type(exc).__name__,
                 path=request.url.path)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc) if settings.debug else "An unexpected error occurred",
            "request_id": request_id_var.get()
        }
    )


# Include routers
app.include_router(course_routes.router)
app.include_router(resource_routes.router)


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check with credential presence per LLM provider"""
    current = get_settings()
    return HealthResponse(
        status="healthy",
        service="learnpath",
        version=SERVICE_VERSION,
        environment=current.environment.value,
        providers={name: bool(provider_api_key(name, current)) for name in SUPPORTED_PROVIDERS}
    )


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Learning Path Service",
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "learnpath.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_config=None
    )
