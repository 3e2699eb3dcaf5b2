"""
Structured logging and monitoring for the course generation service
"""
import sys
import time
from functools import wraps
from typing import Optional, Callable
from contextvars import ContextVar
import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder
from prometheus_client import Counter, Histogram
import logging

from learnpath.config import settings

# Context variables for request tracking
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
generation_id_var: ContextVar[Optional[str]] = ContextVar("generation_id", default=None)

# Prometheus metrics
llm_requests = Counter("llm_requests_total", "Total LLM requests", ["provider", "model", "status"])
llm_duration = Histogram("llm_duration_seconds", "LLM request duration", ["provider", "model"])
llm_attempts = Counter("llm_attempts_total", "LLM call attempts including retries", ["provider"])
course_generations = Counter("course_generations_total", "Generated curricula", ["source"])
course_generation_duration = Histogram("course_generation_duration_seconds", "End-to-end course generation duration")
resource_lookups = Counter("resource_lookups_total", "External resource lookups", ["adapter", "outcome"])
enrichment_failures = Counter("enrichment_failures_total", "Enrichment runs that returned no resources")


def add_request_context(logger, method_name, event_dict):
    """Add request context to log events"""
    request_id = request_id_var.get()
    generation_id = generation_id_var.get()

    if request_id:
        event_dict["request_id"] = request_id
    if generation_id:
        event_dict["generation_id"] = generation_id

    # Add service metadata
    event_dict["service"] = "learnpath"
    event_dict["environment"] = settings.environment.value

    return event_dict


def setup_logging():
    """Configure structured logging for the application"""

    # Configure Python logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper())
    )

    # Configure structlog
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_request_context,
        CallsiteParameterAdder(
            parameters=[CallsiteParameter.FILENAME, CallsiteParameter.LINENO]
        ),
        structlog.processors.UnicodeDecoder(),
    ]

    # Use JSON in production
    if settings.log_format == "json" or settings.is_production:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """Get a configured logger instance"""
    return structlog.get_logger(name)


def log_execution_time(func: Callable) -> Callable:
    """Decorator to log and measure coroutine execution time"""
    logger = get_logger(func.__module__)

    @wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.time()
        function_name = func.__name__

        logger.info("function_start", function=function_name)

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            logger.error("function_error",
                         function=function_name,
                         duration_seconds=time.time() - start_time,
                         error=str(e),
                         error_type=type(e).__name__)
            raise

        logger.info("function_success",
                    function=function_name,
                    duration_seconds=time.time() - start_time)
        return result

    return wrapper


class MetricsLogger:
    """Helper class for logging with metrics"""

    def __init__(self, logger: structlog.BoundLogger):
        self.logger = logger

    def log_llm_attempt(self, provider: str, model: str, attempt: int, prompt_length: int):
        """Log a single LLM attempt"""
        llm_attempts.labels(provider=provider).inc()
        self.logger.info("llm_request",
                         provider=provider,
                         model=model,
                         attempt=attempt,
                         prompt_length=prompt_length)

    def log_llm_complete(self, provider: str, model: str, duration: float,
                         attempts: int, success: bool = True):
        """Log LLM completion after the retry loop"""
        status = "success" if success else "error"
        llm_requests.labels(provider=provider, model=model, status=status).inc()
        llm_duration.labels(provider=provider, model=model).observe(duration)

        if success:
            self.logger.info("llm_complete",
                             provider=provider,
                             model=model,
                             attempts=attempts,
                             duration_seconds=duration)
        else:
            self.logger.error("llm_failed",
                              provider=provider,
                              model=model,
                              attempts=attempts,
                              duration_seconds=duration)

    def log_resource_lookup(self, adapter: str, query: str, count: int, fallback: bool = False):
        """Log an enrichment adapter lookup"""
        outcome = "fallback" if fallback else "live"
        resource_lookups.labels(adapter=adapter, outcome=outcome).inc()
        self.logger.info("resource_lookup",
                         adapter=adapter,
                         query=query,
                         outcome=outcome,
                         count=count)

    def log_generation_complete(self, source: str, duration: float, resource_total: int):
        """Log a finished course generation"""
        course_generations.labels(source=source).inc()
        course_generation_duration.observe(duration)
        self.logger.info("course_generation_complete",
                         source=source,
                         duration_seconds=duration,
                         resources=resource_total)

    def log_enrichment_failure(self, topic: str, error: str):
        """Log enrichment that degraded to an empty resource list"""
        enrichment_failures.inc()
        self.logger.error("enrichment_failed",
                          topic=topic,
                          error=error)


# Initialize logging on module import
setup_logging()

# Create default logger
logger = get_logger(__name__)
metrics_logger = MetricsLogger(logger)
