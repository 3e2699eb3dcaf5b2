"""
Custom exceptions and error handling for the course generation service
"""
from typing import Optional, Dict, Any


class CourseGenException(Exception):
    """Base exception for the course generation service"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ProviderError(CourseGenException):
    """Error talking to an LLM provider"""

    def __init__(self, message: str, provider: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, {"provider": provider, **(details or {})})
        self.provider = provider


class UnsupportedProviderError(ProviderError):
    """Provider name outside the supported set"""

    def __init__(self, provider: str):
        super().__init__(f"Unsupported LLM provider: {provider}", provider)


class ProviderNotConfiguredError(ProviderError):
    """No credentials configured for the requested provider"""

    def __init__(self, provider: str):
        super().__init__(f"{provider} API key not configured", provider)


class ProviderTransportError(ProviderError):
    """Provider call still failing after the retry budget was spent"""

    def __init__(self, provider: str, attempts: int, cause: Optional[BaseException] = None):
        reason = str(cause) if cause else "unknown error"
        super().__init__(
            f"{provider} request failed after {attempts} attempt(s): {reason}",
            provider,
            {"attempts": attempts, "error_type": type(cause).__name__ if cause else None}
        )
        self.attempts = attempts


class ParseError(CourseGenException):
    """Model output could not be decoded into a curriculum"""
    pass


class EnrichmentError(CourseGenException):
    """Error while attaching resources to a curriculum"""
    pass


class ResourceFetchError(CourseGenException):
    """Error fetching external resources"""
    pass

