"""API middleware."""

from branchstock.api.middleware.error_handler import ErrorHandlerMiddleware
from branchstock.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
