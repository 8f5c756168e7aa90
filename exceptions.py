"""
Custom exceptions for the Route Planner.
"""
from typing import Optional


class RoutePlannerError(Exception):
    """Base exception for the application."""
    pass

class ConfigurationError(RoutePlannerError):
    """Raised when configuration is invalid or missing."""
    pass

class DataValidationError(RoutePlannerError):
    """Raised when input data validation fails."""
    pass

class OptimizationError(RoutePlannerError):
    """Raised when route optimization fails."""
    pass

class TransportError(OptimizationError):
    """Raised when the optimization request never got a response."""
    pass

class ServiceError(OptimizationError):
    """Raised when the optimization service answers with an error status or an unreadable body."""
    def __init__(self, status_code: int, body: Optional[str] = None, message: str = ""):
        self.status_code = status_code
        self.body = body
        self.message = message or f"Optimization service returned HTTP {status_code}"
        super().__init__(self.message)
