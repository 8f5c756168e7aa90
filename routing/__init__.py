"""
Client and data contracts for the openrouteservice optimization API.
"""
from .ors import ORS_BASE_URL, optimize_route
from .types import Job, Vehicle, OptimizationRequest, Step, Route, OptimizationResponse

__all__ = [
    'ORS_BASE_URL',
    'optimize_route',
    'Job',
    'Vehicle',
    'OptimizationRequest',
    'Step',
    'Route',
    'OptimizationResponse'
]
