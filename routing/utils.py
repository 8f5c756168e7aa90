"""
Helpers for building, encoding and checking optimization requests.
"""
import json
import logging
from typing import Any, Dict, List, Optional
from exceptions import DataValidationError
from .types import Job, Vehicle, Location, TimeWindow, OptimizationRequest, OptimizationResponse

logger = logging.getLogger(__name__)


def make_job(id: int, location: Location, description: Optional[str] = None,
             setup: Optional[int] = None, service: Optional[int] = None,
             skills: Optional[List[int]] = None,
             time_windows: Optional[List[TimeWindow]] = None) -> Job:
    """Build a job, leaving out every optional field passed as None."""
    job: Job = {'id': id, 'location': tuple(location)}
    optional = {
        'description': description,
        'setup': setup,
        'service': service,
        'skills': list(skills) if skills is not None else None,
        'time_windows': [tuple(w) for w in time_windows] if time_windows is not None else None,
    }
    job.update({k: v for k, v in optional.items() if v is not None})
    return job


def make_vehicle(id: int, profile: str, start: Location, end: Optional[Location] = None,
                 capacity: Optional[List[int]] = None, skills: Optional[List[int]] = None,
                 time_window: Optional[TimeWindow] = None) -> Vehicle:
    """Build a vehicle. Without an explicit end it returns to its start."""
    vehicle: Vehicle = {
        'id': id,
        'profile': profile,
        'start': tuple(start),
        'end': tuple(end if end is not None else start),
    }
    optional = {
        'capacity': list(capacity) if capacity is not None else None,
        'skills': list(skills) if skills is not None else None,
        'time_window': tuple(time_window) if time_window is not None else None,
    }
    vehicle.update({k: v for k, v in optional.items() if v is not None})
    return vehicle


def make_request(vehicles: List[Vehicle], jobs: List[Job]) -> OptimizationRequest:
    return {'vehicles': list(vehicles), 'jobs': list(jobs)}


def dumps_request(request: OptimizationRequest) -> str:
    """Serialize a request to the JSON body sent on the wire."""
    return json.dumps(request)


def loads_request(text: str) -> OptimizationRequest:
    """
    Parse a JSON request body.

    JSON has no tuples, so locations and windows are turned back into
    tuples; everything else is left as decoded.
    """
    data = json.loads(text)
    for job in data.get('jobs', []):
        job['location'] = tuple(job['location'])
        if 'time_windows' in job:
            job['time_windows'] = [tuple(w) for w in job['time_windows']]
    for vehicle in data.get('vehicles', []):
        for key in ('start', 'end', 'time_window'):
            if key in vehicle:
                vehicle[key] = tuple(vehicle[key])
    return data


def validate_request(request: OptimizationRequest) -> None:
    """Check id uniqueness and time window ordering."""
    errors = []

    job_ids = [job['id'] for job in request['jobs']]
    vehicle_ids = [vehicle['id'] for vehicle in request['vehicles']]
    duplicates = _duplicates(job_ids)
    if duplicates:
        errors.append(f"Duplicate job ids: {duplicates}")
    duplicates = _duplicates(vehicle_ids)
    if duplicates:
        errors.append(f"Duplicate vehicle ids: {duplicates}")

    for job in request['jobs']:
        for start, end in job.get('time_windows', []):
            if start > end:
                errors.append(f"Job {job['id']} has time window ending before it starts: {start}-{end}")
    for vehicle in request['vehicles']:
        if 'time_window' in vehicle:
            start, end = vehicle['time_window']
            if start > end:
                errors.append(f"Vehicle {vehicle['id']} has time window ending before it starts: {start}-{end}")

    if errors:
        logger.warning(f"Request validation failed: {errors}")
        raise DataValidationError("; ".join(errors))


def validate_response(request: OptimizationRequest, response: OptimizationResponse) -> None:
    """Check that every route and step refers to a vehicle or job of the request."""
    vehicle_ids = {vehicle['id'] for vehicle in request['vehicles']}
    job_ids = {job['id'] for job in request['jobs']}
    errors = []

    for route in response.get('routes', []):
        if route.get('vehicle') not in vehicle_ids:
            errors.append(f"Route for unknown vehicle {route.get('vehicle')}")
        for step in route.get('steps', []):
            if 'job' in step and step['job'] not in job_ids:
                errors.append(f"Step of vehicle {route.get('vehicle')} refers to unknown job {step['job']}")

    if errors:
        logger.warning(f"Response validation failed: {errors}")
        raise DataValidationError("; ".join(errors))


def _duplicates(values: List[Any]) -> List[Any]:
    seen: Dict[Any, int] = {}
    for value in values:
        seen[value] = seen.get(value, 0) + 1
    return [value for value, count in seen.items() if count > 1]
