"""
Type definitions for the openrouteservice optimization request and response.
"""
from typing import Any, Dict, List, Tuple, TypedDict

# (longitude, latitude), the order ORS expects
Location = Tuple[float, float]

# (start, end) offsets in seconds
TimeWindow = Tuple[int, int]

# Step type tags returned by the service
STEP_START = "start"
STEP_JOB = "job"
STEP_PICKUP = "pickup"
STEP_DELIVERY = "delivery"
STEP_BREAK = "break"
STEP_END = "end"


# --- Request ---

class _JobBase(TypedDict):
    id: int
    location: Location

class Job(_JobBase, total=False):
    description: str
    setup: int
    service: int
    skills: List[int]
    time_windows: List[TimeWindow]

class _VehicleBase(TypedDict):
    id: int
    profile: str
    start: Location
    end: Location

class Vehicle(_VehicleBase, total=False):
    capacity: List[int]
    skills: List[int]
    time_window: TimeWindow

class OptimizationRequest(TypedDict):
    vehicles: List[Vehicle]
    jobs: List[Job]


# --- Response ---

class _StepBase(TypedDict):
    type: str
    location: Location
    setup: int
    service: int
    waiting_time: int
    arrival: int
    duration: int

class Step(_StepBase, total=False):
    description: str
    id: int
    job: int

class Route(TypedDict):
    vehicle: int
    cost: int
    setup: int
    service: int
    duration: int
    waiting_time: int
    priority: int
    steps: List[Step]

class _ResponseBase(TypedDict):
    code: int
    routes: List[Route]

class OptimizationResponse(_ResponseBase, total=False):
    summary: Dict[str, Any]
    unassigned: List[Dict[str, Any]]
