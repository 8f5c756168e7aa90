"""
OpenRouteService optimization API client.
"""
import requests
import logging
from typing import Optional, Tuple, Union
from exceptions import ServiceError, TransportError
from .types import OptimizationRequest, OptimizationResponse

logger = logging.getLogger(__name__)

ORS_BASE_URL = "https://api.openrouteservice.org"
OPTIMIZATION_PATH = "/optimization"


def optimize_route(api_key: str, request: OptimizationRequest,
                   timeout: Optional[Union[float, Tuple[float, float]]] = None,
                   session: Optional[requests.Session] = None,
                   base_url: str = ORS_BASE_URL) -> OptimizationResponse:
    """
    Submit a vehicle routing problem to the optimization endpoint.

    Exactly one POST is issued; nothing is retried or cached.

    Args:
        api_key: OpenRouteService API key, sent verbatim as the Authorization header
        request: Vehicles and jobs to optimize
        timeout: Passed through to requests (seconds, or (connect, read) tuple)
        session: Optional requests session owning the connection pool
        base_url: Service root, without trailing slash

    Returns:
        The parsed response body, unvalidated

    Raises:
        ValueError: If the API key is empty
        TransportError: If no response was received (DNS, timeout, reset)
        ServiceError: If the status is not 2xx or the body is not JSON
    """
    if not api_key:
        raise ValueError("API Key is required for optimization requests.")

    http = session or requests
    url = f"{base_url}{OPTIMIZATION_PATH}"
    headers = {
        'Authorization': api_key,
        'Content-Type': 'application/json'
    }

    logger.info(f"Requesting optimization for {len(request.get('vehicles', []))} vehicles "
                f"and {len(request.get('jobs', []))} jobs")

    try:
        response = http.post(url, json=request, headers=headers, timeout=timeout)
    except requests.exceptions.Timeout as e:
        if timeout is not None:
            logger.error(f"Optimization request timed out after {timeout} seconds: {e}")
        else:
            logger.error(f"Optimization request timed out: {e}")
        raise TransportError(f"Optimization request timed out: {e}") from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Optimization request failed: {e}")
        raise TransportError(f"Optimization request failed: {e}") from e

    if not 200 <= response.status_code < 300:
        logger.error(f"Optimization service returned HTTP {response.status_code}: {response.text}")
        raise ServiceError(response.status_code, response.text)

    try:
        data = response.json()
    except ValueError as e:
        logger.error(f"Optimization response is not JSON: {response.text[:200]}")
        raise ServiceError(response.status_code, response.text,
                           "Optimization service returned a non-JSON body") from e

    logger.debug(f"Optimization returned code {data.get('code') if isinstance(data, dict) else None}")
    return data
