"""
Configuration constants and settings for the Route Planner.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    """Application configuration constants."""
    # OpenRouteService API Key
    OPENROUTESERVICE_API_KEY = os.getenv('OPENROUTESERVICE_API_KEY', '')

    ORS_BASE_URL = "https://api.openrouteservice.org"

    # Timeouts the app passes to the client (the client applies none by itself)
    ORS_CONNECT_TIMEOUT = 10
    ORS_READ_TIMEOUT = 120

    # Routing profiles accepted by the optimization endpoint
    DEFAULT_PROFILE = "driving-car"
    PROFILES = [
        "driving-car",
        "driving-hgv",
        "cycling-regular",
        "cycling-road",
        "cycling-mountain",
        "cycling-electric",
        "foot-walking",
        "foot-hiking",
        "wheelchair",
    ]

    # Map defaults
    DEFAULT_CENTER_LAT = 48.8566  # Paris
    DEFAULT_CENTER_LNG = 2.3522
    DEFAULT_ZOOM = 12

    # Expected columns for uploaded tables
    JOB_COLUMNS = ['id', 'lng', 'lat']
    VEHICLE_COLUMNS = ['id', 'start_lng', 'start_lat']

    # File types accepted by the uploaders (.xlsx is read with openpyxl)
    UPLOAD_TYPES = ['xlsx', 'csv']

    # Separators used inside table cells
    LIST_SEPARATOR = ';'
    WINDOW_SEPARATOR = '-'
