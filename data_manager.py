"""
Data management service for job/vehicle tables and optimization results.
"""

import pandas as pd
from typing import Any, List, Optional
import logging
from config import Config
from exceptions import DataValidationError
from routing.types import Job, Vehicle, OptimizationRequest, OptimizationResponse, TimeWindow
from routing.utils import make_job, make_vehicle, make_request

logger = logging.getLogger(__name__)


class DataManager:
    """Service for loading job and vehicle tables and turning them into optimization requests."""

    def __init__(self, default_profile: str = Config.DEFAULT_PROFILE):
        self.default_profile = default_profile

    def load_table(self, file) -> pd.DataFrame:
        """Load an uploaded Excel/CSV file."""
        name = getattr(file, 'name', str(file)).lower()
        try:
            if name.endswith('.xlsx'):
                df = pd.read_excel(file)
            else:
                df = pd.read_csv(file)
        except Exception as e:
            logger.error(f"Error loading table {name}: {e}")
            raise DataValidationError(f"Error loading file: {str(e)}") from e

        if df.empty:
            raise DataValidationError("File is empty or cannot be read")

        df.columns = df.columns.astype(str).str.strip().str.lower()
        logger.info(f"Loaded {len(df)} rows from {name}")
        return df

    def sample_jobs(self) -> pd.DataFrame:
        """A few deliveries around central Paris."""
        return pd.DataFrame({
            'id': [1, 2, 3, 4, 5],
            'lng': [2.3387, 2.3614, 2.3200, 2.3790, 2.2945],
            'lat': [48.8606, 48.8530, 48.8462, 48.8675, 48.8584],
            'description': ['Louvre', 'Hotel de Ville', 'Montparnasse', 'Belleville', 'Eiffel Tower'],
            'service': [300, 300, 600, 300, 300],
            'skills': ['1', '1', '', '2', ''],
            'time_windows': ['', '0-7200', '', '3600-14400', ''],
        })

    def sample_vehicles(self) -> pd.DataFrame:
        return pd.DataFrame({
            'id': [1, 2],
            'profile': [self.default_profile, self.default_profile],
            'start_lng': [2.3522, 2.3522],
            'start_lat': [48.8566, 48.8566],
            'capacity': ['4', '4'],
            'skills': ['1', '2'],
            'time_window': ['0-28800', '0-28800'],
        })

    def jobs_from_dataframe(self, df: pd.DataFrame) -> List[Job]:
        """Convert a jobs table into job records. Empty cells become absent fields."""
        self._require_columns(df, Config.JOB_COLUMNS, 'jobs')
        jobs = []
        for idx, row in df.iterrows():
            try:
                jobs.append(make_job(
                    id=int(row['id']),
                    location=(float(row['lng']), float(row['lat'])),
                    description=self._text(row.get('description')),
                    setup=self._int(row.get('setup')),
                    service=self._int(row.get('service')),
                    skills=self._int_list(row.get('skills')),
                    time_windows=self._window_list(row.get('time_windows')),
                ))
            except (ValueError, TypeError) as e:
                logger.error(f"Invalid job row {idx} (id {row.get('id')}): {e}")
                raise DataValidationError(f"Invalid job in row {idx} (id {row.get('id')}): {e}") from e
        return jobs

    def vehicles_from_dataframe(self, df: pd.DataFrame) -> List[Vehicle]:
        """Convert a vehicles table into vehicle records."""
        self._require_columns(df, Config.VEHICLE_COLUMNS, 'vehicles')
        vehicles = []
        for idx, row in df.iterrows():
            try:
                start = (float(row['start_lng']), float(row['start_lat']))
                end = None
                if self._present(row.get('end_lng')) and self._present(row.get('end_lat')):
                    end = (float(row['end_lng']), float(row['end_lat']))
                vehicles.append(make_vehicle(
                    id=int(row['id']),
                    profile=self._text(row.get('profile')) or self.default_profile,
                    start=start,
                    end=end,
                    capacity=self._int_list(row.get('capacity')),
                    skills=self._int_list(row.get('skills')),
                    time_window=self._window(row.get('time_window')),
                ))
            except (ValueError, TypeError) as e:
                logger.error(f"Invalid vehicle row {idx} (id {row.get('id')}): {e}")
                raise DataValidationError(f"Invalid vehicle in row {idx} (id {row.get('id')}): {e}") from e
        return vehicles

    def build_request(self, jobs_df: pd.DataFrame, vehicles_df: pd.DataFrame) -> OptimizationRequest:
        request = make_request(self.vehicles_from_dataframe(vehicles_df), self.jobs_from_dataframe(jobs_df))
        logger.info(f"Built request with {len(request['vehicles'])} vehicles and {len(request['jobs'])} jobs")
        return request

    def routes_to_dataframe(self, response: OptimizationResponse) -> pd.DataFrame:
        """Flatten routes into one row per step, in route order."""
        rows = []
        for route in response.get('routes', []):
            for seq, step in enumerate(route.get('steps', [])):
                lng, lat = step['location']
                rows.append({
                    'vehicle': route.get('vehicle'),
                    'sequence': seq,
                    'type': step.get('type'),
                    'job': step.get('job'),
                    'description': step.get('description', ''),
                    'lng': lng,
                    'lat': lat,
                    'arrival': step.get('arrival'),
                    'waiting_time': step.get('waiting_time'),
                    'service': step.get('service'),
                    'duration': step.get('duration'),
                })
        columns = ['vehicle', 'sequence', 'type', 'job', 'description', 'lng', 'lat',
                   'arrival', 'waiting_time', 'service', 'duration']
        return pd.DataFrame(rows, columns=columns)

    def route_summary(self, response: OptimizationResponse) -> pd.DataFrame:
        """One row per vehicle route with its totals."""
        rows = [{
            'vehicle': route.get('vehicle'),
            'stops': sum(1 for step in route.get('steps', []) if 'job' in step),
            'cost': route.get('cost'),
            'duration': route.get('duration'),
            'service': route.get('service'),
            'waiting_time': route.get('waiting_time'),
        } for route in response.get('routes', [])]
        return pd.DataFrame(rows, columns=['vehicle', 'stops', 'cost', 'duration', 'service', 'waiting_time'])

    def _require_columns(self, df: pd.DataFrame, columns: List[str], table: str) -> None:
        missing = [col for col in columns if col not in df.columns]
        if missing:
            raise DataValidationError(
                f"Missing columns in {table} table: {', '.join(missing)} "
                f"(found: {', '.join(map(str, df.columns))})"
            )

    @staticmethod
    def _present(value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip() != ''
        return not pd.isna(value)

    def _text(self, value: Any) -> Optional[str]:
        return str(value).strip() if self._present(value) else None

    def _int(self, value: Any) -> Optional[int]:
        return int(float(value)) if self._present(value) else None

    def _int_list(self, value: Any) -> Optional[List[int]]:
        if not self._present(value):
            return None
        return [int(float(part)) for part in str(value).split(Config.LIST_SEPARATOR) if part.strip()]

    def _window(self, value: Any) -> Optional[TimeWindow]:
        if not self._present(value):
            return None
        parts = str(value).split(Config.WINDOW_SEPARATOR)
        if len(parts) != 2:
            raise DataValidationError(f"Invalid time window '{value}', expected start-end")
        try:
            return (int(float(parts[0])), int(float(parts[1])))
        except ValueError as e:
            raise DataValidationError(f"Invalid time window '{value}', expected seconds as start-end") from e

    def _window_list(self, value: Any) -> Optional[List[TimeWindow]]:
        if not self._present(value):
            return None
        return [self._window(part) for part in str(value).split(Config.LIST_SEPARATOR) if part.strip()]
