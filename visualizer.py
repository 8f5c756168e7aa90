"""
Map visualization of optimization requests and computed routes.
"""

import folium
import folium.plugins
from typing import List, Optional, Tuple
import logging
from config import Config
from routing.types import Job, OptimizationRequest, OptimizationResponse, Route, Step, STEP_START, STEP_END

logger = logging.getLogger(__name__)


class MapBuilder:
    """Service for creating interactive maps with Folium."""

    def __init__(self):
        self.colors = ['red', 'blue', 'green', 'purple', 'orange',
                      'darkred', 'lightred', 'beige', 'darkblue', 'darkgreen',
                      'cadetblue', 'pink', 'gray', 'black']

    def color_for(self, route_idx: int) -> str:
        return self.colors[route_idx % len(self.colors)]

    def create_request_map(self, request: OptimizationRequest) -> folium.Map:
        """Show jobs as dots and vehicle depots as markers, before optimization."""
        m = self._base_map(self._center(request))

        for job in request['jobs']:
            self._add_job_dot(m, job, 'blue')

        for vehicle in request['vehicles']:
            lng, lat = vehicle['start']
            folium.Marker(
                location=[lat, lng],
                popup=f"<div><strong>Vehicle {vehicle['id']}</strong><br>{vehicle['profile']}</div>",
                icon=folium.Icon(color='darkred', icon='truck', prefix='fa')
            ).add_to(m)

        return self._finish(m)

    def create_routes_map(self, response: OptimizationResponse,
                          request: Optional[OptimizationRequest] = None) -> folium.Map:
        """
        Draw each route as a straight-line polyline through its steps.
        Jobs of the request left out of every route are drawn in gray.
        """
        routes = response.get('routes', [])
        center = self._center(request) if request else self._route_center(routes)
        m = self._base_map(center)

        served = set()
        for route_idx, route in enumerate(routes):
            color = self.color_for(route_idx)
            group = folium.FeatureGroup(name=f"Vehicle {route.get('vehicle')}")
            path = []
            stop_num = 0
            for step in route.get('steps', []):
                lng, lat = step['location']
                path.append((lat, lng))
                if step.get('type') in (STEP_START, STEP_END):
                    continue
                stop_num += 1
                if 'job' in step:
                    served.add(step['job'])
                self._add_stop_marker(group, step, (lat, lng), stop_num, route, color)

            if path:
                lng, lat = route['steps'][0]['location']
                folium.Marker(
                    location=[lat, lng],
                    popup=f"<div><strong>Vehicle {route.get('vehicle')}</strong></div>",
                    icon=folium.Icon(color='darkred', icon='home', prefix='fa')
                ).add_to(group)
                folium.PolyLine(
                    locations=path,
                    color=color,
                    weight=4,
                    opacity=0.8,
                    popup=f"<div>Vehicle {route.get('vehicle')}: cost {route.get('cost')}</div>"
                ).add_to(group)
            group.add_to(m)

        if request:
            for job in request['jobs']:
                if job['id'] not in served:
                    self._add_job_dot(m, job, 'gray')

        logger.info(f"Route map created with {len(routes)} routes")
        return self._finish(m)

    def _base_map(self, center: Tuple[float, float]) -> folium.Map:
        return folium.Map(location=list(center), zoom_start=Config.DEFAULT_ZOOM, tiles='OpenStreetMap')

    def _finish(self, m: folium.Map) -> folium.Map:
        folium.LayerControl().add_to(m)
        folium.plugins.Fullscreen(
            position='topright',
            title='Expand map',
            title_cancel='Exit full screen',
            force_separate_button=True
        ).add_to(m)
        return m

    def _center(self, request: OptimizationRequest) -> Tuple[float, float]:
        """Mean (lat, lng) of all jobs and depots."""
        points = [job['location'] for job in request['jobs']]
        points += [vehicle['start'] for vehicle in request['vehicles']]
        return self._mean(points)

    def _route_center(self, routes: List[Route]) -> Tuple[float, float]:
        return self._mean([step['location'] for route in routes for step in route.get('steps', [])])

    @staticmethod
    def _mean(points) -> Tuple[float, float]:
        if not points:
            return Config.DEFAULT_CENTER_LAT, Config.DEFAULT_CENTER_LNG
        lat = sum(p[1] for p in points) / len(points)
        lng = sum(p[0] for p in points) / len(points)
        return lat, lng

    def _add_job_dot(self, m, job: Job, color: str) -> None:
        lng, lat = job['location']
        folium.CircleMarker(
            location=[lat, lng],
            radius=4,
            popup=folium.Popup(f"<div><strong>Job {job['id']}</strong><br>{job.get('description', '')}</div>",
                               max_width=300),
            color=color,
            fill=True,
            fillColor=color,
            fillOpacity=0.8,
            weight=1
        ).add_to(m)

    def _add_stop_marker(self, m, step: Step, coords, stop_num: int, route: Route, color: str) -> None:
        """Helper to add a numbered marker for a stop."""
        popup_html = f"""
        <div style="font-family: Arial, sans-serif;">
            <strong>{step.get('description', step.get('type', ''))}</strong><br>
            Job: {step.get('job', 'N/A')}<br>
            Stop: {stop_num}<br>
            Vehicle: {route.get('vehicle')}<br>
            Arrival: {step.get('arrival')} s
        </div>
        """

        folium.Marker(
            location=coords,
            popup=folium.Popup(popup_html, max_width=300),
            icon=folium.DivIcon(
                html=f'<div style="background-color: {color}; color: white; '
                     f'border-radius: 50%; width: 24px; height: 24px; '
                     f'display: flex; align-items: center; justify-content: center; '
                     f'font-weight: bold; font-size: 11px; border: 2px solid white; box-shadow: 2px 2px 5px rgba(0,0,0,0.3);">{stop_num}</div>',
                icon_size=(24, 24),
                icon_anchor=(12, 12)
            )
        ).add_to(m)
