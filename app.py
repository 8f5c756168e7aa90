import streamlit as st
from typing import Any, Dict, MutableMapping
from config import Config
from data_manager import DataManager
from visualizer import MapBuilder
from routing.ors import optimize_route
from routing.utils import validate_request
from exceptions import RoutePlannerError, DataValidationError, ServiceError, TransportError
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init_session_state():
    if 'jobs' not in st.session_state: st.session_state.jobs = None
    if 'vehicles' not in st.session_state: st.session_state.vehicles = None
    if 'request' not in st.session_state: st.session_state.request = None
    if 'response' not in st.session_state: st.session_state.response = None


def load_uploads(data_manager: DataManager, state: MutableMapping[str, Any], uploads: Dict[str, Any]) -> None:
    """
    Replace a table when a different file is uploaded for it.
    A replaced table invalidates the previous request and result.
    """
    for table, uploaded_file in uploads.items():
        if not uploaded_file:
            continue
        file_id = f"{uploaded_file.name}-{uploaded_file.size}"
        if state.get(f'{table}_file_id') == file_id:
            continue
        state[table] = data_manager.load_table(uploaded_file)
        state[f'{table}_file_id'] = file_id
        state['request'] = None
        state['response'] = None
        logger.info(f"New {table} table loaded from {uploaded_file.name}")


def setup_sidebar(data_manager: DataManager):
    st.sidebar.header("⚙️ Settings")

    api_key = st.sidebar.text_input(
        "OpenRouteService API Key",
        value=Config.OPENROUTESERVICE_API_KEY,
        type="password",
        help="Sent as-is in the Authorization header."
    )
    if api_key:
        st.sidebar.success("✅ API Key set")
    else:
        st.sidebar.error("⚠️ Missing API Key")

    st.sidebar.subheader("Input Tables")
    jobs_file = st.sidebar.file_uploader("Jobs (Excel/CSV)", type=Config.UPLOAD_TYPES)
    vehicles_file = st.sidebar.file_uploader("Vehicles (Excel/CSV)", type=Config.UPLOAD_TYPES)

    try:
        load_uploads(data_manager, st.session_state, {'jobs': jobs_file, 'vehicles': vehicles_file})
    except DataValidationError as e:
        st.sidebar.error(str(e))

    if st.sidebar.button("Load sample data"):
        st.session_state.jobs = data_manager.sample_jobs()
        st.session_state.vehicles = data_manager.sample_vehicles()
        st.session_state.request = None
        st.session_state.response = None

    return api_key


def main():
    st.set_page_config(page_title="Route Planner", layout="wide")
    st.title("🚚 Route Planner")
    init_session_state()

    data_manager = DataManager()
    map_builder = MapBuilder()
    api_key = setup_sidebar(data_manager)

    if st.session_state.jobs is None or st.session_state.vehicles is None:
        st.info("Upload a jobs table and a vehicles table, or load the sample data.")
        return

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Jobs")
        jobs_df = st.data_editor(st.session_state.jobs, num_rows="dynamic", key="jobs_editor")
    with col2:
        st.subheader("Vehicles")
        vehicles_df = st.data_editor(st.session_state.vehicles, num_rows="dynamic", key="vehicles_editor")

    if st.button("🚀 Optimize", type="primary", disabled=not api_key):
        try:
            request = data_manager.build_request(jobs_df, vehicles_df)
            validate_request(request)
            with st.spinner("Waiting for openrouteservice..."):
                response = optimize_route(
                    api_key, request,
                    timeout=(Config.ORS_CONNECT_TIMEOUT, Config.ORS_READ_TIMEOUT),
                    base_url=Config.ORS_BASE_URL
                )
            st.session_state.request = request
            st.session_state.response = response
        except DataValidationError as e:
            st.error(f"Invalid input: {e}")
        except ServiceError as e:
            st.error(f"Optimization service error (HTTP {e.status_code}): {e.body}")
        except TransportError as e:
            st.error(f"Could not reach the optimization service: {e}")
        except RoutePlannerError as e:
            st.error(str(e))

    response = st.session_state.response
    if response is None:
        try:
            preview = data_manager.build_request(jobs_df, vehicles_df)
        except DataValidationError as e:
            st.warning(f"Cannot preview input: {e}")
            return
        request_map = map_builder.create_request_map(preview)
        st.components.v1.html(request_map._repr_html_(), height=600)
        return

    st.subheader("Routes")
    routes = response.get('routes', [])
    if not routes:
        st.warning("The service returned no routes.")
    st.dataframe(data_manager.route_summary(response), width="stretch")
    unassigned = response.get('unassigned', [])
    if unassigned:
        st.warning(f"{len(unassigned)} jobs could not be assigned: "
                   f"{', '.join(str(u.get('id')) for u in unassigned)}")

    routes_map = map_builder.create_routes_map(response, st.session_state.request)
    st.components.v1.html(routes_map._repr_html_(), height=700)

    with st.expander("Steps"):
        st.dataframe(data_manager.routes_to_dataframe(response), width="stretch")


if __name__ == "__main__":
    main()
