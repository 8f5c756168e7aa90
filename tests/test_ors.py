"""
Tests for the openrouteservice optimization client.
Network calls are replaced with canned requests.Response objects.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock, patch

import requests

from routing.ors import optimize_route, ORS_BASE_URL
from routing.utils import make_job, make_vehicle, make_request
from exceptions import ServiceError, TransportError, OptimizationError


def _make_response(status_code: int, body) -> requests.Response:
    """Build a real requests.Response carrying the given body."""
    response = requests.Response()
    response.status_code = status_code
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    response._content = body.encode('utf-8')
    response.encoding = 'utf-8'
    return response


def _sample_request(vehicle_id: int = 1):
    return make_request(
        [make_vehicle(vehicle_id, 'driving-car', (2.35, 48.85))],
        [make_job(1, (2.33, 48.86)), make_job(2, (2.36, 48.85), service=300, skills=[1])]
    )


class TestOptimizeRoute(unittest.TestCase):
    """Test the request sent to the service and how its answer is handled."""

    @patch('routing.ors.requests.post')
    def test_sends_post_to_optimization_endpoint(self, mock_post):
        mock_post.return_value = _make_response(200, {'code': 0, 'routes': []})
        request = _sample_request()

        optimize_route('my-key', request)

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'https://api.openrouteservice.org/optimization')
        self.assertEqual(ORS_BASE_URL, 'https://api.openrouteservice.org')
        self.assertEqual(kwargs['json'], request)

    @patch('routing.ors.requests.post')
    def test_headers_carry_key_verbatim(self, mock_post):
        mock_post.return_value = _make_response(200, {'code': 0, 'routes': []})
        key = '5b3ce3597851110001cf6248 with spaces'

        optimize_route(key, _sample_request())

        headers = mock_post.call_args[1]['headers']
        self.assertEqual(headers['Authorization'], key)
        self.assertEqual(headers['Content-Type'], 'application/json')
        self.assertFalse(headers['Authorization'].startswith('Bearer'))

    @patch('routing.ors.requests.post')
    def test_success_passes_body_through(self, mock_post):
        mock_post.return_value = _make_response(200, '{"code":0,"routes":[]}')

        result = optimize_route('key', _sample_request())

        self.assertEqual(result, {'code': 0, 'routes': []})

    @patch('routing.ors.requests.post')
    def test_malformed_success_is_returned_untouched(self, mock_post):
        body = {'code': 0, 'extra': {'nested': True}}
        mock_post.return_value = _make_response(200, body)

        result = optimize_route('key', _sample_request())

        self.assertEqual(result, body)
        self.assertNotIn('routes', result)

    @patch('routing.ors.requests.post')
    def test_step_without_job_has_no_job_key(self, mock_post):
        body = {'code': 0, 'routes': [{
            'vehicle': 1, 'cost': 10, 'setup': 0, 'service': 0, 'duration': 10,
            'waiting_time': 0, 'priority': 0,
            'steps': [{'type': 'start', 'location': [2.35, 48.85], 'setup': 0, 'service': 0,
                       'waiting_time': 0, 'arrival': 0, 'duration': 0}]
        }]}
        mock_post.return_value = _make_response(200, body)

        result = optimize_route('key', _sample_request())

        step = result['routes'][0]['steps'][0]
        self.assertNotIn('job', step)
        self.assertNotIn('description', step)

    @patch('routing.ors.requests.post')
    def test_unauthorized_raises_service_error_with_status(self, mock_post):
        mock_post.return_value = _make_response(401, {'error': 'Access to this API has been disallowed'})

        with self.assertRaises(ServiceError) as ctx:
            optimize_route('bad-key', _sample_request())

        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIn('disallowed', ctx.exception.body)
        self.assertIsInstance(ctx.exception, OptimizationError)

    @patch('routing.ors.requests.post')
    def test_server_error_is_not_retried(self, mock_post):
        mock_post.return_value = _make_response(503, 'Service Unavailable')

        with self.assertRaises(ServiceError) as ctx:
            optimize_route('key', _sample_request())

        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(mock_post.call_count, 1)

    @patch('routing.ors.requests.post')
    def test_non_json_body_raises_service_error(self, mock_post):
        mock_post.return_value = _make_response(200, '<html>gateway</html>')

        with self.assertRaises(ServiceError) as ctx:
            optimize_route('key', _sample_request())

        self.assertEqual(ctx.exception.status_code, 200)
        self.assertEqual(ctx.exception.body, '<html>gateway</html>')

    @patch('routing.ors.requests.post')
    def test_connection_error_raises_transport_error(self, mock_post):
        original = requests.exceptions.ConnectionError('Name or service not known')
        mock_post.side_effect = original

        with self.assertRaises(TransportError) as ctx:
            optimize_route('key', _sample_request())

        self.assertIs(ctx.exception.__cause__, original)
        self.assertEqual(mock_post.call_count, 1)

    @patch('routing.ors.requests.post')
    def test_timeout_raises_transport_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ReadTimeout('read timed out')

        with self.assertRaises(TransportError) as ctx:
            optimize_route('key', _sample_request(), timeout=(1, 2))

        self.assertIsInstance(ctx.exception.__cause__, requests.exceptions.Timeout)
        self.assertEqual(mock_post.call_args[1]['timeout'], (1, 2))

    @patch('routing.ors.requests.post')
    def test_timeout_log_omits_unset_timeout(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectTimeout('connect timed out')

        with self.assertLogs('routing.ors', level='ERROR') as logs:
            with self.assertRaises(TransportError):
                optimize_route('key', _sample_request())

        self.assertNotIn('None', ' '.join(logs.output))
        self.assertIn('timed out', ' '.join(logs.output))

    @patch('routing.ors.requests.post')
    def test_timeout_log_names_given_timeout(self, mock_post):
        mock_post.side_effect = requests.exceptions.ReadTimeout('read timed out')

        with self.assertLogs('routing.ors', level='ERROR') as logs:
            with self.assertRaises(TransportError):
                optimize_route('key', _sample_request(), timeout=30)

        self.assertIn('after 30 seconds', ' '.join(logs.output))

    @patch('routing.ors.requests.post')
    def test_no_timeout_applied_by_default(self, mock_post):
        mock_post.return_value = _make_response(200, {'code': 0, 'routes': []})

        optimize_route('key', _sample_request())

        self.assertIsNone(mock_post.call_args[1]['timeout'])

    @patch('routing.ors.requests.post')
    def test_empty_key_rejected_before_network_call(self, mock_post):
        with self.assertRaises(ValueError):
            optimize_route('', _sample_request())
        mock_post.assert_not_called()

    def test_uses_given_session(self):
        session = Mock(spec=requests.Session)
        session.post.return_value = _make_response(200, {'code': 0, 'routes': []})

        result = optimize_route('key', _sample_request(), session=session,
                                base_url='http://localhost:8080/ors')

        self.assertEqual(result['code'], 0)
        self.assertEqual(session.post.call_args[0][0], 'http://localhost:8080/ors/optimization')


class TestConcurrentCalls(unittest.TestCase):
    """Test that overlapping calls never see each other's responses."""

    @patch('routing.ors.requests.post')
    def test_each_call_gets_its_own_response(self, mock_post):
        barrier = threading.Barrier(2)

        def fake_post(url, json=None, headers=None, timeout=None):
            # Both calls are in flight before either answers
            barrier.wait(timeout=5)
            vehicle_id = json['vehicles'][0]['id']
            return _make_response(200, {'code': 0, 'routes': [{'vehicle': vehicle_id, 'steps': []}],
                                        'key': headers['Authorization']})

        mock_post.side_effect = fake_post

        with ThreadPoolExecutor(max_workers=2) as pool:
            first = pool.submit(optimize_route, 'key-a', _sample_request(vehicle_id=7))
            second = pool.submit(optimize_route, 'key-b', _sample_request(vehicle_id=9))
            result_a = first.result(timeout=10)
            result_b = second.result(timeout=10)

        self.assertEqual(result_a['routes'][0]['vehicle'], 7)
        self.assertEqual(result_a['key'], 'key-a')
        self.assertEqual(result_b['routes'][0]['vehicle'], 9)
        self.assertEqual(result_b['key'], 'key-b')


if __name__ == '__main__':
    unittest.main()
