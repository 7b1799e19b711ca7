import json
import unittest
from unittest.mock import Mock

import requests
import websocket

from .api import (
	AuthorizationError,
	ConflictError,
	DashboardAPI,
	NotFoundError,
	TransportError,
	ValidationError,
)
from .interaction import (
	AWAITING_POINT,
	AWAITING_POLYGON,
	IDLE,
	InteractionController,
	InteractionError,
	NoClientsError,
)
from .markers import MarkerLayer
from .payloads import point_payload, polygon_payload, ring_to_latlngs
from .relay import RelaySubscriber, backoff_delay, relay_url
from .session import DashboardSession, NotEnoughStopsError


def fake_response(status=200, payload=None):
	response = Mock()
	response.status_code = status
	response.reason = 'reason'
	response.content = b'{}' if payload is not None else b''
	response.json.return_value = payload
	return response


def driver(pk, lat, lng, **extra):
	item = {'id': pk, 'name': f'Driver {pk}', 'current_location': point_payload(lat, lng)}
	item.update(extra)
	return item


class PayloadTests(unittest.TestCase):
	def test_point_is_longitude_first(self):
		self.assertEqual(point_payload(20.0, -100.0), {'type': 'Point', 'coordinates': [-100.0, 20.0]})

	def test_polygon_closes_ring(self):
		vertices = [(19.4, -99.2), (19.4, -99.1), (19.5, -99.1), (19.5, -99.2)]

		polygon = polygon_payload(vertices)
		ring = polygon['coordinates'][0]

		self.assertEqual(len(ring), len(vertices) + 1)
		self.assertEqual(ring[0], ring[-1])
		self.assertEqual(ring_to_latlngs(polygon)[:-1], vertices)

	def test_polygon_needs_three_vertices(self):
		with self.assertRaises(ValueError):
			polygon_payload([(0, 0), (1, 1)])


class DashboardAPITests(unittest.TestCase):
	def setUp(self):
		self.http = Mock()
		self.http.headers = {}
		self.api = DashboardAPI('http://dispatch.test/', session=self.http)

	def test_login_stores_bearer_token(self):
		self.http.request.return_value = fake_response(200, {'user': {'id': 1}, 'tokens': {'access': 'tok'}})

		self.api.login('a@example.com', 'secret123')

		self.assertEqual(self.http.headers['Authorization'], 'Bearer tok')
		method, url = self.http.request.call_args[0]
		self.assertEqual((method, url), ('POST', 'http://dispatch.test/api/auth/login/'))

	def test_error_mapping(self):
		cases = [
			(fake_response(401, {'error': 'not_authenticated', 'message': 'no'}), AuthorizationError),
			(fake_response(400, {'error': 'malformed_token', 'message': 'bad'}), AuthorizationError),
			(fake_response(400, {'error': 'validation_error', 'message': 'x'}), ValidationError),
			(fake_response(404, {'error': 'not_found', 'message': 'gone'}), NotFoundError),
			(fake_response(409, {'error': 'conflict', 'message': 'stale'}), ConflictError),
			(fake_response(502, {'error': 'routing_unavailable', 'message': 'down'}), TransportError),
		]
		for response, error in cases:
			self.http.request.return_value = response
			with self.assertRaises(error):
				self.api.list('places')

	def test_connection_failure_is_transport_error(self):
		self.http.request.side_effect = requests.ConnectionError('refused')

		with self.assertRaises(TransportError):
			self.api.list('drivers')

	def test_delete_returns_none_on_no_content(self):
		self.http.request.return_value = fake_response(204)

		self.assertIsNone(self.api.delete('places', 3))


class InteractionControllerTests(unittest.TestCase):
	def setUp(self):
		self.resets = []
		self.controller = InteractionController(on_reset=self.resets.append)

	def test_arm_click_finish(self):
		self.controller.arm_point('place')
		self.assertEqual(self.controller.state, AWAITING_POINT)
		self.assertEqual(self.controller.banner, 'Click on the map to add a place')
		self.assertEqual(self.controller.cursor, 'crosshair')

		capture = self.controller.click(20.0, -100.0)
		self.assertEqual(capture.payload, point_payload(20.0, -100.0))
		self.assertIsNone(self.controller.click(21.0, -101.0))

		self.controller.finish()
		self.assertEqual(self.controller.state, IDLE)
		self.assertIsNone(self.controller.banner)

	def test_click_while_idle_is_ignored(self):
		self.assertIsNone(self.controller.click(1.0, 2.0))

	def test_arming_new_mode_resets_previous(self):
		self.controller.arm_point('client')
		self.controller.arm_polygon()

		self.assertEqual(self.controller.state, AWAITING_POLYGON)
		self.assertEqual(self.resets, ['client'])

	def test_cancel_invalidates_generation(self):
		generation = self.controller.arm_point('driver')
		self.controller.cancel()

		self.assertEqual(self.controller.state, IDLE)
		self.assertFalse(self.controller.is_current(generation))
		self.assertEqual(self.controller.cursor, '')

	def test_delivery_needs_clients(self):
		with self.assertRaises(NoClientsError):
			self.controller.arm_point('delivery', clients_loader=lambda: [])
		self.assertEqual(self.controller.state, IDLE)

		self.controller.arm_point('delivery', clients_loader=lambda: [{'id': 1}])
		self.assertEqual(self.controller.kind, 'delivery')

	def test_polygon_completion_requires_drawing(self):
		with self.assertRaises(InteractionError):
			self.controller.complete_polygon([(0, 0), (0, 1), (1, 1)])


class MarkerLayerTests(unittest.TestCase):
	def test_reconcile_reports_added_moved_removed(self):
		layer = MarkerLayer('drivers')
		first = layer.reconcile([driver(1, 20.0, -100.0), driver(2, 21.0, -101.0)])
		self.assertEqual(first.added, [1, 2])

		second = layer.reconcile([driver(1, 20.5, -100.0)])

		self.assertEqual(second.moved, [1])
		self.assertEqual(second.removed, [2])
		self.assertEqual(layer.markers[1].position, (20.5, -100.0))

	def test_moved_marker_picks_up_renamed_label(self):
		layer = MarkerLayer('drivers')
		layer.reconcile([driver(1, 20.0, -100.0)])

		result = layer.reconcile([driver(1, 20.5, -100.5, name='Renamed')])

		self.assertEqual(result.moved, [1])
		self.assertEqual(layer.markers[1].label, 'Renamed')
		self.assertEqual(layer.markers[1].position, (20.5, -100.5))

	def test_search_filter(self):
		layer = MarkerLayer('clients')
		items = [
			{'id': 1, 'name': 'Acme', 'address': 'Reforma 222', 'location': point_payload(1, 1)},
			{'id': 2, 'name': 'Globex', 'address': 'Insurgentes 10', 'location': point_payload(2, 2)},
		]

		layer.reconcile(items, query='reforma')

		self.assertEqual(list(layer.markers), [1])


class RelaySubscriberTests(unittest.TestCase):
	def test_relay_url_carries_token(self):
		self.assertEqual(relay_url('https://dispatch.test/', 'abc'), 'wss://dispatch.test/ws/relay/?token=abc')

	def test_backoff_is_bounded(self):
		self.assertEqual(backoff_delay(0), 0.5)
		self.assertEqual(backoff_delay(2), 2.0)
		self.assertEqual(backoff_delay(10), 10.0)

	def test_dispatches_location_events_only(self):
		events = []
		subscriber = RelaySubscriber('ws://x', on_event=events.append)

		self.assertTrue(subscriber.dispatch(json.dumps({'type': 'driver_location_updated', 'driver_id': 1})))
		self.assertFalse(subscriber.dispatch(json.dumps({'type': 'pong'})))
		self.assertFalse(subscriber.dispatch('not json'))
		self.assertEqual(len(events), 1)

	def test_reconnects_with_backoff_and_reports_gap(self):
		event = json.dumps({'type': 'driver_location_updated', 'driver_id': 1, 'lat': 1.0, 'lng': 2.0})
		events, reconnects, sleeps = [], [], []
		subscriber = None

		first = Mock()
		first.recv.side_effect = [event, websocket.WebSocketConnectionClosedException('dropped')]
		second = Mock()

		def stop_on_recv():
			subscriber.stop()
			return ''
		second.recv.side_effect = stop_on_recv

		attempts = iter([first, OSError('refused'), second])

		def connect(url):
			result = next(attempts)
			if isinstance(result, Exception):
				raise result
			return result

		subscriber = RelaySubscriber(
			'ws://x',
			on_event=events.append,
			on_reconnect=lambda: reconnects.append(True),
			connect=connect,
			sleep=sleeps.append,
		)
		subscriber.run()

		self.assertEqual(len(events), 1)
		self.assertEqual(reconnects, [True])
		self.assertEqual(sleeps, [0.5])
		self.assertEqual(subscriber.connections, 2)

	def test_failing_event_handler_does_not_stop_subscriber(self):
		event = json.dumps({'type': 'driver_location_updated', 'driver_id': 1, 'lat': 1.0, 'lng': 2.0})
		handled, reconnects = [], []
		subscriber = None

		def on_event(payload):
			handled.append(payload)
			raise TransportError('reload failed')

		def on_reconnect():
			reconnects.append(True)
			raise TransportError('resync failed')

		first = Mock()
		first.recv.side_effect = [event, event, websocket.WebSocketConnectionClosedException('dropped')]
		second = Mock()

		def stop_on_recv():
			subscriber.stop()
			return ''
		second.recv.side_effect = stop_on_recv

		attempts = iter([first, second])
		subscriber = RelaySubscriber(
			'ws://x',
			on_event=on_event,
			on_reconnect=on_reconnect,
			connect=lambda url: next(attempts),
			sleep=lambda delay: None,
		)
		subscriber.run()

		self.assertEqual(len(handled), 2)
		self.assertEqual(reconnects, [True])
		self.assertEqual(subscriber.connections, 2)
		first.close.assert_called_once_with()
		self.assertIsNone(subscriber.ws)

	def test_publish_without_connection_is_dropped(self):
		subscriber = RelaySubscriber('ws://x', on_event=lambda event: None)

		self.assertFalse(subscriber.publish(1, 2.0, 3.0))


class DashboardSessionTests(unittest.TestCase):
	def setUp(self):
		self.api = Mock()
		self.session = DashboardSession(self.api)

	def test_relay_event_reloads_drivers_only_on_drivers_tab(self):
		self.api.list.return_value = [driver(1, 20.0, -100.0, status='busy')]

		self.assertFalse(self.session.handle_relay_event({'driver_id': 1, 'lat': 20.0, 'lng': -100.0}))
		self.api.list.assert_not_called()

		self.session.switch_tab('drivers')
		self.api.list.reset_mock()
		self.assertTrue(self.session.handle_relay_event({'driver_id': 1, 'lat': 20.0, 'lng': -100.0}))

		self.api.list.assert_called_once_with('drivers')
		self.assertEqual(self.session.items['drivers'][0]['status'], 'busy')

	def test_point_creation_flow(self):
		self.api.create.return_value = {'id': 5}
		self.api.list.return_value = []

		self.session.arm_point('place')
		self.session.click(20.0, -100.0)
		self.session.submit_form({'name': 'Depot'})

		self.api.create.assert_called_once_with(
			'places', {'name': 'Depot', 'location': point_payload(20.0, -100.0)}
		)
		self.assertEqual(self.session.controller.state, IDLE)

	def test_failed_create_still_returns_to_idle(self):
		self.api.create.side_effect = ValidationError('name required', status=400)

		self.session.arm_point('driver')
		self.session.click(1.0, 2.0)
		with self.assertRaises(ValidationError):
			self.session.submit_form({})

		self.assertEqual(self.session.controller.state, IDLE)
		body = self.api.create.call_args[0][1]
		self.assertIn('current_location', body)

	def test_delivery_arming_aborts_without_clients(self):
		self.api.list.return_value = []

		with self.assertRaises(NoClientsError):
			self.session.arm_point('delivery')
		self.api.list.assert_called_once_with('clients')

	def test_zone_capture_name_and_persist(self):
		self.api.create_zone.return_value = {'id': 9, 'name': 'Centro'}

		self.session.start_zone()
		self.session.complete_zone([(19.4, -99.2), (19.4, -99.1), (19.5, -99.1)])
		zone = self.session.name_zone('Centro')

		self.assertEqual(zone['id'], 9)
		body = self.api.create_zone.call_args[0][0]
		self.assertEqual(len(body['area']['coordinates'][0]), 4)
		self.assertEqual(self.session.items['zones'], [zone])

	def test_failed_zone_save_discards_shape(self):
		self.api.create_zone.side_effect = TransportError('offline')

		self.session.start_zone()
		self.session.complete_zone([(19.4, -99.2), (19.4, -99.1), (19.5, -99.1)])
		with self.assertRaises(TransportError):
			self.session.name_zone('Centro')

		self.assertIsNone(self.session.controller.capture)
		self.assertEqual(self.session.items['zones'], [])

	def test_stale_create_response_leaves_new_mode_alone(self):
		self.session.arm_point('place')
		self.session.click(20.0, -100.0)

		def create_while_user_rearms(family, body):
			self.session.cancel()
			self.session.arm_point('driver')
			return {'id': 5}
		self.api.create.side_effect = create_while_user_rearms

		created = self.session.submit_form({'name': 'Depot'})

		self.assertEqual(created, {'id': 5})
		self.assertEqual(self.session.controller.state, AWAITING_POINT)
		self.assertEqual(self.session.controller.kind, 'driver')
		self.api.list.assert_not_called()

	def test_stale_zone_response_is_not_kept(self):
		self.session.start_zone()
		self.session.complete_zone([(19.4, -99.2), (19.4, -99.1), (19.5, -99.1)])

		def save_while_user_rearms(body):
			self.session.cancel()
			self.session.arm_point('place')
			return {'id': 9, 'name': 'Centro'}
		self.api.create_zone.side_effect = save_while_user_rearms

		zone = self.session.name_zone('Centro')

		self.assertEqual(zone['id'], 9)
		self.assertEqual(self.session.controller.state, AWAITING_POINT)
		self.assertEqual(self.session.controller.kind, 'place')
		self.assertEqual(self.session.items['zones'], [])

	def test_route_needs_two_deliveries(self):
		self.api.list.return_value = [{'id': 1}]

		with self.assertRaises(NotEnoughStopsError):
			self.session.optimise_route()

	def test_route_over_loaded_deliveries(self):
		self.session.items['deliveries'] = [{'id': 1}, {'id': 2}]
		self.api.directions.return_value = {'distance': 10.0}

		self.assertEqual(self.session.optimise_route(), {'distance': 10.0})
		self.api.directions.assert_called_once_with(delivery_ids=[1, 2])
