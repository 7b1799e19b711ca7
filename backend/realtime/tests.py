from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

from asgiref.sync import async_to_sync
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase, TestCase, TransactionTestCase
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User
from .broadcast import build_location_event, publish_driver_location, publish_driver_location_async
from .consumers import LiveRelayConsumer
from .middleware import get_user_for_token, token_from_scope
from .registry import RELAY_GROUP, SessionRegistry, get_session_registry, set_session_registry


def dashboard_user(pk):
	return SimpleNamespace(id=pk, is_anonymous=False)


class SessionRegistryTests(SimpleTestCase):
	def setUp(self):
		self.layer = Mock()
		self.layer.group_add = AsyncMock()
		self.layer.group_discard = AsyncMock()
		self.layer.group_send = AsyncMock()
		self.registry = SessionRegistry(channel_layer=self.layer)

	def test_add_and_remove_track_sessions(self):
		async_to_sync(self.registry.add)('session-1', 7)
		async_to_sync(self.registry.add)('session-2', 8)

		self.assertEqual(self.registry.count(), 2)
		self.assertIn('session-1', self.registry)
		self.layer.group_add.assert_any_await(RELAY_GROUP, 'session-1')

		async_to_sync(self.registry.remove)('session-1')

		self.assertNotIn('session-1', self.registry)
		self.assertEqual([s.user_id for s in self.registry.sessions()], [8])
		self.layer.group_discard.assert_awaited_once_with(RELAY_GROUP, 'session-1')

	def test_remove_unknown_session_is_harmless(self):
		async_to_sync(self.registry.remove)('never-added')

		self.assertEqual(self.registry.count(), 0)

	def test_publish_sends_event_to_group(self):
		event = build_location_event('d1', 20.0, -100.0)

		async_to_sync(self.registry.publish)(event)

		self.layer.group_send.assert_awaited_once_with(RELAY_GROUP, event)

	def test_failed_publish_is_dropped(self):
		self.layer.group_send.side_effect = ConnectionError('redis gone')

		self.assertFalse(publish_driver_location('d1', 20.0, -100.0, registry=self.registry))
		self.assertFalse(async_to_sync(publish_driver_location_async)('d1', 20.0, -100.0, registry=self.registry))

	def test_successful_publish(self):
		self.assertTrue(publish_driver_location('d1', 20.0, -100.0, registry=self.registry))

	def test_extra_fields_ride_along_with_location(self):
		publish_driver_location('d1', 20.0, -100.0, registry=self.registry, extra={'heading': 90, 'type': 'spoof'})

		self.layer.group_send.assert_awaited_once_with(RELAY_GROUP, {
			'type': 'driver_location_updated', 'heading': 90, 'driver_id': 'd1', 'lat': 20.0, 'lng': -100.0,
		})

	def test_registry_can_be_swapped(self):
		set_session_registry(self.registry)
		try:
			self.assertIs(get_session_registry(), self.registry)
		finally:
			set_session_registry(None)


class LiveRelayConsumerTests(TransactionTestCase):
	def setUp(self):
		self.registry = SessionRegistry()
		set_session_registry(self.registry)

	def tearDown(self):
		set_session_registry(None)

	async def _connect(self, user):
		communicator = WebsocketCommunicator(LiveRelayConsumer.as_asgi(), '/ws/relay/')
		communicator.scope['user'] = user
		connected, _ = await communicator.connect()
		self.assertTrue(connected)
		greeting = await communicator.receive_json_from()
		self.assertEqual(greeting['type'], 'connection_established')
		return communicator

	async def test_anonymous_session_is_refused(self):
		communicator = WebsocketCommunicator(LiveRelayConsumer.as_asgi(), '/ws/relay/')
		communicator.scope['user'] = AnonymousUser()

		connected, code = await communicator.connect()

		self.assertFalse(connected)
		self.assertEqual(code, 4401)

	async def test_update_fans_out_to_every_session_including_sender(self):
		sender = await self._connect(dashboard_user(1))
		watcher = await self._connect(dashboard_user(2))
		self.assertEqual(self.registry.count(), 2)

		await sender.send_json_to({'type': 'update_location', 'driver_id': 'd1', 'lat': 20.0, 'lng': -100.0})

		expected = {'type': 'driver_location_updated', 'driver_id': 'd1', 'lat': 20.0, 'lng': -100.0}
		self.assertEqual(await sender.receive_json_from(), expected)
		self.assertEqual(await watcher.receive_json_from(), expected)

		await sender.disconnect()
		await watcher.disconnect()
		self.assertEqual(self.registry.count(), 0)

	async def test_payload_is_relayed_without_validation(self):
		session = await self._connect(dashboard_user(1))

		await session.send_json_to({'type': 'update_location', 'driver_id': 'ghost', 'lat': 500, 'lng': 'east'})

		event = await session.receive_json_from()
		self.assertEqual(event['driver_id'], 'ghost')
		self.assertEqual(event['lat'], 500)
		self.assertEqual(event['lng'], 'east')
		await session.disconnect()

	async def test_extra_fields_are_relayed_as_received(self):
		sender = await self._connect(dashboard_user(1))
		watcher = await self._connect(dashboard_user(2))

		await sender.send_json_to({
			'type': 'update_location', 'driver_id': 'd1', 'lat': 20.0, 'lng': -100.0,
			'heading': 270, 'speed_kmh': 42.5,
		})

		expected = {
			'type': 'driver_location_updated', 'driver_id': 'd1', 'lat': 20.0, 'lng': -100.0,
			'heading': 270, 'speed_kmh': 42.5,
		}
		self.assertEqual(await sender.receive_json_from(), expected)
		self.assertEqual(await watcher.receive_json_from(), expected)
		await sender.disconnect()
		await watcher.disconnect()

	async def test_camel_case_driver_id_is_accepted(self):
		session = await self._connect(dashboard_user(1))

		await session.send_json_to({'type': 'update_location', 'driverId': 'd9', 'lat': 1.5, 'lng': 2.5})

		event = await session.receive_json_from()
		self.assertEqual(event['type'], 'driver_location_updated')
		self.assertEqual(event['driver_id'], 'd9')
		self.assertNotIn('driverId', event)
		await session.disconnect()

	async def test_disconnected_session_misses_events(self):
		early = await self._connect(dashboard_user(1))
		await early.disconnect()
		late = await self._connect(dashboard_user(2))

		await late.send_json_to({'type': 'update_location', 'driver_id': 3, 'lat': 1.0, 'lng': 2.0})

		self.assertEqual((await late.receive_json_from())['driver_id'], 3)
		self.assertEqual(self.registry.count(), 1)
		await late.disconnect()

	async def test_incomplete_update_gets_error(self):
		session = await self._connect(dashboard_user(1))

		await session.send_json_to({'type': 'update_location', 'driver_id': 'd1'})

		reply = await session.receive_json_from()
		self.assertEqual(reply['type'], 'error')
		self.assertIn('lat', reply['message'])
		await session.disconnect()

	async def test_ping_and_unknown_types(self):
		session = await self._connect(dashboard_user(1))

		await session.send_json_to({'type': 'ping'})
		self.assertEqual((await session.receive_json_from())['type'], 'pong')

		await session.send_json_to({'type': 'shout'})
		self.assertEqual((await session.receive_json_from())['type'], 'error')
		await session.disconnect()


class WebSocketAuthTests(TestCase):
	def setUp(self):
		self.user = User.objects.create_user(email='owner@example.com', password='pass1234', name='Owner')

	def test_token_from_query_string(self):
		scope = {'query_string': b'token=abc.def', 'headers': []}

		self.assertEqual(token_from_scope(scope), 'abc.def')

	def test_token_from_authorization_header(self):
		scope = {'query_string': b'', 'headers': [(b'authorization', b'Bearer xyz')]}

		self.assertEqual(token_from_scope(scope), 'xyz')

	def test_valid_token_resolves_user(self):
		token = str(AccessToken.for_user(self.user))

		self.assertEqual(get_user_for_token(token), self.user)

	def test_bad_or_missing_token_is_anonymous(self):
		self.assertTrue(get_user_for_token('garbage').is_anonymous)
		self.assertTrue(get_user_for_token(None).is_anonymous)
