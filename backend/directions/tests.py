from unittest.mock import Mock, patch

import requests
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from accounts.models import User
from clients.models import Client
from common.exceptions import RoutingUnavailable
from deliveries.models import Delivery
from .osrm import OSRMClient

OSRM_OK = {
	'code': 'Ok',
	'routes': [{
		'geometry': {'type': 'LineString', 'coordinates': [[-99.16, 19.43], [-99.15, 19.42]]},
		'distance': 1520.4,
		'duration': 240.0,
	}],
}


def fake_session(payload=None, error=None):
	session = Mock()
	if error is not None:
		session.get.side_effect = error
	else:
		response = Mock()
		response.json.return_value = payload
		response.raise_for_status.return_value = None
		session.get.return_value = response
	return session


class OSRMClientTests(SimpleTestCase):
	def test_builds_lng_lat_url(self):
		session = fake_session(OSRM_OK)
		client = OSRMClient(base_url='http://osrm.test/', profile='driving', timeout=3, session=session)

		route = client.route([[-99.16, 19.43], [-99.15, 19.42]])

		session.get.assert_called_once_with(
			'http://osrm.test/route/v1/driving/-99.16,19.43;-99.15,19.42',
			params={'overview': 'full', 'geometries': 'geojson'},
			timeout=3,
		)
		self.assertEqual(route.distance, 1520.4)
		self.assertEqual(route.duration, 240.0)
		self.assertEqual(route.geometry['type'], 'LineString')

	def test_transport_error_is_routing_unavailable(self):
		client = OSRMClient(session=fake_session(error=requests.ConnectionError('refused')))

		with self.assertRaises(RoutingUnavailable):
			client.route([[0, 0], [1, 1]])

	def test_no_route_is_routing_unavailable(self):
		client = OSRMClient(session=fake_session({'code': 'NoRoute', 'message': 'Impossible route'}))

		with self.assertRaises(RoutingUnavailable):
			client.route([[0, 0], [1, 1]])


class DirectionsApiTests(TestCase):
	def setUp(self):
		self.user = User.objects.create_user(email='owner@example.com', password='pass1234', name='Owner')
		self.client = APIClient()
		self.client.force_authenticate(user=self.user)
		customer = Client.objects.create(
			owner=self.user, name='Acme', location={'type': 'Point', 'coordinates': [-99.16, 19.43]}
		)
		self.first = Delivery.objects.create(
			owner=self.user, client=customer, location={'type': 'Point', 'coordinates': [-99.16, 19.43]}
		)
		self.second = Delivery.objects.create(
			owner=self.user, client=customer, location={'type': 'Point', 'coordinates': [-99.15, 19.42]}
		)

	def _patch_client(self, session):
		return patch('directions.views.get_osrm_client', return_value=OSRMClient(session=session))

	def test_route_over_explicit_coordinates(self):
		session = fake_session(OSRM_OK)
		with self._patch_client(session):
			response = self.client.post('/api/directions/', {
				'coordinates': [[-99.16, 19.43], [-99.15, 19.42]],
			}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['stops'], 2)
		self.assertEqual(response.data['distance'], 1520.4)

	def test_route_over_delivery_ids_keeps_given_order(self):
		session = fake_session(OSRM_OK)
		with self._patch_client(session):
			self.client.post('/api/directions/', {
				'delivery_ids': [self.second.id, self.first.id],
			}, format='json')

		url = session.get.call_args[0][0]
		self.assertTrue(url.endswith('/-99.15,19.42;-99.16,19.43'))

	def test_empty_body_uses_all_deliveries(self):
		session = fake_session(OSRM_OK)
		with self._patch_client(session):
			response = self.client.post('/api/directions/', {}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['stops'], 2)

	def test_single_stop_is_rejected(self):
		response = self.client.post('/api/directions/', {'coordinates': [[-99.16, 19.43]]}, format='json')

		self.assertEqual(response.status_code, 400)

	def test_unknown_delivery_id(self):
		response = self.client.post('/api/directions/', {'delivery_ids': [self.first.id, 9999]}, format='json')

		self.assertEqual(response.status_code, 400)

	def test_routing_failure_is_bad_gateway(self):
		with self._patch_client(fake_session(error=requests.Timeout('slow'))):
			response = self.client.post('/api/directions/', {}, format='json')

		self.assertEqual(response.status_code, 502)
		self.assertEqual(response.data['error'], 'routing_unavailable')
