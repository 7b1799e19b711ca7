from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from clients.models import Client
from drivers.models import Driver
from places.models import Place
from .models import Zone

OPEN_RING = [[-99.20, 19.40], [-99.10, 19.40], [-99.10, 19.50], [-99.20, 19.50]]


def point(lat, lng):
	return {'type': 'Point', 'coordinates': [lng, lat]}


class ZoneApiTests(TestCase):
	def setUp(self):
		self.owner = User.objects.create_user(email='owner@example.com', password='pass1234', name='Owner')
		self.other = User.objects.create_user(email='other@example.com', password='pass1234', name='Other')
		self.client = APIClient()
		self.client.force_authenticate(user=self.owner)

	def test_open_ring_is_closed(self):
		response = self.client.post('/api/zones/', {
			'name': 'Centro',
			'description': 'Downtown',
			'coordinates': [OPEN_RING],
		}, format='json')

		self.assertEqual(response.status_code, 201)
		ring = response.data['area']['coordinates'][0]
		self.assertEqual(len(ring), len(OPEN_RING) + 1)
		self.assertEqual(ring[0], ring[-1])
		self.assertEqual(ring[:-1], OPEN_RING)

	def test_closed_ring_round_trips_unchanged(self):
		closed = OPEN_RING + [OPEN_RING[0]]
		self.client.post('/api/zones/', {
			'name': 'Centro',
			'area': {'type': 'Polygon', 'coordinates': [closed]},
		}, format='json')

		zone = self.client.get('/api/zones/').data[0]
		self.assertEqual(zone['area']['coordinates'][0], closed)

	def test_too_few_vertices(self):
		response = self.client.post('/api/zones/', {
			'name': 'Line',
			'coordinates': [[[-99.2, 19.4], [-99.1, 19.4], [-99.2, 19.4]]],
		}, format='json')

		self.assertEqual(response.status_code, 400)

	def test_area_is_required(self):
		response = self.client.post('/api/zones/', {'name': 'Nothing'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertIn('area', response.data['details'])

	def test_area_and_coordinates_together_are_rejected(self):
		response = self.client.post('/api/zones/', {
			'name': 'Both',
			'coordinates': [OPEN_RING],
			'area': {'type': 'Polygon', 'coordinates': [OPEN_RING]},
		}, format='json')

		self.assertEqual(response.status_code, 400)

	def test_delete(self):
		pk = self.client.post('/api/zones/', {'name': 'Centro', 'coordinates': [OPEN_RING]}, format='json').data['id']

		self.assertEqual(self.client.delete(f'/api/zones/{pk}/').status_code, 204)
		self.assertFalse(Zone.objects.filter(pk=pk).exists())

	def test_contents_lists_owned_entities_inside(self):
		pk = self.client.post('/api/zones/', {'name': 'Centro', 'coordinates': [OPEN_RING]}, format='json').data['id']
		inside = Place.objects.create(owner=self.owner, name='In', location=point(19.45, -99.15))
		Place.objects.create(owner=self.owner, name='Out', location=point(19.60, -99.15))
		Place.objects.create(owner=self.other, name='Foreign', location=point(19.45, -99.15))
		customer = Client.objects.create(owner=self.owner, name='Acme', location=point(19.41, -99.19))
		Driver.objects.create(owner=self.owner, name='Parked')

		response = self.client.get(f'/api/zones/{pk}/contents/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['places'], [inside.id])
		self.assertEqual(response.data['clients'], [customer.id])
		self.assertEqual(response.data['drivers'], [])
		self.assertEqual(response.data['deliveries'], [])
