from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from changelogs.models import ChangeLog
from .models import Place


def point(lat, lng):
	return {'type': 'Point', 'coordinates': [lng, lat]}


class PlaceApiTests(TestCase):
	def setUp(self):
		self.owner = User.objects.create_user(email='owner@example.com', password='pass1234', name='Owner')
		self.other = User.objects.create_user(email='other@example.com', password='pass1234', name='Other')
		self.client = APIClient()
		self.client.force_authenticate(user=self.owner)

	def _create(self, **overrides):
		body = {
			'name': 'Warehouse',
			'description': 'Main depot',
			'location': point(19.4326, -99.1332),
		}
		body.update(overrides)
		return self.client.post('/api/places/', body, format='json')

	def test_create_then_list_returns_matching_fields(self):
		response = self._create()
		self.assertEqual(response.status_code, 201)

		listing = self.client.get('/api/places/')
		self.assertEqual(listing.status_code, 200)
		self.assertEqual(len(listing.data), 1)
		item = listing.data[0]
		self.assertEqual(item['name'], 'Warehouse')
		self.assertEqual(item['description'], 'Main depot')
		self.assertEqual(item['location'], point(19.4326, -99.1332))
		self.assertEqual(item['owner'], self.owner.id)
		self.assertEqual(item['version'], 1)

	def test_location_is_stored_longitude_first(self):
		self._create()
		place = Place.objects.get()
		self.assertEqual(place.location['coordinates'], [-99.1332, 19.4326])

	def test_missing_required_field(self):
		response = self.client.post('/api/places/', {'name': 'No location'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'validation_error')
		self.assertIn('location', response.data['details'])

	def test_unknown_field_is_rejected(self):
		response = self._create(color='red')

		self.assertEqual(response.status_code, 400)
		self.assertIn('color', response.data['details'])

	def test_out_of_range_coordinates_are_rejected(self):
		response = self._create(location={'type': 'Point', 'coordinates': [200, 10]})

		self.assertEqual(response.status_code, 400)

	def test_put_keeps_absent_fields(self):
		pk = self._create().data['id']

		response = self.client.put(f'/api/places/{pk}/', {'name': 'Renamed'}, format='json')
		self.assertEqual(response.status_code, 200)

		detail = self.client.get(f'/api/places/{pk}/').data
		self.assertEqual(detail['name'], 'Renamed')
		self.assertEqual(detail['description'], 'Main depot')
		self.assertEqual(detail['location'], point(19.4326, -99.1332))
		self.assertEqual(detail['version'], 2)

	def test_stale_version_conflicts(self):
		pk = self._create().data['id']
		self.client.put(f'/api/places/{pk}/', {'name': 'First', 'version': 1}, format='json')

		response = self.client.put(f'/api/places/{pk}/', {'name': 'Second', 'version': 1}, format='json')

		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.data['error'], 'conflict')
		self.assertEqual(Place.objects.get(pk=pk).name, 'First')

	def test_delete_then_gone(self):
		pk = self._create().data['id']

		self.assertEqual(self.client.delete(f'/api/places/{pk}/').status_code, 204)
		self.assertEqual(self.client.get(f'/api/places/{pk}/').status_code, 404)
		self.assertEqual(self.client.get('/api/places/').data, [])

	def test_update_of_vanished_id_is_not_found(self):
		response = self.client.put('/api/places/999/', {'name': 'Ghost'}, format='json')

		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['error'], 'not_found')

	def test_other_owner_cannot_see_update_or_delete(self):
		pk = self._create().data['id']
		intruder = APIClient()
		intruder.force_authenticate(user=self.other)

		self.assertEqual(intruder.get('/api/places/').data, [])
		self.assertEqual(intruder.put(f'/api/places/{pk}/', {'name': 'Mine'}, format='json').status_code, 404)
		self.assertEqual(intruder.delete(f'/api/places/{pk}/').status_code, 404)
		self.assertEqual(Place.objects.get(pk=pk).name, 'Warehouse')

	def test_near_filter_orders_by_distance(self):
		self._create(name='Far', location=point(19.50, -99.10))
		self._create(name='Near', location=point(19.4330, -99.1330))
		self._create(name='Other city', location=point(20.6597, -103.3496))

		response = self.client.get('/api/places/', {'near': '19.4326,-99.1332', 'radius': 20000})

		self.assertEqual([item['name'] for item in response.data], ['Near', 'Far'])
		self.assertLess(response.data[0]['distance_m'], response.data[1]['distance_m'])

	def test_bad_near_parameter(self):
		response = self.client.get('/api/places/', {'near': 'somewhere'})

		self.assertEqual(response.status_code, 400)

	def test_mutations_are_logged(self):
		pk = self._create().data['id']
		self.client.put(f'/api/places/{pk}/', {'name': 'Renamed'}, format='json')
		self.client.delete(f'/api/places/{pk}/')

		actions = list(
			ChangeLog.objects.filter(entity_type='places', entity_id=pk)
			.order_by('id').values_list('action', flat=True)
		)
		self.assertEqual(actions, ['create', 'update', 'delete'])
		update = ChangeLog.objects.get(entity_id=pk, action='update')
		self.assertEqual(update.changes, {'name': 'Renamed'})
