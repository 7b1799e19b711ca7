from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from changelogs.models import ChangeLog
from clients.models import Client
from deliveries.models import Delivery
from . import services
from .models import Driver


class DriverApiTests(TestCase):
	def setUp(self):
		self.owner = User.objects.create_user(email='owner@example.com', password='pass1234', name='Owner')
		self.other = User.objects.create_user(email='other@example.com', password='pass1234', name='Other')
		self.client = APIClient()
		self.client.force_authenticate(user=self.owner)

	def _create(self, **overrides):
		body = {'name': 'Rosa', 'vehicle': 'Van 3'}
		body.update(overrides)
		return self.client.post('/api/drivers/', body, format='json')

	def test_defaults(self):
		data = self._create().data

		self.assertEqual(data['capacity'], 10)
		self.assertEqual(data['status'], 'available')
		self.assertEqual(data['current_location'], {'type': 'Point', 'coordinates': [0.0, 0.0]})
		self.assertIsNone(data['last_location_update'])

	def test_invalid_status_is_rejected(self):
		response = self._create(status='asleep')

		self.assertEqual(response.status_code, 400)
		self.assertIn('status', response.data['details'])

	def test_status_filter(self):
		self._create(name='Idle', status='offline')
		self._create(name='Ready')

		response = self.client.get('/api/drivers/', {'status': 'offline'})

		self.assertEqual([item['name'] for item in response.data], ['Idle'])

	@patch('drivers.services.publish_driver_location')
	def test_location_change_is_published_after_commit(self, mock_publish):
		pk = self._create().data['id']

		with self.captureOnCommitCallbacks(execute=True):
			response = self.client.put(f'/api/drivers/{pk}/', {
				'current_location': {'type': 'Point', 'coordinates': [-100.0, 20.0]},
			}, format='json')

		self.assertEqual(response.status_code, 200)
		mock_publish.assert_called_once_with(pk, 20.0, -100.0)
		self.assertIsNotNone(Driver.objects.get(pk=pk).last_location_update)

	@patch('drivers.services.publish_driver_location')
	def test_update_without_location_is_not_published(self, mock_publish):
		pk = self._create().data['id']

		with self.captureOnCommitCallbacks(execute=True):
			self.client.put(f'/api/drivers/{pk}/', {'status': 'busy'}, format='json')

		mock_publish.assert_not_called()

	@patch('drivers.services.publish_driver_location')
	def test_location_endpoint_persists_and_publishes(self, mock_publish):
		pk = self._create().data['id']

		with self.captureOnCommitCallbacks(execute=True):
			response = self.client.post(f'/api/drivers/{pk}/location/', {'lat': 20.0, 'lng': -100.0}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['current_location']['coordinates'], [-100.0, 20.0])
		self.assertEqual(response.data['version'], 2)
		mock_publish.assert_called_once_with(pk, 20.0, -100.0)
		self.assertTrue(
			ChangeLog.objects.filter(entity_type='drivers', entity_id=pk, action='update').exists()
		)

	def test_location_endpoint_validates_range(self):
		pk = self._create().data['id']

		response = self.client.post(f'/api/drivers/{pk}/location/', {'lat': 95, 'lng': 0}, format='json')

		self.assertEqual(response.status_code, 400)

	@patch('realtime.registry.SessionRegistry.publish', side_effect=RuntimeError('layer down'))
	def test_relay_failure_does_not_fail_the_write(self, mock_publish):
		pk = self._create().data['id']

		with self.captureOnCommitCallbacks(execute=True):
			response = self.client.post(f'/api/drivers/{pk}/location/', {'lat': 1.5, 'lng': 2.5}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(Driver.objects.get(pk=pk).current_location['coordinates'], [2.5, 1.5])

	@patch('drivers.services.publish_driver_location')
	def test_location_write_bumps_version_under_lock(self, mock_publish):
		pk = self._create().data['id']
		stale = Driver.objects.get(pk=pk)

		response = self.client.put(f'/api/drivers/{pk}/', {'status': 'busy', 'version': 1}, format='json')
		self.assertEqual(response.data['version'], 2)

		moved = services.update_driver_location(stale, 20.0, -100.0)

		self.assertEqual(moved.version, 3)
		self.assertEqual(moved.status, 'busy')
		self.assertEqual(Driver.objects.get(pk=pk).version, 3)
		conflict = self.client.put(f'/api/drivers/{pk}/', {'status': 'offline', 'version': 2}, format='json')
		self.assertEqual(conflict.status_code, 409)

	@patch('drivers.services.publish_driver_location')
	def test_foreign_driver_is_not_found(self, mock_publish):
		pk = self._create().data['id']
		intruder = APIClient()
		intruder.force_authenticate(user=self.other)

		with self.captureOnCommitCallbacks(execute=True):
			self.assertEqual(intruder.put(f'/api/drivers/{pk}/', {'name': 'Stolen'}, format='json').status_code, 404)
			self.assertEqual(
				intruder.post(f'/api/drivers/{pk}/location/', {'lat': 1.0, 'lng': 2.0}, format='json').status_code,
				404,
			)
			self.assertEqual(intruder.delete(f'/api/drivers/{pk}/').status_code, 404)

		driver = Driver.objects.get(pk=pk)
		self.assertEqual(driver.name, 'Rosa')
		self.assertEqual(driver.current_location['coordinates'], [0.0, 0.0])
		mock_publish.assert_not_called()

	def test_delete_logs_unassigned_deliveries(self):
		pk = self._create().data['id']
		customer = Client.objects.create(
			owner=self.owner, name='Acme', location={'type': 'Point', 'coordinates': [-99.16, 19.43]}
		)
		delivery = Delivery.objects.create(
			owner=self.owner, client=customer, driver_id=pk, status='assigned',
			location={'type': 'Point', 'coordinates': [-99.15, 19.42]},
		)

		self.assertEqual(self.client.delete(f'/api/drivers/{pk}/').status_code, 204)

		delivery.refresh_from_db()
		self.assertIsNone(delivery.driver_id)
		entry = ChangeLog.objects.get(entity_type='deliveries', entity_id=delivery.pk)
		self.assertEqual(entry.action, 'update')
		self.assertEqual(entry.changes, {'driver': None})
