from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from changelogs.models import ChangeLog
from deliveries.models import Delivery
from .models import Client


class ClientApiTests(TestCase):
	def setUp(self):
		self.owner = User.objects.create_user(email='owner@example.com', password='pass1234', name='Owner')
		self.other = User.objects.create_user(email='other@example.com', password='pass1234', name='Other')
		self.client = APIClient()
		self.client.force_authenticate(user=self.owner)
		self.body = {
			'name': 'Acme',
			'address': 'Av. Reforma 222',
			'phone': '5550001111',
			'location': {'type': 'Point', 'coordinates': [-99.16, 19.43]},
		}

	def test_create_then_list(self):
		created = self.client.post('/api/clients/', self.body, format='json')
		self.assertEqual(created.status_code, 201)

		item = self.client.get('/api/clients/').data[0]
		for key, value in self.body.items():
			self.assertEqual(item[key], value)

	def test_put_replaces_only_present_fields(self):
		pk = self.client.post('/api/clients/', self.body, format='json').data['id']

		self.client.put(f'/api/clients/{pk}/', {'phone': '5559999999'}, format='json')

		client = Client.objects.get(pk=pk)
		self.assertEqual(client.phone, '5559999999')
		self.assertEqual(client.address, 'Av. Reforma 222')
		self.assertEqual(client.name, 'Acme')

	def test_other_owner_cannot_update_or_delete(self):
		pk = self.client.post('/api/clients/', self.body, format='json').data['id']
		intruder = APIClient()
		intruder.force_authenticate(user=self.other)

		self.assertEqual(intruder.put(f'/api/clients/{pk}/', {'name': 'Stolen'}, format='json').status_code, 404)
		self.assertEqual(intruder.delete(f'/api/clients/{pk}/').status_code, 404)
		self.assertTrue(Client.objects.filter(pk=pk, name='Acme').exists())

	def test_delete_vanished_id_is_not_found(self):
		self.assertEqual(self.client.delete('/api/clients/12345/').status_code, 404)

	def test_delete_logs_cascaded_deliveries(self):
		pk = self.client.post('/api/clients/', self.body, format='json').data['id']
		customer = Client.objects.get(pk=pk)
		first = Delivery.objects.create(owner=self.owner, client=customer, location=self.body['location'])
		second = Delivery.objects.create(owner=self.owner, client=customer, location=self.body['location'])

		self.assertEqual(self.client.delete(f'/api/clients/{pk}/').status_code, 204)

		self.assertFalse(Delivery.objects.filter(client_id=pk).exists())
		logged = ChangeLog.objects.filter(entity_type='deliveries', action='delete')
		self.assertEqual(sorted(logged.values_list('entity_id', flat=True)), sorted([first.pk, second.pk]))
		self.assertEqual(logged.first().changes, {'client': pk})
		self.assertTrue(ChangeLog.objects.filter(entity_type='clients', entity_id=pk, action='delete').exists())
