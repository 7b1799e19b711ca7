from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from clients.models import Client
from drivers.models import Driver
from .models import Delivery


def point(lat, lng):
	return {'type': 'Point', 'coordinates': [lng, lat]}


class DeliveryApiTests(TestCase):
	def setUp(self):
		self.owner = User.objects.create_user(email='owner@example.com', password='pass1234', name='Owner')
		self.other = User.objects.create_user(email='other@example.com', password='pass1234', name='Other')
		self.client = APIClient()
		self.client.force_authenticate(user=self.owner)

		self.customer = Client.objects.create(
			owner=self.owner, name='Acme', address='Reforma 222', location=point(19.43, -99.16)
		)
		self.driver = Driver.objects.create(owner=self.owner, name='Rosa', vehicle='Van 3')
		self.foreign_client = Client.objects.create(
			owner=self.other, name='Elsewhere', location=point(20.0, -100.0)
		)

	def _create(self, **overrides):
		body = {
			'client': self.customer.id,
			'description': 'Two boxes',
			'location': point(19.42, -99.15),
		}
		body.update(overrides)
		return self.client.post('/api/deliveries/', body, format='json')

	def test_list_embeds_resolved_client_and_driver(self):
		self._create(driver=self.driver.id)

		item = self.client.get('/api/deliveries/').data[0]

		self.assertEqual(item['client']['id'], self.customer.id)
		self.assertEqual(item['client']['name'], 'Acme')
		self.assertEqual(item['client']['address'], 'Reforma 222')
		self.assertEqual(item['driver']['name'], 'Rosa')
		self.assertEqual(item['status'], 'pending')

	def test_unassigned_driver_is_null(self):
		self._create()

		item = self.client.get('/api/deliveries/').data[0]
		self.assertIsNone(item['driver'])

	def test_client_is_required(self):
		response = self.client.post('/api/deliveries/', {'location': point(19.4, -99.1)}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertIn('client', response.data['details'])

	def test_foreign_client_is_rejected(self):
		response = self._create(client=self.foreign_client.id)

		self.assertEqual(response.status_code, 400)
		self.assertIn('client', response.data['details'])

	def test_allowed_transition_chain(self):
		pk = self._create().data['id']

		for new_status in ('assigned', 'in_transit', 'delivered'):
			response = self.client.put(f'/api/deliveries/{pk}/', {'status': new_status}, format='json')
			self.assertEqual(response.status_code, 200, new_status)

		self.assertEqual(Delivery.objects.get(pk=pk).status, 'delivered')

	def test_forbidden_transition(self):
		pk = self._create().data['id']

		response = self.client.put(f'/api/deliveries/{pk}/', {'status': 'delivered'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'invalid_transition')
		self.assertEqual(Delivery.objects.get(pk=pk).status, 'pending')

	def test_terminal_status_only_accepts_itself(self):
		self.assertTrue(Delivery.can_transition('cancelled', 'cancelled'))
		self.assertFalse(Delivery.can_transition('cancelled', 'pending'))
		self.assertFalse(Delivery.can_transition('delivered', 'in_transit'))
		self.assertTrue(Delivery.can_transition('assigned', 'pending'))

	def test_status_filter(self):
		self._create()
		second = self._create().data['id']
		self.client.put(f'/api/deliveries/{second}/', {'status': 'cancelled'}, format='json')

		response = self.client.get('/api/deliveries/', {'status': 'cancelled'})

		self.assertEqual([item['id'] for item in response.data], [second])

	def test_deleting_driver_unassigns_delivery(self):
		pk = self._create(driver=self.driver.id).data['id']
		self.client.delete(f'/api/drivers/{self.driver.id}/')

		self.assertIsNone(Delivery.objects.get(pk=pk).driver)


class EndToEndTests(TestCase):
	def test_register_login_client_delivery_flow(self):
		api = APIClient()
		api.post('/api/auth/register/', {
			'name': 'Grace', 'email': 'grace@example.com', 'password': 'secret123',
		}, format='json')
		login = api.post('/api/auth/login/', {
			'email': 'grace@example.com', 'password': 'secret123',
		}, format='json')
		api.credentials(HTTP_AUTHORIZATION='Bearer ' + login.data['tokens']['access'])

		client_id = api.post('/api/clients/', {
			'name': 'Acme', 'location': point(19.43, -99.16),
		}, format='json').data['id']
		created = api.post('/api/deliveries/', {
			'client': client_id, 'location': point(19.42, -99.15),
		}, format='json')
		self.assertEqual(created.status_code, 201)

		deliveries = api.get('/api/deliveries/').data
		self.assertEqual(len(deliveries), 1)
		self.assertEqual(deliveries[0]['client']['id'], client_id)
		self.assertEqual(deliveries[0]['client']['name'], 'Acme')
