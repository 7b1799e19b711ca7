from django.test import TestCase
from rest_framework.test import APIClient

from .models import User


class AuthFlowTests(TestCase):
	def setUp(self):
		self.client = APIClient()

	def _register(self, email='alan@example.com', password='secret123'):
		return self.client.post('/api/auth/register/', {
			'name': 'Alan',
			'email': email,
			'password': password,
		}, format='json')

	def test_register_returns_user_and_tokens(self):
		response = self._register()

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['user']['email'], 'alan@example.com')
		self.assertIn('access', response.data['tokens'])
		self.assertTrue(User.objects.filter(email='alan@example.com').exists())

	def test_register_rejects_duplicate_email_case_insensitively(self):
		self._register()
		response = self._register(email='ALAN@example.com')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'validation_error')
		self.assertIn('email', response.data['details'])

	def test_login_with_valid_credentials(self):
		self._register()
		response = self.client.post('/api/auth/login/', {
			'email': 'alan@example.com',
			'password': 'secret123',
		}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertIn('refresh', response.data['tokens'])

	def test_login_with_wrong_password(self):
		self._register()
		response = self.client.post('/api/auth/login/', {
			'email': 'alan@example.com',
			'password': 'nope-nope',
		}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'invalid_credentials')

	def test_missing_token_is_rejected_as_unauthenticated(self):
		response = self.client.get('/api/auth/me/')

		self.assertEqual(response.status_code, 401)
		self.assertEqual(response.data['error'], 'not_authenticated')

	def test_invalid_token_is_malformed(self):
		self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-real-token')
		response = self.client.get('/api/places/')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'malformed_token')

	def test_bare_token_header_is_accepted(self):
		access = self._register().data['tokens']['access']
		self.client.credentials(HTTP_AUTHORIZATION=access)
		response = self.client.get('/api/auth/me/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['name'], 'Alan')

	def test_refresh_issues_new_access_token(self):
		refresh = self._register().data['tokens']['refresh']
		response = self.client.post('/api/auth/refresh/', {'refresh': refresh}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertIn('access', response.data)

	def test_refresh_with_garbage_is_malformed(self):
		response = self.client.post('/api/auth/refresh/', {'refresh': 'garbage'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'malformed_token')
