from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APIClient


class HealthCheckTests(TestCase):
	def setUp(self):
		self.client = APIClient()

	@patch('geodispatch_backend.views._redis_in_use', return_value=True)
	@patch('geodispatch_backend.views.redis.Redis.from_url')
	def test_healthy(self, mock_from_url, mock_in_use):
		mock_from_url.return_value.ping.return_value = True

		response = self.client.get('/health/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['status'], 'healthy')
		self.assertEqual(set(response.data['services']), {'database', 'redis', 'channels', 'celery'})
		self.assertEqual(response.data['services']['redis'], 'healthy')

	@patch('geodispatch_backend.views._redis_in_use', return_value=True)
	@patch('geodispatch_backend.views.redis.Redis.from_url')
	def test_redis_down_is_unavailable(self, mock_from_url, mock_in_use):
		mock_from_url.return_value.ping.side_effect = ConnectionError('refused')

		response = self.client.get('/health/')

		self.assertEqual(response.status_code, 503)
		self.assertTrue(response.data['services']['redis'].startswith('unhealthy'))

	@patch('geodispatch_backend.views.redis.Redis.from_url')
	def test_in_memory_layer_skips_redis(self, mock_from_url):
		mock_from_url.return_value.ping.side_effect = ConnectionError('refused')

		response = self.client.get('/health/')

		self.assertEqual(response.status_code, 200)
		self.assertTrue(response.data['services']['redis'].startswith('skipped'))
		mock_from_url.assert_not_called()
