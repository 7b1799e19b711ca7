from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from .models import ChangeLog
from .services import prune_change_logs, record_change
from .tasks import prune_change_logs_task


class ChangeLogTests(TestCase):
	def setUp(self):
		self.user = User.objects.create_user(email='owner@example.com', password='pass1234', name='Owner')
		self.other = User.objects.create_user(email='other@example.com', password='pass1234', name='Other')
		self.client = APIClient()
		self.client.force_authenticate(user=self.user)

	def _age(self, entry, days):
		ChangeLog.objects.filter(pk=entry.pk).update(created_at=timezone.now() - timedelta(days=days))

	def test_list_is_scoped_and_filterable(self):
		record_change(self.user, 'places', 1, 'create', {'name': 'A'})
		record_change(self.user, 'drivers', 2, 'update', {'status': 'busy'})
		record_change(self.other, 'places', 3, 'create')

		everything = self.client.get('/api/logs/')
		self.assertEqual(everything.status_code, 200)
		self.assertEqual([item['entity_id'] for item in everything.data], [2, 1])

		drivers = self.client.get('/api/logs/', {'entity_type': 'drivers'})
		self.assertEqual(len(drivers.data), 1)
		self.assertEqual(drivers.data[0]['changes'], {'status': 'busy'})

		by_id = self.client.get('/api/logs/', {'entity_id': 1})
		self.assertEqual([item['entity_type'] for item in by_id.data], ['places'])

	def test_prune_deletes_only_old_entries(self):
		old = record_change(self.user, 'places', 1, 'create')
		record_change(self.user, 'places', 1, 'update')
		self._age(old, 120)

		self.assertEqual(prune_change_logs(days=90, dry_run=True), 1)
		self.assertEqual(ChangeLog.objects.count(), 2)

		self.assertEqual(prune_change_logs(days=90), 1)
		self.assertEqual(ChangeLog.objects.count(), 1)

	@override_settings(CHANGE_LOG_RETENTION_DAYS=30)
	def test_task_uses_configured_retention(self):
		self._age(record_change(self.user, 'places', 1, 'create'), 45)
		record_change(self.user, 'places', 1, 'update')

		result = prune_change_logs_task.apply()

		self.assertEqual(result.get(), 1)
		self.assertEqual(ChangeLog.objects.count(), 1)

	def test_management_command(self):
		self._age(record_change(self.user, 'zones', 4, 'delete'), 400)
		out = StringIO()

		call_command('prune_change_logs', '--days', '365', stdout=out)

		self.assertIn('Deleted 1 change logs', out.getvalue())
		self.assertFalse(ChangeLog.objects.exists())
