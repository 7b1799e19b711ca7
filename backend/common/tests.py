import os
import subprocess
import sys
from pathlib import Path

from django.test import SimpleTestCase

from .utils.geo import calculate_distance, close_ring, make_point, point_in_ring, point_lat_lng

SQUARE = [[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0], [0.0, 0.0]]


class GeoUtilsTests(SimpleTestCase):
	def test_make_point_swaps_to_longitude_first(self):
		point = make_point(20.0, -100.0)

		self.assertEqual(point['coordinates'], [-100.0, 20.0])
		self.assertEqual(point_lat_lng(point), (20.0, -100.0))

	def test_point_lat_lng_without_coordinates(self):
		self.assertIsNone(point_lat_lng(None))
		self.assertIsNone(point_lat_lng({'type': 'Point', 'coordinates': []}))

	def test_close_ring_is_idempotent(self):
		opened = SQUARE[:-1]

		closed = close_ring(opened)

		self.assertEqual(closed, SQUARE)
		self.assertEqual(close_ring(closed), SQUARE)

	def test_point_in_ring(self):
		self.assertTrue(point_in_ring(5.0, 5.0, SQUARE))
		self.assertFalse(point_in_ring(15.0, 5.0, SQUARE))
		self.assertFalse(point_in_ring(5.0, -1.0, SQUARE))

	def test_distance_one_degree_of_latitude(self):
		distance = calculate_distance(0.0, 0.0, 1.0, 0.0)

		self.assertAlmostEqual(distance, 111195, delta=50)


class ExceptionModuleImportTests(SimpleTestCase):
	def test_drf_views_import_cleanly_in_fresh_interpreter(self):
		# The auth classes are resolved while rest_framework.views is still importing
		backend_dir = Path(__file__).resolve().parent.parent
		env = dict(os.environ, DJANGO_SETTINGS_MODULE='geodispatch_backend.settings.test')
		result = subprocess.run(
			[
				sys.executable, '-c',
				'import django; django.setup(); '
				'import rest_framework.decorators; '
				'import geodispatch_backend.urls',
			],
			cwd=backend_dir,
			env=env,
			capture_output=True,
			text=True,
			timeout=120,
		)

		self.assertEqual(result.returncode, 0, result.stderr)
