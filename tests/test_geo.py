import unittest

from geo import bounding_box, distance_km, within_radius
from models import GeoPoint

SEOUL_CITY_HALL = GeoPoint(37.5665, 126.9780)
GANGNAM_STATION = GeoPoint(37.4979, 127.0276)


class TestDistance(unittest.TestCase):
    def test_zero_for_identical_points(self):
        self.assertEqual(distance_km(SEOUL_CITY_HALL, SEOUL_CITY_HALL), 0.0)

    def test_symmetric(self):
        self.assertAlmostEqual(
            distance_km(SEOUL_CITY_HALL, GANGNAM_STATION),
            distance_km(GANGNAM_STATION, SEOUL_CITY_HALL),
            places=9,
        )

    def test_city_hall_to_gangnam(self):
        self.assertAlmostEqual(distance_km(SEOUL_CITY_HALL, GANGNAM_STATION), 8.79, delta=0.1)

    def test_one_degree_of_latitude(self):
        d = distance_km(GeoPoint(0, 0), GeoPoint(1, 0))
        self.assertAlmostEqual(d, 111.19, delta=0.05)

    def test_antimeridian(self):
        d = distance_km(GeoPoint(0, 179.5), GeoPoint(0, -179.5))
        self.assertAlmostEqual(d, 111.19, delta=0.05)

    def test_within_radius(self):
        self.assertTrue(within_radius(SEOUL_CITY_HALL, GANGNAM_STATION, 10))
        self.assertFalse(within_radius(SEOUL_CITY_HALL, GANGNAM_STATION, 5))


class TestBoundingBox(unittest.TestCase):
    def test_empty(self):
        self.assertIsNone(bounding_box([]))

    def test_corners(self):
        sw, ne = bounding_box([SEOUL_CITY_HALL, GANGNAM_STATION, GeoPoint(37.6, 126.9)])
        self.assertEqual(sw, GeoPoint(37.4979, 126.9))
        self.assertEqual(ne, GeoPoint(37.6, 127.0276))


if __name__ == "__main__":
    unittest.main()
