import unittest

from dashboard_generator import SnapshotMapSurface
from directory import ShelterDirectory
from errors import MarkerNotFound
from markers import MarkerRegistry
from models import GeoPoint, ShelterRecord
from render import Popover


def shelter(name, lat=None, lng=None):
    location = GeoPoint(lat, lng) if lat is not None else None
    return ShelterRecord(id=name, name=name, address="", location=location)


class TestMarkerRegistry(unittest.TestCase):
    def setUp(self):
        self.surface = SnapshotMapSurface()
        self.registry = MarkerRegistry(self.surface)
        self.directory = ShelterDirectory([
            shelter("a", 35.1, 129.1), shelter("b", 35.2, 129.2), shelter("c", 35.3, 129.3),
        ])
        self.registry.rebuild(self.directory)

    def test_one_marker_per_record_both_ways(self):
        self.assertEqual(len(self.registry), 3)
        for index in range(3):
            handle = self.registry.marker_for(index)
            self.assertIsNotNone(handle)
            self.assertEqual(self.registry.index_for(handle), index)
            self.assertIsInstance(self.surface.popovers[handle], Popover)

    def test_records_without_location_get_no_marker(self):
        self.directory.load([shelter("a", 35.1, 129.1), shelter("nowhere"), shelter("c", 35.3, 129.3)])
        self.registry.rebuild(self.directory)
        self.assertEqual(len(self.registry), 2)
        self.assertIsNone(self.registry.marker_for(1))
        self.assertEqual(self.registry.index_for(self.registry.marker_for(2)), 2)

    def test_rebuild_leaves_no_stale_markers(self):
        old = {self.registry.marker_for(i) for i in range(3)}
        self.directory.load([shelter("x", 36, 128), shelter("y")])
        self.registry.rebuild(self.directory)
        self.assertEqual(len(self.surface.markers), 1)
        self.assertEqual(len(self.registry), 1)
        self.assertTrue(old.isdisjoint(self.surface.markers))
        for handle in old:
            with self.assertRaises(MarkerNotFound):
                self.registry.index_for(handle)

    def test_open_keeps_single_popover(self):
        for index in (0, 2, 1, 1, 0):
            self.registry.open(index)
            self.assertEqual(self.surface.open_popovers, {self.registry.marker_for(index)})
            self.assertEqual(self.registry.open_index, index)

    def test_open_closes_popovers_opened_behind_its_back(self):
        self.surface.open_popover(self.registry.marker_for(2))
        self.registry.open(0)
        self.assertEqual(self.surface.open_popovers, {self.registry.marker_for(0)})

    def test_open_unknown_index_changes_nothing(self):
        self.registry.open(1)
        with self.assertRaises(MarkerNotFound):
            self.registry.open(7)
        self.assertEqual(self.surface.open_popovers, {self.registry.marker_for(1)})

    def test_find_by_location(self):
        self.assertEqual(self.registry.find_by_location(GeoPoint(35.2, 129.2)), 1)
        self.assertEqual(self.registry.find_by_location(GeoPoint(35.2000000004, 129.2)), 1)
        with self.assertRaises(MarkerNotFound):
            self.registry.find_by_location(GeoPoint(35.2001, 129.2))

    def test_find_by_location_relinks_forgotten_marker(self):
        handle = self.registry.marker_for(2)
        self.registry.forget(2)
        self.assertIsNone(self.registry.marker_for(2))
        self.assertEqual(self.registry.find_by_location(GeoPoint(35.3, 129.3)), 2)
        self.assertEqual(self.registry.marker_for(2), handle)

    def test_clear(self):
        self.registry.open(0)
        self.registry.clear()
        self.assertEqual(len(self.registry), 0)
        self.assertEqual(self.surface.markers, {})
        self.assertEqual(self.surface.open_popovers, set())
        self.assertIsNone(self.registry.open_index)

    def test_click_callback_receives_handle(self):
        clicked = []
        self.registry.rebuild(self.directory, on_click=clicked.append)
        handle = self.registry.marker_for(2)
        self.surface.click(handle)
        self.assertEqual(clicked, [handle])


if __name__ == "__main__":
    unittest.main()
