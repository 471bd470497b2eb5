import unittest

from models import GeoPoint, ShelterRecord
from render import directions_url, escape, list_item_model, list_view, popover_model

SHELTER = GeoPoint(35.16, 129.16)
USER = GeoPoint(35.15, 129.15)


class TestEscape(unittest.TestCase):
    def test_escapes_markup(self):
        self.assertEqual(escape("<script>alert('x')</script>"),
                         "&lt;script&gt;alert(&#x27;x&#x27;)&lt;/script&gt;")
        self.assertEqual(escape('A & "B"'), "A &amp; &quot;B&quot;")

    def test_empty(self):
        self.assertEqual(escape(None), "")
        self.assertEqual(escape(""), "")


class TestModels(unittest.TestCase):
    def test_list_item_escapes_and_fills_placeholders(self):
        record = ShelterRecord(id="1", name="<i>Hall</i>", address="", contact_number=None,
                               accommodation_capacity=300, distance_from_user=1.234)
        item = list_item_model(4, record)
        self.assertEqual(item.index, 4)
        self.assertEqual(item.name, "&lt;i&gt;Hall&lt;/i&gt;")
        self.assertEqual(item.address, "No address")
        self.assertEqual(item.contact, "N/A")
        self.assertEqual(item.capacity, "300 people")
        self.assertEqual(item.distance, "1.23km")

    def test_no_distance_before_ranking(self):
        item = list_item_model(0, ShelterRecord(id=None, name="", address="x"))
        self.assertEqual(item.distance, "")
        self.assertEqual(item.name, "Unnamed shelter")

    def test_list_view_counts_and_empty_state(self):
        empty = list_view([])
        self.assertEqual(empty.items, ())
        self.assertEqual(empty.count_label, "0 results")
        self.assertTrue(empty.empty_message)

        view = list_view([ShelterRecord(id="1", name="a", address="b")])
        self.assertEqual(view.count_label, "1 result")
        self.assertEqual(view.empty_message, "")

    def test_popover_link_follows_current_user_location(self):
        popover = popover_model(0, ShelterRecord(id="1", name="a", address="b", location=SHELTER))
        self.assertIn("/link/map/", popover.map_url())
        self.assertIn("/link/to/", popover.map_url(USER))

    def test_popover_without_location_has_no_link(self):
        popover = popover_model(0, ShelterRecord(id="1", name="a", address="b"))
        self.assertEqual(popover.map_url(USER), "")


class TestDirections(unittest.TestCase):
    def test_with_user_location(self):
        self.assertEqual(
            directions_url(SHELTER, USER),
            "https://map.kakao.com/link/to/Shelter,35.16,129.16/from/Current%20location,35.15,129.15",
        )

    def test_without_user_location(self):
        self.assertEqual(directions_url(SHELTER), "https://map.kakao.com/link/map/Shelter,35.16,129.16")


if __name__ == "__main__":
    unittest.main()
