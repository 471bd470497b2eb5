import asyncio
import json
import threading
import time
import unittest
from unittest import mock

import requests

from backend import SearchKind, ShelterBackend
from config import BackendSettings
from errors import NonSuccessStatus, RequestFailed
from models import GeoPoint

HERE = GeoPoint(35.1587, 129.1604)


def response(status=200, payload=None, body=None):
    resp = requests.Response()
    resp.status_code = status
    resp.encoding = "utf-8"
    if body is None:
        body = json.dumps(payload).encode() if payload is not None else b""
    resp._content = body
    return resp


class TestShelterBackend(unittest.TestCase):
    def setUp(self):
        self.backend = ShelterBackend(BackendSettings(base_url="http://shelters.test/", timeout=5))
        patcher = mock.patch.object(self.backend.session, "request")
        self.request = patcher.start()
        self.addCleanup(patcher.stop)

    def test_nearest_posts_form(self):
        self.request.return_value = response(payload=[
            {"id": 1, "shelterName": "A", "address": "x", "latitude": 35.16, "longitude": 129.16},
        ])
        records = self.backend.nearest_sync(HERE, 5)

        self.request.assert_called_once_with(
            "POST", "http://shelters.test/api/nearest-shelters", timeout=5,
            data={"latitude": 35.1587, "longitude": 129.1604, "limit": 5},
        )
        self.assertEqual(records[0].name, "A")
        self.assertEqual(records[0].location, GeoPoint(35.16, 129.16))

    def test_search_query_string(self):
        self.request.return_value = response(payload=[])
        self.assertEqual(self.backend.search_sync(SearchKind.ADDRESS, "Busan"), [])
        self.request.assert_called_once_with(
            "GET", "http://shelters.test/api/search", timeout=5,
            params={"type": "address", "keyword": "Busan"},
        )

    def test_within_radius(self):
        self.request.return_value = response(payload=[])
        self.backend.within_radius_sync(HERE, 2.5)
        args, kwargs = self.request.call_args
        self.assertEqual(args, ("POST", "http://shelters.test/api/shelters-in-radius"))
        self.assertEqual(kwargs["data"]["radius"], 2.5)

    def test_initialize_returns_text(self):
        self.request.return_value = response(body=b"Data initialized.")
        self.assertEqual(self.backend.initialize_sync(), "Data initialized.")

    def test_shelter_detail_empty_body_means_missing(self):
        self.request.return_value = response(body=b"")
        self.assertIsNone(self.backend.shelter_sync(999))

    def test_shelter_detail_null_json(self):
        self.request.return_value = response(body=b"null")
        self.assertIsNone(self.backend.shelter_sync(999))

    def test_shelter_detail(self):
        self.request.return_value = response(payload={"id": 42, "shelterName": "Hall", "latitude": 35.1, "longitude": 129.1})
        record = self.backend.shelter_sync(42)
        self.assertEqual(record.id, "42")
        self.assertEqual(self.request.call_args[0], ("GET", "http://shelters.test/api/shelter/42"))

    def test_empty_body_for_a_list_is_a_failure(self):
        self.request.return_value = response(body=b"")
        with self.assertRaises(RequestFailed):
            self.backend.nearest_sync(HERE, 10)

    def test_non_success_status(self):
        self.request.return_value = response(status=503)
        with self.assertRaises(NonSuccessStatus) as ctx:
            self.backend.nearest_sync(HERE, 10)
        self.assertEqual(ctx.exception.status_code, 503)

    def test_transport_failure(self):
        self.request.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(RequestFailed):
            self.backend.search_sync(SearchKind.NAME, "school")

    def test_invalid_json(self):
        self.request.return_value = response(body=b"<html>oops</html>")
        with self.assertRaises(RequestFailed):
            self.backend.nearest_sync(HERE, 10)

    def test_non_array_payload(self):
        self.request.return_value = response(payload={"error": "oops"})
        with self.assertRaises(RequestFailed):
            self.backend.nearest_sync(HERE, 10)


class TestAsyncWrappers(unittest.IsolatedAsyncioTestCase):
    async def test_search_runs_off_loop(self):
        backend = ShelterBackend(BackendSettings(base_url="http://shelters.test", timeout=5))
        with mock.patch.object(backend.session, "request", return_value=response(payload=[{"shelterName": "A"}])):
            records = await backend.search(SearchKind.NAME, "A")
        self.assertEqual([r.name for r in records], ["A"])

    async def test_overlapping_calls_take_turns_on_the_session(self):
        backend = ShelterBackend(BackendSettings(base_url="http://shelters.test", timeout=5))
        guard = threading.Lock()
        in_flight = []
        overlaps = []

        def slow_request(method, url, **kwargs):
            with guard:
                in_flight.append(url)
                if len(in_flight) > 1:
                    overlaps.append(url)
            time.sleep(0.02)
            with guard:
                in_flight.remove(url)
            return response(payload=[])

        with mock.patch.object(backend.session, "request", side_effect=slow_request):
            await asyncio.gather(
                backend.search(SearchKind.NAME, "a"),
                backend.nearest(HERE, 5),
                backend.within_radius(HERE, 1),
            )
        self.assertEqual(overlaps, [])


if __name__ == "__main__":
    unittest.main()
