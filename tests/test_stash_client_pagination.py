import unittest

import requests

from stash_client.domain.endpoint import Endpoint
from stash_client.infrastructure.errors import StashClientError
from stash_client.infrastructure.stash_client import StashClient

from fakes import BASE, make_page, make_response, make_session, requested


class TestFetchAll(unittest.TestCase):
    """Tests for walking paginated collections"""

    def client(self, *responses):
        session = make_session(*responses)
        return StashClient(host="stash.example.com", session=session), session

    def test_single_page(self):
        client, session = self.client(make_response(make_page([{"key": "A"}])))

        self.assertEqual(client.projects(), [{"key": "A"}])
        self.assertEqual(session.request.call_count, 1)
        method, url, params, _ = requested(session)
        self.assertEqual(method, "GET")
        self.assertEqual(url, BASE + "projects")
        self.assertIsNone(params)

    def test_concatenates_pages_in_order(self):
        client, session = self.client(
            make_response(make_page([1, 2], start=0, is_last=False, next_page_start=2)),
            make_response(make_page([3, 4], start=2, is_last=False, next_page_start=4)),
            make_response(make_page([5], start=4, is_last=True)),
        )

        self.assertEqual(client.fetch_all("projects"), [1, 2, 3, 4, 5])
        self.assertEqual(session.request.call_count, 3)
        self.assertEqual(requested(session, 1)[2], {"start": 2})
        self.assertEqual(requested(session, 2)[2], {"start": 4})

    def test_offset_from_start_plus_size_without_next_page_start(self):
        client, session = self.client(
            make_response(make_page(["a", "b", "c"], start=10, is_last=False)),
            make_response(make_page(["d"], start=13, is_last=True)),
        )

        self.assertEqual(client.fetch_all("projects"), ["a", "b", "c", "d"])
        self.assertEqual(requested(session, 1)[2], {"start": 13})

    def test_duplicates_are_kept(self):
        client, _ = self.client(
            make_response(make_page(["x"], is_last=False, next_page_start=1)),
            make_response(make_page(["x"], start=1)),
        )
        self.assertEqual(client.fetch_all("projects"), ["x", "x"])

    def test_extra_params_sent_with_every_page(self):
        client, session = self.client(
            make_response(make_page([1], is_last=False, next_page_start=1)),
            make_response(make_page([2], start=1)),
        )

        client.fetch_all("/projects", {"name": "proj"})

        self.assertEqual(requested(session, 0)[2], {"name": "proj"})
        self.assertEqual(requested(session, 1)[2], {"name": "proj", "start": 1})

    def test_endpoint_argument_used_unmodified(self):
        client, session = self.client(make_response(make_page([])))
        endpoint = Endpoint.parse("https://elsewhere.example.com/rest/api/1.0/admin/users?filter=a")

        client.fetch_all(endpoint)

        _, url, params, _ = requested(session)
        self.assertEqual(url, "https://elsewhere.example.com/rest/api/1.0/admin/users")
        self.assertEqual(params, {"filter": "a"})

    def test_failure_mid_pagination_propagates(self):
        client, _ = self.client(
            make_response(make_page([1], is_last=False, next_page_start=1)),
            requests.ConnectionError("connection refused"),
        )
        with self.assertRaises(requests.ConnectionError):
            client.fetch_all("projects")

    def test_http_error_propagates(self):
        client, _ = self.client(make_response({"errors": []}, status_code=401))
        with self.assertRaises(requests.HTTPError):
            client.projects()

    def test_malformed_json_propagates(self):
        response = make_response(text="<html>")
        response.json.side_effect = ValueError("Expecting value")
        client, _ = self.client(response)
        with self.assertRaises(ValueError):
            client.projects()

    def test_empty_page_body(self):
        client, _ = self.client(make_response(None))
        with self.assertRaises(StashClientError):
            client.projects()


if __name__ == '__main__':
    unittest.main()
