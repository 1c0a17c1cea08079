"""
Tests for the requests-based registry client.

The HTTP layer is replaced by a stub session so the tests do not need
a running server.

Run with: python -m pytest tests/test_client.py -v
"""

import json
from datetime import datetime, timezone

import requests

from registry_client import RESOURCES_PATH, ResourceRegistryAPI


def make_response(status_code: int, body=None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = "Test"
    response.url = "http://registry.test"
    response._content = json.dumps(body).encode() if body is not None else b""
    return response


class StubSession:
    """Records requests and replays canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, **kwargs):
        self.requests.append(kwargs)
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_client(*responses):
    session = StubSession(*responses)
    return ResourceRegistryAPI(base_url="http://registry.test/", session=session), session


class TestResourceOperations:

    def test_list_unwraps_envelope_and_sends_filters(self):
        client, session = make_client(make_response(200, {"data": [{"id": "1"}]}))
        after = datetime(2024, 1, 1, tzinfo=timezone.utc)

        resources, error = client.list_resources(search="kit", tag="design", updated_after=after)

        assert error is None
        assert resources == [{"id": "1"}]
        sent = session.requests[0]
        assert sent["method"] == "GET"
        assert sent["url"] == f"http://registry.test{RESOURCES_PATH}"
        assert sent["params"] == {
            "search": "kit",
            "tag": "design",
            "updatedAfter": "2024-01-01T00:00:00+00:00",
        }

    def test_create(self):
        client, session = make_client(make_response(201, {"data": {"id": "1", "name": "x"}}))

        resource, error = client.create_resource({"name": "x"})

        assert error is None
        assert resource == {"id": "1", "name": "x"}
        assert session.requests[0]["method"] == "POST"
        assert session.requests[0]["json"] == {"name": "x"}

    def test_update(self):
        client, session = make_client(make_response(200, {"data": {"id": "1", "version": 2}}))

        resource, error = client.update_resource("1", {"name": "y"})

        assert resource["version"] == 2
        assert session.requests[0]["method"] == "PUT"
        assert session.requests[0]["url"].endswith(f"{RESOURCES_PATH}/1")

    def test_delete_no_content(self):
        client, _ = make_client(make_response(204))

        assert client.delete_resource("1") == (True, None)

    def test_health(self):
        client, session = make_client(make_response(200, {"status": "ok"}))

        data, error = client.health()

        assert data == {"status": "ok"}
        assert session.requests[0]["url"] == "http://registry.test/health"


class TestErrors:

    def test_error_message_comes_from_envelope(self):
        client, _ = make_client(make_response(404, {"error": "Resource not found"}))

        resource, error = client.get_resource("missing")

        assert resource is None
        assert error == {"status_code": 404, "message": "Resource not found"}

    def test_validation_error(self):
        client, _ = make_client(make_response(400, {"error": "name is required"}))

        resource, error = client.create_resource({})

        assert resource is None
        assert error["status_code"] == 400
        assert error["message"] == "name is required"

    def test_network_failure_is_returned_not_raised(self):
        client, _ = make_client(requests.ConnectionError("refused"))

        resources, error = client.list_resources()

        assert resources == []
        assert error["status_code"] is None
        assert "refused" in error["message"]

    def test_delete_failure(self):
        client, _ = make_client(make_response(500, {"error": "Unexpected error"}))

        assert client.delete_resource("1") == (False, {"status_code": 500, "message": "Unexpected error"})

    def test_non_object_error_body(self):
        client, _ = make_client(make_response(502, ["bad", "gateway"]))

        resource, error = client.get_resource("1")

        assert resource is None
        assert error == {"status_code": 502, "message": "['bad', 'gateway']"}


class TestPaths:

    def test_resource_id_is_quoted(self):
        client, session = make_client(make_response(404, {"error": "Resource not found"}))

        client.get_resource("a/b c?d")

        assert session.requests[0]["url"] == f"http://registry.test{RESOURCES_PATH}/a%2Fb%20c%3Fd"
