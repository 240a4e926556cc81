"""
Shared test fixtures: a fake requests session routed by (method, path).
"""
import json

import pytest

from hubspot_property_tool.api.hubspot_client import HubSpotAPIClient, BASE_URL


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body
        self.content = b'' if body is None else json.dumps(body).encode('utf-8')

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeSession:
    """
    Stands in for requests.Session.

    routes maps (method, path) to one of:
      - a FakeResponse (returned on every call)
      - a list of FakeResponses/exceptions (consumed one per call)
      - a callable(params, json) returning a FakeResponse
    """

    def __init__(self, routes=None):
        self.headers = {}
        self.routes = routes or {}
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        self.calls.append({'method': method, 'path': path,
                           'params': dict(params or {}), 'json': json})

        handler = self.routes.get((method, path))
        if handler is None:
            return FakeResponse(404, {'message': f'No route for {method} {path}'})
        if isinstance(handler, list):
            response = handler.pop(0)
        elif callable(handler):
            response = handler(params, json)
        else:
            response = handler

        if isinstance(response, Exception):
            raise response
        return response

    def calls_to(self, path):
        return [c for c in self.calls if c['path'] == path]


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return HubSpotAPIClient('test-token', session=session)
