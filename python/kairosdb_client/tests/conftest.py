# Copyright (c) 2025 by Terry Greeniaus.
# All rights reserved.
import json

import httpx
import pytest

import kairosdb_client


URL = 'http://kairos.test:8080'


class FakeServer:
    '''
    Routes requests by (method, path) to canned responses or handlers and
    records everything it receives.
    '''
    def __init__(self):
        self.routes   = {}
        self.requests = []

    def route(self, method, path, response):
        self.routes[(method, '/api/v1' + path)] = response

    def bodies(self):
        return [json.loads(r.content) for r in self.requests]

    def __call__(self, request):
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, text='No route for %s' %
                                  request.url.path)
        if callable(response):
            return response(request)
        return response


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def transport(server):
    return httpx.MockTransport(server)


@pytest.fixture
def client(transport):
    c = kairosdb_client.Client(url=URL, transport=transport)
    yield c
    c.close()


@pytest.fixture
def reader(transport):
    c = kairosdb_client.ReadOnlyClient(url=URL, transport=transport)
    yield c
    c.close()
