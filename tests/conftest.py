import json
from urllib.parse import urlparse

import pytest
import requests
from requests.adapters import BaseAdapter

from seller_dashboard.db import InMemoryAccountStore
from seller_dashboard.errors import AuthError
from seller_dashboard.state import SessionManager


class FakeAuthBackend:
    """Stands in for POST /api/auth/login"""

    def __init__(self):
        self.calls = []
        self.users = {}
        self.rejected = set()
        self._counter = 0

    def __call__(self, credential, password):
        self.calls.append((credential, password))
        if credential in self.rejected:
            raise AuthError("Invalid email or password")
        self._counter += 1
        response = {"token": f"token-{self._counter}"}
        if credential in self.users:
            response["user"] = self.users[credential]
        return response


class ReloadSpy:
    def __init__(self):
        self.count = 0

    def __call__(self):
        self.count += 1


class FakeAdapter(BaseAdapter):
    """Transport adapter that records requests and replays canned responses"""

    def __init__(self):
        super().__init__()
        self.sent = []
        self.routes = {}

    def add(self, method, path, status=200, body=None, content=None):
        self.routes[(method, path)] = (status, body, content)

    def send(self, request, **kwargs):
        self.sent.append(request)
        path = urlparse(request.url).path
        status, body, content = self.routes.get((request.method, path), (404, {"error": "not found"}, None))

        resp = requests.Response()
        resp.status_code = status
        resp.reason = "OK" if status < 400 else "Error"
        resp.url = request.url
        resp.request = request
        if content is not None:
            resp._content = content
        else:
            resp._content = json.dumps(body).encode()
            resp.headers["Content-Type"] = "application/json"
        return resp

    def close(self):
        pass


@pytest.fixture
def store():
    return InMemoryAccountStore()


@pytest.fixture
def auth_backend():
    return FakeAuthBackend()


@pytest.fixture
def reload_spy():
    return ReloadSpy()


@pytest.fixture
def session(store, auth_backend, reload_spy):
    manager = SessionManager(store, auth_backend, reload=reload_spy)
    manager.initialize()
    return manager


@pytest.fixture
def adapter():
    return FakeAdapter()


@pytest.fixture
def http_session(adapter):
    s = requests.Session()
    s.mount("http://", adapter)
    return s
