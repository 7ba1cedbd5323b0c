"""Pytest configuration and fixtures."""

import os

# Keep startup from binding real buckets BEFORE any app imports
os.environ["S3_BUCKETS"] = ""
os.environ["S3_AUTO_CREATE_BUCKETS"] = "false"

import hashlib
from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from bucket_gateway.core.config import DEFAULT_ALLOWED_CONTENT_TYPES
from bucket_gateway.main import app
from bucket_gateway.schemas.domain import AdmissionPolicy
from bucket_gateway.services.facade import StorageFacade
from bucket_gateway.storage.contracts import ObjectBody, ObjectInfo, ObjectListing, StorageError
from bucket_gateway.storage.registry import BucketRegistry

API_KEY = "test-secret"
PUBLIC_ADDRESS = "93.184.216.34"


class InMemoryStore:
    """Dict-backed object store following the ObjectStore contract."""

    def __init__(self, name: str = "docs"):
        self.name = name
        self.objects: dict[str, tuple[bytes, ObjectInfo]] = {}
        self.fail_with: Exception | None = None
        self.calls: list[str] = []

    def _check(self, op: str, key: str | None = None) -> None:
        self.calls.append(op)
        if self.fail_with is not None:
            raise StorageError(op=op, bucket=self.name, key=key, message=str(self.fail_with))

    def add(self, key: str, data: bytes, content_type: str = "text/plain") -> ObjectInfo:
        info = ObjectInfo(
            key=key,
            size=len(data),
            etag=hashlib.md5(data).hexdigest(),
            uploaded=datetime(2024, 1, 1, tzinfo=timezone.utc),
            content_type=content_type,
        )
        self.objects[key] = (data, info)
        return info

    def head(self, key):
        self._check("head", key)
        entry = self.objects.get(key)
        return entry[1] if entry else None

    def get(self, key):
        self._check("get", key)
        entry = self.objects.get(key)
        if entry is None:
            return None
        data, info = entry
        return ObjectBody(info=info, chunks=iter([data]))

    def put(self, key, data, length, *, content_type):
        self._check("put", key)
        payload = data.read()
        return self.add(key, payload, content_type).etag

    def delete(self, key):
        self._check("delete", key)
        self.objects.pop(key, None)

    def list(self, *, prefix="", delimiter="/", max_keys=100):
        self._check("list", prefix)
        entries = []
        seen = set()
        for key in sorted(k for k in self.objects if k.startswith(prefix)):
            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                common = prefix + rest.split(delimiter, 1)[0] + delimiter
                if common not in seen:
                    seen.add(common)
                    entries.append(("prefix", common))
            else:
                entries.append(("object", key))
        page = entries[:max_keys]
        return ObjectListing(
            objects=[self.objects[value][1] for kind, value in page if kind == "object"],
            prefixes=[value for kind, value in page if kind == "prefix"],
            truncated=len(entries) > max_keys,
        )

    def bucket_exists(self):
        self._check("bucket_exists")
        return True


def make_policy(max_size: int = 100 * 1024 * 1024, allowed=DEFAULT_ALLOWED_CONTENT_TYPES) -> AdmissionPolicy:
    return AdmissionPolicy(max_size=max_size, allowed_content_types=tuple(allowed))


@pytest.fixture
def store():
    """Empty in-memory store bound as bucket ``docs``."""
    return InMemoryStore("docs")


class FakeUpstream:
    """Programmable remote host for remote-fetch uploads.

    Set ``handler`` to a function taking an ``httpx.Request``.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.handler = lambda request: httpx.Response(404)
        self.transport = httpx.MockTransport(self._dispatch)

    def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def upstream():
    return FakeUpstream()


class FakeResolver:
    """Name resolution for remote fetches without real DNS.

    Hosts not listed in ``records`` resolve to a public address.
    """

    def __init__(self):
        self.records: dict[str, list[str]] = {}
        self.lookups: list[str] = []

    async def __call__(self, host: str) -> list[str]:
        self.lookups.append(host)
        return self.records.get(host, [PUBLIC_ADDRESS])


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def facade(store, upstream, resolver):
    """Facade over ``docs`` with the default admission policy."""
    return StorageFacade(
        BucketRegistry({"docs": store}),
        make_policy(),
        http_client=httpx.AsyncClient(transport=upstream.transport),
        fetch_timeout=5,
        host_resolver=resolver,
    )


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {API_KEY}"}


@pytest.fixture
def client(facade):
    """TestClient with the API key configured and ``facade`` installed."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        app.state.api_key = API_KEY
        app.state.facade = facade
        yield test_client


@pytest.fixture
def policy_factory():
    """Build an AdmissionPolicy; defaults match the application defaults."""
    return make_policy
