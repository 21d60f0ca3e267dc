"""Pytest fixtures for websession tests.

These fixtures provide stores, request contexts and storage doubles for
unit and integration testing.
"""

from datetime import timedelta

import pytest
import pytest_asyncio

from websession.codec import HMACSigner
from websession.models.config import SessionConfig
from websession.storage.memory import MemoryStorage
from websession.store import SessionStore
from websession.tests.fixtures.storage import FlakyStorage
from websession.transport import SimpleRequestContext


@pytest.fixture
def memory_storage():
    """Fixture: empty MemoryStorage."""
    return MemoryStorage()


@pytest.fixture
def flaky_storage():
    """Fixture: storage whose operations can be made to fail."""
    return FlakyStorage()


@pytest.fixture
def store(flaky_storage):
    """Fixture: SessionStore over FlakyStorage with a short TTL."""
    return SessionStore(
        SessionConfig(expiration=timedelta(minutes=5), storage=flaky_storage)
    )


@pytest.fixture
def signer():
    """Fixture: HMACSigner with a test secret."""
    return HMACSigner(secret="test-secret-key")


@pytest.fixture
def signed_store(flaky_storage, signer):
    """Fixture: SessionStore with HMAC-signed identifiers."""
    return SessionStore(
        SessionConfig(
            storage=flaky_storage,
            sign_key=signer.sign,
            unsign_key=signer.unsign,
        )
    )


@pytest.fixture
def context():
    """Fixture: request context without any identifier."""
    return SimpleRequestContext()


@pytest.fixture
def follow_up():
    """Fixture: build the next request's context from a previous response.

    Mimics a browser sending back the cookies it received.
    """

    def _follow_up(previous: SimpleRequestContext) -> SimpleRequestContext:
        cookies = dict(previous.cookies)
        for cookie in previous.pending_cookies:
            if cookie.is_expired:
                cookies.pop(cookie.name, None)
            else:
                cookies[cookie.name] = cookie.value
        return SimpleRequestContext(cookies=cookies)

    return _follow_up


@pytest_asyncio.fixture
async def fakeredis_client():
    """Create fakeredis client for Redis storage testing.

    Returns:
        fakeredis.aioredis.FakeRedis instance (in-memory Redis emulation)
    """
    import fakeredis.aioredis

    client = fakeredis.aioredis.FakeRedis(decode_responses=False)
    yield client
    await client.flushall()
    await client.aclose()
