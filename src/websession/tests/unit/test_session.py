"""Unit tests for the Session handle.

Tests the key/value API, the save/destroy/regenerate state machine and
failure behavior, using FlakyStorage to observe and break backend calls.
"""

from datetime import timedelta

import pytest

from websession.errors import SerializationError, SessionClosedError, StorageError
from websession.models.config import SessionConfig
from websession.session import SessionState
from websession.store import SessionStore
from websession.transport import SimpleRequestContext


@pytest.mark.asyncio
class TestKeyValueApi:
    """Test get/set/delete/keys."""

    async def test_get_missing_returns_default(self, store, context):
        session = await store.get(context)

        assert session.get("missing") is None
        assert session.get("missing", "fallback") == "fallback"

    async def test_set_and_get(self, store, context):
        session = await store.get(context)

        session.set("name", "john")

        assert session.get("name") == "john"
        assert "name" in session
        assert len(session) == 1
        assert session.modified is True

    async def test_set_non_string_key(self, store, context):
        session = await store.get(context)

        with pytest.raises(TypeError, match="keys must be strings"):
            session.set(1, "one")  # type: ignore[arg-type]

    async def test_delete(self, store, context):
        session = await store.get(context)
        session.set("name", "john")

        session.delete("name")

        assert session.get("name") is None
        assert session.keys() == []

    async def test_delete_missing_is_noop(self, store, context):
        session = await store.get(context)

        session.delete("missing")

        assert session.modified is False

    async def test_keys_insertion_order_snapshot(self, store, context):
        session = await store.get(context)
        session.set("b", 1)
        session.set("a", 2)

        keys = session.keys()
        session.set("c", 3)

        assert keys == ["b", "a"]
        assert session.keys() == ["b", "a", "c"]

    async def test_to_dict_is_copy(self, store, context):
        session = await store.get(context)
        session.set("a", 1)

        snapshot = session.to_dict()
        snapshot["b"] = 2

        assert session.keys() == ["a"]


@pytest.mark.asyncio
class TestExpiry:
    """Test per-session expiry override."""

    async def test_default_expiry(self, store, context):
        session = await store.get(context)

        assert session.expiry == timedelta(minutes=5)

    async def test_set_expiry_applies_on_save(self, store, context, flaky_storage):
        session = await store.get(context)

        session.set_expiry(timedelta(seconds=30))
        await session.save()

        assert flaky_storage.ttls[session.id] == timedelta(seconds=30)

    async def test_set_expiry_must_be_positive(self, store, context):
        session = await store.get(context)

        with pytest.raises(ValueError, match="positive"):
            session.set_expiry(timedelta(0))


@pytest.mark.asyncio
class TestSave:
    """Test save()."""

    async def test_save_persists_and_sets_cookie(self, store, context, flaky_storage):
        session = await store.get(context)
        session.set("name", "john")

        await session.save()

        assert session.state is SessionState.SAVED
        assert await flaky_storage.get(session.id) == b'{"name":"john"}'
        cookie = context.response_cookies["session_id"]
        assert cookie.value == session.id
        assert cookie.max_age == 300
        assert cookie.path == "/"
        assert cookie.same_site == "lax"

    async def test_save_unmodified_session_still_writes(
        self, store, context, flaky_storage
    ):
        """Test saving refreshes TTL even without changes."""
        session = await store.get(context)

        await session.save()

        assert flaky_storage.operations("set") == [session.id]

    async def test_in_place_change_persisted_by_save(self, store, follow_up):
        first = SimpleRequestContext()
        session = await store.get(first)
        session.set("cart", [])
        await session.save()

        second = follow_up(first)
        session = await store.get(second)
        session.get("cart").append("apple")
        assert session.modified is False
        await session.save()

        assert (await store.get(follow_up(second))).get("cart") == ["apple"]

    async def test_save_storage_failure_leaves_session_active(
        self, store, context, flaky_storage
    ):
        session = await store.get(context)
        session.set("name", "john")
        flaky_storage.fail_on.add("set")

        with pytest.raises(StorageError) as exc_info:
            await session.save()

        assert exc_info.value.operation == "set"
        assert session.state is SessionState.ACTIVE
        assert session.get("name") == "john"
        assert context.response_cookies == {}

        flaky_storage.fail_on.clear()
        await session.save()
        assert session.state is SessionState.SAVED

    async def test_save_unencodable_value(self, store, context, flaky_storage):
        session = await store.get(context)
        session.set("bad", object())

        with pytest.raises(SerializationError):
            await session.save()

        assert session.state is SessionState.ACTIVE
        assert flaky_storage.operations("set") == []

        session.delete("bad")
        await session.save()
        assert session.state is SessionState.SAVED

    async def test_session_only_cookie(self, flaky_storage, context):
        store = SessionStore(
            SessionConfig(storage=flaky_storage, cookie_session_only=True)
        )
        session = await store.get(context)

        await session.save()

        cookie = context.response_cookies["session_id"]
        assert cookie.max_age is None
        assert cookie.expires is None

    async def test_cookie_attributes(self, flaky_storage, context):
        store = SessionStore(
            SessionConfig(
                storage=flaky_storage,
                key_lookup="cookie:sid",
                cookie_domain="example.com",
                cookie_path="/app",
                cookie_secure=True,
                cookie_http_only=True,
                cookie_same_site="Strict",
            )
        )
        session = await store.get(context)

        await session.save()

        cookie = context.response_cookies["sid"]
        assert cookie.domain == "example.com"
        assert cookie.path == "/app"
        assert cookie.secure is True
        assert cookie.http_only is True
        assert cookie.same_site == "strict"

    async def test_header_source_emits_no_cookie(self, flaky_storage):
        store = SessionStore(
            SessionConfig(storage=flaky_storage, key_lookup="header:X-Session-ID")
        )
        context = SimpleRequestContext()
        session = await store.get(context)

        await session.save()

        assert context.response_cookies == {}
        assert await flaky_storage.get(session.id) is not None


@pytest.mark.asyncio
class TestDestroy:
    """Test destroy()."""

    async def test_destroy_removes_entry_and_data(self, store, follow_up, flaky_storage):
        first = SimpleRequestContext()
        session = await store.get(first)
        session.set("name", "john")
        await session.save()

        context = follow_up(first)
        session = await store.get(context)
        await session.destroy()

        assert session.state is SessionState.DESTROYED
        assert session.keys() == []
        assert await flaky_storage.get(session.id) is None
        assert context.response_cookies["session_id"].is_expired

    async def test_destroy_twice_is_noop(self, store, context, flaky_storage):
        session = await store.get(context)

        await session.destroy()
        await session.destroy()

        assert flaky_storage.operations("delete") == [session.id]
        assert await flaky_storage.get(session.id) is None

    async def test_destroy_failure_leaves_session_active(
        self, store, context, flaky_storage
    ):
        session = await store.get(context)
        session.set("name", "john")
        flaky_storage.fail_on.add("delete")

        with pytest.raises(StorageError):
            await session.destroy()

        assert session.state is SessionState.ACTIVE
        assert session.get("name") == "john"

    async def test_destroy_after_save_raises(self, store, context):
        session = await store.get(context)
        await session.save()

        with pytest.raises(SessionClosedError):
            await session.destroy()


@pytest.mark.asyncio
class TestRegenerate:
    """Test regenerate() and reset()."""

    async def test_regenerate_persisted_session(self, store, follow_up, flaky_storage):
        first = SimpleRequestContext()
        session = await store.get(first)
        session.set("name", "john")
        await session.save()
        old_id = session.id

        session = await store.get(follow_up(first))
        await session.regenerate()

        assert session.id != old_id
        assert session.get("name") == "john"
        assert session.fresh is False
        assert session.modified is True
        assert flaky_storage.operations("delete") == [old_id]
        assert await flaky_storage.get(old_id) is None

    async def test_regenerate_fresh_session_skips_delete(
        self, store, context, flaky_storage
    ):
        session = await store.get(context)
        old_id = session.id

        await session.regenerate()

        assert session.id != old_id
        assert flaky_storage.operations("delete") == []

    async def test_regenerate_after_save_raises(self, store, context, flaky_storage):
        """Test a saved handle cannot rotate; the persisted entry is untouched."""
        session = await store.get(context)
        await session.save()

        with pytest.raises(SessionClosedError):
            await session.regenerate()

        assert await flaky_storage.get(session.id) is not None

    async def test_regenerate_delete_failure_keeps_old_id(
        self, store, follow_up, flaky_storage
    ):
        first = SimpleRequestContext()
        session = await store.get(first)
        await session.save()

        session = await store.get(follow_up(first))
        old_id = session.id
        flaky_storage.fail_on.add("delete")

        with pytest.raises(StorageError):
            await session.regenerate()

        assert session.id == old_id

    async def test_reset_clears_data_and_rotates(self, store, follow_up, flaky_storage):
        first = SimpleRequestContext()
        session = await store.get(first)
        session.set("name", "john")
        session.set_expiry(timedelta(seconds=10))
        await session.save()
        old_id = session.id

        session = await store.get(follow_up(first))
        await session.reset()

        assert session.id != old_id
        assert session.keys() == []
        assert session.expiry == timedelta(minutes=5)
        assert await flaky_storage.get(old_id) is None


@pytest.mark.asyncio
class TestClosedSession:
    """Test behavior after termination."""

    async def test_read_accessors_still_work(self, store, context):
        session = await store.get(context)
        session.set("name", "john")
        await session.save()

        assert session.get("name") == "john"
        assert session.keys() == ["name"]
        assert session.fresh is True
        assert session.id
        assert session.active is False

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda s: s.set("a", 1),
            lambda s: s.delete("name"),
            lambda s: s.set_expiry(timedelta(seconds=1)),
        ],
    )
    async def test_sync_mutators_raise(self, store, context, mutate):
        session = await store.get(context)
        await session.save()

        with pytest.raises(SessionClosedError, match="already saved"):
            mutate(session)

    async def test_async_mutators_raise_after_destroy(self, store, context):
        session = await store.get(context)
        await session.destroy()

        for operation in (session.save, session.regenerate, session.reset):
            with pytest.raises(SessionClosedError, match="already destroyed"):
                await operation()

    async def test_save_twice_raises(self, store, context):
        session = await store.get(context)
        await session.save()

        with pytest.raises(SessionClosedError):
            await session.save()
