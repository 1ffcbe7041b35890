"""
Tests for the lifecycle manager and session state.
"""

import asyncio
import json
import os
from types import MappingProxyType
from unittest.mock import AsyncMock

import pytest

from relayer.actions import ApiDefinition
from relayer.lifecycle import DEFAULT_REFRESH_SECONDS, LifecycleManager, SessionState


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def api():
    return ApiDefinition(api_name="relayer", api_version="v1", has_secret=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lifecycle(api, secret_store, clock):
    return LifecycleManager(api, secret_store, clock=clock)


class TestSessionState:
    def test_fresh_session_needs_initialization(self):
        session = SessionState()

        assert session.needs_initialization
        assert session.last_refresh is None
        assert dict(session.secret) == {}

    def test_secret_is_read_only(self):
        session = SessionState()
        assert isinstance(session.secret, MappingProxyType)
        with pytest.raises(TypeError):
            session.secret["key"] = "value"


class TestPrepare:
    """Tests for LifecycleManager.prepare()."""

    @pytest.mark.asyncio
    async def test_loads_secret(self, lifecycle, held_secret):
        session = SessionState()

        assert await lifecycle.prepare(session) is True
        assert dict(session.secret) == held_secret
        assert session.secret_id == "relayer/development"

    @pytest.mark.asyncio
    async def test_skips_when_initialized(self, lifecycle):
        session = SessionState(needs_initialization=False)
        assert await lifecycle.prepare(session) is False
        assert dict(session.secret) == {}

    @pytest.mark.asyncio
    async def test_no_secret_api(self):
        api = ApiDefinition(api_name="relayer", api_version="v1")
        secrets = AsyncMock()
        lifecycle = LifecycleManager(api, secrets)

        assert await lifecycle.prepare(SessionState()) is True
        secrets.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous(self, api):
        secrets = AsyncMock()
        secrets.get.return_value = None
        lifecycle = LifecycleManager(api, secrets)
        session = SessionState(secret=MappingProxyType({"password": "old"}))

        await lifecycle.prepare(session)

        assert dict(session.secret) == {"password": "old"}

    @pytest.mark.asyncio
    async def test_loads_environment_file(self, api, secret_store, tmp_path, monkeypatch):
        env_file = tmp_path / "environment.json"
        env_file.write_text(json.dumps({"RELAYER_TEST_FLAG": "loaded"}))
        monkeypatch.setenv("RELAYER_TEST_FLAG", "before")

        lifecycle = LifecycleManager(api, secret_store, environment_file=str(env_file))
        await lifecycle.prepare(SessionState())

        assert os.environ["RELAYER_TEST_FLAG"] == "loaded"


class TestTimeBox:
    """Tests for mark_call_complete()."""

    def test_first_call_clears_flag(self, lifecycle, clock):
        session = SessionState()

        decision = lifecycle.mark_call_complete(session)

        assert decision == "initialization set to false"
        assert not session.needs_initialization
        assert session.last_refresh == clock.now

    def test_within_window(self, lifecycle, clock):
        session = SessionState()
        lifecycle.mark_call_complete(session)
        clock.advance(60)

        decision = lifecycle.mark_call_complete(session)

        assert decision.startswith("initialization not set")
        assert not session.needs_initialization

    def test_window_expired(self, lifecycle, clock):
        session = SessionState()
        lifecycle.mark_call_complete(session)
        clock.advance(DEFAULT_REFRESH_SECONDS + 1)

        assert lifecycle.mark_call_complete(session) == "initialization set to true"
        assert session.needs_initialization

    def test_exactly_at_window_does_not_refresh(self, lifecycle, clock):
        session = SessionState()
        lifecycle.mark_call_complete(session)
        clock.advance(DEFAULT_REFRESH_SECONDS)

        lifecycle.mark_call_complete(session)
        assert not session.needs_initialization

    @pytest.mark.asyncio
    async def test_refresh_after_expiry(self, api, clock):
        secrets = AsyncMock()
        secrets.get.side_effect = [{"v": "1"}, {"v": "2"}]
        lifecycle = LifecycleManager(api, secrets, clock=clock, refresh_seconds=10)
        session = SessionState()

        await lifecycle.prepare(session)
        lifecycle.mark_call_complete(session)
        assert dict(session.secret) == {"v": "1"}

        clock.advance(11)
        lifecycle.mark_call_complete(session)
        await lifecycle.prepare(session)

        assert dict(session.secret) == {"v": "2"}
        assert secrets.get.await_count == 2


class TestReplaceSecret:
    @pytest.mark.asyncio
    async def test_whole_value_swap(self, lifecycle):
        session = SessionState()
        original = {"a": "1"}

        await lifecycle.replace_secret(session, original, secret_id="x/y")
        original["a"] = "mutated"

        assert dict(session.secret) == {"a": "1"}
        assert session.secret_id == "x/y"

    @pytest.mark.asyncio
    async def test_concurrent_swaps_converge(self, lifecycle):
        session = SessionState()
        values = [{"v": str(i)} for i in range(20)]

        await asyncio.gather(*(lifecycle.replace_secret(session, v) for v in values))

        assert dict(session.secret) in values

    def test_owns_secret(self, lifecycle):
        session = SessionState()
        assert lifecycle.owns_secret(session, "relayer/development")
        assert not lifecycle.owns_secret(session, "common/QA")

        session.secret_id = "common/QA"
        assert lifecycle.owns_secret(session, "common/QA")
