"""Pytest configuration and fixtures."""

import asyncio
import random
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from numbers_lottery.config import Settings
from numbers_lottery.services.access_policy import AccessPolicy, Identity
from numbers_lottery.services.lottery_service import LotteryLedger, LotteryLimits
from numbers_lottery.storage import json_store
from numbers_lottery.storage.json_store import JsonFileStore
from numbers_lottery.storage.repository import JsonLedgerRepository
from numbers_lottery.storage.serializer import WriteSerializer

TEST_SECRET = "test-secret"


class ScriptedRandom:
    """Returns scripted ``randint`` values first, then falls back to a seeded RNG."""

    def __init__(self, values):
        self._values = list(values)
        self._fallback = random.Random(1234)

    def randint(self, a, b):
        if self._values:
            return self._values.pop(0)
        return self._fallback.randint(a, b)


def make_clock(start=None, step=timedelta(minutes=1)):
    current = [start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)]

    def clock():
        value = current[0]
        current[0] = value + step
        return value

    return clock


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "data" / "lottery.json"


@pytest.fixture
def repository(ledger_path):
    return JsonLedgerRepository(ledger_path, JsonFileStore())


@pytest.fixture
def make_ledger(repository):
    """Build a LotteryLedger over the temp ledger file."""

    def _make(limits=None, rng=None, clock=None, serializer=None):
        return LotteryLedger(
            repository,
            serializer or WriteSerializer(),
            policy=AccessPolicy(),
            limits=limits or LotteryLimits(),
            rng=rng or random.Random(42),
            clock=clock or make_clock(),
        )

    return _make


@pytest.fixture
def slow_writes(monkeypatch):
    """Hold every file opened for writing for 50 ms before its payload is written."""
    real_open = json_store.aiofiles.open

    @asynccontextmanager
    async def slow_open(file, mode="r", **kwargs):
        async with real_open(file, mode=mode, **kwargs) as f:
            if "w" in mode:
                await asyncio.sleep(0.05)
            yield f

    monkeypatch.setattr(json_store.aiofiles, "open", slow_open)


@pytest.fixture
def admin():
    return Identity(id="admin-1", role="admin", email="boss@example.com")


@pytest.fixture
def alice():
    return Identity(id="alice", role="user", email="alice@example.com")


@pytest.fixture
def bob():
    return Identity(id="bob", role="user", email="bob@example.com")


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        LOTTERY_DB_PATH=tmp_path / "data" / "lottery.json",
        LOG_FILE=None,
        SECRET_KEY=TEST_SECRET,
        MAX_TICKETS_PER_DRAW=50,
        MAX_TICKETS_PER_USER=2,
        AUTO_DRAW_ENABLED=False,
    )


def make_token(sub, role=None, email=None, secret=TEST_SECRET, expires_in=timedelta(hours=1)):
    payload = {"sub": sub, "exp": datetime.now(timezone.utc) + expires_in}
    if role is not None:
        payload["role"] = role
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_header(sub, role=None, email=None, **kwargs):
    return {"Authorization": f"Bearer {make_token(sub, role=role, email=email, **kwargs)}"}
