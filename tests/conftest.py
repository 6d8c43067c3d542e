# tests/conftest.py
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import httpx
import pytest
import pytest_asyncio

from orders.broadcaster import Broadcaster
from orders.config import ReceiverSettings
from orders.stores.order_store import OrderStore
from receiver.api import build_app


class FakeClock:
    """Deterministic clock: 2024-01-01T00:00:00.000Z, then +1s per call."""

    def __init__(self):
        self.calls = 0

    def __call__(self) -> str:
        s = self.calls
        self.calls += 1
        return f"2024-01-01T00:{s // 60:02d}:{s % 60:02d}.000Z"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return OrderStore(clock=clock)


@pytest.fixture
def broadcaster():
    return Broadcaster(queue_max=16)


@pytest.fixture
def settings(tmp_path):
    static = tmp_path / "admin-public"
    static.mkdir()
    (static / "dashboard.html").write_text("<html>dash</html>", encoding="utf-8")
    (static / "app.js").write_text("console.log('hi')", encoding="utf-8")
    return ReceiverSettings(heartbeat_s=0.05, queue_max=16, static_dir=str(static))


@pytest.fixture
def app(store, broadcaster, settings, clock):
    return build_app(store, broadcaster, settings, clock=clock)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
