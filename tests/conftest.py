import asyncio

import pytest
from fastapi.testclient import TestClient

from bidbazaar.auction.admin_policy import AdminPolicy
from bidbazaar.auction.api_server import create_app
from bidbazaar.auction.auction_event import ProductType
from bidbazaar.auction.auction_session import AuctionSession
from bidbazaar.auction.auction_state import AuctionState
from bidbazaar.auction.broadcast_hub import BroadcastHub


async def no_sleep(_seconds):
    """Countdown sleep that only yields to the event loop."""
    await asyncio.sleep(0)


class RecordingHub(BroadcastHub):
    """Hub that keeps every broadcast instead of sending it."""

    def __init__(self):
        super().__init__()
        self.events = []

    async def broadcast(self, event, payload):
        self.events.append((event, payload))
        return 0

    def names(self):
        return [event for event, _ in self.events]

    def payloads(self, name):
        return [payload for event, payload in self.events if event == name]


class FakeWebSocket:
    def __init__(self, fail=False):
        self.accepted = False
        self.fail = fail
        self.messages = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("connection closed")
        self.messages.append(data)


@pytest.fixture
def state():
    return AuctionState()


@pytest.fixture
def alpha_beta(state):
    """Teams Alpha and Beta plus a normal and a mystery-card product."""
    state.ledger.create_team("Alpha")
    state.ledger.create_team("Beta")
    p1 = state.catalog.add_product("P1", "First prize", 100, 50)
    p2 = state.catalog.add_product(
        "P2", "A mystery card", 0, 0, product_type=ProductType.MYSTERY_CARD
    )
    return p1, p2


@pytest.fixture
def hub():
    return RecordingHub()


@pytest.fixture
def session(hub):
    return AuctionSession(hub=hub, sleep=no_sleep)


@pytest.fixture
def client(tmp_path):
    session = AuctionSession(sleep=no_sleep)
    app = create_app(
        session=session,
        admin_policy=AdminPolicy("admin", None),
        upload_dir=tmp_path / "uploads"
    )
    with TestClient(app) as test_client:
        yield test_client
