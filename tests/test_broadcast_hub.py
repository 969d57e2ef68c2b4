import asyncio

from bidbazaar.auction.broadcast_hub import BroadcastHub

from conftest import FakeWebSocket


def test_connect_sends_latest_snapshot():
    hub = BroadcastHub()
    hub.latest_snapshot = {'teams': []}
    ws = FakeWebSocket()

    asyncio.run(hub.connect(ws))

    assert ws.accepted
    assert ws.messages == [{'event': 'displayUpdate', 'payload': {'teams': []}}]


def test_broadcast_reaches_every_viewer():
    hub = BroadcastHub()
    viewers = [FakeWebSocket(), FakeWebSocket()]

    async def scenario():
        for ws in viewers:
            await hub.connect(ws)
        return await hub.broadcast('productLive', {'id': 'p1'})

    delivered = asyncio.run(scenario())

    assert delivered == 2
    for ws in viewers:
        assert ws.messages == [{'event': 'productLive', 'payload': {'id': 'p1'}}]


def test_failed_viewer_is_dropped():
    hub = BroadcastHub()
    good = FakeWebSocket()
    bad = FakeWebSocket(fail=True)

    async def scenario():
        await hub.connect(good)
        await hub.connect(bad)
        first = await hub.broadcast('teamsUpdate', [])
        second = await hub.broadcast('teamsUpdate', [])
        return first, second

    first, second = asyncio.run(scenario())

    assert (first, second) == (1, 1)
    assert hub.active_connections == [good]
    assert len(good.messages) == 2


def test_publish_state_sends_snapshot_then_teams():
    hub = BroadcastHub()
    ws = FakeWebSocket()

    async def scenario():
        await hub.connect(ws)
        await hub.publish_state({'showLeaderboard': True}, [{'teamName': 'Alpha'}])

    asyncio.run(scenario())

    assert [m['event'] for m in ws.messages] == ['displayUpdate', 'teamsUpdate']
    assert hub.latest_snapshot == {'showLeaderboard': True}


def test_disconnect_unknown_socket_is_ignored():
    hub = BroadcastHub()
    hub.disconnect(FakeWebSocket())
    assert hub.active_connections == []
