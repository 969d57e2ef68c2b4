import asyncio
import json

import pandas as pd
import pytest

from bidbazaar.auction.auction_event import ProductType
from bidbazaar.auction.auction_session import AuctionSession, load_checkpoint, save_checkpoint
from bidbazaar.auction.auction_state import AuctionState
from bidbazaar.auction.event_store import AuctionEventStore
from bidbazaar.auction.mystery_effects import EffectType
from bidbazaar.output_writer import write_results

from conftest import RecordingHub, no_sleep


def play_event(session):
    async def scenario():
        await session.create_team("Alpha")
        await session.create_team("Beta")
        p1 = await session.add_product("P1", "First", 100, 50)
        p2 = await session.add_product(
            "P2", "Card", 0, 0, product_type=ProductType.MYSTERY_CARD
        )
        await session.set_current(p1.product_id)
        await session.mark_sold(p1.product_id, "Alpha")
        await session.set_current(p2.product_id)
        await session.mark_sold(p2.product_id, "Beta")
        await session.apply_mystery_effect("Beta", EffectType.STEAL, "Alpha", 30)

    asyncio.run(scenario())


@pytest.fixture
def persistent_session(tmp_path):
    return AuctionSession(
        hub=RecordingHub(),
        event_store=AuctionEventStore(tmp_path / "events.jsonl"),
        checkpoint_path=tmp_path / "state.json",
        results_dir=tmp_path / "output",
        sleep=no_sleep
    )


def test_checkpoint_restores_state(tmp_path, persistent_session):
    play_event(persistent_session)

    restored = load_checkpoint(tmp_path / "state.json")

    assert restored.ledger.get_team("Alpha").points == 20
    assert restored.ledger.get_team("Beta").points == 30
    assert restored.ledger.get_team("Beta").mystery_cards == 0
    assert [p.name for p in restored.catalog.all_products()] == ["P1", "P2"]
    assert restored.to_dict() == persistent_session.state.to_dict()


def test_checkpoint_write_is_atomic(tmp_path):
    path = tmp_path / "state.json"
    save_checkpoint(AuctionState(), path)

    assert path.exists()
    assert not path.with_suffix('.tmp').exists()
    assert json.loads(path.read_text())['state']['teams'] == []


def test_missing_checkpoint(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_checkpoint(tmp_path / "missing.json")


def test_every_command_is_logged(persistent_session):
    play_event(persistent_session)

    events = persistent_session.event_store.load_all_events()

    assert [e.event_type for e in events] == [
        'team_created', 'team_created',
        'product_added', 'product_added',
        'product_live', 'product_sold',
        'product_live', 'product_sold',
        'effect_applied'
    ]
    assert [e.sequence for e in events] == list(range(1, 10))
    assert persistent_session.event_store.get_last_event().details['ownerTeam'] == "Beta"


def test_event_store_resumes_sequence(tmp_path):
    path = tmp_path / "events.jsonl"
    AuctionEventStore(path).append('team_created', {'teamName': "Alpha"})

    event = AuctionEventStore(path).append('team_created', {'teamName': "Beta"})

    assert event.sequence == 2


def test_event_store_skips_corrupt_lines(tmp_path):
    path = tmp_path / "events.jsonl"
    store = AuctionEventStore(path)
    store.append('team_created', {'teamName': "Alpha"})
    with open(path, 'a', encoding='utf-8') as f:
        f.write("not json\n")

    assert len(store.load_all_events()) == 1


def test_event_log_csv_export(tmp_path, persistent_session):
    play_event(persistent_session)

    path = persistent_session.event_store.export_to_csv(tmp_path / "events.csv")
    df = pd.read_csv(path)

    assert len(df) == 9
    assert {'sequence', 'event_type', 'timestamp', 'teamName'} <= set(df.columns)


def test_empty_event_log_exports_nothing(tmp_path):
    store = AuctionEventStore(tmp_path / "events.jsonl")
    assert store.export_to_csv(tmp_path / "events.csv") is None


def test_results_written_on_event_end(tmp_path, persistent_session):
    play_event(persistent_session)
    asyncio.run(persistent_session.end_event())

    standings_files = list((tmp_path / "output").glob("*_standings.csv"))
    assert len(standings_files) == 1

    standings = pd.read_csv(standings_files[0])
    assert list(standings['team_name']) == ["Beta", "Alpha"]
    assert list(standings['rank']) == [1, 2]


def test_write_results(tmp_path, persistent_session):
    play_event(persistent_session)

    paths = write_results(
        persistent_session.state, output_dir=str(tmp_path / "out"), base_filename="final"
    )

    assert paths['standings'].name == "final_standings.csv"
    sales = pd.read_csv(paths['sales'])
    # P1 went back to pending when P2 was opened
    assert list(sales['name']) == ["P2"]
    assert list(sales['winner_team']) == ["Beta"]


def test_write_results_without_teams(tmp_path):
    paths = write_results(AuctionState(), output_dir=str(tmp_path), base_filename="empty")
    standings = pd.read_csv(paths['standings'])
    assert standings.empty
    assert 'team_name' in standings.columns
