import pytest

from bidbazaar import config
from bidbazaar.auction.auction_state import AuctionState
from bidbazaar.auction.auction_session import save_checkpoint
from bidbazaar.auction.event_store import AuctionEventStore
from bidbazaar.main import main, parse_arguments


@pytest.fixture
def data_paths(tmp_path, monkeypatch):
    checkpoint = tmp_path / "auction_state.json"
    events = tmp_path / "events.jsonl"
    monkeypatch.setattr(config, 'STATE_CHECKPOINT_FILE', str(checkpoint))
    monkeypatch.setattr(config, 'AUCTION_EVENTS_FILE', str(events))
    return checkpoint, events


def test_default_arguments():
    args = parse_arguments([])
    assert args.host == config.API_HOST
    assert args.port == config.API_PORT
    assert not args.export_results
    assert not args.reset


def test_export_results(tmp_path, data_paths):
    checkpoint, events = data_paths
    state = AuctionState()
    state.ledger.create_team("Alpha")
    state.ledger.credit("Alpha", 15)
    save_checkpoint(state, checkpoint)
    AuctionEventStore(events).append('team_created', {'teamName': "Alpha"})

    output_dir = tmp_path / "out"
    main(['--export-results', '--output-dir', str(output_dir)])

    assert len(list(output_dir.glob("*_standings.csv"))) == 1
    assert len(list(output_dir.glob("*_sales.csv"))) == 1
    assert (output_dir / "auction_events.csv").exists()


def test_export_without_checkpoint_exits(tmp_path, data_paths):
    with pytest.raises(SystemExit) as excinfo:
        main(['--export-results', '--output-dir', str(tmp_path / "out")])
    assert excinfo.value.code == 1


def test_reset_removes_saved_state(data_paths):
    checkpoint, events = data_paths
    save_checkpoint(AuctionState(), checkpoint)
    AuctionEventStore(events).append('team_created', {'teamName': "Alpha"})

    main(['--reset'])

    assert not checkpoint.exists()
    assert not events.exists()
