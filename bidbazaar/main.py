"""
Main CLI entry point for the BidBazaar live auction controller.
"""

import argparse
import logging
import sys
from pathlib import Path

from . import config


def setup_logging(verbose: bool = False):
    """
    Configure logging for the application.

    Args:
        verbose: Enable verbose (DEBUG) logging
    """
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL)
    logging.basicConfig(
        level=level,
        format=config.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='BidBazaar Live Auction Controller',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the auction server on the default host/port
  python -m bidbazaar.main

  # Listen on all interfaces
  python -m bidbazaar.main --host 0.0.0.0 --port 8080

  # Write standings and sales CSVs from the saved state
  python -m bidbazaar.main --export-results

  # Start a new event (clears saved state and event log)
  python -m bidbazaar.main --reset
        """
    )

    parser.add_argument(
        '--host',
        type=str,
        default=config.API_HOST,
        help=f'Host to bind (default: {config.API_HOST})'
    )

    parser.add_argument(
        '--port',
        type=int,
        default=config.API_PORT,
        help=f'Port to bind (default: {config.API_PORT})'
    )

    parser.add_argument(
        '--export-results',
        action='store_true',
        help='Write standings, sales and event log CSVs from the saved state, then exit'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        default=None,
        help=f'Directory for exported CSVs (default: {config.OUTPUT_DIR})'
    )

    parser.add_argument(
        '--reset',
        action='store_true',
        help='Delete the saved state and event log, then exit'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def run_server(args):
    """Serve the auction API until interrupted."""
    import uvicorn

    logger = logging.getLogger(__name__)
    logger.info("="*60)
    logger.info("BidBazaar Live Auction")
    logger.info("="*60)
    logger.info(f"Display and player clients: ws://{args.host}:{args.port}/ws")

    uvicorn.run(
        "bidbazaar.auction.api_server:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level='debug' if args.verbose else 'info'
    )


def run_export(args):
    """Export results from the checkpoint without starting the server."""
    from .auction.auction_session import load_checkpoint
    from .auction.event_store import AuctionEventStore
    from .auction.standings_calculator import determine_winner
    from .output_writer import write_results

    logger = logging.getLogger(__name__)

    try:
        state = load_checkpoint(Path(config.STATE_CHECKPOINT_FILE))
    except FileNotFoundError as e:
        logger.error(f"{e}. Run an event first.")
        sys.exit(1)

    output_dir = args.output_dir or config.OUTPUT_DIR
    paths = write_results(state, output_dir=output_dir)

    events_csv = AuctionEventStore(Path(config.AUCTION_EVENTS_FILE)).export_to_csv(
        Path(output_dir) / "auction_events.csv"
    )

    result = determine_winner(state)
    winner = result['winner']

    logger.info("="*60)
    logger.info("RESULTS")
    logger.info("="*60)
    if winner:
        logger.info(f"Winner: {winner['teamName']} ({winner['points']} points)")
    logger.info(f"Standings: {paths['standings']}")
    logger.info(f"Sales: {paths['sales']}")
    if events_csv:
        logger.info(f"Event log: {events_csv}")
    logger.info("="*60)


def run_reset():
    """Remove the checkpoint and the event log."""
    from .auction.event_store import AuctionEventStore

    logger = logging.getLogger(__name__)

    checkpoint = Path(config.STATE_CHECKPOINT_FILE)
    if checkpoint.exists():
        checkpoint.unlink()
        logger.warning(f"Removed checkpoint: {checkpoint}")

    AuctionEventStore(Path(config.AUCTION_EVENTS_FILE)).clear()


def main(argv=None):
    """Main execution function with mode branching."""
    args = parse_arguments(argv)

    setup_logging(args.verbose)

    if args.reset:
        run_reset()
    elif args.export_results:
        run_export(args)
    else:
        run_server(args)


if __name__ == '__main__':
    main()
