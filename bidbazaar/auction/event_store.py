"""
Append-only event log for auction history.

Uses JSONL (JSON Lines) format where each line is a complete JSON object
representing a single admin action (team created, product sold, mystery
effect applied, ...). The log is an audit trail: the authoritative state
lives in the checkpoint written by the session.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .auction_event import AuctionEvent

logger = logging.getLogger(__name__)


class AuctionEventStore:
    """Append-only event log for auction history."""

    def __init__(self, filepath: Path):
        """
        Initialize event store.

        Args:
            filepath: Path to JSONL file for event storage
        """
        self.filepath = Path(filepath)
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        self._next_sequence = self.get_event_count() + 1

    def append(self, event_type: str, details: Dict) -> AuctionEvent:
        """
        Record an action at the end of the log.

        Args:
            event_type: Kind of action (e.g. 'product_sold')
            details: JSON-serializable description of the action

        Returns:
            The AuctionEvent that was written
        """
        event = AuctionEvent(
            sequence=self._next_sequence,
            event_type=event_type,
            details=details,
            timestamp=datetime.now()
        )

        with open(self.filepath, 'a', encoding='utf-8') as f:
            f.write(event.to_json() + '\n')

        self._next_sequence += 1
        logger.debug(f"Appended event #{event.sequence}: {event_type}")
        return event

    def load_all_events(self) -> List[AuctionEvent]:
        """
        Load complete event history from file.

        Returns:
            List of AuctionEvents in the order they were written

        Returns empty list if file doesn't exist.
        """
        if not self.filepath.exists():
            logger.debug(f"Event store file does not exist: {self.filepath}")
            return []

        events = []
        with open(self.filepath, 'r', encoding='utf-8') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    events.append(AuctionEvent.from_json(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.error(
                        f"Failed to parse event at line {line_num}: {e}\n"
                        f"Line content: {line}"
                    )
                    # Continue processing remaining events

        logger.info(f"Loaded {len(events)} events from {self.filepath}")
        return events

    def get_event_count(self) -> int:
        """Number of events in the store, without parsing them."""
        if not self.filepath.exists():
            return 0

        with open(self.filepath, 'r', encoding='utf-8') as f:
            return sum(1 for line in f if line.strip())

    def get_last_event(self) -> Optional[AuctionEvent]:
        """
        Get the most recent event.

        Returns:
            Last AuctionEvent or None if empty
        """
        if not self.filepath.exists():
            return None

        with open(self.filepath, 'r', encoding='utf-8') as f:
            lines = f.readlines()

        for line in reversed(lines):
            line = line.strip()
            if line:
                try:
                    return AuctionEvent.from_json(line)
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.error(f"Failed to parse last event: {e}")
                    continue

        return None

    def export_to_csv(self, output_path: Path) -> Optional[Path]:
        """
        Export event log to CSV format for analysis.

        Each detail key becomes its own column.

        Args:
            output_path: Path for CSV output file

        Returns:
            The written path, or None if the log is empty
        """
        events = self.load_all_events()
        if not events:
            logger.warning("No events to export")
            return None

        rows = []
        for event in events:
            row = {
                'sequence': event.sequence,
                'event_type': event.event_type,
                'timestamp': event.timestamp.isoformat()
            }
            for key, value in event.details.items():
                row[key] = json.dumps(value) if isinstance(value, (dict, list)) else value
            rows.append(row)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(rows).to_csv(output_path, index=False)

        logger.info(f"Exported {len(events)} events to {output_path}")
        return output_path

    def clear(self) -> None:
        """
        Clear all events from the store.

        WARNING: This deletes the event log file. Use with caution.
        """
        if self.filepath.exists():
            self.filepath.unlink()
            logger.warning(f"Cleared event store: {self.filepath}")
        self._next_sequence = 1
