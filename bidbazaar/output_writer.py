"""
Generate CSV output with final auction results.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from . import config
from .auction.auction_event import ProductStatus
from .auction.auction_state import AuctionState

logger = logging.getLogger(__name__)


class OutputWriter:
    """Writes standings and sales to CSV files."""

    def __init__(self, output_dir: str = None):
        """
        Initialize the output writer.

        Args:
            output_dir: Directory to write output files (default from config)
        """
        self.output_dir = Path(output_dir or config.OUTPUT_DIR)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def prepare_standings(self, state: AuctionState) -> pd.DataFrame:
        """
        Build the final standings table.

        Args:
            state: Auction state to report on

        Returns:
            DataFrame with rank, team_name, points, mystery_cards,
            products_won and won_products, sorted by points descending
            (ties keep team creation order)
        """
        catalog = state.catalog.products
        rows = []
        for team in state.ledger.teams.values():
            won_names = [
                catalog[pid].name for pid in team.products_won if pid in catalog
            ]
            rows.append({
                'team_name': team.team_name,
                'points': team.points,
                'mystery_cards': team.mystery_cards,
                'products_won': len(team.products_won),
                'won_products': '; '.join(won_names)
            })

        columns = ['rank', 'team_name', 'points', 'mystery_cards', 'products_won', 'won_products']
        if not rows:
            return pd.DataFrame(columns=columns)

        df = pd.DataFrame(rows)
        # Stable sort keeps creation order among tied teams
        df = df.sort_values('points', ascending=False, kind='mergesort').reset_index(drop=True)
        df.insert(0, 'rank', range(1, len(df) + 1))

        return df[columns]

    def prepare_sales(self, state: AuctionState) -> pd.DataFrame:
        """
        Build the table of sold products in creation order.

        Returns:
            DataFrame with product_id, name, product_type, is_mystery,
            base_money_price, point_value and winner_team
        """
        rows = [
            {
                'product_id': p.product_id,
                'name': p.name,
                'product_type': p.product_type.value,
                'is_mystery': p.is_mystery_item,
                'base_money_price': p.base_money_price,
                'point_value': p.point_value,
                'winner_team': p.winner_team
            }
            for p in state.catalog.all_products()
            if p.status == ProductStatus.SOLD
        ]

        columns = [
            'product_id', 'name', 'product_type', 'is_mystery',
            'base_money_price', 'point_value', 'winner_team'
        ]
        return pd.DataFrame(rows, columns=columns)

    def write_csv(self, df: pd.DataFrame, filename: str) -> Path:
        """
        Write DataFrame to CSV file.

        Args:
            df: DataFrame to write
            filename: Output filename inside the output directory

        Returns:
            Path to output file
        """
        output_path = self.output_dir / filename
        df.to_csv(output_path, index=False)

        logger.info(f"Output written to: {output_path} ({len(df)} rows)")
        return output_path


def write_results(
    state: AuctionState,
    output_dir: Optional[str] = None,
    base_filename: Optional[str] = None
) -> Dict[str, Path]:
    """
    Convenience function to write standings and sales CSVs.

    Args:
        state: Auction state to report on
        output_dir: Output directory (default from config)
        base_filename: Filename prefix (default: results_<timestamp>)

    Returns:
        Dictionary with paths to the 'standings' and 'sales' files
    """
    writer = OutputWriter(output_dir)

    if base_filename is None:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        base_filename = f"results_{timestamp}"

    return {
        'standings': writer.write_csv(
            writer.prepare_standings(state), f"{base_filename}_standings.csv"
        ),
        'sales': writer.write_csv(
            writer.prepare_sales(state), f"{base_filename}_sales.csv"
        ),
    }
