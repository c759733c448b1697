"""
Basketball Scraper - CSV layer for scraped basketball match data.

Turns scraped records (results, fixtures, player and match stats,
point-by-point feeds, odds, standings, lineups, head-to-head history)
into CSV files organised by competition and match.
"""

__version__ = '1.0.0'

from bballscraper.export import (
    ShapeMismatchError,
    WriteSummary,
    generate_csv_countries_and_leagues,
    generate_csv_data,
    generate_csv_data_results,
    generate_csv_from_object,
    generate_csv_head_to_head,
    generate_csv_lineups,
    generate_csv_odds,
    generate_csv_player_stats,
    generate_csv_point_by_point,
    generate_csv_standings,
    generate_csv_stats_match,
    load_csv,
)
from bballscraper.models import CsvFormat, NullPolicy, QuoteMode

__all__ = [
    'CsvFormat',
    'NullPolicy',
    'QuoteMode',
    'ShapeMismatchError',
    'WriteSummary',
    'generate_csv_countries_and_leagues',
    'generate_csv_data',
    'generate_csv_data_results',
    'generate_csv_from_object',
    'generate_csv_head_to_head',
    'generate_csv_lineups',
    'generate_csv_odds',
    'generate_csv_player_stats',
    'generate_csv_point_by_point',
    'generate_csv_standings',
    'generate_csv_stats_match',
    'load_csv',
]
