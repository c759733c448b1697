"""
Output layout for scraped CSV files.

    <csv_dir>/COUNTRIES_LEAGUES_<date>.csv
    <csv_dir>/fixtures/FIXTURES_<country>_<league>.csv
    <csv_dir>/results/ALL_BASKETBALL_RESULTS_<date>.csv
    <csv_dir>/results/<competition>/RESULTS_<date>_<country>_<league>.csv
    <csv_dir>/results/<competition>/<match_id>/<KIND>_<match_id>[_<n>].csv

Every helper returns a path stub (no extension) ready to hand to a serializer.
"""
import re
from datetime import date
from pathlib import Path
from typing import Optional, Union

from bballscraper.config import settings

MATCH_FILE_KINDS = (
    'MATCH_SUMMARY',
    'STATS_PLAYER',
    'STATS_MATCH',
    'POINT_BY_POINT',
    'ODDS',
    'HEAD_TO_HEAD',
    'LINEUPS',
    'STANDINGS',
)

_unsafe_re = re.compile(r'[/\\?%*:|"<>]')

PathLike = Union[str, Path]


def format_file_date(value: Optional[date] = None) -> str:
    """Format a date as DD_MM_YYYY (today by default)."""
    value = value or date.today()
    return value.strftime('%d_%m_%Y')


def safe_folder_name(text: str) -> str:
    """Replace characters that are not allowed in file names with '_'."""
    return _unsafe_re.sub('_', text)


def league_folder_name(country: Optional[str], league: Optional[str]) -> str:
    if not country or not league:
        return 'unknown_league'
    return safe_folder_name(f'{country}_{league}')


def _base(base_dir: Optional[PathLike]) -> Path:
    return Path(base_dir if base_dir is not None else settings.csv_dir)


def competition_dir(
    base_dir: Optional[PathLike] = None,
    competition: Optional[str] = None,
    country: Optional[str] = None,
    league: Optional[str] = None,
) -> Path:
    """
    Folder holding one competition's results.

    An explicit competition name wins over the country/league pair.
    """
    name = safe_folder_name(competition) if competition else league_folder_name(country, league)
    return _base(base_dir) / 'results' / name


def results_stub(folder: PathLike, country: str, league: str, on: Optional[date] = None) -> Path:
    return Path(folder) / f'RESULTS_{format_file_date(on)}_{country}_{league}'


def all_results_stub(base_dir: Optional[PathLike] = None, on: Optional[date] = None) -> Path:
    return _base(base_dir) / 'results' / f'ALL_BASKETBALL_RESULTS_{format_file_date(on)}'


def fixtures_stub(country: str, league: str, base_dir: Optional[PathLike] = None) -> Path:
    return _base(base_dir) / 'fixtures' / f'FIXTURES_{country}_{league}'


def countries_leagues_stub(base_dir: Optional[PathLike] = None, on: Optional[date] = None) -> Path:
    return _base(base_dir) / f'COUNTRIES_LEAGUES_{format_file_date(on)}'


def match_file_stub(
    folder: PathLike,
    kind: str,
    match_id: str,
    index: Optional[int] = None,
) -> Path:
    """
    Path stub for a per-match file.

    Args:
        folder: Competition folder
        kind: One of MATCH_FILE_KINDS
        match_id: Match identifier, also used as the sub-folder name. Characters
            not allowed in file names are replaced as in safe_folder_name.
        index: Period tab for per-period files (stats, point by point)
    """
    if kind not in MATCH_FILE_KINDS:
        raise ValueError(f'Unknown match file kind: {kind}')

    safe_id = safe_folder_name(str(match_id))
    name = f'{kind}_{safe_id}' if index is None else f'{kind}_{safe_id}_{index}'
    return Path(folder) / safe_id / name
