"""
CSV export module.

Each serializer turns one scraped record shape into CSV text and writes it to
``<path_stub>.csv``, creating missing parent directories first. Writes are
synchronous: by the time a serializer returns, the file is complete or the
filesystem error has been raised.

Serializers return a ``WriteSummary`` when a file was written and ``None``
when the input was recognised as empty and skipped.
"""
import json
import logging
import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from bballscraper.config import settings
from bballscraper.formatting import (
    LINE_SEPARATOR,
    format_header,
    format_record,
    format_row,
    format_table,
)
from bballscraper.models import CsvFormat, NullPolicy, QuoteMode, as_mapping

logger = logging.getLogger('bballscraper')
event_logger = logging.getLogger('bballscraper.events')

PathStub = Union[str, os.PathLike]

# =============================================================================
# PER-SERIALIZER POLICIES
# =============================================================================

DATA_FORMAT = CsvFormat(quoting=QuoteMode.QUOTED, null_policy=NullPolicy.LITERAL)
RESULTS_FORMAT = CsvFormat(quoting=QuoteMode.NONE, null_policy=NullPolicy.EMPTY)
OBJECT_FORMAT = CsvFormat(quoting=QuoteMode.NONE, null_policy=NullPolicy.EMPTY, write_empty=True)
PLAYER_STATS_FORMAT = CsvFormat(quoting=QuoteMode.NONE, null_policy=NullPolicy.EMPTY)
STATS_MATCH_FORMAT = CsvFormat(quoting=QuoteMode.NONE, write_empty=True)
POINT_BY_POINT_FORMAT = CsvFormat(
    has_header=False,
    quoting=QuoteMode.QUOTED,
    null_policy=NullPolicy.EMPTY,
    write_empty=True,
)
HEAD_TO_HEAD_FORMAT = CsvFormat(quoting=QuoteMode.QUOTED, null_policy=NullPolicy.EMPTY, write_empty=True)
LINEUPS_FORMAT = CsvFormat(quoting=QuoteMode.QUOTED, null_policy=NullPolicy.EMPTY)
QUOTED_TABLE_FORMAT = CsvFormat(quoting=QuoteMode.QUOTED, null_policy=NullPolicy.EMPTY)

SERIALIZER_FORMATS = {
    'data': DATA_FORMAT,
    'results': RESULTS_FORMAT,
    'object': OBJECT_FORMAT,
    'player-stats': PLAYER_STATS_FORMAT,
    'stats-match': STATS_MATCH_FORMAT,
    'point-by-point': POINT_BY_POINT_FORMAT,
    'head-to-head': HEAD_TO_HEAD_FORMAT,
    'lineups': LINEUPS_FORMAT,
    'odds': QUOTED_TABLE_FORMAT,
    'standings': QUOTED_TABLE_FORMAT,
    'countries-leagues': QUOTED_TABLE_FORMAT,
}

STATS_MATCH_COLUMNS = ('Home Score', 'Category', 'Away Score')
POINT_BY_POINT_FIELDS = ('time', 'score', 'homeIncident', 'awayIncident')
HEAD_TO_HEAD_SECTIONS = ('homeLastMatches', 'awayLastMatches', 'directMatches')
HEAD_TO_HEAD_COLUMNS = ('date', 'event', 'homeTeam', 'awayTeam', 'result')
LINEUP_SIDES = ('home', 'away')
LINEUP_COLUMNS = ('team', 'number', 'name', 'position')

DEEP_NESTING_POLICIES = ('stringify', 'error')


class ShapeMismatchError(ValueError):
    """Records do not share the keys of the first record."""
    pass


@dataclass(frozen=True)
class WriteSummary:
    """Outcome of a successful write."""

    path: Path
    rows: int
    columns: int

    def __str__(self) -> str:
        return f'Exported {self.rows} records ({self.columns} columns) to {self.path}'


def log_event(**kv):
    """Emit structured JSON log line."""
    event_logger.info(json.dumps(kv, separators=(',', ':'), default=str))


# =============================================================================
# WRITING
# =============================================================================


def csv_path(path_stub: PathStub) -> Path:
    """Append the .csv extension to a path stub."""
    return Path(f'{os.fspath(path_stub)}.csv')


def csv_exists(path_stub: PathStub) -> bool:
    """Check whether the CSV for a path stub has already been written."""
    return csv_path(path_stub).is_file()


def write_csv(path_stub: PathStub, content: str) -> Path:
    """
    Write CSV text to ``<path_stub>.csv``.

    Parent directories are created if absent. The file is UTF-8 without BOM
    and keeps ``\\n`` line endings on every platform. Filesystem errors
    propagate unchanged.

    Returns:
        Path to the written file
    """
    path = csv_path(path_stub)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(content)
    return path


def _commit(path_stub: PathStub, content: str, kind: str, rows: int, columns: int) -> WriteSummary:
    path = write_csv(path_stub, content)
    summary = WriteSummary(path=path, rows=rows, columns=columns)
    logger.info(str(summary))
    log_event(event='csv_written', kind=kind, path=str(path), rows=rows, columns=columns)
    return summary


def _skip(kind: str) -> None:
    logger.info(f'No {kind} data to generate CSV file.')
    log_event(event='csv_skipped', kind=kind)
    return None


def _is_empty(data: Any) -> bool:
    return data is None or len(data) == 0


def _strict_enabled(strict: Optional[bool]) -> bool:
    return settings.strict_columns if strict is None else strict


def _check_shape(key_sets: Sequence[Iterable[str]], label: str) -> None:
    """Raise ShapeMismatchError when any key set differs from the first."""
    expected = list(key_sets[0])
    for index, keys in enumerate(key_sets[1:], start=1):
        keys = list(keys)
        if set(keys) != set(expected):
            missing = [k for k in expected if k not in keys]
            extra = [k for k in keys if k not in expected]
            raise ShapeMismatchError(
                f'{label} {index} does not match {label.lower()} 0 '
                f'(missing={missing}, extra={extra})'
            )


# =============================================================================
# UNIFORM RECORD LISTS
# =============================================================================


def _generate_table(
    data: Optional[Sequence[Any]],
    path_stub: PathStub,
    fmt: CsvFormat,
    kind: str,
    strict: Optional[bool],
) -> Optional[WriteSummary]:
    if _is_empty(data) and not fmt.write_empty:
        return _skip(kind)

    records = [as_mapping(record) for record in (data or [])]
    columns = list(records[0].keys()) if records else []
    if records and _strict_enabled(strict):
        _check_shape([record.keys() for record in records], 'Record')

    content = format_table(records, columns, fmt)
    return _commit(path_stub, content, kind, len(records), len(columns))


def generate_csv_data(
    data: Optional[Sequence[Mapping[str, Any]]],
    path_stub: PathStub,
    strict: Optional[bool] = None,
) -> Optional[WriteSummary]:
    """
    Export a uniform record list (fixtures and similar) as a quoted table.

    Columns come from the first record's key order. Every value is quoted and
    a None value is written as the text ``"null"``.

    Args:
        data: Records sharing the first record's keys
        path_stub: Destination path without the .csv extension
        strict: Reject records whose keys differ from the first record's.
            None defers to ``settings.strict_columns``.

    Returns:
        WriteSummary, or None when there was nothing to write
    """
    return _generate_table(data, path_stub, DATA_FORMAT, 'tabular', strict)


def generate_csv_data_results(
    data: Optional[Sequence[Mapping[str, Any]]],
    path_stub: PathStub,
    strict: Optional[bool] = None,
) -> Optional[WriteSummary]:
    """
    Export match results as an unquoted table.

    None values become empty cells. Values are not escaped, so they must not
    contain commas, quotes or newlines.
    """
    return _generate_table(data, path_stub, RESULTS_FORMAT, 'results', strict)


def generate_csv_odds(
    data: Optional[Sequence[Mapping[str, Any]]],
    path_stub: PathStub,
    strict: Optional[bool] = None,
) -> Optional[WriteSummary]:
    """Export odds rows as a quoted table; None becomes ``""``."""
    return _generate_table(data, path_stub, QUOTED_TABLE_FORMAT, 'odds', strict)


def generate_csv_standings(
    data: Optional[Sequence[Mapping[str, Any]]],
    path_stub: PathStub,
    strict: Optional[bool] = None,
) -> Optional[WriteSummary]:
    """Export a standings table as a quoted table; None becomes ``""``."""
    return _generate_table(data, path_stub, QUOTED_TABLE_FORMAT, 'standings', strict)


def generate_csv_countries_and_leagues(
    data: Optional[Sequence[Mapping[str, Any]]],
    path_stub: PathStub,
    strict: Optional[bool] = None,
) -> Optional[WriteSummary]:
    """Export the country/league menu as a quoted table; None becomes ``""``."""
    return _generate_table(data, path_stub, QUOTED_TABLE_FORMAT, 'countries and leagues', strict)


# =============================================================================
# SINGLE RECORDS AND FIXED SHAPES
# =============================================================================


def generate_csv_from_object(
    data: Mapping[str, Any],
    path_stub: PathStub,
    on_deep_nesting: str = 'stringify',
) -> WriteSummary:
    """
    Export a single record (match summary) as one header row and one value row.

    Nested mappings are flattened one level into ``parent_child`` columns, in
    the nested mapping's key order. Lists and None are treated as scalars.
    Values are not quoted.

    Args:
        data: Record to flatten
        path_stub: Destination path without the .csv extension
        on_deep_nesting: What to do with a mapping found inside a nested
            mapping: 'stringify' writes it as compact JSON, 'error' raises
            ValueError.

    Returns:
        WriteSummary for the written file
    """
    if on_deep_nesting not in DEEP_NESTING_POLICIES:
        raise ValueError(f'on_deep_nesting must be one of {DEEP_NESTING_POLICIES}, got {on_deep_nesting!r}')

    headers: list[str] = []
    values: list[Any] = []

    for key, value in as_mapping(data).items():
        value = as_mapping(value)
        if isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                sub_value = as_mapping(sub_value)
                if isinstance(sub_value, Mapping) and on_deep_nesting == 'error':
                    raise ValueError(f'{key}.{sub_key} is nested more than one level deep')
                headers.append(f'{key}_{sub_key}')
                values.append(sub_value)
        else:
            headers.append(str(key))
            values.append(value)

    content = format_header(headers) + LINE_SEPARATOR + format_row(values, OBJECT_FORMAT)
    return _commit(path_stub, content, 'match summary', 1, len(headers))


def generate_csv_player_stats(
    data: Optional[Sequence[Any]],
    path_stub: PathStub,
    strict: Optional[bool] = None,
) -> Optional[WriteSummary]:
    """
    Export per-player stat lines as a wide unquoted table.

    The header is ``Name`` followed by the first player's stat keys. Every
    player's row is read in that key order; a stat the player lacks is left
    empty.

    Args:
        data: Sequence of ``{name, stats}`` records or PlayerStats models
        path_stub: Destination path without the .csv extension
        strict: Reject players whose stat keys differ from the first player's.
            None defers to ``settings.strict_columns``.
    """
    if _is_empty(data):
        return _skip('player stats')

    players = [as_mapping(player) for player in data]
    stats = [player.get('stats') or {} for player in players]
    stat_keys = list(stats[0].keys())
    if _strict_enabled(strict):
        _check_shape([s.keys() for s in stats], 'Player')

    lines = [format_header(['Name', *stat_keys])]
    for player, player_stats in zip(players, stats):
        values = [player.get('name'), *(player_stats.get(key) for key in stat_keys)]
        lines.append(format_row(values, PLAYER_STATS_FORMAT))

    content = LINE_SEPARATOR.join(lines)
    return _commit(path_stub, content, 'player stats', len(players), len(stat_keys) + 1)


def generate_csv_stats_match(data: Optional[str], path_stub: PathStub) -> WriteSummary:
    """
    Export pre-formatted match statistics.

    ``data`` holds rows already joined as ``home,category,away`` and separated
    by newlines. It is written verbatim below a fixed header, even when empty.
    """
    raw = data or ''
    content = format_header(STATS_MATCH_COLUMNS) + LINE_SEPARATOR + raw
    rows = sum(1 for line in raw.split(LINE_SEPARATOR) if line.strip())
    return _commit(path_stub, content, 'match stats', rows, len(STATS_MATCH_COLUMNS))


def generate_csv_point_by_point(
    data: Optional[Sequence[Any]],
    path_stub: PathStub,
    match_id: str,
) -> WriteSummary:
    """
    Export a point-by-point feed, one quoted row per event.

    Rows are ``match_id,time,score,homeIncident,awayIncident`` with no header
    line. An empty feed still produces a zero-length file.
    """
    fmt = POINT_BY_POINT_FORMAT
    if _is_empty(data) and not fmt.write_empty:
        return _skip('point by point')

    columns = ('matchId', *POINT_BY_POINT_FIELDS)
    rows = [{**as_mapping(event), 'matchId': match_id} for event in (data or [])]
    content = format_table(rows, columns, fmt)
    return _commit(path_stub, content, 'point by point', len(rows), len(columns))


def generate_csv_head_to_head(data: Optional[Mapping[str, Any]], path_stub: PathStub) -> Optional[WriteSummary]:
    """
    Export head-to-head history grouped by section.

    Sections are written in the order home last matches, away last matches,
    direct matches. Each non-empty section is introduced by a
    ``--- <section> ---`` line and its own header; empty sections are left
    out. If every section is empty the file is written with no content.
    """
    if data is None:
        return _skip('head-to-head')

    record = as_mapping(data)
    parts: list[str] = []
    rows = 0

    for section in HEAD_TO_HEAD_SECTIONS:
        matches = [as_mapping(m) for m in (record.get(section) or [])]
        if not matches:
            continue
        parts.append(f'\n--- {section} ---\n')
        parts.append(format_header(HEAD_TO_HEAD_COLUMNS) + LINE_SEPARATOR)
        for match in matches:
            parts.append(format_record(match, HEAD_TO_HEAD_COLUMNS, HEAD_TO_HEAD_FORMAT) + LINE_SEPARATOR)
        rows += len(matches)

    content = ''.join(parts).strip()
    return _commit(path_stub, content, 'head-to-head', rows, len(HEAD_TO_HEAD_COLUMNS))


def generate_csv_lineups(data: Optional[Mapping[str, Any]], path_stub: PathStub) -> Optional[WriteSummary]:
    """
    Export both lineups as one quoted table.

    Home players are written first, then away players, each row led by a
    ``team`` column. A missing side counts as empty; nothing is written when
    both sides are empty.
    """
    record = as_mapping(data) if data is not None else {}
    sides = {side: [as_mapping(p) for p in (record.get(side) or [])] for side in LINEUP_SIDES}
    if not any(sides.values()):
        return _skip('lineup')

    lines = [format_header(LINEUP_COLUMNS)]
    for side in LINEUP_SIDES:
        for player in sides[side]:
            values = [side, *(player.get(column) for column in LINEUP_COLUMNS[1:])]
            lines.append(format_row(values, LINEUPS_FORMAT))

    content = LINE_SEPARATOR.join(lines)
    rows = len(lines) - 1
    return _commit(path_stub, content, 'lineup', rows, len(LINEUP_COLUMNS))


# =============================================================================
# READING BACK
# =============================================================================


def load_csv(path: PathStub, header: bool = True) -> pd.DataFrame:
    """
    Load a written CSV file.

    Every cell is read as text and empty cells stay empty strings.
    """
    return pd.read_csv(path, dtype=str, keep_default_na=False, header=0 if header else None)


def find_csv_files(root: PathStub) -> list[Path]:
    """Recursively list CSV files under root, sorted by path."""
    root = Path(root)
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob('*.csv') if p.is_file())
