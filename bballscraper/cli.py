"""
CLI entrypoints for the basketball scraper CSV layer.

Usage:
    python -m bballscraper.cli convert odds odds.json src/csv/results/NBA/ODDS_abc123
    python -m bballscraper.cli convert point-by-point pbp.json out/POINT_BY_POINT_abc123_0 --match-id abc123
    python -m bballscraper.cli print src/csv --table
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from bballscraper import export
from bballscraper.config import settings
from bballscraper.paths import format_file_date

logger = logging.getLogger('bballscraper')

SERIALIZERS = {
    'data': export.generate_csv_data,
    'results': export.generate_csv_data_results,
    'object': export.generate_csv_from_object,
    'player-stats': export.generate_csv_player_stats,
    'stats-match': export.generate_csv_stats_match,
    'point-by-point': export.generate_csv_point_by_point,
    'head-to-head': export.generate_csv_head_to_head,
    'lineups': export.generate_csv_lineups,
    'odds': export.generate_csv_odds,
    'standings': export.generate_csv_standings,
    'countries-leagues': export.generate_csv_countries_and_leagues,
}

# Serializers that accept the strict column check
STRICT_KINDS = frozenset({
    'data',
    'results',
    'player-stats',
    'odds',
    'standings',
    'countries-leagues',
})

# Serializers that take a single record rather than a list of records
RECORD_KINDS = frozenset({'object', 'head-to-head', 'lineups'})


def setup_logging(verbose: bool = False, log_dir: Optional[str] = None):
    """Configure logging to stderr and, optionally, a dated file in log_dir."""
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_file = Path(log_dir) / f'bballscraper_{format_file_date()}.log'
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )


def _read_input(path: Path, kind: str) -> Any:
    text = path.read_text(encoding='utf-8')
    if kind == 'stats-match':
        # Raw rows may be stored as-is or as a JSON string
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            return text
        return value if isinstance(value, str) else text
    return json.loads(text)


_JSON_TYPE_NAMES = {dict: 'object', list: 'array', str: 'string'}

# Record kinds whose keys hold arrays of objects
_NESTED_ARRAYS = {
    'head-to-head': export.HEAD_TO_HEAD_SECTIONS,
    'lineups': export.LINEUP_SIDES,
}


def _json_type_name(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    return _JSON_TYPE_NAMES.get(type(value), type(value).__name__)


def _check_objects(items: list, label: str):
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f'{label} {index} must be a JSON object, got {_json_type_name(item)}')


def _check_input_shape(data: Any, kind: str):
    """
    Raise ValueError when decoded JSON does not have the shape the serializer reads.

    null is accepted wherever the serializer treats it as no data.
    """
    if data is None and kind != 'object':
        return
    if kind == 'stats-match':
        expected = str
    elif kind in RECORD_KINDS:
        expected = dict
    else:
        expected = list

    if not isinstance(data, expected):
        raise ValueError(
            f'{kind} expects a JSON {_JSON_TYPE_NAMES[expected]}, got {_json_type_name(data)}'
        )

    if expected is list:
        _check_objects(data, f'{kind} record')
        if kind == 'player-stats':
            for index, player in enumerate(data):
                stats = player.get('stats')
                if stats is not None and not isinstance(stats, dict):
                    raise ValueError(f'player-stats record {index} stats must be a JSON object')
    for key in _NESTED_ARRAYS.get(kind, ()):
        items = data.get(key)
        if items is None:
            continue
        if not isinstance(items, list):
            raise ValueError(f'{kind} {key} must be a JSON array, got {_json_type_name(items)}')
        _check_objects(items, f'{kind} {key} entry')


def run_convert(
    kind: str,
    input_path: Path,
    dest: str,
    match_id: Optional[str] = None,
    strict: Optional[bool] = None,
) -> Optional[export.WriteSummary]:
    """
    Serialize a JSON dump of scraped records.

    Returns:
        WriteSummary, or None when the serializer skipped empty input
    """
    if kind not in SERIALIZERS:
        raise ValueError(f'Unknown serializer: {kind}')

    data = _read_input(Path(input_path), kind)
    _check_input_shape(data, kind)
    serializer = SERIALIZERS[kind]

    if kind == 'point-by-point':
        if not match_id:
            raise ValueError('point-by-point requires a match id')
        return serializer(data, dest, match_id)
    if kind in STRICT_KINDS:
        return serializer(data, dest, strict=strict)
    return serializer(data, dest)


def run_print(root: str, table: bool = False) -> int:
    """
    Print every CSV file under root.

    Returns:
        Number of files printed
    """
    root_path = Path(root)
    files = export.find_csv_files(root_path)
    if not files:
        print(f'No CSV files found in {root_path}')
        return 0

    print(f'Found {len(files)} CSV file(s) in {root_path}')
    for path in files:
        print('=' * 80)
        print(path.relative_to(root_path))
        print('=' * 80)
        if table:
            try:
                print(export.load_csv(path).to_string(index=False))
                continue
            except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
                logger.debug(f'{path} is not a plain table ({e}), printing raw')
        print(path.read_text(encoding='utf-8'))

    return len(files)


def main(argv=None):
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog='bballscraper',
        description='Basketball scraper CSV tools',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    parser.add_argument('--log-dir', default=None, help='Also write logs to a dated file here')

    subparsers = parser.add_subparsers(dest='command', required=True)

    # Convert command
    convert_parser = subparsers.add_parser('convert', help='Write a JSON dump as CSV')
    convert_parser.add_argument('kind', choices=sorted(SERIALIZERS), help='Record shape')
    convert_parser.add_argument('input', type=Path, help='JSON file produced by the scraper')
    convert_parser.add_argument('dest', help='Destination path without the .csv extension')
    convert_parser.add_argument('--match-id', help='Match id (point-by-point only)')
    convert_parser.add_argument(
        '--strict',
        action='store_true',
        default=None,
        help='Fail when records do not share the first record\'s keys',
    )

    # Print command
    print_parser = subparsers.add_parser('print', help='Print every CSV under a folder')
    print_parser.add_argument('root', nargs='?', default=settings.csv_dir, help='Folder to scan')
    print_parser.add_argument('--table', action='store_true', help='Render tables with pandas')

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.log_dir)

    if args.command == 'convert':
        try:
            summary = run_convert(
                args.kind,
                args.input,
                args.dest,
                match_id=args.match_id,
                strict=args.strict,
            )
        except (OSError, ValueError) as e:
            logger.error(f'Conversion failed: {e}')
            sys.exit(1)

        if summary is None:
            print(f'No {args.kind} data, nothing written')
        else:
            print(summary)
        sys.exit(0)

    elif args.command == 'print':
        run_print(args.root, table=args.table)
        sys.exit(0)


if __name__ == '__main__':
    main()
