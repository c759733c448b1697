"""
Tests for the bballscraper CLI.
"""
import json
import logging

import pytest

from bballscraper import cli
from bballscraper.export import csv_exists


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo setup_logging so handlers do not leak between tests."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)


def dump(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


class TestConvert:
    """Tests for the convert command."""

    def test_odds(self, tmp_path, capsys):
        """Test a JSON list becomes a quoted table."""
        source = dump(tmp_path / 'odds.json', [{'bookmaker': 'bet365', 'home': '1.80', 'away': None}])
        stub = tmp_path / 'out' / 'ODDS_abc'

        with pytest.raises(SystemExit) as exc:
            cli.main(['convert', 'odds', str(source), str(stub)])

        assert exc.value.code == 0
        assert (tmp_path / 'out' / 'ODDS_abc.csv').read_text(encoding='utf-8') == (
            'bookmaker,home,away\n"bet365","1.80",""'
        )
        assert 'Exported 1 records (3 columns)' in capsys.readouterr().out

    def test_point_by_point_needs_match_id(self, tmp_path):
        """Test a missing match id fails without writing."""
        source = dump(tmp_path / 'pbp.json', [{'time': '1', 'score': '2-0'}])
        stub = tmp_path / 'PBP'

        with pytest.raises(SystemExit) as exc:
            cli.main(['convert', 'point-by-point', str(source), str(stub)])

        assert exc.value.code == 1
        assert not csv_exists(stub)

    def test_point_by_point(self, tmp_path):
        source = dump(tmp_path / 'pbp.json', [{'time': '1', 'score': '2-0'}])
        stub = tmp_path / 'PBP'

        with pytest.raises(SystemExit):
            cli.main(['convert', 'point-by-point', str(source), str(stub), '--match-id', 'M1'])

        assert (tmp_path / 'PBP.csv').read_text(encoding='utf-8') == '"M1","1","2-0","",""'

    def test_stats_match_plain_text(self, tmp_path):
        """Test raw rows are read as text when the file is not JSON."""
        source = tmp_path / 'stats.txt'
        source.write_text('28,Points,30', encoding='utf-8')
        summary = cli.run_convert('stats-match', source, str(tmp_path / 'STATS'))
        assert summary.rows == 1
        assert (tmp_path / 'STATS.csv').read_text(encoding='utf-8') == 'Home Score,Category,Away Score\n28,Points,30'

    def test_stats_match_json_string(self, tmp_path):
        source = dump(tmp_path / 'stats.json', '5,Assists,6\n1,Blocks,0')
        cli.run_convert('stats-match', source, str(tmp_path / 'STATS'))
        assert (tmp_path / 'STATS.csv').read_text(encoding='utf-8').endswith('5,Assists,6\n1,Blocks,0')

    def test_empty_input_reports_nothing_written(self, tmp_path, capsys):
        source = dump(tmp_path / 'results.json', [])

        with pytest.raises(SystemExit) as exc:
            cli.main(['convert', 'results', str(source), str(tmp_path / 'RESULTS')])

        assert exc.value.code == 0
        assert 'nothing written' in capsys.readouterr().out
        assert not csv_exists(tmp_path / 'RESULTS')

    def test_strict_flag(self, tmp_path):
        """Test --strict turns a shape mismatch into a failure."""
        source = dump(tmp_path / 'fixtures.json', [{'a': 1}, {'b': 2}])

        with pytest.raises(SystemExit) as exc:
            cli.main(['convert', 'data', str(source), str(tmp_path / 'FIXTURES'), '--strict'])

        assert exc.value.code == 1
        assert not csv_exists(tmp_path / 'FIXTURES')

    def test_invalid_json(self, tmp_path):
        source = tmp_path / 'broken.json'
        source.write_text('{not json', encoding='utf-8')

        with pytest.raises(SystemExit) as exc:
            cli.main(['convert', 'lineups', str(source), str(tmp_path / 'LINEUPS')])

        assert exc.value.code == 1

    @pytest.mark.parametrize(
        'kind, data',
        [
            ('object', [{'homeTeam': 'A'}]),
            ('object', None),
            ('odds', {'bookmaker': 'bet365'}),
            ('data', ['not a record']),
            ('player-stats', [{'name': 'A', 'stats': [10, 5]}]),
            ('head-to-head', {'directMatches': {'date': '01.01.2024'}}),
            ('lineups', {'home': ['Player A']}),
        ],
    )
    def test_wrong_json_shape_fails(self, tmp_path, kind, data):
        """Test JSON of the wrong shape exits 1 without writing."""
        source = dump(tmp_path / 'input.json', data)
        stub = tmp_path / 'OUT'

        with pytest.raises(SystemExit) as exc:
            cli.main(['convert', kind, str(source), str(stub)])

        assert exc.value.code == 1
        assert not csv_exists(stub)

    def test_wrong_json_shape_message(self, tmp_path):
        source = dump(tmp_path / 'input.json', [{'homeTeam': 'A'}])
        with pytest.raises(ValueError, match='object expects a JSON object, got array'):
            cli.run_convert('object', source, str(tmp_path / 'OUT'))

    def test_null_input_is_no_data(self, tmp_path):
        """Test null is still accepted where the serializer skips empty input."""
        source = dump(tmp_path / 'input.json', None)
        assert cli.run_convert('lineups', source, str(tmp_path / 'OUT')) is None
        assert not csv_exists(tmp_path / 'OUT')

    def test_unknown_kind_rejected(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            cli.main(['convert', 'boxscore', 'x.json', 'out'])
        assert exc.value.code == 2

    def test_log_dir(self, tmp_path):
        """Test logs go to a dated file when --log-dir is given."""
        source = dump(tmp_path / 'summary.json', {'homeTeam': 'A', 'score': {'home': 1}})
        log_dir = tmp_path / 'logs'

        with pytest.raises(SystemExit):
            cli.main(['--log-dir', str(log_dir), 'convert', 'object', str(source), str(tmp_path / 'SUMMARY')])

        log_files = list(log_dir.glob('bballscraper_*.log'))
        assert len(log_files) == 1
        assert 'Exported 1 records (2 columns)' in log_files[0].read_text(encoding='utf-8')


class TestPrint:
    """Tests for the print command."""

    def test_no_files(self, tmp_path, capsys):
        assert cli.run_print(str(tmp_path)) == 0
        assert f'No CSV files found in {tmp_path}' in capsys.readouterr().out

    def test_prints_every_file(self, tmp_path, capsys):
        (tmp_path / 'results' / 'NBA').mkdir(parents=True)
        (tmp_path / 'results' / 'NBA' / 'RESULTS.csv').write_text('a,b\n1,2', encoding='utf-8')
        (tmp_path / 'COUNTRIES.csv').write_text('country\n"USA"', encoding='utf-8')

        with pytest.raises(SystemExit):
            cli.main(['print', str(tmp_path)])

        out = capsys.readouterr().out
        assert 'Found 2 CSV file(s)' in out
        assert 'a,b\n1,2' in out
        assert 'country\n"USA"' in out

    def test_table_falls_back_to_raw(self, tmp_path, capsys):
        """Test files pandas cannot parse are printed as text."""
        (tmp_path / 'PBP.csv').write_text('', encoding='utf-8')
        (tmp_path / 'ODDS.csv').write_text('book,home\n"bet365","1.80"', encoding='utf-8')

        assert cli.run_print(str(tmp_path), table=True) == 2

        out = capsys.readouterr().out
        assert 'bet365' in out
        assert '"bet365"' not in out
