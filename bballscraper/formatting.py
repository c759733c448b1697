"""
CSV field formatting.

Two escaping policies are supported:

- ``QuoteMode.QUOTED`` wraps every field in double quotes and doubles any
  embedded quote.
- ``QuoteMode.NONE`` joins fields with bare commas. Nothing is escaped, so
  values containing commas, quotes or newlines will break the row. Callers of
  the unquoted serializers are expected to pass clean values. Lists and
  mappings the serializers render themselves are joined with ";" in this mode
  so they stay in one cell.

Header rows are never quoted.
"""
import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from bballscraper.models import CsvFormat, NullPolicy, QuoteMode

DELIMITER = ','
LINE_SEPARATOR = '\n'
NESTED_ITEM_SEPARATOR = ';'


def to_text(value: Any, item_separator: str = ',') -> str:
    """
    Coerce a non-null cell value to its CSV text.

    Lists and mappings are written as compact JSON joined by item_separator.
    Floats without a fractional part are written as integers (2.0 -> '2').
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, separators=(item_separator, ':'), ensure_ascii=False, default=str)
    return str(value)


def quote(text: str) -> str:
    """Wrap text in double quotes, doubling embedded quotes."""
    return '"' + text.replace('"', '""') + '"'


def format_field(value: Any, fmt: CsvFormat) -> str:
    """Render one cell according to the format's null policy and quoting."""
    if value is None:
        text = 'null' if fmt.null_policy is NullPolicy.LITERAL else ''
    elif fmt.quoting is QuoteMode.QUOTED:
        text = to_text(value)
    else:
        # Nested values must not add delimiters of their own
        text = to_text(value, item_separator=NESTED_ITEM_SEPARATOR)

    if fmt.quoting is QuoteMode.QUOTED:
        return quote(text)
    return text


def format_row(values: Iterable[Any], fmt: CsvFormat) -> str:
    return DELIMITER.join(format_field(v, fmt) for v in values)


def format_header(columns: Iterable[Any]) -> str:
    return DELIMITER.join(str(c) for c in columns)


def format_record(record: Mapping[str, Any], columns: Sequence[str], fmt: CsvFormat) -> str:
    """Render a mapping as a row, one cell per column. Missing keys count as None."""
    return format_row((record.get(column) for column in columns), fmt)


def format_table(
    records: Iterable[Mapping[str, Any]],
    columns: Sequence[str],
    fmt: CsvFormat,
) -> str:
    """
    Render records as CSV text.

    Lines are joined with ``\\n``; there is no trailing newline.
    """
    lines = [format_header(columns)] if fmt.has_header else []
    lines.extend(format_record(record, columns, fmt) for record in records)
    return LINE_SEPARATOR.join(lines)
