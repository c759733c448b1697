"""
Record shapes and CSV policy types for the basketball scraper.

The scraping driver hands plain dicts to the serializers. The pydantic models
below describe the fixed-shape records and are accepted interchangeably with
their dict form.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field

Scalar = Union[str, int, float, bool, None]


class QuoteMode(str, Enum):
    """Field escaping policy."""

    QUOTED = 'quoted'  # every field wrapped in "", embedded " doubled
    NONE = 'none'      # bare comma join, no escaping at all


class NullPolicy(str, Enum):
    """How a None (or missing) value is rendered in a cell."""

    LITERAL = 'literal'  # the text "null"
    EMPTY = 'empty'      # an empty field


@dataclass(frozen=True)
class CsvFormat:
    """Per-serializer output policy."""

    has_header: bool = True
    quoting: QuoteMode = QuoteMode.QUOTED
    null_policy: NullPolicy = NullPolicy.EMPTY
    write_empty: bool = False


class PlayerStats(BaseModel):
    """One player's box score line."""

    name: str
    stats: dict[str, Scalar] = Field(default_factory=dict)


class PointEvent(BaseModel):
    """A single entry of a point-by-point feed."""

    time: Scalar = None
    score: Scalar = None
    homeIncident: Scalar = None
    awayIncident: Scalar = None


class HeadToHeadMatch(BaseModel):
    """A past meeting listed on the head-to-head tab."""

    date: Scalar = None
    event: Scalar = None
    homeTeam: Scalar = None
    awayTeam: Scalar = None
    result: Scalar = None


class HeadToHead(BaseModel):
    """The three head-to-head sections of a match page."""

    homeLastMatches: list[HeadToHeadMatch] = Field(default_factory=list)
    awayLastMatches: list[HeadToHeadMatch] = Field(default_factory=list)
    directMatches: list[HeadToHeadMatch] = Field(default_factory=list)


class LineupPlayer(BaseModel):
    """A player listed in a team lineup."""

    number: Scalar = None
    name: Scalar = None
    position: Scalar = None


class Lineups(BaseModel):
    """Both teams' lineups. A missing side is an empty list."""

    home: list[LineupPlayer] = Field(default_factory=list)
    away: list[LineupPlayer] = Field(default_factory=list)


def as_mapping(record: Any) -> Any:
    """Return the dict form of a pydantic record, anything else unchanged."""
    if isinstance(record, BaseModel):
        return record.model_dump()
    return record
