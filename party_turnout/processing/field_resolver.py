"""
Field resolution for rows whose column names drift between exports.

The turnout export has been seen as ``country``, ``Country`` and
``COUNTRY `` depending on who produced it, so callers pass an ordered list
of spellings instead of a single column name.
"""

from typing import Mapping, Optional, Sequence

# Candidate spellings, most specific first
COUNTRY_FIELDS = ["country", "Country", "COUNTRY"]

TURNOUT_FIELDS = [
    "VoterTurnout_ParliamentaryVotingTurnoutPct",
    "VoterTurnout_ParliamentaryVotingTurnoutPct ",
    "turnout",
    "Turnout",
]

YEAR_FIELDS = [
    "VoterTurnout_ParliamentaryTurnoutDataYear",
    "year",
    "Year",
]

# GeoJSON property keys holding a display name, in priority order
FEATURE_NAME_KEYS = ["ADMIN", "NAME", "name", "SOVEREIGNT"]


def _fold(name: str) -> str:
    return str(name).strip().lower()


def get_field(row: Mapping[str, str], candidates: Sequence[str]) -> Optional[str]:
    """Return the value of the first candidate column present in ``row``.

    Exact key matches are tried first, in candidate order. If none hit, the
    candidates are compared again against the row keys ignoring case and
    surrounding whitespace.

    Args:
        row: Parsed row (column name -> cell)
        candidates: Ordered column name spellings

    Returns:
        The cell value, or None if no candidate matches
    """
    for candidate in candidates:
        if candidate in row:
            return row[candidate]

    keys = list(row.keys())
    for candidate in candidates:
        wanted = _fold(candidate)
        for key in keys:
            if _fold(key) == wanted:
                return row[key]

    return None
