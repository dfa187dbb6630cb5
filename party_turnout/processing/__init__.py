"""
Processing package for the party system / turnout maps

Parsing, name canonicalization and the country join. Everything the
renderers need is reachable from here.
"""

from .data_utils import DataLoadError, LoadedSources, load_sources
from .field_resolver import get_field
from .join import DatasetJoiner, JoinedDataset, MatchDiagnostics, TurnoutLookup
from .names import DEFAULT_COUNTRY_ALIASES, NameNormalizer, normalize_name
from .tabular import ParsedTable, parse_delimited

__all__ = [
    "parse_delimited",
    "ParsedTable",
    "get_field",
    "normalize_name",
    "NameNormalizer",
    "DEFAULT_COUNTRY_ALIASES",
    "DataLoadError",
    "LoadedSources",
    "load_sources",
    "DatasetJoiner",
    "JoinedDataset",
    "MatchDiagnostics",
    "TurnoutLookup",
]
