"""
Country name canonicalization.

All three sources (boundaries, turnout table, party classification) are
joined on an upper-cased, alias-resolved country name. The alias table maps
UN/ISO long-form spellings onto the short names used by the world boundary
dataset and is the single place to add new mismatches.
"""

from typing import Any, Dict, Mapping, Optional

DEFAULT_COUNTRY_ALIASES: Dict[str, str] = {
    "UNITED STATES OF AMERICA": "UNITED STATES",
    "RUSSIAN FEDERATION": "RUSSIA",
    "IRAN (ISLAMIC REPUBLIC OF)": "IRAN",
    "VENEZUELA (BOLIVARIAN REPUBLIC OF)": "VENEZUELA",
    "SYRIAN ARAB REPUBLIC": "SYRIA",
    "BOLIVIA (PLURINATIONAL STATE OF)": "BOLIVIA",
    "TANZANIA, UNITED REPUBLIC OF": "TANZANIA",
    "VIET NAM": "VIETNAM",
    "LAO PEOPLE'S DEMOCRATIC REPUBLIC": "LAOS",
    "KOREA, DEMOCRATIC PEOPLE'S REPUBLIC OF": "NORTH KOREA",
    "KOREA, REPUBLIC OF": "SOUTH KOREA",
    "BRUNEI DARUSSALAM": "BRUNEI",
    "CZECHIA": "CZECH REPUBLIC",
    "CÔTE D’IVOIRE": "COTE D'IVOIRE",
    "CÔTE D'IVOIRE": "COTE D'IVOIRE",
    "BOSNIA AND HERZEGOVINA": "BOSNIA & HERZEGOVINA",
}


def normalize_name(value: Any) -> str:
    """Trim and upper-case a name. ``None`` and empty values become ``""``."""
    if value is None:
        return ""
    return str(value).strip().upper()


class NameNormalizer:
    """Maps free-text country names onto canonical join keys.

    Args:
        aliases: Source spelling -> canonical spelling. Defaults to
            ``DEFAULT_COUNTRY_ALIASES``. Keys and targets are normalized the
            same way lookups are, so the table may be written in any case.

    Raises:
        ValueError: If an alias target is itself an aliased spelling; chained
            aliases would make canonicalization order-dependent.
    """

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        source = DEFAULT_COUNTRY_ALIASES if aliases is None else aliases
        self.aliases: Dict[str, str] = {
            normalize_name(spelling): normalize_name(target) for spelling, target in source.items()
        }

        chained = sorted(
            target
            for spelling, target in self.aliases.items()
            if target in self.aliases and self.aliases[target] != target
        )
        if chained:
            raise ValueError(f"Alias targets must be canonical, but these are aliased again: {chained}")

    @classmethod
    def with_overrides(cls, overrides: Optional[Mapping[str, str]] = None) -> "NameNormalizer":
        """Default alias table extended (or overridden) by ``overrides``."""
        aliases = dict(DEFAULT_COUNTRY_ALIASES)
        aliases.update({normalize_name(k): v for k, v in (overrides or {}).items()})
        return cls(aliases)

    def harmonize(self, name_upper: str) -> str:
        """Substitute an already upper-cased name through the alias table."""
        return self.aliases.get(name_upper, name_upper)

    def resolve_canonical_name(self, raw: Any) -> str:
        return self.harmonize(normalize_name(raw))

    __call__ = resolve_canonical_name
