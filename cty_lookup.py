"""
Callsign to country resolution over a parsed CountryTable.
"""

from dataclasses import dataclass, asdict
from typing import Iterator, Optional, Tuple

from cty_parser import AliasKind, CountryEntry, CountryTable, PrefixAlias


@dataclass(frozen=True)
class ResolvedCountry:
    """Country metadata for a callsign, with alias overrides applied."""
    callsign: str
    name: str
    continent: str
    cq_zone: int
    itu_zone: int
    latitude: float
    longitude: float
    utc_offset: float
    primary_prefix: str
    matched_prefix: str
    exact_match: bool = False
    waedc: bool = False

    @property
    def match_length(self) -> int:
        return len(self.matched_prefix)

    def to_dict(self) -> dict:
        result = asdict(self)
        result["match_length"] = self.match_length
        return result


def normalize_callsign(callsign: str) -> str:
    return callsign.strip().upper()


def _candidates(entry: CountryEntry) -> Iterator[PrefixAlias]:
    """The entry's primary prefix followed by its matchable aliases."""
    yield PrefixAlias(prefix=entry.primary_prefix, line=entry.line)
    for alias in entry.aliases:
        if not alias.is_exclusion:
            yield alias


def _is_excluded(entry: CountryEntry, callsign: str) -> bool:
    return any(
        alias.is_exclusion and callsign.startswith(alias.prefix)
        for alias in entry.aliases
    )


def _matches(alias: PrefixAlias, callsign: str) -> bool:
    if alias.kind is AliasKind.EXACT:
        return alias.prefix == callsign
    return callsign.startswith(alias.prefix)


def resolve(entry: CountryEntry, alias: PrefixAlias, callsign: str) -> ResolvedCountry:
    """
    Merge an alias's overrides onto its entry's defaults.

    Args:
        entry: The entry owning the alias
        alias: The winning alias
        callsign: Normalized callsign being resolved

    Returns:
        ResolvedCountry where every override that is set replaces the default
    """
    overrides = alias.overrides

    def pick(name: str):
        value = getattr(overrides, name)
        return getattr(entry, name) if value is None else value

    return ResolvedCountry(
        callsign=callsign,
        name=entry.name,
        continent=pick("continent"),
        cq_zone=pick("cq_zone"),
        itu_zone=pick("itu_zone"),
        latitude=pick("latitude"),
        longitude=pick("longitude"),
        utc_offset=pick("utc_offset"),
        primary_prefix=entry.primary_prefix,
        matched_prefix=alias.prefix,
        exact_match=alias.is_exact,
        waedc=entry.waedc,
    )


def find_best_match(table: CountryTable, callsign: str) -> Optional[Tuple[CountryEntry, PrefixAlias]]:
    """
    Find the entry and alias that own a normalized callsign.

    Entries with a matching exclusion token are skipped. Among the rest the
    longest matching prefix wins; on equal length an exact token beats a
    plain prefix, and after that the later definition in the file wins.

    Args:
        table: Parsed country table
        callsign: Callsign, already normalized

    Returns:
        (entry, alias) tuple or None if nothing matches
    """
    best = None
    best_key = None
    order = 0

    for entry in table.entries:
        if _is_excluded(entry, callsign):
            order += len(entry.aliases) + 1
            continue

        for alias in _candidates(entry):
            order += 1
            if not _matches(alias, callsign):
                continue
            key = (len(alias.prefix), alias.is_exact, order)
            if best_key is None or key > best_key:
                best_key = key
                best = (entry, alias)

    return best


def lookup(table: CountryTable, callsign: str) -> Optional[ResolvedCountry]:
    """
    Resolve a callsign to its country.

    Args:
        table: Parsed country table (read only)
        callsign: Callsign in any case, surrounding whitespace ignored

    Returns:
        ResolvedCountry, or None when no prefix in the table matches
    """
    callsign = normalize_callsign(callsign)
    if not callsign:
        return None

    match = find_best_match(table, callsign)
    if match is None:
        return None

    entry, alias = match
    return resolve(entry, alias, callsign)
