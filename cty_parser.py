"""
Country file (cty.dat) parser.

Turns the raw text of a country file into an immutable CountryTable.
Two header layouts are understood:

    Singapore:                28:  54:  AS:    1.30:  -103.80:    -8.0:  9V:
        9V,S6,=9V1XYZ(27)[53];

    Singapore,AS,28,54,1.3,-103.8,-8.0,9V,=9V1XYZ(27,53);

Alias tokens may carry a leading "=" (exact callsign) or "-" (exclusion)
marker and trailing override blocks: (cq) or (cq,itu), [itu], <lat/lon>,
{continent} and ~utc offset~.
"""

import enum
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

CONTINENTS = ("AF", "AN", "AS", "EU", "NA", "OC", "SA")

ENTRY_TERMINATOR = ";"
COMMENT_MARKER = "#"
EXACT_MARKER = "="
EXCLUSION_MARKER = "-"
WAEDC_MARKER = "*"

PREFIX_PATTERN = re.compile(r"^[A-Z0-9/]+$")
VERSION_PATTERN = re.compile(r"^VER(\d{8})$")

# Splits a token into marker, prefix and the trailing override blocks
TOKEN_PATTERN = re.compile(r"^(?P<marker>[=-]?)(?P<prefix>[^()\[\]<>{}~]*)(?P<overrides>.*)$", re.DOTALL)

OVERRIDE_PATTERN = re.compile(
    r"\((?P<cq>[^,()]*)(?:,(?P<cq_itu>[^()]*))?\)"
    r"|\[(?P<itu>[^\[\]]*)\]"
    r"|<(?P<lat>[^/<>]*)/(?P<lon>[^<>]*)>"
    r"|\{(?P<continent>[^{}]*)\}"
    r"|~(?P<utc>[^~]*)~"
)

_OPENERS = {"(": ")", "[": "]", "<": ">", "{": "}"}

HEADER_FIELDS = (
    "name", "cq_zone", "itu_zone", "continent",
    "latitude", "longitude", "utc_offset", "primary_prefix",
)
COMMA_HEADER_FIELDS = (
    "name", "continent", "cq_zone", "itu_zone",
    "latitude", "longitude", "utc_offset", "primary_prefix",
)


class ParseError(Exception):
    """Base error for country file parsing, carries the failing position."""

    def __init__(self, description: str, entry_index: int, line: int, field_name: Optional[str] = None):
        self.description = description
        self.entry_index = entry_index
        self.line = line
        self.field = field_name
        location = f"entry {entry_index} (line {line})"
        if field_name:
            location += f", field '{field_name}'"
        super().__init__(f"{location}: {description}")


class MalformedEntry(ParseError):
    """Header field missing, wrong count, or not of the expected type."""
    pass


class UnterminatedEntry(ParseError):
    """Entry text not closed by a terminator before end of input."""
    pass


class InvalidPrefixToken(ParseError):
    """Alias token outside the callsign alphabet or with malformed overrides."""
    pass


class DuplicatePrimaryPrefix(ParseError):
    """Primary prefix already defined by an earlier entry."""
    pass


class AliasKind(enum.Enum):
    PREFIX = "prefix"
    EXACT = "exact"
    EXCLUSION = "exclusion"


@dataclass(frozen=True)
class FieldOverrides:
    """Per-alias replacements for the owning entry's defaults. None inherits."""
    continent: Optional[str] = None
    cq_zone: Optional[int] = None
    itu_zone: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    utc_offset: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)


@dataclass(frozen=True)
class PrefixAlias:
    """One prefix token of an entry's alias list."""
    prefix: str
    kind: AliasKind = AliasKind.PREFIX
    overrides: FieldOverrides = field(default_factory=FieldOverrides)
    line: int = 0

    @property
    def is_exact(self) -> bool:
        return self.kind is AliasKind.EXACT

    @property
    def is_exclusion(self) -> bool:
        return self.kind is AliasKind.EXCLUSION


@dataclass(frozen=True)
class CountryEntry:
    """One country/entity record with its default metadata."""
    name: str
    continent: str
    cq_zone: int
    itu_zone: int
    latitude: float
    longitude: float
    utc_offset: float
    primary_prefix: str
    aliases: Tuple[PrefixAlias, ...] = ()
    waedc: bool = False
    line: int = 0


@dataclass(frozen=True)
class CountryTable:
    """Immutable, ordered collection of parsed entries."""
    entries: Tuple[CountryEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CountryEntry]:
        return iter(self.entries)

    def get(self, primary_prefix: str) -> Optional[CountryEntry]:
        """Get an entry by its primary prefix (case-insensitive)."""
        wanted = primary_prefix.strip().upper()
        for entry in self.entries:
            if entry.primary_prefix == wanted:
                return entry
        return None

    @property
    def version(self) -> Optional[str]:
        """
        Data version of the file.

        country-files.com releases carry an exact token such as
        "=VER20240605" in the Canada entry.

        Returns:
            The version date string (e.g. "20240605") or None
        """
        for entry in self.entries:
            for alias in entry.aliases:
                if alias.is_exact:
                    match = VERSION_PATTERN.match(alias.prefix)
                    if match:
                        return match.group(1)
        return None


@dataclass
class _RawEntry:
    index: int
    line: int
    # (line number, text) pieces in source order
    pieces: List[Tuple[int, str]]

    @property
    def text(self) -> str:
        return "\n".join(text for _, text in self.pieces)


def _split_entries(raw_text: str) -> List[_RawEntry]:
    """Split the file into terminated entries, tracking line numbers."""
    entries: List[_RawEntry] = []
    pieces: List[Tuple[int, str]] = []

    for line_no, line in enumerate(raw_text.splitlines(), start=1):
        if line.lstrip().startswith(COMMENT_MARKER):
            continue

        chunks = line.split(ENTRY_TERMINATOR)
        for position, chunk in enumerate(chunks):
            if chunk.strip():
                pieces.append((line_no, chunk))
            # Every chunk but the last was closed by a terminator
            if position < len(chunks) - 1:
                if pieces:
                    entries.append(_RawEntry(len(entries), pieces[0][0], pieces))
                pieces = []

    if pieces:
        raise UnterminatedEntry(
            f"missing '{ENTRY_TERMINATOR}' before end of input",
            len(entries), pieces[0][0],
        )

    return entries


def _split_top_level(text: str, start: int = 0) -> List[Tuple[int, str]]:
    """
    Split on commas that are not inside an override block.

    Returns (offset, part) pairs; offsets are relative to the entry text,
    with `start` being the offset of `text` itself.
    """
    parts = []
    current = []
    part_start = start
    closer = None

    for position, char in enumerate(text, start=start):
        if closer:
            if char == closer:
                closer = None
        elif char in _OPENERS:
            closer = _OPENERS[char]
        elif char == "~":
            closer = "~"
        elif char == ",":
            parts.append((part_start, "".join(current)))
            current = []
            part_start = position + 1
            continue
        current.append(char)

    parts.append((part_start, "".join(current)))
    return parts


def _line_at(raw: _RawEntry, offset: int) -> int:
    """Physical line number of an offset into the entry text."""
    position = 0
    for line_no, text in raw.pieces:
        # Pieces are joined with a single newline
        if offset <= position + len(text):
            return line_no
        position += len(text) + 1
    return raw.pieces[-1][0]


def _parse_int(value: str, raw: _RawEntry, field_name: str) -> int:
    try:
        number = int(value.strip())
    except ValueError:
        raise MalformedEntry(f"expected an integer, got '{value.strip()}'", raw.index, raw.line, field_name)
    if number <= 0:
        raise MalformedEntry(f"expected a positive integer, got {number}", raw.index, raw.line, field_name)
    return number


def _parse_float(value: str, raw: _RawEntry, field_name: str) -> float:
    try:
        number = float(value.strip())
    except ValueError:
        raise MalformedEntry(f"expected a number, got '{value.strip()}'", raw.index, raw.line, field_name)
    if not math.isfinite(number):
        raise MalformedEntry(f"expected a finite number, got '{value.strip()}'", raw.index, raw.line, field_name)
    return number


def _parse_header(fields: List[str], order: Tuple[str, ...], raw: _RawEntry) -> dict:
    """Decode the eight fixed header fields into CountryEntry keyword arguments."""
    if len(fields) < len(order):
        missing = order[len(fields)]
        raise MalformedEntry(
            f"expected {len(order)} header fields, found {len(fields)}",
            raw.index, raw.line, missing,
        )

    values = dict(zip(order, (f.strip() for f in fields)))

    name = " ".join(values["name"].split())
    if not name:
        raise MalformedEntry("name is empty", raw.index, raw.line, "name")

    continent = values["continent"].upper()
    if continent not in CONTINENTS:
        raise MalformedEntry(
            f"unknown continent '{values['continent']}' (expected one of {', '.join(CONTINENTS)})",
            raw.index, raw.line, "continent",
        )

    primary = values["primary_prefix"].upper()
    waedc = primary.startswith(WAEDC_MARKER)
    if waedc:
        primary = primary[len(WAEDC_MARKER):]
    if not primary:
        raise MalformedEntry("primary prefix is empty", raw.index, raw.line, "primary_prefix")
    if not PREFIX_PATTERN.match(primary):
        raise InvalidPrefixToken(
            f"primary prefix '{values['primary_prefix']}' contains characters outside A-Z, 0-9 and '/'",
            raw.index, raw.line, "primary_prefix",
        )

    return {
        "name": name,
        "continent": continent,
        "cq_zone": _parse_int(values["cq_zone"], raw, "cq_zone"),
        "itu_zone": _parse_int(values["itu_zone"], raw, "itu_zone"),
        "latitude": _parse_float(values["latitude"], raw, "latitude"),
        "longitude": _parse_float(values["longitude"], raw, "longitude"),
        "utc_offset": _parse_float(values["utc_offset"], raw, "utc_offset"),
        "primary_prefix": primary,
        "waedc": waedc,
        "line": raw.line,
    }


def _parse_overrides(text: str, token: str, raw: _RawEntry, line: int) -> FieldOverrides:
    """Decode the override blocks following an alias prefix."""
    values = {}
    position = 0

    def bad(reason: str) -> InvalidPrefixToken:
        return InvalidPrefixToken(f"token '{token}': {reason}", raw.index, line, "aliases")

    for match in OVERRIDE_PATTERN.finditer(text):
        if text[position:match.start()].strip():
            raise bad(f"unexpected text '{text[position:match.start()].strip()}'")
        position = match.end()

        try:
            if match.group("cq") is not None:
                values["cq_zone"] = int(match.group("cq"))
                if match.group("cq_itu") is not None:
                    values["itu_zone"] = int(match.group("cq_itu"))
            elif match.group("itu") is not None:
                values["itu_zone"] = int(match.group("itu"))
            elif match.group("lat") is not None:
                values["latitude"] = float(match.group("lat"))
                values["longitude"] = float(match.group("lon"))
            elif match.group("utc") is not None:
                values["utc_offset"] = float(match.group("utc"))
            else:
                continent = match.group("continent").strip().upper()
                if continent not in CONTINENTS:
                    raise bad(f"unknown continent '{match.group('continent')}'")
                values["continent"] = continent
        except ValueError:
            raise bad(f"malformed override block '{match.group(0)}'")

    if text[position:].strip():
        raise bad(f"unexpected text '{text[position:].strip()}'")

    for zone in ("cq_zone", "itu_zone"):
        if zone in values and values[zone] <= 0:
            raise bad(f"{zone} override must be positive")
    for name in ("latitude", "longitude", "utc_offset"):
        if name in values and not math.isfinite(values[name]):
            raise bad(f"{name} override must be a finite number")

    return FieldOverrides(**values)


def _parse_alias(token: str, raw: _RawEntry, line: int) -> PrefixAlias:
    """Decode one alias token into its tagged variant."""
    match = TOKEN_PATTERN.match(token)
    prefix = match.group("prefix").strip().upper()

    if not prefix:
        raise InvalidPrefixToken(f"token '{token}' has an empty prefix", raw.index, line, "aliases")
    if not PREFIX_PATTERN.match(prefix):
        raise InvalidPrefixToken(
            f"token '{token}' contains characters outside A-Z, 0-9 and '/'",
            raw.index, line, "aliases",
        )

    marker = match.group("marker")
    if marker == EXACT_MARKER:
        kind = AliasKind.EXACT
    elif marker == EXCLUSION_MARKER:
        kind = AliasKind.EXCLUSION
    else:
        kind = AliasKind.PREFIX

    overrides = _parse_overrides(match.group("overrides"), token, raw, line)
    return PrefixAlias(prefix=prefix, kind=kind, overrides=overrides, line=line)


def _parse_entry(raw: _RawEntry) -> CountryEntry:
    text = raw.text

    if ":" in text:
        parts = text.split(":", len(HEADER_FIELDS))
        header = _parse_header(parts[:len(HEADER_FIELDS)], HEADER_FIELDS, raw)
        alias_text = parts[len(HEADER_FIELDS)] if len(parts) > len(HEADER_FIELDS) else ""
        tokens = _split_top_level(alias_text, start=len(text) - len(alias_text))
    else:
        parts = _split_top_level(text)
        header = _parse_header([part for _, part in parts[:len(COMMA_HEADER_FIELDS)]], COMMA_HEADER_FIELDS, raw)
        tokens = parts[len(COMMA_HEADER_FIELDS):]

    aliases = []
    for offset, token in tokens:
        stripped = token.strip()
        if stripped:
            line = _line_at(raw, offset + len(token) - len(token.lstrip()))
            aliases.append(_parse_alias(stripped, raw, line))
    return CountryEntry(aliases=tuple(aliases), **header)


def parse(raw_text: str) -> CountryTable:
    """
    Parse the contents of a country file.

    Parsing is all-or-nothing: the first failing entry aborts the whole
    parse and no partial table is ever returned.

    Args:
        raw_text: Full text of the country file

    Returns:
        CountryTable with the entries in source order

    Raises:
        MalformedEntry: A header field is missing or of the wrong type
        UnterminatedEntry: Text follows the last ';'
        InvalidPrefixToken: A prefix or override block is malformed
        DuplicatePrimaryPrefix: Two entries share a primary prefix
    """
    entries = []
    seen = {}

    for raw in _split_entries(raw_text):
        entry = _parse_entry(raw)
        if entry.primary_prefix in seen:
            raise DuplicatePrimaryPrefix(
                f"primary prefix '{entry.primary_prefix}' already defined by entry {seen[entry.primary_prefix]}",
                raw.index, raw.line, "primary_prefix",
            )
        seen[entry.primary_prefix] = raw.index
        entries.append(entry)

    alias_count = sum(len(entry.aliases) for entry in entries)
    logger.debug(f"Parsed {len(entries)} country entries with {alias_count} aliases")
    return CountryTable(entries=tuple(entries))
