"""
Tests for callsign to country resolution.
"""

import pytest

from cty_parser import parse, CountryTable
from cty_lookup import lookup, find_best_match, normalize_callsign, ResolvedCountry


SINGAPORE = "Singapore,AS,28,54,1.3,-103.8,-8.0,9V;"


class TestSingaporeScenario:
    """Test the basic single-entry scenarios."""

    def test_prefix_lookup(self):
        """Test a callsign under the primary prefix."""
        result = lookup(parse(SINGAPORE), "9V1AAA")
        assert result.name == "Singapore"
        assert result.continent == "AS"
        assert result.cq_zone == 28
        assert result.itu_zone == 54
        assert result.matched_prefix == "9V"
        assert result.match_length == 2
        assert result.exact_match is False

    def test_exact_alias_overrides_zones(self):
        """Test an exact alias with a zone override block."""
        table = parse("Singapore,AS,28,54,1.3,-103.8,-8.0,9V,=9V1XYZ(27,53);")

        exact = lookup(table, "9V1XYZ")
        assert exact.cq_zone == 27
        assert exact.itu_zone == 53
        assert exact.exact_match is True
        assert exact.name == "Singapore"

        other = lookup(table, "9V1AAA")
        assert other.cq_zone == 28
        assert other.itu_zone == 54

    def test_exact_alias_does_not_prefix_match(self):
        """Test an exact token only matches the whole callsign."""
        table = parse("Singapore,AS,28,54,1.3,-103.8,-8.0,9V,=9V1XYZ(27,53);")
        assert lookup(table, "9V1XYZA").cq_zone == 28

    def test_own_primary_prefix_returns_defaults(self, sample_table):
        """Test looking up each primary prefix yields the entry defaults."""
        for entry in sample_table:
            result = lookup(sample_table, entry.primary_prefix)
            assert result is not None
            assert result.name == entry.name
            assert result.continent == entry.continent
            assert result.cq_zone == entry.cq_zone
            assert result.itu_zone == entry.itu_zone
            assert result.latitude == entry.latitude
            assert result.longitude == entry.longitude
            assert result.utc_offset == entry.utc_offset


class TestNoMatch:
    """Test callsigns that resolve to nothing."""

    def test_empty_table(self):
        """Test lookup against an empty table."""
        assert lookup(CountryTable(), "9V1AAA") is None
        assert lookup(parse(""), "DL1ABC") is None

    def test_unassigned_prefix(self, sample_table):
        """Test a prefix missing from the table."""
        assert lookup(sample_table, "012") is None

    def test_empty_callsign(self, sample_table):
        """Test empty and whitespace input."""
        assert lookup(sample_table, "") is None
        assert lookup(sample_table, "   ") is None

    def test_too_short(self, sample_table):
        """Test a callsign shorter than every prefix."""
        assert lookup(sample_table, "B") is None


class TestSampleFile:
    """Test lookups against the cty.dat excerpt."""

    def test_prefix_lookup(self, sample_table):
        """Test a plain prefix alias."""
        assert lookup(sample_table, "DL1ABC").name == "Fed. Rep. of Germany"

    def test_alias_lookup(self, sample_table):
        """Test a secondary prefix of an entry."""
        assert lookup(sample_table, "S6ABC").name == "Singapore"

    def test_exact_lookup(self, sample_table):
        """Test an exact callsign owned by another entry than its prefix."""
        assert lookup(sample_table, "BS7H").name == "Scarborough Reef"
        assert lookup(sample_table, "BS7HQ").name == "China"

    def test_case_insensitive(self, sample_table):
        """Test callsigns are normalized to uppercase."""
        result = lookup(sample_table, "  dl1abc ")
        assert result.callsign == "DL1ABC"
        assert result.name == "Fed. Rep. of Germany"

    def test_prefix_override(self, sample_table):
        """Test zone overrides on a prefix alias."""
        result = lookup(sample_table, "VA3XYZ")
        assert result.name == "Canada"
        assert result.cq_zone == 4
        assert result.itu_zone == 4
        assert lookup(sample_table, "VE2XYZ").cq_zone == 5

    def test_full_override(self, sample_table):
        """Test continent, coordinate and offset overrides."""
        result = lookup(sample_table, "VE3EXACT")
        assert result.continent == "EU"
        assert result.latitude == 50.0
        assert result.longitude == -10.0
        assert result.utc_offset == -1.0
        assert result.cq_zone == 5

    def test_waedc_flag(self, sample_table):
        """Test the WAEDC flag is carried to the result."""
        result = lookup(sample_table, "TA1C")
        assert result.name == "European Turkey"
        assert result.waedc is True
        assert lookup(sample_table, "DL1ABC").waedc is False


class TestLongestMatch:
    """Test longest-prefix resolution and tie breaking."""

    def test_longer_prefix_wins(self, sample_table):
        """Test BS7 beats BS for a BS7 callsign."""
        result = lookup(sample_table, "BS7ABC")
        assert result.name == "Scarborough Reef"
        assert result.matched_prefix == "BS7"
        assert lookup(sample_table, "BS1ABC").name == "China"

    def test_longer_prefix_wins_regardless_of_order(self):
        """Test source order does not beat length."""
        text = (
            "Long,EU,2,2,0,0,0,K1A;\n"
            "Short,EU,1,1,0,0,0,K;\n"
        )
        assert lookup(parse(text), "K1ABC").name == "Long"
        assert lookup(parse(text), "K2ABC").name == "Short"

    def test_partial_override_inherits(self, sample_table):
        """Test an alias changing only coordinates keeps everything else."""
        defaults = lookup(sample_table, "9V1AAA")
        moved = lookup(sample_table, "9V1LL")
        assert moved.latitude == 1.5
        assert moved.longitude == -104.0
        for name in ("name", "continent", "cq_zone", "itu_zone", "utc_offset", "primary_prefix"):
            assert getattr(moved, name) == getattr(defaults, name)

    def test_exact_beats_prefix_of_same_length(self):
        """Test an exact token wins a tie with a later plain prefix."""
        text = (
            "Exact,EU,1,1,0,0,0,AA,=K1ABC;\n"
            "Plain,EU,2,2,0,0,0,BB,K1ABC;\n"
        )
        result = lookup(parse(text), "K1ABC")
        assert result.name == "Exact"
        assert result.exact_match is True

    def test_later_definition_wins_tie(self):
        """Test identical aliases in two entries resolve to the later one."""
        text = (
            "First,EU,1,1,0,0,0,AA,XX;\n"
            "Second,EU,2,2,0,0,0,BB,XX;\n"
        )
        assert lookup(parse(text), "XX1A").name == "Second"

    def test_explicit_alias_after_implicit_primary(self):
        """Test an alias repeating the primary prefix supplies its overrides."""
        table = parse("Singapore,AS,28,54,1.3,-103.8,-8.0,9V,9V(27);")
        assert lookup(table, "9V1AAA").cq_zone == 27


class TestExclusion:
    """Test exclusion tokens."""

    TABLE = (
        "Alpha,EU,1,1,0,0,0,AA,AAB,-AAB1;\n"
        "Beta,EU,2,2,0,0,0,BB,AA;\n"
        "Gamma,EU,3,3,0,0,0,ZZ,-ZZ9;\n"
    )

    def test_excluded_falls_through_to_next_best(self):
        """Test an excluded entry yields to a shorter candidate elsewhere."""
        table = parse(self.TABLE)
        result = lookup(table, "AAB1X")
        assert result.name == "Beta"
        assert result.matched_prefix == "AA"

    def test_not_excluded_keeps_entry(self):
        """Test callsigns outside the exclusion still match."""
        table = parse(self.TABLE)
        assert lookup(table, "AAB2X").name == "Alpha"

    def test_excluded_without_alternative(self):
        """Test an exclusion leaving no candidate gives no match."""
        table = parse(self.TABLE)
        assert lookup(table, "ZZ9A") is None
        assert lookup(table, "ZZ1A").name == "Gamma"

    def test_exclusion_is_not_matchable(self):
        """Test an exclusion token never produces a match itself."""
        table = parse("Gamma,EU,3,3,0,0,0,ZZ,-QQ;")
        assert lookup(table, "QQ1A") is None


class TestHelpers:
    """Test resolver helpers."""

    def test_normalize_callsign(self):
        """Test whitespace and case normalization."""
        assert normalize_callsign(" 9v1aaa\n") == "9V1AAA"

    def test_find_best_match(self, sample_table):
        """Test the raw entry and alias are returned."""
        entry, alias = find_best_match(sample_table, "BS7H")
        assert entry.primary_prefix == "BS7"
        assert alias.prefix == "BS7H"
        assert find_best_match(sample_table, "012") is None

    def test_to_dict(self, sample_table):
        """Test serialization includes the match length."""
        data = lookup(sample_table, "9V1AAA").to_dict()
        assert data["name"] == "Singapore"
        assert data["matched_prefix"] == "9V"
        assert data["match_length"] == 2

    def test_lookup_does_not_mutate_table(self, sample_table, sample_cty_text):
        """Test lookups leave the table untouched."""
        before = sample_table.entries
        lookup(sample_table, "9V1XYZ")
        lookup(sample_table, "DL1ABC")
        assert sample_table.entries is before
        assert sample_table == parse(sample_cty_text)

    def test_result_is_frozen(self, sample_table):
        """Test results are immutable values."""
        result = lookup(sample_table, "9V1AAA")
        assert isinstance(result, ResolvedCountry)
        with pytest.raises(AttributeError):
            result.cq_zone = 1
