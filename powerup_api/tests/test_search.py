"""
Tests for command palette search.

Run with: pytest powerup_api/tests/test_search.py -v
"""
import pytest

from powerup_api.core.search import (
    MODE_ALL,
    MODE_DISCIPLINE,
    MODE_FAVORITES,
    MODE_RECENTS,
    MODE_RFIS,
    ParsedQuery,
    RESULT_LIMIT,
    fuzzy_match,
    group_specifications,
    parse_query,
    resolve_discipline_name,
    search,
)
from powerup_api.core.sorting import natural_key, rfi_number_key
from powerup_api.schemas.records import RFI, UNKNOWN_SORT_INDEX, Drawing, Specification


def _nums(results):
    return [r.data.num if r.type == "drawing" else r.data.number for r in results]


class TestFuzzyMatch:
    """Subsequence match, case-insensitive."""

    def test_empty_pattern_always_matches(self):
        assert fuzzy_match("anything", "")
        assert fuzzy_match("", "")
        assert fuzzy_match(None, "")

    def test_subsequence(self):
        assert fuzzy_match("1-2-A-100", "12a")
        assert fuzzy_match("Mechanical", "MECH")
        assert fuzzy_match("Floor Plan", "fpn")

    def test_order_matters(self):
        assert not fuzzy_match("abc", "cb")
        assert not fuzzy_match("abc", "abcd")
        assert not fuzzy_match(None, "a")


class TestParseQuery:
    def test_modes(self):
        assert parse_query("?beam") == ParsedQuery(MODE_RFIS, "beam")
        assert parse_query("* A-1").term == "a-1"
        assert parse_query("*").mode == MODE_FAVORITES
        assert parse_query("@Mech").mode == MODE_DISCIPLINE
        assert parse_query("").mode == MODE_RECENTS
        assert parse_query(None).mode == MODE_RECENTS
        assert parse_query("   ").mode == MODE_RECENTS
        assert parse_query("", has_recents=False) == ParsedQuery(MODE_ALL, "")
        assert parse_query("A-1").mode == MODE_ALL


class TestSorting:
    def test_natural_key(self):
        assert sorted(["A-10", "A-2", "a-1", "B-1"], key=natural_key) == ["a-1", "A-2", "A-10", "B-1"]

    def test_mixed_shapes_do_not_raise(self):
        assert sorted(["a1", "a", "1a", ""], key=natural_key) == ["", "1a", "a", "a1"]

    def test_rfi_number_key(self):
        numbers = ["12", "3", "draft", "1.2", "20", None]
        assert sorted(numbers, key=rfi_number_key) == ["1.2", "3", "12", "20", None, "draft"]


class TestResolveDisciplineName:
    def test_map_then_flat_then_general(self, discipline_map):
        assert resolve_discipline_name(Drawing(id=1, num="A", discipline=2), discipline_map) == "Mechanical"
        assert resolve_discipline_name(Drawing(id=1, num="A", discipline=99, discipline_name="Civil"), discipline_map) == "Civil"
        assert resolve_discipline_name(Drawing(id=1, num="A"), discipline_map) == "General"


class TestSearch:
    """Tests for search() modes, grouping and the result cap."""

    def test_scenario_all_rfis_sorted(self, drawings, discipline_map, rfis):
        """'?' returns every RFI in one group, numeric order."""
        results = search("?", drawings, discipline_map, set(), [], rfis)
        assert len(results) == 5
        assert [r.data.number for r in results] == ["1", "3", "7", "12", "20"]
        assert {r.group for r in results} == {"RFIs"}

    def test_rfi_filter(self, drawings, discipline_map, rfis):
        results = search("?duct", drawings, discipline_map, set(), [], rfis)
        assert [r.data.id for r in results] == [105]

    def test_scenario_discipline_prefix(self, drawings, discipline_map, rfis):
        """'@mech' only returns drawings in the Mechanical discipline."""
        results = search("@mech", drawings, discipline_map, set(), [], rfis)
        assert _nums(results) == ["M-101", "M-102"]
        assert all(r.discipline == "Mechanical" for r in results)

    def test_grouping_and_natural_order(self, drawings, discipline_map, rfis):
        results = search("plan", drawings, discipline_map, set(), [], rfis)
        assert _nums(results) == ["A-2", "A-10"]
        assert results[0].group == "Architectural"

    def test_combined_groups_then_rfis(self, drawings, discipline_map, rfis):
        """Discipline groups by sort index, unknown disciplines last, RFIs appended."""
        results = search("1", drawings, discipline_map, set(), [], rfis)
        assert _nums(results) == ["A-10", "M-101", "M-102", "E-1", "G-001", "1", "12"]
        assert [r.type for r in results[-2:]] == ["rfi", "rfi"]

    def test_flags(self, drawings, discipline_map, rfis):
        results = search("a-", drawings, discipline_map, {"A-10"}, ["A-2"], rfis)
        flags = {r.data.num: (r.is_favorite, r.is_recent) for r in results if r.type == "drawing"}
        assert flags["A-10"] == (True, False)
        assert flags["A-2"] == (False, True)

    def test_recents_only(self, drawings, discipline_map, rfis):
        """Empty query: recent drawings, discipline-grouped; stale numbers skipped."""
        results = search("", drawings, discipline_map, set(), ["M-101", "X-9", "A-2"], rfis)
        assert _nums(results) == ["A-2", "M-101"]
        assert all(r.is_recent for r in results)

    def test_no_recents_lists_all_drawings(self, drawings, discipline_map, rfis):
        """Empty query without recents: every drawing, discipline-grouped, no RFIs."""
        results = search("", drawings, discipline_map, set(), [], rfis)
        assert _nums(results) == ["A-2", "A-10", "M-101", "M-102", "E-1", "G-001"]
        assert all(r.type == "drawing" for r in results)
        assert not any(r.is_recent for r in results)

    def test_no_recents_respects_cap(self, discipline_map):
        many = [Drawing(id=i, num=f"A-{i}", discipline=1) for i in range(1, 61)]
        results = search("", many, discipline_map, set(), [], [])
        assert len(results) == RESULT_LIMIT

    def test_favorites_only(self, drawings, discipline_map, rfis):
        favorites = {"E-1", "A-10"}
        assert _nums(search("*", drawings, discipline_map, favorites, [], rfis)) == ["A-10", "E-1"]
        assert _nums(search("*lig", drawings, discipline_map, favorites, [], rfis)) == ["E-1"]

    def test_missing_taxonomy_sorts_last(self, rfis):
        drawings = [
            Drawing(id=1, num="Z-1", discipline=77, discipline_name="Zoning"),
            Drawing(id=2, num="B-1", discipline=1),
        ]
        results = search("1", drawings, {"1": {"name": "Architectural", "index": 5}}, set(), [], [])
        assert [r.group for r in results] == ["Architectural", "Zoning"]

    def test_equal_index_ties_alphabetical(self):
        drawings = [Drawing(id=1, num="P-1", discipline=1), Drawing(id=2, num="C-1", discipline=2)]
        discipline_map = {"1": {"name": "Plumbing", "index": 0}, "2": {"name": "Civil", "index": 0}}
        results = search("1", drawings, discipline_map, set(), [], [])
        assert [r.group for r in results] == ["Civil", "Plumbing"]

    @pytest.mark.parametrize("query", ["", "a", "?", "*", "@", "1", "zzz"])
    def test_cap(self, query, discipline_map):
        many = [Drawing(id=i, num=f"A-{i}", title="Plan", discipline=1) for i in range(1, 121)]
        rfis = [RFI(id=1000 + i, number=str(i), subject="Plan", status="open") for i in range(80)]
        recents = [d.num for d in many[:5]]
        favorites = {d.num for d in many}
        results = search(query, many, discipline_map, favorites, recents, rfis)
        assert len(results) <= RESULT_LIMIT

    def test_cap_cuts_later_groups(self, discipline_map):
        """A full first group pushes the RFI group out entirely."""
        many = [Drawing(id=i, num=f"A-{i}", discipline=1) for i in range(1, 61)]
        rfis = [RFI(id=999, number="1", subject="A", status="open")]
        results = search("a", many, discipline_map, set(), [], rfis)
        assert len(results) == RESULT_LIMIT
        assert all(r.type == "drawing" for r in results)
        assert results[-1].data.num == "A-50"


class TestGroupSpecifications:
    def test_grouped_by_division(self):
        specs = [
            Specification(id=1, number="03 31 00", title="Structural Concrete", division_id="3"),
            Specification(id=2, number="01 10 00", title="Summary", division_id="1"),
            Specification(id=3, number="03 30 00", title="Cast-in-Place", division_id="3"),
            Specification(id=4, number="99", title="Orphan"),
        ]
        division_map = {
            "1": {"displayName": "01 - General", "index": 1},
            "3": {"displayName": "03 - Concrete", "index": 3},
        }
        groups = group_specifications(specs, division_map)
        assert [g.display_name for g in groups] == ["01 - General", "03 - Concrete", "Unknown Division"]
        assert [s.number for s in groups[1].specifications] == ["03 30 00", "03 31 00"]
        assert groups[2].sort_index == UNKNOWN_SORT_INDEX

    def test_filter(self):
        specs = [
            Specification(id=1, number="03 31 00", title="Structural Concrete", division_id="3"),
            Specification(id=2, number="01 10 00", title="Summary", division_id="1"),
        ]
        groups = group_specifications(specs, {}, query="concrete")
        assert len(groups) == 1
        assert groups[0].specifications[0].id == 1
