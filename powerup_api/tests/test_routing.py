"""
Tests for payload routing.

Run with: pytest powerup_api/tests/test_routing.py -v
"""
from powerup_api.core.routing import find_record_array, route_payload, source_hints
from powerup_api.schemas.records import EntityKind

DRAWING_LOG = "https://app.procore.com/rest/v1.1/projects/42/drawing_areas/7/drawing_log?page=1"
RFI_URL = "https://app.procore.com/rest/v1.0/projects/42/rfis?page=1"
COMMITMENT_URL = "https://app.procore.com/rest/v1.0/projects/42/commitments"
SPEC_URL = "https://app.procore.com/rest/v1.0/projects/42/specification_sections"
DISCIPLINE_URL = "https://app.procore.com/rest/v1.1/projects/42/drawing_areas/7/drawing_disciplines"


class TestFindRecordArray:
    def test_shapes(self):
        records = [{"id": 1}]
        assert find_record_array(records) is records
        assert find_record_array({"data": records}) is records
        assert find_record_array({"entities": records}) is records
        assert find_record_array({"meta": {}, "items": [], "rows": records}) is records

    def test_nothing_found(self):
        assert find_record_array(None) == []
        assert find_record_array({"data": {"id": 1}}) == []
        assert find_record_array("text") == []
        assert find_record_array({}) == []


class TestSourceHints:
    def test_hints(self):
        assert source_hints(DRAWING_LOG).drawing
        assert source_hints(RFI_URL).rfi
        assert source_hints(COMMITMENT_URL).commitment
        assert source_hints("https://x/work_order_contracts").commitment
        assert source_hints(SPEC_URL).specification
        assert source_hints(DISCIPLINE_URL).discipline
        assert not source_hints("").rfi


class TestRoutePayload:
    """Tests for route_payload dispatch."""

    def test_scenario_drawing_log(self):
        routed = route_payload([{"id": 1, "number": "A-101", "title": "Floor Plan"}], DRAWING_LOG)
        assert routed.kind is EntityKind.DRAWING
        assert [r.to_record() for r in routed.records] == [{"id": 1, "num": "A-101", "title": "Floor Plan"}]

    def test_published_sheet_with_subject(self):
        raw = {"id": 1, "number": "A-101", "title": "Floor Plan", "subject": "Reissue", "status": "Published"}
        routed = route_payload([raw], DRAWING_LOG)
        assert routed.kind is EntityKind.DRAWING
        assert [r.num for r in routed.records] == ["A-101"]

    def test_drawing_taxonomy_from_whole_payload(self):
        """Discipline nodes beside the drawing array are collected."""
        payload = {
            "data": [
                {"id": 1, "number": "A-1", "discipline": {"id": 10, "name": "Architectural"}},
                {"id": 2, "number": "P-1", "discipline": 20, "discipline_name": "Plumbing"},
            ],
            "disciplines": [{"id": 10, "name": "Architectural"}],
        }
        routed = route_payload(payload, DRAWING_LOG)
        assert routed.kind is EntityKind.DRAWING
        assert set(routed.disciplines) == {"10", "20"}
        assert routed.disciplines["20"]["name"] == "Plumbing"

    def test_drawings_without_url_hint(self):
        """No commitment/RFI hint defaults to drawing processing."""
        routed = route_payload({"data": [{"id": 1, "number": "A-1"}]}, "https://app.procore.com/graphql")
        assert routed.kind is EntityKind.DRAWING

    def test_rfis(self):
        payload = [
            {"id": 3, "number": "1", "subject": "Beam", "status": "open"},
            {"id": 4, "number": "2", "subject": "Door", "status": "closed"},
            {"id": 5, "title": "not an rfi"},
        ]
        routed = route_payload(payload, RFI_URL)
        assert routed.kind is EntityKind.RFI
        assert [r.id for r in routed.records] == [3, 4]

    def test_commitments(self):
        payload = {"entities": [{"id": 2, "number": "PO-5", "vendor_name": "Acme", "contract_date": "2024-01-01"}]}
        routed = route_payload(payload, COMMITMENT_URL)
        assert routed.kind is EntityKind.COMMITMENT
        assert routed.records[0].vendor_name == "Acme"

    def test_commitment_url_with_drawing_shape(self):
        """A commitment URL without a commitment record is not treated as drawings."""
        routed = route_payload([{"id": 1, "number": "A-1"}], COMMITMENT_URL)
        assert routed.is_empty

    def test_specifications_with_divisions(self):
        payload = [
            {"id": 50, "number": "03 30 00", "title": "Concrete", "division": {"id": 3, "number": "03", "name": "Concrete"}},
        ]
        routed = route_payload(payload, SPEC_URL)
        assert routed.kind is EntityKind.SPECIFICATION
        assert routed.records[0].division_id == "3"
        assert routed.divisions == {"3": {"displayName": "03 - Concrete", "index": 3}}

    def test_discipline_listing(self):
        payload = [{"id": 10, "name": "Architectural"}, {"id": 20, "name": "Plumbing"}]
        routed = route_payload(payload, DISCIPLINE_URL)
        assert routed.kind is EntityKind.UNKNOWN
        assert routed.records == []
        assert routed.disciplines == {
            "10": {"name": "Architectural", "index": 0},
            "20": {"name": "Plumbing", "index": 1},
        }
        assert not routed.is_empty

    def test_malformed_payloads_are_ignored(self):
        """No records, no errors."""
        for payload in (None, {}, [], "oops", 7, {"data": []}, [None, 1, "x"], [{"no": "id"}]):
            routed = route_payload(payload, DRAWING_LOG)
            assert routed.is_empty
            assert routed.kind is EntityKind.UNKNOWN
