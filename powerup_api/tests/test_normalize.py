"""
Tests for record normalization.

Run with: pytest powerup_api/tests/test_normalize.py -v
"""
from powerup_api.core.normalize import (
    coerce_id,
    division_ref_id,
    normalize_commitment,
    normalize_drawing,
    normalize_many,
    normalize_rfi,
    normalize_specification,
    taxonomy_key,
)
from powerup_api.schemas.records import EntityKind


class TestCoerceId:
    def test_accepts_ints_and_digit_strings(self):
        assert coerce_id(7) == 7
        assert coerce_id("10931276") == 10931276
        assert coerce_id(3.0) == 3

    def test_rejects_everything_else(self):
        assert coerce_id(True) is None
        assert coerce_id("abc") is None
        assert coerce_id(1.5) is None
        assert coerce_id(None) is None


class TestNormalizeDrawing:
    """Tests for drawing normalization."""

    def test_scenario_minimal_drawing(self):
        """{id, number, title} maps onto {id, num, title} and nothing else."""
        drawing = normalize_drawing({"id": 1, "number": "A-101", "title": "Floor Plan"})
        assert drawing.to_record() == {"id": 1, "num": "A-101", "title": "Floor Plan"}

    def test_object_reference_wins(self):
        """discipline: {id, name} is preferred over flat fields."""
        drawing = normalize_drawing({
            "id": 1,
            "number": "M-1",
            "discipline": {"id": 4, "name": "Mechanical"},
            "discipline_name": "Old Name",
        })
        assert drawing.discipline == 4
        assert drawing.discipline_name == "Mechanical"

    def test_flat_fallback(self):
        drawing = normalize_drawing({"id": 1, "drawing_number": "M-1", "discipline": "4", "discipline_name": "Mech"})
        assert drawing.num == "M-1"
        assert drawing.discipline == 4
        assert drawing.discipline_name == "Mech"

    def test_unresolved_fields_are_dropped(self):
        record = normalize_drawing({"id": 1, "number": "A-1"}).to_record()
        assert "discipline" not in record
        assert "discipline_name" not in record


class TestNormalizeRFI:
    def test_defaults(self):
        rfi = normalize_rfi({"id": 3, "number": 0, "subject": "Zero", "status": "draft"})
        assert rfi.number == "0"
        assert rfi.created_at == ""
        assert rfi.assignee is None

    def test_assignee_variants(self):
        assert normalize_rfi({"id": 1, "number": "1", "assignee": {"name": "Kim"}}).assignee == "Kim"
        assert normalize_rfi({"id": 1, "number": "1", "assignee": "Lee"}).assignee == "Lee"
        assert normalize_rfi({"id": 1, "number": "1", "assignee_name": "Sam"}).assignee == "Sam"

    def test_ball_in_court_list(self):
        rfi = normalize_rfi({
            "id": 1,
            "number": "1",
            "ball_in_court": [{"name": "Architect"}, {"name": "Owner"}],
        })
        assert rfi.ball_in_court == "Architect, Owner"

    def test_missing_status(self):
        assert normalize_rfi({"id": 1, "number": "1"}).status == "unknown"


class TestNormalizeCommitment:
    """Amounts: None means unknown, 0 is a real value."""

    def test_zero_amount_kept(self):
        commitment = normalize_commitment({"id": 2, "number": "PO-5", "vendor_name": "Acme", "approved_amount": 0})
        record = commitment.to_record()
        assert record["approved_amount"] == 0.0
        assert "pending_amount" not in record
        assert "draft_amount" not in record

    def test_string_amounts(self):
        commitment = normalize_commitment({"id": 2, "vendor": "Acme", "pending_amount": "1,250.50", "draft_amount": "n/a"})
        assert commitment.pending_amount == 1250.5
        assert commitment.draft_amount is None

    def test_vendor_object(self):
        commitment = normalize_commitment({"id": 2, "title": "Electrical", "vendor": {"id": 9, "name": "Sparky"}})
        assert commitment.vendor == "Sparky"
        assert commitment.vendor_name == "Sparky"


class TestNormalizeSpecification:
    def test_division_reference(self):
        spec = normalize_specification({
            "id": 50,
            "number": "03 30 00",
            "description": "Cast-in-Place Concrete",
            "division": {"id": "0003", "name": "Concrete", "number": "03"},
        })
        assert spec.title == "Cast-in-Place Concrete"
        assert spec.division_id == "3"
        assert spec.to_record()["divisionId"] == "3"

    def test_division_ref_id_flat(self):
        assert division_ref_id({"division_id": 12}) == "12"
        assert division_ref_id({}) is None


class TestTaxonomyKey:
    def test_numeric_ids_are_canonical(self):
        assert taxonomy_key(5) == taxonomy_key("5") == "5"

    def test_other_ids_pass_through(self):
        assert taxonomy_key("abc") == "abc"


class TestNormalizeMany:
    def test_filters_with_classifier(self):
        """Mixed arrays keep only records the classifier accepts."""
        items = [
            {"id": 1, "number": "A-1"},
            {"id": 2, "number": "PO-1", "vendor": "Acme"},
            {"id": 3, "number": "A-2"},
            "junk",
        ]
        drawings = normalize_many(EntityKind.DRAWING, items)
        assert [d.id for d in drawings] == [1, 3]

    def test_skips_non_numeric_ids(self):
        drawings = normalize_many(EntityKind.DRAWING, [{"id": "x-1", "number": "A-1"}])
        assert drawings == []
