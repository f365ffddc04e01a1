"""
Field-presence classifiers for raw records captured from the host application.

The same endpoint can hand back drawings, commitments or RFIs depending on
which optional fields are filled in, so each predicate looks for a positive
signal and rules out the tells of the other types. `classify` is the single
entry point that turns a raw mapping into a tagged result.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from powerup_api.schemas.records import EntityKind

RawRecord = Mapping[str, Any]


@dataclass(frozen=True)
class Classification:
    kind: EntityKind
    raw: Any

    @property
    def is_known(self) -> bool:
        return self.kind is not EntityKind.UNKNOWN


def has_id(raw: Any) -> bool:
    """Every classifier requires a mapping with a truthy `id`."""
    return isinstance(raw, Mapping) and bool(raw.get("id"))


def _contract_type(raw: RawRecord) -> bool:
    record_type = raw.get("type")
    return bool(record_type) and "Contract" in str(record_type)


def _has_commitment_tells(raw: RawRecord) -> bool:
    return bool(
        raw.get("vendor")
        or raw.get("vendor_name")
        or raw.get("contract_date")
        or _contract_type(raw)
    )


def _has_rfi_pair(raw: RawRecord) -> bool:
    return bool(raw.get("subject")) and bool(raw.get("status"))


def _looks_like_rfi(raw: RawRecord) -> bool:
    """subject + status without a sheet title."""
    return _has_rfi_pair(raw) and not raw.get("title")


def is_drawing(raw: Any) -> bool:
    """
    A drawing has a drawing number and none of the commitment tells.

    Untitled records carrying both `subject` and `status` are RFIs that
    happen to have a `number`, so they are excluded here as well. A titled
    drawing-log row stays a drawing even when it has a subject and status.
    """
    if not has_id(raw):
        return False
    if not (raw.get("number") or raw.get("drawing_number")):
        return False
    if _has_commitment_tells(raw):
        return False
    return not _looks_like_rfi(raw)


def is_commitment(raw: Any) -> bool:
    """Needs an info signal AND a vendor/contract context signal."""
    if not has_id(raw):
        return False
    if raw.get("drawing_number"):
        return False
    has_info = raw.get("number") or raw.get("title") or raw.get("contract_date")
    has_context = raw.get("vendor") or raw.get("vendor_name") or _contract_type(raw)
    return bool(has_info and has_context)


def is_rfi(raw: Any) -> bool:
    # `number` only has to be present: 0 is a valid RFI number
    if not has_id(raw):
        return False
    if raw.get("drawing_number") or _has_commitment_tells(raw):
        return False
    return _looks_like_rfi(raw) and "number" in raw


def is_specification(raw: Any) -> bool:
    """
    Specification sections look like drawings (number + title), so this is
    only meaningful once the source URL has already said "specifications".
    """
    if not has_id(raw):
        return False
    if raw.get("drawing_number") or _has_commitment_tells(raw):
        return False
    return bool(raw.get("number") or raw.get("title"))


def is_discipline_item(raw: Any) -> bool:
    """Discipline list entries: id + name, no drawing or commitment fields."""
    if not has_id(raw):
        return False
    name = raw.get("name")
    if not name or not isinstance(name, str):
        return False
    if raw.get("number") or raw.get("drawing_number"):
        return False
    return not (raw.get("vendor") or raw.get("vendor_name") or raw.get("contract_date"))


CLASSIFIERS = {
    EntityKind.DRAWING: is_drawing,
    EntityKind.COMMITMENT: is_commitment,
    EntityKind.RFI: is_rfi,
    EntityKind.SPECIFICATION: is_specification,
}

# Fixed precedence; ambiguity is resolved here, never raised.
_PRECEDENCE = (EntityKind.DRAWING, EntityKind.COMMITMENT, EntityKind.RFI)


def classify(raw: Any, hint: Optional[EntityKind] = None) -> Classification:
    """
    Tag a raw record with its entity kind.

    Specifications are only reported when the caller passes the
    specification hint derived from the source URL.
    """
    if hint is EntityKind.SPECIFICATION and is_specification(raw):
        return Classification(EntityKind.SPECIFICATION, raw)
    for kind in _PRECEDENCE:
        if CLASSIFIERS[kind](raw):
            return Classification(kind, raw)
    return Classification(EntityKind.UNKNOWN, raw)
