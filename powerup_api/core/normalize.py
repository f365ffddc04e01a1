"""
Map classified raw records onto the canonical record models.

Resolution order for reference fields:
    1) object-valued reference (e.g. discipline: {id, name}, vendor: {name})
    2) flat scalar field (discipline_name, vendor_name, ...)
    3) left as None (dropped from the stored form)
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from powerup_api.core.classify import CLASSIFIERS
from powerup_api.schemas.records import (
    RFI,
    CapturedRecord,
    Commitment,
    Drawing,
    EntityKind,
    Specification,
)

logger = logging.getLogger(__name__)


def coerce_id(value: Any) -> Optional[int]:
    """Return an int id, accepting digit strings ("10931276"); None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)
    return None


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    s = str(value)
    return s if s else None


def _ref_name(value: Any) -> Optional[str]:
    """Name out of an object-valued reference."""
    if isinstance(value, Mapping):
        return _text(value.get("name"))
    return None


def _amount(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", "").strip())
        except ValueError:
            return None
    return None


def _names(value: Any) -> Optional[str]:
    """ball_in_court arrives as a string, an object or a list of objects."""
    if isinstance(value, list):
        parts = [_ref_name(v) or _text(v) for v in value]
        joined = ", ".join(p for p in parts if p)
        return joined or None
    return _ref_name(value) or _text(value)


def normalize_drawing(raw: Mapping[str, Any]) -> Drawing:
    discipline = raw.get("discipline")
    if isinstance(discipline, Mapping):
        discipline_id = coerce_id(discipline.get("id"))
        discipline_name = _ref_name(discipline) or _text(raw.get("discipline_name"))
    else:
        discipline_id = coerce_id(discipline)
        discipline_name = _text(raw.get("discipline_name"))

    return Drawing(
        id=coerce_id(raw.get("id")),
        num=str(raw.get("number") or raw.get("drawing_number") or ""),
        title=str(raw.get("title") or ""),
        discipline=discipline_id,
        discipline_name=discipline_name,
    )


def normalize_rfi(raw: Mapping[str, Any]) -> RFI:
    number = raw.get("number")
    if number is None:
        number = raw.get("rfi_number")
    assignee = raw.get("assignee")
    return RFI(
        id=coerce_id(raw.get("id")),
        number="" if number is None else str(number),
        subject=str(raw.get("subject") or raw.get("title") or ""),
        status=str(raw.get("status") or "unknown"),
        created_at=str(raw.get("created_at") or ""),
        due_date=_text(raw.get("due_date")),
        assignee=_ref_name(assignee) or _text(assignee) or _text(raw.get("assignee_name")),
        ball_in_court=_names(raw.get("ball_in_court")),
    )


def normalize_commitment(raw: Mapping[str, Any]) -> Commitment:
    vendor = raw.get("vendor")
    return Commitment(
        id=coerce_id(raw.get("id")),
        number=str(raw.get("number") or ""),
        title=str(raw.get("title") or ""),
        vendor=_ref_name(vendor) or _text(vendor),
        vendor_name=_ref_name(vendor) or _text(raw.get("vendor_name")),
        status=_text(raw.get("status")),
        contract_date=_text(raw.get("contract_date")),
        type=_text(raw.get("type")),
        approved_amount=_amount(raw.get("approved_amount")),
        pending_amount=_amount(raw.get("pending_amount")),
        draft_amount=_amount(raw.get("draft_amount")),
    )


def division_ref_id(raw: Mapping[str, Any]) -> Optional[str]:
    """Division id of a specification record, as a string key."""
    for key in ("division", "specification_division"):
        ref = raw.get(key)
        if isinstance(ref, Mapping) and ref.get("id") is not None:
            return taxonomy_key(ref.get("id"))
    for key in ("divisionId", "division_id"):
        if raw.get(key) not in (None, ""):
            return taxonomy_key(raw.get(key))
    return None


def taxonomy_key(value: Any) -> str:
    """Canonical map key for a taxonomy id (numeric ids lose leading zeros)."""
    numeric = coerce_id(value)
    return str(numeric) if numeric is not None else str(value)


def normalize_specification(raw: Mapping[str, Any]) -> Specification:
    return Specification(
        id=coerce_id(raw.get("id")),
        number=str(raw.get("number") or ""),
        title=str(raw.get("title") or raw.get("description") or ""),
        division_id=division_ref_id(raw),
    )


_NORMALIZERS = {
    EntityKind.DRAWING: normalize_drawing,
    EntityKind.RFI: normalize_rfi,
    EntityKind.COMMITMENT: normalize_commitment,
    EntityKind.SPECIFICATION: normalize_specification,
}


def normalize(kind: EntityKind, raw: Mapping[str, Any]) -> CapturedRecord:
    try:
        normalizer = _NORMALIZERS[kind]
    except KeyError:
        raise ValueError(f"No normalizer for {kind!r}") from None
    return normalizer(raw)


def normalize_many(kind: EntityKind, records: Iterable[Any]) -> List[CapturedRecord]:
    """
    Filter `records` with the classifier for `kind`, then normalize.

    Records whose id cannot be turned into an int are skipped.
    """
    accept = CLASSIFIERS[kind]
    out: List[CapturedRecord] = []
    skipped = 0
    for raw in records:
        if not accept(raw):
            continue
        if coerce_id(raw.get("id")) is None:
            skipped += 1
            continue
        out.append(normalize(kind, raw))
    if skipped:
        logger.debug(f"Skipped {skipped} {kind.value} records with non-numeric ids")
    return out
