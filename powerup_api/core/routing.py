"""
Decide what a captured payload contains and turn it into normalized records.

Pure: nothing here touches storage. `route_payload` never raises for odd
payload shapes; anything it cannot place comes back as an UNKNOWN result with
no records.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from powerup_api.core.classify import (
    is_commitment,
    is_discipline_item,
    is_drawing,
    is_rfi,
    is_specification,
)
from powerup_api.core.normalize import normalize_many
from powerup_api.core.taxonomy import (
    MAX_DEPTH,
    disciplines_from_drawings,
    disciplines_from_list,
    divisions_from_records,
    find_disciplines,
)
from powerup_api.schemas.records import CapturedRecord, EntityKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceHints:
    commitment: bool = False
    drawing: bool = False
    rfi: bool = False
    discipline: bool = False
    specification: bool = False


@dataclass
class RoutedPayload:
    kind: EntityKind = EntityKind.UNKNOWN
    records: List[CapturedRecord] = field(default_factory=list)
    disciplines: Dict[str, Any] = field(default_factory=dict)
    divisions: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.records or self.disciplines or self.divisions)


def find_record_array(payload: Any) -> List[Any]:
    """
    Locate the record list inside a wrapper.

    Order: the payload itself, `.data`, `.entities`, then the first non-empty
    list-valued top-level property.
    """
    if not payload:
        return []
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, Mapping):
        return []
    for key in ("data", "entities"):
        if isinstance(payload.get(key), list):
            return payload[key]
    for value in payload.values():
        if isinstance(value, list) and value:
            return value
    return []


def source_hints(url: str) -> SourceHints:
    lower = (url or "").lower()
    return SourceHints(
        commitment="commitment" in lower or "contract" in lower,
        drawing="drawing" in lower or "discipline" in lower or "groups" in lower,
        rfi="/rfis" in lower,
        discipline="discipline" in lower,
        specification="specification" in lower or "/specs" in lower,
    )


def route_payload(payload: Any, source: str, max_depth: int = MAX_DEPTH) -> RoutedPayload:
    """
    Pick the dominant record type for a captured payload and normalize it.

    The first record decides together with the URL hints; the matching
    classifier is then applied as a filter over the whole array.
    """
    items = find_record_array(payload)
    if not items:
        logger.debug(f"No record array in payload from {source[:100]}")
        return RoutedPayload()

    hints = source_hints(source)
    first = items[0]

    # Discipline listings have {id, name} items and must win over drawings
    if hints.discipline and is_discipline_item(first):
        disciplines = disciplines_from_list(items)
        if disciplines:
            return RoutedPayload(kind=EntityKind.UNKNOWN, disciplines=disciplines)

    if hints.rfi and is_rfi(first):
        return _records_or_nothing(EntityKind.RFI, normalize_many(EntityKind.RFI, items))

    if hints.commitment and is_commitment(first):
        return _records_or_nothing(EntityKind.COMMITMENT, normalize_many(EntityKind.COMMITMENT, items))

    if hints.specification and is_specification(first):
        return _records_or_nothing(
            EntityKind.SPECIFICATION,
            normalize_many(EntityKind.SPECIFICATION, items),
            divisions=divisions_from_records(items),
        )

    if (hints.drawing or not hints.commitment) and is_drawing(first):
        drawings = normalize_many(EntityKind.DRAWING, items)
        if not drawings:
            return RoutedPayload()
        # Discipline nodes are often siblings of the drawing array, so walk it all
        disciplines = find_disciplines(payload, max_depth=max_depth)
        disciplines = disciplines_from_drawings(drawings, disciplines)
        return RoutedPayload(kind=EntityKind.DRAWING, records=drawings, disciplines=disciplines)

    logger.debug(f"Unrecognised payload from {source[:100]} (hints={hints})")
    return RoutedPayload()


def _records_or_nothing(kind: EntityKind, records: List[CapturedRecord], **taxonomy) -> RoutedPayload:
    if not records:
        return RoutedPayload()
    return RoutedPayload(kind=kind, records=records, **taxonomy)
