"""
Command palette search over the cached drawings and RFIs.

Query modes (first match wins):
    "?..."  RFIs only
    "*..."  favorited drawings only
    "@..."  drawings whose discipline name fuzzy-matches the rest
    ""      recent drawings, or every drawing when there are no recents
    other   drawings + RFIs

Fuzzy matching is a case-insensitive subsequence test, which matches a lot,
so results are grouped by discipline and capped.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from powerup_api.core.normalize import taxonomy_key
from powerup_api.core.sorting import natural_key, rfi_number_key
from powerup_api.schemas.records import (
    RFI,
    UNKNOWN_SORT_INDEX,
    DisciplineMap,
    DivisionMap,
    Drawing,
    Specification,
)
from powerup_api.schemas.search import DrawingHit, RFIHit, SearchItem, SpecificationGroup

RESULT_LIMIT = 50
RFI_GROUP_KEY = "RFIs"
DEFAULT_DISCIPLINE = "General"

MODE_ALL = "all"
MODE_RFIS = "rfis"
MODE_FAVORITES = "favorites"
MODE_DISCIPLINE = "discipline"
MODE_RECENTS = "recents"

_PREFIX_MODES = (
    ("?", MODE_RFIS),
    ("*", MODE_FAVORITES),
    ("@", MODE_DISCIPLINE),
)


@dataclass(frozen=True)
class ParsedQuery:
    mode: str
    term: str


def fuzzy_match(text: Optional[str], pattern: Optional[str]) -> bool:
    """True when `pattern` is a (case-insensitive) subsequence of `text`."""
    if not pattern:
        return True
    if not text:
        return False
    text_lower = text.lower()
    pattern_lower = pattern.lower()
    pos = 0
    for ch in text_lower:
        if ch == pattern_lower[pos]:
            pos += 1
            if pos == len(pattern_lower):
                return True
    return False


def parse_query(query: Optional[str], has_recents: bool = True) -> ParsedQuery:
    """An empty query only means recents when there are some to show."""
    clean = (query or "").lower().strip()
    for prefix, mode in _PREFIX_MODES:
        if clean.startswith(prefix):
            return ParsedQuery(mode, clean[len(prefix):].strip())
    if not clean and has_recents:
        return ParsedQuery(MODE_RECENTS, "")
    return ParsedQuery(MODE_ALL, clean)


def resolve_discipline_name(drawing: Drawing, discipline_map: Mapping[str, Mapping]) -> str:
    if drawing.discipline is not None:
        entry = discipline_map.get(taxonomy_key(drawing.discipline))
        if entry and entry.get("name"):
            return entry["name"]
    return drawing.discipline_name or DEFAULT_DISCIPLINE


def _discipline_order(discipline_map: Mapping[str, Mapping]) -> Dict[str, int]:
    """Lowest sort index per discipline name."""
    order: Dict[str, int] = {}
    for entry in discipline_map.values():
        name = entry.get("name")
        if not name:
            continue
        index = entry.get("index", UNKNOWN_SORT_INDEX)
        if name not in order or index < order[name]:
            order[name] = index
    return order


def _drawing_matches(drawing: Drawing, discipline: str, term: str) -> bool:
    return (
        fuzzy_match(drawing.num, term)
        or fuzzy_match(drawing.title, term)
        or fuzzy_match(discipline, term)
    )


def _rfi_matches(rfi: RFI, term: str) -> bool:
    return fuzzy_match(rfi.number, term) or fuzzy_match(rfi.subject, term)


def _group_drawings(
    hits: Iterable[DrawingHit],
    discipline_map: Mapping[str, Mapping],
) -> List[Tuple[str, List[DrawingHit]]]:
    grouped: Dict[str, List[DrawingHit]] = {}
    for hit in hits:
        grouped.setdefault(hit.group, []).append(hit)

    order = _discipline_order(discipline_map)
    groups = sorted(
        grouped.items(),
        key=lambda item: (order.get(item[0], UNKNOWN_SORT_INDEX), item[0].lower(), item[0]),
    )
    return [(name, sorted(items, key=lambda h: natural_key(h.data.num))) for name, items in groups]


def _flatten(groups: Sequence[Tuple[str, Sequence[SearchItem]]], limit: int) -> List[SearchItem]:
    """Fill group by group; a later group may be cut off entirely."""
    flattened: List[SearchItem] = []
    for _, items in groups:
        flattened.extend(items)
        if len(flattened) >= limit:
            break
    return flattened[:limit]


def search(
    query: Optional[str],
    drawings: Sequence[Drawing],
    discipline_map: DisciplineMap,
    favorites: Set[str],
    recents: Sequence[str],
    rfis: Sequence[RFI],
    limit: int = RESULT_LIMIT,
) -> List[SearchItem]:
    """
    Ranked, grouped, capped results for one command palette query.

    Read-only; the inputs are whatever snapshot the caller loaded, and
    disciplines missing from the map simply sort last.
    """
    parsed = parse_query(query, has_recents=bool(recents))
    term = parsed.term
    recent_set = set(recents)

    def drawing_hit(d: Drawing) -> DrawingHit:
        discipline = resolve_discipline_name(d, discipline_map)
        return DrawingHit(
            group=discipline,
            data=d,
            discipline=discipline,
            is_favorite=d.num in favorites,
            is_recent=d.num in recent_set,
        )

    if parsed.mode == MODE_RFIS:
        matched = [r for r in rfis if _rfi_matches(r, term)]
        matched.sort(key=lambda r: rfi_number_key(r.number))
        return [RFIHit(group=RFI_GROUP_KEY, data=r) for r in matched[:limit]]

    if parsed.mode == MODE_RECENTS:
        by_num: Dict[str, Drawing] = {}
        for d in drawings:
            by_num.setdefault(d.num, d)
        hits = [drawing_hit(by_num[num]) for num in recents if num in by_num]
        return _flatten(_group_drawings(hits, discipline_map), limit)

    if parsed.mode == MODE_FAVORITES:
        hits = [drawing_hit(d) for d in drawings if d.num in favorites]
        hits = [h for h in hits if _drawing_matches(h.data, h.discipline, term)]
        return _flatten(_group_drawings(hits, discipline_map), limit)

    if parsed.mode == MODE_DISCIPLINE:
        hits = [drawing_hit(d) for d in drawings]
        hits = [h for h in hits if fuzzy_match(h.discipline, term)]
        return _flatten(_group_drawings(hits, discipline_map), limit)

    hits = [drawing_hit(d) for d in drawings]
    hits = [h for h in hits if _drawing_matches(h.data, h.discipline, term)]
    groups: List[Tuple[str, Sequence[SearchItem]]] = list(_group_drawings(hits, discipline_map))

    # an empty term lists drawings only
    matched_rfis = []
    if term:
        matched_rfis = sorted((r for r in rfis if _rfi_matches(r, term)), key=lambda r: rfi_number_key(r.number))
    if matched_rfis:
        groups.append((RFI_GROUP_KEY, [RFIHit(group=RFI_GROUP_KEY, data=r) for r in matched_rfis]))

    return _flatten(groups, limit)


def group_specifications(
    specifications: Sequence[Specification],
    division_map: DivisionMap,
    query: str = "",
) -> List[SpecificationGroup]:
    """Specifications tab: substring filter, grouped by division."""
    needle = (query or "").strip().lower()
    if needle:
        specifications = [
            s for s in specifications
            if needle in (s.number or "").lower() or needle in (s.title or "").lower()
        ]

    groups: Dict[str, SpecificationGroup] = {}
    for spec in specifications:
        division_id = spec.division_id or "unknown"
        if division_id not in groups:
            entry = division_map.get(division_id) or {}
            groups[division_id] = SpecificationGroup(
                division_id=division_id,
                display_name=entry.get("displayName") or "Unknown Division",
                sort_index=entry.get("index", UNKNOWN_SORT_INDEX),
                specifications=[],
            )
        groups[division_id].specifications.append(spec)

    ordered = sorted(groups.values(), key=lambda g: (g.sort_index, g.display_name.lower()))
    for group in ordered:
        group.specifications.sort(key=lambda s: natural_key(s.number))
    return ordered
