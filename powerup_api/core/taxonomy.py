"""
Discipline / division lookup tables.

Discipline nodes show up anywhere in a drawing-log response (next to the
drawing array, inside each drawing, under group listings), so the extractor
walks the whole payload instead of looking for one particular shape.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from powerup_api.core.normalize import coerce_id, taxonomy_key
from powerup_api.schemas.records import DisciplineMap, DivisionMap, Drawing

logger = logging.getLogger(__name__)

MAX_DEPTH = 5
SKIP_KEYS = frozenset({"permissions", "metadata", "view_options"})

# Divisions without a numeric division number sort after CSI divisions 00-49
_UNNUMBERED_DIVISION_BASE = 1000


def _looks_like_taxonomy_node(node: Mapping[str, Any]) -> bool:
    name = node.get("name")
    return (
        bool(node.get("id"))
        and isinstance(name, str)
        and bool(name)
        and not node.get("drawing_number")
        and not node.get("number")
    )


def find_disciplines(payload: Any, max_depth: int = MAX_DEPTH) -> DisciplineMap:
    """
    Collect {id: {name, index}} entries from an arbitrary JSON value.

    Depth-first, pre-order, with an explicit stack so pathological nesting
    cannot blow the interpreter stack. Nodes deeper than `max_depth` are
    ignored. The sort index of an entry is the position of the array element
    it was found under (0 at the top level).
    """
    found: DisciplineMap = {}
    stack: List[Tuple[Any, int, int]] = [(payload, 0, 0)]

    while stack:
        node, sort_index, depth = stack.pop()
        if depth > max_depth:
            continue

        if isinstance(node, Mapping):
            if _looks_like_taxonomy_node(node):
                found[taxonomy_key(node["id"])] = {"name": node["name"], "index": sort_index}
            children = [
                (value, sort_index, depth + 1)
                for key, value in node.items()
                if key not in SKIP_KEYS
            ]
        elif isinstance(node, list):
            children = [(child, idx, depth + 1) for idx, child in enumerate(node)]
        else:
            continue

        # reversed so the first child is popped first
        stack.extend(reversed(children))

    return found


def disciplines_from_list(items: Iterable[Any]) -> DisciplineMap:
    """Discipline endpoint responses: list position is the display order."""
    found: DisciplineMap = {}
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            continue
        name = item.get("name")
        if item.get("id") and isinstance(name, str) and name:
            found[taxonomy_key(item["id"])] = {"name": name, "index": index}
    return found


def disciplines_from_drawings(
    drawings: Iterable[Drawing],
    known: Optional[DisciplineMap] = None,
) -> DisciplineMap:
    """
    Fill gaps in `known` from drawings that carry both an id and a name.

    New entries get the current map size as their index, so they land after
    anything the payload walk already ordered.
    """
    result: DisciplineMap = dict(known or {})
    for drawing in drawings:
        if drawing.discipline is None or not drawing.discipline_name:
            continue
        key = taxonomy_key(drawing.discipline)
        if key not in result:
            result[key] = {"name": drawing.discipline_name, "index": len(result)}
    return result


def _division_ref(raw: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    for key in ("division", "specification_division"):
        ref = raw.get(key)
        if isinstance(ref, Mapping) and ref.get("id") is not None:
            return ref
    return None


def divisions_from_records(records: Iterable[Any]) -> DivisionMap:
    """
    Build a DivisionMap from the division references on specification records.

    Display name is "<number> - <name>" when the division has a number; the
    numeric division number doubles as the sort index.
    """
    found: DivisionMap = {}
    unnumbered = 0
    for raw in records:
        if not isinstance(raw, Mapping):
            continue
        ref = _division_ref(raw)
        if ref is not None:
            div_id = ref.get("id")
            name = ref.get("name") or ref.get("description") or ref.get("title")
            number = ref.get("number")
        else:
            div_id = raw.get("division_id", raw.get("divisionId"))
            name = raw.get("division_name")
            number = raw.get("division_number")
        if div_id in (None, "") or not (name or number):
            continue

        key = taxonomy_key(div_id)
        if key in found:
            continue

        if number and name:
            display = f"{number} - {name}"
        else:
            display = str(name or number)

        numeric = coerce_id(number)
        if numeric is None:
            numeric = _UNNUMBERED_DIVISION_BASE + unnumbered
            unnumbered += 1
        found[key] = {"displayName": display, "index": numeric}
    return found


def merge_taxonomy(existing: Mapping[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    """Shallow key union; entries from `incoming` replace same-key entries."""
    merged = dict(existing or {})
    merged.update(incoming or {})
    return merged
