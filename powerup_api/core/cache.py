"""
Per-project, per-type record cache on top of a RecordStore.

Merging is append-only and id-deduplicated: a record captured once is never
updated by a later capture. Taxonomy maps are the exception; they merge by
key union with the newer entry winning.
"""
from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from powerup_api.adapters.base import RecordStore
from powerup_api.core.taxonomy import merge_taxonomy
from powerup_api.schemas.records import (
    RECORD_MODELS,
    CapturedRecord,
    Drawing,
    EntityKind,
    ProjectCache,
)

logger = logging.getLogger(__name__)

TAXONOMY_NAMESPACES = {
    "discipline": "discipline_map",
    "division": "division_map",
}

RecordLike = Union[CapturedRecord, Mapping[str, Any]]


def _as_record(record: RecordLike) -> Dict[str, Any]:
    if isinstance(record, CapturedRecord):
        return record.to_record()
    return dict(record)


def merge_records(existing: Iterable[Mapping[str, Any]], incoming: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Existing records first (stored order), then incoming records whose id is
    not already present, in arrival order.
    """
    merged = [dict(r) for r in existing]
    seen = {r.get("id") for r in merged}
    for record in incoming:
        record_id = record.get("id")
        if record_id in seen:
            continue
        seen.add(record_id)
        merged.append(dict(record))
    return merged


class MergeCache:
    """
    Storage boundary for captured records and taxonomy maps.

    The store is injected; one instance is created per process and shared by
    the capture pipeline, the scans and the search endpoints.
    """

    def __init__(self, store: RecordStore, serialize_writes: bool = True):
        self.store = store
        self.serialize_writes = serialize_writes
        self._locks: Dict[Tuple[str, str], asyncio.Lock] = defaultdict(asyncio.Lock)

    def _lock(self, namespace: str, project_id: str) -> Optional[asyncio.Lock]:
        if not self.serialize_writes:
            return None
        return self._locks[(namespace, project_id)]

    def _drop_locks(self, project_id: str) -> None:
        for lock_key in [k for k in self._locks if k[1] == project_id]:
            # a held lock may still have waiters queued on it
            if not self._locks[lock_key].locked():
                del self._locks[lock_key]

    async def _read_modify_write(self, namespace: str, project_id: str, update):
        lock = self._lock(namespace, project_id)
        if lock is None:
            return await self._apply(namespace, project_id, update)
        async with lock:
            return await self._apply(namespace, project_id, update)

    async def _apply(self, namespace: str, project_id: str, update):
        current = await self.store.get(namespace, project_id)
        updated = update(current)
        await self.store.set(namespace, project_id, updated)
        return updated

    # ========== Entity records ==========

    async def get(self, project_id: str, kind: EntityKind) -> List[Dict[str, Any]]:
        """Stored list for a project/type; [] when nothing was captured yet."""
        if not project_id:
            return []
        data = await self.store.get(kind.namespace, project_id)
        return list(data or [])

    async def save(self, project_id: str, kind: EntityKind, records: Iterable[RecordLike]) -> None:
        """Full overwrite."""
        if not project_id:
            return
        await self.store.set(kind.namespace, project_id, [_as_record(r) for r in records])

    async def merge(self, project_id: str, kind: EntityKind, new_records: Iterable[RecordLike]) -> List[Dict[str, Any]]:
        """Append records whose id is not cached yet; returns the merged list."""
        if not project_id:
            return []
        incoming = [_as_record(r) for r in new_records]

        def update(current):
            return merge_records(current or [], incoming)

        merged = await self._read_modify_write(kind.namespace, project_id, update)
        logger.debug(f"Merged {len(incoming)} {kind.value} records into project {project_id} ({len(merged)} total)")
        return merged

    async def get_models(self, project_id: str, kind: EntityKind) -> List[CapturedRecord]:
        model = RECORD_MODELS[kind]
        return [model.model_validate(r) for r in await self.get(project_id, kind)]

    # ========== Taxonomy ==========

    async def get_taxonomy(self, project_id: str, taxonomy: str) -> Dict[str, Any]:
        if not project_id:
            return {}
        data = await self.store.get(TAXONOMY_NAMESPACES[taxonomy], project_id)
        return dict(data or {})

    async def save_taxonomy(self, project_id: str, taxonomy: str, mapping: Mapping[str, Any]) -> None:
        if not project_id:
            return
        await self.store.set(TAXONOMY_NAMESPACES[taxonomy], project_id, dict(mapping))

    async def merge_taxonomy(self, project_id: str, taxonomy: str, incoming: Mapping[str, Any]) -> Dict[str, Any]:
        """Key union with `incoming` winning on shared keys."""
        if not project_id:
            return {}

        def update(current):
            return merge_taxonomy(current or {}, incoming)

        return await self._read_modify_write(TAXONOMY_NAMESPACES[taxonomy], project_id, update)

    # ========== Snapshots / housekeeping ==========

    async def project_cache(self, project_id: str, project: Optional[Mapping[str, Any]] = None) -> Optional[ProjectCache]:
        """Drawings + discipline map for a project, or None if no drawings yet."""
        drawings = await self.get(project_id, EntityKind.DRAWING)
        if not drawings:
            return None
        discipline_map = await self.get_taxonomy(project_id, "discipline")
        project = project or {}
        return ProjectCache(
            project_id=project_id,
            company_id=project.get("companyId"),
            drawing_area_id=project.get("drawingAreaId"),
            timestamp=project.get("lastAccessed") or 0,
            drawings=[Drawing.model_validate(d) for d in drawings],
            discipline_map=discipline_map,
        )

    async def clear_project(self, project_id: str) -> None:
        """Drop every captured record and taxonomy map for a project."""
        if not project_id:
            return
        for kind in RECORD_MODELS:
            await self.store.delete(kind.namespace, project_id)
        for namespace in TAXONOMY_NAMESPACES.values():
            await self.store.delete(namespace, project_id)
        self._drop_locks(project_id)
        logger.info(f"Cleared cached data for project {project_id}")
