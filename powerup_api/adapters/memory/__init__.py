"""
In-memory storage adapter.
Used by tests and by STORAGE_BACKEND=memory for throwaway sessions.
"""
import copy
from collections import defaultdict
from typing import Any, Dict, List, Optional


class MemoryAdapter:
    """Dict-of-dicts store. Values are deep-copied in and out."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = defaultdict(dict)

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        value = self._data[namespace].get(key)
        return copy.deepcopy(value)

    async def set(self, namespace: str, key: str, value: Any) -> None:
        self._data[namespace][key] = copy.deepcopy(value)

    async def delete(self, namespace: str, key: str) -> None:
        self._data[namespace].pop(key, None)

    async def keys(self, namespace: str) -> List[str]:
        return list(self._data[namespace].keys())

    async def clear(self, namespace: str) -> None:
        self._data[namespace].clear()
