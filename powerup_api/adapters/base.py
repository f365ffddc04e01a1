"""
Storage adapter interface for the Power-Up capture cache.
Defines the contract that all storage backends must implement.
"""

from typing import Any, List, Optional, Protocol


# Namespaces used by the core. Every value is keyed by project id, except
# "projects" (one row per project) which uses the project id itself.
NAMESPACES = (
    "drawings",
    "rfis",
    "commitments",
    "specifications",
    "discipline_map",
    "division_map",
    "projects",
    "recents",
    "favorites",
    "status_colors",
)


class StorageError(RuntimeError):
    """
    A read or write against the backing store failed.

    Raised by adapters (wrapping the backend's own exception) and propagated
    untouched by the core; the caller decides whether to retry.
    """

    def __init__(self, operation: str, namespace: str, key: Optional[str], cause: Exception):
        self.operation = operation
        self.namespace = namespace
        self.key = key
        self.cause = cause
        super().__init__(f"{operation} {namespace}/{key or '*'} failed: {cause}")


class RecordStore(Protocol):
    """
    Protocol defining the interface for all storage adapters.

    This allows swapping between in-memory, JSON files, SQLite, Google Sheets,
    etc. without changing the cache or search code.

    Values are JSON-compatible (lists / dicts / scalars). Implementations must
    hand back a value equal to what was stored, and must not share mutable
    state with the caller.
    """

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        """
        Fetch the value stored under (namespace, key).

        Returns:
            The stored value, or None if nothing was stored yet.
        """
        ...

    async def set(self, namespace: str, key: str, value: Any) -> None:
        """Overwrite the value stored under (namespace, key)."""
        ...

    async def delete(self, namespace: str, key: str) -> None:
        """Remove (namespace, key). Missing keys are not an error."""
        ...

    async def keys(self, namespace: str) -> List[str]:
        """All keys currently stored in a namespace."""
        ...

    async def clear(self, namespace: str) -> None:
        """Drop every key in a namespace."""
        ...
