"""
JSON file storage adapter for the Power-Up capture cache.
Simple file-based storage for local use and demos.
Not suitable for several processes writing the same data directory.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..base import StorageError


class JsonAdapter:
    """
    JSON file-based storage adapter.
    Stores each namespace in its own JSON file under the data directory,
    as a {key: value} object.
    Uses atomic file operations for basic consistency.
    """

    def __init__(self, data_dir: str = "data"):
        """
        Initialize the JSON adapter.

        Args:
            data_dir: Directory to store JSON files
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, namespace: str) -> Path:
        return self.data_dir / f"{namespace}.json"

    def _read_file(self, namespace: str) -> Dict[str, Any]:
        """Read and parse a namespace file; a missing file is an empty namespace."""
        filepath = self._path(namespace)
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError("read", namespace, None, e) from e
        if not isinstance(data, dict):
            raise StorageError("read", namespace, None, ValueError(f"{filepath} is not a JSON object"))
        return data

    def _write_file(self, namespace: str, data: Dict[str, Any]) -> None:
        """Write data to a JSON file atomically."""
        filepath = self._path(namespace)
        # Write to temporary file first
        tmp_file = filepath.with_suffix(".tmp")
        try:
            with open(tmp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            # Atomic rename
            tmp_file.replace(filepath)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError("write", namespace, None, e) from e

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        return self._read_file(namespace).get(key)

    async def set(self, namespace: str, key: str, value: Any) -> None:
        data = self._read_file(namespace)
        data[key] = value
        self._write_file(namespace, data)

    async def delete(self, namespace: str, key: str) -> None:
        data = self._read_file(namespace)
        if key in data:
            del data[key]
            self._write_file(namespace, data)

    async def keys(self, namespace: str) -> List[str]:
        return list(self._read_file(namespace).keys())

    async def clear(self, namespace: str) -> None:
        if self._path(namespace).exists():
            self._write_file(namespace, {})
