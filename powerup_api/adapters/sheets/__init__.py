# powerup_api/adapters/sheets/__init__.py
from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

import gspread
from cachetools import TTLCache
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..base import StorageError

logger = logging.getLogger(__name__)

# ========== Sheet schema (HEADERS) ==========

HEADERS = [
    "namespace",
    "key",
    "part",        # 0-based chunk index
    "value",       # JSON text (one chunk)
    "updated_at",
    "generation",  # rows written by one set() share it
]

# Google Sheets caps a cell at 50,000 characters
CHUNK_SIZE = 45_000


def _utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _safe_int(v, default=0):
    try:
        s = str(v).strip()
        if s == "":
            return default
        return int(float(s))
    except (TypeError, ValueError):
        return default


def _sa_client_from_json_or_path(google_sa_json: str) -> gspread.Client:
    """
    Accepts either:
      - absolute/relative path to a service-account JSON file, OR
      - a literal JSON string.
    Returns an authorized gspread Client.
    """
    if not google_sa_json:
        raise ValueError("GOOGLE_SA_JSON is required (path to file or inline JSON).")

    # Try to treat as inline JSON first
    try:
        parsed = json.loads(google_sa_json)
        creds = Credentials.from_service_account_info(
            parsed,
            scopes=["https://www.googleapis.com/auth/spreadsheets"],
        )
        return gspread.authorize(creds)
    except json.JSONDecodeError:
        # Not JSON; treat as file path
        creds = Credentials.from_service_account_file(
            google_sa_json,
            scopes=["https://www.googleapis.com/auth/spreadsheets"],
        )
        return gspread.authorize(creds)


# ========== Retry decorator for Google Sheets API calls ==========
def retry_sheets_api(func):
    """Decorator to retry Sheets API calls with exponential backoff on quota errors."""
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((gspread.exceptions.APIError,)),
        reraise=True,
    )
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


class SheetsAdapter:
    """
    Google Sheets key/value store:
    - One worksheet, one row per (namespace, key, chunk)
    - Large JSON values are split across rows (cell size limit)
    - Short TTL cache on the full sheet read
    - Retry logic for quota errors
    """

    def __init__(
        self,
        google_sa_json: Optional[str] = None,
        spreadsheet_id: Optional[str] = None,
        tab_name: str = "records",
        worksheet: Any = None,
        cache_ttl: float = 5.0,
    ) -> None:
        if worksheet is None:
            if not google_sa_json or not spreadsheet_id:
                raise ValueError("Google Sheets requires GOOGLE_SA_JSON and SHEETS_SPREADSHEET_ID")
            client = _sa_client_from_json_or_path(google_sa_json)
            spreadsheet = client.open_by_key(spreadsheet_id)
            try:
                worksheet = spreadsheet.worksheet(tab_name)
            except gspread.WorksheetNotFound:
                logger.info(f"📝 Creating tab '{tab_name}'...")
                worksheet = spreadsheet.add_worksheet(title=tab_name, rows=1000, cols=len(HEADERS))

        self.ws = worksheet
        self._cache: TTLCache = TTLCache(maxsize=1, ttl=cache_ttl)
        self._ensure_headers()

    # ---------- low level ----------

    def _call(self, operation: str, namespace: str, key: Optional[str], fn, *args, **kwargs):
        try:
            return retry_sheets_api(fn)(*args, **kwargs)
        except gspread.exceptions.APIError as e:
            raise StorageError(operation, namespace, key, e) from e

    def _ensure_headers(self) -> None:
        existing = self._call("init", "*", None, self.ws.row_values, 1)
        if existing != HEADERS:
            range_end = chr(ord("A") + len(HEADERS) - 1)
            self._call("init", "*", None, self.ws.update, range_name=f"A1:{range_end}1", values=[HEADERS])

    def _rows(self, namespace: str) -> List[List[str]]:
        """All data rows (header excluded), cached for a few seconds."""
        rows = self._cache.get("rows")
        if rows is None:
            values = self._call("read", namespace, None, self.ws.get_all_values)
            rows = [list(r) + [""] * (len(HEADERS) - len(r)) for r in values[1:]]
            self._cache["rows"] = rows
        return rows

    def _invalidate(self) -> None:
        self._cache.clear()

    def _matching(self, namespace: str, key: Optional[str]) -> List[Tuple[int, List[str]]]:
        """(sheet row number, row) pairs for a namespace / key."""
        out = []
        for idx, row in enumerate(self._rows(namespace)):
            if row[0] == namespace and (key is None or row[1] == key):
                out.append((idx + 2, row))  # +1 header, +1 one-based
        return out

    def _delete_row_numbers(self, namespace: str, key: Optional[str], row_numbers: List[int]) -> None:
        if not row_numbers:
            return
        try:
            # bottom-up so earlier row numbers stay valid
            for row_number in sorted(row_numbers, reverse=True):
                self._call("delete", namespace, key, self.ws.delete_rows, row_number)
        finally:
            self._invalidate()

    def _delete_rows(self, namespace: str, key: Optional[str]) -> None:
        self._delete_row_numbers(namespace, key, [n for n, _ in self._matching(namespace, key)])

    # ---------- RecordStore ----------

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        matches = self._matching(namespace, key)
        if not matches:
            return None
        # appends land at the bottom, so the last row belongs to the newest write
        newest = matches[-1][1][5]
        parts = sorted((row for _, row in matches if row[5] == newest), key=lambda r: _safe_int(r[2]))
        text = "".join(row[3] for row in parts)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError("get", namespace, key, e) from e

    async def set(self, namespace: str, key: str, value: Any) -> None:
        """
        Append the new value, then drop the rows of earlier writes.

        A failed append leaves the previous value readable; a failed cleanup
        leaves stale rows that get() ignores and the next set() removes.
        """
        text = json.dumps(value, ensure_ascii=False)
        chunks = [text[i:i + CHUNK_SIZE] for i in range(0, len(text), CHUNK_SIZE)] or [""]
        now = _utc_iso()
        generation = uuid.uuid4().hex
        new_rows = [[namespace, key, str(i), chunk, now, generation] for i, chunk in enumerate(chunks)]

        stale = [n for n, _ in self._matching(namespace, key)]
        self._call("set", namespace, key, self.ws.append_rows, new_rows, value_input_option="RAW")
        self._invalidate()
        try:
            self._delete_row_numbers(namespace, key, stale)
        except StorageError as e:
            logger.warning(f"⚠️ Stale rows left for {namespace}/{key}: {e}")

    async def delete(self, namespace: str, key: str) -> None:
        self._delete_rows(namespace, key)

    async def keys(self, namespace: str) -> List[str]:
        seen: Dict[str, None] = {}
        for _, row in self._matching(namespace, None):
            seen.setdefault(row[1], None)
        return list(seen)

    async def clear(self, namespace: str) -> None:
        self._delete_rows(namespace, None)
