from __future__ import annotations

import json
import logging
import re
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Mapping, Optional

from ..config import LeanCloudSettings
from .protocols import Contains, Record, RecordDraft, RecordNotFound, StoreError

logger = logging.getLogger(__name__)

_RESERVED_FIELDS = {"objectId", "createdAt", "updatedAt", "ACL"}

# LeanCloud caps a query page at 1000 rows and defaults to 100.
PAGE_SIZE = 1000


class LeanCloudClient:
    """LeanCloud REST client covering the object store and cloud functions."""

    def __init__(self, settings: LeanCloudSettings) -> None:
        self.base_url = f"{settings.server_url}/1.1"
        self.timeout = settings.timeout_seconds
        self.headers = {
            "X-LC-Id": settings.app_id,
            "X-LC-Key": settings.app_key,
            "Content-Type": "application/json",
            "User-Agent": settings.useragent,
        }

    def save(self, draft: RecordDraft) -> str:
        collection = urllib.parse.quote(draft.collection, safe="")
        if draft.is_insert:
            data = self._request("POST", f"/classes/{collection}", body=draft.fields)
            object_id = data.get("objectId") if isinstance(data, dict) else None
            if not object_id:
                raise StoreError(f"{draft.collection} insert returned no objectId")
            return str(object_id)
        object_id = urllib.parse.quote(draft.object_id, safe="")
        try:
            self._request("PUT", f"/classes/{collection}/{object_id}", body=draft.fields)
        except _NotFound as exc:
            raise RecordNotFound(draft.collection, draft.object_id) from exc
        return draft.object_id

    def fetch(self, collection: str, object_id: str) -> Record:
        path = f"/classes/{urllib.parse.quote(collection, safe='')}/{urllib.parse.quote(object_id, safe='')}"
        try:
            data = self._request("GET", path)
        except _NotFound as exc:
            raise RecordNotFound(collection, object_id) from exc
        # LeanCloud answers an unknown id with an empty object.
        if not isinstance(data, dict) or not data:
            raise RecordNotFound(collection, object_id)
        return self._to_record(data, fallback_id=object_id)

    def list(self, collection: str, predicate: Optional[Contains] = None) -> List[Record]:
        params: Dict[str, str] = {}
        if predicate is not None:
            params["where"] = json.dumps(
                {predicate.field: {"$regex": re.escape(predicate.value), "$options": "i"}}
            )
        base = f"/classes/{urllib.parse.quote(collection, safe='')}"
        records: List[Record] = []
        skip = 0
        while True:
            page = dict(params, limit=str(PAGE_SIZE), skip=str(skip))
            data = self._request("GET", f"{base}?{urllib.parse.urlencode(page)}")
            results = data.get("results") if isinstance(data, dict) else None
            if not isinstance(results, list):
                raise StoreError(f"{collection} query returned no results array")
            records.extend(self._to_record(item) for item in results if isinstance(item, dict))
            # A short page is the last one.
            if len(results) < PAGE_SIZE:
                return records
            skip += len(results)
            logger.debug("Fetching %s rows from offset %d", collection, skip)

    def call(self, name: str, params: Mapping[str, Any]) -> Any:
        path = f"/functions/{urllib.parse.quote(name, safe='')}"
        data = self._request("POST", path, body=dict(params))
        if not isinstance(data, dict):
            return None
        return data.get("result")

    def ping(self) -> None:
        self._request("GET", "/date")

    @staticmethod
    def _to_record(data: Dict[str, Any], fallback_id: str = "") -> Record:
        object_id = str(data.get("objectId") or fallback_id)
        fields = {key: value for key, value in data.items() if key not in _RESERVED_FIELDS}
        return Record(object_id, fields)

    def _request(self, method: str, path: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        payload = json.dumps(body).encode("utf-8") if body is not None else None
        req = urllib.request.Request(url, data=payload, headers=self.headers, method=method)
        logger.debug("LeanCloud %s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            message = _error_message(exc)
            logger.debug("LeanCloud HTTP error %s for %s %s: %s", exc.code, method, url, message)
            if exc.code == 404:
                raise _NotFound(message) from exc
            raise StoreError(message) from exc
        except urllib.error.URLError as exc:
            raise StoreError(f"LeanCloud request failed: {exc.reason}") from exc
        except OSError as exc:
            raise StoreError(f"LeanCloud request failed: {exc}") from exc
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise StoreError(f"LeanCloud returned invalid JSON for {method} {path}") from exc


class _NotFound(StoreError):
    pass


def _error_message(exc: urllib.error.HTTPError) -> str:
    try:
        data = json.loads(exc.read() or b"{}")
    except (ValueError, OSError):
        data = {}
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP {exc.code} {exc.reason}"
