"""
Persistence seam. Ingestion and upload only ever see a Repository, so the
same pipeline runs against the REST API or an in-memory store.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional

import requests
from pydantic import BaseModel

from . import settings
from .lifecycle import apply_sellthru, change_status
from .schemas import RECORD_MODELS, InventoryItem, RecordKind, SellthruResult, SellthruUpdate, SNStatus

logger = logging.getLogger(__name__)

# REST collection backing each stored kind. Sellthru updates patch serial-numbers.
COLLECTIONS = {
    RecordKind.INVENTORY: "serial-numbers",
    RecordKind.TOPUP: "topup",
    RecordKind.BUCKET: "bucket",
    RecordKind.DISTRIBUTION: "adisti",
}


class Repository(ABC):
    @abstractmethod
    def list(self, kind: RecordKind) -> list[BaseModel]:
        pass

    @abstractmethod
    def add(self, kind: RecordKind, records: list[BaseModel]) -> None:
        """Bulk insert; one call per upload batch."""
        pass

    @abstractmethod
    def update(self, kind: RecordKind, record_id: str, changes: dict) -> None:
        pass

    @abstractmethod
    def delete(self, kind: RecordKind, record_id: str) -> None:
        pass

    @abstractmethod
    def apply_sellthru(self, updates: list[SellthruUpdate]) -> SellthruResult:
        pass

    def send_batch(self, kind: RecordKind, batch: list[BaseModel]):
        """Batch sender for the uploader: sellthru patches, everything else inserts."""
        if kind == RecordKind.SELLTHRU:
            return self.apply_sellthru(batch)
        return self.add(kind, batch)


class InMemoryRepository(Repository):
    def __init__(self):
        self._store: dict[RecordKind, list[BaseModel]] = {kind: [] for kind in COLLECTIONS}

    def _find(self, kind: RecordKind, record_id: str) -> Optional[BaseModel]:
        for record in self._store[kind]:
            if record.id == record_id:
                return record
        return None

    def list(self, kind: RecordKind) -> list[BaseModel]:
        return list(self._store[RecordKind(kind)])

    def add(self, kind: RecordKind, records: list[BaseModel]) -> None:
        kind = RecordKind(kind)
        for record in records:
            stored = record.model_copy()
            if stored.id is None:
                stored.id = uuid.uuid4().hex
            self._store[kind].append(stored)

    def update(self, kind: RecordKind, record_id: str, changes: dict) -> None:
        kind = RecordKind(kind)
        record = self._find(kind, record_id)
        if record is None:
            raise KeyError(f"{kind.value} record {record_id} not found")
        changes = dict(changes)
        if kind == RecordKind.INVENTORY and "status" in changes:
            change_status(record, SNStatus(changes.pop("status")))
        for field, value in changes.items():
            setattr(record, field, value)

    def delete(self, kind: RecordKind, record_id: str) -> None:
        kind = RecordKind(kind)
        self._store[kind] = [r for r in self._store[kind] if r.id != record_id]

    def apply_sellthru(self, updates: list[SellthruUpdate]) -> SellthruResult:
        return apply_sellthru(self._store[RecordKind.INVENTORY], updates)


class ApiRepository(Repository):
    """Talks to the dashboard's REST API. HTTP errors propagate to the caller."""

    def __init__(
        self,
        base_url: str = settings.API_URL,
        token: Optional[str] = settings.API_TOKEN,
        session: Optional[requests.Session] = None,
        timeout: float = settings.REQUEST_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        response = self.session.request(
            method, f"{self.base_url}/{path}", timeout=self.timeout, **kwargs
        )
        response.raise_for_status()
        return response

    def list(self, kind: RecordKind) -> list[BaseModel]:
        kind = RecordKind(kind)
        payload = self._request("GET", COLLECTIONS[kind]).json()
        # Paginated collections answer {"data": [...], "total": ...}
        rows = payload.get("data", []) if isinstance(payload, dict) else payload
        model = RECORD_MODELS[kind]
        records = []
        for row in rows:
            clean = {k: v for k, v in row.items() if v is not None and k in model.model_fields}
            if "id" in clean:
                # MySQL auto-increment ids arrive as integers
                clean["id"] = str(clean["id"])
            records.append(model(**clean))
        return records

    def add(self, kind: RecordKind, records: list[BaseModel]) -> None:
        kind = RecordKind(kind)
        body = [record.model_dump(mode="json", exclude={"id"}) for record in records]
        self._request("POST", f"{COLLECTIONS[kind]}/bulk", json=body)

    def _current_item(self, record_id: str) -> InventoryItem:
        for item in self.list(RecordKind.INVENTORY):
            if item.id == str(record_id):
                return item
        raise KeyError(f"{RecordKind.INVENTORY.value} record {record_id} not found")

    def update(self, kind: RecordKind, record_id: str, changes: dict) -> None:
        kind = RecordKind(kind)
        changes = dict(changes)
        if kind == RecordKind.INVENTORY and "status" in changes:
            # The server applies any status it is sent; the lifecycle is checked here.
            item = change_status(self._current_item(record_id), SNStatus(changes.pop("status")))
            self._request(
                "PUT", f"{COLLECTIONS[kind]}/{record_id}/status", json={"status": item.status.value}
            )
        if changes:
            # Generic record route, assumed: the dashboard server only serves the status route.
            self._request("PUT", f"{COLLECTIONS[kind]}/{record_id}", json=changes)

    def delete(self, kind: RecordKind, record_id: str) -> None:
        # Assumed route, not served by the dashboard server.
        self._request("DELETE", f"{COLLECTIONS[RecordKind(kind)]}/{record_id}")

    def apply_sellthru(self, updates: list[SellthruUpdate]) -> SellthruResult:
        body = [update.model_dump(mode="json") for update in updates]
        result = SellthruResult(**self._request("POST", "serial-numbers/sellthru", json=body).json())
        logger.info(f"Sellthru batch: {result.success} updated, {result.failed} not found.")
        return result
