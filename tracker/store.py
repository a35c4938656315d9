import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from tracker import config
from tracker.models import Order, Sale

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


class JsonRecordStore(Generic[R]):
    """A list of records kept as one JSON array on disk.

    Every read loads the whole file and every write replaces it. There is no
    locking, so two writers racing each other lose updates (last write wins).
    """

    def __init__(self, path: Path, model: type[R]) -> None:
        self.path = Path(path)
        self.model = model

    # ── file I/O ──────────────────────────────────────────────────────────────

    def load_all(self) -> list[R]:
        if not self.path.exists():
            return []
        raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        return [self.model.model_validate(item) for item in raw]

    def save_all(self, records: list[R]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump(mode="json", by_alias=True) for r in records]
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self.path)

    # ── reads ─────────────────────────────────────────────────────────────────

    def list_records(self) -> list[R]:
        return self.load_all()

    def get(self, record_id: str) -> Optional[R]:
        return next((r for r in self.load_all() if r.id == record_id), None)

    # ── writes ────────────────────────────────────────────────────────────────

    def _prepare(self, fields: dict) -> dict:
        """Hook for derived fields, applied on create and on every update."""
        return fields

    def create(self, fields: dict) -> R:
        fields = dict(fields)
        fields.pop("id", None)
        if fields.get("created_at") is None:
            fields["created_at"] = datetime.now(timezone.utc)
        record = self.model.model_validate({**self._prepare(fields), "id": str(uuid.uuid4())})

        records = self.load_all()
        records.insert(0, record)  # newest first
        self.save_all(records)
        logger.info("created %s %s", self.model.__name__.lower(), record.id)
        return record

    def update(self, record_id: str, changes: dict) -> Optional[R]:
        records = self.load_all()
        for i, current in enumerate(records):
            if current.id != record_id:
                continue
            changes = {k: v for k, v in changes.items() if k != "id"}
            merged = {**current.model_dump(), **self._prepare(changes)}
            records[i] = self.model.model_validate(merged)
            self.save_all(records)
            logger.info("updated %s %s: %s", self.model.__name__.lower(), record_id, sorted(changes))
            return records[i]
        return None

    def delete(self, record_id: str) -> bool:
        records = self.load_all()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return False
        self.save_all(remaining)
        logger.info("deleted %s %s", self.model.__name__.lower(), record_id)
        return True

    def clear(self) -> None:
        self.save_all([])


class OrderStore(JsonRecordStore[Order]):
    def __init__(self, path: Path) -> None:
        super().__init__(path, Order)

    def _prepare(self, fields: dict) -> dict:
        fields = {k: v for k, v in fields.items() if k != "popmart_link"}
        if fields.get("order_number") is not None:
            fields["popmart_link"] = storefront_link(fields["order_number"])
        return fields


class SaleStore(JsonRecordStore[Sale]):
    def __init__(self, path: Path) -> None:
        super().__init__(path, Sale)


def storefront_link(order_number: str) -> str:
    return config.STOREFRONT_ORDER_URL.format(order_number=order_number)
