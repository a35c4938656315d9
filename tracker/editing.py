"""
Inline cell editing and bulk-selection state for the dashboard tables.

The edit buffer is a two-state machine::

    Idle ──begin──▶ Editing(table, record_id, field, pending)
      ▲                 │
      └──commit/cancel──┘

Only one cell can be under edit at a time. Beginning a new edit while one is
open throws the open one away without issuing an update.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from tracker.engine import TableSpec, as_text
from tracker.money import parse_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Editing:
    table: str
    record_id: str
    field: str
    pending: str


EditState = Union[Idle, Editing]


@dataclass(frozen=True)
class PendingUpdate:
    """A single-field partial update produced by committing an edit."""

    table: str
    record_id: str
    changes: dict


class EditBuffer:
    def __init__(self) -> None:
        self.state: EditState = Idle()

    @property
    def editing(self) -> bool:
        return isinstance(self.state, Editing)

    def begin(self, spec: TableSpec, record, field_key: str) -> Editing:
        name = spec.resolve_field(field_key)
        if name not in spec.editable_fields:
            raise ValueError(f"Field '{field_key}' of {spec.name} cannot be edited inline")
        if isinstance(self.state, Editing):
            logger.debug("discarding open edit of %s.%s", self.state.record_id, self.state.field)
        self.state = Editing(spec.name, record.id, name, as_text(getattr(record, name)))
        return self.state

    def set_pending(self, text: str) -> Editing:
        if not isinstance(self.state, Editing):
            raise ValueError("No cell is being edited")
        self.state = Editing(self.state.table, self.state.record_id, self.state.field, text)
        return self.state

    def commit(self, spec: TableSpec) -> Optional[PendingUpdate]:
        state = self.state
        if not isinstance(state, Editing):
            return None
        value = parse_money(state.pending) if state.field in spec.numeric_fields else state.pending
        self.state = Idle()
        return PendingUpdate(state.table, state.record_id, {state.field: value})

    def cancel(self) -> None:
        self.state = Idle()

    def discard_if_on(self, table: str, record_id: str) -> None:
        """Drop an open edit whose record just went away."""
        if isinstance(self.state, Editing) and (self.state.table, self.state.record_id) == (table, record_id):
            self.state = Idle()


@dataclass
class Selection:
    ids: set[str] = field(default_factory=set)

    def toggle(self, record_id: str, checked: bool) -> None:
        if checked:
            self.ids.add(record_id)
        else:
            self.ids.discard(record_id)

    def select_all(self, filtered_ids: Iterable[str], checked: bool) -> None:
        self.ids = set(filtered_ids) if checked else set()

    def clear(self) -> None:
        self.ids = set()

    def state(self, filtered_ids: Iterable[str]) -> str:
        visible = set(filtered_ids)
        if not self.ids:
            return "none"
        if visible and self.ids == visible:
            return "all"
        return "some"
