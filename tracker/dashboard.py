import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tracker import config
from tracker.editing import EditBuffer, Editing, Selection
from tracker.engine import (
    TABLES,
    SortState,
    TableSpec,
    aggregate_total,
    dashboard_stats,
    filter_records,
    is_history,
    sort_records,
    split_views,
)
from tracker.models import DashboardStats, EditInfo, SortInfo, TableView
from tracker.money import format_money
from tracker.store import JsonRecordStore, OrderStore, SaleStore

logger = logging.getLogger(__name__)

VIEWS = ("active", "history")


class RecordNotFound(ValueError):
    pass


@dataclass
class ViewSession:
    """Search box, status dropdown, sort header and checkboxes of one table."""

    search: str = ""
    status: Optional[str] = None
    sort: SortState = field(default_factory=SortState)
    selection: Selection = field(default_factory=Selection)


class Dashboard:
    def __init__(self, data_dir: Path) -> None:
        data_dir = Path(data_dir)
        self.stores: dict[str, JsonRecordStore] = {
            "orders": OrderStore(data_dir / config.ORDERS_FILE),
            "sales": SaleStore(data_dir / config.SALES_FILE),
        }
        self.sessions: dict[tuple[str, str], ViewSession] = {}
        self.edits = EditBuffer()

    @property
    def orders(self) -> OrderStore:
        return self.stores["orders"]

    @property
    def sales(self) -> SaleStore:
        return self.stores["sales"]

    def reset(self) -> None:
        self.sessions.clear()
        self.edits.cancel()

    # ── lookups ───────────────────────────────────────────────────────────────

    def _spec(self, table: str) -> TableSpec:
        spec = TABLES.get(table)
        if spec is None:
            raise RecordNotFound(f"Table '{table}' not found")
        return spec

    def _session(self, table: str, view: str) -> ViewSession:
        self._spec(table)
        if view not in VIEWS:
            raise RecordNotFound(f"View '{view}' not found")
        return self.sessions.setdefault((table, view), ViewSession())

    def _view_records(self, table: str, view: str) -> list:
        active, history = split_views(self.stores[table].list_records())
        return history if view == "history" else active

    def _filtered(self, table: str, view: str) -> list:
        session = self._session(table, view)
        return filter_records(self._view_records(table, view), self._spec(table), session.search, session.status)

    # ── table rendering ───────────────────────────────────────────────────────

    def view(self, table: str, view: str) -> TableView:
        spec = self._spec(table)
        session = self._session(table, view)
        filtered = self._filtered(table, view)
        rows = sort_records(filtered, session.sort)
        total = aggregate_total(filtered, spec)
        visible_ids = [r.id for r in filtered]

        return TableView(
            table=table,
            view=view,
            search=session.search,
            status=session.status,
            sort=SortInfo(field=session.sort.field, descending=session.sort.descending),
            rows=rows,
            count=len(rows),
            total=total,
            total_display=format_money(total),
            editable=view == "active",
            editing=self.edit_info(),
            selected_ids=sorted(session.selection.ids),
            selection=session.selection.state(visible_ids),
        )

    def set_query(self, table: str, view: str, search: str, status: Optional[str]) -> None:
        spec = self._spec(table)
        session = self._session(table, view)
        if status not in (None, "", "all"):
            valid = [s.value for s in spec.statuses]
            if status not in valid:
                raise ValueError(f"Status must be one of {valid} or 'all'")
        session.search = search or ""
        session.status = None if status in (None, "", "all") else status

    def sort(self, table: str, view: str, field_key: str) -> SortState:
        session = self._session(table, view)
        session.sort = session.sort.toggle(self._spec(table).resolve_field(field_key))
        return session.sort

    # ── inline editing ────────────────────────────────────────────────────────

    def edit_info(self) -> EditInfo:
        state = self.edits.state
        if not isinstance(state, Editing):
            return EditInfo(editing=False)
        return EditInfo(
            editing=True,
            table=state.table,
            record_id=state.record_id,
            field=state.field,
            pending=state.pending,
        )

    def begin_edit(self, table: str, view: str, record_id: str, field_key: str) -> Editing:
        spec = self._spec(table)
        self._session(table, view)
        if view == "history":
            raise ValueError("History rows are read-only")
        record = self.stores[table].get(record_id)
        if record is None:
            raise RecordNotFound(f"{spec.name} record '{record_id}' not found")
        if is_history(record):
            raise ValueError(f"Record '{record_id}' is in the history view")
        return self.edits.begin(spec, record, field_key)

    def set_pending(self, text: str) -> Editing:
        return self.edits.set_pending(text)

    def commit_edit(self):
        state = self.edits.state
        if not isinstance(state, Editing):
            return None
        update = self.edits.commit(self._spec(state.table))
        record = self.stores[update.table].update(update.record_id, update.changes)
        if record is None:
            raise RecordNotFound(f"{update.table} record '{update.record_id}' not found")
        return record

    def cancel_edit(self) -> None:
        self.edits.cancel()

    # ── selection / deletion ──────────────────────────────────────────────────

    def _history_session(self, table: str, view: str) -> ViewSession:
        session = self._session(table, view)
        if view != "history":
            raise ValueError("Bulk selection is only available on history views")
        return session

    def _history_ids(self, table: str) -> set[str]:
        return {r.id for r in self._view_records(table, "history")}

    def toggle_selected(self, table: str, view: str, record_id: str, checked: bool) -> set[str]:
        session = self._history_session(table, view)
        if checked and record_id not in self._history_ids(table):
            raise ValueError(f"Record '{record_id}' is not in the {table} history")
        session.selection.toggle(record_id, checked)
        return session.selection.ids

    def select_all(self, table: str, view: str, checked: bool) -> set[str]:
        session = self._history_session(table, view)
        session.selection.select_all((r.id for r in self._filtered(table, view)), checked)
        return session.selection.ids

    def delete_selected(self, table: str, view: str) -> int:
        session = self._history_session(table, view)
        # a record may have moved back to the active view since it was checked
        targets = session.selection.ids & self._history_ids(table)
        deleted = sum(1 for record_id in targets if self.delete(table, record_id))
        session.selection.clear()
        logger.info("bulk-deleted %d %s", deleted, table)
        return deleted

    def delete(self, table: str, record_id: str) -> bool:
        self._spec(table)
        if not self.stores[table].delete(record_id):
            return False
        self.edits.discard_if_on(table, record_id)
        for (t, _), session in self.sessions.items():
            if t == table:
                session.selection.toggle(record_id, False)
        return True

    # ── header cards ──────────────────────────────────────────────────────────

    def stats(self) -> DashboardStats:
        return dashboard_stats(self.orders.list_records(), self.sales.list_records())


# module-level singleton used by the app
dashboard = Dashboard(config.DATA_DIR)
