from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence

Notify = Callable[[str], None]
Visibility = Callable[[str], bool]


@dataclass(frozen=True)
class HeaderCell:
    """Column header. ``href`` makes it a marked sort link."""

    label: str
    align: str = "left"
    kind: str = "text"
    href: Optional[str] = None
    active: bool = False
    arrow: str = ""

    @property
    def text(self) -> str:
        return f"{self.label}{self.arrow}"


@dataclass
class TableRow:
    """One rendered row plus the raw numbers used for visible-row sums.

    ``cells`` are display strings aligned with the header; cells of ``badge``
    columns hold pre-escaped HTML.
    """

    gateway_id: str
    bucket_key: str
    cells: List[str]
    values: Dict[str, float] = field(default_factory=dict)
    hidden: bool = False
    highlighted: bool = False


@dataclass
class DataTableVM:
    """Table region state: header, rows, busy flag and empty placeholder."""

    region: str
    empty_message: str = "No data"
    headers: List[HeaderCell] = field(default_factory=list)
    rows: List[TableRow] = field(default_factory=list)
    busy: bool = False
    notify: Optional[Notify] = None

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def set_busy(self, busy: bool) -> None:
        if self.busy == busy:
            return
        self.busy = busy
        self._changed()

    def set_headers(self, headers: Sequence[HeaderCell]) -> None:
        self.headers = list(headers)
        self._changed()

    def set_rows(self, rows: Sequence[TableRow]) -> None:
        self.rows = list(rows)
        self._changed()

    def apply_filter(self, is_visible: Visibility) -> None:
        """Toggle each row's hidden flag from the gateway visibility predicate."""
        for row in self.rows:
            row.hidden = not is_visible(row.gateway_id)
        self._changed()

    def visible_sums(self, is_visible: Visibility, fields: Sequence[str]) -> Dict[str, float]:
        sums = {name: 0.0 for name in fields}
        for row in self.rows:
            if not is_visible(row.gateway_id):
                continue
            for name in fields:
                sums[name] += row.values.get(name, 0.0)
        return sums

    # ------------------------------------------------------------------
    # Cross-highlight
    # ------------------------------------------------------------------
    def highlight_bucket(self, key: str) -> Optional[int]:
        """Highlight every row of bucket ``key``; return the first visible match.

        Notifies only when some row's highlight flag flipped.
        """
        first: Optional[int] = None
        flipped = False
        for index, row in enumerate(self.rows):
            match = row.bucket_key == key
            if row.highlighted != match:
                row.highlighted = match
                flipped = True
            if match and not row.hidden and first is None:
                first = index
        if flipped:
            self._changed()
        return first

    def clear_highlight(self) -> None:
        if not any(row.highlighted for row in self.rows):
            return
        for row in self.rows:
            row.highlighted = False
        self._changed()

    def highlighted_keys(self) -> List[str]:
        return sorted({row.bucket_key for row in self.rows if row.highlighted})

    def _changed(self) -> None:
        if self.notify is not None:
            self.notify(self.region)


def row_values(source: object, names: Mapping[str, str]) -> Dict[str, float]:
    """Copy numeric attributes of ``source`` into a row value map (``key -> attr``)."""
    return {key: float(getattr(source, attr, 0.0) or 0.0) for key, attr in names.items()}


__all__ = ["DataTableVM", "HeaderCell", "TableRow", "row_values"]
