"""SQLite access for interval readings used by the data API.

`rest_api.app` opens one :class:`ReadingStore` during application startup and
runs every aggregation through it. Queries bucket readings by local calendar
date/hour using a fixed millisecond offset supplied by the caller.

The connection is shared across FastAPI's worker threads, so every statement
runs under ``ReadingStore.lock``.
"""

import pathlib
import sqlite3
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

READING_COLUMNS: Tuple[str, ...] = (
    "total_heat_1",
    "total_heat_2",
    "total_cool_1",
    "total_cool_2",
    "total_electric_heat",
    "total_fan_only",
    "total_loop_pump",
    "total_dehumidification",
    "runtime_heat_1",
    "runtime_heat_2",
    "runtime_cool_1",
    "runtime_cool_2",
    "runtime_electric_heat",
    "runtime_fan_only",
    "runtime_dehumidification",
    "total_power",
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS energy_readings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    gateway_id TEXT NOT NULL,
    timestamp INTEGER NOT NULL,
    {columns},
    UNIQUE(gateway_id, timestamp)
);
CREATE INDEX IF NOT EXISTS idx_readings_timestamp ON energy_readings(timestamp);
CREATE INDEX IF NOT EXISTS idx_readings_gateway_ts ON energy_readings(gateway_id, timestamp);
""".format(columns=",\n    ".join(f"{name} REAL" for name in READING_COLUMNS))

HEATING_SQL = "COALESCE(total_heat_1, 0) + COALESCE(total_heat_2, 0)"
COOLING_SQL = "COALESCE(total_cool_1, 0) + COALESCE(total_cool_2, 0)"
RUNTIME_SQL = (
    "COALESCE(runtime_heat_1, 0) + COALESCE(runtime_heat_2, 0) + "
    "COALESCE(runtime_cool_1, 0) + COALESCE(runtime_cool_2, 0) + "
    "COALESCE(runtime_electric_heat, 0) + COALESCE(runtime_fan_only, 0)"
)

_LOCAL_TS = "(timestamp + ?) / 1000, 'unixepoch'"
_HOUR_SQL = f"printf('%02d', cast(strftime('%H', {_LOCAL_TS}) as integer))"
BUCKET_SQL: Dict[str, Tuple[str, int]] = {
    # resolution -> (SQL expression, number of offset placeholders)
    "daily": (f"date({_LOCAL_TS})", 1),
    "hourly": (f"date({_LOCAL_TS}) || ' ' || {_HOUR_SQL} || ':00'", 2),
    "15min": (
        f"date({_LOCAL_TS}) || ' ' || {_HOUR_SQL} || ':' || "
        f"printf('%02d', (cast(strftime('%M', {_LOCAL_TS}) as integer) / 15) * 15)",
        3,
    ),
}

SORT_COLUMNS: Tuple[str, ...] = ("timestamp", "gateway_id", "total_power")


class ReadingStore:
    """Thread-safe wrapper around the ``energy_readings`` table."""

    def __init__(self, db_path: pathlib.Path) -> None:
        self.db_path = pathlib.Path(db_path)
        if str(self.db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = threading.Lock()
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row

    def close(self) -> None:
        with self.lock:
            self._conn.close()

    def ensure_schema(self) -> None:
        with self.lock:
            self._conn.executescript(SCHEMA)
            self._conn.commit()

    def insert_readings(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Insert or replace readings keyed by ``(gateway_id, timestamp)``."""
        columns = ("gateway_id", "timestamp", *READING_COLUMNS)
        placeholders = ", ".join("?" for _ in columns)
        sql = (
            f"INSERT OR REPLACE INTO energy_readings ({', '.join(columns)}) "
            f"VALUES ({placeholders})"
        )
        values = [tuple(row.get(name) for name in columns) for row in rows]
        with self.lock:
            self._conn.executemany(sql, values)
            self._conn.commit()
        return len(values)

    # ---------- Queries ----------
    def _all(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        with self.lock:
            cursor = self._conn.execute(sql, tuple(params))
            return [dict(row) for row in cursor.fetchall()]

    def _one(self, sql: str, params: Sequence[Any]) -> Dict[str, Any]:
        rows = self._all(sql, params)
        return rows[0] if rows else {}

    def gateways(self) -> List[str]:
        rows = self._all("SELECT DISTINCT gateway_id FROM energy_readings ORDER BY gateway_id", ())
        return [row["gateway_id"] for row in rows]

    def overview_stats(self, from_ms: int, to_ms: int) -> Dict[str, float]:
        return self._one(
            f"""SELECT
                COALESCE(SUM(total_power), 0) AS total_energy,
                COALESCE(SUM({HEATING_SQL}), 0) AS total_heating,
                COALESCE(SUM({COOLING_SQL}), 0) AS total_cooling,
                COALESCE(SUM({RUNTIME_SQL}), 0) AS total_runtime
            FROM energy_readings
            WHERE timestamp >= ? AND timestamp <= ?""",
            (from_ms, to_ms),
        )

    def bucket_totals(self, resolution: str, offset_ms: int, from_ms: int, to_ms: int) -> List[Dict[str, Any]]:
        """Per ``(bucket, gateway)`` sums, newest bucket first."""
        expr, binds = BUCKET_SQL.get(resolution, BUCKET_SQL["daily"])
        return self._all(
            f"""SELECT
                {expr} AS date,
                gateway_id,
                COALESCE(SUM(total_power), 0) AS total_energy,
                COALESCE(SUM({HEATING_SQL}), 0) AS total_heating,
                COALESCE(SUM({COOLING_SQL}), 0) AS total_cooling,
                COALESCE(SUM({RUNTIME_SQL}), 0) AS total_runtime
            FROM energy_readings
            WHERE timestamp >= ? AND timestamp <= ?
            GROUP BY date, gateway_id
            ORDER BY date DESC, gateway_id""",
            (*([offset_ms] * binds), from_ms, to_ms),
        )

    def daily_summary(self, from_ms: int, to_ms: int) -> Dict[str, float]:
        return self._one(
            f"""SELECT
                COALESCE(SUM(total_power), 0) AS total_energy,
                COALESCE(SUM({HEATING_SQL}), 0) AS total_heating,
                COALESCE(SUM({COOLING_SQL}), 0) AS total_cooling
            FROM energy_readings
            WHERE timestamp >= ? AND timestamp <= ?""",
            (from_ms, to_ms),
        )

    def hourly_breakdown(self, offset_ms: int, from_ms: int, to_ms: int) -> List[Dict[str, Any]]:
        return self._all(
            f"""SELECT
                {_HOUR_SQL} AS hour,
                gateway_id,
                COALESCE(SUM(total_power), 0) AS total_energy,
                COALESCE(SUM({HEATING_SQL}), 0) AS total_heating,
                COALESCE(SUM({COOLING_SQL}), 0) AS total_cooling,
                COALESCE(SUM(total_heat_1), 0) AS heat_1,
                COALESCE(SUM(total_heat_2), 0) AS heat_2,
                COALESCE(SUM(total_cool_1), 0) AS cool_1,
                COALESCE(SUM(total_cool_2), 0) AS cool_2
            FROM energy_readings
            WHERE timestamp >= ? AND timestamp <= ?
            GROUP BY hour, gateway_id
            ORDER BY hour, gateway_id""",
            (offset_ms, from_ms, to_ms),
        )

    def readings_page(
        self,
        *,
        gateway_id: str = "",
        from_ms: Optional[int] = None,
        to_ms: Optional[int] = None,
        sort: str = "timestamp",
        descending: bool = True,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[int, List[Dict[str, Any]]]:
        """Return ``(total_count, rows)`` for one page of raw readings."""
        if sort not in SORT_COLUMNS:
            raise ValueError(f"Unsupported sort column: {sort}")
        conditions: List[str] = []
        params: List[Any] = []
        if gateway_id:
            conditions.append("gateway_id = ?")
            params.append(gateway_id)
        if from_ms is not None:
            conditions.append("timestamp >= ?")
            params.append(from_ms)
        if to_ms is not None:
            conditions.append("timestamp <= ?")
            params.append(to_ms)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        count = self._one(f"SELECT COUNT(*) AS count FROM energy_readings {where}", params)
        direction = "DESC" if descending else "ASC"
        rows = self._all(
            f"SELECT * FROM energy_readings {where} ORDER BY {sort} {direction}, id {direction} LIMIT ? OFFSET ?",
            (*params, limit, offset),
        )
        return int(count.get("count") or 0), rows


__all__ = ["READING_COLUMNS", "ReadingStore", "SORT_COLUMNS"]
