"""
Storage service: keeps every ingested sample in DuckDB.
"""
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

import duckdb

from perfmon_analyzer.dto.context import RunContext
from perfmon_analyzer.errors import FatalError
from perfmon_analyzer.service.db import get_conn
from perfmon_analyzer.service.emitters import BlockEmitter, row_timestamps

logger = logging.getLogger(__name__)

FLUSH_ROWS = 10_000


def _utc(epoch: int) -> datetime:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).replace(tzinfo=None)


class SampleStore(BlockEmitter):
    """Sample store emitter"""

    def __init__(self, db_path: str):
        """
        Args:
            db_path: Database file path (":memory:" for a throwaway store)
        """
        self.db_path = db_path
        self.db: Optional[duckdb.DuckDBPyConnection] = None
        self.buffer: List[Tuple[Any, ...]] = []
        self.inserted = 0

    def open(self, ctx: RunContext):
        try:
            self.db = get_conn(self.db_path)
        except (OSError, duckdb.Error) as e:
            raise FatalError(f"Could not open database '{self.db_path}': {e}")
        # a new run replaces the previous one
        self.db.execute("DELETE FROM samples")
        self.db.execute("DELETE FROM device_stats")

    def write_block(self, ctx: RunContext, timestamp: int):
        """
        Buffer the included rows of every device, zero-scale ones too

        Args:
            ctx: Run context holding the freshly folded block
            timestamp: Block timestamp
        """
        catalog = ctx.catalog
        epochs = row_timestamps(catalog, timestamp)

        for metric_class, metric, device in catalog.iter_devices():
            for row in range(metric_class.start_row, catalog.count):
                raw = float(device.values[row])
                scaled = float(ctx.scaled(device, raw)) if device.active else None
                self.buffer.append((
                    _utc(epochs[row]), epochs[row], metric_class.name,
                    metric.name, device.name, raw, scaled,
                ))
        if len(self.buffer) >= FLUSH_ROWS:
            self._flush()

    def _flush(self):
        if not self.buffer:
            return
        self.db.executemany("""
            INSERT INTO samples (ts, epoch, class_name, metric, device, raw_value, scaled_value)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, self.buffer)
        self.inserted += len(self.buffer)
        self.buffer.clear()

    def write_stats(self, ctx: RunContext):
        """Replace device_stats with the running statistics"""
        self.db.execute("DELETE FROM device_stats")
        rows = [
            (metric_class.name, metric.name, device.name, device.scale,
             device.count, device.max, device.sum)
            for metric_class, metric, device in ctx.catalog.iter_devices()
        ]
        if rows:
            self.db.executemany("""
                INSERT INTO device_stats (class_name, metric, device, scale, n, max, sum)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, rows)

    def close(self, ctx: RunContext):
        if not self.db:
            return
        self._flush()
        self.write_stats(ctx)
        logger.info("Stored %d samples in %s", self.inserted, self.db_path)
        self.db.close()
        self.db = None
