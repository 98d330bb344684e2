# service/ingest.py
"""
Block-at-a-time ingestion.

Each block is one DATE stanza followed by one data stanza per class. Values
are folded into the running statistics and into the per-device buffers, which
hold exactly one block and are overwritten every time, so memory stays bounded
however many blocks and files are read.
"""
from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from perfmon_analyzer.dto.catalog import MetricClass
from perfmon_analyzer.dto.context import RunContext
from perfmon_analyzer.service.bootstrap import DATE_STANZA, NUM_DATE_ARGS
from perfmon_analyzer.service.tokenizer import StanzaReader

logger = logging.getLogger(__name__)


def parse_value(field: str) -> float:
    """Numeric field to float; non-numeric text reads as 0.0"""
    try:
        return float(field)
    except ValueError:
        return 0.0


class IngestionEngine:
    """Folds input blocks into the catalog and hands each block to the emitters"""

    def __init__(self, ctx: RunContext, emitters: Optional[Iterable] = None):
        self.ctx = ctx
        self.emitters: List = list(emitters or [])
        self.blocks_read = 0

    @property
    def catalog(self):
        return self.ctx.catalog

    def ingest(self, reader: StanzaReader) -> Optional[int]:
        """
        Read every block of one input source

        Returns:
            The timestamp of the last block read, or None if there was none
        """
        timestamp = None
        while True:
            block_ts = self.read_block(reader, timestamp)
            if block_ts is None:
                break
            timestamp = block_ts
        return timestamp

    def read_block(self, reader: StanzaReader, previous_ts: Optional[int] = None) -> Optional[int]:
        """Read and emit one block; None when the source is exhausted"""
        if not reader.skip_to_stanza(DATE_STANZA, mandatory=False):
            return None
        fields = reader.read_fields(NUM_DATE_ARGS)
        if fields is None:
            return None

        timestamp = None
        if len(fields) == NUM_DATE_ARGS:
            try:
                timestamp = int(fields[0])
            except ValueError:
                pass
        if timestamp is None:
            self.ctx.diagnostics.report(
                "bad_date", f"Date error: '{' '.join(fields)}'",
                reader.name, reader.line_number,
            )
            # keep the previous block's time
            timestamp = previous_ts if previous_ts is not None else (self.catalog.first_timestamp or 0)

        for metric_class in self.catalog.classes:
            reader.skip_to_stanza(metric_class.stanza, mandatory=False)
            if metric_class.is_vector:
                self.read_vector_stanza(reader, metric_class)
            else:
                self.read_array_stanza(reader, metric_class)

        self.blocks_read += 1
        self.catalog.last_timestamp = timestamp
        for emitter in self.emitters:
            emitter.write_block(self.ctx, timestamp)
        return timestamp

    def read_vector_stanza(self, reader: StanzaReader, metric_class: MetricClass) -> int:
        """One row per time step, one value per metric"""
        count = self.catalog.count
        row = 0

        while True:
            fields = reader.read_fields()
            if not fields:
                break
            if len(fields) != metric_class.num_metrics:
                self._bad_row(reader, metric_class, fields)
            elif row >= count:
                self._overflow(reader, metric_class, row)
            elif row >= metric_class.start_row:
                for metric, field in zip(metric_class.metrics, fields):
                    metric.record(0, row, parse_value(field))
            row += 1

        if row != count:
            self._row_count(reader, metric_class, count, row)
        return row

    def read_array_stanza(self, reader: StanzaReader, metric_class: MetricClass) -> int:
        """One row per device per time step: device name, then one value per metric"""
        count = self.catalog.count
        num_devices = metric_class.metrics[0].num_devices if metric_class.metrics else 0
        row = 0

        while True:
            fields = reader.read_fields()
            if not fields:
                break
            if len(fields) != metric_class.num_metrics + 1:
                self._bad_row(reader, metric_class, fields)
            elif num_devices == 0 or row // num_devices >= count:
                self._overflow(reader, metric_class, row)
            else:
                for metric, field in zip(metric_class.metrics, fields[1:]):
                    time_index = row // metric.num_devices
                    if time_index < metric_class.start_row:
                        # rest of this row is not used
                        break
                    device_index = row % metric.num_devices
                    metric.record(device_index, time_index, parse_value(field))
            row += 1

        expected = count * num_devices
        if row != expected:
            self._row_count(reader, metric_class, expected, row)
        return row

    def _bad_row(self, reader, metric_class, fields):
        kind = "vector" if metric_class.is_vector else "array"
        self.ctx.diagnostics.report(
            "bad_row",
            f"{kind} class {metric_class.name}: bad data starting '{' '.join(fields)}'",
            reader.name, reader.line_number,
        )

    def _overflow(self, reader, metric_class, row):
        self.ctx.diagnostics.report(
            "row_overflow",
            f"class {metric_class.name}: row {row} does not fit in a block of "
            f"{self.catalog.count} rows, not used",
            reader.name, reader.line_number,
        )

    def _row_count(self, reader, metric_class, expected, found):
        kind = "vector" if metric_class.is_vector else "array"
        self.ctx.diagnostics.report(
            "row_count",
            f"{kind} class {metric_class.name}: expected {expected} rows, not {found}",
            reader.name, reader.line_number,
        )
