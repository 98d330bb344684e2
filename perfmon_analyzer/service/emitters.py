"""
Output emitters.

Every emitter is opened once after bootstrap, receives each block right after
it has been folded into the catalog, and is closed at the end of the run.
"""
import logging
import os
import re
import time
from pathlib import Path
from typing import IO, List, Optional, Tuple

import numpy as np
import pandas as pd

from perfmon_analyzer.dto.catalog import Device, MetricClass, SchemaCatalog
from perfmon_analyzer.dto.context import RunContext
from perfmon_analyzer.errors import FatalError

logger = logging.getLogger(__name__)

VALUE_FORMAT = "%.1f"
TIME_COLUMN = "Time"


def format_timestamp(timestamp: int, fmt: str) -> str:
    """strftime in local time; %s is always the epoch seconds"""
    fmt = re.sub(r"%(.)", lambda m: str(timestamp) if m.group(1) == "s" else m.group(0), fmt)
    return time.strftime(fmt, time.localtime(timestamp))


def row_timestamps(catalog: SchemaCatalog, timestamp: int) -> List[int]:
    """Row r of a block stamped T is the sample taken at T + (r + 1) * interval"""
    return [timestamp + (row + 1) * catalog.interval for row in range(catalog.count)]


def open_output(path) -> IO[str]:
    """Open (truncate) an output file; failure is fatal"""
    try:
        return open(path, "w")
    except OSError as e:
        raise FatalError(f"Could not create/open file '{path}': {e}")


def prepare_directory(directory: Path):
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FatalError(f"Could not create/open directory '{directory}': {e}")
    if not directory.is_dir() or not os.access(directory, os.W_OK):
        raise FatalError(f"'{directory}' is not a writable directory")


def format_header(fmt: str, name: str, value: float) -> str:
    try:
        return fmt % (name, value)
    except (TypeError, ValueError) as e:
        raise FatalError(f"Bad multifileheaderformat '{fmt}': {e}")


class BlockEmitter:
    """Base class: no-op hooks"""

    def open(self, ctx: RunContext):
        pass

    def write_block(self, ctx: RunContext, timestamp: int):
        pass

    def close(self, ctx: RunContext):
        pass


class SingleFileEmitter(BlockEmitter):
    """One wide delimited file: a Time column plus one column per active metric/device"""

    def __init__(self, path):
        self.path = path
        self.file: Optional[IO[str]] = None
        self.columns: List[Tuple[str, MetricClass, Device]] = []

    def open(self, ctx: RunContext):
        self.file = open_output(self.path)
        params = ctx.params
        self.columns = ctx.catalog.active_columns(params.metricdeviceseparator)
        header = [TIME_COLUMN] + [name for name, _, _ in self.columns]
        self.file.write(params.singlefiledelimiter.join(header) + "\n")

    def block_frame(self, ctx: RunContext, timestamp: int) -> pd.DataFrame:
        """
        The current block as a DataFrame of output text, one row per time index.

        Rows before a class's start row are empty strings so the columns stay
        aligned. Timestamps are kept exactly as strftime renders them, even
        when they contain the delimiter.
        """
        catalog = ctx.catalog
        fmt = ctx.params.singlefiledateformat
        data = {TIME_COLUMN: [format_timestamp(t, fmt) for t in row_timestamps(catalog, timestamp)]}

        rows = np.arange(catalog.count)
        for idx, (_, metric_class, device) in enumerate(self.columns):
            values = np.char.mod(VALUE_FORMAT, ctx.scaled(device, device.values))
            data[idx] = np.where(rows >= metric_class.start_row, values, "")

        return pd.DataFrame(data)

    def write_block(self, ctx: RunContext, timestamp: int):
        delimiter = ctx.params.singlefiledelimiter
        frame = self.block_frame(ctx, timestamp)
        self.file.writelines(
            delimiter.join(fields) + "\n"
            for fields in frame.itertuples(index=False, name=None)
        )
        self.file.flush()

    def close(self, ctx: RunContext):
        if self.file:
            self.file.close()
            self.file = None


class MultiFileEmitter(BlockEmitter):
    """One narrow file per active metric/device, named after it"""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.outputs: List[Tuple[str, MetricClass, Device, IO[str]]] = []

    def open(self, ctx: RunContext):
        prepare_directory(self.directory)
        params = ctx.params

        for name, metric_class, device in ctx.catalog.active_columns(params.metricdeviceseparator):
            handle = open_output(self.directory / name)
            handle.write(format_header(params.multifileheaderformat, name, device.scale) + "\n")
            self.outputs.append((name, metric_class, device, handle))
        logger.info("Opened %d output files in %s", len(self.outputs), self.directory)

    def write_block(self, ctx: RunContext, timestamp: int):
        params = ctx.params
        delimiter = params.multifiledelimiter
        stamps = [format_timestamp(t, params.multifiledateformat)
                  for t in row_timestamps(ctx.catalog, timestamp)]

        for _, metric_class, device, handle in self.outputs:
            values = ctx.scaled(device, device.values)
            lines = [
                f"{stamps[row]}{delimiter}{VALUE_FORMAT % values[row]}\n"
                for row in range(metric_class.start_row, ctx.catalog.count)
            ]
            handle.writelines(lines)
            handle.flush()

    def close(self, ctx: RunContext):
        for _, _, _, handle in self.outputs:
            handle.close()
        self.outputs = []
