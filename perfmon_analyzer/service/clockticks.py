"""
Clockticks: a time-gridline "comb" for plotting tools with no real time axis.

Each tick instant gets two points, one at height 0 and one at a negative height
that grows with the coarseness of the level the instant falls on (midnight
ticks are longer than hourly ticks, and so on).
"""
import logging
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from perfmon_analyzer.dto.context import RunContext
from perfmon_analyzer.service.emitters import BlockEmitter, format_header, format_timestamp, open_output

logger = logging.getLogger(__name__)


class ClockticksConfigError(ValueError):
    """The configured levels cannot be nested"""


def clockticks_levels(values: Sequence[int]) -> List[int]:
    """
    Usable levels: the configured values up to the first non-positive one.

    Raises:
        ClockticksConfigError: if a level does not divide the previous level
            exactly, or if there is no positive level at all
    """
    levels: List[int] = []
    for value in values:
        if value <= 0:
            break
        if levels and levels[-1] % value != 0:
            raise ClockticksConfigError(
                f"clockticks level {len(levels) - 1} ({levels[-1]}) is not a multiple "
                f"of level {len(levels)} ({value})"
            )
        levels.append(value)

    if not levels:
        raise ClockticksConfigError("No valid clockticks levels specified")
    return levels


def seconds_since_midnight(timestamp: int) -> int:
    local = time.localtime(timestamp)
    return 3600 * local.tm_hour + 60 * local.tm_min + local.tm_sec


def generate_clockticks(levels: Sequence[int], first_timestamp: int, last_timestamp: int,
                        block_span: int) -> List[Tuple[int, int]]:
    """
    (instant, height) pairs covering first_timestamp to the end of the last block.

    Instants step through every multiple of the finest level. An instant whose
    local time of day matches no level (possible around DST changes) gets no
    tick.
    """
    levels = clockticks_levels(levels)
    step = min(levels)
    begin = first_timestamp // step * step
    end = ((last_timestamp + block_span) // step + 1) * step

    ticks: List[Tuple[int, int]] = []
    for instant in range(begin, end + 1, step):
        clock = seconds_since_midnight(instant)
        for rank, level in enumerate(levels):
            if clock % level == 0:
                ticks.append((instant, 0))
                ticks.append((instant, 2 * (rank - len(levels))))
                break
    return ticks


class ClockticksEmitter(BlockEmitter):
    """Writes the clockticks file once, when the run is closed"""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.path: Optional[Path] = None
        self.file = None
        self.ticks: List[Tuple[int, int]] = []

    def open(self, ctx: RunContext):
        self.path = self.directory / ctx.params.clockticksfilename
        self.file = open_output(self.path)

    def close(self, ctx: RunContext):
        if self.file is None:
            return
        try:
            self.write_ticks(ctx)
        finally:
            self.file.close()
            self.file = None

    def write_ticks(self, ctx: RunContext):
        catalog = ctx.catalog
        params = ctx.params
        if catalog.first_timestamp is None or catalog.last_timestamp is None:
            logger.info("No blocks read, clockticks skipped")
            return

        try:
            self.ticks = generate_clockticks(
                params.clockticks_levels(),
                catalog.first_timestamp,
                catalog.last_timestamp,
                catalog.block_span,
            )
        except ClockticksConfigError as e:
            ctx.diagnostics.report("clockticks", str(e))
            return

        self.file.write(
            format_header(params.multifileheaderformat, params.clockticksfilename, params.fullscale) + "\n"
        )
        delimiter = params.multifiledelimiter
        for instant, height in self.ticks:
            stamp = format_timestamp(instant, params.multifiledateformat)
            self.file.write(f"{stamp}{delimiter}{height}\n")
